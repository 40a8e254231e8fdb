"""snmp (static options only)

Communities, views and v3 users are separate objects on the device; this
resource only owns the top-level options and deletes nothing else.
"""
from dataclasses import dataclass, field
from typing import Optional

from ..codec.fields import Block, Flag, Number, Text, Values
from ..codec.schema import OptionSet
from ..codec.validator import RequiredWith
from .base import JunosResource


@dataclass
class HealthMonitor(OptionSet):
    falling_threshold: Optional[int] = None
    idp: bool = False
    idp_falling_threshold: Optional[int] = None
    idp_interval: Optional[int] = None
    idp_rising_threshold: Optional[int] = None
    interval: Optional[int] = None
    rising_threshold: Optional[int] = None

    LAYOUT = (
        Number("falling_threshold", "falling-threshold", between=(0, 100), unset=-1),
        Flag("idp", "idp"),
        Number("idp_falling_threshold", "idp falling-threshold", between=(0, 100), unset=-1,
               implies={"idp": True}),
        Number("idp_interval", "idp interval", between=(1, 2147483647), implies={"idp": True}),
        Number("idp_rising_threshold", "idp rising-threshold", between=(0, 100), unset=-1,
               implies={"idp": True}),
        Number("interval", "interval", between=(1, 2147483647)),
        Number("rising_threshold", "rising-threshold", between=(1, 100)),
    )
    RULES = (
        RequiredWith("idp_falling_threshold", "idp"),
        RequiredWith("idp_interval", "idp"),
        RequiredWith("idp_rising_threshold", "idp"),
    )


@dataclass
class Snmp(OptionSet):
    arp: bool = False
    arp_host_name_resolution: bool = False
    contact: Optional[str] = None
    description: Optional[str] = None
    engine_id: Optional[str] = None
    filter_duplicates: bool = False
    filter_interfaces: list[str] = field(default_factory=list)
    filter_internal_interfaces: bool = False
    health_monitor: Optional[HealthMonitor] = None
    if_count_with_filter_interfaces: bool = False
    interface: list[str] = field(default_factory=list)
    location: Optional[str] = None
    routing_instance_access: bool = False
    routing_instance_access_list: list[str] = field(default_factory=list)

    LAYOUT = (
        Flag("arp", "arp"),
        Flag("arp_host_name_resolution", "arp host-name-resolution", implies={"arp": True}),
        Text("contact", "contact", quoted=True),
        Text("description", "description", quoted=True),
        Text("engine_id", "engine-id"),
        Flag("filter_duplicates", "filter-duplicates"),
        Values("filter_interfaces", "filter-interfaces interfaces", quoted=True),
        Flag("filter_internal_interfaces", "filter-interfaces all-internal-interfaces"),
        Block("health_monitor", "health-monitor", HealthMonitor, bare=True),
        Flag("if_count_with_filter_interfaces", "if-count-with-filter-interfaces"),
        Values("interface", "interface"),
        Text("location", "location", quoted=True),
        Flag("routing_instance_access", "routing-instance-access"),
        Values("routing_instance_access_list", "routing-instance-access access-list", quoted=True,
               implies={"routing_instance_access": True}),
    )
    RULES = (
        RequiredWith("arp_host_name_resolution", "arp"),
        RequiredWith("routing_instance_access_list", "routing_instance_access"),
    )


class SnmpResource(JunosResource):
    type_name = "snmp"
    path = "snmp"
    options = Snmp
    singleton_id = "snmp"
    id_format = "snmp"
    description = "Static SNMP options"
    delete_paths = (
        "arp",
        "contact",
        "description",
        "engine-id",
        "filter-duplicates",
        "filter-interfaces",
        "health-monitor",
        "if-count-with-filter-interfaces",
        "interface",
        "location",
        "routing-instance-access",
    )
