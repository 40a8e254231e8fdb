"""chassis redundancy"""
from dataclasses import dataclass, field
from typing import Optional

from ..codec.fields import Blocks, Flag, Key, Number, Text
from ..codec.schema import OptionSet
from .base import JunosResource


@dataclass
class RoutingEngine(OptionSet):
    slot: Optional[int] = None
    role: Optional[str] = None

    KEYS = (Key("slot", kind=int, between=(0, 1)),)
    LAYOUT = (
        Text("role", choices=("backup", "disabled", "master"), required=True),
    )


@dataclass
class ChassisRedundancy(OptionSet):
    failover_disk_read_threshold: Optional[int] = None
    failover_disk_write_threshold: Optional[int] = None
    failover_not_on_disk_underperform: bool = False
    failover_on_disk_failure: bool = False
    failover_on_loss_of_keepalives: bool = False
    graceful_switchover: bool = False
    keepalive_time: Optional[int] = None
    routing_engine: list[RoutingEngine] = field(default_factory=list)

    LAYOUT = (
        Number("failover_disk_read_threshold", "failover disk-read-threshold", between=(1000, 10000)),
        Number("failover_disk_write_threshold", "failover disk-write-threshold", between=(1000, 10000)),
        Flag("failover_not_on_disk_underperform", "failover not-on-disk-underperform"),
        Flag("failover_on_disk_failure", "failover on-disk-failure"),
        Flag("failover_on_loss_of_keepalives", "failover on-loss-of-keepalives"),
        Flag("graceful_switchover", "graceful-switchover"),
        Number("keepalive_time", "keepalive-time", between=(2, 10000)),
        Blocks("routing_engine", "routing-engine", RoutingEngine, ordered=False, max_items=2),
    )


class ChassisRedundancyResource(JunosResource):
    type_name = "chassis_redundancy"
    path = "chassis redundancy"
    options = ChassisRedundancy
    singleton_id = "redundancy"
    id_format = "redundancy"
    description = "Static configuration in chassis redundancy block"
