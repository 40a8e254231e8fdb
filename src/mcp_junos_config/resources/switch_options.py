"""switch-options (route distinguisher, VRF policies and targets)

The same statements can live under a routing instance; this resource only
covers the global `switch-options` stanza and deletes only what it writes.
"""
from dataclasses import dataclass, field
from typing import Optional

from ..codec.fields import Flag, Text, Values
from ..codec.schema import OptionSet
from .base import JunosResource


@dataclass
class SwitchOptions(OptionSet):
    route_distinguisher: Optional[str] = None
    vrf_export: list[str] = field(default_factory=list)
    vrf_import: list[str] = field(default_factory=list)
    vrf_target: Optional[str] = None
    vrf_target_auto: bool = False
    vrf_target_export: Optional[str] = None
    vrf_target_import: Optional[str] = None
    vtep_source_interface: Optional[str] = None

    LAYOUT = (
        Text("route_distinguisher", "route-distinguisher"),
        Values("vrf_export", "vrf-export", quoted=True, ordered=True),
        Values("vrf_import", "vrf-import", quoted=True, ordered=True),
        Text("vrf_target", "vrf-target"),
        Flag("vrf_target_auto", "vrf-target auto"),
        Text("vrf_target_export", "vrf-target export"),
        Text("vrf_target_import", "vrf-target import"),
        Text("vtep_source_interface", "vtep-source-interface"),
    )


class SwitchOptionsResource(JunosResource):
    type_name = "switch_options"
    path = "switch-options"
    options = SwitchOptions
    singleton_id = "switch_options"
    id_format = "switch_options"
    description = "Global switch-options: route distinguisher, VRF policies and targets"
    delete_paths = (
        "route-distinguisher",
        "vrf-export",
        "vrf-import",
        "vrf-target",
        "vtep-source-interface",
    )
