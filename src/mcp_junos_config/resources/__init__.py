"""Junos configuration resources."""

from .base import JunosResource, describe_options
from .chassis_redundancy import ChassisRedundancyResource
from .eventoptions_policy import EventOptionsPolicyResource
from .security_policy import SecurityPolicyResource
from .security_screen import SecurityScreenResource
from .security_utm_websense_redirect import SecurityUtmWebsenseRedirectResource
from .services_security_intelligence_profile import ServicesSecurityIntelligenceProfileResource
from .snmp import SnmpResource
from .switch_options import SwitchOptionsResource
from .system_radius_server import SystemRadiusServerResource

RESOURCE_TYPES = {
    cls.type_name: cls
    for cls in (
        ChassisRedundancyResource,
        EventOptionsPolicyResource,
        SecurityPolicyResource,
        SecurityScreenResource,
        SecurityUtmWebsenseRedirectResource,
        ServicesSecurityIntelligenceProfileResource,
        SnmpResource,
        SwitchOptionsResource,
        SystemRadiusServerResource,
    )
}


def create_resource(type_name: str) -> JunosResource:
    """Create a resource handler by type name.

    Accepts the name with or without the `junos_` prefix.

    Raises:
        ValueError: If the type is unknown
    """
    if type_name.startswith("junos_"):
        type_name = type_name[len("junos_"):]
    resource_class = RESOURCE_TYPES.get(type_name)
    if resource_class is None:
        raise ValueError(
            f"Unknown resource type: {type_name}. Supported: {', '.join(sorted(RESOURCE_TYPES))}"
        )
    return resource_class()


__all__ = [
    "JunosResource",
    "describe_options",
    "RESOURCE_TYPES",
    "create_resource",
    "ChassisRedundancyResource",
    "EventOptionsPolicyResource",
    "SecurityPolicyResource",
    "SecurityScreenResource",
    "SecurityUtmWebsenseRedirectResource",
    "ServicesSecurityIntelligenceProfileResource",
    "SnmpResource",
    "SwitchOptionsResource",
    "SystemRadiusServerResource",
]
