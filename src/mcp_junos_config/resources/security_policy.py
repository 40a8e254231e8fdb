"""security policies from-zone <from> to-zone <to>"""
from dataclasses import dataclass, field
from typing import Optional

from ..codec.fields import Block, Blocks, Flag, Key, Text, Values
from ..codec.schema import OptionSet
from ..codec.validator import AtLeastOneOf, ConflictsWith
from .base import JunosResource

PERMIT = {"then": "permit"}


@dataclass
class SslProxy(OptionSet):
    profile_name: Optional[str] = None

    LAYOUT = (Text("profile_name", "profile-name", quoted=True),)


@dataclass
class UacPolicy(OptionSet):
    captive_portal: Optional[str] = None

    LAYOUT = (Text("captive_portal", "captive-portal", quoted=True),)


@dataclass
class ApplicationServices(OptionSet):
    advanced_anti_malware_policy: Optional[str] = None
    application_firewall_rule_set: Optional[str] = None
    application_traffic_control_rule_set: Optional[str] = None
    gprs_gtp_profile: Optional[str] = None
    gprs_sctp_profile: Optional[str] = None
    idp: bool = False
    idp_policy: Optional[str] = None
    redirect_wx: bool = False
    reverse_redirect_wx: bool = False
    security_intelligence_policy: Optional[str] = None
    ssl_proxy: Optional[SslProxy] = None
    uac_policy: Optional[UacPolicy] = None
    utm_policy: Optional[str] = None

    LAYOUT = (
        Text("advanced_anti_malware_policy", "advanced-anti-malware-policy", quoted=True),
        Text("application_firewall_rule_set", "application-firewall rule-set", quoted=True),
        Text("application_traffic_control_rule_set", "application-traffic-control rule-set",
             quoted=True),
        Text("gprs_gtp_profile", "gprs-gtp-profile", quoted=True),
        Text("gprs_sctp_profile", "gprs-sctp-profile", quoted=True),
        Flag("idp", "idp"),
        Text("idp_policy", "idp-policy", quoted=True),
        Flag("redirect_wx", "redirect-wx"),
        Flag("reverse_redirect_wx", "reverse-redirect-wx"),
        Text("security_intelligence_policy", "security-intelligence-policy", quoted=True),
        Block("ssl_proxy", "ssl-proxy", SslProxy, bare=True),
        Block("uac_policy", "uac-policy", UacPolicy, bare=True),
        Text("utm_policy", "utm-policy", quoted=True),
    )
    RULES = (
        ConflictsWith("redirect_wx", "reverse_redirect_wx",
                      message="conflict redirect_wx and reverse_redirect_wx enabled both"),
    )


@dataclass
class Policy(OptionSet):
    name: Optional[str] = None
    match_source_address: list[str] = field(default_factory=list)
    match_destination_address: list[str] = field(default_factory=list)
    then: Optional[str] = None
    count: bool = False
    log_init: bool = False
    log_close: bool = False
    match_application: list[str] = field(default_factory=list)
    match_destination_address_excluded: bool = False
    match_dynamic_application: list[str] = field(default_factory=list)
    match_source_address_excluded: bool = False
    match_source_end_user_profile: Optional[str] = None
    permit_tunnel_ipsec_vpn: Optional[str] = None
    permit_application_services: Optional[ApplicationServices] = None

    KEYS = (Key("name"),)
    LAYOUT = (
        Values("match_source_address", "match source-address", required=True),
        Values("match_destination_address", "match destination-address", required=True),
        Text("then", "then", choices=("permit", "reject", "deny"), required=True),
        Flag("count", "then count"),
        Flag("log_init", "then log session-init"),
        Flag("log_close", "then log session-close"),
        Values("match_application", "match application"),
        Flag("match_destination_address_excluded", "match destination-address-excluded"),
        Values("match_dynamic_application", "match dynamic-application"),
        Flag("match_source_address_excluded", "match source-address-excluded"),
        Text("match_source_end_user_profile", "match source-end-user-profile", quoted=True),
        Text("permit_tunnel_ipsec_vpn", "then permit tunnel ipsec-vpn", implies=PERMIT),
        Block("permit_application_services", "then permit application-services",
              ApplicationServices, implies=PERMIT),
    )
    RULES = (
        AtLeastOneOf(
            "match_application", "match_dynamic_application",
            message="1 minimum item must be set in 'match_application' or "
                    "'match_dynamic_application' argument in '{name}' policy",
        ),
    )

    def check(self) -> list[str]:
        errors = []
        if self.then is not None and self.then != "permit":
            if self.permit_tunnel_ipsec_vpn:
                errors.append(
                    f"conflict policy then {self.then} and policy permit_tunnel_ipsec_vpn"
                )
            if self.permit_application_services is not None:
                errors.append(
                    f"conflict policy then {self.then} and policy permit_application_services"
                )
        return errors


@dataclass
class SecurityPolicy(OptionSet):
    from_zone: Optional[str] = None
    to_zone: Optional[str] = None
    policy: list[Policy] = field(default_factory=list)

    KEYS = (
        Key("from_zone", "from-zone"),
        Key("to_zone", "to-zone"),
    )
    LAYOUT = (
        Blocks("policy", "policy", Policy, ordered=True, required=True),
    )


class SecurityPolicyResource(JunosResource):
    type_name = "security_policy"
    path = "security policies"
    options = SecurityPolicy
    id_format = "<from_zone>_-_<to_zone>"
    description = "Ordered security policies between two zones"
