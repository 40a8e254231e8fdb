"""security screen ids-option "<name>"

Screen options are grouped by protocol. Every group must carry at least one
option; detectors such as `icmp flood` may be enabled without a threshold
and are then written as a bare line.
"""
from dataclasses import dataclass, field
from typing import Optional

from ..codec.fields import Block, Blocks, Flag, Key, Number, Text, Values
from ..codec.schema import OptionSet
from .base import JunosResource

SCAN_THRESHOLD = (1000, 1000000)


@dataclass
class Threshold(OptionSet):
    """Detector with an optional `threshold` value."""
    threshold: Optional[int] = None


@dataclass
class IcmpFlood(Threshold):
    LAYOUT = (Number("threshold", "threshold", between=(1, 1000000)),)


@dataclass
class IcmpIpSweep(Threshold):
    LAYOUT = (Number("threshold", "threshold", between=SCAN_THRESHOLD),)


@dataclass
class TcpPortScan(Threshold):
    LAYOUT = (Number("threshold", "threshold", between=SCAN_THRESHOLD),)


@dataclass
class TcpSweep(Threshold):
    LAYOUT = (Number("threshold", "threshold", between=SCAN_THRESHOLD),)


@dataclass
class SynAckAckProxy(Threshold):
    LAYOUT = (Number("threshold", "threshold", between=(1, 250000)),)


@dataclass
class UdpPortScan(Threshold):
    LAYOUT = (Number("threshold", "threshold", between=SCAN_THRESHOLD),)


@dataclass
class UdpSweep(Threshold):
    LAYOUT = (Number("threshold", "threshold", between=SCAN_THRESHOLD),)


# === icmp ===

@dataclass
class Icmp(OptionSet):
    flood: Optional[IcmpFlood] = None
    fragment: bool = False
    icmpv6_malformed: bool = False
    large: bool = False
    ping_death: bool = False
    ip_sweep: Optional[IcmpIpSweep] = None

    LAYOUT = (
        Block("flood", "flood", IcmpFlood, bare=True),
        Flag("fragment", "fragment"),
        Flag("icmpv6_malformed", "icmpv6-malformed"),
        Flag("large", "large"),
        Flag("ping_death", "ping-death"),
        Block("ip_sweep", "ip-sweep", IcmpIpSweep, bare=True),
    )


# === ip ===

@dataclass
class DestinationHeader(OptionSet):
    ilnp_nonce_option: bool = False
    home_address_option: bool = False
    line_identification_option: bool = False
    tunnel_encapsulation_limit_option: bool = False
    user_defined_option_type: list[str] = field(default_factory=list)

    LAYOUT = (
        Flag("ilnp_nonce_option", "ILNP-nonce-option"),
        Flag("home_address_option", "home-address-option"),
        Flag("line_identification_option", "line-identification-option"),
        Flag("tunnel_encapsulation_limit_option", "tunnel-encapsulation-limit-option"),
        Values("user_defined_option_type", "user-defined-option-type", ordered=True),
    )


@dataclass
class HopByHopHeader(OptionSet):
    calipso_option: bool = False
    rpl_option: bool = False
    smf_dpd_option: bool = False
    jumbo_payload_option: bool = False
    quick_start_option: bool = False
    router_alert_option: bool = False
    user_defined_option_type: list[str] = field(default_factory=list)

    LAYOUT = (
        Flag("calipso_option", "CALIPSO-option"),
        Flag("rpl_option", "RPL-option"),
        Flag("smf_dpd_option", "SMF-DPD-option"),
        Flag("jumbo_payload_option", "jumbo-payload-option"),
        Flag("quick_start_option", "quick-start-option"),
        Flag("router_alert_option", "router-alert-option"),
        Values("user_defined_option_type", "user-defined-option-type", ordered=True),
    )


@dataclass
class Ipv6ExtensionHeader(OptionSet):
    ah_header: bool = False
    esp_header: bool = False
    hip_header: bool = False
    destination_header: Optional[DestinationHeader] = None
    fragment_header: bool = False
    hop_by_hop_header: Optional[HopByHopHeader] = None
    mobility_header: bool = False
    no_next_header: bool = False
    routing_header: bool = False
    shim6_header: bool = False
    user_defined_header_type: list[str] = field(default_factory=list)

    LAYOUT = (
        Flag("ah_header", "AH-header"),
        Flag("esp_header", "ESP-header"),
        Flag("hip_header", "HIP-header"),
        Block("destination_header", "destination-header", DestinationHeader, bare=True),
        Flag("fragment_header", "fragment-header"),
        Block("hop_by_hop_header", "hop-by-hop-header", HopByHopHeader, bare=True),
        Flag("mobility_header", "mobility-header"),
        Flag("no_next_header", "no-next-header"),
        Flag("routing_header", "routing-header"),
        Flag("shim6_header", "shim6-header"),
        Values("user_defined_header_type", "user-defined-header-type", ordered=True),
    )


@dataclass
class TunnelGre(OptionSet):
    gre_4in4: bool = False
    gre_4in6: bool = False
    gre_6in4: bool = False
    gre_6in6: bool = False

    LAYOUT = (
        Flag("gre_4in4", "gre-4in4"),
        Flag("gre_4in6", "gre-4in6"),
        Flag("gre_6in4", "gre-6in4"),
        Flag("gre_6in6", "gre-6in6"),
    )


@dataclass
class TunnelIpip(OptionSet):
    ipip_4in4: bool = False
    ipip_4in6: bool = False
    ipip_6in4: bool = False
    ipip_6in6: bool = False
    ipip_6over4: bool = False
    ipip_6to4relay: bool = False
    dslite: bool = False
    isatap: bool = False

    LAYOUT = (
        Flag("ipip_4in4", "ipip-4in4"),
        Flag("ipip_4in6", "ipip-4in6"),
        Flag("ipip_6in4", "ipip-6in4"),
        Flag("ipip_6in6", "ipip-6in6"),
        Flag("ipip_6over4", "ipip-6over4"),
        Flag("ipip_6to4relay", "ipip-6to4relay"),
        Flag("dslite", "dslite"),
        Flag("isatap", "isatap"),
    )


@dataclass
class Tunnel(OptionSet):
    bad_inner_header: bool = False
    gre: Optional[TunnelGre] = None
    ip_in_udp_teredo: bool = False
    ipip: Optional[TunnelIpip] = None

    LAYOUT = (
        Flag("bad_inner_header", "bad-inner-header"),
        Block("gre", "gre", TunnelGre),
        Flag("ip_in_udp_teredo", "ip-in-udp teredo"),
        Block("ipip", "ipip", TunnelIpip),
    )


@dataclass
class Ip(OptionSet):
    bad_option: bool = False
    block_frag: bool = False
    ipv6_extension_header: Optional[Ipv6ExtensionHeader] = None
    ipv6_extension_header_limit: Optional[int] = None
    ipv6_malformed_header: bool = False
    loose_source_route_option: bool = False
    record_route_option: bool = False
    security_option: bool = False
    source_route_option: bool = False
    spoofing: bool = False
    stream_option: bool = False
    strict_source_route_option: bool = False
    tear_drop: bool = False
    timestamp_option: bool = False
    tunnel: Optional[Tunnel] = None
    unknown_protocol: bool = False

    LAYOUT = (
        Flag("bad_option", "bad-option"),
        Flag("block_frag", "block-frag"),
        Block("ipv6_extension_header", "ipv6-extension-header", Ipv6ExtensionHeader),
        Number("ipv6_extension_header_limit", "ipv6-extension-header-limit", between=(0, 32),
               unset=-1),
        Flag("ipv6_malformed_header", "ipv6-malformed-header"),
        Flag("loose_source_route_option", "loose-source-route-option"),
        Flag("record_route_option", "record-route-option"),
        Flag("security_option", "security-option"),
        Flag("source_route_option", "source-route-option"),
        Flag("spoofing", "spoofing"),
        Flag("stream_option", "stream-option"),
        Flag("strict_source_route_option", "strict-source-route-option"),
        Flag("tear_drop", "tear-drop"),
        Flag("timestamp_option", "timestamp-option"),
        Block("tunnel", "tunnel", Tunnel),
        Flag("unknown_protocol", "unknown-protocol"),
    )


# === limit-session ===

@dataclass
class LimitSession(OptionSet):
    destination_ip_based: Optional[int] = None
    source_ip_based: Optional[int] = None

    LAYOUT = (
        Number("destination_ip_based", "destination-ip-based", between=(1, 2000000)),
        Number("source_ip_based", "source-ip-based", between=(1, 2000000)),
    )


# === tcp ===

@dataclass
class WhiteList(OptionSet):
    name: Optional[str] = None
    destination_address: list[str] = field(default_factory=list)
    source_address: list[str] = field(default_factory=list)

    KEYS = (Key("name"),)
    LAYOUT = (
        Values("destination_address", "destination-address"),
        Values("source_address", "source-address"),
    )

    def check(self) -> list[str]:
        if not self.destination_address and not self.source_address:
            return [f"white-list {self.name} need to have a source or destination address set"]
        return []


@dataclass
class SynFlood(OptionSet):
    alarm_threshold: Optional[int] = None
    attack_threshold: Optional[int] = None
    destination_threshold: Optional[int] = None
    source_threshold: Optional[int] = None
    timeout: Optional[int] = None
    whitelist: list[WhiteList] = field(default_factory=list)

    LAYOUT = (
        Number("alarm_threshold", "alarm-threshold", between=(1, 500000)),
        Number("attack_threshold", "attack-threshold", between=(1, 500000)),
        Number("destination_threshold", "destination-threshold", between=(4, 500000)),
        Number("source_threshold", "source-threshold", between=(4, 500000)),
        Number("timeout", "timeout", between=(1, 50)),
        Blocks("whitelist", "white-list", WhiteList, ordered=False),
    )


@dataclass
class Tcp(OptionSet):
    fin_no_ack: bool = False
    land: bool = False
    no_flag: bool = False
    port_scan: Optional[TcpPortScan] = None
    sweep: Optional[TcpSweep] = None
    syn_ack_ack_proxy: Optional[SynAckAckProxy] = None
    syn_fin: bool = False
    syn_flood: Optional[SynFlood] = None
    syn_frag: bool = False
    winnuke: bool = False

    LAYOUT = (
        Flag("fin_no_ack", "fin-no-ack"),
        Flag("land", "land"),
        Flag("no_flag", "tcp-no-flag"),
        Block("port_scan", "port-scan", TcpPortScan, bare=True),
        Block("sweep", "tcp-sweep", TcpSweep, bare=True),
        Block("syn_ack_ack_proxy", "syn-ack-ack-proxy", SynAckAckProxy, bare=True),
        Flag("syn_fin", "syn-fin"),
        Block("syn_flood", "syn-flood", SynFlood, bare=True),
        Flag("syn_frag", "syn-frag"),
        Flag("winnuke", "winnuke"),
    )


# === udp ===

@dataclass
class UdpFlood(OptionSet):
    threshold: Optional[int] = None
    whitelist: list[str] = field(default_factory=list)

    LAYOUT = (
        Number("threshold", "threshold", between=(1, 1000000)),
        Values("whitelist", "white-list"),
    )


@dataclass
class Udp(OptionSet):
    flood: Optional[UdpFlood] = None
    port_scan: Optional[UdpPortScan] = None
    sweep: Optional[UdpSweep] = None

    LAYOUT = (
        Block("flood", "flood", UdpFlood, bare=True),
        Block("port_scan", "port-scan", UdpPortScan, bare=True),
        Block("sweep", "udp-sweep", UdpSweep, bare=True),
    )


@dataclass
class Screen(OptionSet):
    name: Optional[str] = None
    alarm_without_drop: bool = False
    description: Optional[str] = None
    icmp: Optional[Icmp] = None
    ip: Optional[Ip] = None
    limit_session: Optional[LimitSession] = None
    tcp: Optional[Tcp] = None
    udp: Optional[Udp] = None

    KEYS = (Key("name", quoted=True),)
    LAYOUT = (
        Flag("alarm_without_drop", "alarm-without-drop"),
        Text("description", "description", quoted=True),
        Block("icmp", "icmp", Icmp),
        Block("ip", "ip", Ip),
        Block("limit_session", "limit-session", LimitSession),
        Block("tcp", "tcp", Tcp),
        Block("udp", "udp", Udp),
    )


class SecurityScreenResource(JunosResource):
    type_name = "security_screen"
    path = "security screen ids-option"
    options = Screen
    description = "Screen (IDS) option set applied to security zones"
