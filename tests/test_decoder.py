"""Tests for the set-line decoder."""
import pytest

from mcp_junos_config.codec import ParseError, SetLineDecoder, SetLineEncoder, StructuralError
from mcp_junos_config.resources.chassis_redundancy import ChassisRedundancy, RoutingEngine
from mcp_junos_config.resources.eventoptions_policy import EventOptionsPolicy
from mcp_junos_config.resources.security_policy import SecurityPolicy
from mcp_junos_config.resources.security_screen import Screen, SynAckAckProxy, TcpPortScan, UdpSweep
from mcp_junos_config.resources.snmp import Snmp
from mcp_junos_config.resources.system_radius_server import RadiusServer


def framed(*lines: str) -> str:
    body = "\n".join(f"set {line}" for line in lines)
    return f"<configuration-output>\n{body}\n</configuration-output>\n"


class TestRepeatedBlocks:
    """Tests for decoding repeated keyed blocks."""

    def test_routing_engines(self):
        """Encoded routing engines decode to the same list in the same order."""
        options = ChassisRedundancy(routing_engine=[
            RoutingEngine(slot=0, role="master"),
            RoutingEngine(slot=1, role="backup"),
        ])
        lines = SetLineEncoder().encode(options, "set ")
        decoded = SetLineDecoder().decode(framed(*[line[4:] for line in lines]), ChassisRedundancy)
        assert decoded.routing_engine == options.routing_engine

    def test_entries_merged_in_first_seen_order(self):
        """Lines for the same entry merge; order follows first appearance."""
        output = framed(
            "policy allow-web match source-address any",
            "policy allow-dns match source-address any",
            "policy allow-web match destination-address web",
            "policy allow-web then permit",
            "policy allow-dns then deny",
        )
        decoded = SetLineDecoder().decode(output, SecurityPolicy, from_zone="trust", to_zone="dmz")
        assert [p.name for p in decoded.policy] == ["allow-web", "allow-dns"]
        web = decoded.policy[0]
        assert web.match_source_address == ["any"]
        assert web.match_destination_address == ["web"]
        assert web.then == "permit"
        assert decoded.policy[1].then == "deny"
        assert decoded.from_zone == "trust"

    def test_multi_key_block(self):
        """Blocks keyed by labelled tokens are read back."""
        output = framed(
            'events "snmp_trap_link_down"',
            'then upload filename "/var/log/messages" destination "archive" retry-count 3 retry-interval 30',
            'then upload filename "/var/log/messages" destination "archive" user-name ops',
            'attributes-match "snmp_trap_link_down.interface-name" matches "ge-0/0/.*"',
        )
        decoded = SetLineDecoder().decode(output, EventOptionsPolicy, name="p")
        upload = decoded.then.upload[0]
        assert (upload.filename, upload.destination) == ("/var/log/messages", "archive")
        assert (upload.retry_count, upload.retry_interval) == (3, 30)
        assert upload.user_name == "ops"
        match = decoded.attributes_match[0]
        assert match.from_ == "snmp_trap_link_down.interface-name"
        assert match.compare == "matches"
        assert match.to == "ge-0/0/.*"


class TestSplitTemplateLines:
    """Tests for values the device prints one per line."""

    def test_upload_retry_split(self):
        """retry-count and retry-interval on separate lines fill one upload."""
        output = framed(
            'events "e"',
            'then upload filename "f" destination "d" retry-count 3',
            'then upload filename "f" destination "d" retry-count retry-interval 10',
        )
        decoded = SetLineDecoder().decode(output, EventOptionsPolicy, name="p")
        assert len(decoded.then.upload) == 1
        upload = decoded.then.upload[0]
        assert (upload.retry_count, upload.retry_interval) == (3, 10)

    def test_event_script_destination_retry_split(self):
        """Destinations under an event script read split retry lines."""
        output = framed(
            'events "e"',
            'then event-script "check.slax" destination "archive" retry-count 2',
            'then event-script "check.slax" destination "archive" retry-count retry-interval 60',
        )
        decoded = SetLineDecoder().decode(output, EventOptionsPolicy, name="p")
        destination = decoded.then.event_script[0].destination[0]
        assert destination.name == "archive"
        assert (destination.retry_count, destination.retry_interval) == (2, 60)

    def test_change_configuration_retry_split(self):
        """retry count and retry interval lines fill change-configuration."""
        output = framed(
            'events "e"',
            'then change-configuration commands "set system location building 1"',
            "then change-configuration retry count 3",
            "then change-configuration retry interval 10",
        )
        decoded = SetLineDecoder().decode(output, EventOptionsPolicy, name="p")
        change = decoded.then.change_configuration
        assert change.commands == ["set system location building 1"]
        assert (change.retry_count, change.retry_interval) == (3, 10)

    def test_within_trigger_split(self):
        """trigger <when> and trigger <count> lines fill one within entry."""
        output = framed(
            'events "e"',
            "then raise-trap",
            "within 60 trigger after",
            "within 60 trigger 3",
        )
        decoded = SetLineDecoder().decode(output, EventOptionsPolicy, name="p")
        assert len(decoded.within) == 1
        within = decoded.within[0]
        assert within.time_interval == 60
        assert (within.trigger_when, within.trigger_count) == ("after", 3)

    def test_one_line_form_still_read(self):
        """The combined one-line form decodes to the same values."""
        output = framed(
            'events "e"',
            "then change-configuration retry count 3 interval 10",
            "within 60 trigger until 5",
        )
        decoded = SetLineDecoder().decode(output, EventOptionsPolicy, name="p")
        change = decoded.then.change_configuration
        assert (change.retry_count, change.retry_interval) == (3, 10)
        assert (decoded.within[0].trigger_when, decoded.within[0].trigger_count) == ("until", 5)

    def test_split_value_not_a_number(self):
        """A split count that is not an integer is a parse error."""
        output = framed('events "e"', 'then upload filename "f" destination "d" retry-count many')
        with pytest.raises(ParseError):
            SetLineDecoder().decode(output, EventOptionsPolicy, name="p")


class TestSentinels:
    """Tests for unset values."""

    def test_minus_one_sentinel(self):
        """A -1 sentinel field never seen decodes back to -1."""
        decoded = SetLineDecoder().decode(framed('secret "plain"'), RadiusServer, address="192.0.2.10")
        data = decoded.to_dict()
        assert data["accounting_retry"] == -1
        assert data["accounting_timeout"] == -1
        assert data["accounting_port"] == 0

    def test_zero_kept_for_minus_one_sentinel(self):
        """A legitimate 0 is decoded as 0."""
        decoded = SetLineDecoder().decode(
            framed('secret "plain"', "accounting-retry 0"), RadiusServer, address="192.0.2.10"
        )
        assert decoded.accounting_retry == 0
        assert decoded.to_dict()["accounting_retry"] == 0

    def test_empty_output_keeps_identity_unset(self):
        """No data lines: identity is not filled in."""
        decoded = SetLineDecoder().decode("empty", SecurityPolicy, from_zone="a", to_zone="b")
        assert decoded.from_zone is None
        assert decoded.policy == []


class TestForwardCompatibility:
    """Tests for unknown lines."""

    def test_unknown_line_ignored(self):
        """Unknown keywords do not disturb known fields."""
        output = framed(
            "graceful-switchover",
            "some-future-knob enable",
            "keepalive-time 30",
        )
        decoded = SetLineDecoder().decode(output, ChassisRedundancy)
        assert decoded.graceful_switchover is True
        assert decoded.keepalive_time == 30

    def test_unknown_choice_ignored(self):
        """A value outside a field's choices does not match it."""
        decoded = SetLineDecoder().decode(framed("routing-engine 0 standby"), ChassisRedundancy)
        assert decoded.routing_engine == [RoutingEngine(slot=0)]


class TestKeywordResolution:
    """Tests for overlapping keywords."""

    def test_header_limit_vs_header_block(self):
        """ipv6-extension-header-limit and ipv6-extension-header resolve separately."""
        output = framed(
            "ip ipv6-extension-header-limit 4",
            "ip ipv6-extension-header hop-by-hop-header jumbo-payload-option",
            "ip ipv6-extension-header AH-header",
        )
        decoded = SetLineDecoder().decode(output, Screen, name="s")
        assert decoded.ip.ipv6_extension_header_limit == 4
        header = decoded.ip.ipv6_extension_header
        assert header.ah_header is True
        assert header.hop_by_hop_header.jumbo_payload_option is True

    def test_detector_blocks_typed(self):
        """Screen detectors decode into their own option classes."""
        output = framed(
            "tcp port-scan threshold 5000",
            "tcp syn-ack-ack-proxy",
            "udp udp-sweep threshold 2000",
        )
        decoded = SetLineDecoder().decode(output, Screen, name="s")
        assert isinstance(decoded.tcp.port_scan, TcpPortScan)
        assert decoded.tcp.port_scan.threshold == 5000
        assert isinstance(decoded.tcp.syn_ack_ack_proxy, SynAckAckProxy)
        assert decoded.tcp.syn_ack_ack_proxy.threshold is None
        assert isinstance(decoded.udp.sweep, UdpSweep)

    def test_longest_keyword_wins(self):
        """'arp host-name-resolution' is not read as 'arp'."""
        decoded = SetLineDecoder().decode(framed("arp host-name-resolution"), Snmp)
        assert decoded.arp_host_name_resolution is True
        # implied by the longer keyword
        assert decoded.arp is True

    def test_implied_then_permit(self):
        """A permit-only option implies then permit."""
        output = framed(
            "policy vpn match source-address any",
            "policy vpn then permit tunnel ipsec-vpn site-b",
        )
        decoded = SetLineDecoder().decode(output, SecurityPolicy, from_zone="a", to_zone="b")
        policy = decoded.policy[0]
        assert policy.permit_tunnel_ipsec_vpn == "site-b"
        assert policy.then == "permit"


class TestErrors:
    """Tests for malformed known lines."""

    def test_bad_integer(self):
        """A non-numeric value on a numeric field is a ParseError carrying the line."""
        with pytest.raises(ParseError) as exc_info:
            SetLineDecoder().decode(framed("keepalive-time soon"), ChassisRedundancy)
        assert exc_info.value.line == "keepalive-time soon"

    def test_missing_key_token(self):
        """A block line without its key is a StructuralError."""
        with pytest.raises(StructuralError):
            SetLineDecoder().decode(framed('then upload filename "f"'), EventOptionsPolicy)
