"""Tests for the set-line encoder."""
import pytest

from mcp_junos_config.codec import SetLineEncoder, ValidationError
from mcp_junos_config.resources.chassis_redundancy import ChassisRedundancy, RoutingEngine
from mcp_junos_config.resources.eventoptions_policy import (
    ChangeConfiguration,
    EventOptionsPolicy,
    EventScript,
    Then,
    Upload,
    Within,
)
from mcp_junos_config.resources.security_screen import Icmp, IcmpFlood, Screen
from mcp_junos_config.resources.snmp import HealthMonitor, Snmp


PREFIX = "set chassis redundancy "


class TestRepeatedBlocks:
    """Tests for repeated keyed blocks."""

    def test_routing_engines(self):
        """Two routing engines render one line each."""
        options = ChassisRedundancy(routing_engine=[
            RoutingEngine(slot=0, role="master"),
            RoutingEngine(slot=1, role="backup"),
        ])
        lines = SetLineEncoder().encode(options, PREFIX)
        assert lines == [
            "set chassis redundancy routing-engine 0 master",
            "set chassis redundancy routing-engine 1 backup",
        ]

    def test_unordered_blocks_sorted(self):
        """Unordered blocks are written sorted by key."""
        options = ChassisRedundancy(routing_engine=[
            RoutingEngine(slot=1, role="backup"),
            RoutingEngine(slot=0, role="master"),
        ])
        lines = SetLineEncoder().encode(options, PREFIX)
        assert lines[0] == "set chassis redundancy routing-engine 0 master"

    def test_duplicate_key_rejected(self):
        """Two blocks with the same key fail and produce no lines."""
        options = ChassisRedundancy(routing_engine=[
            RoutingEngine(slot=0, role="master"),
            RoutingEngine(slot=0, role="backup"),
        ])
        with pytest.raises(ValidationError) as exc_info:
            SetLineEncoder().encode(options, PREFIX)
        assert "multiple blocks routing_engine with the same slot '0'" in str(exc_info.value)

    def test_duplicate_multi_key_message(self):
        """Multi-key duplicates name every key."""
        then = Then(upload=[
            Upload(filename="f", destination="d"),
            Upload(filename="f", destination="d"),
        ])
        options = EventOptionsPolicy(name="p", events=["e"], then=then)
        with pytest.raises(ValidationError) as exc_info:
            SetLineEncoder().encode(options, 'set event-options policy "p" ')
        assert "with the same filename 'f' and destination 'd'" in str(exc_info.value)


class TestScalars:
    """Tests for scalar fields."""

    def test_flags_and_numbers(self):
        """Flags render bare, numbers after their keyword, in declared order."""
        options = ChassisRedundancy(
            keepalive_time=30,
            graceful_switchover=True,
            failover_disk_read_threshold=2000,
        )
        lines = SetLineEncoder().encode(options, PREFIX)
        assert lines == [
            "set chassis redundancy failover disk-read-threshold 2000",
            "set chassis redundancy graceful-switchover",
            "set chassis redundancy keepalive-time 30",
        ]

    def test_prefix_space_added(self):
        """A prefix without trailing space is completed."""
        lines = SetLineEncoder().encode(ChassisRedundancy(graceful_switchover=True), PREFIX.strip())
        assert lines == ["set chassis redundancy graceful-switchover"]

    def test_quoted_text_and_set_values(self):
        """Quoted text is wrapped; set values are de-duplicated and sorted."""
        options = Snmp(location="rack 4", interface=["ge-0/0/1", "fxp0", "ge-0/0/1"])
        lines = SetLineEncoder().encode(options, "set snmp ")
        assert lines == [
            "set snmp interface fxp0",
            "set snmp interface ge-0/0/1",
            'set snmp location "rack 4"',
        ]

    def test_empty_string_skipped(self):
        """Empty strings count as unset."""
        lines = SetLineEncoder().encode(Snmp(contact="", arp=True), "set snmp ")
        assert lines == ["set snmp arp"]

    def test_out_of_range(self):
        """Range violations abort encoding."""
        with pytest.raises(ValidationError) as exc_info:
            SetLineEncoder().encode(ChassisRedundancy(keepalive_time=1), PREFIX)
        assert "expected keepalive_time to be in the range (2 - 10000), got 1" in str(exc_info.value)


class TestTemplates:
    """Tests for multi-value lines."""

    def test_retry_line(self):
        """Both slots render on one line."""
        change = ChangeConfiguration(commands=["set system x"], retry_count=2, retry_interval=10)
        options = EventOptionsPolicy(name="p", events=["e"], then=Then(change_configuration=change))
        lines = SetLineEncoder().encode(options, 'set event-options policy "p" ')
        assert 'set event-options policy "p" then change-configuration retry count 2 interval 10' in lines

    def test_partial_template_rejected(self):
        """A slot set without its partner is an error."""
        change = ChangeConfiguration(commands=["set system x"], retry_interval=10)
        options = EventOptionsPolicy(name="p", events=["e"], then=Then(change_configuration=change))
        with pytest.raises(ValidationError) as exc_info:
            SetLineEncoder().encode(options, 'set event-options policy "p" ')
        assert "then.change_configuration.retry_count must be set with" in str(exc_info.value)


class TestBlocks:
    """Tests for nested single blocks."""

    def test_bare_block(self):
        """A bare block without content writes its keyword alone."""
        lines = SetLineEncoder().encode(Snmp(health_monitor=HealthMonitor()), "set snmp ")
        assert lines == ["set snmp health-monitor"]

    def test_bare_block_with_content(self):
        """A bare block with content writes only the content lines."""
        options = Snmp(health_monitor=HealthMonitor(interval=300))
        lines = SetLineEncoder().encode(options, "set snmp ")
        assert lines == ["set snmp health-monitor interval 300"]

    def test_empty_block_rejected(self):
        """A non-bare block without content is an error."""
        options = Screen(name="s", icmp=Icmp())
        with pytest.raises(ValidationError) as exc_info:
            SetLineEncoder().encode(options, 'set security screen ids-option "s" ')
        assert "icmp block is empty" in str(exc_info.value)

    def test_nested_bare_detector(self):
        """Detector without threshold is written bare inside its group."""
        options = Screen(name="s", icmp=Icmp(flood=IcmpFlood(), large=True))
        lines = SetLineEncoder().encode(options, 'set security screen ids-option "s" ')
        assert lines == [
            'set security screen ids-option "s" icmp flood',
            'set security screen ids-option "s" icmp large',
        ]

    def test_bare_repeated_block(self):
        """A repeated bare block writes its key line."""
        then = Then(event_script=[EventScript(filename="check.slax")])
        options = EventOptionsPolicy(
            name="p",
            events=["snmp_trap_link_down"],
            then=then,
            within=[Within(time_interval=60, events=["ui_commit"])],
        )
        lines = SetLineEncoder().encode(options, 'set event-options policy "p" ')
        assert lines == [
            'set event-options policy "p" events "snmp_trap_link_down"',
            'set event-options policy "p" then event-script "check.slax"',
            'set event-options policy "p" within 60 events "ui_commit"',
        ]
