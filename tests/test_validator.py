"""Tests for option-set validation."""
import pytest

from mcp_junos_config.codec import (
    ConfigValidator,
    ValidationError,
    at_least_one_of,
    conflicts_with,
    exactly_one_of,
    int_between,
    required_with,
    string_in_slice,
)
from mcp_junos_config.resources.eventoptions_policy import (
    ChangeConfiguration,
    EventOptionsPolicy,
    Then,
    Within,
)
from mcp_junos_config.resources.security_policy import (
    ApplicationServices,
    Policy,
    SecurityPolicy,
)
from mcp_junos_config.resources.security_screen import (
    Screen,
    SynAckAckProxy,
    SynFlood,
    Tcp,
    TcpPortScan,
    WhiteList,
)
from mcp_junos_config.resources.services_security_intelligence_profile import (
    DefaultRuleThen,
    Rule,
    RuleMatch,
    SecurityIntelligenceProfile,
)
from mcp_junos_config.resources.snmp import HealthMonitor


def policy(**kwargs) -> Policy:
    values = dict(
        name="p1",
        match_source_address=["any"],
        match_destination_address=["any"],
        match_application=["any"],
        then="permit",
    )
    values.update(kwargs)
    return Policy(**values)


class TestHelpers:
    """Tests for the validation helper functions."""

    def test_string_in_slice(self):
        """Message names the field and the allowed values."""
        with pytest.raises(ValidationError) as exc_info:
            string_in_slice("primary", ("backup", "master"), "role")
        assert str(exc_info.value) == "expected role to be one of ['backup', 'master'], got primary"

    def test_int_between(self):
        """Bounds are inclusive."""
        int_between(2, 2, 10, "x")
        int_between(10, 2, 10, "x")
        with pytest.raises(ValidationError):
            int_between(11, 2, 10, "x")

    def test_pair_helpers(self):
        """required_with and conflicts_with look at presence only."""
        hm = HealthMonitor(idp_interval=10)
        with pytest.raises(ValidationError):
            required_with(hm, "idp_interval", "idp")
        required_with(HealthMonitor(idp=True, idp_interval=10), "idp_interval", "idp")

        with pytest.raises(ValidationError):
            conflicts_with(DefaultRuleThen(log=True, no_log=True), "log", "no_log")

    def test_group_helpers(self):
        """exactly_one_of and at_least_one_of count set attributes."""
        options = DefaultRuleThen(log=True, no_log=True)
        with pytest.raises(ValidationError):
            exactly_one_of(options, "log", "no_log")
        exactly_one_of(DefaultRuleThen(log=True), "log", "no_log")
        with pytest.raises(ValidationError):
            at_least_one_of(DefaultRuleThen(), "log", "no_log")


class TestConfigValidator:
    """Tests for whole-tree validation."""

    def test_valid_policy(self):
        """A complete policy set passes."""
        options = SecurityPolicy(from_zone="trust", to_zone="untrust", policy=[policy()])
        result = ConfigValidator().validate(options)
        assert result.valid
        assert result.errors == []

    def test_errors_collected(self):
        """Every problem in the tree is reported."""
        options = SecurityPolicy(
            from_zone="trust",
            to_zone="untrust",
            policy=[policy(match_application=[], then="allow", match_destination_address=[])],
        )
        result = ConfigValidator().validate(options)
        assert not result.valid
        assert "policy.match_destination_address: 1 minimum item must be set" in result.errors
        assert "expected policy.then to be one of ['permit', 'reject', 'deny'], got allow" in result.errors
        assert (
            "1 minimum item must be set in 'match_application' or "
            "'match_dynamic_application' argument in 'p1' policy"
        ) in result.errors

    def test_missing_key(self):
        """Identity keys are required."""
        result = ConfigValidator().validate(SecurityPolicy(to_zone="untrust", policy=[policy()]))
        assert "missing required argument from_zone" in result.errors

    def test_required_block_list(self):
        """Required repeated blocks need one entry."""
        result = ConfigValidator().validate(SecurityPolicy(from_zone="a", to_zone="b"))
        assert "policy: 1 minimum block must be set" in result.errors

    def test_then_conflict(self):
        """Permit-only options conflict with deny/reject."""
        options = SecurityPolicy(
            from_zone="a",
            to_zone="b",
            policy=[policy(then="deny", permit_application_services=ApplicationServices(idp=True))],
        )
        result = ConfigValidator().validate(options)
        assert "conflict policy then deny and policy permit_application_services" in result.errors

    def test_redirect_conflict(self):
        """redirect_wx and reverse_redirect_wx cannot both be enabled."""
        services = ApplicationServices(redirect_wx=True, reverse_redirect_wx=True)
        options = SecurityPolicy(
            from_zone="a", to_zone="b", policy=[policy(permit_application_services=services)]
        )
        result = ConfigValidator().validate(options)
        assert "conflict redirect_wx and reverse_redirect_wx enabled both" in result.errors

    def test_check_synchronize_requires_check(self):
        """commit_options_check_synchronize needs commit_options_check."""
        change = ChangeConfiguration(commands=["x"], commit_options_check_synchronize=True)
        options = EventOptionsPolicy(name="p", events=["e"], then=Then(change_configuration=change))
        result = ConfigValidator().validate(options)
        assert (
            "commit_options_check must be set to true if "
            "commit_options_check_synchronize is set to true"
        ) in result.errors

    def test_then_needs_action(self):
        """An event policy must do something."""
        options = EventOptionsPolicy(name="p", events=["e"], then=Then())
        result = ConfigValidator().validate(options)
        assert "then block needs at least one action" in result.errors

    def test_within_needs_content(self):
        """A within block needs events or a trigger."""
        options = EventOptionsPolicy(
            name="p", events=["e"], then=Then(ignore=True), within=[Within(time_interval=60)]
        )
        result = ConfigValidator().validate(options)
        assert "missing argument for within (time_interval=60)" in result.errors

    def test_whitelist_check(self):
        """Screen white-list needs an address."""
        syn_flood = SynFlood(whitelist=[WhiteList(name="office")])
        options = Screen(name="s", tcp=Tcp(syn_flood=syn_flood))
        result = ConfigValidator().validate(options)
        assert "white-list office need to have a source or destination address set" in result.errors

    def test_detector_ranges_per_class(self):
        """Each screen detector checks its own threshold range."""
        options = Screen(name="s", tcp=Tcp(
            port_scan=TcpPortScan(threshold=300000),
            syn_ack_ack_proxy=SynAckAckProxy(threshold=300000),
        ))
        result = ConfigValidator().validate(options)
        assert len(result.errors) == 1
        assert "300000" in result.errors[0]

    def test_nested_ranges_and_patterns(self):
        """Values ranges and patterns are checked with their path."""
        profile = SecurityIntelligenceProfile(
            name="cc",
            category="CC",
            rule=[Rule(name="r1", then_action="allow", match=RuleMatch(threat_level=[11]))],
            default_rule_then=DefaultRuleThen(action="permit", log=True, no_log=True),
        )
        result = ConfigValidator().validate(profile)
        assert "expected rule.match.threat_level to be in the range (1 - 10), got 11" in result.errors
        assert any(e.startswith("invalid value for rule.then_action (allow)") for e in result.errors)
        assert "log conflicts with no_log" in result.errors

    def test_duplicate_set_values_warn(self):
        """Duplicate set values are a warning, not an error."""
        options = SecurityPolicy(
            from_zone="a", to_zone="b", policy=[policy(match_source_address=["any", "any"])]
        )
        result = ConfigValidator().validate(options)
        assert result.valid
        assert result.warnings == ["policy.match_source_address has duplicate values, they will be merged"]
