"""services security-intelligence profile "<name>"
"""
from dataclasses import dataclass, field
from typing import Optional

from ..codec.fields import Block, Blocks, Flag, Key, Text, Values
from ..codec.schema import OptionSet
from ..codec.validator import ConflictsWith
from .base import JunosResource

ACTION_PATTERN = r"^(permit|recommended|block (drop|close( http (file|message|redirect-url) .+)?))$"


@dataclass
class RuleMatch(OptionSet):
    threat_level: list[int] = field(default_factory=list)
    feed_name: list[str] = field(default_factory=list)

    LAYOUT = (
        Values("threat_level", "threat-level", ordered=True, item=int, between=(1, 10),
               required=True),
        Values("feed_name", "feed-name", quoted=True, ordered=True),
    )


@dataclass
class Rule(OptionSet):
    name: Optional[str] = None
    then_action: Optional[str] = None
    then_log: bool = False
    match: Optional[RuleMatch] = None

    KEYS = (Key("name", quoted=True),)
    LAYOUT = (
        Text("then_action", "then action", pattern=ACTION_PATTERN, required=True),
        Flag("then_log", "then log"),
        Block("match", "match", RuleMatch, required=True),
    )


@dataclass
class DefaultRuleThen(OptionSet):
    action: Optional[str] = None
    log: bool = False
    no_log: bool = False

    LAYOUT = (
        Text("action", "action", pattern=ACTION_PATTERN, required=True),
        Flag("log", "log"),
        Flag("no_log", "no-log"),
    )
    RULES = (ConflictsWith("log", "no_log"),)


@dataclass
class SecurityIntelligenceProfile(OptionSet):
    name: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    rule: list[Rule] = field(default_factory=list)
    default_rule_then: Optional[DefaultRuleThen] = None

    KEYS = (Key("name", quoted=True),)
    LAYOUT = (
        Text("category", "category", required=True),
        Text("description", "description", quoted=True),
        Blocks("rule", "rule", Rule, ordered=True, required=True),
        Block("default_rule_then", "default-rule then", DefaultRuleThen),
    )


class ServicesSecurityIntelligenceProfileResource(JunosResource):
    type_name = "services_security_intelligence_profile"
    path = "services security-intelligence profile"
    options = SecurityIntelligenceProfile
    description = "Security intelligence profile: feed category and threat-level rules"
