"""event-options policy "<name>"

The `then` stanza holds the actions run when the policy's events fire.
Destinations and uploads carry retry settings written as one line:

    then upload filename "f" destination "d" retry-count 3 retry-interval 10

which `display set` prints back as one line per value:

    then upload filename "f" destination "d" retry-count 3
    then upload filename "f" destination "d" retry-count retry-interval 10
"""
from dataclasses import dataclass, field
from typing import Optional

from ..codec.fields import Block, Blocks, Flag, Key, Number, Template, Text, Values
from ..codec.schema import OptionSet
from ..codec.validator import AtLeastOneOf, RequiredWith
from .base import JunosResource

OUTPUT_FORMATS = ("text", "xml")

FACILITIES = (
    "authorization",
    "change-log",
    "conflict-log",
    "daemon",
    "dfc",
    "external",
    "firewall",
    "ftp",
    "interactive-commands",
    "kernel",
    "ntp",
    "pfe",
    "security",
    "user",
)

SEVERITIES = ("alert", "critical", "emergency", "error", "info", "notice", "warning")

MAX_UINT32 = 4294967295


def retry_template() -> Template:
    return Template(
        "retry-count {retry_count} retry-interval {retry_interval}",
        Number("retry_count", between=(0, 10), unset=-1),
        Number("retry_interval", between=(0, MAX_UINT32), unset=-1),
        reads=(
            Number("retry_count", "retry-count"),
            Number("retry_interval", "retry-count retry-interval"),
        ),
    )


@dataclass
class Destination(OptionSet):
    name: Optional[str] = None
    retry_count: Optional[int] = None
    retry_interval: Optional[int] = None
    transfer_delay: Optional[int] = None

    KEYS = (Key("name", quoted=True),)
    LAYOUT = (
        retry_template(),
        Number("transfer_delay", "transfer-delay", between=(0, MAX_UINT32), unset=-1),
    )


@dataclass
class Argument(OptionSet):
    name: Optional[str] = None
    value: Optional[str] = None

    KEYS = (Key("name", quoted=True),)
    LAYOUT = (Text("value", quoted=True, required=True),)


@dataclass
class ChangeConfiguration(OptionSet):
    commands: list[str] = field(default_factory=list)
    commit_options_check: bool = False
    commit_options_check_synchronize: bool = False
    commit_options_force: bool = False
    commit_options_log: Optional[str] = None
    commit_options_synchronize: bool = False
    retry_count: Optional[int] = None
    retry_interval: Optional[int] = None
    user_name: Optional[str] = None

    LAYOUT = (
        Values("commands", "commands", quoted=True, ordered=True, required=True),
        Flag("commit_options_check", "commit-options check"),
        Flag("commit_options_check_synchronize", "commit-options check synchronize",
             implies={"commit_options_check": True}),
        Flag("commit_options_force", "commit-options force"),
        Text("commit_options_log", "commit-options log", quoted=True),
        Flag("commit_options_synchronize", "commit-options synchronize"),
        Template(
            "retry count {retry_count} interval {retry_interval}",
            Number("retry_count", between=(0, 10), unset=-1),
            Number("retry_interval", between=(0, MAX_UINT32), unset=-1),
            reads=(
                Number("retry_count", "retry count"),
                Number("retry_interval", "retry interval"),
            ),
        ),
        Text("user_name", "user-name"),
    )
    RULES = (
        RequiredWith(
            "commit_options_check_synchronize", "commit_options_check",
            message="commit_options_check must be set to true if "
                    "commit_options_check_synchronize is set to true",
        ),
    )


@dataclass
class EventScript(OptionSet):
    filename: Optional[str] = None
    arguments: list[Argument] = field(default_factory=list)
    destination: list[Destination] = field(default_factory=list)
    output_filename: Optional[str] = None
    output_format: Optional[str] = None
    user_name: Optional[str] = None

    KEYS = (Key("filename", quoted=True),)
    LAYOUT = (
        Blocks("arguments", "arguments", Argument),
        Blocks("destination", "destination", Destination, bare=True, max_items=1),
        Text("output_filename", "output-filename", quoted=True),
        Text("output_format", "output-format", choices=OUTPUT_FORMATS),
        Text("user_name", "user-name"),
    )


@dataclass
class ExecuteCommands(OptionSet):
    commands: list[str] = field(default_factory=list)
    destination: list[Destination] = field(default_factory=list)
    output_filename: Optional[str] = None
    output_format: Optional[str] = None
    user_name: Optional[str] = None

    LAYOUT = (
        Values("commands", "commands", quoted=True, ordered=True, required=True),
        Blocks("destination", "destination", Destination, bare=True, max_items=1),
        Text("output_filename", "output-filename", quoted=True),
        Text("output_format", "output-format", choices=OUTPUT_FORMATS),
        Text("user_name", "user-name"),
    )


@dataclass
class Upload(OptionSet):
    filename: Optional[str] = None
    destination: Optional[str] = None
    retry_count: Optional[int] = None
    retry_interval: Optional[int] = None
    transfer_delay: Optional[int] = None
    user_name: Optional[str] = None

    KEYS = (
        Key("filename", "filename", quoted=True),
        Key("destination", "destination", quoted=True),
    )
    LAYOUT = (
        retry_template(),
        Number("transfer_delay", "transfer-delay", between=(0, MAX_UINT32), unset=-1),
        Text("user_name", "user-name"),
    )


@dataclass
class Then(OptionSet):
    change_configuration: Optional[ChangeConfiguration] = None
    event_script: list[EventScript] = field(default_factory=list)
    execute_commands: Optional[ExecuteCommands] = None
    ignore: bool = False
    priority_override_facility: Optional[str] = None
    priority_override_severity: Optional[str] = None
    raise_trap: bool = False
    upload: list[Upload] = field(default_factory=list)

    LAYOUT = (
        Block("change_configuration", "change-configuration", ChangeConfiguration),
        Blocks("event_script", "event-script", EventScript, bare=True),
        Block("execute_commands", "execute-commands", ExecuteCommands),
        Flag("ignore", "ignore"),
        Text("priority_override_facility", "priority-override facility", choices=FACILITIES),
        Text("priority_override_severity", "priority-override severity", choices=SEVERITIES),
        Flag("raise_trap", "raise-trap"),
        Blocks("upload", "upload", Upload, bare=True),
    )
    RULES = (
        AtLeastOneOf(
            "change_configuration", "event_script", "execute_commands", "ignore",
            "priority_override_facility", "priority_override_severity", "raise_trap", "upload",
            message="then block needs at least one action",
        ),
    )


@dataclass
class AttributesMatch(OptionSet):
    from_: Optional[str] = None
    compare: Optional[str] = None
    to: Optional[str] = None

    KEYS = (
        Key("from_", quoted=True, name="from"),
        Key("compare", choices=("equals", "matches", "starts-with")),
        Key("to", quoted=True),
    )


@dataclass
class Within(OptionSet):
    time_interval: Optional[int] = None
    events: list[str] = field(default_factory=list)
    not_events: list[str] = field(default_factory=list)
    trigger_when: Optional[str] = None
    trigger_count: Optional[int] = None

    KEYS = (Key("time_interval", kind=int, between=(1, 604800)),)
    LAYOUT = (
        Values("events", "events", quoted=True),
        Values("not_events", "not events", quoted=True),
        Template(
            "trigger {trigger_when} {trigger_count}",
            Text("trigger_when", choices=("after", "on", "until")),
            Number("trigger_count", between=(0, MAX_UINT32), unset=-1),
            reads=(
                Text("trigger_when", "trigger", choices=("after", "on", "until")),
                Number("trigger_count", "trigger"),
            ),
        ),
    )
    RULES = (
        AtLeastOneOf(
            "events", "not_events", "trigger_when",
            message="missing argument for within (time_interval={time_interval})",
        ),
    )


@dataclass
class EventOptionsPolicy(OptionSet):
    name: Optional[str] = None
    events: list[str] = field(default_factory=list)
    then: Optional[Then] = None
    attributes_match: list[AttributesMatch] = field(default_factory=list)
    within: list[Within] = field(default_factory=list)

    KEYS = (Key("name", quoted=True),)
    LAYOUT = (
        Values("events", "events", quoted=True, required=True),
        Block("then", "then", Then, required=True),
        Blocks("attributes_match", "attributes-match", AttributesMatch, bare=True),
        Blocks("within", "within", Within),
    )


class EventOptionsPolicyResource(JunosResource):
    type_name = "eventoptions_policy"
    path = "event-options policy"
    options = EventOptionsPolicy
    description = "Event policy: events to watch and actions to run"
