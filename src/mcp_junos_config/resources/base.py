"""Base class for Junos configuration resources.

A resource ties one option-set tree to its place in the configuration
hierarchy. The top-level option set's KEYS are the resource identity and
are rendered into the stanza path, e.g.

    security policies from-zone trust to-zone untrust
    event-options policy "on-link-down"
"""
import logging
from typing import Any, Optional

from ..codec.decoder import SetLineDecoder
from ..codec.encoder import SetLineEncoder
from ..codec.errors import ValidationError
from ..codec.fields import Block, Blocks, Flag, Key, Number, Template, Text, Values, render_keys
from ..codec.lines import (
    CMD_SHOW_CONFIG,
    DELETE_LS,
    ID_SEPARATOR,
    PIPE_DISPLAY_SET_RELATIVE,
    SET_LS,
    split_config_output,
)
from ..codec.schema import OptionSet, coerce

logger = logging.getLogger(__name__)


class JunosResource:
    """One kind of Junos configuration object.

    Subclasses set:
        type_name: Registry name, e.g. 'security_policy'
        path: Stanza path before the identity keys
        options: Top-level OptionSet subclass
        singleton_id: Fixed id for resources without identity keys
        delete_paths: Sub-paths removed on delete; empty removes the stanza
        id_format: Human description of the id for error messages
    """

    type_name: str = ""
    path: str = ""
    options: type = OptionSet
    singleton_id: Optional[str] = None
    delete_paths: tuple[str, ...] = ()
    id_format: str = "<name>"
    description: str = ""

    def __init__(self):
        self.encoder = SetLineEncoder()
        self.decoder = SetLineDecoder()

    @property
    def keys(self) -> tuple[Key, ...]:
        return self.options.KEYS

    def identity(self, options: OptionSet) -> dict[str, Any]:
        return {key.attr: getattr(options, key.attr) for key in self.keys}

    def stanza(self, identity: dict[str, Any]) -> str:
        if not self.keys:
            return self.path
        values = tuple(identity[key.attr] for key in self.keys)
        return self.path + " " + render_keys(self.keys, values)

    def set_prefix(self, identity: dict[str, Any]) -> str:
        return SET_LS + self.stanza(identity) + " "

    def show_command(self, identity: dict[str, Any]) -> str:
        return CMD_SHOW_CONFIG + self.stanza(identity) + PIPE_DISPLAY_SET_RELATIVE

    def delete_lines(self, identity: dict[str, Any]) -> list[str]:
        stanza = self.stanza(identity)
        if self.delete_paths:
            return [DELETE_LS + stanza + " " + sub for sub in self.delete_paths]
        return [DELETE_LS + stanza]

    def from_config(self, config: dict[str, Any]) -> OptionSet:
        """Build the option set from a plain dict (tool input)."""
        return self.options.from_dict(config)

    def encode(self, options: OptionSet) -> list[str]:
        """
        Render `options` as set lines under this resource's stanza.

        Raises:
            ValidationError: If the option set is invalid
        """
        for key in self.keys:
            value = getattr(options, key.attr)
            if value is None or value == "":
                raise ValidationError(f"missing required argument {key.attr}")
        return self.encoder.encode(options, self.set_prefix(self.identity(options)))

    def decode(self, output: Optional[str], identity: dict[str, Any]) -> Optional[OptionSet]:
        """
        Decode `show ... | display set relative` output.

        Returns:
            The option set, or None when the device has no such stanza
        """
        lines = list(split_config_output(output))
        if not lines:
            logger.debug(f"No {self.type_name} configuration for {identity or self.singleton_id}")
            return None
        return self.decoder.decode_lines(lines, self.options, **identity)

    def make_id(self, identity: dict[str, Any]) -> str:
        if self.singleton_id is not None:
            return self.singleton_id
        return ID_SEPARATOR.join(str(identity[key.attr]) for key in self.keys)

    def parse_id(self, resource_id: str) -> dict[str, Any]:
        """
        Split a resource id into identity values.

        Raises:
            ValidationError: If the id has the wrong number of elements
        """
        if self.singleton_id is not None:
            return {}
        if len(self.keys) == 1:
            parts = [resource_id]
        else:
            parts = resource_id.split(ID_SEPARATOR)
            if len(parts) != len(self.keys):
                raise ValidationError(
                    f"missing element(s) in id with separator {ID_SEPARATOR}"
                )
        return {key.attr: coerce(key.attr, key.kind, part) for key, part in zip(self.keys, parts)}

    def describe(self) -> dict[str, Any]:
        """Attribute tree of this resource, for clients building configs."""
        return {
            "type": self.type_name,
            "description": self.description,
            "path": self.path,
            "id_format": self.id_format,
            "attributes": describe_options(self.options),
        }


def describe_options(options_cls: type) -> dict[str, Any]:
    attributes: dict[str, Any] = {}
    for key in options_cls.KEYS:
        attributes[key.name] = _describe_key(key)
    for fld in options_cls.LAYOUT:
        if isinstance(fld, Template):
            for slot in fld.slots.values():
                attributes[slot.attr] = _describe_scalar(slot, fld.pattern)
        elif isinstance(fld, (Block, Blocks)):
            attributes[fld.attr] = {
                "type": "block" if isinstance(fld, Block) else "list of blocks",
                "keyword": fld.keyword,
                "required": fld.required,
                "attributes": describe_options(fld.options),
            }
        elif isinstance(fld, Values):
            entry: dict[str, Any] = {
                "type": ("list" if fld.ordered else "set") + f" of {fld.item.__name__}",
                "keyword": fld.keyword,
                "required": fld.required,
            }
            if fld.between:
                entry["range"] = list(fld.between)
            attributes[fld.attr] = entry
        else:
            attributes[fld.attr] = _describe_scalar(fld, fld.keyword)
    return attributes


def _describe_key(key: Key) -> dict[str, Any]:
    entry: dict[str, Any] = {"type": key.kind.__name__, "required": True, "identifier": True}
    if key.choices:
        entry["choices"] = list(key.choices)
    if key.between:
        entry["range"] = list(key.between)
    return entry


def _describe_scalar(fld, keyword: str) -> dict[str, Any]:
    if isinstance(fld, Flag):
        return {"type": "bool", "keyword": keyword}
    if isinstance(fld, Number):
        entry: dict[str, Any] = {"type": "int", "keyword": keyword, "unset": fld.unset}
        if fld.between:
            entry["range"] = list(fld.between)
        return entry
    entry = {"type": "str", "keyword": keyword}
    if isinstance(fld, Text):
        entry["required"] = fld.required
        if fld.choices:
            entry["choices"] = list(fld.choices)
        if fld.pattern:
            entry["pattern"] = fld.pattern.pattern
    return entry
