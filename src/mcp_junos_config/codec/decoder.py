"""Set-line -> option set decoder.

Decoding is a single forward pass. Each line is matched against the
option set's field table, longest keyword first, and either fills a leaf or
descends into a nested block builder. Repeated blocks accumulate in a keyed
insertion-ordered map, so lines for the same entry may arrive in any order.
"""
import logging
from typing import Any, Iterable, Optional

from .fields import Block, Blocks, Field, Flag, Template, Values
from .lines import SET_LS, split_config_output
from .schema import OptionSet

logger = logging.getLogger(__name__)


class KeyedBlocks:
    """Repeated-block accumulator keyed by the block's key tuple."""

    def __init__(self, options_cls: type):
        self.options_cls = options_cls
        self._entries: dict[tuple, "_Builder"] = {}

    def get(self, key: tuple) -> "_Builder":
        builder = self._entries.get(key)
        if builder is None:
            builder = _Builder(self.options_cls)
            for k, value in zip(self.options_cls.KEYS, key):
                builder.values[k.attr] = value
            self._entries[key] = builder
        return builder

    def build(self) -> list[OptionSet]:
        return [builder.build() for builder in self._entries.values()]

    def __len__(self) -> int:
        return len(self._entries)


class _Builder:
    def __init__(self, options_cls: type):
        self.options_cls = options_cls
        self.values: dict[str, Any] = {}
        self.blocks: dict[str, "_Builder"] = {}
        self.repeated: dict[str, KeyedBlocks] = {}

    def block(self, fld: Block) -> "_Builder":
        if fld.attr not in self.blocks:
            self.blocks[fld.attr] = _Builder(fld.options)
        return self.blocks[fld.attr]

    def keyed(self, fld: Blocks) -> KeyedBlocks:
        if fld.attr not in self.repeated:
            self.repeated[fld.attr] = KeyedBlocks(fld.options)
        return self.repeated[fld.attr]

    def append(self, fld: Values, value: Any) -> None:
        items = self.values.setdefault(fld.attr, [])
        if fld.ordered or value not in items:
            items.append(value)

    def build(self) -> OptionSet:
        kwargs = dict(self.values)
        for attr, builder in self.blocks.items():
            kwargs[attr] = builder.build()
        for attr, entries in self.repeated.items():
            kwargs[attr] = entries.build()
        return self.options_cls(**kwargs)


class SetLineDecoder:
    """Parse `display set relative` output into option sets.

    Usage:
        decoder = SetLineDecoder()
        options = decoder.decode(output, ChassisRedundancy)
    """

    def __init__(self, prefix: str = SET_LS):
        self.prefix = prefix

    def decode(self, output: Optional[str], options_cls: type, **identity: Any) -> OptionSet:
        """
        Decode raw command output.

        `identity` values (resource name, zones...) are only filled in when
        the output holds at least one data line, so an absent stanza decodes
        to an option set with empty identity.
        """
        lines = list(split_config_output(output, self.prefix))
        return self.decode_lines(lines, options_cls, **identity)

    def decode_lines(self, lines: Iterable[str], options_cls: type, **identity: Any) -> OptionSet:
        builder = _Builder(options_cls)
        count = 0
        for line in lines:
            count += 1
            self._feed(builder, line, line)
        if count:
            builder.values.update(identity)
        logger.debug(f"Decoded {count} line(s) into {options_cls.__name__}")
        return builder.build()

    @staticmethod
    def _candidates(options_cls: type) -> Iterable[Field]:
        for fld in options_cls.LAYOUT:
            yield fld
            if isinstance(fld, Template):
                yield from fld.reads

    def _resolve(self, options_cls: type, text: str) -> tuple[Optional[Field], Optional[str]]:
        best: Optional[Field] = None
        best_rest: Optional[str] = None
        for fld in self._candidates(options_cls):
            rest = fld.match(text)
            if rest is None:
                continue
            if best is None or len(fld.keyword) > len(best.keyword):
                best, best_rest = fld, rest
        return best, best_rest

    def _feed(self, builder: _Builder, text: str, line: str) -> None:
        fld, rest = self._resolve(builder.options_cls, text)
        if fld is None:
            logger.debug(f"Ignoring unknown line for {builder.options_cls.__name__}: {line}")
            return

        if isinstance(fld, Flag):
            builder.values[fld.attr] = True
        elif isinstance(fld, Template):
            builder.values.update(fld.parse(text, line))
        elif isinstance(fld, Values):
            builder.append(fld, fld.parse(rest, line))
        elif isinstance(fld, Block):
            sub = builder.block(fld)
            if rest:
                self._feed(sub, rest, line)
        elif isinstance(fld, Blocks):
            key = []
            for k in fld.options.KEYS:
                value, rest = k.parse(rest, line)
                key.append(value)
            entry = builder.keyed(fld).get(tuple(key))
            if rest:
                self._feed(entry, rest, line)
        else:
            builder.values[fld.attr] = fld.parse(rest, line)

        builder.values.update(fld.implies)
