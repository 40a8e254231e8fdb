"""Option set -> set-line encoder."""
import logging
from typing import Optional

from .errors import ValidationError
from .fields import Block, Blocks, Flag, Template, Values, describe_keys, render_keys
from .schema import OptionSet
from .validator import ConfigValidator

logger = logging.getLogger(__name__)


class SetLineEncoder:
    """Serialize option sets into ordered `set ...` lines.

    Usage:
        encoder = SetLineEncoder()
        lines = encoder.encode(options, 'set chassis redundancy ')
    """

    def __init__(self, validator: Optional[ConfigValidator] = None):
        self.validator = validator or ConfigValidator()

    def encode(self, options: OptionSet, set_prefix: str) -> list[str]:
        """
        Validate `options` and return its lines.

        Nothing is returned on error: validation and structural checks run
        over the whole tree before the caller sees any line.

        Raises:
            ValidationError: With every message collected for the tree
        """
        result = self.validator.validate(options)
        if not result.valid:
            raise ValidationError(result.errors)
        for warning in result.warnings:
            logger.debug(f"Encode warning: {warning}")

        if not set_prefix.endswith(" "):
            set_prefix += " "

        lines: list[str] = []
        self._emit(options, set_prefix, "", lines)
        logger.debug(f"Encoded {type(options).__name__} into {len(lines)} line(s)")
        return lines

    def _emit(self, options: OptionSet, prefix: str, path: str, lines: list[str]) -> None:
        for fld in options.LAYOUT:
            if isinstance(fld, Flag):
                if getattr(options, fld.attr):
                    lines.append(prefix + fld.keyword)

            elif isinstance(fld, Template):
                values = {attr: getattr(options, attr) for attr in fld.slots}
                if all(value is not None for value in values.values()):
                    lines.append(prefix + fld.render(values))

            elif isinstance(fld, Values):
                for value in fld.arrange(getattr(options, fld.attr)):
                    lines.append(fld.line(prefix, fld.render(value)))

            elif isinstance(fld, Block):
                self._emit_block(options, fld, prefix, path, lines)

            elif isinstance(fld, Blocks):
                self._emit_blocks(options, fld, prefix, path, lines)

            else:
                value = getattr(options, fld.attr)
                if value is None or value == "":
                    continue
                lines.append(fld.line(prefix, fld.render(value)))

    def _emit_block(
        self,
        options: OptionSet,
        fld: Block,
        prefix: str,
        path: str,
        lines: list[str]
    ) -> None:
        value = getattr(options, fld.attr)
        if value is None:
            return
        content: list[str] = []
        self._emit(value, prefix + fld.keyword + " ", f"{path}{fld.attr}.", content)
        if content:
            lines.extend(content)
        elif fld.bare:
            lines.append(prefix + fld.keyword)
        else:
            raise ValidationError(f"{path}{fld.attr} block is empty")

    def _emit_blocks(
        self,
        options: OptionSet,
        fld: Blocks,
        prefix: str,
        path: str,
        lines: list[str]
    ) -> None:
        entries = getattr(options, fld.attr)
        keys = fld.options.KEYS

        seen = set()
        for entry in entries:
            key = entry.key()
            if key in seen:
                raise ValidationError(
                    f"multiple blocks {fld.attr} with the same {describe_keys(keys, key)}"
                )
            seen.add(key)

        if not fld.ordered:
            entries = sorted(entries, key=lambda entry: render_keys(keys, entry.key()))

        for entry in entries:
            head = prefix + fld.keyword + " " + render_keys(keys, entry.key())
            content: list[str] = []
            self._emit(entry, head + " ", f"{path}{fld.attr}.", content)
            if content:
                lines.extend(content)
            elif fld.bare:
                lines.append(head)
            else:
                raise ValidationError(
                    f"{path}{fld.attr} block '{render_keys(keys, entry.key())}' is empty"
                )
