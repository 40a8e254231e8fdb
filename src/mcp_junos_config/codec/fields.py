"""Field descriptors binding option-set attributes to CLI keyword paths.

An option set declares its fields once, in emission order:

    LAYOUT = (
        Number("keepalive_time", "keepalive-time", between=(2, 10000)),
        Flag("graceful_switchover", "graceful-switchover"),
        Blocks("routing_engine", "routing-engine", RoutingEngine, ordered=False),
    )

The encoder, decoder and validator all read these tables; none of them knows
anything about a particular resource.
"""
import re
from typing import Any, Optional

from .errors import ParseError, StructuralError
from .lines import first_element, quote, split_elements, unquote
from .secrets import decode_secret


def _to_int(token: str, line: str) -> int:
    try:
        return int(token)
    except ValueError as e:
        raise ParseError(f"failed to convert value from '{line}' to integer : {e}", line=line)


class Field:
    """Base descriptor.

    Args:
        attr: Attribute name on the option set
        keyword: CLI tokens written after the current prefix; an empty
            keyword marks a positional value
        implies: Attributes set alongside this one when it is decoded
    """

    def __init__(self, attr: str, keyword: str = "", implies: Optional[dict] = None):
        self.attr = attr
        self.keyword = keyword
        self.implies = implies or {}

    def attrs(self) -> tuple[str, ...]:
        return (self.attr,)

    def match(self, text: str) -> Optional[str]:
        """Return what follows this field's keyword in `text`, or None."""
        if not self.keyword:
            return text or None
        if text.startswith(self.keyword + " "):
            return text[len(self.keyword) + 1:]
        return None

    def render(self, value: Any) -> str:
        return str(value)

    def parse(self, token: str, line: str) -> Any:
        return unquote(token)

    def line(self, prefix: str, rendered: str) -> str:
        if not self.keyword:
            return prefix + rendered
        return prefix + self.keyword + " " + rendered

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.attr!r}, {self.keyword!r})"


class Flag(Field):
    """Boolean written as its bare keyword when true."""

    def match(self, text: str) -> Optional[str]:
        return "" if text == self.keyword else None


class Text(Field):
    """String value, optionally quoted, restricted or pattern-checked."""

    def __init__(
        self,
        attr: str,
        keyword: str = "",
        quoted: bool = False,
        choices: Optional[tuple[str, ...]] = None,
        pattern: Optional[str] = None,
        secret: bool = False,
        required: bool = False,
        implies: Optional[dict] = None,
    ):
        super().__init__(attr, keyword, implies)
        self.quoted = quoted
        self.choices = choices
        self.pattern = re.compile(pattern) if pattern else None
        self.secret = secret
        self.required = required

    def match(self, text: str) -> Optional[str]:
        rest = super().match(text)
        if rest is None:
            return None
        if self.choices and unquote(rest) not in self.choices:
            return None
        return rest

    def render(self, value: str) -> str:
        return quote(value) if self.quoted else value

    def parse(self, token: str, line: str) -> str:
        value = unquote(token)
        if self.secret:
            return decode_secret(value)
        return value


class Number(Field):
    """Integer value.

    `unset` is the sentinel used for this field outside the in-memory model:
    0 for most integers, -1 where 0 is a legitimate value.
    """

    def __init__(
        self,
        attr: str,
        keyword: str = "",
        between: Optional[tuple[int, int]] = None,
        unset: int = 0,
        required: bool = False,
        implies: Optional[dict] = None,
    ):
        super().__init__(attr, keyword, implies)
        self.between = between
        self.unset = unset
        self.required = required

    def render(self, value: int) -> str:
        return str(value)

    def parse(self, token: str, line: str) -> int:
        return _to_int(token, line)


class Values(Field):
    """List of values, one line per item.

    Unordered lists behave as sets: duplicates collapse and items are
    written in sorted order.
    """

    def __init__(
        self,
        attr: str,
        keyword: str,
        quoted: bool = False,
        ordered: bool = False,
        item: type = str,
        between: Optional[tuple[int, int]] = None,
        required: bool = False,
        implies: Optional[dict] = None,
    ):
        super().__init__(attr, keyword, implies)
        self.quoted = quoted
        self.ordered = ordered
        self.item = item
        self.between = between
        self.required = required

    def arrange(self, values: list) -> list:
        if self.ordered:
            return list(values)
        return sorted(set(values))

    def render(self, value: Any) -> str:
        text = str(value)
        return quote(text) if self.quoted else text

    def parse(self, token: str, line: str) -> Any:
        value = unquote(token)
        if self.item is int:
            return _to_int(value, line)
        return value


class Template(Field):
    """Several values written together on one line.

    Slots are `{attr}` placeholders bound to positional Text/Number fields:

        Template("retry count {retry_count} interval {retry_interval}",
                 Number("retry_count", unset=-1),
                 Number("retry_interval", unset=-1),
                 reads=(Number("retry_count", "retry count"),
                        Number("retry_interval", "retry interval")))

    The device may print each slot on its own line; `reads` are the fields
    matching those lines. They are only used for decoding.
    """

    def __init__(
        self,
        pattern: str,
        *slots: Field,
        reads: tuple[Field, ...] = (),
        implies: Optional[dict] = None,
    ):
        self.pattern = pattern
        self.tokens = pattern.split(" ")
        literal = []
        for token in self.tokens:
            if token.startswith("{"):
                break
            literal.append(token)
        self.slots = {slot.attr: slot for slot in slots}
        self.reads = tuple(reads)
        super().__init__(slots[0].attr, " ".join(literal), implies)

    def attrs(self) -> tuple[str, ...]:
        return tuple(self.slots)

    def match(self, text: str) -> Optional[str]:
        """Match only the complete one-line form."""
        elements = split_elements(text)
        if len(elements) != len(self.tokens):
            return None
        for token, element in zip(self.tokens, elements):
            if not token.startswith("{") and token != element:
                return None
        return text

    def render(self, values: dict[str, Any]) -> str:
        out = []
        for token in self.tokens:
            if token.startswith("{"):
                slot = self.slots[token[1:-1]]
                out.append(slot.render(values[slot.attr]))
            else:
                out.append(token)
        return " ".join(out)

    def parse(self, text: str, line: str) -> dict[str, Any]:
        """Read every slot from the full `text` this template matched."""
        elements = split_elements(text)
        if len(elements) != len(self.tokens):
            raise StructuralError(
                f"can't read values for {' and '.join(self.slots)} in '{line}'", line=line
            )
        values = {}
        for token, element in zip(self.tokens, elements):
            if token.startswith("{"):
                slot = self.slots[token[1:-1]]
                values[slot.attr] = slot.parse(element, line)
            elif token != element:
                raise StructuralError(
                    f"can't read values for {' and '.join(self.slots)} in '{line}'", line=line
                )
        return values


class Block(Field):
    """Single nested option set (cardinality 0 or 1).

    A `bare` block writes its keyword alone when it has no content; any
    other block without content is rejected as empty.
    """

    def __init__(
        self,
        attr: str,
        keyword: str,
        options: type,
        bare: bool = False,
        required: bool = False,
        implies: Optional[dict] = None,
    ):
        super().__init__(attr, keyword, implies)
        self.options = options
        self.bare = bare
        self.required = required

    def match(self, text: str) -> Optional[str]:
        if text == self.keyword:
            return ""
        return super().match(text)


class Blocks(Field):
    """Repeated nested option sets identified by the nested `KEYS`.

    Ordered blocks keep their input order; unordered ones are written
    sorted by key.
    """

    def __init__(
        self,
        attr: str,
        keyword: str,
        options: type,
        ordered: bool = True,
        bare: bool = False,
        max_items: Optional[int] = None,
        required: bool = False,
        implies: Optional[dict] = None,
    ):
        super().__init__(attr, keyword, implies)
        self.options = options
        self.ordered = ordered
        self.bare = bare
        self.max_items = max_items
        self.required = required


class Key:
    """Identifying token of a repeated block or of a resource path.

    `keyword` is an inline label written before the value, as in
    `upload filename "f" destination "d"`. `name` is the key used in the
    dict form when the attribute name differs from it (`from_` vs `from`).
    """

    def __init__(
        self,
        attr: str,
        keyword: str = "",
        kind: type = str,
        quoted: bool = False,
        between: Optional[tuple[int, int]] = None,
        choices: Optional[tuple[str, ...]] = None,
        name: Optional[str] = None,
    ):
        self.attr = attr
        self.name = name or attr
        self.keyword = keyword
        self.kind = kind
        self.quoted = quoted
        self.between = between
        self.choices = choices

    def render(self, value: Any) -> str:
        token = quote(str(value)) if self.quoted else str(value)
        if self.keyword:
            return f"{self.keyword} {token}"
        return token

    def parse(self, text: str, line: str) -> tuple[Any, str]:
        """Read this key from the start of `text`.

        Returns:
            Tuple of (value, remainder)
        """
        rest = text
        if self.keyword:
            label, rest = first_element(rest)
            if label != self.keyword:
                raise StructuralError(f"can't find {self.keyword} in '{line}'", line=line)
        token, rest = first_element(rest)
        if not token:
            raise StructuralError(f"can't read values for {self.attr} in '{line}'", line=line)
        value = unquote(token)
        if self.kind is int:
            return _to_int(value, line), rest
        return value, rest

    def __repr__(self) -> str:
        return f"Key({self.attr!r})"


def render_keys(keys: tuple[Key, ...], values: tuple) -> str:
    return " ".join(key.render(value) for key, value in zip(keys, values))


def describe_keys(keys: tuple[Key, ...], values: tuple) -> str:
    """Human form of a key tuple: `slot '0'`, `from 'a', compare 'b' and to 'c'`."""
    parts = [f"{key.name} '{value}'" for key, value in zip(keys, values)]
    if len(parts) == 1:
        return parts[0]
    return ", ".join(parts[:-1]) + " and " + parts[-1]
