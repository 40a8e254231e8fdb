"""Option-set base class and codec result types.

In memory an unset value is always `None` (scalars and single blocks),
`False` (flags) or an empty list. The `""` / `0` / `-1` sentinels only exist
in the dict form produced by `to_dict()` and accepted by `from_dict()`.
"""
from dataclasses import dataclass, field
from typing import Any, ClassVar

from .errors import ValidationError
from .fields import Block, Blocks, Field, Flag, Key, Number, Template, Text, Values


def is_set(value: Any) -> bool:
    """Return True if a field value counts as present."""
    if value is None or value is False:
        return False
    if isinstance(value, (str, list, tuple, set, dict)) and len(value) == 0:
        return False
    return True


@dataclass
class ValidationResult:
    """Result of option-set validation."""
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class OptionSet:
    """Structured form of one configuration stanza.

    Subclasses are dataclasses whose attributes are described by:
        KEYS: identifying fields (resource path or repeated-block key)
        LAYOUT: field descriptors in emission order
        RULES: cross-field rules checked by the validator
    """
    KEYS: ClassVar[tuple[Key, ...]] = ()
    LAYOUT: ClassVar[tuple[Field, ...]] = ()
    RULES: ClassVar[tuple[Any, ...]] = ()

    def check(self) -> list[str]:
        """Hook for rules the declarative RULES cannot express."""
        return []

    def key(self) -> tuple:
        return tuple(getattr(self, k.attr) for k in self.KEYS)

    @classmethod
    def attribute_names(cls) -> list[str]:
        names = [k.name for k in cls.KEYS]
        for fld in cls.LAYOUT:
            names.extend(fld.attrs())
        return names

    def to_dict(self) -> dict[str, Any]:
        """Dict form with unset values rendered as their sentinels."""
        data: dict[str, Any] = {}
        for key in self.KEYS:
            value = getattr(self, key.attr)
            if value is None:
                value = 0 if key.kind is int else ""
            data[key.name] = value
        for fld in self.LAYOUT:
            if isinstance(fld, Template):
                for slot in fld.slots.values():
                    data[slot.attr] = _scalar_to_dict(slot, getattr(self, slot.attr))
            elif isinstance(fld, Block):
                value = getattr(self, fld.attr)
                data[fld.attr] = value.to_dict() if value is not None else None
            elif isinstance(fld, Blocks):
                data[fld.attr] = [entry.to_dict() for entry in getattr(self, fld.attr)]
            elif isinstance(fld, Values):
                data[fld.attr] = list(getattr(self, fld.attr))
            else:
                data[fld.attr] = _scalar_to_dict(fld, getattr(self, fld.attr))
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OptionSet":
        """Build an option set from its dict form.

        Sentinels map back to unset. Single blocks accept a mapping or a
        list holding at most one mapping.

        Raises:
            ValidationError: On unknown attributes or badly typed values
        """
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValidationError(f"{cls.__name__}: expected a mapping, got {type(data).__name__}")

        unknown = sorted(set(data) - set(cls.attribute_names()))
        if unknown:
            raise ValidationError(
                f"unknown attribute(s) for {cls.__name__}: {', '.join(unknown)}"
            )

        kwargs: dict[str, Any] = {}
        for key in cls.KEYS:
            if key.name in data:
                kwargs[key.attr] = _key_from_dict(key, data[key.name])
        for fld in cls.LAYOUT:
            if isinstance(fld, Template):
                for slot in fld.slots.values():
                    if slot.attr in data:
                        kwargs[slot.attr] = _scalar_from_dict(slot, data[slot.attr])
            elif fld.attr not in data:
                continue
            elif isinstance(fld, Block):
                kwargs[fld.attr] = _block_from_dict(fld, data[fld.attr])
            elif isinstance(fld, Blocks):
                items = data[fld.attr] or []
                if not isinstance(items, list):
                    raise ValidationError(f"{fld.attr}: expected a list of blocks")
                kwargs[fld.attr] = [fld.options.from_dict(item or {}) for item in items]
            elif isinstance(fld, Values):
                items = data[fld.attr] or []
                if not isinstance(items, (list, tuple, set)):
                    raise ValidationError(f"{fld.attr}: expected a list")
                kwargs[fld.attr] = [coerce(fld.attr, fld.item, item) for item in items]
            else:
                kwargs[fld.attr] = _scalar_from_dict(fld, data[fld.attr])
        return cls(**kwargs)


def _scalar_to_dict(fld: Field, value: Any) -> Any:
    if isinstance(fld, Flag):
        return bool(value)
    if isinstance(fld, Number):
        return fld.unset if value is None else value
    return "" if value is None else value


def _scalar_from_dict(fld: Field, value: Any) -> Any:
    if isinstance(fld, Flag):
        return bool(value)
    if isinstance(fld, Number):
        if value is None or value == "":
            return None
        number = coerce(fld.attr, int, value)
        return None if number == fld.unset else number
    if isinstance(fld, Text):
        if value is None or value == "":
            return None
        if not isinstance(value, str):
            raise ValidationError(f"{fld.attr}: expected a string, got {value!r}")
        return value
    return value


def _key_from_dict(key: Key, value: Any) -> Any:
    if value is None or value == "":
        return None
    return coerce(key.name, key.kind, value)


def _block_from_dict(fld: Block, value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, list):
        if len(value) == 0:
            return None
        if len(value) > 1:
            raise ValidationError(f"{fld.attr}: at most 1 block allowed, got {len(value)}")
        value = value[0]
    return fld.options.from_dict(value or {})


def coerce(attr: str, kind: type, value: Any) -> Any:
    if kind is int:
        if isinstance(value, bool):
            raise ValidationError(f"{attr}: expected an integer, got {value!r}")
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ValidationError(f"{attr}: expected an integer, got {value!r}")
    if not isinstance(value, str):
        raise ValidationError(f"{attr}: expected a string, got {value!r}")
    return value
