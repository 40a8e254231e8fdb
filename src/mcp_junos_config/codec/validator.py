"""Pre-flight validation for option sets.

Catches schema and cross-field errors before any line is emitted. The
helper functions raise `ValidationError`; `ConfigValidator` runs every
check over a whole option-set tree and collects the messages.
"""
import re
from typing import Any, Optional

from .errors import ValidationError
from .fields import Block, Blocks, Field, Flag, Key, Number, Template, Text, Values
from .schema import OptionSet, ValidationResult, is_set


# === Helpers ===

def required_with(options: OptionSet, attr: str, other: str, message: Optional[str] = None) -> None:
    """Fail if `attr` is set while `other` is not."""
    if is_set(getattr(options, attr)) and not is_set(getattr(options, other)):
        raise ValidationError(message or f"{other} must be set with {attr}")


def conflicts_with(options: OptionSet, attr: str, other: str, message: Optional[str] = None) -> None:
    """Fail if both `attr` and `other` are set."""
    if is_set(getattr(options, attr)) and is_set(getattr(options, other)):
        raise ValidationError(message or f"{attr} conflicts with {other}")


def exactly_one_of(options: OptionSet, *attrs: str, message: Optional[str] = None) -> None:
    """Fail unless exactly one of `attrs` is set."""
    present = [attr for attr in attrs if is_set(getattr(options, attr))]
    if len(present) != 1:
        raise ValidationError(
            message or f"exactly one of {', '.join(attrs)} must be set, got {len(present)}"
        )


def at_least_one_of(options: OptionSet, *attrs: str, message: Optional[str] = None) -> None:
    """Fail if none of `attrs` is set."""
    if not any(is_set(getattr(options, attr)) for attr in attrs):
        raise ValidationError(message or f"at least one of {', '.join(attrs)} must be set")


def string_in_slice(value: str, allowed: tuple[str, ...], name: str) -> None:
    """Fail if `value` is not one of `allowed`."""
    if value not in allowed:
        raise ValidationError(f"expected {name} to be one of {list(allowed)}, got {value}")


def int_between(value: int, lo: int, hi: int, name: str) -> None:
    """Fail if `value` is outside [lo, hi]."""
    if value < lo or value > hi:
        raise ValidationError(f"expected {name} to be in the range ({lo} - {hi}), got {value}")


def string_match(value: str, pattern: re.Pattern, name: str) -> None:
    if not pattern.search(value):
        raise ValidationError(f"invalid value for {name} ({value}): must match {pattern.pattern}")


# === Declarative rules ===

class Rule:
    """Cross-field rule attached to an option set's RULES.

    Messages may reference option-set attributes, e.g. `'{name}' policy`.
    """

    def __init__(self, *attrs: str, message: Optional[str] = None):
        self.attrs = attrs
        self.message = message

    def format_message(self, options: OptionSet) -> Optional[str]:
        if self.message is None:
            return None
        return self.message.format_map(vars(options))

    def apply(self, options: OptionSet) -> None:
        raise NotImplementedError


class RequiredWith(Rule):
    def apply(self, options: OptionSet) -> None:
        attr, other = self.attrs
        required_with(options, attr, other, self.format_message(options))


class ConflictsWith(Rule):
    def apply(self, options: OptionSet) -> None:
        attr, other = self.attrs
        conflicts_with(options, attr, other, self.format_message(options))


class ExactlyOneOf(Rule):
    def apply(self, options: OptionSet) -> None:
        exactly_one_of(options, *self.attrs, message=self.format_message(options))


class AtLeastOneOf(Rule):
    def apply(self, options: OptionSet) -> None:
        at_least_one_of(options, *self.attrs, message=self.format_message(options))


# === Validator ===

class ConfigValidator:
    """Validate an option-set tree for schema and cross-field errors."""

    def validate(self, options: OptionSet) -> ValidationResult:
        """
        Validate an option set and everything nested in it.

        Checks:
        - required keys and fields
        - choices, patterns and integer ranges
        - values spread over one line set together
        - repeated-block counts
        - declarative RULES and the `check()` hook

        Args:
            options: The option set to validate

        Returns:
            ValidationResult with valid flag, errors, and warnings
        """
        errors: list[str] = []
        warnings: list[str] = []

        self._validate_set(options, "", errors, warnings)

        return ValidationResult(
            valid=len(errors) == 0,
            errors=errors,
            warnings=warnings,
        )

    def _validate_set(
        self,
        options: OptionSet,
        path: str,
        errors: list[str],
        warnings: list[str]
    ) -> None:
        for key in options.KEYS:
            self._run(errors, self._check_key, key, getattr(options, key.attr), path)

        for fld in options.LAYOUT:
            if isinstance(fld, Template):
                self._validate_template(options, fld, path, errors)
            elif isinstance(fld, Block):
                self._validate_block(options, fld, path, errors, warnings)
            elif isinstance(fld, Blocks):
                self._validate_blocks(options, fld, path, errors, warnings)
            elif isinstance(fld, Values):
                self._validate_values(options, fld, path, errors, warnings)
            else:
                self._run(errors, self._check_scalar, fld, getattr(options, fld.attr), path)

        for rule in options.RULES:
            self._run(errors, rule.apply, options)

        errors.extend(options.check())

    def _run(self, errors: list[str], check: Any, *args: Any) -> None:
        try:
            check(*args)
        except ValidationError as e:
            errors.extend(e.errors)

    def _check_key(self, key: Key, value: Any, path: str) -> None:
        name = path + key.attr
        if value is None or value == "":
            raise ValidationError(f"missing required argument {name}")
        if key.choices:
            string_in_slice(value, key.choices, name)
        if key.between and isinstance(value, int):
            int_between(value, key.between[0], key.between[1], name)

    def _check_scalar(self, fld: Field, value: Any, path: str) -> None:
        name = path + fld.attr
        if isinstance(fld, Flag):
            return
        if value is None:
            if getattr(fld, "required", False):
                raise ValidationError(f"missing required argument {name}")
            return
        if isinstance(fld, Number):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValidationError(f"expected {name} to be an integer, got {value!r}")
            if fld.between:
                int_between(value, fld.between[0], fld.between[1], name)
        elif isinstance(fld, Text):
            if not isinstance(value, str):
                raise ValidationError(f"expected {name} to be a string, got {value!r}")
            if fld.choices:
                string_in_slice(value, fld.choices, name)
            if fld.pattern:
                string_match(value, fld.pattern, name)

    def _validate_template(
        self,
        options: OptionSet,
        fld: Template,
        path: str,
        errors: list[str]
    ) -> None:
        slots = list(fld.slots.values())
        present = [slot.attr for slot in slots if getattr(options, slot.attr) is not None]
        if present and len(present) != len(slots):
            missing = [slot.attr for slot in slots if slot.attr not in present]
            errors.append(
                f"{path}{' and '.join(missing)} must be set with {path}{' and '.join(present)}"
            )
            return
        for slot in slots:
            self._run(errors, self._check_scalar, slot, getattr(options, slot.attr), path)

    def _validate_values(
        self,
        options: OptionSet,
        fld: Values,
        path: str,
        errors: list[str],
        warnings: list[str]
    ) -> None:
        name = path + fld.attr
        values = getattr(options, fld.attr)
        if fld.required and not values:
            errors.append(f"{name}: 1 minimum item must be set")
            return
        for value in values:
            if fld.item is int and fld.between:
                self._run(errors, int_between, value, fld.between[0], fld.between[1], name)
            elif fld.item is str and value == "":
                errors.append(f"{name}: empty value not allowed")
        if not fld.ordered and len(set(values)) != len(values):
            warnings.append(f"{name} has duplicate values, they will be merged")

    def _validate_block(
        self,
        options: OptionSet,
        fld: Block,
        path: str,
        errors: list[str],
        warnings: list[str]
    ) -> None:
        value = getattr(options, fld.attr)
        if value is None:
            if fld.required:
                errors.append(f"missing required block {path}{fld.attr}")
            return
        self._validate_set(value, f"{path}{fld.attr}.", errors, warnings)

    def _validate_blocks(
        self,
        options: OptionSet,
        fld: Blocks,
        path: str,
        errors: list[str],
        warnings: list[str]
    ) -> None:
        entries = getattr(options, fld.attr)
        if fld.required and not entries:
            errors.append(f"{path}{fld.attr}: 1 minimum block must be set")
        if fld.max_items is not None and len(entries) > fld.max_items:
            errors.append(
                f"{path}{fld.attr}: too many blocks ({len(entries)}), maximum is {fld.max_items}"
            )
        for entry in entries:
            self._validate_set(entry, f"{path}{fld.attr}.", errors, warnings)
