"""Error types raised by the set-line codec.

All three are terminal for the current operation: the caller aborts the
create/update and no partial line sequence is ever used.
"""
from typing import Optional


class CodecError(Exception):
    """Base class for codec failures."""
    pass


class ValidationError(CodecError):
    """Schema-level or cross-field rule violated before any line is emitted."""

    def __init__(self, errors: list[str] | str):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class ParseError(CodecError):
    """A known line carried a value that could not be converted."""

    def __init__(self, message: str, line: Optional[str] = None):
        self.line = line
        super().__init__(message)


class StructuralError(CodecError):
    """A known line did not have the tokens its keyword requires."""

    def __init__(self, message: str, line: Optional[str] = None):
        self.line = line
        super().__init__(message)
