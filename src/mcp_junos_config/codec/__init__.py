"""Codec - Junos set-line configuration encoder and decoder.

Translates between structured option sets and the flat `set ...` lines the
Junos CLI understands:
- Declarative field tables, one per configuration stanza
- Validation of ranges, choices and cross-field rules before emission
- Single-pass decoding of `show ... | display set relative` output
- Unknown lines are ignored so newer Junos keywords never break decoding

Usage:
    from mcp_junos_config.codec import SetLineEncoder, SetLineDecoder

    lines = SetLineEncoder().encode(options, "set chassis redundancy ")
    options = SetLineDecoder().decode(output, ChassisRedundancy)
"""

from .errors import CodecError, ValidationError, ParseError, StructuralError
from .fields import (
    Field,
    Flag,
    Text,
    Number,
    Values,
    Template,
    Block,
    Blocks,
    Key,
)
from .schema import OptionSet, ValidationResult, is_set
from .validator import (
    ConfigValidator,
    RequiredWith,
    ConflictsWith,
    ExactlyOneOf,
    AtLeastOneOf,
    required_with,
    conflicts_with,
    exactly_one_of,
    at_least_one_of,
    string_in_slice,
    int_between,
)
from .encoder import SetLineEncoder
from .decoder import SetLineDecoder, KeyedBlocks
from .lines import split_config_output, first_element, quote, unquote
from .secrets import decode_secret

__all__ = [
    # Errors
    "CodecError",
    "ValidationError",
    "ParseError",
    "StructuralError",
    # Field declarations
    "Field",
    "Flag",
    "Text",
    "Number",
    "Values",
    "Template",
    "Block",
    "Blocks",
    "Key",
    "OptionSet",
    "ValidationResult",
    "is_set",
    # Validation
    "ConfigValidator",
    "RequiredWith",
    "ConflictsWith",
    "ExactlyOneOf",
    "AtLeastOneOf",
    "required_with",
    "conflicts_with",
    "exactly_one_of",
    "at_least_one_of",
    "string_in_slice",
    "int_between",
    # Encoder / decoder
    "SetLineEncoder",
    "SetLineDecoder",
    "KeyedBlocks",
    # Line helpers
    "split_config_output",
    "first_element",
    "quote",
    "unquote",
    "decode_secret",
]
