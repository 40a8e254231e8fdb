"""Decoder for Junos `$9$` reversible secrets.

Junos stores RADIUS secrets and similar values as `$9$...` strings. The
scheme is a keyed substitution over a 65-character alphabet: each output
byte is spread over a small group of characters whose alphabet distances
are weighted by a rotating table of multipliers.
"""
from .errors import ParseError

MAGIC = "$9$"

FAMILY = [
    "QzF3n6/9CAtpu0O",
    "B1IREhcSyrleKvMW8LXx",
    "7N-dVbwsY2g4oaJZGUDj",
    "iHkq.mPf5T",
]

# Number of random characters following the first one
EXTRA = {char: 3 - index for index, family in enumerate(FAMILY) for char in family}

NUM_ALPHA = "".join(FAMILY)
ALPHA_NUM = {char: index for index, char in enumerate(NUM_ALPHA)}

ENCODING = [
    [1, 4, 32],
    [1, 16, 32],
    [1, 8, 32],
    [1, 64],
    [1, 32],
    [1, 4, 16, 128],
    [1, 32, 64],
]


def is_encoded(value: str) -> bool:
    return value.startswith(MAGIC)


def decode_secret(value: str) -> str:
    """Return the clear text of a `$9$` secret.

    Values without the `$9$` prefix are returned unchanged.

    Raises:
        ParseError: If the encoded value is truncated or uses characters
            outside the alphabet
    """
    if not is_encoded(value):
        return value

    chars = value[len(MAGIC):]
    if not chars:
        raise ParseError(f"failed to decode secret '{value}': no data", line=value)

    first = chars[0]
    if first not in EXTRA:
        raise ParseError(f"failed to decode secret '{value}': invalid character '{first}'", line=value)
    if len(chars) < 1 + EXTRA[first]:
        raise ParseError(f"failed to decode secret '{value}': truncated salt", line=value)
    chars = chars[1 + EXTRA[first]:]

    prev = first
    decoded = []
    while chars:
        decode = ENCODING[len(decoded) % len(ENCODING)]
        nibble, chars = chars[:len(decode)], chars[len(decode):]
        if len(nibble) != len(decode):
            raise ParseError(f"failed to decode secret '{value}': truncated data", line=value)

        total = 0
        for char, weight in zip(nibble, decode):
            if char not in ALPHA_NUM:
                raise ParseError(
                    f"failed to decode secret '{value}': invalid character '{char}'", line=value
                )
            gap = (ALPHA_NUM[char] - ALPHA_NUM[prev]) % len(NUM_ALPHA) - 1
            total += gap * weight
            prev = char
        decoded.append(chr(total % 256))

    return "".join(decoded)
