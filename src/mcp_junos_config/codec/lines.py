"""Text helpers for the Junos set-line dialect."""
from typing import Iterator, Optional

from .errors import StructuralError

XML_START_TAG_CONFIG_OUT = "<configuration-output>"
XML_END_TAG_CONFIG_OUT = "</configuration-output>"

SET_LS = "set "
DELETE_LS = "delete "
EMPTY_OUTPUT = "empty"

CMD_SHOW_CONFIG = "show configuration "
PIPE_DISPLAY_SET_RELATIVE = " | display set relative"

ID_SEPARATOR = "_-_"


def is_empty_output(output: Optional[str]) -> bool:
    """Return True when a show command produced no configuration."""
    if output is None:
        return True
    stripped = output.strip()
    return stripped == "" or stripped == EMPTY_OUTPUT


def split_config_output(output: Optional[str], prefix: str = SET_LS) -> Iterator[str]:
    """Yield the data lines of a `display set relative` output.

    Lines holding the start marker are skipped, the end marker stops
    iteration, blank lines are dropped and `prefix` is stripped from each
    remaining line.
    """
    if output is None or is_empty_output(output):
        return
    for item in output.splitlines():
        if XML_START_TAG_CONFIG_OUT in item:
            continue
        if XML_END_TAG_CONFIG_OUT in item:
            break
        item = item.strip()
        if not item:
            continue
        if item.startswith(prefix):
            item = item[len(prefix):]
        yield item


def first_element(text: str) -> tuple[str, str]:
    """Split off the first token of `text`, honoring double quotes.

    Returns:
        Tuple of (token, remainder). A quoted token keeps its quotes.

    Raises:
        StructuralError: If a quoted token is never closed
    """
    text = text.lstrip(" ")
    if not text:
        return "", ""
    if text[0] != '"':
        token, _, rest = text.partition(" ")
        return token, rest
    i = 1
    while i < len(text):
        if text[i] == "\\":
            i += 2
            continue
        if text[i] == '"':
            return text[:i + 1], text[i + 1:].lstrip(" ")
        i += 1
    raise StructuralError(f"unterminated quoted value in '{text}'", line=text)


def split_elements(text: str) -> list[str]:
    """Split a whole line into quote-aware tokens."""
    tokens = []
    rest = text
    while rest.strip():
        token, rest = first_element(rest)
        tokens.append(token)
    return tokens


def quote(value: str) -> str:
    return '"' + value + '"'


def unquote(value: str) -> str:
    """Strip exactly one layer of surrounding double quotes."""
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        return value[1:-1]
    return value
