# src/cmdlang_shell/core/utils/text_utils.py
import re
from typing import Any, List, Union

_QUOTES = ('"', "'", "`")
_ESCAPED_QUOTE_PATTERN = re.compile(r"\\([\"'`])")
_NUMBER_PATTERN = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$|^0[xX][0-9a-fA-F]+$")
_INT_PATTERN = re.compile(r"^[+-]?\d+(?:\.0*)?$")


def trim_quotes(text: str) -> str:
    """Strips whitespace and one pair of matching surrounding quotes."""
    stripped = text.strip()
    if len(stripped) >= 2 and stripped[0] in _QUOTES and stripped[-1] == stripped[0]:
        return stripped[1:-1].strip()
    return stripped


def unescape_quotes(text: str) -> str:
    return _ESCAPED_QUOTE_PATTERN.sub(r"\1", text)


def split_and_trim(text: str, separator: str = ",") -> List[str]:
    return [item.strip() for item in text.split(separator)]


def is_number(value: Any) -> bool:
    """True for numeric literals such as '12', '-3.5', '1e3' or '0x1F'."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    return isinstance(value, str) and bool(_NUMBER_PATTERN.match(value.strip()))


def is_integer(value: Any) -> bool:
    """True when the value is an integral number or a string that parses cleanly as one."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, float):
        return value.is_integer()
    return isinstance(value, str) and bool(_INT_PATTERN.match(value.strip()))


def to_number(text: str) -> Union[int, float]:
    """Converts a numeric literal, keeping integral values as int."""
    stripped = text.strip()
    if stripped.lower().startswith(("0x", "+0x", "-0x")):
        return int(stripped, 16)
    if not any(c in stripped for c in ".eE"):
        return int(stripped)
    return float(stripped)
