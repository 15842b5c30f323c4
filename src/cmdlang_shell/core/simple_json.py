# src/cmdlang_shell/core/simple_json.py
"""
Relaxed "simple JSON" literal dialect.

Input:
    name=Test street='The Street' number=12
Output:
    {'name': 'Test', 'street': 'The Street', 'number': 12}

Values can be nested by quoting a whole `key=value ...` sequence (inner quotes
escaped with a backslash). Literal JSON arrays/objects and bare scalars are
accepted too; single quotes are read as double quotes.
"""
import json
import re
from typing import Any

from cmdlang_shell.core.utils.text_utils import is_integer, to_number, trim_quotes, unescape_quotes

# key=value | key='quoted value' | key="quoted value" | key=`quoted value`
SIMPLE_JSON_PATTERN = re.compile(
    r"""([^=\s]+)\s?=\s?((["'`])(?:\\.|(?!\3).)*\3|\S+)""",
    re.DOTALL,
)
_UNESCAPED_SINGLE_QUOTE = re.compile(r"(?<!\\)'")


def looks_like_simple_json(text: str) -> bool:
    return SIMPLE_JSON_PATTERN.search(text) is not None


def _sanitize(text: str) -> str:
    """Replaces unescaped single quotes with double quotes."""
    return _UNESCAPED_SINGLE_QUOTE.sub('"', text)


def coerce_value(value: str) -> Any:
    """Integer if possible, then (simple) JSON, otherwise the string itself."""
    if is_integer(value):
        return int(to_number(value))
    try:
        parsed = simple_to_json(value)
    except ValueError:
        return value
    return value if parsed is None else parsed


def simple_to_json(text: str) -> Any:
    """
    Parses a simple JSON string.

    Raises:
        ValueError: when the text is neither valid JSON nor a `key=value` sequence.
    """
    try:
        return json.loads(_sanitize(text))
    except ValueError:
        matches = list(SIMPLE_JSON_PATTERN.finditer(text))
        if text[:1] in ("[", "{") or not matches:
            raise

    obj = {}
    for match in matches:
        raw_value = unescape_quotes(trim_quotes(match.group(2)))
        obj[match.group(1)] = coerce_value(raw_value)
    return obj
