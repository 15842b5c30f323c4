# src/cmdlang_shell/core/lexer.py
from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Collection, Iterator, List, NamedTuple, Optional, Pattern, Protocol

from pydantic import BaseModel, ConfigDict

from cmdlang_shell.core.errors import LexError
from cmdlang_shell.core.simple_json import looks_like_simple_json
from cmdlang_shell.core.utils.text_utils import is_number, trim_quotes

logger = logging.getLogger(__name__)

DELIMITERS = (";", "\n")
ARGUMENT_PREFIX = "-"
BINARY_ADD = "+"
ASSIGNMENT = "="
VARIABLE = "$"
SUB_EVAL_OPEN = "$("

# One composite pattern, first alternative wins. Trailing blanks (not newlines,
# those are delimiters) stay attached to the fragment.
TOKEN_PATTERN = re.compile(
    r"""(?:
        (["'`])(?:\\.|(?!\1).)*\1                               # quoted string
        |[;\n]                                                  # delimiter
        |[+=]                                                   # operators
        |\$(?:\{[^{}]*\}|\w+)                                   # $name, ${...}
        |\[[^\]]+\]+                                            # array / data attribute
        |\{[^}]+\}+                                             # dictionary
        |[\w\-.]+                                               # bare word
    )[^\S\n]*""",
    re.VERBOSE | re.DOTALL,
)
# '//' comments, only when they start a line or follow a blank (keeps 'http://...')
COMMENT_PATTERN = re.compile(r"(?:^|(?<=\s))//.*$", re.MULTILINE)
_STRUCTURAL_CHARS = frozenset("\"'`[]{}()")
_QUOTE_CHARS = frozenset("\"'`")
_TRAILING_BLANKS = re.compile(r"[^\S\n]*")


class TokenKind(Enum):
    DELIMITER = 1
    BINARY_ADD = 2
    NAME = 3
    ARGUMENT_SHORT = 4
    ARGUMENT_LONG = 5
    VALUE = 6
    ASSIGNMENT = 7
    DATA_ATTRIBUTE = 8
    SUB_EVAL = 9
    ARRAY = 10
    STRING = 11
    NUMBER = 12
    DICTIONARY = 14
    DICTIONARY_SIMPLE = 15


class Token(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: TokenKind
    value: str
    raw: str
    start: int
    end: int
    index: int


class RawFragment(NamedTuple):
    text: str
    start: int
    end: int


class CommandLookup(Protocol):
    def canonical_name(self, name: str) -> Optional[str]: ...


class Tokenizer:
    """
    Splits raw input into lexical fragments.

    The only state is the comment pattern; every call to tokenize() starts
    from scratch, so the same input always yields the same fragments.
    """

    def __init__(self, comment_pattern: Optional[Pattern[str]] = COMMENT_PATTERN):
        self._comment_pattern = comment_pattern

    def strip_comments(self, data: str) -> str:
        """Blanks out comments, keeping every other character at its offset."""
        if self._comment_pattern is None:
            return data
        return self._comment_pattern.sub(lambda m: " " * len(m.group(0)), data)

    def tokenize(self, data: str) -> Iterator[RawFragment]:
        clean_data = self.strip_comments(data)
        pos = 0
        length = len(clean_data)
        while pos < length:
            if clean_data.startswith(SUB_EVAL_OPEN, pos):
                end = _TRAILING_BLANKS.match(clean_data, self._scan_sub_eval(clean_data, pos)).end()
            else:
                match = TOKEN_PATTERN.match(clean_data, pos)
                if match is None:
                    self._check_gap(clean_data, pos, pos + 1)
                    pos += 1
                    continue
                end = match.end()
            yield RawFragment(clean_data[pos:end], pos, end)
            pos = end

    @staticmethod
    def _scan_sub_eval(data: str, start: int) -> int:
        """Returns the offset just past the ')' closing the '$(' at start; quotes are skipped."""
        depth = 0
        quote: Optional[str] = None
        offset = start + 1
        while offset < len(data):
            char = data[offset]
            if quote is not None:
                if char == "\\":
                    offset += 1
                elif char == quote:
                    quote = None
            elif char in _QUOTE_CHARS:
                quote = char
            elif char == "(":
                depth += 1
            elif char == ")":
                depth -= 1
                if depth == 0:
                    return offset + 1
            offset += 1
        raise LexError(f"Unbalanced '{SUB_EVAL_OPEN}'", start, start + len(SUB_EVAL_OPEN))

    @staticmethod
    def _check_gap(data: str, start: int, end: int) -> None:
        """Characters no alternative matched: fail on quotes/brackets, drop the rest."""
        for offset in range(start, end):
            char = data[offset]
            if char in _STRUCTURAL_CHARS:
                raise LexError(f"Unbalanced '{char}'", offset, offset + 1)
            if not char.isspace():
                logger.debug("Ignoring unexpected character %r at %d", char, offset)


_DEFAULT_TOKENIZER = Tokenizer()


def tokenize(data: str) -> List[str]:
    """Returns the raw fragments of the input (comments removed)."""
    return [fragment.text for fragment in _DEFAULT_TOKENIZER.tokenize(data)]


def _classify(text: str, prev: Optional[Token], known_names: Collection[str],
              local_names: List[str], commands: Optional[CommandLookup]) -> tuple[TokenKind, str]:
    if text[0] == ARGUMENT_PREFIX and not is_number(text):
        if text[1:2] == ARGUMENT_PREFIX:
            return TokenKind.ARGUMENT_LONG, text[2:]
        return TokenKind.ARGUMENT_SHORT, text[1:]
    if text in DELIMITERS:
        return TokenKind.DELIMITER, text
    if text == BINARY_ADD:
        return TokenKind.BINARY_ADD, text
    if text == ASSIGNMENT:
        # Assignment targets are captured right away
        if prev is not None:
            local_names.append(prev.value)
        return TokenKind.ASSIGNMENT, text
    if text[0] == "[" and text[-1] == "]":
        if prev is not None and not prev.raw[-1].isspace():
            return TokenKind.DATA_ATTRIBUTE, text[1:-1].strip()
        return TokenKind.ARRAY, text
    if text[0] == "{" and text[-1] == "}":
        return TokenKind.DICTIONARY, text
    if text[0] == VARIABLE:
        if (text[1:2] == "{" and text[-1] == "}") or (text[1:2] == "(" and text[-1] == ")"):
            return TokenKind.SUB_EVAL, text[2:-1].strip()
        return TokenKind.NAME, text[1:]
    if len(text) >= 2 and text[0] in _QUOTE_CHARS and text[-1] == text[0]:
        return TokenKind.STRING, text
    if is_number(text):
        return TokenKind.NUMBER, text
    if (
        prev is None
        or prev.kind is TokenKind.DELIMITER
        or text in known_names
        or text in local_names
        or (commands is not None and commands.canonical_name(text) is not None)
    ):
        return TokenKind.NAME, text
    return TokenKind.STRING, text


def lex(
    data: str,
    registered_names: Optional[Collection[str]] = None,
    registered_cmds: Optional[CommandLookup] = None,
    tokenizer: Optional[Tokenizer] = None,
) -> List[Token]:
    """
    Classifies every raw fragment of the input into a typed Token.

    Args:
        data (str): The raw input.
        registered_names: Names of the known variables (bare words matching one are names).
        registered_cmds: Anything exposing canonical_name(); bare words that resolve are names.
        tokenizer (Tokenizer): Custom tokenizer (e.g. without comment stripping).

    Returns:
        List[Token]: Tokens in source order.
    """
    known_names = registered_names if registered_names is not None else ()
    local_names: List[str] = []
    tokens: List[Token] = []
    prev: Optional[Token] = None
    for index, fragment in enumerate((tokenizer or _DEFAULT_TOKENIZER).tokenize(data)):
        # Newlines are delimiters, so only the other blanks are trimmed
        text = fragment.text.strip(" \t\r\f\v")
        kind, value = _classify(text, prev, known_names, local_names, registered_cmds)
        if kind is TokenKind.STRING:
            value = trim_quotes(value)
            if looks_like_simple_json(value):
                kind = TokenKind.DICTIONARY_SIMPLE
        prev = Token(
            kind=kind,
            value=value,
            raw=fragment.text,
            start=fragment.start,
            end=fragment.end,
            index=index,
        )
        tokens.append(prev)
    return tokens
