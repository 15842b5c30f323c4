# src/cmdlang_shell/core/parser.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Collection, List, NamedTuple, Optional, Tuple

from cmdlang_shell.core.lexer import CommandLookup, Token, TokenKind, Tokenizer, lex
from cmdlang_shell.core.utils.text_utils import is_number, to_number, trim_quotes

logger = logging.getLogger(__name__)


class Opcode(Enum):
    LOAD_NAME = 1
    LOAD_ARGUMENT = 2
    LOAD_CONSTANT = 3
    LOAD_SUB_EVAL = 4
    STORE_NAME = 5
    CONCAT = 6
    CALL_FUNCTION = 7
    RETURN_VALUE = 8
    LOAD_DATA_ATTRIBUTE = 9


# Opcodes that consume an entry of the values queue
VALUE_OPCODES = frozenset({Opcode.LOAD_CONSTANT, Opcode.LOAD_SUB_EVAL})
# Opcodes that leave exactly one value on the active frame
OPERAND_OPCODES = frozenset({
    Opcode.LOAD_NAME, Opcode.LOAD_CONSTANT, Opcode.LOAD_SUB_EVAL,
    Opcode.LOAD_DATA_ATTRIBUTE, Opcode.CALL_FUNCTION,
})
_CONSTANT_KINDS = frozenset({
    TokenKind.NUMBER, TokenKind.STRING, TokenKind.VALUE, TokenKind.ARRAY,
    TokenKind.DICTIONARY, TokenKind.DICTIONARY_SIMPLE,
})


class Instruction(NamedTuple):
    opcode: Opcode
    token_index: Optional[int]


@dataclass
class ParseResult:
    """
    Output of a single parsing pass.

    `instructions` is a flat program; `names`, `arguments` and `values` are
    consumed in FIFO order by the instructions that need them (LOAD_NAME,
    LOAD_ARGUMENT and LOAD_CONSTANT/LOAD_SUB_EVAL). STORE_NAME reads its target
    from the token it points at. The interpreter works on copies, so a
    ParseResult can be inspected (or evaluated) more than once.
    """
    input_raw: str
    tokens: List[Token]
    instructions: List[Instruction] = field(default_factory=list)
    names: List[str] = field(default_factory=list)
    arguments: List[str] = field(default_factory=list)
    values: List[Any] = field(default_factory=list)

    def queues(self) -> Tuple[List[str], List[str], List[Any]]:
        """Fresh copies of the side queues for one evaluation."""
        return list(self.names), list(self.arguments), list(self.values)

    def token_at(self, token_index: Optional[int]) -> Optional[Token]:
        if token_index is None or not 0 <= token_index < len(self.tokens):
            return None
        return self.tokens[token_index]

    def store_target(self, token_index: Optional[int]) -> Optional[str]:
        token = self.token_at(token_index)
        if token is None:
            return None
        return str(token.value)


def _literal(token: Token) -> Any:
    if token.kind is TokenKind.NUMBER:
        return to_number(token.value)
    return token.value


def parse(
    data: str,
    registered_names: Optional[Collection[str]] = None,
    registered_cmds: Optional[CommandLookup] = None,
    tokenizer: Optional[Tokenizer] = None,
) -> ParseResult:
    """
    Builds the instruction stack for the given input in a single pass.

    The parse itself has no side effects: it can be used for introspection
    (e.g. caret-aware completion) as often as needed.

    Args:
        data (str): The raw input.
        registered_names: Known variable names (for token classification).
        registered_cmds: The command registry (canonical name resolution).
        tokenizer (Tokenizer): Optional custom tokenizer.

    Returns:
        ParseResult: Tokens, instructions and side queues.
    """
    result = ParseResult(
        input_raw=data,
        tokens=lex(data, registered_names, registered_cmds, tokenizer),
    )
    instructions = result.instructions
    tokens_len = len(result.tokens)

    in_command = False
    in_statement = False
    command_token_index = -1
    # '+' waits until its right operand (with any [key] suffix) is complete
    pending_concat: Optional[int] = None
    operand_ready = False
    # Assignment target, stored once the right hand side has been computed
    pending_store = False
    store_index: Optional[int] = None

    def _flush_concat() -> None:
        nonlocal pending_concat
        if pending_concat is not None:
            instructions.append(Instruction(Opcode.CONCAT, pending_concat))
            pending_concat = None

    def _close_statement() -> None:
        _flush_concat()
        if in_command:
            instructions.append(Instruction(Opcode.CALL_FUNCTION, command_token_index))
        if pending_store:
            instructions.append(Instruction(Opcode.STORE_NAME, store_index))
        if in_statement:
            instructions.append(Instruction(Opcode.RETURN_VALUE, None))

    for index, token in enumerate(result.tokens):
        kind = token.kind
        if kind is TokenKind.DELIMITER:
            _close_statement()
            in_command = in_statement = operand_ready = False
            pending_store = False
            continue

        in_statement = True
        if operand_ready and kind is not TokenKind.DATA_ATTRIBUTE:
            _flush_concat()

        if kind is TokenKind.NAME:
            canonical = registered_cmds.canonical_name(token.value) if registered_cmds else None
            if not in_command and canonical is not None:
                in_command = True
                command_token_index = index
            result.names.append(canonical or token.value)
            instructions.append(Instruction(Opcode.LOAD_NAME, index))
            operand_ready = True
        elif kind in (TokenKind.ARGUMENT_SHORT, TokenKind.ARGUMENT_LONG):
            result.arguments.append(token.value)
            instructions.append(Instruction(Opcode.LOAD_ARGUMENT, index))
            operand_ready = False
        elif kind is TokenKind.BINARY_ADD:
            # A '+' without right operand still emits its CONCAT (fails at runtime)
            _flush_concat()
            pending_concat = index
            operand_ready = False
        elif kind in _CONSTANT_KINDS:
            result.values.append(_literal(token))
            instructions.append(Instruction(Opcode.LOAD_CONSTANT, index))
            operand_ready = True
        elif kind is TokenKind.SUB_EVAL:
            result.values.append(token.value)
            instructions.append(Instruction(Opcode.LOAD_SUB_EVAL, index))
            operand_ready = True
        elif kind is TokenKind.ASSIGNMENT:
            last = instructions[-1] if instructions else None
            if last is not None and (last.opcode is Opcode.LOAD_NAME or last.opcode in VALUE_OPCODES):
                # The value just loaded is the target, not an operand
                instructions.pop()
                if last.opcode is Opcode.LOAD_NAME:
                    result.names.pop()
                    if in_command and last.token_index == command_token_index:
                        in_command = False
                else:
                    result.values.pop()
                store_index = last.token_index
            else:
                # No target: STORE_NAME points at the "=" and fails at runtime
                store_index = index
            pending_store = True
            operand_ready = False
        elif kind is TokenKind.DATA_ATTRIBUTE:
            key = token.value
            if key[:1] in ('"', "'") or is_number(key):
                result.values.append(trim_quotes(key))
                instructions.append(Instruction(Opcode.LOAD_CONSTANT, index))
            else:
                result.names.append(key)
                instructions.append(Instruction(Opcode.LOAD_NAME, index))
            instructions.append(Instruction(Opcode.LOAD_DATA_ATTRIBUTE, index))
        else:  # pragma: no cover - every TokenKind is handled above
            raise AssertionError(f"Unhandled token kind {kind}")

    if tokens_len and result.tokens[-1].kind is not TokenKind.DELIMITER:
        _close_statement()

    logger.debug("Parsed %d tokens into %d instructions", tokens_len, len(instructions))
    return result
