from __future__ import annotations

import inspect
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

from cmdlang_shell.core import parser
from cmdlang_shell.core.arguments import resolve_arguments
from cmdlang_shell.core.command_registry import CommandRegistry
from cmdlang_shell.core.context.shell_context import ShellContext
from cmdlang_shell.core.errors import (
    CommandExecutionError,
    PropertyAccessError,
    ShellError,
    UnexpectedTokenError,
    UnknownNameError,
)
from cmdlang_shell.core.generators import ParameterGenerator
from cmdlang_shell.core.lexer import Token, TokenKind, Tokenizer, lex
from cmdlang_shell.core.managers.job_manager import JobManager
from cmdlang_shell.core.parser import OPERAND_OPCODES, Instruction, Opcode, ParseResult
from cmdlang_shell.core.similarity import find_similar_command
from cmdlang_shell.core.simple_json import simple_to_json
from cmdlang_shell.core.utils.text_utils import is_integer, is_number
from cmdlang_shell.model import CommandDefinition

# $(command ...) inside a literal value
RUNNER_PATTERN = re.compile(r"^\$\((.+)\)$", re.DOTALL)
# Unresolved alias placeholders: $3 or $3[fallback]
ALIAS_PLACEHOLDER_PATTERN = re.compile(r"\$\d+(?:\[([^\]]+)\])?")
MAX_ALIAS_DEPTH = 16

# Instructions whose value belongs to a preceding flag
FLAG_VALUE_OPCODES = frozenset({Opcode.LOAD_CONSTANT, Opcode.LOAD_SUB_EVAL, Opcode.LOAD_NAME})


class AliasStore(Protocol):
    def get(self, name: str) -> Optional[str]: ...


ConfirmHook = Callable[[CommandDefinition, Dict[str, Any]], Any]


@dataclass
class Frame:
    """Scratch space of one command invocation (the root frame has no command)."""
    command: Optional[CommandDefinition] = None
    store: Dict[str, Any] = field(default_factory=dict)
    args: List[str] = field(default_factory=list)
    values: List[Any] = field(default_factory=list)


class FrameStack:
    """Root frame plus the frames of the command calls still in flight."""

    def __init__(self) -> None:
        self.root = Frame()
        self._frames: List[Frame] = []

    @property
    def top(self) -> Optional[Frame]:
        return self._frames[-1] if self._frames else None

    @property
    def current(self) -> Frame:
        """Frame receiving new values: the innermost open call, else the root."""
        return self._frames[-1] if self._frames else self.root

    def push(self, frame: Frame) -> None:
        self._frames.append(frame)

    def pop(self) -> Optional[Frame]:
        return self._frames.pop() if self._frames else None

    def __len__(self) -> int:
        return len(self._frames)


def _position(token: Optional[Token]) -> Tuple[Optional[int], Optional[int]]:
    if token is None:
        return None, None
    return token.start, token.end


def _concat(value_a: Any, value_b: Any) -> Any:
    numbers = (int, float)
    if isinstance(value_a, numbers) and isinstance(value_b, numbers) \
            and not isinstance(value_a, bool) and not isinstance(value_b, bool):
        return value_a + value_b
    if isinstance(value_a, list) and isinstance(value_b, list):
        return value_a + value_b
    return f"{'' if value_a is None else value_a}{'' if value_b is None else value_b}"


def _lookup(container: Any, key: Any) -> Any:
    """Single key/index access; missing entries give None."""
    if isinstance(container, str) and container[:1] in ("[", "{"):
        try:
            container = simple_to_json(container)
        except ValueError:
            pass
    if isinstance(container, Mapping):
        if key in container:
            return container[key]
        if is_integer(key):
            return container.get(int(float(key)), container.get(str(key)))
        return container.get(str(key))
    if isinstance(container, (list, tuple, str)):
        try:
            return container[int(key)]
        except (ValueError, TypeError, IndexError):
            return None
    return getattr(container, str(key), None)


def get_data_attribute(container: Any, key: Any) -> Any:
    """
    Resolves `container[key]`.

    A list accessed with a non numeric key plucks the key from every item
    and joins the results with commas.
    """
    if isinstance(container, (list, tuple)) and not is_number(key):
        plucked = (_lookup(item, key) for item in container)
        return ",".join("" if item is None else str(item) for item in plucked)
    return _lookup(container, key)


class ExecuteEngine:
    """
    Interpreter of the command language.

    Walks the instruction stack built by the parser against a frame stack,
    calling the registered commands. Aliases are expanded before parsing and
    `$(...)` runners are evaluated (silently) before their value is used.
    """

    def __init__(
            self,
            *,
            command_registry: CommandRegistry,
            alias_store: Optional[AliasStore] = None,
            generator: Optional[ParameterGenerator] = None,
            job_manager: Optional[JobManager] = None,
            confirm: Optional[ConfirmHook] = None,
            tokenizer: Optional[Tokenizer] = None,
            logger: Optional[logging.Logger] = None,
    ) -> None:
        self._commands = command_registry
        self._aliases = alias_store
        self._generator = generator
        self._jobs = job_manager
        self._confirm = confirm
        self._tokenizer = tokenizer
        self._log = logger or logging.getLogger(__name__)

    @property
    def commands(self) -> CommandRegistry:
        return self._commands

    @property
    def aliases(self) -> Optional[AliasStore]:
        return self._aliases

    @property
    def jobs(self) -> Optional[JobManager]:
        return self._jobs

    @property
    def generator(self) -> Optional[ParameterGenerator]:
        return self._generator

    @staticmethod
    def _known_names(ctx: Optional[ShellContext]) -> List[str]:
        return ctx.names() if ctx is not None else []

    def parse(self, raw: str, ctx: Optional[ShellContext] = None) -> ParseResult:
        """Side effect free parse, used by evaluate() and by the completer."""
        return parser.parse(
            raw,
            registered_names=self._known_names(ctx),
            registered_cmds=self._commands,
            tokenizer=self._tokenizer,
        )

    # --- Entry points ---

    async def execute(self, raw: str, ctx: ShellContext, silent: bool = False) -> Any:
        """
        Top level execution of a user submission.

        Returns the result of the only statement, or the list of results when
        the input holds several statements. In non silent mode failures are
        printed before being re-raised.
        """
        try:
            results = await self.evaluate(raw, ctx, silent=silent)
        except ShellError as e:
            if not silent:
                print(f"❌ Error: {e}")
            raise
        if len(results) == 1:
            return results[0]
        return results

    async def evaluate(
            self,
            raw: str,
            ctx: Optional[ShellContext] = None,
            silent: bool = False,
            reset_state: bool = True,
            alias_depth: int = 0,
    ) -> List[Any]:
        """
        Evaluates every statement of `raw`.

        Args:
            raw (str): Input text; statements are separated by ';' or newlines.
            ctx (ShellContext): Session holding the named value table.
            silent (bool): No output and no suggestions for unknown names.
            reset_state (bool): Reset the generator counters first.
            alias_depth (int): Nesting level of alias expansion.

        Returns:
            List[Any]: One result per statement, in source order.
        """
        if ctx is None:
            ctx = ShellContext(engine=self)
        silent = silent or ctx.silent
        if reset_state and self._generator is not None:
            self._generator.reset_stores()

        expansion = self.expand_alias(raw, ctx)
        if expansion is not None:
            if alias_depth >= MAX_ALIAS_DEPTH:
                raise UnexpectedTokenError("Alias expansion is too deep (recursive alias?)")
            alias_cmd, rest = expansion
            self._log.debug("Alias expanded to: %s", alias_cmd)
            results = await self.evaluate(
                alias_cmd, ctx, silent=silent, reset_state=False, alias_depth=alias_depth + 1
            )
            if rest.strip():
                results += await self.evaluate(
                    rest, ctx, silent=silent, reset_state=False, alias_depth=alias_depth
                )
            return results

        parse_info = self.parse(raw, ctx)
        return await self._run_instructions(parse_info, ctx, silent)

    # --- Aliases ---

    def expand_alias(self, raw: str, ctx: Optional[ShellContext] = None) -> Optional[Tuple[str, str]]:
        """
        Substitutes the leading alias of `raw` by its template.

        Placeholders `$1`, `$2[fallback]`... take the statement's parameters
        in order; the ones left fall back to their bracketed text (or "").

        Returns:
            (expanded text, remaining statements) or None when `raw` does not
            start with an alias.
        """
        if self._aliases is None:
            return None
        tokens = lex(raw, self._known_names(ctx), self._commands, self._tokenizer)
        if not tokens or tokens[0].kind is not TokenKind.NAME or tokens[0].raw.startswith("$"):
            return None
        name = tokens[0].value
        if self._commands.canonical_name(name) is not None or name in self._known_names(ctx):
            return None
        template = self._aliases.get(name)
        if template is None:
            return None

        params: List[str] = []
        rest = ""
        for token in tokens[1:]:
            if token.kind is TokenKind.DELIMITER:
                rest = raw[token.end:]
                break
            if token.kind in (TokenKind.STRING, TokenKind.DICTIONARY_SIMPLE):
                params.append(token.value)
            else:
                params.append(token.raw.strip())

        for index, param in enumerate(params, start=1):
            pattern = re.compile(rf"\${index}(?!\d)(?:\[[^\]]+\])?")
            template = pattern.sub(lambda _m, value=param: value, template)
        template = ALIAS_PLACEHOLDER_PATTERN.sub(lambda m: m.group(1) or "", template)
        return template, rest

    # --- Instruction walk ---

    async def _run_instructions(
            self, parse_info: ParseResult, ctx: Optional[ShellContext], silent: bool
    ) -> List[Any]:
        names, arguments, values = parse_info.queues()
        instructions = parse_info.instructions
        frames = FrameStack()
        results: List[Any] = []

        for index, instr in enumerate(instructions):
            token = parse_info.token_at(instr.token_index)
            opcode = instr.opcode

            if opcode is Opcode.LOAD_NAME:
                self._load_name(names.pop(0), token, frames, ctx, silent)

            elif opcode in (Opcode.LOAD_CONSTANT, Opcode.LOAD_SUB_EVAL):
                value = values.pop(0)
                if opcode is Opcode.LOAD_SUB_EVAL:
                    value = await self._sub_eval(value, ctx)
                else:
                    value = await self._eval_runner(value, ctx)
                frames.current.values.append(value)

            elif opcode is Opcode.LOAD_ARGUMENT:
                arg_name = arguments.pop(0)
                frame = frames.top
                if frame is None:
                    raise UnexpectedTokenError(f"Argument '{arg_name}' not expected", *_position(token))
                next_instr = instructions[index + 1] if index + 1 < len(instructions) else None
                if next_instr is None or next_instr.opcode not in FLAG_VALUE_OPCODES:
                    # Switch flag
                    frame.values.append(True)
                frame.args.append(arg_name)

            elif opcode is Opcode.CONCAT:
                self._concat(instructions, index, token, frames)

            elif opcode is Opcode.CALL_FUNCTION:
                frame = frames.pop()
                if frame is None:
                    # The command name was shadowed by a variable
                    self._log.debug("No open call for CALL_FUNCTION at %s", instr.token_index)
                    continue
                ret = await self._call_function(frame, parse_info, ctx, silent)
                frames.current.values.append(ret)

            elif opcode is Opcode.RETURN_VALUE:
                root_values = frames.root.values
                results.append(root_values.pop() if root_values else None)
                root_values.clear()

            elif opcode is Opcode.STORE_NAME:
                self._store_name(parse_info, instr, token, frames)

            elif opcode is Opcode.LOAD_DATA_ATTRIBUTE:
                frame = frames.current
                key = frame.values.pop() if frame.values else None
                if not frame.values or frame.values[-1] is None:
                    raise PropertyAccessError(
                        f"Cannot read properties of undefined (reading '{key}')", *_position(token)
                    )
                frame.values[-1] = get_data_attribute(frame.values[-1], key)

            else:  # pragma: no cover - every Opcode is handled above
                raise AssertionError(f"Unhandled opcode {opcode}")

        if frames.root.store:
            ctx.update(frames.root.store)
        return results

    def _load_name(self, name: str, token: Optional[Token], frames: FrameStack,
                   ctx: Optional[ShellContext], silent: bool) -> None:
        frame = frames.current
        top = frames.top
        if top is not None and name in top.store:
            frame.values.append(top.store[name])
        elif name in frames.root.store:
            frame.values.append(frames.root.store[name])
        elif ctx is not None and ctx.has(name):
            frame.values.append(ctx.get(name))
        elif name in self._commands:
            if top is not None:
                # A command name given as value (e.g. 'help print')
                frame.values.append(name)
            else:
                frames.push(Frame(command=self._commands.get(name)))
        else:
            suggestion = None if silent else find_similar_command(name, self._commands.names())
            raise UnknownNameError(name, *_position(token), suggestion=suggestion)

    def _concat(self, instructions: List[Instruction], index: int, token: Optional[Token],
                frames: FrameStack) -> None:
        frame = frames.current
        prev = instructions[index - 1] if index > 0 else None
        op_index = instructions[index].token_index or 0
        if prev is None or prev.opcode not in OPERAND_OPCODES \
                or (prev.token_index or 0) < op_index or len(frame.values) < 2:
            raise UnexpectedTokenError(
                f"Token '{token.value if token else '+'}' not expected", *_position(token)
            )
        value_b = frame.values.pop()
        value_a = frame.values.pop()
        frame.values.append(_concat(value_a, value_b))

    def _store_name(self, parse_info: ParseResult, instr: Instruction, token: Optional[Token],
                    frames: FrameStack) -> None:
        frame = frames.current
        if token is None or token.kind is TokenKind.ASSIGNMENT:
            raise UnexpectedTokenError("Invalid token '='", *_position(token))
        name = parse_info.store_target(instr.token_index)
        if is_number(name):
            raise UnexpectedTokenError(f"Invalid name '{name}'", *_position(token))
        if not frame.values:
            raise UnexpectedTokenError(f"Invalid token '{token.value}'", *_position(token))
        frame.store[name] = frame.values.pop()

    # --- Sub evaluation ---

    async def _sub_eval(self, cmd: str, ctx: Optional[ShellContext]) -> Any:
        results = await self.evaluate(cmd, ctx, silent=True, reset_state=False)
        return results[0] if results else None

    async def _eval_runner(self, value: Any, ctx: Optional[ShellContext]) -> Any:
        if isinstance(value, str):
            match = RUNNER_PATTERN.match(value.strip())
            if match:
                return await self._sub_eval(match.group(1), ctx)
        return value

    # --- Command calls ---

    def _bind_values(self, command: CommandDefinition, frame: Frame) -> Dict[str, Any]:
        """Flags take their values from the end; the rest bind by position."""
        if len(frame.args) > len(frame.values):
            raise UnexpectedTokenError("Invalid arguments!")
        values = frame.values
        if command.generators and self._generator is not None:
            values = self._generator.eval(values)

        args = list(frame.args)
        kwargs: Dict[str, Any] = {}
        for index in range(len(values) - 1, -1, -1):
            arg_name = args.pop() if args else None
            if arg_name is not None:
                kwargs[arg_name] = values[index]
                continue
            if index >= len(command.args):
                raise UnexpectedTokenError(f"Unexpected '{values[index]}' value!")
            spec = command.args[index]
            if any(spec.matches(name) for name in kwargs):
                raise UnexpectedTokenError(f"Unexpected '{values[index]}' value!")
            kwargs[spec.long_name] = values[index]
        return kwargs

    async def _is_confirmed(self, command: CommandDefinition, kwargs: Dict[str, Any]) -> bool:
        if self._confirm is None:
            return True
        answer = self._confirm(command, kwargs)
        if inspect.isawaitable(answer):
            answer = await answer
        return bool(answer)

    async def _call_function(self, frame: Frame, parse_info: ParseResult,
                             ctx: Optional[ShellContext], silent: bool) -> Any:
        command = frame.command
        kwargs = resolve_arguments(command, self._bind_values(command, frame))
        if command.requires_confirmation and not silent and not await self._is_confirmed(command, kwargs):
            raise CommandExecutionError(command.name, "Operation aborted")

        job = self._jobs.start(command.name, parse_info.input_raw) if self._jobs is not None else None
        try:
            call_ctx = ctx.silenced() if silent and ctx is not None else ctx
            return await command.invoke(kwargs, call_ctx)
        except ShellError:
            raise
        except Exception as e:
            self._log.error("Error executing '%s': %s", command.name, e,
                            exc_info=self._log.isEnabledFor(logging.DEBUG))
            raise CommandExecutionError(command.name, str(e) or type(e).__name__) from e
        finally:
            if job is not None:
                self._jobs.finish(job.index)
