# src/cmdlang_shell/core/managers/completion_manager.py
import logging
from typing import Iterable, List, NamedTuple, Optional, Tuple

from prompt_toolkit.completion import Completion
from prompt_toolkit.document import Document
from prompt_toolkit.history import History

from cmdlang_shell.core.context.shell_context import ShellContext
from cmdlang_shell.core.errors import ShellError
from cmdlang_shell.core.lexer import TokenKind
from cmdlang_shell.core.managers.config_manager import config_manager
from cmdlang_shell.core.parser import Opcode, ParseResult
from cmdlang_shell.core.xngine import ExecuteEngine
from cmdlang_shell.model import CommandDefinition

logger = logging.getLogger(__name__)

_ARGUMENT_KINDS = (TokenKind.ARGUMENT_SHORT, TokenKind.ARGUMENT_LONG)
_PARAMETER_KINDS = (TokenKind.STRING, TokenKind.VALUE, TokenKind.NUMBER, TokenKind.NAME)


class Suggestion(NamedTuple):
    name: str
    string: str
    kind: str  # 'command', 'argument', 'parameter' or 'history'
    is_required: bool = False
    is_default: bool = False


class CompletionManager:
    """
    Caret aware suggestions built on top of the engine's side effect free parse.
    """

    def __init__(self, engine: ExecuteEngine, shell_context: ShellContext, history: Optional[History] = None):
        self.engine = engine
        self.ctx = shell_context
        self.history = history

    @staticmethod
    def get_selected_parameter_index(parse_info: ParseResult, caret_pos: int) -> Tuple[Optional[int], Optional[int]]:
        """
        Returns (command token index, selected token index) for the caret.

        The command is the one whose CALL_FUNCTION follows the selected
        token in the instruction stack.
        """
        if not parse_info.tokens:
            return None, None
        sel_token_index = None
        for token in parse_info.tokens:
            if token.start < caret_pos <= token.end:
                sel_token_index = token.index
                break
        if sel_token_index is None:
            return None, None

        sel_cmd_index = None
        found = False
        for instr in parse_info.instructions:
            if instr.token_index == sel_token_index:
                found = True
            if found and instr.opcode is Opcode.CALL_FUNCTION:
                sel_cmd_index = instr.token_index
                break
        return sel_cmd_index, sel_token_index

    # --- Suggestion sources ---

    def _command_names(self, prefix: str) -> List[Suggestion]:
        return [
            Suggestion(name=name, string=name, kind="command")
            for name in sorted(self.engine.commands.names())
            if name.startswith(prefix)
        ]

    @staticmethod
    def _arguments(command: CommandDefinition, arg_name: str) -> List[Suggestion]:
        res = []
        for spec in command.args:
            if arg_name and not spec.long_name.startswith(arg_name):
                continue
            name = f"-{spec.short_name}, --{spec.long_name}" if spec.short_name else f"--{spec.long_name}"
            res.append(Suggestion(
                name=name, string=f"--{spec.long_name}", kind="argument", is_required=spec.is_required
            ))
        return res

    @staticmethod
    def _parameters(command: CommandDefinition, arg_name: str, arg_value: str) -> List[Suggestion]:
        spec = command.get_argument(arg_name)
        if spec is None:
            return []
        if spec.strict_values:
            return [
                Suggestion(
                    name=value, string=value, kind="parameter",
                    is_required=spec.is_required, is_default=value == spec.default,
                )
                for value in spec.strict_values
                if not arg_value or value.startswith(arg_value)
            ]
        if spec.default and spec.default.startswith(arg_value):
            return [Suggestion(
                name=spec.default, string=spec.default, kind="parameter",
                is_required=spec.is_required, is_default=True,
            )]
        return []

    def _history(self, data: str) -> List[Suggestion]:
        """Earlier submissions starting with the typed line, most recent first."""
        if self.history is None:
            return []
        max_items = config_manager.get_nested("assistant.history_items", 5)
        typed = data.lstrip()
        res: List[Suggestion] = []
        seen = set()
        for entry in reversed(self.history.get_strings()):
            entry = entry.strip()
            if entry == typed.strip() or not entry.startswith(typed) or entry in seen:
                continue
            seen.add(entry)
            res.append(Suggestion(name=entry, string=entry, kind="history"))
            if len(res) >= max_items:
                break
        return res

    def get_available_options(self, data: str, caret_pos: Optional[int] = None) -> List[Suggestion]:
        if not data.strip():
            return []
        if caret_pos is None:
            caret_pos = len(data)
        options = self._syntax_options(data, caret_pos)
        if caret_pos == len(data):
            options += self._history(data)
        return options

    def _syntax_options(self, data: str, caret_pos: int) -> List[Suggestion]:
        try:
            parse_info = self.engine.parse(data, self.ctx)
        except ShellError as e:
            # Incomplete input (e.g. an open quote) while typing
            logger.debug("No suggestions for %r: %s", data, e)
            return []

        sel_cmd_index, sel_token_index = self.get_selected_parameter_index(parse_info, caret_pos)
        cmd_token = parse_info.token_at(sel_cmd_index)
        cur_token = parse_info.token_at(sel_token_index)
        if cur_token is None or cmd_token is None or cur_token.index == cmd_token.index:
            prefix = cur_token.value if cur_token is not None else data.strip()
            return self._command_names(prefix)

        command = self.engine.commands.get(cmd_token.value)
        if command is None:
            return []
        if cur_token.kind in _ARGUMENT_KINDS:
            return self._arguments(command, cur_token.value)
        if cur_token.kind in _PARAMETER_KINDS and cur_token.index > 0:
            prev_token = parse_info.tokens[cur_token.index - 1]
            if prev_token.kind in _ARGUMENT_KINDS:
                return self._parameters(command, prev_token.value, cur_token.value)
        return []

    # --- prompt_toolkit ---

    def generate_completions(self, document: Document) -> Iterable[Completion]:
        """Yields prompt_toolkit completions for the word before the cursor."""
        max_items = config_manager.get_nested("assistant.max_items", 20)
        word_before_cursor = document.get_word_before_cursor(WORD=True)
        options = self.get_available_options(document.text, document.cursor_position)
        for option in options[:max_items]:
            meta = option.kind.capitalize()
            if option.is_required:
                meta += " (required)"
            if option.is_default:
                meta += " (default)"
            # History entries replace the whole line
            replaced = document.text_before_cursor if option.kind == "history" else word_before_cursor
            yield Completion(
                option.string,
                start_position=-len(replaced),
                display=option.name,
                display_meta=meta,
            )
