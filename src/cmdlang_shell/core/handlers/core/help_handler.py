# src/cmdlang_shell/core/handlers/core/help_handler.py
from typing import Any, Dict

from cmdlang_shell.core.context.shell_context import ShellContext
from cmdlang_shell.core.utils.helptext import get_command_help, get_help_text

help_spec = {
    "definition": "Print this help or command detailed info",
    "detail": "Show commands and a quick definition. Use 'help <command>' for its arguments.",
    "args": ["s::c:cmd::0::The command to consult"],
    "example": "-c print",
}


def handle_help(kwargs: Dict[str, Any], ctx: ShellContext) -> str:
    registry = ctx.engine.commands
    cmd_name = kwargs.get("cmd")
    if cmd_name:
        command = registry.get(cmd_name)
        if command is None:
            raise ValueError(f"'{cmd_name}' is not a command")
        text = get_command_help(command)
    else:
        text = get_help_text(registry)
    ctx.print(text)
    return text
