# src/cmdlang_shell/core/handlers/core/quit_handler.py
from typing import Any, Dict

from cmdlang_shell.core.context.shell_context import ShellContext

quit_spec = {
    "definition": "Close the shell",
    "aliases": ["exit"],
}


def handle_quit(_kwargs: Dict[str, Any], ctx: ShellContext) -> bool:
    """Signals the shell to stop."""
    ctx.should_exit = True
    return True
