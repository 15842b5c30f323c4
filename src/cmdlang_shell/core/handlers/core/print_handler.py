# src/cmdlang_shell/core/handlers/core/print_handler.py
import json
from typing import Any, Dict

from cmdlang_shell.core.context.shell_context import ShellContext

print_spec = {
    "definition": "Print a message",
    "detail": "Eval parameters and print the result.",
    "args": ["-::m:msg::1::The message to print"],
    "aliases": ["echo"],
    "example": "-m 'This is a example'",
}


def handle_print(kwargs: Dict[str, Any], ctx: ShellContext) -> Any:
    """
    Handles the 'print' command.

    Prints the value (mappings and lists as indented JSON) and returns it
    unchanged, so `$x = $(print ...)` stores the value itself.
    """
    msg = kwargs["msg"]
    if isinstance(msg, (dict, list)):
        ctx.print(json.dumps(msg, indent=2, default=str))
    else:
        ctx.print(msg)
    return msg
