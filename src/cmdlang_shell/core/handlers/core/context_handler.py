# src/cmdlang_shell/core/handlers/core/context_handler.py
import logging
from typing import Any, Dict

from cmdlang_shell.core.context.shell_context import ShellContext

logger = logging.getLogger(__name__)

context_spec = {
    "definition": "Operations over the shell variables",
    "detail": "List, set, delete or reset the variables kept between submissions.",
    "args": [
        "s::o:operation::0::The operation to do::list::list:set:delete:reset",
        "s::k:key::0::The variable name",
        "-::v:value::0::The new value",
    ],
    "example": "-o set -k name -v 'John'",
}


def handle_context(kwargs: Dict[str, Any], ctx: ShellContext) -> Dict[str, Any]:
    """
    Handle `context` operations (list, set, delete, reset).

    Returns:
        Dict[str, Any]: A copy of the variables after the operation.
    """
    operation = kwargs.get("operation", "list")
    key = kwargs.get("key")

    if operation in ("set", "delete") and not key:
        raise ValueError(f"'context {operation}' needs a key")

    if operation == "set":
        ctx.set(key, kwargs.get("value"))
    elif operation == "delete":
        if not ctx.delete(key):
            ctx.print(f"Variable '{key}' not found.")
    elif operation == "reset":
        ctx.reset()
        ctx.print("✅ Context cleared.")
    else:
        variables = ctx.variables()
        if not variables:
            ctx.print("No context variables set.")
        for name, value in variables.items():
            ctx.print(f"  {name} = {value!r}")

    return ctx.variables()
