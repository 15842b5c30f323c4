# src/cmdlang_shell/core/handlers/core/chrono_handler.py
import time
from typing import Any, Dict

from cmdlang_shell.core.context.shell_context import ShellContext

chrono_spec = {
    "definition": "Print the time expended executing a command",
    "detail": "Runs the command and reports the elapsed time (seconds).",
    "args": ["s::c:cmd::1::The command to run"],
    "generators": False,
    "example": "-c \"print 'hello'\"",
}


async def handle_chrono(kwargs: Dict[str, Any], ctx: ShellContext) -> float:
    start = time.perf_counter()
    await ctx.engine.evaluate(kwargs["cmd"], ctx, reset_state=False)
    elapsed = time.perf_counter() - start
    ctx.print(f"Time elapsed: {elapsed:.3f} seconds")
    return elapsed
