# src/cmdlang_shell/core/handlers/core/repeat_handler.py
import logging
from typing import Any, Dict, List

from tqdm import tqdm

from cmdlang_shell.core.context.shell_context import ShellContext

logger = logging.getLogger(__name__)

repeat_spec = {
    "definition": "Repeat a command N times",
    "detail": "Runs the command silently N times and returns every result. "
              "Generator counters ($INTITER) keep counting between runs.",
    "args": [
        "i::t:times::1::Times to run",
        "s::c:cmd::1::The command to run",
        "f::q:quiet::0::Hide the progress bar",
    ],
    "generators": False,
    "example": "-t 5 -c \"print '$INTITER'\"",
}


repeat_help_text = """
  repeat -t 3 -c "print '$INTITER[10,5]'"
                                 Runs the command three times; the results are 10, 15, 20.
  $r = $(repeat -t 2 -q -c 'print a')
                                 Stores ['a', 'a'] without progress bar.
""".strip()


async def handle_repeat(kwargs: Dict[str, Any], ctx: ShellContext) -> List[Any]:
    times = kwargs["times"]
    cmd = kwargs["cmd"]
    if times < 0:
        raise ValueError("'times' must be zero or positive")

    results: List[Any] = []
    for _ in tqdm(range(times), desc="repeat", unit="run", disable=kwargs.get("quiet", False) or ctx.silent):
        results.extend(await ctx.engine.evaluate(cmd, ctx, silent=True, reset_state=False))
    logger.debug("Repeated '%s' %d times", cmd, times)
    return results
