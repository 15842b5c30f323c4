# src/cmdlang_shell/core/handlers/core/alias_handler.py
import logging
from typing import Any, Dict

from cmdlang_shell.core.context.shell_context import ShellContext

logger = logging.getLogger(__name__)

alias_spec = {
    "definition": "Create aliases",
    "detail": "Define aliases to run commands easy. "
              "Use $1, $2[fallback]... to reference the parameters given to the alias. "
              "Without command the alias is deleted; without name every alias is listed.",
    "args": [
        "s::n:name::0::The name of the alias",
        "s::c:cmd::0::The command to run",
    ],
    "generators": False,
    "example": "-n myalias -c \"print 'My name is: $1'\"",
}


alias_help_text = """
  alias                          Lists every alias.
  alias -n greet -c "print 'hi $1[you]'"
                                 Creates (or overwrites) an alias; $1 takes the first
                                 parameter, [you] is used when it is missing.
  greet bob                      Runs the alias: prints "hi bob".
  alias -n greet                 Deletes the alias.
""".strip()


def handle_alias(kwargs: Dict[str, Any], ctx: ShellContext) -> Dict[str, str]:
    """
    Handles the 'alias' command (list, create/overwrite, delete).

    Returns:
        Dict[str, str]: Every alias (name -> command) after the operation.
    """
    store = ctx.engine.aliases
    name = kwargs.get("name")
    cmd = kwargs.get("cmd")

    if not name:
        aliases = store.as_dict()
        if not aliases:
            ctx.print("No aliases defined.")
        for alias_name, alias_cmd in aliases.items():
            ctx.print(f"  {alias_name} = {alias_cmd}")
        return aliases

    if name in ctx.engine.commands:
        raise ValueError(f"Invalid alias name '{name}': a command with that name already exists")

    if cmd:
        store.save(name, cmd)
        ctx.print(f"✅ Alias '{name}' created.")
    elif store.delete(name):
        ctx.print(f"✅ Alias '{name}' deleted.")
    else:
        ctx.print(f"Alias '{name}' not found.")
    return store.as_dict()
