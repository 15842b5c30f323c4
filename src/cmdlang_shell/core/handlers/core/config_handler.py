# src/cmdlang_shell/core/handlers/core/config_handler.py
import json
import logging
from typing import Any, Dict

from cmdlang_shell.core.context.shell_context import ShellContext
from cmdlang_shell.core.managers.config_manager import config_manager

logger = logging.getLogger(__name__)

config_spec = {
    "definition": "Show or change the shell configuration",
    "detail": "'list' shows settings.json, 'set' changes a key for this session, "
              "'reset' reloads settings.json.",
    "args": [
        "s::o:operation::0::The operation to do::list::list:set:reset",
        "s::k:key::0::Key path, e.g. debug.level",
        "-::v:value::0::The new value",
    ],
    "example": "-o set -k engine.command_timeout -v 60",
}


def handle_config(kwargs: Dict[str, Any], ctx: ShellContext) -> Dict[str, Any]:
    """Handles the 'config' command for viewing and modifying session configuration."""
    operation = kwargs.get("operation", "list")

    if operation == "set":
        key_path = kwargs.get("key")
        if not key_path or "value" not in kwargs:
            raise ValueError("Usage: config set <key> <value>")
        if not config_manager.set_nested(key_path, kwargs["value"]):
            raise ValueError(f"Failed to set config value for key '{key_path}'")
        new_value = config_manager.get_nested(key_path)
        ctx.print(f"✅ Config updated: {key_path} = {new_value} (type: {type(new_value).__name__})")
    elif operation == "reset":
        config_manager.reset()
        ctx.print("✅ Configuration has been reset to the values from settings.json.")
    else:
        ctx.print(json.dumps(config_manager.get_all(), indent=2))

    return config_manager.get_all()
