# src/cmdlang_shell/core/handlers/core/parse_simple_json_handler.py
import json
from typing import Any, Dict

from cmdlang_shell.core.context.shell_context import ShellContext

parse_simple_json_spec = {
    "definition": "Parse a 'simple JSON' value",
    "detail": "Converts 'key=value key2=\"other value\"' (or plain JSON) into a JSON value.",
    "args": ["j::i:input::1::The simple JSON"],
    "example": "\"keyA=ValueA keyB='Complex ValueB' keyC=1234\"",
}


def handle_parse_simple_json(kwargs: Dict[str, Any], ctx: ShellContext) -> Any:
    value = kwargs["input"]
    ctx.print(json.dumps(value, indent=2, default=str))
    return value
