# src/cmdlang_shell/model.py (Shell Layer)
import inspect
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Type codes of an argument specification ('l' prefix = list mode)
TYPE_STRING = "s"
TYPE_INTEGER = "i"
TYPE_JSON = "j"
TYPE_FLAG = "f"
TYPE_ALPHANUMERIC = "a"
TYPE_ANY = "-"
LIST_PREFIX = "l"

_HUMAN_TYPE_NAMES = {
    TYPE_INTEGER: "NUMBER",
    TYPE_STRING: "STRING",
    TYPE_JSON: "JSON",
    TYPE_FLAG: "FLAG",
    TYPE_ALPHANUMERIC: "ALPHANUMERIC",
    TYPE_ANY: "ANY",
}
# Types whose list form is not pluralized ("LIST OF JSON")
_SINGULAR_TYPES = (TYPE_ANY, TYPE_JSON)


class ArgumentSpec(BaseModel):
    """
    Declared argument of a command.

    Can be built from the compact string form:
        "<type>::<short>:<long>::<required>::<description>::<default>::<strict values>"
    e.g. "li::n:numbers::1::Some numbers::1,2::1:2:3"
    """
    model_config = ConfigDict(frozen=True)

    type: str = Field(description="Type code, optionally prefixed with 'l' for list mode.")
    short_name: Optional[str] = None
    long_name: str
    is_required: bool = False
    description: str = ""
    default: Optional[str] = Field(default=None, description="Raw default, validated like user input.")
    strict_values: Optional[List[str]] = None

    @field_validator("type")
    @classmethod
    def _check_type(cls, value: str) -> str:
        code = value[1:] if value.startswith(LIST_PREFIX) and len(value) == 2 else value
        if code not in _HUMAN_TYPE_NAMES:
            raise ValueError(f"Unknown argument type '{value}'")
        return value

    @classmethod
    def parse(cls, raw: str) -> "ArgumentSpec":
        parts = raw.split("::")
        parts += [""] * (6 - len(parts))
        ttype, names, is_required, descr, default_value, strict_values = parts[:6]
        short_name, _, long_name = names.partition(":")
        if not long_name:
            short_name, long_name = "", short_name
        return cls(
            type=ttype,
            short_name=short_name or None,
            long_name=long_name,
            is_required=bool(int(is_required or 0)),
            description=descr,
            default=default_value or None,
            strict_values=strict_values.split(":") if strict_values else None,
        )

    @property
    def list_mode(self) -> bool:
        return len(self.type) == 2 and self.type[0] == LIST_PREFIX

    @property
    def type_code(self) -> str:
        return self.type[-1]

    @property
    def human_type(self) -> str:
        res = "LIST OF " if self.list_mode else ""
        res += _HUMAN_TYPE_NAMES.get(self.type_code, "UNKNOWN")
        if self.list_mode and self.type_code not in _SINGULAR_TYPES:
            res += "S"
        return res

    @property
    def kwarg_name(self) -> str:
        """Keyword used when calling the command callback."""
        return self.long_name.replace("-", "_")

    def matches(self, name: str) -> bool:
        return name in (self.short_name, self.long_name)


class CommandDefinition(BaseModel):
    """A registered command: its signature and the callable that runs it."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    callback: Callable[..., Any]
    definition: str = "Undefined command"
    detail: str = "This command hasn't a properly detailed information"
    args: List[ArgumentSpec] = Field(default_factory=list)
    aliases: List[str] = Field(default_factory=list)
    requires_confirmation: bool = False
    generators: bool = True
    example: str = ""
    help_text: str = ""

    @field_validator("args", mode="before")
    @classmethod
    def _parse_args(cls, value: Any) -> Any:
        if value is None:
            return []
        return [ArgumentSpec.parse(item) if isinstance(item, str) else item for item in value]

    def get_argument(self, name: str) -> Optional[ArgumentSpec]:
        for arg in self.args:
            if arg.matches(name):
                return arg
        return None

    async def invoke(self, kwargs: Dict[str, Any], ctx: Any) -> Any:
        """Runs the callback; coroutine callbacks are awaited."""
        result = self.callback(kwargs, ctx)
        if inspect.isawaitable(result):
            result = await result
        return result


class Alias(BaseModel):
    name: str = Field(description="Name typed by the user.")
    command: str = Field(description="Template with $1, $2[fallback]... placeholders.")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class JobInfo(BaseModel):
    index: int
    command_name: str
    command_raw: str
    started_at: datetime = Field(default_factory=datetime.now)
    healthy: bool = True

    @property
    def elapsed(self) -> float:
        return (datetime.now() - self.started_at).total_seconds()
