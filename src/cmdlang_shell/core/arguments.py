# src/cmdlang_shell/core/arguments.py
"""
Argument resolution: name normalization, defaults, required checks and
per-type validation/formatting of the raw values collected by the engine.
"""
import logging
from typing import Any, Callable, Dict, List, Optional

from cmdlang_shell.core.errors import (
    InvalidArgumentTypeError,
    MissingRequiredArgumentError,
    UnknownArgumentError,
)
from cmdlang_shell.core.simple_json import simple_to_json
from cmdlang_shell.core.utils.text_utils import is_integer, split_and_trim, to_number
from cmdlang_shell.model import (
    TYPE_ALPHANUMERIC,
    TYPE_ANY,
    TYPE_FLAG,
    TYPE_INTEGER,
    TYPE_JSON,
    TYPE_STRING,
    ArgumentSpec,
    CommandDefinition,
)

logger = logging.getLogger(__name__)


def _elements(value: Any, list_mode: bool) -> List[Any]:
    if not list_mode:
        return [value]
    if isinstance(value, str):
        return split_and_trim(value)
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _to_int(value: Any) -> int:
    if isinstance(value, (int, float)):
        return int(value)
    return int(to_number(str(value)))


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    try:
        return bool(to_number(str(value)))
    except ValueError:
        return False


# --- Validators ---

def validate_string(value: Any, list_mode: bool = False) -> bool:
    return all(not is_integer(item) for item in _elements(value, list_mode))


def validate_int(value: Any, list_mode: bool = False) -> bool:
    return all(is_integer(item) for item in _elements(value, list_mode))


def validate_flag(value: Any, list_mode: bool = False) -> bool:
    return all(isinstance(item, bool) or is_integer(item) for item in _elements(value, list_mode))


def validate_alphanumeric(value: Any, list_mode: bool = False) -> bool:
    return validate_int(value, list_mode) or validate_string(value, list_mode)


def validate_json(value: Any, list_mode: bool = False) -> bool:
    # JSON is never a list element type
    if list_mode:
        return False
    if isinstance(value, (dict, list)):
        return True
    try:
        simple_to_json(str(value).strip())
    except ValueError:
        return False
    return True


# --- Formatters ---

def format_string(value: Any, list_mode: bool = False) -> Any:
    return _elements(value, True) if list_mode else value


def format_int(value: Any, list_mode: bool = False) -> Any:
    if list_mode:
        return [_to_int(item) for item in _elements(value, True)]
    return _to_int(value)


def format_flag(value: Any, list_mode: bool = False) -> Any:
    if list_mode:
        return [_to_bool(item) for item in _elements(value, True)]
    return _to_bool(value)


def format_json(value: Any, list_mode: bool = False) -> Any:
    if list_mode:
        return [simple_to_json(str(item)) for item in _elements(value, True)]
    if isinstance(value, (dict, list)):
        return value
    return simple_to_json(str(value).strip())


VALIDATORS: Dict[str, Callable[[Any, bool], bool]] = {
    TYPE_STRING: validate_string,
    TYPE_INTEGER: validate_int,
    TYPE_JSON: validate_json,
    TYPE_FLAG: validate_flag,
    TYPE_ALPHANUMERIC: validate_alphanumeric,
}
FORMATTERS: Dict[str, Callable[[Any, bool], Any]] = {
    TYPE_STRING: format_string,
    TYPE_INTEGER: format_int,
    TYPE_JSON: format_json,
    TYPE_FLAG: format_flag,
    TYPE_ALPHANUMERIC: format_string,
}


def detect_type(value: Any, list_mode: bool = False) -> Optional[str]:
    """First non-string type whose validator accepts the value."""
    for code, validator in VALIDATORS.items():
        if code == TYPE_STRING:
            continue
        if validator(value, list_mode):
            return code
    return None


def format_default(spec: ArgumentSpec) -> Any:
    """The spec's default value already formatted for its type (None when unset/invalid)."""
    if spec.default is None:
        return None
    code = TYPE_STRING if spec.type_code == TYPE_ANY else spec.type_code
    try:
        return FORMATTERS[code](spec.default, spec.list_mode)
    except ValueError:
        logger.warning("Invalid default value '%s' for argument '%s'", spec.default, spec.long_name)
        return None


def _check_strict_values(spec: ArgumentSpec, formatted: Any) -> None:
    if not spec.strict_values or spec.type_code == TYPE_FLAG:
        return
    allowed = {str(item) for item in spec.strict_values}
    for item in _elements(formatted, spec.list_mode):
        if str(item) not in allowed:
            raise InvalidArgumentTypeError(spec.long_name, item)


def resolve_arguments(command: CommandDefinition, kwargs: Dict[str, Any]) -> Dict[str, Any]:
    """
    Normalizes and validates the raw keyword arguments of a command call.

    Args:
        command (CommandDefinition): The target command (its declared args).
        kwargs (Dict[str, Any]): Raw values keyed by short or long argument name.

    Returns:
        Dict[str, Any]: Formatted values keyed by long name ('-' replaced by '_').

    Raises:
        UnknownArgumentError: A supplied name is not declared.
        MissingRequiredArgumentError: Required arguments left unset after defaults.
        InvalidArgumentTypeError: A value fails the validator of its type.
    """
    specs = {spec.long_name: spec for spec in command.args}

    full_kwargs: Dict[str, Any] = {}
    for arg_name, value in kwargs.items():
        spec = command.get_argument(arg_name)
        if spec is None:
            raise UnknownArgumentError(arg_name)
        full_kwargs[spec.long_name] = value

    for spec in command.args:
        if spec.long_name not in full_kwargs and spec.default is not None:
            full_kwargs[spec.long_name] = spec.default

    required_not_set = [
        spec.long_name for spec in command.args
        if spec.is_required and spec.long_name not in full_kwargs
    ]
    if required_not_set:
        raise MissingRequiredArgumentError(required_not_set)

    new_kwargs: Dict[str, Any] = {}
    for long_name, value in full_kwargs.items():
        spec = specs[long_name]
        code = spec.type_code
        if code == TYPE_ANY:
            # Not found any compatible formatter: fallback to generic string
            code = detect_type(value, spec.list_mode) or TYPE_STRING
        elif not VALIDATORS[code](value, spec.list_mode):
            raise InvalidArgumentTypeError(long_name, value)
        formatted = FORMATTERS[code](value, spec.list_mode)
        _check_strict_values(spec, formatted)
        new_kwargs[spec.kwarg_name] = formatted

    logger.debug("Resolved arguments for '%s': %s", command.name, list(new_kwargs))
    return new_kwargs
