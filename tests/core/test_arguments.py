# tests/core/test_arguments.py
import pytest

from cmdlang_shell.core.arguments import detect_type, format_default, resolve_arguments
from cmdlang_shell.core.errors import (
    InvalidArgumentTypeError,
    MissingRequiredArgumentError,
    UnknownArgumentError,
)
from cmdlang_shell.model import ArgumentSpec, CommandDefinition


def make_command(*args):
    return CommandDefinition(name="cmd", callback=lambda kwargs, ctx: kwargs, args=list(args))


# --- Tests voor ArgumentSpec ---

def test_argument_spec_parse_full_form():
    """Test het volledige compacte formaat inclusief default en strikte waarden."""
    spec = ArgumentSpec.parse("li::n:numbers::1::Some numbers::1,2::1:2:3")
    assert spec.type == "li"
    assert spec.short_name == "n"
    assert spec.long_name == "numbers"
    assert spec.is_required is True
    assert spec.description == "Some numbers"
    assert spec.default == "1,2"
    assert spec.strict_values == ["1", "2", "3"]
    assert spec.list_mode is True
    assert spec.type_code == "i"


def test_argument_spec_parse_minimal_form():
    """Zonder korte naam en zonder optionele velden."""
    spec = ArgumentSpec.parse("s::name")
    assert spec.short_name is None
    assert spec.long_name == "name"
    assert spec.is_required is False
    assert spec.default is None
    assert spec.strict_values is None


def test_argument_spec_rejects_unknown_type():
    with pytest.raises(ValueError):
        ArgumentSpec.parse("x::a:arg::0::Bad")


@pytest.mark.parametrize("type_code, expected", [
    ("s", "STRING"),
    ("li", "LIST OF NUMBERS"),
    ("lj", "LIST OF JSON"),
    ("-", "ANY"),
    ("l-", "LIST OF ANY"),
    ("f", "FLAG"),
])
def test_argument_spec_human_type(type_code, expected):
    assert ArgumentSpec(type=type_code, long_name="x").human_type == expected


def test_argument_spec_kwarg_name():
    """Koppeltekens worden underscores in de callback-argumenten."""
    assert ArgumentSpec.parse("s::d:dry-run::0::Dry run").kwarg_name == "dry_run"


# --- Tests voor resolve_arguments ---

def test_resolve_short_and_long_names():
    command = make_command("s::n:name::1::The name", "i::c:count::0::How many")
    assert resolve_arguments(command, {"n": "John", "count": "3"}) == {"name": "John", "count": 3}


def test_resolve_applies_defaults():
    command = make_command("li::n:numbers::0::Some numbers::1,2")
    assert resolve_arguments(command, {}) == {"numbers": [1, 2]}


def test_resolve_list_mode():
    command = make_command("li::n:numbers::1::Some numbers")
    assert resolve_arguments(command, {"n": "1, 3"}) == {"numbers": [1, 3]}
    assert resolve_arguments(command, {"n": [4, 5]}) == {"numbers": [4, 5]}


def test_resolve_strict_values():
    """Waarden buiten de strikte lijst worden geweigerd."""
    command = make_command("li::n:numbers::1::Some numbers::::1:2:3")
    assert resolve_arguments(command, {"n": "1,2"}) == {"numbers": [1, 2]}
    with pytest.raises(InvalidArgumentTypeError):
        resolve_arguments(command, {"n": "4"})


def test_resolve_unknown_argument():
    command = make_command("s::n:name::0::The name")
    with pytest.raises(UnknownArgumentError) as exc_info:
        resolve_arguments(command, {"x": "1"})
    assert str(exc_info.value) == "The argument 'x' does not exist"


def test_resolve_missing_required_lists_all():
    command = make_command("s::a:first::1::A", "s::b:second::1::B", "s::c:third::0::C")
    with pytest.raises(MissingRequiredArgumentError) as exc_info:
        resolve_arguments(command, {})
    assert exc_info.value.names == ["first", "second"]
    assert str(exc_info.value) == "Required arguments not set! (first,second)"


@pytest.mark.parametrize("spec, value", [
    ("s::v:value::0::Text", "12"),
    ("i::v:value::0::Number", "abc"),
    ("i::v:value::0::Number", "1.5"),
    ("j::v:value::0::Json", "plain"),
    ("lj::v:value::0::Json list", "a=1"),
])
def test_resolve_invalid_types(spec, value):
    with pytest.raises(InvalidArgumentTypeError):
        resolve_arguments(make_command(spec), {"v": value})


def test_resolve_flag_values():
    command = make_command("f::f:force::0::Force")
    assert resolve_arguments(command, {"f": True}) == {"force": True}
    assert resolve_arguments(command, {"f": "0"}) == {"force": False}
    assert resolve_arguments(command, {"f": 1}) == {"force": True}


def test_resolve_json_value():
    command = make_command("j::d:data::1::Data")
    assert resolve_arguments(command, {"d": "a=1 b='x y'"}) == {"data": {"a": 1, "b": "x y"}}
    assert resolve_arguments(command, {"d": '{"k": [1, 2]}'}) == {"data": {"k": [1, 2]}}


def test_resolve_any_type_detects_value():
    """Het type '-' neemt het eerste passende type, anders string."""
    command = make_command("-::v:value::1::Anything")
    assert resolve_arguments(command, {"v": "12"}) == {"value": 12}
    assert resolve_arguments(command, {"v": "a=1"}) == {"value": {"a": 1}}
    assert resolve_arguments(command, {"v": "hello"}) == {"value": "hello"}


def test_detect_type():
    assert detect_type("42") == "i"
    assert detect_type("[1, 2]") == "j"
    assert detect_type("hello") == "a"
    assert detect_type("1,2", list_mode=True) == "i"


def test_format_default():
    assert format_default(ArgumentSpec.parse("i::c:count::0::Count::5")) == 5
    assert format_default(ArgumentSpec.parse("s::c:count::0::Count")) is None
    assert format_default(ArgumentSpec.parse("-::c:count::0::Count::abc")) == "abc"
