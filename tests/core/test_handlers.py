# tests/core/test_handlers.py
import asyncio
from unittest.mock import MagicMock

import pytest

from cmdlang_shell.core.command_registry import CommandRegistry
from cmdlang_shell.core.context.shell_context import ShellContext
from cmdlang_shell.core.discovery import discover_handlers
from cmdlang_shell.core.errors import CommandExecutionError, InvalidArgumentTypeError
from cmdlang_shell.core.generators import ParameterGenerator
from cmdlang_shell.core.managers.alias_manager import AliasManager
from cmdlang_shell.core.managers.job_manager import JobManager
from cmdlang_shell.core.xngine import ExecuteEngine

BUILTIN_COMMANDS = {
    "alias", "chrono", "config", "context", "help", "jobs", "parse_simple_json", "print", "quit", "repeat",
}


@pytest.fixture
def registry():
    """Een registry gevuld via de echte handler-discovery."""
    commands, _ = discover_handlers()
    reg = CommandRegistry()
    for command in commands.values():
        reg.register(command)
    return reg


@pytest.fixture
def shell_context(registry, tmp_path):
    engine = ExecuteEngine(
        command_registry=registry,
        alias_store=AliasManager(tmp_path / "aliases.json"),
        generator=ParameterGenerator(),
        job_manager=JobManager(timeout=0),
        logger=MagicMock(),
    )
    return ShellContext(engine=engine)


def run(ctx, line, **kwargs):
    return asyncio.run(ctx.engine.evaluate(line, ctx, **kwargs))


# --- Discovery ---

def test_discover_handlers_finds_builtins(registry):
    """Alle ingebouwde commando's worden gevonden, met hun spec."""
    assert BUILTIN_COMMANDS <= set(registry.names())
    assert registry.get("echo").name == "print"
    assert registry.get("exit").name == "quit"
    assert registry.get("repeat").generators is False


def test_discover_handlers_custom_location(tmp_path):
    """Een eigen map met *_handler.py modules; kapotte modules worden overgeslagen."""
    (tmp_path / "hello_handler.py").write_text(
        "hello_spec = {'args': ['s::n:name::1::Who'], 'definition': 'Greets'}\n"
        "hello_help_text = 'Says hello.'\n"
        "def handle_hello(kwargs, ctx):\n"
        "    return 'Hello ' + kwargs['name']\n"
    )
    (tmp_path / "broken_handler.py").write_text("raise RuntimeError('broken')\n")
    (tmp_path / "ignored.py").write_text("def handle_ignored(kwargs, ctx):\n    return None\n")

    commands, help_texts = discover_handlers([(tmp_path, "custom")])
    assert set(commands) == {"hello"}
    assert commands["hello"].definition == "Greets"
    assert commands["hello"].args[0].long_name == "name"
    assert help_texts == {"hello": "Says hello."}
    assert commands["hello"].help_text == "Says hello."


def test_discover_handlers_missing_directory(tmp_path):
    assert discover_handlers([(tmp_path / "missing", "custom")]) == ({}, {})


# --- Handlers ---

def test_print_json_value(shell_context, capsys):
    """Objecten worden als JSON geprint en ongewijzigd teruggegeven."""
    assert run(shell_context, "print \"a=1\"") == [{"a": 1}]
    assert '"a": 1' in capsys.readouterr().out


def test_help_lists_commands(shell_context, capsys):
    text = run(shell_context, "help")[0]
    assert "print" in text and "repeat" in text
    assert "COMMANDS" in capsys.readouterr().out


def test_help_shows_handler_help_text(shell_context, registry):
    """Een *_help_text van de handler komt onder de argumenten van 'help <cmd>'."""
    assert "Deletes the alias." in registry.get("alias").help_text
    text = run(shell_context, "help alias", silent=True)[0]
    assert text.endswith(registry.get("alias").help_text)
    assert "Runs the command three times" in run(shell_context, "help -c repeat", silent=True)[0]


def test_help_unknown_command(shell_context):
    with pytest.raises(CommandExecutionError):
        run(shell_context, "help -c nope")


def test_parse_simple_json(shell_context):
    result = run(shell_context, "parse_simple_json \"keyA=ValueA keyB='Complex ValueB' keyC=1234\"")
    assert result == [{"keyA": "ValueA", "keyB": "Complex ValueB", "keyC": 1234}]


def test_context_operations(shell_context):
    """Variabelen zetten, lezen, verwijderen en resetten."""
    assert run(shell_context, "context -o set -k name -v 'John'") == [{"name": "John"}]
    assert run(shell_context, "$name") == ["John"]
    assert run(shell_context, "context") == [{"name": "John"}]
    assert run(shell_context, "context -o delete -k 'name'") == [{}]
    run(shell_context, "$a = 1; $b = 2")
    assert run(shell_context, "context -o reset") == [{}]
    assert shell_context.variables() == {}


def test_context_invalid_operation(shell_context):
    """Alleen de strikte operaties zijn toegestaan."""
    with pytest.raises(InvalidArgumentTypeError):
        run(shell_context, "context -o drop")


def test_repeat_with_int_iter(shell_context):
    """repeat voert het commando stil uit en $INTITER blijft doortellen."""
    result = run(shell_context, "repeat -t 3 -q -c \"print '$INTITER'\"")
    assert result == [[1, 2, 3]]


def test_repeat_negative_times(shell_context):
    with pytest.raises(CommandExecutionError):
        run(shell_context, "repeat -t -1 -q -c 'print hi'")


def test_chrono(shell_context, capsys):
    elapsed = run(shell_context, "chrono -c \"print 'timed'\"")[0]
    assert isinstance(elapsed, float)
    out = capsys.readouterr().out
    assert "timed" in out
    assert "Time elapsed" in out


def test_jobs_lists_itself(shell_context):
    """Tijdens 'jobs' loopt alleen 'jobs' zelf."""
    rows = run(shell_context, "jobs")[0]
    assert [row["command_name"] for row in rows] == ["jobs"]
    assert rows[0]["healthy"] is True


def test_quit(shell_context):
    assert run(shell_context, "exit") == [True]
    assert shell_context.should_exit is True


def test_shell_context_delete_keeps_none_values(shell_context):
    shell_context.set("empty", None)
    assert shell_context.delete("empty") is True
    assert shell_context.delete("empty") is False
