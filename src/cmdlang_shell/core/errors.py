# src/cmdlang_shell/core/errors.py
from __future__ import annotations

from typing import Iterable, List, Optional


class ShellError(Exception):
    """
    Base class for every failure raised while lexing, parsing or evaluating
    a command line.

    Carries the optional character range [start, end) of the offending
    fragment in the original input so the caller can point at it.
    """

    def __init__(self, message: str, start: Optional[int] = None, end: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.start = start
        self.end = end

    @property
    def position(self) -> Optional[str]:
        if self.start is None or self.end is None:
            return None
        return f"{self.start}:{self.end}"

    def __str__(self) -> str:
        pos = self.position
        return f"{self.message} at {pos}" if pos else self.message


class LexError(ShellError):
    """Malformed quoting or bracket nesting in the raw input."""


class UnknownNameError(ShellError):
    def __init__(self, name: str, start: Optional[int] = None, end: Optional[int] = None,
                 suggestion: Optional[str] = None):
        message = f"Unknown name '{name}'"
        if suggestion:
            message = f"Unknown name '{name}'. Did you mean '{suggestion}'?"
        super().__init__(message, start, end)
        self.name = name
        self.suggestion = suggestion


class UnknownArgumentError(ShellError):
    def __init__(self, arg_name: str):
        super().__init__(f"The argument '{arg_name}' does not exist")
        self.arg_name = arg_name


class MissingRequiredArgumentError(ShellError):
    def __init__(self, names: Iterable[str]):
        self.names: List[str] = list(names)
        super().__init__(f"Required arguments not set! ({','.join(self.names)})")


class InvalidArgumentTypeError(ShellError):
    def __init__(self, arg_name: str, value: object):
        super().__init__(f"Invalid parameter for '{arg_name}' argument: '{value}'")
        self.arg_name = arg_name
        self.value = value


class UnexpectedTokenError(ShellError):
    """Structural violation: misplaced argument, bad operands, missing value..."""


class PropertyAccessError(ShellError):
    pass


class CommandExecutionError(ShellError):
    """The invoked command's callback failed. The original exception is kept as __cause__."""

    def __init__(self, command_name: str, message: str):
        super().__init__(message)
        self.command_name = command_name
