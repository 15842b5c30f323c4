# src/cmdlang_shell/core/command_registry.py
import logging
from typing import Any, Callable, Dict, Iterator, List, Optional

from cmdlang_shell.model import CommandDefinition

logger = logging.getLogger(__name__)


class CommandRegistry:
    """
    Ordered mapping from command name to its CommandDefinition.

    Aliases declared by a command are a secondary lookup over the same
    definitions; canonical_name() resolves both.
    """

    def __init__(self) -> None:
        self._commands: Dict[str, CommandDefinition] = {}

    def register(self, command: CommandDefinition) -> None:
        if command.name in self._commands:
            logger.warning("Command '%s' is already registered, replacing it", command.name)
        self._commands[command.name] = command
        logger.debug("Registered command '%s'", command.name)

    def unregister(self, name: str) -> None:
        self._commands.pop(name, None)

    def get(self, name: str) -> Optional[CommandDefinition]:
        canonical = self.canonical_name(name)
        return self._commands.get(canonical) if canonical else None

    def canonical_name(self, name: str) -> Optional[str]:
        if name in self._commands:
            return name
        for cname, command in self._commands.items():
            if name in command.aliases:
                return cname
        return None

    def names(self) -> List[str]:
        return list(self._commands.keys())

    def clear(self) -> None:
        self._commands.clear()

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.canonical_name(name) is not None

    def __iter__(self) -> Iterator[CommandDefinition]:
        return iter(list(self._commands.values()))

    def __len__(self) -> int:
        return len(self._commands)


# The central registry, populated dynamically.
COMMAND_REGISTRY = CommandRegistry()


def register_command(name: str, handler: Callable[..., Any], **spec: Any) -> CommandDefinition:
    """Adds a command and its handler function to the registry."""
    command = CommandDefinition(name=name, callback=handler, **spec)
    COMMAND_REGISTRY.register(command)
    return command


def register_all_commands() -> None:
    """Discovers all handlers and help texts, then registers them."""
    # Late import: discovery loads handler modules that import this module
    from cmdlang_shell.core.discovery import discover_handlers

    logger.debug("Discovering all command handlers and help texts...")
    discovered_commands, _ = discover_handlers()

    for name, command in discovered_commands.items():
        if name not in COMMAND_REGISTRY:
            COMMAND_REGISTRY.register(command)

    logger.debug("Successfully registered %d commands.", len(COMMAND_REGISTRY))
