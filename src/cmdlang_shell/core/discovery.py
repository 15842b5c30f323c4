# src/cmdlang_shell/core/discovery.py
import importlib.util
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple


from cmdlang_shell.core.utils.path_utils import PathUtils
from cmdlang_shell.model import CommandDefinition

logger = logging.getLogger(__name__)

HANDLER_PREFIX = "handle_"
HELP_TEXT_SUFFIX = "_help_text"
SPEC_SUFFIX = "_spec"


def discover_handlers(
        handler_locations: Optional[List[Tuple[Path, str]]] = None,
) -> Tuple[Dict[str, CommandDefinition], Dict[str, str]]:
    """
    Scans the handler directories and returns two dictionaries:
    1. A map of command names to their CommandDefinition.
    2. A map of command names to their help text string (also set on the
       matching CommandDefinition as `help_text`).

    A handler module exposes `handle_<name>(kwargs, ctx)` and optionally
    `<name>_spec` (CommandDefinition fields: args, aliases, definition...)
    and `<name>_help_text`. Modules that fail to load are logged and skipped.
    """
    discovered_commands: Dict[str, CommandDefinition] = {}
    discovered_help_texts: Dict[str, str] = {}

    if handler_locations is None:
        handler_locations = [
            (PathUtils.get_handlers_root(), "cmdlang_shell.core.handlers"),
        ]

    for handlers_dir, base_module_path in handler_locations:
        logger.debug("Scanning for handlers in: '%s'", handlers_dir)

        if not handlers_dir.is_dir():
            logger.warning("Handlers directory not found, skipping: %s", handlers_dir)
            continue

        for file_path in sorted(handlers_dir.glob("**/*_handler.py")):
            try:
                relative_path = file_path.relative_to(handlers_dir)
                module_name_parts = list(relative_path.parts)
                module_name_parts[-1] = file_path.stem
                module_name = f"{base_module_path}.{'.'.join(module_name_parts)}"

                spec = importlib.util.spec_from_file_location(module_name, file_path)
                if not spec or not spec.loader:
                    raise ImportError(f"Could not create spec for {file_path}")

                module = importlib.util.module_from_spec(spec)
                spec.loader.exec_module(module)

                for attr_name in dir(module):
                    if attr_name.startswith(HANDLER_PREFIX):
                        handler_func = getattr(module, attr_name)
                        if not callable(handler_func):
                            continue
                        command_name = attr_name[len(HANDLER_PREFIX):]
                        command_spec = getattr(module, f"{command_name}{SPEC_SUFFIX}", None) or {}
                        discovered_commands[command_name] = CommandDefinition(
                            name=command_name, callback=handler_func, **command_spec
                        )
                        logger.debug("Discovered command '%s'", command_name)

                    elif attr_name.endswith(HELP_TEXT_SUFFIX):
                        help_text_var = getattr(module, attr_name)
                        if isinstance(help_text_var, str):
                            command_name = attr_name[:-len(HELP_TEXT_SUFFIX)]
                            discovered_help_texts[command_name] = help_text_var
                            logger.debug("Discovered help '%s'", command_name)

            except Exception as e:
                logger.error("Failed to load handler module %s: %s", file_path.name, e, exc_info=True)

    for command_name, help_text in discovered_help_texts.items():
        command = discovered_commands.get(command_name)
        if command is not None:
            command.help_text = help_text
        else:
            logger.debug("Help text without command: '%s'", command_name)

    return discovered_commands, discovered_help_texts
