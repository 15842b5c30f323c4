# src/cmdlang_shell/core/core.py
from __future__ import annotations

import logging

from cmdlang_shell.core.command_registry import COMMAND_REGISTRY
from cmdlang_shell.core.generators import ParameterGenerator
from cmdlang_shell.core.lexer import COMMENT_PATTERN, Tokenizer
from cmdlang_shell.core.managers.alias_manager import AliasManager
from cmdlang_shell.core.managers.config_manager import config_manager
from cmdlang_shell.core.managers.job_manager import JobManager
from cmdlang_shell.core.xngine import ExecuteEngine

logger = logging.getLogger(__name__)

# Registration is handled in app.py (register_all_commands), not here,
# to avoid circular imports with the handler modules.


def build_engine(**overrides) -> ExecuteEngine:
    """Builds an engine wired to the global registry and the configured managers."""
    strip_comments = config_manager.get_nested("engine.strip_comments", True)
    options = dict(
        command_registry=COMMAND_REGISTRY,
        alias_store=AliasManager(),
        generator=ParameterGenerator(),
        job_manager=JobManager(),
        tokenizer=Tokenizer(COMMENT_PATTERN if strip_comments else None),
        logger=logger,
    )
    options.update(overrides)
    return ExecuteEngine(**options)


__all__ = ["build_engine"]
