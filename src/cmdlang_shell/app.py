from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import sys
import time

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer
from prompt_toolkit.document import Document
from prompt_toolkit.history import FileHistory
from prompt_toolkit.patch_stdout import patch_stdout

from cmdlang_shell.core.command_registry import register_all_commands
from cmdlang_shell.core.context.shell_context import ShellContext
from cmdlang_shell.core.core import build_engine
from cmdlang_shell.core.errors import ShellError
from cmdlang_shell.core.loop_runner import ensure_background_loop, stop_background_loop, submit_to_main_loop
from cmdlang_shell.core.managers.completion_manager import CompletionManager
from cmdlang_shell.core.managers.config_manager import config_manager
from cmdlang_shell.core.managers.confirmation_manager import PROMPT_INTERRUPTED, ConfirmationManager
from cmdlang_shell.core.utils.configure_logging import configure_logger
from cmdlang_shell.core.utils.path_utils import PathUtils

# Initialize logging based on configuration
DEBUG_LEVEL = config_manager.get_nested("debug.level")
configure_logger(DEBUG_LEVEL)
logger = logging.getLogger(__name__)


def _setup_windows_event_loop_if_needed() -> None:
    """Installs Windows compatible asyncio policy if possible."""
    if not sys.platform.startswith("win"):
        return
    policy = asyncio.WindowsSelectorEventLoopPolicy()
    asyncio.set_event_loop_policy(policy)
    logger.info("Using WindowsSelectorEventLoopPolicy for asyncio on Windows.")


class PromptToolkitCompleter(Completer):
    """
    A wrapper that uses the CompletionManager to generate suggestions
    in a way that prompt_toolkit expects.
    """

    def __init__(self, manager: CompletionManager):
        self.manager = manager

    def get_completions(self, document: Document, complete_event):
        yield from self.manager.generate_completions(document)


def _report_outcome(future: concurrent.futures.Future) -> None:
    """Done-callback of a submission; execute() already printed shell errors."""
    if future.cancelled():
        logger.debug("Submission cancelled.")
        return
    error = future.exception()
    if error is None:
        return
    if isinstance(error, ShellError):
        logger.debug("Command failed: %s", error)
    else:
        logger.error("Unexpected failure: %s", error, exc_info=error)


def _wait_in_foreground(future: concurrent.futures.Future, confirmations: ConfirmationManager,
                        timeout: float) -> None:
    """Gives a submission `timeout` seconds to finish before the prompt returns."""
    deadline = time.monotonic() + timeout
    while not future.done():
        confirmations.answer_pending()
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            break
        concurrent.futures.wait([future], timeout=min(remaining, 0.05))
    confirmations.answer_pending()


# --- Shell Application ---


def start_shell() -> None:
    """Starts the interactive REPL (Read-Eval-Print Loop) of the command shell."""
    _setup_windows_event_loop_if_needed()
    register_all_commands()
    ensure_background_loop()
    logger.debug("Background asyncio event loop is running.")

    confirmations = ConfirmationManager()
    engine = build_engine(confirm=confirmations.ask)
    ctx = ShellContext(engine=engine)
    foreground_wait = float(config_manager.get_nested("engine.foreground_wait", 0.5))

    print("Welcome to cmdlang Shell 1.0 (type 'help' for commands)")

    history_path = PathUtils.get_shell_history_file()
    history = FileHistory(str(history_path))

    completion_manager = CompletionManager(engine, ctx, history)
    session = PromptSession(
        history=history,
        completer=PromptToolkitCompleter(completion_manager),
        complete_while_typing=True,
    )
    ctx.prompt_session = session
    confirmations.session = session
    logger.info("Shell startup; history file at: %s", history_path)

    draft = ""
    try:
        # Output of running commands is printed above the prompt
        with patch_stdout():
            while not ctx.should_exit:
                try:
                    confirmations.answer_pending()
                    status = engine.jobs.status() if engine.jobs is not None else ""
                    if status:
                        print(status)
                    line = session.prompt("cmdlang>> ", default=draft)
                except (EOFError, KeyboardInterrupt):
                    break

                if line is PROMPT_INTERRUPTED:
                    draft = session.default_buffer.text
                    continue
                draft = ""
                line = line.strip()
                if not line:
                    continue

                future = submit_to_main_loop(engine.execute(line, ctx))
                future.add_done_callback(_report_outcome)
                _wait_in_foreground(future, confirmations, foreground_wait)
    finally:
        stop_background_loop()
        print("Bye!")


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for running the shell from the command line."""
    start_shell()
    return 0


if __name__ == "__main__":
    sys.exit(main())
