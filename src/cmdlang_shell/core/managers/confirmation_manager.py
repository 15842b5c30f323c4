# src/cmdlang_shell/core/managers/confirmation_manager.py
import asyncio
import concurrent.futures
import logging
import queue
from typing import Any, Callable, Dict, Optional, Tuple

from prompt_toolkit import PromptSession
from prompt_toolkit.shortcuts import confirm

from cmdlang_shell.model import CommandDefinition

logger = logging.getLogger(__name__)

# Returned by PromptSession.prompt() when a question interrupted the prompt
PROMPT_INTERRUPTED = object()


class ConfirmationManager:
    """
    Routes the confirmation questions of running commands to the prompt thread.

    Commands run on the background loop while the prompt owns the terminal.
    ask() therefore only queues the question, interrupts a running prompt and
    waits; the prompt thread answers the queue with answer_pending().
    """

    def __init__(self, session: Optional[PromptSession] = None,
                 confirm_fn: Callable[[str], bool] = confirm):
        self.session = session
        self._confirm_fn = confirm_fn
        self._pending: "queue.Queue[Tuple[str, concurrent.futures.Future]]" = queue.Queue()

    async def ask(self, command: CommandDefinition, kwargs: Dict[str, Any]) -> bool:
        """Confirmation hook for commands flagged with requires_confirmation."""
        future: concurrent.futures.Future = concurrent.futures.Future()
        self._pending.put((f"⚠️  '{command.name}' needs confirmation {kwargs}. Continue?", future))
        logger.debug("Confirmation requested for '%s'", command.name)
        self._interrupt_prompt()
        return await asyncio.wrap_future(future)

    def has_pending(self) -> bool:
        return not self._pending.empty()

    def answer_pending(self) -> int:
        """Asks every queued question on the calling thread; returns how many were answered."""
        answered = 0
        while True:
            try:
                question, future = self._pending.get_nowait()
            except queue.Empty:
                return answered
            try:
                answer = bool(self._confirm_fn(question))
            except (EOFError, KeyboardInterrupt):
                answer = False
            future.set_result(answer)
            answered += 1

    def _interrupt_prompt(self) -> None:
        app = self.session.app if self.session is not None else None
        if app is None or not app.is_running or app.loop is None:
            return

        def _exit() -> None:
            if app.is_running and not app.is_done:
                app.exit(result=PROMPT_INTERRUPTED)

        app.loop.call_soon_threadsafe(_exit)
