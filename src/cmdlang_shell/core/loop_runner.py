# src/cmdlang_shell/core/loop_runner.py
from __future__ import annotations

import asyncio
import concurrent.futures
import threading
from typing import Any, Coroutine, Optional

_MAIN_LOOP: Optional[asyncio.AbstractEventLoop] = None
_THREAD: Optional[threading.Thread] = None


def ensure_background_loop() -> asyncio.AbstractEventLoop:
    """
    Ensures a persistent asyncio event loop is running on a background thread.
    Submitted commands keep running there (and their job timers keep ticking)
    while the prompt waits for the next input.
    """
    global _MAIN_LOOP, _THREAD
    if _MAIN_LOOP is not None:
        return _MAIN_LOOP

    loop = asyncio.new_event_loop()

    def _run_loop(loop_: asyncio.AbstractEventLoop) -> None:
        asyncio.set_event_loop(loop_)
        loop_.run_forever()

    t = threading.Thread(target=_run_loop, args=(loop,), daemon=True, name="cmdlang-loop")
    t.start()

    _MAIN_LOOP = loop
    _THREAD = t
    return loop


def stop_background_loop() -> None:
    global _MAIN_LOOP, _THREAD
    if _MAIN_LOOP is None:
        return
    _MAIN_LOOP.call_soon_threadsafe(_MAIN_LOOP.stop)
    if _THREAD is not None:
        _THREAD.join(timeout=1)
    _MAIN_LOOP = None
    _THREAD = None


def submit_to_main_loop(coro: Coroutine[Any, Any, Any]) -> concurrent.futures.Future:
    """
    Schedules a coroutine on the persistent background loop without waiting.

    Several submissions can be in flight at the same time; the caller decides
    whether (and how long) to wait on the returned future.

    Raises:
        RuntimeError: When ensure_background_loop() has not been called.
    """
    if _MAIN_LOOP is None:
        coro.close()
        raise RuntimeError("The background event loop is not running.")
    return asyncio.run_coroutine_threadsafe(coro, _MAIN_LOOP)
