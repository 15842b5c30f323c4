# src/cmdlang_shell/core/managers/job_manager.py
import asyncio
import logging
from typing import Dict, List, Optional

from cmdlang_shell.core.managers.config_manager import config_manager
from cmdlang_shell.model import JobInfo

logger = logging.getLogger(__name__)


class JobManager:
    """
    Tracks the commands in flight.

    Jobs live in a sparse slot list: a new job takes the first free slot and
    the slot is released when the job finishes. A job running longer than
    the soft timeout is only flagged unhealthy, never cancelled.
    """

    def __init__(self, timeout: Optional[float] = None):
        if timeout is None:
            timeout = float(config_manager.get_nested("engine.command_timeout", 30))
        self.timeout = timeout
        self._slots: List[Optional[JobInfo]] = []
        self._timers: Dict[int, asyncio.TimerHandle] = {}

    def start(self, command_name: str, command_raw: str) -> JobInfo:
        try:
            index = self._slots.index(None)
        except ValueError:
            index = len(self._slots)
            self._slots.append(None)

        job = JobInfo(index=index, command_name=command_name, command_raw=command_raw)
        self._slots[index] = job

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        if loop is not None and self.timeout > 0:
            self._timers[index] = loop.call_later(self.timeout, self._on_timeout, index)
        logger.debug("Job %d started: %s", index, command_name)
        return job

    def finish(self, index: int) -> None:
        timer = self._timers.pop(index, None)
        if timer is not None:
            timer.cancel()
        if 0 <= index < len(self._slots):
            job = self._slots[index]
            self._slots[index] = None
            if job is not None:
                logger.debug("Job %d finished: %s (%.2fs)", index, job.command_name, job.elapsed)

    def _on_timeout(self, index: int) -> None:
        self._timers.pop(index, None)
        job = self._slots[index] if index < len(self._slots) else None
        if job is None:
            return
        job.healthy = False
        logger.warning(
            "Command '%s' is running for more than %ss (job %d)", job.command_name, self.timeout, index
        )

    def running(self) -> List[JobInfo]:
        return [job for job in self._slots if job is not None]

    def unhealthy_count(self) -> int:
        return sum(1 for job in self.running() if not job.healthy)

    def status(self) -> str:
        """Short summary, e.g. 'Running 2 command(s) (1 unhealthy)...'."""
        count = len(self.running())
        if not count:
            return ""
        info = f"Running {count} command(s)"
        unhealthy = self.unhealthy_count()
        if unhealthy:
            info += f" ({unhealthy} unhealthy)"
        return info + "..."
