# tests/core/test_jobs.py
import asyncio
import logging

from cmdlang_shell.core.managers.job_manager import JobManager


def test_job_manager_slots_are_reused():
    """Een vrijgekomen slot wordt door de volgende job hergebruikt."""
    manager = JobManager(timeout=0)
    job_a = manager.start("a", "a")
    job_b = manager.start("b", "b")
    assert (job_a.index, job_b.index) == (0, 1)

    manager.finish(job_a.index)
    job_c = manager.start("c", "c")
    assert job_c.index == 0
    assert [job.command_name for job in manager.running()] == ["c", "b"]


def test_job_manager_finish_unknown_index():
    manager = JobManager(timeout=0)
    manager.finish(5)
    assert manager.running() == []


def test_job_manager_status():
    manager = JobManager(timeout=0)
    assert manager.status() == ""
    job = manager.start("print", "print hi")
    assert manager.status() == "Running 1 command(s)..."
    job.healthy = False
    assert manager.status() == "Running 1 command(s) (1 unhealthy)..."


def test_job_manager_soft_timeout(caplog):
    """Een job die te lang loopt wordt ongezond, maar niet afgebroken."""
    manager = JobManager(timeout=0.01)

    async def scenario():
        job = manager.start("slow", "slow")
        await asyncio.sleep(0.05)
        assert manager.running() == [job]
        return job

    with caplog.at_level(logging.WARNING):
        job = asyncio.run(scenario())

    assert job.healthy is False
    assert manager.unhealthy_count() == 1
    assert "is running for more than" in caplog.text
    manager.finish(job.index)
    assert manager.running() == []


def test_job_manager_finish_cancels_timer():
    manager = JobManager(timeout=0.01)

    async def scenario():
        job = manager.start("fast", "fast")
        manager.finish(job.index)
        await asyncio.sleep(0.03)
        return job

    job = asyncio.run(scenario())
    assert job.healthy is True
