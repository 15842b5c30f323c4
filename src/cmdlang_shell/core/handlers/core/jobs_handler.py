# src/cmdlang_shell/core/handlers/core/jobs_handler.py
from typing import Any, Dict, List

from cmdlang_shell.core.context.shell_context import ShellContext

jobs_spec = {
    "definition": "Display running jobs",
    "detail": "Lists the commands in flight; 'unhealthy' ones exceeded the soft timeout.",
}


def handle_jobs(_kwargs: Dict[str, Any], ctx: ShellContext) -> List[Dict[str, Any]]:
    job_manager = ctx.engine.jobs
    jobs = job_manager.running() if job_manager is not None else []
    rows = []
    for job in jobs:
        state = "healthy" if job.healthy else "unhealthy"
        ctx.print(f"  [{job.index}] {job.command_name:<15} {job.elapsed:8.2f}s  {state}  {job.command_raw}")
        rows.append(job.model_dump())
    return rows
