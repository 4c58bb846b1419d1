"""
Generic background worker runner.

Reads the desired job name from CLI args or the WORKER_JOB environment
variable and runs it against a freshly built application context.
"""

import asyncio
import os
import sys
from collections.abc import Awaitable, Callable

from app.config import get_settings
from app.context import AppContext, create_app_context
from app.infrastructure.observability.logging import get_logger, setup_logging

logger = get_logger(__name__)

JobCoroutine = Callable[[AppContext], Awaitable[object]]


async def start_privacy_reminder_scheduler(context: AppContext) -> None:
    await context.reminder_job.run_forever()


async def run_privacy_reminder_once(context: AppContext) -> dict:
    return await context.reminder_job.run_once()


JOB_REGISTRY: dict[str, JobCoroutine] = {
    "privacy_reminder": start_privacy_reminder_scheduler,
    "privacy_reminder_once": run_privacy_reminder_once,
}


def _resolve_job_name() -> str:
    """Pick the target job from CLI args or WORKER_JOB env variable."""
    if len(sys.argv) > 1:
        return sys.argv[1].strip().lower()
    return os.getenv("WORKER_JOB", "privacy_reminder").strip().lower()


async def run_worker(job_name: str | None = None, context: AppContext | None = None) -> None:
    """Run the requested background job."""
    name = (job_name or _resolve_job_name()).strip().lower()
    if name not in JOB_REGISTRY:
        raise ValueError(
            f"Unknown worker job '{name}'. "
            f"Available jobs: {', '.join(sorted(JOB_REGISTRY.keys()))}"
        )

    owns_context = context is None
    if owns_context:
        context = await create_app_context(get_settings())

    logger.info("Starting background worker", job=name)
    try:
        await JOB_REGISTRY[name](context)
    finally:
        if owns_context:
            await context.close()


def main() -> None:
    """CLI entrypoint."""
    setup_logging(log_level=get_settings().LOG_LEVEL)
    job_name = _resolve_job_name()
    asyncio.run(run_worker(job_name))


if __name__ == "__main__":
    main()
