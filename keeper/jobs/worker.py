"""
Entry point for the ``keeper-worker`` process.

The job comes from the first CLI argument, else from WORKER_JOB, else the
recurring organization scan.
"""

import asyncio
import os
import sys
from collections.abc import Awaitable, Callable

from keeper.config import settings
from keeper.features.cognitive_offboarding.jobs.org_scan_job import (
    run_org_scan_job,
    start_org_scan_scheduler,
)
from keeper.infrastructure.observability.logging import get_logger, setup_logging

logger = get_logger(__name__)

DEFAULT_JOB = "org_scan"

JobCoroutine = Callable[[], Awaitable[object]]

JOB_REGISTRY: dict[str, JobCoroutine] = {
    "org_scan": start_org_scan_scheduler,
    "org_scan_once": run_org_scan_job,
}


def _normalize(name: str) -> str:
    return name.strip().lower()


def _resolve_job_name() -> str:
    if len(sys.argv) > 1:
        return _normalize(sys.argv[1])
    return _normalize(os.getenv("WORKER_JOB", DEFAULT_JOB))


async def run_worker(job_name: str | None = None) -> None:
    """
    Await the registered job until it returns.

    Raises:
        ValueError: If the name is not in JOB_REGISTRY
    """
    name = _normalize(job_name or _resolve_job_name())
    job = JOB_REGISTRY.get(name)
    if job is None:
        raise ValueError(f"Unknown worker job '{name}'. Known jobs: {', '.join(sorted(JOB_REGISTRY))}")

    logger.info("Worker job starting", job=name)
    await job()


def main() -> None:
    setup_logging(log_level=settings.LOG_LEVEL)
    asyncio.run(run_worker(_resolve_job_name()))


if __name__ == "__main__":
    main()
