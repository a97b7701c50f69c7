"""
Scheduled organization gap scan.

Runs the gap scanner on a fixed interval so high-risk users are flagged
before anyone hands in notice. Notifications go through the configured
notification sink.
"""

import asyncio

from keeper.config import settings
from keeper.features.cognitive_offboarding.factory import build_gap_scanner
from keeper.features.cognitive_offboarding.pipeline.scanner.service import GapScanner
from keeper.infrastructure.observability.logging import get_logger
from keeper.services.artifact_source import build_artifact_source

logger = get_logger(__name__)

ERROR_BACKOFF_SECONDS = 60


async def run_org_scan_job(scanner: GapScanner | None = None) -> dict:
    """Run one organization scan and return its summary (plus success/error)."""
    if scanner is not None:
        scan = await scanner.scan_organization()
    else:
        if not settings.atlassian_configured():
            logger.warning("Organization scan skipped: Atlassian credentials not configured")
            return {"success": False, "skipped": True, "error": "Atlassian not configured"}

        source = build_artifact_source()
        try:
            scan = await build_gap_scanner(source).scan_organization()
        finally:
            await source.close()

    result = {"success": scan.success, **scan.summary}
    if scan.error:
        result["error"] = scan.error
    return result


async def start_org_scan_scheduler() -> None:
    """Run the organization scan forever at ORG_SCAN_INTERVAL_MINUTES."""
    interval = settings.ORG_SCAN_INTERVAL_MINUTES
    logger.info("Starting organization scan scheduler", interval_minutes=interval)

    while True:
        try:
            result = await run_org_scan_job()
            if not result.get("skipped", False):
                logger.info("Organization scan cycle completed", **result)

            await asyncio.sleep(interval * 60)

        except Exception as e:
            logger.error(
                "Error in organization scan scheduler", error=str(e), error_type=type(e).__name__
            )
            # Avoid a tight error loop
            await asyncio.sleep(ERROR_BACKOFF_SECONDS)


if __name__ == "__main__":
    asyncio.run(start_org_scan_scheduler())
