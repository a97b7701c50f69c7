"""
Health check endpoints.
"""

import time

from fastapi import APIRouter, Request

from keeper.config import settings

router = APIRouter()


@router.get("/healthz")
async def healthz():
    """Basic health check - always returns 200 if app is running."""
    return {"status": "ok", "service": "tacit-keeper"}


@router.get("/readyz")
async def readyz(request: Request):
    """
    Readiness check: Atlassian credentials present and the workflow wired up.
    Configuration only; Atlassian itself is not contacted.
    """
    checks = {}

    config_issues = []
    if not settings.JIRA_BASE_URL:
        config_issues.append("JIRA_BASE_URL not set")
    if not (settings.JIRA_EMAIL and settings.JIRA_API_TOKEN):
        config_issues.append("Jira credentials not set")
    if not settings.BITBUCKET_WORKSPACE:
        config_issues.append("BITBUCKET_WORKSPACE not set")
    if not (settings.BITBUCKET_USERNAME and settings.BITBUCKET_APP_PASSWORD):
        config_issues.append("Bitbucket credentials not set")

    checks["configuration"] = {
        "ok": not config_issues,
        "issues": config_issues or None,
        "environment": settings.environment,
    }

    orchestrator = getattr(request.app.state, "orchestrator", None)
    checks["workflow"] = {
        "ok": orchestrator is not None,
        "active_sessions": len(orchestrator.get_all_active_sessions()) if orchestrator else 0,
    }

    overall_ok = all(check["ok"] for check in checks.values())
    return {"overall_ok": overall_ok, "checks": checks, "timestamp": time.time()}
