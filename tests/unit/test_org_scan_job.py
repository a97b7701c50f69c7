from datetime import UTC, datetime, timedelta

import pytest

from keeper.features.cognitive_offboarding.domain.models import ActiveUser
from keeper.features.cognitive_offboarding.jobs import org_scan_job
from keeper.features.cognitive_offboarding.pipeline.scanner.service import GapScanner
from keeper.features.cognitive_offboarding.pipeline.scoring.service import (
    IntensityScoringService,
)


@pytest.mark.asyncio
async def test_job_reports_scan_summary(artifact_source, notifier, records):
    recent = datetime.now(UTC) - timedelta(days=2)
    artifact_source.users = [ActiveUser("carol", "Carol")]
    artifact_source.tickets["carol"] = [
        records.ticket(f"OPS-{i}", recent, assignee="carol") for i in range(8)
    ]
    scanner = GapScanner(artifact_source, IntensityScoringService(artifact_source), notifier)

    result = await org_scan_job.run_org_scan_job(scanner)

    assert result["success"] is True
    assert result["users_with_gaps"] == 1
    assert result["critical_risk_users"] == 1
    assert "error" not in result
    assert notifier.payloads[0]["risk_level"] == "CRITICAL"


@pytest.mark.asyncio
async def test_job_carries_enumeration_error(artifact_source, notifier):
    artifact_source.enumeration_error = RuntimeError("jira down")
    scanner = GapScanner(artifact_source, IntensityScoringService(artifact_source), notifier)

    result = await org_scan_job.run_org_scan_job(scanner)

    assert result["success"] is False
    assert result["error"] == "jira down"


@pytest.mark.asyncio
async def test_job_skips_without_credentials(monkeypatch):
    monkeypatch.setattr(org_scan_job.settings, "JIRA_BASE_URL", None)

    result = await org_scan_job.run_org_scan_job()

    assert result == {"success": False, "skipped": True, "error": "Atlassian not configured"}
