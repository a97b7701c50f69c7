"""
Organization gap scanner.

Enumerates users active inside the lookback window, scores each one and
alerts on high-risk users. One user's failure is recorded and skipped; only
a failure to enumerate users fails the scan.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from keeper.features.cognitive_offboarding.domain.models import (
    ActiveUser,
    RiskLevel,
    TimeWindow,
    UndocumentedIntensityReport,
)
from keeper.features.cognitive_offboarding.domain.ports import ArtifactSource, NotificationSink
from keeper.features.cognitive_offboarding.pipeline.scoring.service import (
    IntensityScoringService,
)
from keeper.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

ALERT_LEVELS = (RiskLevel.HIGH, RiskLevel.CRITICAL)


@dataclass(frozen=True, slots=True)
class SkippedUser:
    user_id: str
    error: str


@dataclass(slots=True)
class OrganizationScan:
    success: bool
    reports: list[UndocumentedIntensityReport] = field(default_factory=list)
    skipped: list[SkippedUser] = field(default_factory=list)
    summary: dict[str, int] = field(default_factory=dict)
    error: str | None = None


def recommended_actions(risk_level: RiskLevel, critical_ticket_count: int) -> list[str]:
    if risk_level in ALERT_LEVELS:
        actions = [
            "Schedule immediate knowledge transfer session",
            "Start cognitive offboarding interview for flagged artifacts",
            "Assign backup team members to shadow work",
        ]
    elif risk_level is RiskLevel.MEDIUM:
        actions = [
            "Plan knowledge sharing sessions",
            "Create documentation templates",
            "Set up regular check-ins",
        ]
    else:
        actions = [
            "Encourage documentation best practices",
            "Provide documentation training",
        ]

    if critical_ticket_count > 10:
        actions.append("Consider workload redistribution")
    return actions


class GapScanner:
    def __init__(
        self,
        artifact_source: ArtifactSource,
        scoring_service: IntensityScoringService,
        notifier: NotificationSink,
        max_users: int | None = None,
    ):
        self._source = artifact_source
        self._scoring = scoring_service
        self._notifier = notifier
        self._max_users = max_users

    async def scan_organization(self, now: datetime | None = None) -> OrganizationScan:
        window = TimeWindow.last_six_months(now)
        logger.info("Starting organization gap scan", window_start=window.start.isoformat())

        try:
            users = await self._source.fetch_active_users(window.start)
        except Exception as e:
            logger.error("Failed to enumerate active users", error=str(e), error_type=type(e).__name__)
            return OrganizationScan(success=False, error=str(e))

        if self._max_users is not None:
            users = users[: self._max_users]

        reports: list[UndocumentedIntensityReport] = []
        skipped: list[SkippedUser] = []

        for user in users:
            try:
                report = await self._scoring.score_user(user.account_id, window)
            except Exception as e:
                logger.error(
                    "Error processing user during gap scan",
                    user_id=user.account_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                skipped.append(SkippedUser(user_id=user.account_id, error=str(e)))
                continue

            if report.score <= 0:
                continue

            reports.append(report)
            if report.risk_level in ALERT_LEVELS:
                await self._notify(user, report)

        summary = {
            "total_users_scanned": len(users),
            "users_with_gaps": len(reports),
            "critical_risk_users": sum(1 for r in reports if r.risk_level is RiskLevel.CRITICAL),
            "high_risk_users": sum(1 for r in reports if r.risk_level is RiskLevel.HIGH),
            "skipped_users": len(skipped),
        }
        logger.info("Organization gap scan completed", **summary)

        return OrganizationScan(success=True, reports=reports, skipped=skipped, summary=summary)

    async def _notify(self, user: ActiveUser, report: UndocumentedIntensityReport) -> None:
        try:
            await self._notifier.log_notification(self.build_notification(user, report))
        except Exception as e:
            logger.error(
                "Failed to send knowledge gap notification",
                user_id=user.account_id,
                error=str(e),
            )

    @staticmethod
    def build_notification(user: ActiveUser, report: UndocumentedIntensityReport) -> dict[str, Any]:
        """Everything a human needs to act without re-querying the trackers."""
        critical = len(report.critical_tickets)
        prs = len(report.high_complexity_prs)
        docs = len(report.documentation_links)
        return {
            "type": "UNDOCUMENTED_INTENSITY_DETECTED",
            "timestamp": datetime.now(UTC).isoformat(),
            "user": {"account_id": user.account_id, "display_name": user.display_name},
            "risk_level": report.risk_level.value,
            "undocumented_intensity_score": report.score,
            "critical_tickets": critical,
            "high_complexity_prs": prs,
            "documentation_links": docs,
            "specific_artifacts": list(report.specific_artifacts),
            "message": (
                f"High undocumented intensity detected for {user.display_name}: "
                f"score {report.score:.2f} ({critical} critical tickets + {prs} complex PRs / "
                f"{docs} docs)"
            ),
            "recommended_actions": recommended_actions(report.risk_level, critical),
        }
