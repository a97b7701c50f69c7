"""
Wiring for the cognitive offboarding feature.

Builds the scanner and orchestrator from settings so the API lifespan and
the worker job assemble the same object graph.
"""

from keeper.config import settings
from keeper.features.cognitive_offboarding.domain.ports import (
    ArchiveWriter,
    ArtifactSource,
    InterviewAgent,
    NotificationSink,
)
from keeper.features.cognitive_offboarding.interview.agent import ForensicInterviewAgent
from keeper.features.cognitive_offboarding.pipeline.scanner.service import GapScanner
from keeper.features.cognitive_offboarding.pipeline.scoring.service import (
    IntensityScoringService,
)
from keeper.features.cognitive_offboarding.workflow.orchestrator import WorkflowOrchestrator
from keeper.infrastructure.notifications import logging_notification_sink


def build_scoring_service(artifact_source: ArtifactSource) -> IntensityScoringService:
    return IntensityScoringService(artifact_source, max_commits=settings.MAX_INTERVIEW_COMMITS)


def build_gap_scanner(
    artifact_source: ArtifactSource,
    notifier: NotificationSink = logging_notification_sink,
) -> GapScanner:
    return GapScanner(
        artifact_source,
        build_scoring_service(artifact_source),
        notifier,
        max_users=settings.MAX_ACTIVE_USERS,
    )


def build_orchestrator(
    artifact_source: ArtifactSource,
    archive_writer: ArchiveWriter,
    interview_agent: InterviewAgent | None = None,
) -> WorkflowOrchestrator:
    return WorkflowOrchestrator(
        build_scoring_service(artifact_source),
        interview_agent or ForensicInterviewAgent(),
        archive_writer,
        phase_timeout=settings.PHASE_TIMEOUT_SECONDS,
        jira_base_url=settings.JIRA_BASE_URL,
    )
