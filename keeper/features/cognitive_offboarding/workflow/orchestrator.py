"""
Cognitive offboarding workflow: Trigger -> Scan -> Interview -> Archive.

Each phase checks its state precondition under the session's phase lock,
so a second concurrent call for the same session waits and then fails the
check instead of running the phase twice. Collaborator failures move the
session to FAILED and propagate; nothing is retried here.
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Awaitable, Sequence
from datetime import UTC, date, datetime
from typing import Any, TypeVar

from keeper.features.cognitive_offboarding.domain.errors import (
    ArchiveError,
    InterviewError,
    OffboardingError,
    PermissionDeniedError,
    PhaseOrderError,
    ScanError,
    SessionNotFoundError,
    ValidationError,
)
from keeper.features.cognitive_offboarding.domain.models import (
    TimeWindow,
    UndocumentedIntensityReport,
)
from keeper.features.cognitive_offboarding.domain.ports import ArchiveWriter, InterviewAgent
from keeper.features.cognitive_offboarding.domain.session_models import (
    ArchiveResult,
    InterviewContext,
    InterviewResponse,
    InterviewResult,
    KnowledgeArtifact,
    SessionError,
    WorkflowSession,
    WorkflowState,
    WorkflowValidation,
)
from keeper.features.cognitive_offboarding.interview.questions import generate_artifact_questions
from keeper.features.cognitive_offboarding.pipeline.scoring.service import (
    IntensityScoringService,
)
from keeper.infrastructure.observability.logging import get_logger

from .knowledge import build_artifact_links, build_tags, format_interview_content
from .session_store import InMemorySessionStore

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_KNOWLEDGE_CONFIDENCE = 0.5


class WorkflowOrchestrator:
    def __init__(
        self,
        scoring_service: IntensityScoringService,
        interview_agent: InterviewAgent,
        archive_writer: ArchiveWriter,
        store: InMemorySessionStore | None = None,
        phase_timeout: float | None = None,
        jira_base_url: str | None = None,
    ):
        self._scoring = scoring_service
        self._agent = interview_agent
        self._archive = archive_writer
        self._store = store or InMemorySessionStore()
        self._phase_timeout = phase_timeout
        self._jira_base_url = jira_base_url

    # =================================================================
    # TRIGGER
    # =================================================================

    async def trigger(
        self,
        employee_id: str,
        triggered_by: str = "system",
        department: str | None = None,
        role: str | None = None,
        offboarding_date: date | None = None,
    ) -> WorkflowSession:
        if not employee_id or not employee_id.strip():
            logger.error("Failed to trigger cognitive offboarding workflow", employee_id=employee_id)
            raise ValidationError("Employee ID is required to trigger cognitive offboarding")

        now = datetime.now(UTC)
        session = WorkflowSession(
            session_id=f"session_{uuid.uuid4().hex}",
            employee_id=employee_id,
            triggered_by=triggered_by or "system",
            triggered_at=now,
            progress={
                "department": department or "Unknown",
                "role": role or "Unknown",
                "offboarding_date": offboarding_date.isoformat() if offboarding_date else None,
                "triggered_at": now.isoformat(),
            },
        )
        self._store.add(session)

        logger.info(
            "Cognitive offboarding workflow triggered",
            session_id=session.session_id,
            employee_id=employee_id,
            triggered_by=session.triggered_by,
            department=session.department,
            role=session.role,
        )
        return session

    # =================================================================
    # SCAN
    # =================================================================

    async def execute_scan_phase(self, session_id: str) -> UndocumentedIntensityReport:
        session = self._require_session(session_id)

        async with self._store.lock_for(session_id):
            self._require_state(
                session,
                WorkflowState.TRIGGERED,
                "Scan phase can only run on a newly triggered session",
            )
            self._transition(session, WorkflowState.SCANNING, scan_started=_now())
            logger.info(
                "Starting scan phase for cognitive offboarding",
                session_id=session_id,
                employee_id=session.employee_id,
            )

            window = TimeWindow.last_six_months()
            report = await self._run_phase(
                session,
                "Scan",
                ScanError,
                self._scoring.score_user(session.employee_id, window),
            )

            session.scan_results = report
            self._transition(
                session,
                WorkflowState.SCAN_COMPLETE,
                scan_completed=_now(),
                undocumented_intensity_score=report.score,
                risk_level=report.risk_level.value,
                artifacts_found=len(report.specific_artifacts),
            )

        logger.info(
            "Scan phase completed successfully",
            session_id=session_id,
            employee_id=session.employee_id,
            undocumented_intensity_score=report.score,
            risk_level=report.risk_level.value,
            artifacts_found=len(report.specific_artifacts),
        )
        return report

    # =================================================================
    # INTERVIEW
    # =================================================================

    async def execute_interview_phase(self, session_id: str) -> InterviewResult:
        session = self._require_session(session_id)

        async with self._store.lock_for(session_id):
            self._require_state(
                session,
                WorkflowState.SCAN_COMPLETE,
                "Scan phase must be completed before interview phase",
            )
            self._transition(session, WorkflowState.INTERVIEWING, interview_started=_now())
            logger.info(
                "Starting interview phase for cognitive offboarding",
                session_id=session_id,
                employee_id=session.employee_id,
            )

            report = session.scan_results
            artifacts = report.to_code_artifacts()
            context = InterviewContext(
                session_id=session_id,
                employee_id=session.employee_id,
                department=session.department,
                role=session.role,
                specific_artifacts=artifacts,
                undocumented_intensity_score=report.score,
                recent_pr_count=len(report.high_complexity_prs),
                commit_count=len(report.recent_commits),
                questions=generate_artifact_questions(artifacts),
            )

            interview = await self._run_phase(
                session,
                "Interview",
                InterviewError,
                self._agent.conduct_interview(context),
            )

            result = InterviewResult(
                context=context,
                interview=interview,
                artifacts_analyzed=len(artifacts),
                questions_generated=len(interview.questions),
            )
            session.interview_results = result
            self._transition(
                session,
                WorkflowState.INTERVIEW_COMPLETE,
                interview_completed=_now(),
                artifacts_analyzed=result.artifacts_analyzed,
                questions_generated=result.questions_generated,
            )

        logger.info(
            "Interview phase completed successfully",
            session_id=session_id,
            employee_id=session.employee_id,
            artifacts_analyzed=result.artifacts_analyzed,
            questions_generated=result.questions_generated,
        )
        return result

    # =================================================================
    # ARCHIVE
    # =================================================================

    async def execute_archive_phase(
        self, session_id: str, responses: Sequence[InterviewResponse] = ()
    ) -> ArchiveResult:
        session = self._require_session(session_id)
        responses = list(responses or ())

        async with self._store.lock_for(session_id):
            self._require_state(
                session,
                WorkflowState.INTERVIEW_COMPLETE,
                "Interview phase must be completed before archive phase",
            )
            self._transition(session, WorkflowState.ARCHIVING, archive_started=_now())
            logger.info(
                "Starting archive phase for cognitive offboarding",
                session_id=session_id,
                employee_id=session.employee_id,
                response_count=len(responses),
            )

            result = await self._run_phase(
                session, "Archive", ArchiveError, self._archive_session(session, responses)
            )

            session.archive_results = result
            self._transition(
                session,
                WorkflowState.ARCHIVED,
                archive_completed=_now(),
                confluence_page_url=result.page.page_url,
                artifacts_linked=len(result.artifacts_linked),
                knowledge_confidence=result.knowledge_artifact.confidence,
            )

        logger.info(
            "Archive phase completed successfully - cognitive offboarding workflow complete",
            session_id=session_id,
            employee_id=session.employee_id,
            confluence_page_url=result.page.page_url,
            artifacts_linked=len(result.artifacts_linked),
            knowledge_confidence=result.knowledge_artifact.confidence,
        )
        return result

    async def _archive_session(
        self, session: WorkflowSession, responses: list[InterviewResponse]
    ) -> ArchiveResult:
        report = session.scan_results
        context = session.interview_results.context

        knowledge = await self._agent.extract_tacit_knowledge(responses, context)

        artifact = KnowledgeArtifact(
            id=f"knowledge_{session.session_id}_{int(datetime.now(UTC).timestamp() * 1000)}",
            employee_id=session.employee_id,
            title=f"Cognitive Offboarding - {session.role}",
            content=format_interview_content(responses, knowledge),
            tags=build_tags(report, knowledge, session.department, session.role),
            confidence=knowledge.confidence_score or DEFAULT_KNOWLEDGE_CONFIDENCE,
            related_tickets=[t.key for t in report.critical_tickets],
            related_prs=[pr.id for pr in report.high_complexity_prs],
            related_commits=[c.hash for c in report.recent_commits],
            source_artifacts=list(context.specific_artifacts),
            artifact_links=build_artifact_links(report, self._jira_base_url),
        )

        problems = artifact.validate()
        if problems:
            raise ArchiveError(
                f"Invalid knowledge artifact: {', '.join(problems)}",
                session_id=session.session_id,
            )

        page = await self._archive.create_archive_page(artifact)
        return ArchiveResult(knowledge_artifact=artifact, page=page, tacit_knowledge=knowledge)

    # =================================================================
    # COMPOSITION / QUERIES
    # =================================================================

    async def execute_complete_workflow(
        self,
        employee_id: str,
        triggered_by: str = "system",
        department: str | None = None,
        role: str | None = None,
        offboarding_date: date | None = None,
        responses: Sequence[InterviewResponse] = (),
    ) -> WorkflowSession:
        session = await self.trigger(
            employee_id,
            triggered_by=triggered_by,
            department=department,
            role=role,
            offboarding_date=offboarding_date,
        )
        try:
            await self.execute_scan_phase(session.session_id)
            await self.execute_interview_phase(session.session_id)
            await self.execute_archive_phase(session.session_id, responses)
        except OffboardingError as e:
            logger.error(
                "Complete cognitive offboarding workflow failed",
                session_id=session.session_id,
                employee_id=employee_id,
                error=e.message,
                error_code=e.code,
            )
            raise

        logger.info(
            "Complete cognitive offboarding workflow executed successfully",
            session_id=session.session_id,
            employee_id=employee_id,
            final_state=session.state.value,
            progress_percentage=session.progress_percentage,
        )
        return session

    def get_workflow_session(self, session_id: str) -> WorkflowSession | None:
        return self._store.get(session_id)

    def get_all_active_sessions(self) -> list[WorkflowSession]:
        return self._store.all()

    def validate_workflow_completion(self, session_id: str) -> WorkflowValidation:
        """
        Check that a session finished and that every scanned artifact reached the archive.

        Returns every problem found rather than stopping at the first one.
        """
        session = self._store.get(session_id)
        if session is None:
            return WorkflowValidation(is_valid=False, errors=["Session not found"])

        errors = []
        if session.state is not WorkflowState.ARCHIVED:
            errors.append(f"Workflow not completed. Current state: {session.state.value}")
        if session.scan_results is None:
            errors.append("Scan results missing")
        if session.interview_results is None:
            errors.append("Interview results missing")
        if session.archive_results is None:
            errors.append("Archive results missing")

        if session.scan_results is not None and session.archive_results is not None:
            archived = set(session.archive_results.knowledge_artifact.source_references)
            missing = [ref for ref in session.scan_results.specific_artifacts if ref not in archived]
            if missing:
                errors.append(
                    f"Artifact references not maintained from scan to archive: {', '.join(missing)}"
                )

        return WorkflowValidation(is_valid=not errors, errors=errors, session=session)

    # =================================================================
    # INTERNALS
    # =================================================================

    def _require_session(self, session_id: str) -> WorkflowSession:
        session = self._store.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Workflow session not found: {session_id}", session_id=session_id)
        return session

    @staticmethod
    def _require_state(session: WorkflowSession, expected: WorkflowState, message: str) -> None:
        if session.state is not expected:
            logger.warning(
                "Workflow phase requested out of order",
                session_id=session.session_id,
                expected_state=expected.value,
                current_state=session.state.value,
            )
            raise PhaseOrderError(message, session_id=session.session_id)

    @staticmethod
    def _transition(session: WorkflowSession, state: WorkflowState, **progress: Any) -> None:
        session.state = state
        session.progress.update(progress)
        session.progress["last_updated"] = _now()
        logger.info(
            "Workflow state updated",
            session_id=session.session_id,
            employee_id=session.employee_id,
            state=state.value,
            progress_percentage=session.progress_percentage,
        )

    async def _run_phase(
        self,
        session: WorkflowSession,
        phase: str,
        error_cls: type[OffboardingError],
        awaitable: Awaitable[T],
    ) -> T:
        """Await a collaborator call; on any failure record it, go FAILED and raise."""
        try:
            return await asyncio.wait_for(awaitable, timeout=self._phase_timeout)
        except PermissionDeniedError as e:
            # Upstream detail was logged by the client; only the generic message travels on.
            self._fail(session, phase, e.code, e.message)
            raise PermissionDeniedError(e.service, session_id=session.session_id) from e
        except asyncio.TimeoutError as e:
            message = f"{phase} phase timed out after {self._phase_timeout} seconds"
            self._fail(session, phase, error_cls.code, message)
            raise error_cls(message, session_id=session.session_id) from e
        except OffboardingError as e:
            self._fail(session, phase, e.code, e.message)
            if e.session_id is None:
                e.session_id = session.session_id
            raise
        except Exception as e:
            self._fail(session, phase, error_cls.code, str(e))
            raise error_cls(f"{phase} failed: {e}", session_id=session.session_id) from e

    def _fail(self, session: WorkflowSession, phase: str, code: str, message: str) -> None:
        session.errors.append(SessionError(code=code, message=message))
        self._transition(session, WorkflowState.FAILED, failed_phase=phase.lower())
        logger.error(
            f"{phase} phase failed",
            session_id=session.session_id,
            employee_id=session.employee_id,
            error=message,
            error_code=code,
        )


def _now() -> str:
    return datetime.now(UTC).isoformat()
