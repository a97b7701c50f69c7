# keeper/models/api/offboarding_response.py
"""
Cognitive offboarding API response models.
Used by routes for output formatting.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from keeper.features.cognitive_offboarding.domain.models import UndocumentedIntensityReport
from keeper.features.cognitive_offboarding.domain.session_models import (
    ArchiveResult,
    InterviewResult,
    Question,
    WorkflowSession,
    WorkflowValidation,
)
from keeper.features.cognitive_offboarding.pipeline.scanner.service import OrganizationScan


class IntensityReportResponse(BaseModel):
    """Response model for an undocumented intensity report."""

    user_id: str = Field(..., description="Scored account id")
    timeframe: str = Field(..., description="Lookback window tag")
    undocumented_intensity_score: float = Field(..., description="(critical tickets + complex PRs) / docs")
    risk_level: str = Field(..., description="LOW, MEDIUM, HIGH or CRITICAL")
    critical_tickets: list[str] = Field(..., description="Critical ticket keys")
    high_complexity_prs: list[str] = Field(..., description="High-complexity PR ids")
    documentation_links: list[str] = Field(..., description="Distinct documentation URLs found")
    specific_artifacts: list[str] = Field(..., description="Ticket keys then PR references")
    recent_commits: list[str] = Field(default_factory=list, description="Short hashes of recent commits")

    @classmethod
    def from_domain(cls, report: UndocumentedIntensityReport) -> IntensityReportResponse:
        return cls(
            user_id=report.user_id,
            timeframe=report.timeframe,
            undocumented_intensity_score=report.score,
            risk_level=report.risk_level.value,
            critical_tickets=[t.key for t in report.critical_tickets],
            high_complexity_prs=[pr.id for pr in report.high_complexity_prs],
            documentation_links=list(report.documentation_links),
            specific_artifacts=list(report.specific_artifacts),
            recent_commits=[c.short_hash for c in report.recent_commits],
        )


class QuestionResponse(BaseModel):
    text: str
    artifact_type: str | None = None
    artifact_id: str | None = None
    focus: str
    follow_up: str | None = None

    @classmethod
    def from_domain(cls, question: Question) -> QuestionResponse:
        return cls(
            text=question.text,
            artifact_type=question.artifact_type.value if question.artifact_type else None,
            artifact_id=question.artifact_id,
            focus=question.focus,
            follow_up=question.follow_up,
        )


class InterviewResultResponse(BaseModel):
    """Response for the interview phase."""

    artifacts_analyzed: int = Field(..., description="Artifacts carried into the interview")
    questions_generated: int = Field(..., description="Questions the agent prepared")
    questions: list[QuestionResponse] = Field(..., description="Prepared questions, in order")
    interview_flow: dict[str, list[str]] = Field(..., description="Prompts per interview phase")
    contextual_info: dict[str, Any] = Field(..., description="Context shown to the interviewer")

    @classmethod
    def from_domain(cls, result: InterviewResult) -> InterviewResultResponse:
        return cls(
            artifacts_analyzed=result.artifacts_analyzed,
            questions_generated=result.questions_generated,
            questions=[QuestionResponse.from_domain(q) for q in result.interview.questions],
            interview_flow={block.phase: block.prompts for block in result.interview.interview_flow},
            contextual_info=result.interview.contextual_info,
        )


class ArchiveResultResponse(BaseModel):
    """Response for the archive phase."""

    knowledge_artifact_id: str = Field(..., description="Knowledge artifact id")
    title: str = Field(..., description="Knowledge artifact title")
    page_url: str = Field(..., description="Archived page URL")
    page_id: str = Field(..., description="Archived page id")
    artifacts_linked: list[str] = Field(..., description="Artifact references linked from the page")
    tags: list[str] = Field(..., description="Tags applied to the page")
    confidence: float = Field(..., description="Knowledge confidence (0-1)")
    critical_insights: int = Field(..., description="Number of critical insights extracted")

    @classmethod
    def from_domain(cls, result: ArchiveResult) -> ArchiveResultResponse:
        artifact = result.knowledge_artifact
        return cls(
            knowledge_artifact_id=artifact.id,
            title=artifact.title,
            page_url=result.page.page_url,
            page_id=result.page.page_id,
            artifacts_linked=result.artifacts_linked,
            tags=artifact.tags,
            confidence=artifact.confidence,
            critical_insights=len(result.tacit_knowledge.critical_insights),
        )


class SessionErrorResponse(BaseModel):
    code: str
    message: str
    timestamp: datetime


class WorkflowSessionResponse(BaseModel):
    """Response model for a workflow session."""

    session_id: str = Field(..., description="Session id")
    employee_id: str = Field(..., description="Departing employee")
    triggered_by: str = Field(..., description="Who started the workflow")
    triggered_at: datetime = Field(..., description="When the workflow started")
    state: str = Field(..., description="Current workflow state")
    progress_percentage: int = Field(..., description="Observability-only progress")
    progress: dict[str, Any] = Field(default_factory=dict, description="Phase metadata")
    scan: IntensityReportResponse | None = Field(None, description="Scan results, once available")
    interview: InterviewResultResponse | None = Field(None, description="Interview results")
    archive: ArchiveResultResponse | None = Field(None, description="Archive results")
    errors: list[SessionErrorResponse] = Field(default_factory=list, description="Recorded failures")

    @classmethod
    def from_domain(cls, session: WorkflowSession) -> WorkflowSessionResponse:
        return cls(
            session_id=session.session_id,
            employee_id=session.employee_id,
            triggered_by=session.triggered_by,
            triggered_at=session.triggered_at,
            state=session.state.value,
            progress_percentage=session.progress_percentage,
            progress=session.progress,
            scan=(
                IntensityReportResponse.from_domain(session.scan_results)
                if session.scan_results
                else None
            ),
            interview=(
                InterviewResultResponse.from_domain(session.interview_results)
                if session.interview_results
                else None
            ),
            archive=(
                ArchiveResultResponse.from_domain(session.archive_results)
                if session.archive_results
                else None
            ),
            errors=[
                SessionErrorResponse(code=e.code, message=e.message, timestamp=e.timestamp)
                for e in session.errors
            ],
        )


class SessionListResponse(BaseModel):
    sessions: list[WorkflowSessionResponse]
    total_count: int


class WorkflowValidationResponse(BaseModel):
    """Response for completion validation."""

    is_valid: bool = Field(..., description="True when nothing is missing")
    errors: list[str] = Field(..., description="Every problem found")

    @classmethod
    def from_domain(cls, validation: WorkflowValidation) -> WorkflowValidationResponse:
        return cls(is_valid=validation.is_valid, errors=validation.errors)


class SkippedUserResponse(BaseModel):
    user_id: str
    error: str


class OrganizationScanResponse(BaseModel):
    """Response for an on-demand organization scan."""

    success: bool = Field(..., description="False only when users could not be enumerated")
    summary: dict[str, int] = Field(default_factory=dict, description="Scan counters")
    reports: list[IntensityReportResponse] = Field(default_factory=list, description="Users with gaps")
    skipped: list[SkippedUserResponse] = Field(default_factory=list, description="Users that failed")
    error: str | None = Field(None, description="Enumeration failure, if any")

    @classmethod
    def from_domain(cls, scan: OrganizationScan) -> OrganizationScanResponse:
        return cls(
            success=scan.success,
            summary=scan.summary,
            reports=[IntensityReportResponse.from_domain(r) for r in scan.reports],
            skipped=[SkippedUserResponse(user_id=s.user_id, error=s.error) for s in scan.skipped],
            error=scan.error,
        )
