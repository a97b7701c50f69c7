"""
Workflow session and the per-phase result shapes it carries.

A session's result slots are filled exactly once, in phase order, by the
orchestrator. Nothing else mutates a session.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from .models import ArtifactType, CodeArtifact, UndocumentedIntensityReport


class WorkflowState(str, Enum):
    TRIGGERED = "TRIGGERED"
    SCANNING = "SCANNING"
    SCAN_COMPLETE = "SCAN_COMPLETE"
    INTERVIEWING = "INTERVIEWING"
    INTERVIEW_COMPLETE = "INTERVIEW_COMPLETE"
    ARCHIVING = "ARCHIVING"
    ARCHIVED = "ARCHIVED"
    FAILED = "FAILED"


# Observability only; never used for control decisions.
STATE_PROGRESS: dict[WorkflowState, int] = {
    WorkflowState.TRIGGERED: 0,
    WorkflowState.SCANNING: 20,
    WorkflowState.SCAN_COMPLETE: 40,
    WorkflowState.INTERVIEWING: 55,
    WorkflowState.INTERVIEW_COMPLETE: 70,
    WorkflowState.ARCHIVING: 85,
    WorkflowState.ARCHIVED: 100,
    WorkflowState.FAILED: 0,
}


# =================================================================
# INTERVIEW
# =================================================================


@dataclass(frozen=True, slots=True)
class Question:
    text: str
    artifact_type: ArtifactType | None
    artifact_id: str | None
    focus: str
    follow_up: str | None = None


@dataclass(slots=True)
class InterviewContext:
    session_id: str
    employee_id: str
    department: str
    role: str
    specific_artifacts: list[CodeArtifact]
    undocumented_intensity_score: float
    recent_pr_count: int = 0
    commit_count: int = 0
    questions: list[Question] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class InterviewResponse:
    question: str
    answer: str
    artifact_id: str | None = None


@dataclass(slots=True)
class InterviewPhaseBlock:
    phase: str
    prompts: list[str]


@dataclass(slots=True)
class AgentInterview:
    """What the conversational agent returns after preparing an interview."""

    questions: list[Question]
    contextual_info: dict[str, Any]
    interview_flow: list[InterviewPhaseBlock] = field(default_factory=list)
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass(frozen=True, slots=True)
class Insight:
    content: str
    artifact_id: str | None
    confidence: float
    response_index: int | None = None
    reason: str | None = None


@dataclass(slots=True)
class TacitKnowledge:
    categories: dict[str, list[Insight]]
    critical_insights: list[Insight]
    artifact_mappings: dict[str, list[str]]
    confidence_score: float
    extracted_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def populated_categories(self) -> list[str]:
        return [name for name, items in self.categories.items() if items]


@dataclass(slots=True)
class InterviewResult:
    context: InterviewContext
    interview: AgentInterview
    artifacts_analyzed: int
    questions_generated: int


# =================================================================
# ARCHIVE
# =================================================================


@dataclass(frozen=True, slots=True)
class ArtifactLink:
    """Where a linked ticket, PR or commit can be opened; url is None when its host is unknown."""

    type: ArtifactType
    id: str
    title: str
    url: str | None = None

    @property
    def reference(self) -> str:
        if self.type is ArtifactType.PR:
            return f"PR #{self.id}"
        if self.type is ArtifactType.COMMIT:
            return self.id[:8]
        return self.id


@dataclass(slots=True)
class KnowledgeArtifact:
    id: str
    employee_id: str
    title: str
    content: str
    tags: list[str] = field(default_factory=list)
    confidence: float = 0.5
    extracted_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    related_tickets: list[str] = field(default_factory=list)
    related_prs: list[str] = field(default_factory=list)
    related_commits: list[str] = field(default_factory=list)
    source_artifacts: list[CodeArtifact] = field(default_factory=list)
    artifact_links: list[ArtifactLink] = field(default_factory=list)

    def validate(self) -> list[str]:
        errors = []
        if not self.id:
            errors.append("ID is required")
        if not self.employee_id:
            errors.append("Employee ID is required")
        if not self.title:
            errors.append("Title is required")
        if not self.content:
            errors.append("Content is required")
        if not 0 <= self.confidence <= 1:
            errors.append("Confidence must be between 0 and 1")
        return errors

    @property
    def source_references(self) -> list[str]:
        return [artifact.reference for artifact in self.source_artifacts]


@dataclass(frozen=True, slots=True)
class ArchivePageResult:
    page_url: str
    page_id: str
    linked_artifacts: tuple[str, ...] = ()


@dataclass(slots=True)
class ArchiveResult:
    knowledge_artifact: KnowledgeArtifact
    page: ArchivePageResult
    tacit_knowledge: TacitKnowledge

    @property
    def artifacts_linked(self) -> list[str]:
        return list(self.page.linked_artifacts)


# =================================================================
# SESSION
# =================================================================


@dataclass(frozen=True, slots=True)
class SessionError:
    code: str
    message: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass(slots=True)
class WorkflowSession:
    session_id: str
    employee_id: str
    triggered_by: str
    triggered_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    state: WorkflowState = WorkflowState.TRIGGERED
    progress: dict[str, Any] = field(default_factory=dict)
    scan_results: UndocumentedIntensityReport | None = None
    interview_results: InterviewResult | None = None
    archive_results: ArchiveResult | None = None
    errors: list[SessionError] = field(default_factory=list)

    @property
    def progress_percentage(self) -> int:
        return STATE_PROGRESS.get(self.state, 0)

    @property
    def department(self) -> str:
        return self.progress.get("department") or "Unknown"

    @property
    def role(self) -> str:
        return self.progress.get("role") or "Unknown"


@dataclass(slots=True)
class WorkflowValidation:
    is_valid: bool
    errors: list[str]
    session: WorkflowSession | None = None
