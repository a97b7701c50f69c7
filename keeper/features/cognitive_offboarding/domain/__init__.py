"""
Domain layer for cognitive offboarding.

Types, error taxonomy and collaborator protocols. No I/O happens here.
"""

from .errors import (
    ArchiveError,
    ArtifactServiceError,
    InterviewError,
    OffboardingError,
    PermissionDeniedError,
    PhaseOrderError,
    ScanError,
    SessionNotFoundError,
    ValidationError,
)
from .models import (
    ActiveUser,
    ArtifactType,
    CodeArtifact,
    Commit,
    DocumentationLevel,
    JiraTicket,
    PullRequest,
    RawCommit,
    RawPullRequest,
    RawTicket,
    RiskLevel,
    TimeWindow,
    UndocumentedIntensityReport,
    risk_tier,
)
from .session_models import (
    ArchivePageResult,
    ArchiveResult,
    InterviewContext,
    InterviewResponse,
    InterviewResult,
    KnowledgeArtifact,
    Question,
    TacitKnowledge,
    WorkflowSession,
    WorkflowState,
    WorkflowValidation,
)

__all__ = [
    "ActiveUser",
    "ArchiveError",
    "ArchivePageResult",
    "ArchiveResult",
    "ArtifactServiceError",
    "ArtifactType",
    "CodeArtifact",
    "Commit",
    "DocumentationLevel",
    "InterviewContext",
    "InterviewError",
    "InterviewResponse",
    "InterviewResult",
    "JiraTicket",
    "KnowledgeArtifact",
    "OffboardingError",
    "PermissionDeniedError",
    "PhaseOrderError",
    "PullRequest",
    "Question",
    "RawCommit",
    "RawPullRequest",
    "RawTicket",
    "RiskLevel",
    "ScanError",
    "SessionNotFoundError",
    "TacitKnowledge",
    "TimeWindow",
    "UndocumentedIntensityReport",
    "ValidationError",
    "WorkflowSession",
    "WorkflowState",
    "WorkflowValidation",
    "risk_tier",
]
