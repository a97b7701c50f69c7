"""
Domain models for the cognitive offboarding feature: time window, raw
collaborator records, scored artifacts and the intensity report.

Raw records (``Raw*``) are pydantic models validated at the collaborator
boundary. Everything downstream of the scoring engine is an immutable
dataclass so a report can be compared field by field.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt

SIX_MONTHS = "6_MONTHS"
LOOKBACK_MONTHS = 6


def as_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def subtract_months(value: datetime, months: int) -> datetime:
    """Calendar month subtraction, clamping the day (Aug 31 - 6 months -> Feb 28/29)."""
    month_index = value.year * 12 + (value.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


@dataclass(frozen=True, slots=True)
class TimeWindow:
    """Fixed lookback window. Computed once when a scan starts."""

    start: datetime
    end: datetime
    timeframe: str = SIX_MONTHS

    @classmethod
    def last_six_months(cls, now: datetime | None = None) -> TimeWindow:
        end = as_utc(now or datetime.now(UTC))
        return cls(start=subtract_months(end, LOOKBACK_MONTHS), end=end)

    def contains(self, timestamp: datetime | None) -> bool:
        # A record without a timestamp cannot be proven inside the window.
        # No upper bound: records touched while the scan is fetching still count.
        if timestamp is None:
            return False
        return as_utc(timestamp) >= self.start


class ArtifactType(str, Enum):
    PR = "PR"
    COMMIT = "COMMIT"
    JIRA_TICKET = "JIRA_TICKET"


class DocumentationLevel(str, Enum):
    NONE = "NONE"
    MINIMAL = "MINIMAL"
    ADEQUATE = "ADEQUATE"
    COMPREHENSIVE = "COMPREHENSIVE"


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


# =================================================================
# RAW COLLABORATOR RECORDS
# =================================================================


class RawTicket(BaseModel):
    """Issue-tracker record as returned by the Jira client."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    key: str
    summary: str = ""
    description: str = ""
    assignee: str | None = None
    status: str | None = None
    created: datetime | None = None
    updated: datetime | None = None
    comment_count: NonNegativeInt = 0


class RawPullRequest(BaseModel):
    """Source-control pull request with its diff statistics."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    title: str = ""
    description: str = ""
    author: str | None = None
    created: datetime | None = None
    lines_added: NonNegativeInt = 0
    lines_deleted: NonNegativeInt = 0
    files_changed: NonNegativeInt = 0
    review_comment_count: NonNegativeInt = 0
    complexity_score: float = Field(default=0.0, ge=0, le=10)
    repository: str | None = None  # "workspace/slug"


class RawCommit(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    hash: str
    message: str = ""
    author: str | None = None
    date: datetime | None = None
    repository: str | None = None


@dataclass(frozen=True, slots=True)
class ActiveUser:
    account_id: str
    display_name: str = "Unknown User"


# =================================================================
# SCORED ENTITIES
# =================================================================


@dataclass(frozen=True, slots=True)
class JiraTicket:
    id: str
    key: str
    summary: str
    description: str
    assignee: str | None
    status: str | None
    created: datetime | None
    updated: datetime
    comment_count: int
    documentation_links: tuple[str, ...] = ()

    def documentation_ratio(self) -> float:
        """
        Heuristic documentation score in [0, 1].

        Long descriptions, documentation links and discussion all count as
        documentation; the raw score saturates at 10.
        """
        raw = (
            len(self.description or "") / 100
            + 2 * len(self.documentation_links)
            + 0.5 * self.comment_count
        )
        return max(0.0, min(min(raw, 10.0) / 10.0, 1.0))

    def is_high_activity(self) -> bool:
        return self.comment_count > 3 or len(self.summary or "") > 50

    def documentation_level(self) -> DocumentationLevel:
        ratio = self.documentation_ratio()
        if ratio == 0:
            return DocumentationLevel.NONE
        if ratio < 0.3:
            return DocumentationLevel.MINIMAL
        if ratio < 0.7:
            return DocumentationLevel.ADEQUATE
        return DocumentationLevel.COMPREHENSIVE


@dataclass(frozen=True, slots=True)
class PullRequest:
    id: str
    title: str
    description: str
    author: str | None
    created: datetime
    lines_added: int
    lines_deleted: int
    files_changed: int
    review_comment_count: int
    complexity_score: float
    repository: str | None = None

    @property
    def lines_changed(self) -> int:
        return self.lines_added + self.lines_deleted


@dataclass(frozen=True, slots=True)
class Commit:
    hash: str
    message: str
    author: str | None
    date: datetime
    repository: str | None = None

    @property
    def short_hash(self) -> str:
        return self.hash[:8]


@dataclass(frozen=True, slots=True)
class CodeArtifact:
    """A concrete PR, commit or ticket used to anchor interview questions."""

    type: ArtifactType
    id: str
    title: str
    author: str | None
    timestamp: datetime | None
    documentation_level: DocumentationLevel
    complexity_indicators: tuple[str, ...] = ()

    @property
    def reference(self) -> str:
        """Human-readable ref carried from scan through to the archived page."""
        if self.type is ArtifactType.PR:
            return f"PR #{self.id}"
        if self.type is ArtifactType.COMMIT:
            return self.id[:8]
        return self.id

    @classmethod
    def from_ticket(cls, ticket: JiraTicket) -> CodeArtifact:
        return cls(
            type=ArtifactType.JIRA_TICKET,
            id=ticket.key,
            title=ticket.summary,
            author=ticket.assignee,
            timestamp=ticket.updated,
            documentation_level=ticket.documentation_level(),
            complexity_indicators=("high_activity", "low_documentation"),
        )

    @classmethod
    def from_pull_request(cls, pr: PullRequest) -> CodeArtifact:
        return cls(
            type=ArtifactType.PR,
            id=pr.id,
            title=pr.title,
            author=pr.author,
            timestamp=pr.created,
            documentation_level=(
                DocumentationLevel.MINIMAL if pr.complexity_score >= 8 else DocumentationLevel.ADEQUATE
            ),
            complexity_indicators=(
                f"complexity_{pr.complexity_score:g}",
                f"files_{pr.files_changed}",
                f"lines_{pr.lines_changed}",
            ),
        )

    @classmethod
    def from_commit(cls, commit: Commit) -> CodeArtifact:
        message = commit.message.strip()
        if not message:
            level = DocumentationLevel.NONE
        elif len(message) < 20:
            level = DocumentationLevel.MINIMAL
        else:
            level = DocumentationLevel.ADEQUATE
        return cls(
            type=ArtifactType.COMMIT,
            id=commit.hash,
            title=message.splitlines()[0] if message else commit.short_hash,
            author=commit.author,
            timestamp=commit.date,
            documentation_level=level,
        )


def risk_tier(score: float) -> RiskLevel:
    """Fixed breakpoints; monotonic non-decreasing in score."""
    if score >= 8:
        return RiskLevel.CRITICAL
    if score >= 6:
        return RiskLevel.HIGH
    if score >= 3:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


@dataclass(frozen=True, slots=True)
class UndocumentedIntensityReport:
    """Per-user aggregate of high-activity / high-complexity work vs. documentation."""

    user_id: str
    timeframe: str
    critical_tickets: tuple[JiraTicket, ...]
    high_complexity_prs: tuple[PullRequest, ...]
    documentation_links: tuple[str, ...]
    score: float
    risk_level: RiskLevel
    specific_artifacts: tuple[str, ...]
    recent_commits: tuple[Commit, ...] = field(default=())

    @classmethod
    def empty(cls, user_id: str) -> UndocumentedIntensityReport:
        return cls(
            user_id=user_id,
            timeframe=SIX_MONTHS,
            critical_tickets=(),
            high_complexity_prs=(),
            documentation_links=(),
            score=0.0,
            risk_level=RiskLevel.LOW,
            specific_artifacts=(),
        )

    def to_code_artifacts(self) -> list[CodeArtifact]:
        """Tickets, then PRs, then commits, in report order."""
        artifacts = [CodeArtifact.from_ticket(t) for t in self.critical_tickets]
        artifacts.extend(CodeArtifact.from_pull_request(pr) for pr in self.high_complexity_prs)
        artifacts.extend(CodeArtifact.from_commit(c) for c in self.recent_commits)
        return artifacts
