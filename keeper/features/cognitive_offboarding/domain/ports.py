"""
Collaborator interfaces the core depends on.

Concrete implementations live in keeper.services (Atlassian REST clients),
keeper.infrastructure.notifications and the feature's interview package.
Tests substitute in-memory fakes.
"""

from collections.abc import Sequence
from datetime import datetime
from typing import Any, Protocol

from .models import ActiveUser, RawCommit, RawPullRequest, RawTicket
from .session_models import (
    AgentInterview,
    ArchivePageResult,
    InterviewContext,
    InterviewResponse,
    KnowledgeArtifact,
    TacitKnowledge,
)


class ArtifactSource(Protocol):
    """Issue-tracker + source-control reads. Must honor ``since``; callers re-check anyway."""

    async def fetch_tickets(self, user_id: str, since: datetime) -> list[RawTicket]: ...

    async def fetch_pull_requests(self, user_id: str, since: datetime) -> list[RawPullRequest]: ...

    async def fetch_commits(self, user_id: str, since: datetime) -> list[RawCommit]: ...

    async def fetch_active_users(self, since: datetime) -> list[ActiveUser]: ...


class InterviewAgent(Protocol):
    async def conduct_interview(self, context: InterviewContext) -> AgentInterview: ...

    async def extract_tacit_knowledge(
        self, responses: Sequence[InterviewResponse], context: InterviewContext
    ) -> TacitKnowledge: ...


class ArchiveWriter(Protocol):
    async def create_archive_page(self, artifact: KnowledgeArtifact) -> ArchivePageResult: ...


class NotificationSink(Protocol):
    async def log_notification(self, payload: dict[str, Any]) -> None: ...
