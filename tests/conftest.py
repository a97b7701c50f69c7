from datetime import UTC, datetime, timedelta
from types import SimpleNamespace

import pytest

from keeper.features.cognitive_offboarding.domain.models import (
    ActiveUser,
    RawCommit,
    RawPullRequest,
    RawTicket,
    TimeWindow,
)
from keeper.features.cognitive_offboarding.domain.session_models import (
    ArchivePageResult,
    KnowledgeArtifact,
)
from keeper.features.cognitive_offboarding.interview.agent import ForensicInterviewAgent
from keeper.features.cognitive_offboarding.pipeline.scoring.service import (
    IntensityScoringService,
)
from keeper.features.cognitive_offboarding.workflow.orchestrator import WorkflowOrchestrator

NOW = datetime(2024, 8, 31, 12, 0, tzinfo=UTC)


class FakeArtifactSource:
    def __init__(self):
        self.tickets: dict[str, list[RawTicket]] = {}
        self.pull_requests: dict[str, list[RawPullRequest]] = {}
        self.commits: dict[str, list[RawCommit]] = {}
        self.users: list[ActiveUser] = []
        self.failing_users: dict[str, Exception] = {}
        self.enumeration_error: Exception | None = None
        self.calls: list[tuple[str, str]] = []

    def _check(self, user_id: str, kind: str) -> None:
        self.calls.append((kind, user_id))
        if user_id in self.failing_users:
            raise self.failing_users[user_id]

    async def fetch_tickets(self, user_id, since):
        self._check(user_id, "tickets")
        return list(self.tickets.get(user_id, []))

    async def fetch_pull_requests(self, user_id, since):
        self._check(user_id, "pull_requests")
        return list(self.pull_requests.get(user_id, []))

    async def fetch_commits(self, user_id, since):
        self._check(user_id, "commits")
        return list(self.commits.get(user_id, []))

    async def fetch_active_users(self, since):
        if self.enumeration_error:
            raise self.enumeration_error
        return list(self.users)


class FakeArchiveWriter:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.pages: list[KnowledgeArtifact] = []

    async def create_archive_page(self, artifact):
        if self.error:
            raise self.error
        self.pages.append(artifact)
        page_id = str(len(self.pages))
        return ArchivePageResult(
            page_url=f"https://example.atlassian.net/wiki/pages/{page_id}",
            page_id=page_id,
            linked_artifacts=tuple(artifact.source_references),
        )


class RecordingNotificationSink:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.payloads: list[dict] = []

    async def log_notification(self, payload):
        if self.error:
            raise self.error
        self.payloads.append(payload)


def make_ticket(key: str, updated: datetime, **overrides) -> RawTicket:
    fields = {
        "id": key.replace("-", ""),
        "key": key,
        "summary": "Fix it",
        "description": "",
        "assignee": "user123",
        "status": "Done",
        "created": updated - timedelta(days=3) if updated else None,
        "updated": updated,
        "comment_count": 5,
    }
    fields.update(overrides)
    return RawTicket(**fields)


def make_pr(pr_id: str, created: datetime, complexity: float = 7, **overrides) -> RawPullRequest:
    fields = {
        "id": pr_id,
        "title": "Rework billing retries",
        "description": "",
        "author": "user123",
        "created": created,
        "lines_added": 400,
        "lines_deleted": 120,
        "files_changed": 12,
        "review_comment_count": 4,
        "complexity_score": complexity,
    }
    fields.update(overrides)
    return RawPullRequest(**fields)


def make_commit(sha: str, date: datetime, message: str = "Tune retry backoff for ledger sync") -> RawCommit:
    return RawCommit(hash=sha, message=message, author="user123", date=date)


@pytest.fixture
def records():
    """Builders for raw collaborator records."""
    return SimpleNamespace(ticket=make_ticket, pr=make_pr, commit=make_commit)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def window():
    return TimeWindow.last_six_months(NOW)


@pytest.fixture
def artifact_source():
    return FakeArtifactSource()


@pytest.fixture
def seeded_source(artifact_source):
    """user123: two critical tickets, one complex PR, one documentation link, one commit."""
    recent = datetime.now(UTC) - timedelta(days=10)
    artifact_source.tickets["user123"] = [
        make_ticket("PAY-101", recent),
        make_ticket(
            "PAY-102",
            recent,
            summary="Ledger reconciliation drifts when settlement files arrive late",
            comment_count=0,
            description="See https://wiki.example.com/ledger",
        ),
    ]
    artifact_source.pull_requests["user123"] = [make_pr("42", recent, repository="acme/payments")]
    artifact_source.commits["user123"] = [make_commit("a1b2c3d4e5f6a7b8", recent)]
    return artifact_source


@pytest.fixture
def archive_writer():
    return FakeArchiveWriter()


@pytest.fixture
def notifier():
    return RecordingNotificationSink()


@pytest.fixture
def scoring_service(artifact_source):
    return IntensityScoringService(artifact_source)


@pytest.fixture
def orchestrator(seeded_source, archive_writer):
    return WorkflowOrchestrator(
        IntensityScoringService(seeded_source),
        ForensicInterviewAgent(),
        archive_writer,
        jira_base_url="https://acme.atlassian.net",
    )
