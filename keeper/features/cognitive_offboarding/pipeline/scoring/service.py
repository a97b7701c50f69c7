"""
Undocumented Intensity scoring service - turns a user's raw tickets, pull
requests and commits into a bounded risk report for one time window.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from keeper.features.cognitive_offboarding.domain.errors import ValidationError
from keeper.features.cognitive_offboarding.domain.models import (
    Commit,
    JiraTicket,
    PullRequest,
    RawCommit,
    RawPullRequest,
    RawTicket,
    TimeWindow,
    UndocumentedIntensityReport,
    as_utc,
    risk_tier,
)
from keeper.features.cognitive_offboarding.domain.ports import ArtifactSource
from keeper.infrastructure.observability.logging import get_logger

from .classifier import LinkClassifier, keyword_link_classifier

logger = get_logger(__name__)


class IntensityScoringService:
    HIGH_ACTIVITY_COMMENTS = 3
    HIGH_ACTIVITY_SUMMARY_LENGTH = 50
    LOW_DOCUMENTATION_RATIO = 0.3
    HIGH_COMPLEXITY_SCORE = 6
    DEFAULT_MAX_COMMITS = 5

    def __init__(
        self,
        artifact_source: ArtifactSource,
        link_classifier: LinkClassifier = keyword_link_classifier,
        max_commits: int = DEFAULT_MAX_COMMITS,
    ):
        self._source = artifact_source
        self._links = link_classifier
        self._max_commits = max_commits

    async def score_user(self, user_id: str, window: TimeWindow) -> UndocumentedIntensityReport:
        """
        Fetch a user's artifacts and score them against ``window``.

        Args:
            user_id: Account id shared by the issue tracker and source control
            window: Lookback window fixed when the scan started

        Returns:
            UndocumentedIntensityReport (score 0 / LOW when nothing qualifies)

        Raises:
            ValidationError: If user_id is empty
            Any collaborator error, unchanged, so callers decide how to isolate it
        """
        if not user_id or not user_id.strip():
            raise ValidationError("User ID is required for intensity scoring")

        try:
            async with asyncio.TaskGroup() as tg:
                tickets_task = tg.create_task(self._source.fetch_tickets(user_id, window.start))
                prs_task = tg.create_task(self._source.fetch_pull_requests(user_id, window.start))
                commits_task = tg.create_task(self._source.fetch_commits(user_id, window.start))
        except ExceptionGroup as eg:
            # Remaining fetches are already cancelled; surface the first failure as-is.
            raise eg.exceptions[0] from None

        tickets, prs, commits = tickets_task.result(), prs_task.result(), commits_task.result()

        report = self.score_records(user_id, window, tickets, prs, commits)
        logger.info(
            "Undocumented intensity calculated",
            user_id=user_id,
            score=report.score,
            risk_level=report.risk_level.value,
            critical_tickets=len(report.critical_tickets),
            high_complexity_prs=len(report.high_complexity_prs),
            documentation_links=len(report.documentation_links),
        )
        return report

    def score_records(
        self,
        user_id: str,
        window: TimeWindow,
        tickets: Sequence[RawTicket],
        pull_requests: Sequence[RawPullRequest],
        commits: Sequence[RawCommit] = (),
    ) -> UndocumentedIntensityReport:
        """Pure scoring over already-fetched records. Equal inputs give equal reports."""
        owned_tickets = [t for t in tickets if t.assignee == user_id]
        if len(owned_tickets) < len(tickets):
            logger.warning(
                "Dropped tickets assigned to another user",
                user_id=user_id,
                dropped=len(tickets) - len(owned_tickets),
            )

        in_window_tickets = [t for t in owned_tickets if window.contains(t.updated)]
        in_window_prs = [pr for pr in pull_requests if window.contains(pr.created)]
        in_window_commits = [c for c in commits if window.contains(c.date)]

        dropped = (
            len(owned_tickets) - len(in_window_tickets)
            + len(pull_requests) - len(in_window_prs)
            + len(commits) - len(in_window_commits)
        )
        if dropped:
            logger.warning(
                "Dropped records outside scan window",
                user_id=user_id,
                dropped=dropped,
                window_start=window.start.isoformat(),
            )

        critical_tickets = tuple(
            ticket
            for ticket in (self._to_ticket(raw) for raw in in_window_tickets)
            if self.is_critical(ticket)
        )
        high_complexity_prs = tuple(
            self._to_pull_request(raw)
            for raw in in_window_prs
            if raw.complexity_score >= self.HIGH_COMPLEXITY_SCORE
        )
        documentation_links = self._collect_documentation_links(critical_tickets, high_complexity_prs)

        numerator = len(critical_tickets) + len(high_complexity_prs)
        score = numerator / max(len(documentation_links), 1)

        specific_artifacts = tuple(
            [ticket.key for ticket in critical_tickets]
            + [f"PR #{pr.id}" for pr in high_complexity_prs]
        )

        return UndocumentedIntensityReport(
            user_id=user_id,
            timeframe=window.timeframe,
            critical_tickets=critical_tickets,
            high_complexity_prs=high_complexity_prs,
            documentation_links=documentation_links,
            score=float(score),
            risk_level=risk_tier(score),
            specific_artifacts=specific_artifacts,
            recent_commits=self._recent_commits(in_window_commits),
        )

    def is_critical(self, ticket: JiraTicket) -> bool:
        """High activity but documented below the threshold ratio."""
        return ticket.is_high_activity() and ticket.documentation_ratio() < self.LOW_DOCUMENTATION_RATIO

    def _to_ticket(self, raw: RawTicket) -> JiraTicket:
        return JiraTicket(
            id=raw.id,
            key=raw.key,
            summary=raw.summary,
            description=raw.description,
            assignee=raw.assignee,
            status=raw.status,
            created=raw.created,
            updated=raw.updated,
            comment_count=raw.comment_count,
            documentation_links=tuple(self._links.extract_links(raw.description)),
        )

    @staticmethod
    def _to_pull_request(raw: RawPullRequest) -> PullRequest:
        return PullRequest(
            id=raw.id,
            title=raw.title,
            description=raw.description,
            author=raw.author,
            created=raw.created,
            lines_added=raw.lines_added,
            lines_deleted=raw.lines_deleted,
            files_changed=raw.files_changed,
            review_comment_count=raw.review_comment_count,
            complexity_score=raw.complexity_score,
            repository=raw.repository,
        )

    def _collect_documentation_links(
        self, tickets: Sequence[JiraTicket], pull_requests: Sequence[PullRequest]
    ) -> tuple[str, ...]:
        # dict keeps first-seen order so repeated runs produce identical tuples
        links: dict[str, None] = {}
        for ticket in tickets:
            links.update(dict.fromkeys(ticket.documentation_links))
        for pr in pull_requests:
            text = f"{pr.title or ''} {pr.description or ''}"
            links.update(dict.fromkeys(self._links.extract_links(text)))
        return tuple(links)

    def _recent_commits(self, commits: Sequence[RawCommit]) -> tuple[Commit, ...]:
        ordered = sorted(commits, key=lambda c: (as_utc(c.date), c.hash), reverse=True)
        return tuple(
            Commit(
                hash=c.hash, message=c.message, author=c.author, date=c.date, repository=c.repository
            )
            for c in ordered[: self._max_commits]
        )
