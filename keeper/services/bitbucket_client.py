"""
Bitbucket Cloud REST client: a user's pull requests with diff statistics
and their commits across the configured repositories.
"""

from collections.abc import Sequence
from datetime import datetime

from keeper.features.cognitive_offboarding.domain.errors import ArtifactServiceError
from keeper.features.cognitive_offboarding.domain.models import RawCommit, RawPullRequest, as_utc
from keeper.features.cognitive_offboarding.pipeline.scoring.complexity import (
    calculate_pr_complexity,
)
from keeper.infrastructure.observability.logging import get_logger

from .http_base import AtlassianHTTPClient

logger = get_logger(__name__)

PAGE_LENGTH = 50
COMMIT_PAGE_LENGTH = 100


def _repository_name(pr: dict) -> str | None:
    return (((pr.get("destination") or {}).get("repository")) or {}).get("full_name")


class BitbucketClient(AtlassianHTTPClient):
    service = "bitbucket"

    def __init__(self, base_url: str, workspace: str, repositories: Sequence[str] = (), **kwargs):
        super().__init__(base_url, **kwargs)
        self.workspace = workspace
        self.repositories = list(repositories)

    async def fetch_pull_requests(self, user_id: str, since: datetime) -> list[RawPullRequest]:
        data = await self.get_json(
            f"/workspaces/{self.workspace}/pullrequests/{user_id}",
            "list pull requests",
            params={
                "q": f"created_on>={as_utc(since).isoformat()}",
                "sort": "-created_on",
                "pagelen": PAGE_LENGTH,
            },
        )

        pull_requests = []
        for pr in data.get("values") or []:
            lines_added, lines_deleted, files_changed = await self._diffstat(pr)
            review_comments = pr.get("comment_count") or 0
            title = pr.get("title") or ""
            try:
                pull_requests.append(
                    RawPullRequest(
                        id=str(pr["id"]),
                        title=title,
                        description=pr.get("description") or "",
                        author=(pr.get("author") or {}).get("account_id"),
                        created=pr.get("created_on"),
                        lines_added=lines_added,
                        lines_deleted=lines_deleted,
                        files_changed=files_changed,
                        review_comment_count=review_comments,
                        complexity_score=calculate_pr_complexity(
                            lines_added, lines_deleted, files_changed, review_comments, title
                        ),
                        repository=_repository_name(pr),
                    )
                )
            except (KeyError, ValueError) as e:
                logger.warning("Skipping malformed pull request", pr_id=pr.get("id"), error=str(e))

        logger.info("Fetched Bitbucket pull requests", user_id=user_id, pr_count=len(pull_requests))
        return pull_requests

    async def _diffstat(self, pr: dict) -> tuple[int, int, int]:
        """(lines added, lines removed, files changed); zeros when the diffstat is unavailable."""
        href = ((pr.get("links") or {}).get("diffstat") or {}).get("href")
        if not href:
            full_name = _repository_name(pr)
            if not full_name:
                return 0, 0, 0
            href = f"/repositories/{full_name}/pullrequests/{pr['id']}/diffstat"

        try:
            data = await self.get_json(href, "diffstat")
        except ArtifactServiceError as e:
            logger.warning(
                "Diffstat unavailable, scoring pull request without it",
                pr_id=pr.get("id"),
                error=str(e),
            )
            return 0, 0, 0

        entries = data.get("values") or []
        added = sum(entry.get("lines_added") or 0 for entry in entries)
        removed = sum(entry.get("lines_removed") or 0 for entry in entries)
        return added, removed, len(entries)

    async def fetch_commits(self, user_id: str, since: datetime) -> list[RawCommit]:
        if not self.repositories:
            logger.debug("No Bitbucket repositories configured for commit history")
            return []

        since = as_utc(since)
        commits = []
        for slug in self.repositories:
            data = await self.get_json(
                f"/repositories/{self.workspace}/{slug}/commits",
                "list commits",
                params={"pagelen": COMMIT_PAGE_LENGTH},
            )
            for commit in data.get("values") or []:
                author = (commit.get("author") or {}).get("user") or {}
                if author.get("account_id") != user_id:
                    continue
                try:
                    raw = RawCommit(
                        hash=commit["hash"],
                        message=commit.get("message") or "",
                        author=user_id,
                        date=commit.get("date"),
                        repository=f"{self.workspace}/{slug}",
                    )
                except (KeyError, ValueError) as e:
                    logger.warning("Skipping malformed commit", repository=slug, error=str(e))
                    continue
                if raw.date is not None and as_utc(raw.date) >= since:
                    commits.append(raw)

        commits.sort(key=lambda c: as_utc(c.date), reverse=True)
        logger.info("Fetched Bitbucket commits", user_id=user_id, commit_count=len(commits))
        return commits
