"""
Composite ArtifactSource: tickets and active users from Jira, pull requests
and commits from Bitbucket.
"""

from datetime import datetime

from keeper.config import settings
from keeper.features.cognitive_offboarding.domain.models import (
    ActiveUser,
    RawCommit,
    RawPullRequest,
    RawTicket,
)

from .bitbucket_client import BitbucketClient
from .confluence_client import ConfluenceClient
from .jira_client import JiraClient


class AtlassianArtifactSource:
    def __init__(self, jira: JiraClient, bitbucket: BitbucketClient):
        self.jira = jira
        self.bitbucket = bitbucket

    async def fetch_tickets(self, user_id: str, since: datetime) -> list[RawTicket]:
        return await self.jira.fetch_tickets(user_id, since)

    async def fetch_pull_requests(self, user_id: str, since: datetime) -> list[RawPullRequest]:
        return await self.bitbucket.fetch_pull_requests(user_id, since)

    async def fetch_commits(self, user_id: str, since: datetime) -> list[RawCommit]:
        return await self.bitbucket.fetch_commits(user_id, since)

    async def fetch_active_users(self, since: datetime) -> list[ActiveUser]:
        return await self.jira.fetch_active_users(since)

    async def close(self) -> None:
        await self.jira.close()
        await self.bitbucket.close()


def build_artifact_source() -> AtlassianArtifactSource:
    """Clients wired from settings."""
    timeout = settings.ATLASSIAN_REQUEST_TIMEOUT
    return AtlassianArtifactSource(
        jira=JiraClient(settings.JIRA_BASE_URL or "", auth=settings.jira_auth(), timeout=timeout),
        bitbucket=BitbucketClient(
            settings.BITBUCKET_BASE_URL,
            workspace=settings.BITBUCKET_WORKSPACE or "",
            repositories=settings.bitbucket_repositories(),
            auth=settings.bitbucket_auth(),
            timeout=timeout,
        ),
    )


def build_confluence_client() -> ConfluenceClient:
    return ConfluenceClient(
        settings.confluence_base_url(),
        space_key=settings.CONFLUENCE_SPACE_KEY,
        auth=settings.jira_auth(),
        timeout=settings.ATLASSIAN_REQUEST_TIMEOUT,
    )
