"""
Jira Cloud REST client: a user's recently updated tickets and the set of
assignees active in a window.
"""

from datetime import datetime
from typing import Any

from keeper.features.cognitive_offboarding.domain.models import ActiveUser, RawTicket
from keeper.infrastructure.observability.logging import get_logger

from .http_base import AtlassianHTTPClient

logger = get_logger(__name__)

SEARCH_PATH = "/rest/api/3/search"
TICKET_FIELDS = "summary,description,assignee,status,created,updated,comment"
USER_TICKET_LIMIT = 50
ACTIVE_USER_SCAN_LIMIT = 100

JIRA_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S.%f%z"


def parse_jira_datetime(value: str | None) -> datetime | None:
    """Jira sends ``2024-05-01T10:00:00.000+0000``; fall back to plain ISO 8601."""
    if not value:
        return None
    try:
        return datetime.strptime(value, JIRA_DATETIME_FORMAT)
    except ValueError:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))


def adf_to_text(node: Any) -> str:
    """Flatten an Atlassian Document Format body (API v3) to plain text."""
    if node is None:
        return ""
    if isinstance(node, str):
        return node
    if isinstance(node, list):
        return "".join(adf_to_text(child) for child in node)
    if not isinstance(node, dict):
        return ""

    parts = []
    if node.get("type") == "text":
        parts.append(node.get("text", ""))
    # Inline cards and links carry URLs outside the text
    href = (node.get("attrs") or {}).get("url") or (node.get("attrs") or {}).get("href")
    if href:
        parts.append(f" {href} ")
    for mark in node.get("marks") or []:
        link = (mark.get("attrs") or {}).get("href")
        if mark.get("type") == "link" and link:
            parts.append(f" {link} ")
    parts.append(adf_to_text(node.get("content")))
    if node.get("type") in ("paragraph", "heading", "listItem"):
        parts.append("\n")
    return "".join(parts)


def _jql_date(since: datetime) -> str:
    return since.strftime("%Y-%m-%d")


def jql_string(value: str) -> str:
    """Quote a value as a JQL string literal so it cannot close the quotes and add clauses."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class JiraClient(AtlassianHTTPClient):
    service = "jira"

    async def search_issues(self, jql: str, max_results: int, fields: str = TICKET_FIELDS) -> list[dict]:
        data = await self.get_json(
            SEARCH_PATH,
            "search",
            params={"jql": jql, "maxResults": max_results, "fields": fields},
        )
        return data.get("issues") or []

    async def fetch_tickets(self, user_id: str, since: datetime) -> list[RawTicket]:
        jql = f'assignee = {jql_string(user_id)} AND updated >= "{_jql_date(since)}" ORDER BY updated DESC'
        issues = await self.search_issues(jql, USER_TICKET_LIMIT)

        tickets = []
        for issue in issues:
            ticket = self._to_raw_ticket(issue)
            if ticket is not None:
                tickets.append(ticket)

        logger.info("Fetched Jira tickets", user_id=user_id, ticket_count=len(tickets))
        return tickets

    async def fetch_active_users(self, since: datetime) -> list[ActiveUser]:
        jql = f'updated >= "{_jql_date(since)}" ORDER BY updated DESC'
        issues = await self.search_issues(jql, ACTIVE_USER_SCAN_LIMIT, fields="assignee")

        users: dict[str, ActiveUser] = {}
        for issue in issues:
            assignee = (issue.get("fields") or {}).get("assignee") or {}
            account_id = assignee.get("accountId")
            if account_id and account_id not in users:
                users[account_id] = ActiveUser(
                    account_id=account_id,
                    display_name=assignee.get("displayName") or "Unknown User",
                )

        logger.info("Enumerated active Jira users", user_count=len(users))
        return list(users.values())

    @staticmethod
    def _to_raw_ticket(issue: dict) -> RawTicket | None:
        fields = issue.get("fields") or {}
        try:
            return RawTicket(
                id=str(issue["id"]),
                key=issue["key"],
                summary=fields.get("summary") or "",
                description=adf_to_text(fields.get("description")).strip(),
                assignee=(fields.get("assignee") or {}).get("accountId"),
                status=(fields.get("status") or {}).get("name"),
                created=parse_jira_datetime(fields.get("created")),
                updated=parse_jira_datetime(fields.get("updated")),
                comment_count=(fields.get("comment") or {}).get("total", 0),
            )
        except (KeyError, ValueError) as e:
            logger.warning("Skipping malformed Jira issue", issue_id=issue.get("id"), error=str(e))
            return None
