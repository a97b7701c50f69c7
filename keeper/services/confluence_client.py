"""
Confluence Cloud REST client - writes knowledge artifacts as pages in the
legacy-knowledge space.
"""

import html

from keeper.features.cognitive_offboarding.domain.errors import ArtifactServiceError
from keeper.features.cognitive_offboarding.domain.models import ArtifactType
from keeper.features.cognitive_offboarding.domain.session_models import (
    ArchivePageResult,
    ArtifactLink,
    KnowledgeArtifact,
)
from keeper.infrastructure.observability.logging import get_logger

from .http_base import AtlassianHTTPClient

logger = get_logger(__name__)

CONTENT_PATH = "/rest/api/content"

BACKLINK_NOTES = {
    ArtifactType.JIRA_TICKET: "add a comment linking to this page",
    ArtifactType.PR: "add a comment linking to this page for context",
    ArtifactType.COMMIT: "context and rationale documented on this page",
}


def _paragraphs(text: str) -> str:
    blocks = [block.strip() for block in text.split("\n\n") if block.strip()]
    return "".join(
        "<p>" + "<br/>".join(html.escape(line) for line in block.splitlines()) + "</p>"
        for block in blocks
    )


def _backlink_item(link: ArtifactLink) -> str:
    label = html.escape(link.reference)
    if link.url:
        label = f'<a href="{html.escape(link.url)}">{label}</a>'
    return f"<li>{label}: {BACKLINK_NOTES[link.type]}</li>"


def render_storage_body(artifact: KnowledgeArtifact) -> str:
    """Confluence storage-format XHTML. Every interpolated value is escaped."""
    rows = [
        ("Employee", artifact.employee_id),
        ("Extracted", artifact.extracted_at.isoformat()),
        ("Confidence", f"{artifact.confidence:.2f}"),
        ("Related tickets", ", ".join(artifact.related_tickets) or "None"),
        ("Related pull requests", ", ".join(f"PR #{pr}" for pr in artifact.related_prs) or "None"),
        ("Related commits", ", ".join(c[:8] for c in artifact.related_commits) or "None"),
    ]
    table = "".join(
        f"<tr><th>{html.escape(label)}</th><td>{html.escape(value)}</td></tr>" for label, value in rows
    )
    sources = "".join(
        f"<li>{html.escape(a.reference)}: {html.escape(a.title)}</li>" for a in artifact.source_artifacts
    )
    backlinks = "".join(_backlink_item(link) for link in artifact.artifact_links)

    return (
        f"<h1>{html.escape(artifact.title)}</h1>"
        f"<table><tbody>{table}</tbody></table>"
        f"<h2>Captured Knowledge</h2>{_paragraphs(artifact.content)}"
        f"<h2>Source Artifacts</h2><ul>{sources or '<li>None</li>'}</ul>"
        f"<h2>Artifacts to Update</h2>"
        f"<p>These artifacts should reference this page:</p><ul>{backlinks or '<li>None</li>'}</ul>"
    )


class ConfluenceClient(AtlassianHTTPClient):
    service = "confluence"

    def __init__(self, base_url: str, space_key: str, **kwargs):
        super().__init__(base_url, **kwargs)
        self.space_key = space_key

    def page_title(self, artifact: KnowledgeArtifact) -> str:
        # Titles are unique per space
        return f"{artifact.title} - {artifact.employee_id} - {artifact.extracted_at:%Y-%m-%d %H%M%S}"

    async def create_archive_page(self, artifact: KnowledgeArtifact) -> ArchivePageResult:
        payload = {
            "type": "page",
            "title": self.page_title(artifact),
            "space": {"key": self.space_key},
            "body": {
                "storage": {"value": render_storage_body(artifact), "representation": "storage"}
            },
            "metadata": {
                "labels": [{"prefix": "global", "name": tag} for tag in artifact.tags],
            },
        }

        data = await self.post_json(CONTENT_PATH, "create page", payload)
        page_id = data.get("id")
        if not page_id:
            raise ArtifactServiceError(self.service, "Confluence did not return a page id")

        links = data.get("_links") or {}
        base = links.get("base") or self.base_url
        webui = links.get("webui") or f"/pages/{page_id}"
        page_url = f"{base}{webui}"

        logger.info(
            "Confluence archive page created",
            page_id=page_id,
            employee_id=artifact.employee_id,
            artifacts_linked=len(artifact.source_artifacts),
        )
        return ArchivePageResult(
            page_url=page_url,
            page_id=str(page_id),
            linked_artifacts=tuple(artifact.source_references),
        )
