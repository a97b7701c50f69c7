"""
Knowledge artifact content and tags for the archive phase.
"""

import re
from collections.abc import Sequence

from keeper.features.cognitive_offboarding.domain.models import (
    ArtifactType,
    UndocumentedIntensityReport,
)
from keeper.features.cognitive_offboarding.domain.session_models import (
    ArtifactLink,
    Insight,
    InterviewResponse,
    TacitKnowledge,
)

NO_RESPONSES_CONTENT = (
    "No interview responses captured. This knowledge artifact was generated from "
    "automated analysis of code artifacts and undocumented intensity patterns only."
)

MAX_TAGS = 10

BITBUCKET_WEB_URL = "https://bitbucket.org"

CATEGORY_TITLES = {
    "architecturalDecisions": "Architectural Decisions",
    "businessConstraints": "Business Constraints",
    "technicalDebt": "Technical Debt",
    "processKnowledge": "Process Knowledge",
    "riskFactors": "Risk Factors",
    "undocumentedDependencies": "Undocumented Dependencies",
}

_WHITESPACE = re.compile(r"\s+")


def format_interview_content(
    responses: Sequence[InterviewResponse], knowledge: TacitKnowledge | None
) -> str:
    if not responses:
        return NO_RESPONSES_CONTENT

    parts = ["# Cognitive Offboarding Interview Results", "", "## Interview Responses", ""]
    for index, response in enumerate(responses, start=1):
        parts.append(f"**Question {index}:** {response.question}")
        parts.append("")
        parts.append(f"**Response:** {response.answer}")
        parts.append("")
        if response.artifact_id:
            parts.append(f"*Related to artifact: {response.artifact_id}*")
            parts.append("")
        parts.append("---")
        parts.append("")

    if knowledge and knowledge.critical_insights:
        parts.extend(["## Critical Insights Extracted", ""])
        for index, insight in enumerate(knowledge.critical_insights, start=1):
            parts.append(f"{index}. **{insight.reason}**")
            parts.append(f"   {insight.content}")
            parts.append("")

    if knowledge and knowledge.populated_categories():
        parts.extend(["## Tacit Knowledge Summary", ""])
        for name in knowledge.populated_categories():
            parts.extend([f"### {CATEGORY_TITLES.get(name, name)}", ""])
            parts.extend(_insight_lines(knowledge.categories[name]))

    return "\n".join(parts)


def _insight_lines(insights: Sequence[Insight]) -> list[str]:
    lines = []
    for index, insight in enumerate(insights, start=1):
        lines.append(f"{index}. {insight.content}")
        if insight.artifact_id:
            lines.append(f"   *Related to: {insight.artifact_id}*")
        lines.append("")
    return lines


def build_artifact_links(
    report: UndocumentedIntensityReport, jira_base_url: str | None = None
) -> list[ArtifactLink]:
    """
    Browse URLs for every ticket, PR and commit the archive references.

    Tickets need the Jira site URL; PRs and commits need the repository they
    were fetched from. Without those the link is kept with url None.
    """
    jira = jira_base_url.rstrip("/") if jira_base_url else None
    links = [
        ArtifactLink(
            type=ArtifactType.JIRA_TICKET,
            id=ticket.key,
            title=f"Jira Ticket {ticket.key}",
            url=f"{jira}/browse/{ticket.key}" if jira else None,
        )
        for ticket in report.critical_tickets
    ]
    links.extend(
        ArtifactLink(
            type=ArtifactType.PR,
            id=pr.id,
            title=f"Pull Request #{pr.id}",
            url=f"{BITBUCKET_WEB_URL}/{pr.repository}/pull-requests/{pr.id}" if pr.repository else None,
        )
        for pr in report.high_complexity_prs
    )
    links.extend(
        ArtifactLink(
            type=ArtifactType.COMMIT,
            id=commit.hash,
            title=f"Commit {commit.short_hash}",
            url=f"{BITBUCKET_WEB_URL}/{commit.repository}/commits/{commit.hash}"
            if commit.repository
            else None,
        )
        for commit in report.recent_commits
    )
    return links


def _slug(value: str) -> str:
    return _WHITESPACE.sub("-", value.strip().lower())


def build_tags(
    report: UndocumentedIntensityReport,
    knowledge: TacitKnowledge | None,
    department: str | None = None,
    role: str | None = None,
) -> list[str]:
    """Ordered, de-duplicated tags, at most MAX_TAGS."""
    tags = [
        "cognitive-offboarding",
        f"risk-{report.risk_level.value.lower()}",
        f"intensity-{round(report.score)}",
    ]
    if department and department != "Unknown":
        tags.append(f"dept-{_slug(department)}")
    if role and role != "Unknown":
        tags.append(f"role-{_slug(role)}")
    if report.critical_tickets:
        tags.append("jira-tickets")
    if report.high_complexity_prs:
        tags.append("complex-prs")
    if knowledge:
        tags.extend(f"knowledge-{name.lower()}" for name in knowledge.populated_categories())

    return list(dict.fromkeys(tags))[:MAX_TAGS]
