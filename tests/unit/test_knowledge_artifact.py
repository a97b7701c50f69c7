from keeper.features.cognitive_offboarding.domain.models import ArtifactType, TimeWindow
from keeper.features.cognitive_offboarding.domain.session_models import (
    Insight,
    InterviewResponse,
    KnowledgeArtifact,
    TacitKnowledge,
)
from keeper.features.cognitive_offboarding.interview.extractor import CATEGORIES
from keeper.features.cognitive_offboarding.pipeline.scoring.service import (
    IntensityScoringService,
)
from keeper.features.cognitive_offboarding.workflow.knowledge import (
    MAX_TAGS,
    NO_RESPONSES_CONTENT,
    build_artifact_links,
    build_tags,
    format_interview_content,
)


def _knowledge(**populated):
    categories = {name: [] for name in CATEGORIES}
    for name, contents in populated.items():
        categories[name] = [Insight(content=c, artifact_id=None, confidence=0.9) for c in contents]
    return TacitKnowledge(
        categories=categories, critical_insights=[], artifact_mappings={}, confidence_score=0.7
    )


def _report(seeded_source):
    service = IntensityScoringService(seeded_source)
    return service.score_records(
        "user123",
        TimeWindow.last_six_months(),
        seeded_source.tickets["user123"],
        seeded_source.pull_requests["user123"],
        seeded_source.commits["user123"],
    )


def test_content_without_responses():
    assert format_interview_content([], None) == NO_RESPONSES_CONTENT


def test_content_lists_each_response_with_its_artifact():
    content = format_interview_content(
        [
            InterviewResponse(question="Why the retry?", answer="Settlement lag", artifact_id="PAY-101"),
            InterviewResponse(question="Anything else?", answer="No"),
        ],
        _knowledge(),
    )

    assert "**Question 1:** Why the retry?" in content
    assert "**Response:** Settlement lag" in content
    assert "*Related to artifact: PAY-101*" in content
    assert content.count("Related to artifact") == 1
    assert "Critical Insights Extracted" not in content


def test_content_summarizes_each_populated_category():
    knowledge = _knowledge(riskFactors=["breaks on late files"])
    knowledge.categories["technicalDebt"] = [
        Insight(content="retry loop is a hack", artifact_id="PAY-101", confidence=0.8)
    ]

    content = format_interview_content(
        [InterviewResponse(question="Why the retry?", answer="Settlement lag")], knowledge
    )

    summary = content.split("## Tacit Knowledge Summary")[1]
    assert summary.index("### Technical Debt") < summary.index("### Risk Factors")
    assert "1. retry loop is a hack\n   *Related to: PAY-101*" in summary
    assert "1. breaks on late files" in summary
    assert "Architectural Decisions" not in summary


def test_content_has_no_summary_without_categorized_insights():
    content = format_interview_content(
        [InterviewResponse(question="Anything else?", answer="No")], _knowledge()
    )

    assert "Tacit Knowledge Summary" not in content


def test_artifact_links_point_at_jira_and_bitbucket(seeded_source):
    links = build_artifact_links(_report(seeded_source), "https://acme.atlassian.net/")

    assert [(link.type, link.reference, link.url) for link in links] == [
        (ArtifactType.JIRA_TICKET, "PAY-101", "https://acme.atlassian.net/browse/PAY-101"),
        (ArtifactType.JIRA_TICKET, "PAY-102", "https://acme.atlassian.net/browse/PAY-102"),
        (ArtifactType.PR, "PR #42", "https://bitbucket.org/acme/payments/pull-requests/42"),
        # seeded commit carries no repository
        (ArtifactType.COMMIT, "a1b2c3d4", None),
    ]


def test_ticket_links_need_a_jira_site(seeded_source):
    links = build_artifact_links(_report(seeded_source))

    assert [link.url for link in links if link.type is ArtifactType.JIRA_TICKET] == [None, None]


def test_tags_describe_risk_people_and_knowledge(seeded_source):
    tags = build_tags(
        _report(seeded_source),
        _knowledge(riskFactors=["breaks on late files"]),
        department="Payments Platform",
        role="Unknown",
    )

    assert tags == [
        "cognitive-offboarding",
        "risk-medium",
        "intensity-3",
        "dept-payments-platform",
        "jira-tickets",
        "complex-prs",
        "knowledge-riskfactors",
    ]


def test_tags_are_capped(seeded_source):
    everything = {name: ["x"] for name in CATEGORIES}
    tags = build_tags(_report(seeded_source), _knowledge(**everything), "Ops", "SRE")

    assert len(tags) == MAX_TAGS
    assert len(set(tags)) == MAX_TAGS


def test_artifact_validation_reports_every_problem():
    artifact = KnowledgeArtifact(id="", employee_id="", title="t", content="", confidence=1.5)

    assert artifact.validate() == [
        "ID is required",
        "Employee ID is required",
        "Content is required",
        "Confidence must be between 0 and 1",
    ]
