"""
Artifact-anchored interview questions.

Each artifact yields exactly one question that quotes its identifier:
``PR #<id>`` for pull requests, the 8-character short hash for commits and
the ticket key for Jira tickets. General questions are only produced when
there is nothing concrete to ask about.
"""

from collections.abc import Sequence

from keeper.features.cognitive_offboarding.domain.models import (
    ArtifactType,
    CodeArtifact,
    DocumentationLevel,
)
from keeper.features.cognitive_offboarding.domain.session_models import Question

GENERAL_QUESTIONS = (
    Question(
        text="What are the most critical pieces of undocumented knowledge in your area of work?",
        artifact_type=None,
        artifact_id=None,
        focus="tacit_knowledge",
    ),
    Question(
        text=(
            "What would be the biggest risk if someone took over your work "
            "without proper knowledge transfer?"
        ),
        artifact_type=None,
        artifact_id=None,
        focus="risk_assessment",
    ),
)

_SPARSE_DOCS = (DocumentationLevel.NONE, DocumentationLevel.MINIMAL)


def _pull_request_question(artifact: CodeArtifact) -> Question:
    ref = f"PR #{artifact.id}"
    return Question(
        text=(
            f'Looking at {ref} "{artifact.title}", why did you choose this specific '
            "implementation approach over the alternatives?"
        ),
        artifact_type=ArtifactType.PR,
        artifact_id=artifact.id,
        focus="implementation_rationale",
        follow_up=(
            f"What would break or behave unexpectedly if someone modified {ref} "
            "without understanding your design decisions?"
        ),
    )


def _commit_question(artifact: CodeArtifact) -> Question:
    short_hash = artifact.id[:8]
    return Question(
        text=(
            f'In commit {short_hash} ("{artifact.title}"), what was the reasoning behind '
            "this change and which edge cases were you anticipating?"
        ),
        artifact_type=ArtifactType.COMMIT,
        artifact_id=artifact.id,
        focus="architectural_decision",
        follow_up=f"What alternatives did you consider for commit {short_hash} and why did you reject them?",
    )


def _ticket_question(artifact: CodeArtifact) -> Question:
    key = artifact.id
    if artifact.documentation_level in _SPARSE_DOCS:
        return Question(
            text=(
                f'{key} "{artifact.title}" has minimal documentation. What critical knowledge '
                "about this work exists only in your head?"
            ),
            artifact_type=ArtifactType.JIRA_TICKET,
            artifact_id=key,
            focus="undocumented_knowledge",
            follow_up=f"Which stakeholder decisions shaped {key} that are not captured in the ticket?",
        )
    return Question(
        text=(
            f'For {key} "{artifact.title}", what undocumented constraints or business '
            "requirements influenced your solution?"
        ),
        artifact_type=ArtifactType.JIRA_TICKET,
        artifact_id=key,
        focus="business_constraints",
        follow_up=f"What technical debt or compromises did you accept in {key}, and why?",
    )


_BUILDERS = {
    ArtifactType.PR: _pull_request_question,
    ArtifactType.COMMIT: _commit_question,
    ArtifactType.JIRA_TICKET: _ticket_question,
}


def generate_artifact_questions(artifacts: Sequence[CodeArtifact]) -> list[Question]:
    """One question per artifact, in input order; general questions only for empty input."""
    if not artifacts:
        return list(GENERAL_QUESTIONS)
    return [_BUILDERS[artifact.type](artifact) for artifact in artifacts]
