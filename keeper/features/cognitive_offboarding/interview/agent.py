"""
Scripted forensic interview agent.

Prepares an artifact-anchored interview (questions plus a three-part flow)
and extracts tacit knowledge from the answers with keyword heuristics. Swap
in a conversational implementation of ``InterviewAgent`` for live interviews.
"""

from collections.abc import Sequence

from keeper.features.cognitive_offboarding.domain.session_models import (
    AgentInterview,
    InterviewContext,
    InterviewPhaseBlock,
    InterviewResponse,
    TacitKnowledge,
)
from keeper.infrastructure.observability.logging import get_logger

from .extractor import KnowledgeExtractor
from .questions import generate_artifact_questions

logger = get_logger(__name__)


class ForensicInterviewAgent:
    def __init__(self, extractor: KnowledgeExtractor | None = None):
        self._extractor = extractor or KnowledgeExtractor()

    async def conduct_interview(self, context: InterviewContext) -> AgentInterview:
        questions = context.questions or generate_artifact_questions(context.specific_artifacts)

        flow = [
            InterviewPhaseBlock(
                phase="opening",
                prompts=[
                    f"Thanks for making time, {context.employee_id}. We'll walk through "
                    f"{len(context.specific_artifacts)} pieces of your recent work in {context.department}."
                ],
            ),
            InterviewPhaseBlock(
                phase="artifact_deep_dive",
                prompts=[q.text for q in questions],
            ),
            InterviewPhaseBlock(
                phase="cross_cutting_concerns",
                prompts=[q.follow_up for q in questions if q.follow_up],
            ),
        ]

        logger.info(
            "Interview prepared",
            session_id=context.session_id,
            employee_id=context.employee_id,
            question_count=len(questions),
        )

        return AgentInterview(
            questions=list(questions),
            contextual_info={
                "undocumented_intensity_score": context.undocumented_intensity_score,
                "recent_pr_count": context.recent_pr_count,
                "commit_count": context.commit_count,
                "artifact_count": len(context.specific_artifacts),
                "role": context.role,
                "department": context.department,
            },
            interview_flow=flow,
        )

    async def extract_tacit_knowledge(
        self, responses: Sequence[InterviewResponse], context: InterviewContext
    ) -> TacitKnowledge:
        knowledge = self._extractor.extract(responses)
        logger.info(
            "Tacit knowledge extracted",
            session_id=context.session_id,
            response_count=len(responses),
            categories=knowledge.populated_categories(),
            critical_insights=len(knowledge.critical_insights),
            confidence=round(knowledge.confidence_score, 3),
        )
        return knowledge
