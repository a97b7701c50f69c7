"""
Heuristic tacit-knowledge extraction from interview answers.

Keyword rules map each answer to a knowledge category and a confidence.
The rule set sits behind ``InsightClassifier`` so a real language model can
replace it later without touching the workflow.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from keeper.features.cognitive_offboarding.domain.session_models import (
    Insight,
    InterviewResponse,
    TacitKnowledge,
)

CATEGORIES = (
    "architecturalDecisions",
    "businessConstraints",
    "technicalDebt",
    "processKnowledge",
    "riskFactors",
    "undocumentedDependencies",
)

BASE_CONFIDENCE = 0.5
CRITICAL_CONFIDENCE = 0.8


@dataclass(frozen=True, slots=True)
class Classification:
    category: str | None
    confidence: float
    critical_reason: str | None = None


@dataclass(frozen=True, slots=True)
class _Rule:
    category: str
    keywords: tuple[str, ...]
    boost: float
    critical_reason: str | None = None


class InsightClassifier(Protocol):
    def classify(self, answer: str) -> Classification: ...


class KeywordInsightClassifier:
    # Later rules win the category; boosts accumulate.
    RULES = (
        _Rule("architecturalDecisions", ("chose", "decided", "approach", "pattern"), 0.2),
        _Rule("businessConstraints", ("requirement", "stakeholder", "business", "deadline"), 0.2),
        _Rule(
            "technicalDebt",
            ("compromise", "workaround", "hack", "temporary"),
            0.3,
            "Technical debt requires careful handling",
        ),
        _Rule("processKnowledge", ("process", "workflow", "procedure", "steps"), 0.2),
        _Rule(
            "riskFactors",
            ("break", "fail", "dangerous", "careful"),
            0.3,
            "Risk factor requires immediate attention",
        ),
        _Rule("undocumentedDependencies", ("depends", "relies", "assumes", "expects"), 0.2),
    )
    EXAMPLE_MARKERS = ("example", "instance", "case")

    def classify(self, answer: str) -> Classification:
        lowered = answer.lower()
        category = None
        critical_reason = None
        confidence = BASE_CONFIDENCE

        for rule in self.RULES:
            if any(keyword in lowered for keyword in rule.keywords):
                category = rule.category
                confidence += rule.boost
                if rule.critical_reason:
                    critical_reason = rule.critical_reason

        if len(answer) > 200:
            confidence += 0.1
        if any(marker in lowered for marker in self.EXAMPLE_MARKERS):
            confidence += 0.1

        return Classification(category, min(confidence, 1.0), critical_reason)


class KnowledgeExtractor:
    TECHNICAL_TERMS = ("because", "reason", "approach", "decision", "constraint")

    def __init__(self, classifier: InsightClassifier | None = None):
        self._classifier = classifier or KeywordInsightClassifier()

    def extract(self, responses: Sequence[InterviewResponse]) -> TacitKnowledge:
        categories: dict[str, list[Insight]] = {name: [] for name in CATEGORIES}
        critical: list[Insight] = []
        mappings: dict[str, list[str]] = {}

        for index, response in enumerate(responses):
            answer = response.answer or ""
            if not answer:
                continue

            result = self._classifier.classify(answer)
            insight = Insight(
                content=answer,
                artifact_id=response.artifact_id,
                confidence=result.confidence,
                response_index=index,
                reason=result.critical_reason,
            )
            if result.category:
                categories.setdefault(result.category, []).append(insight)
            if response.artifact_id:
                mappings.setdefault(response.artifact_id, []).append(answer)
            if result.confidence > CRITICAL_CONFIDENCE or result.critical_reason:
                critical.append(
                    Insight(
                        content=answer,
                        artifact_id=response.artifact_id,
                        confidence=result.confidence,
                        response_index=index,
                        reason=result.critical_reason or "High confidence knowledge",
                    )
                )

        knowledge = TacitKnowledge(
            categories=categories,
            critical_insights=critical,
            artifact_mappings=mappings,
            confidence_score=0.0,
        )
        knowledge.confidence_score = self._overall_confidence(responses, knowledge)
        return knowledge

    def _overall_confidence(
        self, responses: Sequence[InterviewResponse], knowledge: TacitKnowledge
    ) -> float:
        """Length-weighted answer confidence plus bonuses for breadth and critical insights."""
        if not responses:
            return 0.0

        total = 0.0
        weights = 0.0
        for response in responses:
            answer = response.answer or ""
            weight = min(len(answer) / 100, 2)
            confidence = BASE_CONFIDENCE
            if len(answer) > 100:
                confidence += 0.2
            if len(answer) > 300:
                confidence += 0.2
            lowered = answer.lower()
            confidence += 0.1 * sum(1 for term in self.TECHNICAL_TERMS if term in lowered)
            total += confidence * weight
            weights += weight

        base = total / weights if weights > 0 else 0.0
        category_bonus = min(len(knowledge.populated_categories()) * 0.05, 0.2)
        critical_bonus = min(len(knowledge.critical_insights) * 0.03, 0.15)
        return min(base + category_bonus + critical_bonus, 1.0)
