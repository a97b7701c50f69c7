"""
Interview phase: artifact-anchored questions and tacit-knowledge extraction.
"""

from .agent import ForensicInterviewAgent
from .extractor import (
    CATEGORIES,
    Classification,
    InsightClassifier,
    KeywordInsightClassifier,
    KnowledgeExtractor,
)
from .questions import GENERAL_QUESTIONS, generate_artifact_questions

__all__ = [
    "CATEGORIES",
    "GENERAL_QUESTIONS",
    "Classification",
    "ForensicInterviewAgent",
    "InsightClassifier",
    "KeywordInsightClassifier",
    "KnowledgeExtractor",
    "generate_artifact_questions",
]
