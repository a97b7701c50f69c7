"""
Undocumented Intensity scoring package.

Classifies tickets and pull requests, extracts documentation links and
computes the per-user intensity report.
"""

from .classifier import KeywordLinkClassifier, LinkClassifier
from .complexity import calculate_pr_complexity
from .service import IntensityScoringService

__all__ = [
    "IntensityScoringService",
    "KeywordLinkClassifier",
    "LinkClassifier",
    "calculate_pr_complexity",
]
