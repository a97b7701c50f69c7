"""
Pull-request complexity score on a 0-10 scale.

The source-control client computes this once per PR; the scoring engine
treats the result as an opaque input.
"""

COMPLEXITY_KEYWORDS = ("refactor", "architecture", "migration", "breaking", "major")
MAX_COMPLEXITY = 10


def _lines_points(lines_changed: int) -> int:
    if lines_changed > 1000:
        return 4
    if lines_changed > 500:
        return 3
    if lines_changed > 200:
        return 2
    if lines_changed > 50:
        return 1
    return 0


def _files_points(files_changed: int) -> int:
    if files_changed > 20:
        return 3
    if files_changed > 10:
        return 2
    if files_changed > 5:
        return 1
    return 0


def _review_points(review_comments: int) -> int:
    if review_comments > 20:
        return 2
    if review_comments > 10:
        return 1
    return 0


def calculate_pr_complexity(
    lines_added: int,
    lines_deleted: int,
    files_changed: int,
    review_comments: int,
    title: str | None = None,
) -> int:
    """Bucketed size, breadth and review churn, plus one point for risky title keywords."""
    score = (
        _lines_points(lines_added + lines_deleted)
        + _files_points(files_changed)
        + _review_points(review_comments)
    )
    lowered = (title or "").lower()
    if any(keyword in lowered for keyword in COMPLEXITY_KEYWORDS):
        score += 1
    return min(score, MAX_COMPLEXITY)
