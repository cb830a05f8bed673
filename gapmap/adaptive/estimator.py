"""
Time and confidence estimation.

Stateless helpers shared by the path finder and the analyzer. Note there are
two confidence metrics with different scales and meaning:

- path_confidence: 0-1, quality of the individual steps in a path
- analysis_confidence: 0-100, derived from the gap score and the number of
  missing prerequisites

They are kept apart on purpose; do not substitute one for the other.
"""
from __future__ import annotations

from collections.abc import Sequence

from gapmap.core.models import LearningNode, MasteryMap, TimeBreakdown

MINUTES_PER_DIFFICULTY = 15
EASY_STEP_RATIO = 2.0
PREPARED_MASTERY = 0.7


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def estimated_time(path: Sequence[LearningNode], mastery: MasteryMap) -> float:
    """
    Estimated study minutes for a path.

    Each node costs difficulty x 15 minutes, discounted by up to half for
    existing mastery.
    """
    total = 0.0
    for node in path:
        base = node.difficulty * MINUTES_PER_DIFFICULTY
        total += base * (1 - mastery.get(node.id, 0.0) * 0.5)
    return total


def path_confidence(path: Sequence[LearningNode], mastery: MasteryMap) -> float:
    """
    Average step quality of a path, 0-1.

    A step scores 0.8 when difficulty at most doubles (0.5 otherwise), plus
    0.2 when the learner already holds the step's origin at 0.7+ mastery.
    Single-node paths have no steps and score 0.
    """
    if len(path) <= 1:
        return 0.0

    total = 0.0
    for prev, nxt in zip(path, path[1:]):
        total += 0.8 if nxt.difficulty / prev.difficulty <= EASY_STEP_RATIO else 0.5
        if mastery.get(prev.id, 0.0) >= PREPARED_MASTERY:
            total += 0.2
    return total / (len(path) - 1)


def analysis_confidence(gap_score: float, missing_count: int) -> float:
    """Confidence in a gap analysis, 0-100."""
    gap_confidence = _clamp(100 - gap_score)
    prerequisite_confidence = _clamp(100 - missing_count * 10)
    return (gap_confidence + prerequisite_confidence) / 2


def breakdown_time(path: Sequence[LearningNode], mastery: MasteryMap) -> TimeBreakdown:
    """Split estimated time 30/60/10 into prerequisites, main content and review."""
    total = estimated_time(path, mastery)
    return TimeBreakdown(
        prerequisites=round(total * 0.3),
        main_content=round(total * 0.6),
        review=round(total * 0.1),
    )
