"""
Core Gap Analysis Models.

Canonical representations shared by the graph index, the scorer, the path
finder and the analyzer.

Design:
- LearningNode: immutable learnable unit (vocabulary, theme, passage)
- Layer: three-tier difficulty taxonomy (L1 elementary, L2 middle, L3 college)
- PathResult / GapAnalysisResult / GapMetrics: per-call results, never persisted
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Mastery values keyed by node id, 0 (none) to 1 (full). Absent means 0.
MasteryMap = Mapping[str, float]

MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 10
DEFAULT_TIME_ESTIMATE = 30


class NodeKind(str, Enum):
    """Kinds of learnable units."""

    VOCABULARY = "vocabulary"
    THEME = "theme"
    PASSAGE = "passage"


class Layer(str, Enum):
    """
    Difficulty tier of a node.

    Conventionally derived from difficulty bands 1-3 / 4-7 / 8-10, but stored
    explicitly on each node.
    """

    L1 = "L1"  # Elementary
    L2 = "L2"  # Middle
    L3 = "L3"  # College

    @property
    def ordinal(self) -> int:
        return {Layer.L1: 1, Layer.L2: 2, Layer.L3: 3}[self]

    @property
    def display_name(self) -> str:
        return {
            Layer.L1: "Elementary",
            Layer.L2: "Middle",
            Layer.L3: "College",
        }[self]

    def distance_to(self, other: Layer) -> int:
        """Ordinal distance between two layers (0, 1 or 2)."""
        return abs(other.ordinal - self.ordinal)

    @classmethod
    def from_difficulty(cls, difficulty: int) -> Layer:
        """Conventional layer for a difficulty band."""
        if difficulty <= 3:
            return cls.L1
        elif difficulty <= 7:
            return cls.L2
        else:
            return cls.L3

    @classmethod
    def sequence(cls, start: Layer, end: Layer) -> list[Layer]:
        """Layers from start to end inclusive, in travel order."""
        order = list(cls)
        i, j = order.index(start), order.index(end)
        if i <= j:
            return order[i:j + 1]
        return list(reversed(order[j:i + 1]))


class HeuristicMode(str, Enum):
    """
    Transform applied to the A* remaining-cost estimate.

    Only LINEAR keeps the estimate admissible. EXPONENTIAL and LOGARITHMIC
    are greedy variants: they bias search speed over shortest-cost paths.
    """

    LINEAR = "linear"
    EXPONENTIAL = "exponential"
    LOGARITHMIC = "logarithmic"

    @property
    def is_admissible(self) -> bool:
        return self is HeuristicMode.LINEAR


class GapLevel(str, Enum):
    """Coarse banding of a 0-100 gap score."""

    LOW = "low"  # <= 33
    MEDIUM = "medium"  # <= 66
    HIGH = "high"  # > 66

    @classmethod
    def from_score(cls, gap_score: float, low: float = 33, medium: float = 66) -> GapLevel:
        if gap_score <= low:
            return cls.LOW
        elif gap_score <= medium:
            return cls.MEDIUM
        return cls.HIGH


class GapPriority(str, Enum):
    """Scheduling priority for closing a gap."""

    IMMEDIATE = "immediate"
    SHORT_TERM = "short-term"
    LONG_TERM = "long-term"

    @classmethod
    def from_analysis(cls, gap_score: float, estimated_minutes: float) -> GapPriority:
        """
        Derive priority from gap size and estimated study time.

        Immediate: gap >= 80 or at most 1 hour. Short-term: gap >= 50 or at
        most 3 hours. Everything else is long-term.
        """
        hours = estimated_minutes / 60
        if gap_score >= 80 or hours <= 1:
            return cls.IMMEDIATE
        elif gap_score >= 50 or hours <= 3:
            return cls.SHORT_TERM
        return cls.LONG_TERM


class RecommendationType(str, Enum):
    PREREQUISITE = "prerequisite"
    PARALLEL = "parallel"
    REVIEW = "review"
    ADVANCED = "advanced"


# ============================================================================
# Nodes
# ============================================================================


@dataclass(frozen=True)
class LearningNode:
    """
    A single learnable unit in the prerequisite graph.

    Prerequisite ids may reference nodes outside the current snapshot; those
    are ignored by traversal.
    """

    id: str
    kind: NodeKind
    difficulty: int
    layer: Layer
    prerequisites: tuple[str, ...] = ()
    time_estimate: int = DEFAULT_TIME_ESTIMATE
    title: str = ""

    def __post_init__(self):
        if not self.id:
            raise ValueError("LearningNode id must be a non-empty string")
        if not MIN_DIFFICULTY <= self.difficulty <= MAX_DIFFICULTY:
            raise ValueError(
                f"Difficulty for {self.id} must be between "
                f"{MIN_DIFFICULTY} and {MAX_DIFFICULTY}, got {self.difficulty}"
            )
        # Normalize to an ordered, de-duplicated tuple so nodes stay hashable
        object.__setattr__(self, "kind", NodeKind(self.kind))
        object.__setattr__(self, "layer", Layer(self.layer))
        object.__setattr__(self, "prerequisites", tuple(dict.fromkeys(self.prerequisites)))

    @property
    def display_name(self) -> str:
        return self.title or self.id

    def requires(self, node_id: str) -> bool:
        """Whether node_id is a direct prerequisite of this node."""
        return node_id in self.prerequisites

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "title": self.title,
            "difficulty": self.difficulty,
            "layer": self.layer.value,
            "prerequisites": list(self.prerequisites),
            "time_estimate": self.time_estimate,
        }


def _node_ids(nodes: list[LearningNode]) -> list[str]:
    return [n.id for n in nodes]


# ============================================================================
# Results
# ============================================================================


@dataclass
class GapScore:
    """Composite gap score plus the components it was built from."""

    gap_score: float
    missing_prerequisites: list[LearningNode] = field(default_factory=list)
    difficulty_gap: float = 0.0
    prerequisite_gap: float = 0.0
    layer_gap: float = 0.0


@dataclass
class PathResult:
    """
    Outcome of a path search.

    confidence is a 0-1 step-quality fraction. It is NOT the 0-100
    confidence reported on GapAnalysisResult.
    """

    path: list[LearningNode]
    total_cost: float = 0.0
    total_time_minutes: float = 0.0
    confidence: float = 0.0
    alternative_paths: list[list[LearningNode]] = field(default_factory=list)
    is_fallback: bool = False

    @property
    def node_ids(self) -> list[str]:
        return _node_ids(self.path)

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.node_ids,
            "total_cost": round(self.total_cost, 2),
            "total_time_minutes": round(self.total_time_minutes, 1),
            "confidence": round(self.confidence, 3),
            "alternative_paths": [_node_ids(p) for p in self.alternative_paths],
            "is_fallback": self.is_fallback,
        }


@dataclass
class TimeBreakdown:
    """Split of estimated study minutes."""

    prerequisites: int = 0
    main_content: int = 0
    review: int = 0

    @property
    def total(self) -> int:
        return self.prerequisites + self.main_content + self.review

    def to_dict(self) -> dict[str, int]:
        return {
            "prerequisites": self.prerequisites,
            "main_content": self.main_content,
            "review": self.review,
        }


@dataclass
class Recommendation:
    """A suggested next study action."""

    type: RecommendationType
    node: LearningNode
    reason: str
    priority: str  # high, medium, low
    estimated_time_minutes: int
    impact: float = 0.0  # Expected gap score reduction

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "node_id": self.node.id,
            "reason": self.reason,
            "priority": self.priority,
            "estimated_time_minutes": self.estimated_time_minutes,
            "impact": round(self.impact, 2),
        }


@dataclass
class GapAnalysisResult:
    """
    Full analysis of the gap between a learner and one target node.

    confidence is a 0-100 score derived from the gap score and the number of
    missing prerequisites.
    """

    target_node: LearningNode
    gap_score: float
    missing_prerequisites: list[LearningNode]
    recommended_path: list[LearningNode]
    estimated_time_minutes: float
    confidence: float
    current_node: LearningNode | None = None
    gap_level: GapLevel | None = None
    recommendations: list[Recommendation] = field(default_factory=list)

    def __post_init__(self):
        # Default bands unless the caller banded the score itself
        if self.gap_level is None:
            self.gap_level = GapLevel.from_score(self.gap_score)

    def to_dict(self) -> dict[str, Any]:
        return {
            "target_node": self.target_node.to_dict(),
            "current_node": self.current_node.to_dict() if self.current_node else None,
            "gap_score": round(self.gap_score, 2),
            "gap_level": self.gap_level.value,
            "missing_prerequisites": _node_ids(self.missing_prerequisites),
            "recommended_path": _node_ids(self.recommended_path),
            "estimated_time_minutes": round(self.estimated_time_minutes, 1),
            "confidence": round(self.confidence, 2),
            "recommendations": [r.to_dict() for r in self.recommendations],
        }


@dataclass
class GapAnalysisDetail:
    """One row of a multi-target analysis."""

    current_node_id: str
    target_node_id: str
    gap_score: float
    gap_level: GapLevel
    priority: GapPriority
    missing_prerequisites: list[LearningNode]
    recommended_path: list[LearningNode]
    estimated_time_minutes: float
    time_breakdown: TimeBreakdown = field(default_factory=TimeBreakdown)

    def to_dict(self) -> dict[str, Any]:
        return {
            "current_node_id": self.current_node_id,
            "target_node_id": self.target_node_id,
            "gap_score": round(self.gap_score, 2),
            "gap_level": self.gap_level.value,
            "priority": self.priority.value,
            "missing_prerequisites": _node_ids(self.missing_prerequisites),
            "recommended_path": _node_ids(self.recommended_path),
            "estimated_time_minutes": round(self.estimated_time_minutes, 1),
            "time_breakdown": self.time_breakdown.to_dict(),
        }


@dataclass
class CommonGap:
    node_id: str
    gap_score: float
    gap_count: int


@dataclass
class GapMetrics:
    """Aggregate over a batch of analyses."""

    total_gap_score: float = 0.0
    average_gap_score: float = 0.0
    gap_distribution: dict[GapLevel, int] = field(
        default_factory=lambda: {level: 0 for level in GapLevel}
    )
    most_common_gaps: list[CommonGap] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_gap_score": round(self.total_gap_score, 2),
            "average_gap_score": round(self.average_gap_score, 2),
            "gap_distribution": {level.value: n for level, n in self.gap_distribution.items()},
            "most_common_gaps": [
                {"node_id": g.node_id, "gap_score": round(g.gap_score, 2), "gap_count": g.gap_count}
                for g in self.most_common_gaps
            ],
        }
