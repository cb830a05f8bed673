"""
Core Module - Shared domain models, tunables and errors.

Components:
- models: LearningNode, Layer, result dataclasses
- weights: GapWeights, HeuristicConfig, GapThresholds
- errors: NodeNotFoundError, NoCurrentLevelError, SnapshotError

Design Principle:
The graph, adaptive and cli packages import from gapmap.core rather than
redefining shared concepts.
"""

from gapmap.core.errors import (
    GapAnalysisError,
    NoCurrentLevelError,
    NodeNotFoundError,
    SnapshotError,
)
from gapmap.core.models import (
    CommonGap,
    GapAnalysisDetail,
    GapAnalysisResult,
    GapLevel,
    GapMetrics,
    GapPriority,
    GapScore,
    HeuristicMode,
    Layer,
    LearningNode,
    MasteryMap,
    NodeKind,
    PathResult,
    Recommendation,
    RecommendationType,
    TimeBreakdown,
)
from gapmap.core.weights import GapThresholds, GapWeights, HeuristicConfig

__all__ = [
    # Models
    "LearningNode",
    "NodeKind",
    "Layer",
    "MasteryMap",
    "GapScore",
    "PathResult",
    "GapAnalysisResult",
    "GapAnalysisDetail",
    "GapMetrics",
    "CommonGap",
    "TimeBreakdown",
    "Recommendation",
    # Enums
    "HeuristicMode",
    "GapLevel",
    "GapPriority",
    "RecommendationType",
    # Tunables
    "GapWeights",
    "HeuristicConfig",
    "GapThresholds",
    # Errors
    "GapAnalysisError",
    "NodeNotFoundError",
    "NoCurrentLevelError",
    "SnapshotError",
]
