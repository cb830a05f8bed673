"""
gapmap - Learning gap analysis over a three-tier prerequisite graph.

Recommends a personalized sequence of learning items (vocabulary, themes,
passages) that closes the distance between a learner's current mastery and
a target item, across elementary (L1), middle (L2) and college (L3) layers.

The engine is pure: callers pass a snapshot of nodes and a mastery map, and
get results back. It owns no storage.
"""

from gapmap.adaptive import (
    GapAnalyzer,
    GapScorer,
    PathFinder,
    PathOptions,
    analysis_confidence,
    estimated_time,
    optimize_gap_thresholds,
    path_confidence,
)
from gapmap.core import (
    GapAnalysisError,
    GapAnalysisResult,
    GapMetrics,
    GapWeights,
    HeuristicConfig,
    HeuristicMode,
    Layer,
    LearningNode,
    NoCurrentLevelError,
    NodeKind,
    NodeNotFoundError,
    PathResult,
)
from gapmap.graph import GraphIndex, build_index

__version__ = "1.0.0"

__all__ = [
    "GapAnalyzer",
    "GapScorer",
    "PathFinder",
    "PathOptions",
    "GraphIndex",
    "build_index",
    "estimated_time",
    "path_confidence",
    "analysis_confidence",
    "optimize_gap_thresholds",
    "LearningNode",
    "NodeKind",
    "Layer",
    "HeuristicMode",
    "GapWeights",
    "HeuristicConfig",
    "PathResult",
    "GapAnalysisResult",
    "GapMetrics",
    "GapAnalysisError",
    "NodeNotFoundError",
    "NoCurrentLevelError",
]
