"""
Adaptive Gap Engine.

Components:
- GapScorer: Weighted 0-100 gap score and missing prerequisites
- PathFinder: A* learning path search with alternatives and fallback
- GapAnalyzer: Main orchestration layer (single, batch, metrics)
- estimator: Time and confidence estimation helpers
"""
from gapmap.adaptive.estimator import (
    analysis_confidence,
    breakdown_time,
    estimated_time,
    path_confidence,
)
from gapmap.adaptive.gap_analyzer import GapAnalyzer, optimize_gap_thresholds, summarize_gaps
from gapmap.adaptive.gap_scorer import GapScorer
from gapmap.adaptive.path_finder import PathFinder, PathOptions

__all__ = [
    # Main engine
    "GapAnalyzer",
    "optimize_gap_thresholds",
    "summarize_gaps",
    # Component classes
    "GapScorer",
    "PathFinder",
    "PathOptions",
    # Estimation
    "estimated_time",
    "path_confidence",
    "analysis_confidence",
    "breakdown_time",
]
