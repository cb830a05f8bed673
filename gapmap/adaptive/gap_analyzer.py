"""
Gap Analyzer.

Orchestrates the scorer, the path finder and the estimator into a single
analysis per target:

1. Resolve the learner's current node from the mastery map (or a level hint)
2. Score the gap to the target and collect missing prerequisites
3. Find a recommended path from the current node to the target
4. Estimate study time and analysis confidence, attach recommendations

Each analyzer copies the mastery map it is given and only reads its own
state afterwards, so batch analyses can fan out across threads without locks.
"""
from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from loguru import logger

from gapmap.adaptive.estimator import analysis_confidence, breakdown_time, estimated_time
from gapmap.adaptive.gap_scorer import GapScorer
from gapmap.adaptive.path_finder import PathFinder, PathOptions
from gapmap.core.errors import NoCurrentLevelError
from gapmap.core.models import (
    CommonGap,
    GapAnalysisDetail,
    GapAnalysisResult,
    GapLevel,
    GapMetrics,
    GapPriority,
    LearningNode,
    MasteryMap,
    Recommendation,
    RecommendationType,
)
from gapmap.core.weights import GapThresholds, GapWeights, HeuristicConfig
from gapmap.graph.index import build_index

MOST_COMMON_GAPS_LIMIT = 10
ENTRY_LEVEL_DIFFICULTY = 3
LEVEL_TOLERANCE = 1
WEAK_PREREQUISITE_MASTERY = 0.4


class GapAnalyzer:
    """
    Analyze learning gaps over one snapshot of nodes and mastery.

    Usage:
        analyzer = GapAnalyzer(nodes, {"basic_vocabulary": 0.9})
        result = analyzer.analyze_gap("college_concept")
        metrics = analyzer.collect_gap_metrics(["middle_concept", "college_concept"])
    """

    def __init__(
        self,
        nodes: Iterable[LearningNode],
        mastery: MasteryMap,
        weights: Optional[GapWeights] = None,
        heuristic: Optional[HeuristicConfig] = None,
        options: Optional[PathOptions] = None,
        thresholds: Optional[GapThresholds] = None,
    ):
        self._graph = build_index(nodes)
        self._mastery: dict[str, float] = dict(mastery)
        self._weights = weights or GapWeights()
        self._options = options or PathOptions()
        self._thresholds = thresholds or GapThresholds()
        self._scorer = GapScorer(self._graph, self._mastery, self._weights)
        self._path_finder = PathFinder(self._graph, self._mastery, heuristic, self._weights)

    @property
    def path_finder(self) -> PathFinder:
        return self._path_finder

    @property
    def scorer(self) -> GapScorer:
        return self._scorer

    def mastery_of(self, node_id: str) -> float:
        return self._mastery.get(node_id, 0.0)

    # =========================================================================
    # CURRENT LEVEL
    # =========================================================================

    def resolve_current_node(self, level_hint: Optional[float] = None) -> LearningNode:
        """
        Determine which node best represents where the learner is now.

        Resolution order:
        1. With a level hint: the node within 1 difficulty of the hint with
           the highest mastery
        2. The node closest to the average difficulty of mastered nodes
           (within 1 difficulty)
        3. The easiest entry-level node (difficulty <= 3)

        Raises:
            NoCurrentLevelError: If no node satisfies any rule
        """
        nodes = list(self._graph)

        if level_hint is not None:
            near_hint = [n for n in nodes if abs(n.difficulty - level_hint) <= LEVEL_TOLERANCE]
            if near_hint:
                # max() keeps the first node on ties, i.e. snapshot order
                return max(near_hint, key=lambda n: self.mastery_of(n.id))

        mastered = [n for n in nodes if self._scorer.is_satisfied(n.id)]
        if mastered:
            average = sum(n.difficulty for n in mastered) / len(mastered)
            near_average = [n for n in nodes if abs(n.difficulty - average) <= LEVEL_TOLERANCE]
            if near_average:
                return min(near_average, key=lambda n: abs(n.difficulty - average))

        entry_level = [n for n in nodes if n.difficulty <= ENTRY_LEVEL_DIFFICULTY]
        if entry_level:
            return min(entry_level, key=lambda n: n.difficulty)

        raise NoCurrentLevelError(
            "Could not determine current level"
            if nodes else "Could not determine current level: snapshot has no nodes"
        )

    # =========================================================================
    # SINGLE ANALYSIS
    # =========================================================================

    def analyze_gap(
        self,
        target_id: str,
        current_level: Optional[float] = None,
        options: Optional[PathOptions] = None,
    ) -> GapAnalysisResult:
        """
        Analyze the gap between the learner and one target node.

        Args:
            target_id: Node the learner wants to reach
            current_level: Optional difficulty hint for the current node
            options: Path search options (defaults to the analyzer's)

        Returns:
            GapAnalysisResult with score, missing prerequisites, path,
            time estimate, confidence and recommendations

        Raises:
            NodeNotFoundError: If target_id is not in the snapshot
            NoCurrentLevelError: If the current node cannot be resolved
        """
        target = self._graph.require(target_id)
        current = self.resolve_current_node(current_level)
        return self._analyze(current, target, options or self._options)

    def _analyze(
        self,
        current: LearningNode,
        target: LearningNode,
        options: PathOptions,
    ) -> GapAnalysisResult:
        score = self._scorer.score(current, target)
        path = self._path_finder.find_path(current.id, target.id, options)
        minutes = estimated_time(path.path, self._mastery)

        result = GapAnalysisResult(
            target_node=target,
            current_node=current,
            gap_score=score.gap_score,
            missing_prerequisites=score.missing_prerequisites,
            recommended_path=path.path,
            estimated_time_minutes=minutes,
            confidence=analysis_confidence(score.gap_score, len(score.missing_prerequisites)),
            gap_level=self._thresholds.level_for(score.gap_score),
        )
        result.recommendations = self._build_recommendations(result)

        logger.info(
            f"Gap {current.id} -> {target.id}: score={score.gap_score:.1f} "
            f"({result.gap_level.value}), missing={len(score.missing_prerequisites)}, "
            f"path={len(path.path)} nodes{' [fallback]' if path.is_fallback else ''}"
        )
        return result

    def _build_recommendations(self, result: GapAnalysisResult) -> list[Recommendation]:
        """
        Prerequisite recommendations for every missing prerequisite, then
        review recommendations for partially mastered nodes on the path.
        """
        target = result.target_node
        recommendations: list[Recommendation] = []
        listed: set[str] = {target.id}

        for node in result.missing_prerequisites:
            mastery = self.mastery_of(node.id)
            recommendations.append(Recommendation(
                type=RecommendationType.PREREQUISITE,
                node=node,
                reason=(
                    f"{node.display_name} is required for {target.display_name} "
                    f"(mastery {mastery:.0%})"
                ),
                priority="high" if mastery < WEAK_PREREQUISITE_MASTERY else "medium",
                estimated_time_minutes=node.time_estimate,
                impact=self._scorer.prerequisite_impact(target, node.id),
            ))
            listed.add(node.id)

        for node in result.recommended_path:
            mastery = self.mastery_of(node.id)
            if node.id in listed or not 0 < mastery < self._weights.mastery_threshold:
                continue
            recommendations.append(Recommendation(
                type=RecommendationType.REVIEW,
                node=node,
                reason=f"Review {node.display_name} before moving on (mastery {mastery:.0%})",
                priority="low",
                estimated_time_minutes=node.time_estimate,
            ))
            listed.add(node.id)

        return recommendations

    # =========================================================================
    # BATCH ANALYSIS
    # =========================================================================

    def analyze_multiple_gaps(
        self,
        target_ids: Sequence[str],
        current_level: Optional[float] = None,
        max_workers: int = 1,
    ) -> list[GapAnalysisDetail]:
        """
        Analyze several targets and sort them by gap score, largest first.

        Each analysis is independent; with max_workers > 1 they run on a
        thread pool. Any NodeNotFoundError propagates to the caller.
        """
        if not target_ids:
            return []
        targets = [self._graph.require(tid) for tid in target_ids]
        current = self.resolve_current_node(current_level)

        def detail_for(target: LearningNode) -> GapAnalysisDetail:
            result = self._analyze(current, target, self._options)
            return GapAnalysisDetail(
                current_node_id=current.id,
                target_node_id=target.id,
                gap_score=result.gap_score,
                gap_level=result.gap_level,
                priority=GapPriority.from_analysis(result.gap_score, result.estimated_time_minutes),
                missing_prerequisites=result.missing_prerequisites,
                recommended_path=result.recommended_path,
                estimated_time_minutes=result.estimated_time_minutes,
                time_breakdown=breakdown_time(result.recommended_path, self._mastery),
            )

        if max_workers > 1 and len(targets) > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                details = list(executor.map(detail_for, targets))
        else:
            details = [detail_for(t) for t in targets]

        return sorted(details, key=lambda d: d.gap_score, reverse=True)

    def collect_gap_metrics(
        self,
        target_ids: Sequence[str],
        current_level: Optional[float] = None,
    ) -> GapMetrics:
        """
        Aggregate gap scores, level distribution and recurring targets.

        Recurrence is counted within this batch only, so a gap count above 1
        requires the same id to appear more than once in target_ids.
        """
        return summarize_gaps(self.analyze_multiple_gaps(target_ids, current_level))


def summarize_gaps(details: Sequence[GapAnalysisDetail]) -> GapMetrics:
    """Aggregate already computed analyses into GapMetrics."""
    metrics = GapMetrics()
    if not details:
        return metrics

    counts: Counter[str] = Counter()
    scores: dict[str, float] = {}
    for detail in details:
        metrics.total_gap_score += detail.gap_score
        metrics.gap_distribution[detail.gap_level] += 1
        counts[detail.target_node_id] += 1
        scores.setdefault(detail.target_node_id, detail.gap_score)

    metrics.average_gap_score = metrics.total_gap_score / len(details)
    metrics.most_common_gaps = [
        CommonGap(node_id=node_id, gap_score=scores[node_id], gap_count=count)
        for node_id, count in counts.most_common(MOST_COMMON_GAPS_LIMIT)
    ]
    return metrics


def optimize_gap_thresholds(
    details: Sequence[GapAnalysisDetail],
    target_distribution: dict[GapLevel, float],
) -> GapThresholds:
    """
    Raise the low/medium cut-offs to approximate a target distribution.

    Args:
        details: Analyses to fit against
        target_distribution: Percentage of analyses wanted per level,
            e.g. {GapLevel.LOW: 40, GapLevel.MEDIUM: 40, GapLevel.HIGH: 20}

    Returns:
        GapThresholds, never below the default 33/66 bands
    """
    defaults = GapThresholds()
    scores = sorted(d.gap_score for d in details)
    if not scores:
        return defaults

    total = len(scores)
    low_share = target_distribution.get(GapLevel.LOW, 0)
    medium_share = target_distribution.get(GapLevel.MEDIUM, 0)
    low_target = total * low_share / 100
    medium_target = total * (low_share + medium_share) / 100

    low = defaults.low
    medium = defaults.medium
    for i, score in enumerate(scores):
        if i < low_target:
            low = max(low, score)
        if i < medium_target:
            medium = max(medium, score)

    return GapThresholds(low=low, medium=max(low, medium))
