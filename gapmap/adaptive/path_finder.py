"""
Learning Path Finder.

A* search over the prerequisite graph, with:
- a configurable heuristic (linear, exponential, logarithmic)
- a mastery-aware transition cost
- three best-effort alternative strategies (intermediate node, layer
  transition, difficulty progression)
- a deterministic fallback path when search times out or is exhausted

Only the linear heuristic mode is admissible. Exponential and logarithmic
are greedy variants and may return paths that are not cost-optimal.

Open-set ties on fScore are broken by node id so results are reproducible.
"""
from __future__ import annotations

import math
import time
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import Optional

from loguru import logger

from gapmap.adaptive.estimator import estimated_time, path_confidence
from gapmap.core.models import (
    HeuristicMode,
    Layer,
    LearningNode,
    MasteryMap,
    PathResult,
)
from gapmap.core.weights import GapWeights, HeuristicConfig
from gapmap.graph.index import GraphIndex

# Fallback path constants
FALLBACK_CONFIDENCE = 0.3
FALLBACK_COST = 100.0
FALLBACK_TIME_MINUTES = 120.0

# Transition cost terms
DIFFICULTY_STEP_COST = 5
LAYER_STEP_COST = 10
UNMASTERED_COST = 5
WEAK_EDGE_PENALTY = 15

INTERMEDIATE_CANDIDATES = 3
PROGRESSION_DIFFICULTY_WINDOW = 3
PROGRESSION_MAX_STEP_COST = 20


def _remaining_ms(started: float, time_limit_ms: float) -> float:
    return max(0.0, time_limit_ms - (time.monotonic() - started) * 1000)


@dataclass(frozen=True)
class PathOptions:
    """Per-call search options."""

    max_path_length: int = 20
    include_alternatives: bool = False
    confidence_threshold: float = 0.5
    time_limit_ms: float = 30000
    heuristic_mode: HeuristicMode = HeuristicMode.LINEAR

    def __post_init__(self):
        object.__setattr__(self, "heuristic_mode", HeuristicMode(self.heuristic_mode))
        if self.max_path_length < 1:
            raise ValueError("max_path_length must be at least 1")
        if self.time_limit_ms < 0:
            raise ValueError("time_limit_ms must not be negative")


@dataclass
class _Candidate:
    """Open-set entry."""

    node: LearningNode
    g_score: float
    h_score: float
    previous: Optional[_Candidate] = field(default=None, repr=False)

    @property
    def f_score(self) -> float:
        return self.g_score + self.h_score


class PathFinder:
    """
    Find a learning path between two nodes.

    Usage:
        finder = PathFinder(graph, mastery)
        result = finder.find_path("basic_vocabulary", "college_concept",
                                  PathOptions(include_alternatives=True))
    """

    def __init__(
        self,
        graph: GraphIndex,
        mastery: MasteryMap,
        heuristic_config: Optional[HeuristicConfig] = None,
        weights: Optional[GapWeights] = None,
    ):
        self._graph = graph
        self._mastery = mastery
        self._heuristic = heuristic_config or HeuristicConfig()
        self._weights = weights or GapWeights()

    def mastery_of(self, node_id: str) -> float:
        return self._mastery.get(node_id, 0.0)

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def find_path(
        self,
        from_id: str,
        to_id: str,
        options: Optional[PathOptions] = None,
    ) -> PathResult:
        """
        Find the best path from one node to another.

        Never raises for resolvable endpoints: when search fails, a fallback
        path built from the target's missing prerequisites is returned.

        Args:
            from_id: Start node id
            to_id: Goal node id
            options: Search options (defaults to PathOptions())

        Returns:
            PathResult for the best candidate; other candidates are listed
            in alternative_paths

        Raises:
            NodeNotFoundError: If either endpoint is not in the graph
        """
        options = options or PathOptions()
        start = self._graph.require(from_id)
        goal = self._graph.require(to_id)

        if start.id == goal.id:
            return self._result_from_nodes([start])

        candidates: list[PathResult] = []
        primary = self._a_star(start, goal, options, options.time_limit_ms)
        candidates.append(primary or self._fallback_path(start, goal))

        if options.include_alternatives:
            candidates.extend(self._find_alternative_paths(start, goal, options))

        best = self._select_best_path(candidates, options.confidence_threshold)
        return replace(
            best,
            alternative_paths=[c.path for c in candidates if c is not best],
        )

    def heuristic(
        self,
        a: LearningNode,
        b: LearningNode,
        mode: HeuristicMode = HeuristicMode.LINEAR,
    ) -> float:
        """
        Estimated remaining cost from a to b.

        The raw estimate combines difficulty distance, layer distance and a
        mastery bonus, then is transformed by the heuristic mode.
        """
        cfg = self._heuristic
        raw = (
            abs(b.difficulty - a.difficulty) * cfg.difficulty_weight
            + a.layer.distance_to(b.layer) * cfg.layer_weight
            - (self.mastery_of(a.id) - self.mastery_of(b.id)) * cfg.mastery_bonus
        )

        if mode is HeuristicMode.EXPONENTIAL:
            return math.exp(raw / 10)
        if mode is HeuristicMode.LOGARITHMIC:
            # Mastery bonus can drive raw negative; log1p is undefined below -1
            return math.log1p(max(raw, 0.0))
        return raw

    def transition_cost(self, a: LearningNode, b: LearningNode) -> float:
        """
        Cost of studying b right after a.

        Only difficulty increases are penalized. Moving to a node that is not
        one of a's direct prerequisites costs an extra weak-edge penalty.
        """
        cost = max(0, b.difficulty - a.difficulty) * DIFFICULTY_STEP_COST
        cost += a.layer.distance_to(b.layer) * LAYER_STEP_COST
        cost += (1 - self.mastery_of(a.id)) * UNMASTERED_COST
        if not a.requires(b.id):
            cost += WEAK_EDGE_PENALTY
        return cost

    def valid_neighbors(self, node: LearningNode, closed: set[str]) -> list[LearningNode]:
        """
        Neighbors reachable in one plausible step, bounding branching:
        |d(b) - d(a)| <= 1 + (1 - mastery(a)) * 2.

        The window is 3 for an unmastered node and narrows to 1 at full
        mastery.
        """
        threshold = 1 + (1 - self.mastery_of(node.id)) * 2
        return [
            neighbor for neighbor in self._graph.neighbors(node)
            if neighbor.id not in closed
            and abs(neighbor.difficulty - node.difficulty) <= threshold
        ]

    # =========================================================================
    # A* SEARCH
    # =========================================================================

    def _a_star(
        self,
        start: LearningNode,
        goal: LearningNode,
        options: PathOptions,
        time_limit_ms: float,
    ) -> Optional[PathResult]:
        """
        Run A* from start to goal.

        Returns None when the loop exits without reaching the goal (time
        limit, closed-set size limit or exhausted open set).
        """
        mode = options.heuristic_mode
        started = time.monotonic()
        open_set: dict[str, _Candidate] = {
            start.id: _Candidate(start, 0.0, self.heuristic(start, goal, mode))
        }
        closed: set[str] = set()
        iterations = 0

        while (
            open_set
            and (time.monotonic() - started) * 1000 < time_limit_ms
            and len(closed) < options.max_path_length
        ):
            iterations += 1
            current = min(open_set.values(), key=lambda c: (c.f_score, c.node.id))

            if current.node.id == goal.id:
                logger.debug(
                    f"A* reached {goal.id} from {start.id} after {iterations} iterations"
                )
                return self._build_path_result(current)

            del open_set[current.node.id]
            closed.add(current.node.id)

            for neighbor in self.valid_neighbors(current.node, closed):
                tentative_g = current.g_score + self.transition_cost(current.node, neighbor)
                existing = open_set.get(neighbor.id)
                if existing is None or tentative_g < existing.g_score:
                    open_set[neighbor.id] = _Candidate(
                        neighbor,
                        tentative_g,
                        self.heuristic(neighbor, goal, mode),
                        previous=current,
                    )

        logger.debug(
            f"A* gave up on {start.id} -> {goal.id} after {iterations} iterations "
            f"(open={len(open_set)}, closed={len(closed)})"
        )
        return None

    def _build_path_result(self, end: _Candidate) -> PathResult:
        path: list[LearningNode] = []
        cursor: Optional[_Candidate] = end
        while cursor is not None:
            path.append(cursor.node)
            cursor = cursor.previous
        path.reverse()

        return PathResult(
            path=path,
            total_cost=end.g_score,
            total_time_minutes=estimated_time(path, self._mastery),
            confidence=path_confidence(path, self._mastery),
        )

    def _result_from_nodes(self, nodes: list[LearningNode]) -> PathResult:
        """Score an explicit node sequence by summing transition costs."""
        total_cost = sum(self.transition_cost(a, b) for a, b in zip(nodes, nodes[1:]))
        return PathResult(
            path=list(nodes),
            total_cost=total_cost,
            total_time_minutes=estimated_time(nodes, self._mastery),
            confidence=path_confidence(nodes, self._mastery),
        )

    def _fallback_path(self, start: LearningNode, goal: LearningNode) -> PathResult:
        """
        Minimal actionable path: start, the goal's missing prerequisites
        (easiest first), then the goal.
        """
        threshold = self._weights.mastery_threshold
        missing = sorted(
            (
                n for n in self._graph.prerequisites_of(goal)
                if self.mastery_of(n.id) < threshold and n.id != start.id
            ),
            key=lambda n: n.difficulty,
        )
        logger.debug(
            f"Using fallback path {start.id} -> {goal.id} "
            f"via {len(missing)} missing prerequisites"
        )
        return PathResult(
            path=[start, *missing, goal],
            total_cost=FALLBACK_COST,
            total_time_minutes=FALLBACK_TIME_MINUTES,
            confidence=FALLBACK_CONFIDENCE,
            is_fallback=True,
        )

    # =========================================================================
    # ALTERNATIVE STRATEGIES
    # =========================================================================

    def _find_alternative_paths(
        self,
        start: LearningNode,
        goal: LearningNode,
        options: PathOptions,
    ) -> list[PathResult]:
        strategies: list[Callable[..., Optional[PathResult]]] = [
            self._via_intermediate,
            self._via_layer_transition,
            self._via_difficulty_progression,
        ]

        alternatives: list[PathResult] = []
        for strategy in strategies:
            try:
                alternative = strategy(start, goal, options)
            except Exception as e:
                logger.warning(f"Alternative path strategy {strategy.__name__} failed: {e}")
                continue
            if alternative is not None:
                alternatives.append(alternative)
        return alternatives

    def _via_intermediate(
        self,
        start: LearningNode,
        goal: LearningNode,
        options: PathOptions,
    ) -> Optional[PathResult]:
        """
        Route through one of the 3 most promising intermediate nodes.

        Both legs of every candidate draw on one shared time_limit_ms
        budget, measured from the start of this strategy.
        """
        mode = options.heuristic_mode
        intermediates = sorted(
            (n for n in self._graph if n.id not in (start.id, goal.id)),
            key=lambda n: (self.heuristic(start, n, mode) + self.heuristic(n, goal, mode), n.id),
        )[:INTERMEDIATE_CANDIDATES]

        started = time.monotonic()
        for intermediate in intermediates:
            remaining = _remaining_ms(started, options.time_limit_ms)
            if remaining <= 0:
                break
            first = self._a_star(start, intermediate, options, remaining)
            if first is None:
                continue
            second = self._a_star(
                intermediate, goal, options, _remaining_ms(started, options.time_limit_ms)
            )
            if second is None:
                continue

            path = first.path + second.path[1:]
            return PathResult(
                path=path,
                total_cost=first.total_cost + second.total_cost,
                total_time_minutes=first.total_time_minutes + second.total_time_minutes,
                confidence=(first.confidence + second.confidence) / 2,
            )
        return None

    def _via_layer_transition(
        self,
        start: LearningNode,
        goal: LearningNode,
        options: PathOptions,
    ) -> Optional[PathResult]:
        """Greedily bridge each layer strictly between the endpoint layers."""
        path = [start]
        for layer in Layer.sequence(start.layer, goal.layer)[1:-1]:
            on_path = {n.id for n in path}
            bridges = [
                n for n in self._graph
                if n.layer is layer and n.id not in on_path and n.id != goal.id
            ]
            if not bridges:
                continue
            tail = path[-1]
            path.append(min(bridges, key=lambda n: (self.transition_cost(tail, n), n.id)))

        if path[-1].id != goal.id:
            path.append(goal)
        return self._result_from_nodes(path)

    def _via_difficulty_progression(
        self,
        start: LearningNode,
        goal: LearningNode,
        options: PathOptions,
    ) -> Optional[PathResult]:
        """
        Climb through nearby nodes, least progress toward the goal first.

        The goal is kept out of the pool and appended once at the end.
        """
        window = PROGRESSION_DIFFICULTY_WINDOW
        pool = [
            n for n in self._graph
            if n.id not in (start.id, goal.id)
            and abs(n.difficulty - start.difficulty) <= window
            and abs(n.difficulty - goal.difficulty) <= window
        ]
        pool.sort(key=lambda n: (self._progress(n, start, goal), n.difficulty, n.id))

        path = [start]
        for node in pool:
            # Leave room for the goal
            if len(path) >= options.max_path_length - 1:
                break
            if self.transition_cost(path[-1], node) <= PROGRESSION_MAX_STEP_COST:
                path.append(node)

        path.append(goal)
        return self._result_from_nodes(path)

    @staticmethod
    def _progress(node: LearningNode, start: LearningNode, goal: LearningNode) -> float:
        total = goal.difficulty - start.difficulty
        if total == 0:
            return 0.5
        return max(0.0, min(1.0, (node.difficulty - start.difficulty) / total))

    # =========================================================================
    # SELECTION
    # =========================================================================

    @staticmethod
    def _select_best_path(candidates: list[PathResult], confidence_threshold: float) -> PathResult:
        """
        Highest confidence, then lowest cost, then shortest time, among
        candidates meeting the threshold. Falls back to the first candidate.
        """
        passing = [c for c in candidates if c.confidence >= confidence_threshold]
        if not passing:
            return candidates[0]
        return min(passing, key=lambda c: (-c.confidence, c.total_cost, c.total_time_minutes))
