"""
Gap Scorer.

Computes a 0-100 gap score between a learner's current node and a target:

    gap = clamp(0, 100, (w_d * difficulty_gap
                         + w_p * prerequisite_gap
                         + w_l * layer_gap) / 3)

The difficulty component is directional: moving to an easier node clamps
to 0, so gap(a, b) != gap(b, a) in general.
"""
from __future__ import annotations

from typing import Optional

from gapmap.core.models import GapScore, LearningNode, MasteryMap, MAX_DIFFICULTY
from gapmap.core.weights import GapWeights
from gapmap.graph.index import GraphIndex


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


class GapScorer:
    """
    Score the distance between two nodes for a given mastery map.

    The mastery map is read only; absent entries count as 0 mastery.
    """

    def __init__(
        self,
        graph: GraphIndex,
        mastery: MasteryMap,
        weights: Optional[GapWeights] = None,
    ):
        self._graph = graph
        self._mastery = mastery
        self._weights = weights or GapWeights()

    def mastery_of(self, node_id: str) -> float:
        return self._mastery.get(node_id, 0.0)

    def is_satisfied(self, node_id: str) -> bool:
        return self.mastery_of(node_id) >= self._weights.mastery_threshold

    def score(self, current: LearningNode, target: LearningNode) -> GapScore:
        """
        Compute the composite gap score and the missing prerequisites.

        Args:
            current: Node the learner is considered to be at
            target: Node the learner wants to reach

        Returns:
            GapScore with the composite score and its components
        """
        if current.id == target.id:
            return GapScore(gap_score=0.0)

        difficulty_gap = self.difficulty_gap(current, target)
        prerequisite_gap = self.prerequisite_gap(target)
        layer_gap = self.layer_gap(current, target)

        w = self._weights
        weighted = (
            difficulty_gap * w.difficulty_gap
            + prerequisite_gap * w.prerequisite_gap
            + layer_gap * w.layer_gap
        ) / w.composite_divisor

        return GapScore(
            gap_score=_clamp(weighted),
            missing_prerequisites=self.missing_prerequisites(target),
            difficulty_gap=difficulty_gap,
            prerequisite_gap=prerequisite_gap,
            layer_gap=layer_gap,
        )

    def difficulty_gap(self, current: LearningNode, target: LearningNode) -> float:
        delta = target.difficulty - current.difficulty
        return _clamp(delta / MAX_DIFFICULTY * 100)

    def prerequisite_gap(self, target: LearningNode) -> float:
        """
        Average unmet-mastery shortfall across the target's prerequisites.

        Satisfied prerequisites contribute 0 but still count in the
        denominator. Ids outside the snapshot count as unmastered.
        """
        if not target.prerequisites:
            return 0.0

        total = 0.0
        for pid in target.prerequisites:
            if not self.is_satisfied(pid):
                total += (1 - self.mastery_of(pid)) * 100
        return total / len(target.prerequisites)

    def layer_gap(self, current: LearningNode, target: LearningNode) -> float:
        return self._weights.layer_gap_for(current.layer, target.layer)

    def missing_prerequisites(self, target: LearningNode) -> list[LearningNode]:
        """Unsatisfied prerequisites present in the snapshot, easiest first."""
        missing = [
            node for node in self._graph.prerequisites_of(target)
            if not self.is_satisfied(node.id)
        ]
        return sorted(missing, key=lambda n: n.difficulty)

    def prerequisite_impact(self, target: LearningNode, prerequisite_id: str) -> float:
        """
        Gap score points recovered by mastering a single prerequisite.

        Zero when the prerequisite is already satisfied or not required.
        """
        if prerequisite_id not in target.prerequisites or self.is_satisfied(prerequisite_id):
            return 0.0
        share = (1 - self.mastery_of(prerequisite_id)) * 100 / len(target.prerequisites)
        w = self._weights
        return share * w.prerequisite_gap / w.composite_divisor
