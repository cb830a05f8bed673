"""
Tunable constant tables for gap scoring and path search.

Passed explicitly into the scorer, path finder and analyzer so tests and
callers can swap them without touching module state. Settings builds these
from the environment (see gapmap.config).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from gapmap.core.models import GapLevel, Layer


def default_layer_gap_table() -> dict[tuple[Layer, Layer], float]:
    """Symmetric layer gap lookup: same 0, adjacent 30, two apart 60."""
    return {
        (Layer.L1, Layer.L1): 0, (Layer.L1, Layer.L2): 30, (Layer.L1, Layer.L3): 60,
        (Layer.L2, Layer.L1): 30, (Layer.L2, Layer.L2): 0, (Layer.L2, Layer.L3): 30,
        (Layer.L3, Layer.L1): 60, (Layer.L3, Layer.L2): 30, (Layer.L3, Layer.L3): 0,
    }


@dataclass(frozen=True)
class GapWeights:
    """
    Weights for the composite gap score.

    The weighted sum is divided by composite_divisor (3) after weighting,
    which compresses the effective output range well below 100.
    """

    difficulty_gap: float = 0.4
    prerequisite_gap: float = 0.4
    layer_gap: float = 0.2
    mastery_threshold: float = 0.8
    composite_divisor: float = 3.0
    layer_gap_table: Mapping[tuple[Layer, Layer], float] = field(
        default_factory=default_layer_gap_table
    )

    def __post_init__(self):
        if not 0 <= self.mastery_threshold <= 1:
            raise ValueError(f"mastery_threshold must be within [0, 1], got {self.mastery_threshold}")
        if self.composite_divisor <= 0:
            raise ValueError("composite_divisor must be positive")

    def layer_gap_for(self, current: Layer, target: Layer) -> float:
        return float(self.layer_gap_table[(current, target)])


@dataclass(frozen=True)
class HeuristicConfig:
    """Weights for the A* remaining-cost estimate."""

    difficulty_weight: float = 1.0
    layer_weight: float = 1.0
    mastery_bonus: float = 0.5


@dataclass(frozen=True)
class GapThresholds:
    """Upper bounds of the low and medium gap bands."""

    low: float = 33
    medium: float = 66

    def __post_init__(self):
        if self.medium < self.low:
            raise ValueError(f"medium threshold {self.medium} is below low threshold {self.low}")

    def level_for(self, gap_score: float) -> GapLevel:
        return GapLevel.from_score(gap_score, self.low, self.medium)
