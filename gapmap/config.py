"""
Configuration settings for gapmap.

Uses Pydantic Settings for environment variable management with .env file support.
All variables use the GAPMAP_ prefix, e.g. GAPMAP_MASTERY_THRESHOLD=0.75.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from gapmap.adaptive.path_finder import PathOptions
from gapmap.core.models import HeuristicMode
from gapmap.core.weights import GapThresholds, GapWeights, HeuristicConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="GAPMAP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Gap Scoring
    # ========================================
    mastery_threshold: float = Field(
        default=0.8,
        ge=0,
        le=1,
        description="Mastery at or above which a prerequisite counts as satisfied",
    )
    difficulty_gap_weight: float = Field(
        default=0.4,
        ge=0,
        description="Weight of the difficulty component in the gap score",
    )
    prerequisite_gap_weight: float = Field(
        default=0.4,
        ge=0,
        description="Weight of the prerequisite component in the gap score",
    )
    layer_gap_weight: float = Field(
        default=0.2,
        ge=0,
        description="Weight of the layer component in the gap score",
    )

    # ========================================
    # Path Search
    # ========================================
    max_path_length: int = Field(
        default=20,
        ge=1,
        description="Maximum closed-set size before A* gives up",
    )
    include_alternatives: bool = Field(
        default=False,
        description="Compute alternative paths alongside the primary search",
    )
    confidence_threshold: float = Field(
        default=0.5,
        ge=0,
        le=1,
        description="Minimum path confidence for a candidate to be preferred",
    )
    time_limit_ms: int = Field(
        default=30000,
        ge=0,
        description="Wall-clock budget for a single A* search (milliseconds)",
    )
    heuristic_mode: HeuristicMode = Field(
        default=HeuristicMode.LINEAR,
        description="A* heuristic transform (only 'linear' is admissible)",
    )
    heuristic_difficulty_weight: float = Field(default=1.0, ge=0)
    heuristic_layer_weight: float = Field(default=1.0, ge=0)
    heuristic_mastery_bonus: float = Field(default=0.5, ge=0)

    # ========================================
    # Gap Bands
    # ========================================
    gap_low_threshold: float = Field(
        default=33,
        ge=0,
        le=100,
        description="Highest gap score still banded as low",
    )
    gap_medium_threshold: float = Field(
        default=66,
        ge=0,
        le=100,
        description="Highest gap score still banded as medium",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    def gap_weights(self) -> GapWeights:
        return GapWeights(
            difficulty_gap=self.difficulty_gap_weight,
            prerequisite_gap=self.prerequisite_gap_weight,
            layer_gap=self.layer_gap_weight,
            mastery_threshold=self.mastery_threshold,
        )

    def gap_thresholds(self) -> GapThresholds:
        return GapThresholds(low=self.gap_low_threshold, medium=self.gap_medium_threshold)

    def heuristic_config(self) -> HeuristicConfig:
        return HeuristicConfig(
            difficulty_weight=self.heuristic_difficulty_weight,
            layer_weight=self.heuristic_layer_weight,
            mastery_bonus=self.heuristic_mastery_bonus,
        )

    def path_options(self) -> PathOptions:
        return PathOptions(
            max_path_length=self.max_path_length,
            include_alternatives=self.include_alternatives,
            confidence_threshold=self.confidence_threshold,
            time_limit_ms=self.time_limit_ms,
            heuristic_mode=self.heuristic_mode,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
