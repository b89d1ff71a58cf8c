# Path: config/settings.py
# Purpose: Provide typed application configuration models.
# Layer: config.
# Details: Centralizes strategy bounds, scoring weights, tier thresholds, and logging parameters.

from pathlib import Path
from typing import Dict, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StrategySettings(BaseModel):
    """Settings controlling how strategy runners sample the catalog and jitter confidences."""

    semantic_jitter: float = Field(default=0.2, ge=0.0, description="Upper bound of semantic confidence jitter.")
    visual_jitter: float = Field(default=0.4, ge=0.0, description="Upper bound of unmeasured visual similarity.")
    color_jitter: float = Field(default=0.3, ge=0.0, description="Upper bound of color confidence jitter.")
    color_sample_size: int = Field(default=100, ge=1, description="Recent records sampled by the color strategy.")
    fallback_sample_size: int = Field(default=100, ge=1, description="Recent records sampled by the text fallback.")
    max_workers: int = Field(default=4, ge=1, description="Thread pool size used to fan strategies out.")
    strategy_timeout_seconds: Optional[float] = Field(
        default=None, gt=0, description="Seconds a request waits for its strategies; None waits indefinitely."
    )
    seed: Optional[int] = Field(default=None, description="Seed for the jitter sources; None draws fresh entropy.")


class ScoringSettings(BaseModel):
    """Constants used by the weighted scoring engine."""

    exact_match: float = 1.0
    partial_match: float = 0.6
    similarity_match: float = 0.4
    metadata_match: float = 0.8
    similarity_threshold: float = 0.7
    ai_tag_factor: float = 0.8
    stored_filename_factor: float = 0.8
    weights: Dict[str, Dict[str, float]] = Field(
        default_factory=lambda: {
            "SEMANTIC": {"description": 0.45, "tags": 0.35, "filename": 0.15, "metadata": 0.05},
            "TECHNICAL": {"description": 0.2, "tags": 0.2, "filename": 0.2, "metadata": 0.4},
            "VISUAL": {"description": 0.3, "tags": 0.25, "filename": 0.15, "metadata": 0.3},
            "COLOR": {"description": 0.35, "tags": 0.35, "filename": 0.15, "metadata": 0.15},
            "CONTENT": {"description": 0.4, "tags": 0.3, "filename": 0.15, "metadata": 0.15},
        },
        description="Per query-type weights for the four match signals.",
    )
    multi_signal_bonus: float = Field(default=0.05, description="Bonus per additional agreeing text signal.")
    high_confidence_threshold: float = 0.8
    high_confidence_bonus: float = 0.05
    scene_bonus: float = 0.05
    freshness_bonus: float = 0.05
    time_reference_freshness_bonus: float = 0.2
    freshness_decay_days: float = 365.0
    richness_bonus_per_field: float = 0.02
    richness_bonus_cap: float = 0.1
    popularity_bonus_cap: float = 0.05
    missing_description_penalty: float = 0.05
    missing_tags_penalty: float = 0.03
    missing_metadata_penalty: float = 0.05
    stale_metadata_penalty: float = 0.05
    stale_metadata_days: float = 180.0
    low_ai_confidence_threshold: float = 0.5
    low_ai_confidence_penalty: float = 0.03
    outdated_record_penalty: float = 0.1


class TierSettings(BaseModel):
    """Thresholds bucketing scores into confidence tiers and overall search quality."""

    very_high: float = 0.8
    high: float = 0.6
    medium: float = 0.4
    low: float = 0.2
    excellent_highest: float = 0.8
    excellent_average: float = 0.6
    excellent_count: int = 5
    good_highest: float = 0.7
    good_average: float = 0.5
    good_count: int = 3
    fair_highest: float = 0.5
    fair_average: float = 0.3
    poor_highest: float = 0.3


class AppSettings(BaseSettings):
    """Top-level application settings shared across services and interfaces.

    Values are read from ``IMGSEARCH_*`` environment variables; nested sections use a
    double underscore, e.g. ``IMGSEARCH_STRATEGIES__MAX_WORKERS``.
    """

    model_config = SettingsConfigDict(env_prefix="IMGSEARCH_", env_nested_delimiter="__")

    catalog_path: Optional[Path] = Field(default=None, description="JSON catalog loaded by the API and CLI.")
    log_level: str = Field(default="INFO", description="Verbosity level for application logs.")
    log_dir: Optional[Path] = Field(default=None, description="Directory for rotating log files; None logs to stdout only.")
    max_limit: int = Field(default=100, ge=1, description="Largest result limit accepted from callers.")
    strategies: StrategySettings = Field(default_factory=StrategySettings)
    scoring: ScoringSettings = Field(default_factory=ScoringSettings)
    tiers: TierSettings = Field(default_factory=TierSettings)

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()

    @classmethod
    def from_env(cls) -> "AppSettings":
        """Instantiate settings from IMGSEARCH_* environment variables when available."""

        return cls()


__all__ = ["AppSettings", "ScoringSettings", "StrategySettings", "TierSettings"]
