# Path: config/__init__.py
# Purpose: Package initializer for configuration module.
# Layer: config.
# Details: Exposes the application settings and the strategy, scoring, and tier sections.

from .settings import AppSettings, ScoringSettings, StrategySettings, TierSettings

__all__ = ["AppSettings", "ScoringSettings", "StrategySettings", "TierSettings"]
