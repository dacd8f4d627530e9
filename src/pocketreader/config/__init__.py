"""Configuration models and the lazily loaded ``settings`` instance."""

from .config import (
    Config,
    ExtractionSettings,
    LazyConfig,
    MonitoringConfig,
    ScoringConfig,
    find_config_file,
    settings,
)

__all__ = [
    "Config",
    "ExtractionSettings",
    "LazyConfig",
    "MonitoringConfig",
    "ScoringConfig",
    "find_config_file",
    "settings",
]
