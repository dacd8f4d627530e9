"""
Configuration management for pocketreader using Pydantic.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, ClassVar, Dict, List, cast

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Setup Logging ---
log = logging.getLogger(__name__)

# --- Nested Configuration Models ---


def _default_base_weights() -> Dict[str, float]:
    return {
        "article": 10.0,
        "main": 8.0,
        "section": 5.0,
        "div": 5.0,
        "td": 3.0,
        "pre": 3.0,
        "blockquote": 3.0,
        "p": 0.0,
        "li": -3.0,
        "ul": -3.0,
        "ol": -3.0,
        "form": -3.0,
        "address": -3.0,
        "header": -5.0,
        "footer": -10.0,
        "nav": -10.0,
        "aside": -10.0,
    }


class ScoringConfig(BaseModel):
    """Heuristic constants for the candidate scorer."""

    base_weights: Dict[str, float] = Field(
        default_factory=_default_base_weights,
        description="Starting weight per block-level tag. Only these tags are scored as candidates.",
    )
    positive_keywords: List[str] = Field(
        default_factory=lambda: [
            "article",
            "body",
            "content",
            "entry",
            "hentry",
            "main",
            "page",
            "post",
            "text",
            "blog",
            "story",
        ]
    )
    negative_keywords: List[str] = Field(
        default_factory=lambda: [
            "advert",
            "banner",
            "combx",
            "comment",
            "contact",
            "footer",
            "footnote",
            "masthead",
            "menu",
            "nav",
            "outbrain",
            "promo",
            "related",
            "share",
            "shoutbox",
            "sidebar",
            "social",
            "sponsor",
            "widget",
        ]
    )
    keyword_bonus: float = Field(default=25.0, ge=0.0, description="Added or subtracted on a class/id keyword hit.")
    chars_per_point: float = Field(default=100.0, gt=0.0, description="Characters of text worth one point.")
    max_length_points: float = Field(default=3.0, ge=0.0, description="Cap on points earned from text length.")
    max_text_score: float = Field(default=15.0, gt=0.0, description="Cap on the whole text score of a node.")
    link_density_cutoff: float = Field(
        default=0.5, gt=0.0, le=1.0, description="Link density above which a block counts as boilerplate."
    )
    parent_fraction: float = Field(default=0.25, ge=0.0, le=1.0)
    grandparent_fraction: float = Field(default=0.125, ge=0.0, le=1.0)
    min_score: float = Field(default=6.0, ge=0.0, description="Floor the primary candidate must reach.")

    @field_validator("positive_keywords", "negative_keywords")
    @classmethod
    def lowercase_keywords(cls, v: List[str]) -> List[str]:
        return [keyword.lower() for keyword in v if keyword]

    @field_validator("base_weights")
    @classmethod
    def validate_base_weights(cls, v: Dict[str, float]) -> Dict[str, float]:
        """Ensure at least one tag is scored."""
        if not v:
            raise ValueError("base_weights must name at least one block-level tag")
        return {tag.lower(): weight for tag, weight in v.items()}

    @model_validator(mode="after")
    def validate_fractions(self) -> "ScoringConfig":
        if self.grandparent_fraction > self.parent_fraction:
            raise ValueError("grandparent_fraction must not exceed parent_fraction")
        return self


class ExtractionSettings(BaseModel):
    """Configuration for region selection, cleanup and title extraction."""

    sibling_score_fraction: float = Field(
        default=0.2, ge=0.0, le=1.0, description="Siblings scoring at least this share of the primary are merged."
    )
    sibling_min_text_length: int = Field(
        default=80, ge=0, description="Paragraph siblings longer than this merge when link density is low."
    )
    cleanup_min_text_length: int = Field(
        default=250, ge=0, description="Link-dense blocks with less plain (non-anchor) text than this are removed."
    )
    title_delimiters: List[str] = Field(default_factory=lambda: [" | ", " - ", " :: "])
    title_hint_attributes: List[str] = Field(default_factory=lambda: ["data-title-hint", "data-article-title"])
    default_body_only: bool = True
    default_no_headline: bool = False

    @field_validator("title_delimiters")
    @classmethod
    def validate_delimiters(cls, v: List[str]) -> List[str]:
        if any(not delimiter for delimiter in v):
            raise ValueError("title_delimiters must not contain empty strings")
        return v


class MonitoringConfig(BaseModel):
    """Configuration for logging and metrics."""

    log_level: str = Field(default="INFO", description="Logging level (e.g., DEBUG, INFO, WARNING).")
    log_file: str | None = Field(default=None, description="Path to log file. If None, logs to console.")
    metrics_enabled: bool = Field(default=True, description="Record Prometheus metrics for each extraction.")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("log_file", mode="before")
    @classmethod
    def create_parent_dir(cls, v: str | Path | None) -> str | None:
        if v is None:
            return None
        path = Path(v)
        path.parent.mkdir(parents=True, exist_ok=True)
        return str(path)


# --- Main Configuration Class ---


class Config(BaseSettings):
    project_name: str = "pocketreader"
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    extraction: ExtractionSettings = Field(default_factory=ExtractionSettings)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)

    model_config = SettingsConfigDict(env_prefix="POCKETREADER_", env_nested_delimiter="__", case_sensitive=False)

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        log.debug("Loading configuration from YAML file: %s", path)
        if not path.is_file():
            raise FileNotFoundError(f"Configuration file not found or is not a file: {path}")
        with open(path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f)
        if not yaml_data:
            log.warning("Configuration file is empty: %s. Using default settings.", path)
            return cls.model_validate({})
        return cls.model_validate(yaml_data)


def find_config_file() -> Path | None:
    current_dir = Path.cwd()
    for name in ("pocketreader.yaml", "pocketreader.yml", "config.yaml", "config.yml"):
        path = current_dir / name
        if path.exists():
            return path
    return None


# --- Lazy Configuration Loader ---


class LazyConfig:
    """
    A proxy for the Config object that delays its loading and validation
    until an attribute is first accessed. This prevents configuration errors
    from crashing the application on import.
    """

    _config: ClassVar[Config | None] = None
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __getattr__(self, name: str) -> Any:
        if self.__class__._config is None:
            with self.__class__._lock:
                if self.__class__._config is None:
                    self.__class__._config = self._load_config_with_fallback()
        return getattr(self.__class__._config, name)

    def _load_config_with_fallback(self) -> Config:
        """Load configuration from file or fall back to defaults."""
        config_path = find_config_file()
        if config_path:
            try:
                log.info("Lazy loading configuration from: %s", config_path)
                return Config.from_yaml(config_path)
            except (ValidationError, FileNotFoundError, yaml.YAMLError) as e:
                log.error(
                    "Failed to load or validate configuration from '%s': %s. "
                    "Falling back to default settings. Please check your config file.",
                    config_path,
                    e,
                    exc_info=log.getEffectiveLevel() <= logging.DEBUG,
                )
        else:
            log.info("No config file found. Using default settings for lazy load.")

        try:
            return Config()
        except ValidationError as e:
            log.critical("FATAL: Default configuration is invalid: %s", e, exc_info=True)
            raise RuntimeError(f"Default configuration is invalid, cannot start: {e}") from e


# --- Global Settings Instance ---
settings: "Config" = cast("Config", LazyConfig())
