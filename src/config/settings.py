# src/config/settings.py — v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for cache sizing, watcher recovery, fingerprinting,
discovery thresholds, scoring feature flags and logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Documentation tree ===
    docs_root: Path = Path("./docs")

    # === Document cache ===
    cache_max_size: int = 100
    cache_eviction_policy: Literal["lru", "mru"] = "lru"
    cache_boost_search: float = 1.0
    cache_boost_direct: float = 1.0
    cache_boost_reference: float = 2.0

    # === File watching ===
    cache_enable_watching: bool = True
    watch_ignore_dirs: str = "node_modules,.git,dist"
    watcher_max_errors: int = 3
    watcher_backoff_base_s: float = 5.0
    polling_interval_s: float = 30.0

    # === Fingerprinting ===
    fingerprint_preview_bytes: int = 1500
    fingerprint_max_keywords: int = 20

    # === Related-document discovery ===
    discovery_fingerprint_threshold: float = 0.3
    discovery_max_candidates: int = 10
    discovery_max_suggestions: int = 5
    discovery_min_relevance: float = 0.2
    discovery_refresh_stale: bool = True

    # === Scoring feature flags ===
    scoring_enable_link_graph_boost: bool = False

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("cache_boost_search", "cache_boost_direct", "cache_boost_reference")
    @classmethod
    def validate_boost(cls, v: float) -> float:  # noqa: N805
        """Boost factors scale eviction scores and must be positive."""
        if v <= 0:
            raise ValueError("boost factors must be > 0")
        return v

    @field_validator(
        "cache_max_size",
        "watcher_max_errors",
        "discovery_max_candidates",
        "discovery_max_suggestions",
        "fingerprint_preview_bytes",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:  # noqa: N805
        if v < 1:
            raise ValueError("must be >= 1")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        for name in (
            "discovery_fingerprint_threshold",
            "discovery_min_relevance",
        ):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                errors.append(f"{name.upper()} must be within [0, 1]")

        if not 1 <= self.fingerprint_max_keywords <= 20:
            errors.append("FINGERPRINT_MAX_KEYWORDS must be between 1 and 20")

        if self.discovery_max_suggestions > self.discovery_max_candidates:
            errors.append(
                "DISCOVERY_MAX_SUGGESTIONS must be <= DISCOVERY_MAX_CANDIDATES"
            )

        if self.watcher_backoff_base_s < 0 or self.polling_interval_s <= 0:
            errors.append(
                "WATCHER_BACKOFF_BASE_S must be >= 0 and POLLING_INTERVAL_S > 0"
            )

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def watch_ignore_dirs_list(self) -> list[str]:
        """Parse comma-separated watcher ignore directories."""
        return [d.strip() for d in self.watch_ignore_dirs.split(",") if d.strip()]


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-session config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
