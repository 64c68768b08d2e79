"""
Redline Configuration System
=============================

Central configuration using Pydantic Settings. Supports:
- Environment variables (REDLINE_ prefix, ``__`` for nested fields)
- .env file loading
- YAML config file overrides

The config produces a deterministic hash so that review outcomes
can be traced back to the settings that produced them.

Usage:
    from redline.config import get_config
    cfg = get_config()                        # loads from env / .env
    cfg = get_config("configs/strict.yaml")   # loads with YAML overrides
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from redline.utils import compute_hash


# ── Accept-all Strategy ────────────────────────────────────────────
class AcceptAllStrategy(str, Enum):
    """
    How "accept all" combines with suggestions already accepted
    individually in the same session.

    - COMPOSE:       apply the still-pending suggestions on top of the
                     current live text (earlier accepts are kept).
    - FROM_ORIGINAL: apply the still-pending suggestions to the pristine
                     original text, discarding earlier individual accepts.
    """
    COMPOSE = "compose"
    FROM_ORIGINAL = "from_original"


# ── Sub-configs ────────────────────────────────────────────────────
class IngestConfig(BaseModel):
    """Configuration for suggestion batch ingestion."""
    drop_overlapping: bool = Field(
        default=True,
        description="Drop suggestions whose range overlaps an earlier one"
    )
    require_phrase_match: bool = Field(
        default=False,
        description="Drop suggestions whose original phrase differs from the text at their range"
    )
    max_suggestions: int = Field(
        default=500,
        ge=1,
        description="Hard cap on suggestions kept from a single batch"
    )


class ReviewConfig(BaseModel):
    """Configuration for the reconciliation engine."""
    accept_all_strategy: AcceptAllStrategy = Field(
        default=AcceptAllStrategy.COMPOSE,
        description="'compose' (keep individual accepts) or 'from_original'"
    )
    default_rejection_type: str = Field(
        default="grammar",
        description="Payload 'type' used when a suggestion carries none"
    )


class StoreConfig(BaseModel):
    """Configuration for the per-document rejection store."""
    store_dir: Path = Field(
        default=Path("./.redline"),
        description="Directory holding one rejection file per document"
    )
    file_template: str = Field(
        default="rejections_{doc_id}.json",
        description="File name template; {doc_id} is replaced by the sanitized document id"
    )


# ── Main Config ────────────────────────────────────────────────────
class RedlineConfig(BaseSettings):
    """
    Root configuration for Redline.

    Loads from environment variables (REDLINE_ prefix) and .env file.
    Can be extended with YAML overrides via `get_config(yaml_path)`.

    Example:
        export REDLINE_LOG_LEVEL=DEBUG
        export REDLINE_REVIEW__ACCEPT_ALL_STRATEGY=from_original
    """
    model_config = SettingsConfigDict(
        env_prefix="REDLINE_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Top-level settings ─────────────────────────────────────────
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="text", description="Log format: 'json' or 'text'")

    # ── Sub-configs ────────────────────────────────────────────────
    ingest: IngestConfig = Field(default_factory=IngestConfig)
    review: ReviewConfig = Field(default_factory=ReviewConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)

    def config_hash(self) -> str:
        """
        Produce a deterministic SHA-256 hash of the configuration.

        Stamped on review outcomes so two runs can be compared.
        """
        return compute_hash(self.model_dump(mode="json"))

    def ensure_dirs(self) -> None:
        """Create the rejection store directory if it doesn't exist."""
        self.store.store_dir.mkdir(parents=True, exist_ok=True)


# ── Config Loading ─────────────────────────────────────────────────
def get_config(yaml_path: Optional[str] = None) -> RedlineConfig:
    """
    Load Redline configuration.

    Priority (highest to lowest):
        1. Values from the YAML file (if provided)
        2. Environment variables (REDLINE_ prefix)
        3. .env file
        4. Default values

    Args:
        yaml_path: Optional path to a YAML config file for overrides.

    Returns:
        Fully resolved RedlineConfig instance.
    """
    if yaml_path:
        import yaml
        with open(yaml_path) as f:
            overrides = yaml.safe_load(f) or {}
        return RedlineConfig(**overrides)
    return RedlineConfig()
