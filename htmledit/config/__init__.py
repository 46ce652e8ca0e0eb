"""Configuration helpers for the search/replace engine."""

from __future__ import annotations

import math
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, model_validator

DEFAULT_CONFIG_PATH = Path(__file__).with_name("engine.yaml")

# Env values that switch the looser fuzzy pass off
DISABLED_VALUES = frozenset({"off", "none", "null", "false"})


class DiagnosticsConfig(BaseModel):
    """Settings for the best-match finder used on failed operations."""

    budget: float = Field(0.70, gt=0.0, le=1.0)
    floor: float = Field(0.30, ge=0.0, le=1.0)
    text_limit: int = Field(150, gt=0)
    context_limit: int = Field(300, gt=0)
    context_lines: int = Field(2, ge=0)


class EngineConfig(BaseModel):
    """Engine configuration sourced from YAML."""

    fuzzy_threshold: float = Field(0.85, gt=0.0, le=1.0)
    autocorrect_threshold: float | None = Field(None, gt=0.0, le=1.0)
    diagnostics: DiagnosticsConfig = Field(default_factory=DiagnosticsConfig)

    @model_validator(mode="after")
    def _check_thresholds(self) -> "EngineConfig":
        if (
            self.autocorrect_threshold is not None
            and self.autocorrect_threshold >= self.fuzzy_threshold
        ):
            raise ValueError("autocorrect_threshold must be looser than fuzzy_threshold")
        return self


DEFAULT_CONFIG = EngineConfig()


def _float_override(name: str) -> float | None:
    """Read a float from the environment, ignoring unparsable values."""
    env_val = os.environ.get(name)
    if env_val:
        try:
            value = float(env_val)
        except ValueError:
            return None
        return value if math.isfinite(value) else None
    return None


def load_config(path: str | Path | None = None) -> EngineConfig:
    """Load engine config from YAML, then apply environment overrides.

    Priority:
        1. HTMLEDIT_FUZZY_THRESHOLD / HTMLEDIT_AUTOCORRECT_THRESHOLD
           ("off" disables the autocorrect pass; non-finite values are ignored)
        2. ``path`` argument, else HTMLEDIT_CONFIG, else the bundled engine.yaml

    Args:
        path: Optional override path.

    Returns:
        Validated EngineConfig.
    """
    env_path = os.environ.get("HTMLEDIT_CONFIG")
    config_path = Path(path) if path else Path(env_path) if env_path else DEFAULT_CONFIG_PATH
    if not config_path.exists():
        raise FileNotFoundError(f"Engine config not found: {config_path}")

    data = yaml.safe_load(config_path.read_text()) or {}
    matching = data.get("matching", {}) or {}
    diagnostics = data.get("diagnostics", {}) or {}

    settings: dict = {
        "fuzzy_threshold": matching.get("fuzzy_threshold", DEFAULT_CONFIG.fuzzy_threshold),
        "autocorrect_threshold": matching.get("autocorrect_threshold"),
        "diagnostics": DiagnosticsConfig(**diagnostics),
    }

    fuzzy_override = _float_override("HTMLEDIT_FUZZY_THRESHOLD")
    if fuzzy_override is not None:
        settings["fuzzy_threshold"] = fuzzy_override
    if os.environ.get("HTMLEDIT_AUTOCORRECT_THRESHOLD", "").strip().lower() in DISABLED_VALUES:
        settings["autocorrect_threshold"] = None
    else:
        autocorrect_override = _float_override("HTMLEDIT_AUTOCORRECT_THRESHOLD")
        if autocorrect_override is not None:
            settings["autocorrect_threshold"] = autocorrect_override

    return EngineConfig(**settings)


__all__ = [
    "DEFAULT_CONFIG",
    "DEFAULT_CONFIG_PATH",
    "DiagnosticsConfig",
    "EngineConfig",
    "load_config",
]
