"""Annotator configuration."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

from .exceptions import ProsodyAnnotatorError

_POLICIES = ("error", "ignore")


@dataclass
class Settings:
    """Annotator settings, configurable via environment variables.

    Environment variables:
        PA_VOICES_DIR: Directory of voice YAML files (default "voices")
        PA_FEATURES_DIR: Directory of feature-set YAML files (default: packaged sets)
        PA_LOG_LEVEL: Logging level name (default "WARNING")
        PA_UNKNOWN_DEPENDENCY: "error" (default) or "ignore" for models
            declaring an ordering dependency on an unknown model
    """

    voices_dir: str = field(default_factory=lambda: os.getenv("PA_VOICES_DIR", "voices"))
    features_dir: str | None = field(default_factory=lambda: os.getenv("PA_FEATURES_DIR") or None)
    log_level: str = field(
        default_factory=lambda: os.getenv("PA_LOG_LEVEL", "WARNING").upper()
    )
    unknown_dependency: str = field(
        default_factory=lambda: os.getenv("PA_UNKNOWN_DEPENDENCY", "error").lower()
    )

    def __post_init__(self) -> None:
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ProsodyAnnotatorError(f"Unknown log level '{self.log_level}'")
        if self.unknown_dependency not in _POLICIES:
            raise ProsodyAnnotatorError(
                f"unknown_dependency must be one of {_POLICIES}, got '{self.unknown_dependency}'"
            )
