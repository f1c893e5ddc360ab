"""Tests for prosody_annotator.config."""

from __future__ import annotations

import pytest

from prosody_annotator.config import Settings
from prosody_annotator.exceptions import ProsodyAnnotatorError


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for var in ("PA_VOICES_DIR", "PA_FEATURES_DIR", "PA_LOG_LEVEL", "PA_UNKNOWN_DEPENDENCY"):
            monkeypatch.delenv(var, raising=False)
        settings = Settings()
        assert settings.voices_dir == "voices"
        assert settings.features_dir is None
        assert settings.log_level == "WARNING"
        assert settings.unknown_dependency == "error"

    def test_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PA_VOICES_DIR", "/srv/voices")
        monkeypatch.setenv("PA_LOG_LEVEL", "debug")
        monkeypatch.setenv("PA_UNKNOWN_DEPENDENCY", "Ignore")
        settings = Settings()
        assert settings.voices_dir == "/srv/voices"
        assert settings.log_level == "DEBUG"
        assert settings.unknown_dependency == "ignore"

    def test_invalid_policy(self) -> None:
        with pytest.raises(ProsodyAnnotatorError, match="unknown_dependency"):
            Settings(unknown_dependency="warn")

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ProsodyAnnotatorError, match="Unknown log level 'LOUD'"):
            Settings(log_level="LOUD")
