"""Tests for prosody_annotator.voices."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from prosody_annotator.exceptions import VoiceConfigurationError
from prosody_annotator.models import F0ContourModel, PhoneTableModel, ProsodyPitchModel
from prosody_annotator.voices import (
    ModelRole,
    VoiceCatalog,
    VoiceModelBundle,
    bundle_from_mapping,
    load_voice,
)

from .conftest import FULL_VOICE, voice_mapping

DURATION = {"type": "phone-table", "default": 0.1}


class TestBundleFromMapping:
    def test_full_voice(self, full_voice: VoiceModelBundle) -> None:
        assert full_voice.name == "full"
        assert full_voice.locale == "en_US"
        assert set(full_voice.fixed) == set(ModelRole)
        assert list(full_voice.others) == ["contour", "prosody"]
        assert full_voice.is_configured

    def test_get_model(self, full_voice: VoiceModelBundle) -> None:
        assert isinstance(full_voice.get_model("duration"), PhoneTableModel)
        assert isinstance(full_voice.get_model(ModelRole.DURATION), PhoneTableModel)
        assert isinstance(full_voice.get_model("contour"), F0ContourModel)
        assert full_voice.get_model("hmmF0") is None

    def test_other_model_targets(self, full_voice: VoiceModelBundle) -> None:
        assert full_voice.others["contour"].target_name == "voicedSegments"
        assert full_voice.others["contour"].after == frozenset({"rightF0"})
        assert full_voice.others["prosody"].target_name == "document"

    def test_target_defaults_to_segments(self) -> None:
        bundle = bundle_from_mapping(voice_mapping(extra={"type": "phone-table", "attribute": "x", "default": 1}))
        assert bundle.others["extra"].target is None
        assert bundle.others["extra"].target_name == "segments"

    def test_after_accepts_single_name(self) -> None:
        bundle = bundle_from_mapping(
            voice_mapping(prosody={"type": "prosody-pitch", "after": "contour"})
        )
        assert bundle.others["prosody"].after == frozenset({"contour"})

    def test_partial_bundle(self) -> None:
        bundle = bundle_from_mapping(voice_mapping(duration=DURATION))
        assert bundle.model_names() == ["duration"]
        assert bundle.get_model("leftF0") is None

    def test_without_duration_is_unconfigured(self) -> None:
        bundle = bundle_from_mapping(voice_mapping())
        assert bundle.is_configured is False

    @pytest.mark.parametrize(
        "data, match",
        [
            ({"locale": "en_US"}, "name"),
            ({"name": "v", "models": "duration"}, "mapping"),
            (voice_mapping(duration="phone-table"), "must be a mapping"),
            (voice_mapping(duration={"type": "prosody-pitch"}), "element model"),
            (voice_mapping(x={"type": "phone-table", "default": 1, "target": "syllables"}), "unknown collection"),
            (voice_mapping(x={"type": "prosody-pitch", "target": "segments"}), "document model"),
            (voice_mapping(x={"type": "prosody-pitch", "after": [1]}), "after"),
            (voice_mapping(x={"type": "hmm"}), "Unknown model type"),
            (
                voice_mapping(duration={"type": "phone-table", "default": 0.1, "after": ["x"]}),
                "cannot declare",
            ),
            (
                voice_mapping(leftF0={"type": "f0-target", "position": 0, "target": "segments"}),
                "cannot declare",
            ),
        ],
    )
    def test_invalid(self, data: dict, match: str) -> None:
        with pytest.raises(VoiceConfigurationError, match=match):
            bundle_from_mapping(data)

    def test_load_voice(self, tmp_path: Path) -> None:
        path = tmp_path / "full.yaml"
        path.write_text(yaml.safe_dump(FULL_VOICE))
        voice = load_voice(path)
        assert voice.name == "full"
        assert isinstance(voice.get_model("prosody"), ProsodyPitchModel)

    def test_load_voice_bad_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("name: [unclosed")
        with pytest.raises(VoiceConfigurationError, match="Cannot load"):
            load_voice(path)


class TestVoiceCatalog:
    def test_lookup_by_name(self, catalog: VoiceCatalog) -> None:
        assert catalog.get("full") is not None
        assert catalog.get("other") is None
        assert catalog.names == ["full"]

    def test_duplicate_name(self, full_voice: VoiceModelBundle) -> None:
        with pytest.raises(VoiceConfigurationError, match="Duplicate"):
            VoiceCatalog([full_voice, full_voice])

    def test_default_for_locale(self) -> None:
        gb = VoiceModelBundle(name="gb", locale="en_GB")
        us = VoiceModelBundle(name="us", locale="en_US")
        catalog = VoiceCatalog([gb, us])
        assert catalog.default_for_locale("en-US") is us
        assert catalog.default_for_locale("en-AU") is gb
        assert catalog.default_for_locale("de") is None
        assert catalog.default_for_locale(None) is None

    def test_from_directory(self, tmp_path: Path) -> None:
        (tmp_path / "a.yaml").write_text(yaml.safe_dump(voice_mapping("a", duration=DURATION)))
        (tmp_path / "b.yaml").write_text(yaml.safe_dump(voice_mapping("b")))
        (tmp_path / "notes.txt").write_text("ignored")
        assert VoiceCatalog.from_directory(tmp_path).names == ["a", "b"]

    def test_from_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(VoiceConfigurationError, match="not found"):
            VoiceCatalog.from_directory(tmp_path / "voices")
