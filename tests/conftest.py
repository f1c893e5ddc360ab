"""Shared test fixtures for the prosody_annotator test suite."""

from __future__ import annotations

from typing import Any

import pytest

from prosody_annotator.features import FeatureSet, LocaleFeatureResolver, PhoneFeatures
from prosody_annotator.voices import VoiceCatalog, VoiceModelBundle, bundle_from_mapping


# ---------------------------------------------------------------------------
# Sample markup strings
# ---------------------------------------------------------------------------

ONE_SYLLABLE = (
    '<maryxml xmlns="http://mary.dfki.de/2002/MaryXML" xml:lang="en-US">'
    "<p><s><phrase>"
    '<t ph="k a"><syllable ph="k a"><ph p="k"/><ph p="a"/></syllable></t>'
    '<boundary breakindex="4"/>'
    "</phrase></s></p>"
    "</maryxml>"
)

# Three syllables, the middle one without any voiced phone.
WITH_MALFORMED_SYLLABLE = (
    '<maryxml xml:lang="en-US">'
    "<p><s><phrase>"
    '<t ph="k a n"><syllable ph="k a n"><ph p="k"/><ph p="a"/><ph p="n"/></syllable></t>'
    '<boundary breakindex="2"/>'
    '<t ph="s t"><syllable ph="s t"><ph p="s"/><ph p="t"/></syllable></t>'
    '<t ph="n i"><syllable ph="n i"><ph p="n"/><ph p="i"/></syllable></t>'
    '<boundary breakindex="4"/>'
    "</phrase></s></p>"
    "</maryxml>"
)

NAMED_VOICE = (
    '<maryxml xml:lang="en-US">'
    '<voice name="full">'
    '<t ph="n a"><syllable ph="n a"><ph p="n"/><ph p="a"/></syllable></t>'
    '<boundary breakindex="4"/>'
    "</voice>"
    "</maryxml>"
)

PROSODY_SPAN = (
    '<maryxml xml:lang="en-US">'
    '<prosody pitch="+10%">'
    '<t ph="n a"><syllable ph="n a"><ph p="n"/><ph p="a"/></syllable></t>'
    "</prosody>"
    '<t ph="n i"><syllable ph="n i"><ph p="n"/><ph p="i"/></syllable></t>'
    '<boundary breakindex="4"/>'
    "</maryxml>"
)


# ---------------------------------------------------------------------------
# Voice definitions
# ---------------------------------------------------------------------------

DURATIONS = {"k": 0.05, "a": 0.12, "n": 0.06, "s": 0.08, "t": 0.04, "i": 0.1}


def voice_mapping(name: str = "full", **models: Any) -> dict[str, Any]:
    return {"name": name, "locale": "en_US", "models": models}


FULL_VOICE = voice_mapping(
    "full",
    duration={"type": "phone-table", "table": DURATIONS, "default": 0.07},
    leftF0={"type": "f0-target", "position": 0, "table": {"a": 110, "i": 120}, "default": 100},
    midF0={"type": "f0-target", "position": 50, "table": {"a": 130, "i": 140}, "default": 120},
    rightF0={"type": "f0-target", "position": 100, "table": {"a": 105, "i": 95}, "default": 100},
    boundary={"type": "break-table", "table": {"4": 400, "2": 100}, "default": 0},
    contour={"type": "f0-contour", "target": "voicedSegments", "after": ["rightF0"]},
    prosody={"type": "prosody-pitch", "target": "document", "after": ["contour"]},
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def feature_set() -> FeatureSet:
    return FeatureSet(
        locale="en_US",
        phones={
            "k": PhoneFeatures(voiced=False),
            "s": PhoneFeatures(voiced=False),
            "t": PhoneFeatures(voiced=False),
            "n": PhoneFeatures(voiced=True),
            "a": PhoneFeatures(voiced=True, vowel=True),
            "i": PhoneFeatures(voiced=True, vowel=True),
        },
    )


@pytest.fixture()
def resolver(feature_set: FeatureSet) -> LocaleFeatureResolver:
    return LocaleFeatureResolver([feature_set])


@pytest.fixture()
def full_voice() -> VoiceModelBundle:
    return bundle_from_mapping(FULL_VOICE)


@pytest.fixture()
def catalog(full_voice: VoiceModelBundle) -> VoiceCatalog:
    return VoiceCatalog([full_voice])
