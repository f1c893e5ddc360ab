"""Phonological feature sets and the per-syllable feature resolver.

A feature set maps phone symbols of one locale to their voicing and
vowel status. Feature sets are YAML files of the form::

    locale: en_US
    phones:
      A: {vowel: true}
      b: {voiced: true}
      p: {}

``vowel`` defaults to false and ``voiced`` defaults to the value of
``vowel``, so vowels need only be flagged once.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any, Protocol

import yaml
from lxml import etree

from .exceptions import FeatureResolutionError, UnknownPhoneError
from .markup import language_of


def normalize_locale(locale: str) -> str:
    """Normalize ``en-us`` / ``en_US`` / ``EN-US`` to ``en_US``."""
    parts = locale.strip().replace("-", "_").split("_")
    if len(parts) == 1:
        return parts[0].lower()
    return f"{parts[0].lower()}_{parts[1].upper()}"


@dataclass(frozen=True)
class PhoneFeatures:
    """Voicing and vowel status of a single phone."""

    voiced: bool
    vowel: bool = False


@dataclass(frozen=True)
class FeatureSet:
    """Phone classifications for one locale."""

    locale: str
    phones: dict[str, PhoneFeatures] = field(default_factory=dict)

    def classify(self, symbol: str) -> PhoneFeatures:
        try:
            return self.phones[symbol]
        except KeyError:
            raise UnknownPhoneError(symbol, self.locale) from None

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> FeatureSet:
        """Build a feature set from a parsed YAML mapping.

        Raises :class:`FeatureResolutionError` when required keys are
        missing or have the wrong type.
        """
        if not isinstance(data, dict):
            raise FeatureResolutionError("Feature set must be a YAML mapping")
        locale = data.get("locale")
        if not isinstance(locale, str) or not locale:
            raise FeatureResolutionError("Feature set missing required field 'locale'")
        raw_phones = data.get("phones")
        if not isinstance(raw_phones, dict) or not raw_phones:
            raise FeatureResolutionError(f"Feature set {locale} has no 'phones' mapping")

        phones: dict[str, PhoneFeatures] = {}
        for symbol, flags in raw_phones.items():
            flags = flags or {}
            if not isinstance(flags, dict):
                raise FeatureResolutionError(
                    f"Features of phone '{symbol}' in {locale} must be a mapping"
                )
            vowel = bool(flags.get("vowel", False))
            voiced = bool(flags.get("voiced", vowel))
            phones[str(symbol)] = PhoneFeatures(voiced=voiced, vowel=vowel)
        return cls(locale=normalize_locale(locale), phones=phones)

    @classmethod
    def from_yaml(cls, path: str | Path) -> FeatureSet:
        p = Path(path)
        try:
            with open(p, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as exc:
            raise FeatureResolutionError(f"Cannot load feature set {p}: {exc}") from exc
        return cls.from_mapping(data)


class FeatureResolver(Protocol):
    """Finds the feature set that applies to a syllable."""

    def resolve(self, syllable: etree._Element) -> FeatureSet: ...


class LocaleFeatureResolver:
    """Resolve feature sets by the nearest ``xml:lang`` of a syllable.

    Lookup tries the exact locale first, then the bare language
    (``en_GB`` falls back to a set registered as ``en`` or, failing
    that, to the only set sharing the language).
    """

    def __init__(self, feature_sets: list[FeatureSet] | None = None) -> None:
        self._sets: dict[str, FeatureSet] = {}
        for feature_set in feature_sets or []:
            self.add(feature_set)

    def add(self, feature_set: FeatureSet) -> None:
        self._sets[normalize_locale(feature_set.locale)] = feature_set

    @property
    def locales(self) -> list[str]:
        return sorted(self._sets)

    def for_locale(self, locale: str) -> FeatureSet:
        key = normalize_locale(locale)
        if key in self._sets:
            return self._sets[key]
        language = key.split("_", 1)[0]
        if language in self._sets:
            return self._sets[language]
        candidates = [s for k, s in self._sets.items() if k.split("_", 1)[0] == language]
        if len(candidates) == 1:
            return candidates[0]
        raise FeatureResolutionError(f"No feature set for locale {locale}")

    def resolve(self, syllable: etree._Element) -> FeatureSet:
        locale = language_of(syllable)
        if locale is None:
            raise FeatureResolutionError(
                f"Cannot determine locale of syllable at line {syllable.sourceline}"
            )
        return self.for_locale(locale)

    @classmethod
    def from_directory(cls, directory: str | Path) -> LocaleFeatureResolver:
        """Load every ``*.yaml`` feature set in *directory*."""
        d = Path(directory)
        if not d.is_dir():
            raise FeatureResolutionError(f"Feature set directory not found: {d}")
        return cls([FeatureSet.from_yaml(p) for p in sorted(d.glob("*.yaml"))])

    @classmethod
    def default(cls) -> LocaleFeatureResolver:
        """Resolver over the feature sets shipped with the package."""
        data_dir = resources.files("prosody_annotator") / "data"
        sets = [
            FeatureSet.from_mapping(yaml.safe_load(entry.read_text(encoding="utf-8")))
            for entry in sorted(data_dir.iterdir(), key=lambda e: e.name)
            if entry.name.endswith(".yaml")
        ]
        return cls(sets)
