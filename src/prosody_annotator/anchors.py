"""Anchor extraction -- one document-order walk over syllables and boundaries.

Produces the named element collections the acoustic models are applied
to:

  segments             every ``<ph>`` element
  voicedSegments       voiced ``<ph>`` elements
  firstVoicedSegments  per syllable, the first voiced phone
  firstVowels          per syllable, the first voiced vowel
  lastVoicedSegments   per syllable, the last voiced phone
  boundaries           every ``<boundary>`` element

A syllable whose three anchors cannot all be identified contributes no
entries to the three per-syllable collections. Its phones still appear
in ``segments`` (and ``voicedSegments`` where classifiable), and the
skip is recorded in the :class:`TraversalReport`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Literal

from lxml import etree

from .exceptions import FeatureResolutionError, VoiceConfigurationError
from .features import FeatureResolver, FeatureSet
from .markup import BOUNDARY, PHONE, SYLLABLE, any_ns, local_name, phone_symbol

logger = logging.getLogger(__name__)

SEGMENTS = "segments"
VOICED_SEGMENTS = "voicedSegments"
FIRST_VOICED_SEGMENTS = "firstVoicedSegments"
FIRST_VOWELS = "firstVowels"
LAST_VOICED_SEGMENTS = "lastVoicedSegments"
BOUNDARIES = "boundaries"

COLLECTION_NAMES = (
    SEGMENTS,
    VOICED_SEGMENTS,
    FIRST_VOICED_SEGMENTS,
    FIRST_VOWELS,
    LAST_VOICED_SEGMENTS,
    BOUNDARIES,
)


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AnchorSet:
    """F0 anchors of one syllable."""

    first_voiced: etree._Element | None = None
    first_vowel: etree._Element | None = None
    last_voiced: etree._Element | None = None

    @property
    def complete(self) -> bool:
        return (
            self.first_voiced is not None
            and self.first_vowel is not None
            and self.last_voiced is not None
        )


@dataclass(frozen=True)
class SyllableOutcome:
    """Result of extracting anchors from a single syllable."""

    index: int
    status: Literal["ok", "skipped"]
    reason: str | None = None
    line: int | None = None


@dataclass
class TraversalReport:
    """Per-syllable outcomes of one extraction run."""

    outcomes: list[SyllableOutcome] = field(default_factory=list)

    @property
    def syllable_count(self) -> int:
        return len(self.outcomes)

    @property
    def skipped(self) -> list[SyllableOutcome]:
        return [o for o in self.outcomes if o.status == "skipped"]

    @property
    def skip_count(self) -> int:
        return len(self.skipped)


@dataclass
class ElementCollections:
    """The named, ordered element lists built by :func:`extract_anchors`."""

    segments: list[etree._Element] = field(default_factory=list)
    voiced_segments: list[etree._Element] = field(default_factory=list)
    first_voiced_segments: list[etree._Element] = field(default_factory=list)
    first_vowels: list[etree._Element] = field(default_factory=list)
    last_voiced_segments: list[etree._Element] = field(default_factory=list)
    boundaries: list[etree._Element] = field(default_factory=list)

    def get(self, name: str) -> list[etree._Element]:
        """Return the collection called *name*.

        Raises :class:`VoiceConfigurationError` for names outside
        :data:`COLLECTION_NAMES`.
        """
        lists = self.as_dict()
        if name not in lists:
            raise VoiceConfigurationError(
                f"Unknown element collection '{name}'. Available: {list(COLLECTION_NAMES)}"
            )
        return lists[name]

    def as_dict(self) -> dict[str, list[etree._Element]]:
        return {
            SEGMENTS: self.segments,
            VOICED_SEGMENTS: self.voiced_segments,
            FIRST_VOICED_SEGMENTS: self.first_voiced_segments,
            FIRST_VOWELS: self.first_vowels,
            LAST_VOICED_SEGMENTS: self.last_voiced_segments,
            BOUNDARIES: self.boundaries,
        }

    def add_anchors(self, anchors: AnchorSet) -> None:
        self.first_voiced_segments.append(anchors.first_voiced)  # type: ignore[arg-type]
        self.first_vowels.append(anchors.first_vowel)  # type: ignore[arg-type]
        self.last_voiced_segments.append(anchors.last_voiced)  # type: ignore[arg-type]


@dataclass
class ExtractionResult:
    collections: ElementCollections
    report: TraversalReport


# ---------------------------------------------------------------------------
# Traversal
# ---------------------------------------------------------------------------


def _describe(syllable: etree._Element) -> str:
    return syllable.get("ph") or " ".join(
        phone_symbol(ph) for ph in syllable.iter(any_ns(PHONE))
    )


def _scan_syllable(
    syllable: etree._Element,
    feature_set: FeatureSet | None,
    collections: ElementCollections,
) -> tuple[AnchorSet, str | None]:
    """Collect the phones of *syllable*, returning its anchors and a skip reason."""
    first_voiced = None
    first_vowel = None
    last_voiced = None
    reason: str | None = None

    for segment in syllable.iter(any_ns(PHONE)):
        collections.segments.append(segment)
        if feature_set is None:
            continue
        try:
            features = feature_set.classify(phone_symbol(segment))
        except FeatureResolutionError as exc:
            reason = reason or str(exc)
            continue
        # All and only voiced segments are potential F0 anchors.
        if features.voiced:
            collections.voiced_segments.append(segment)
            if first_voiced is None:
                first_voiced = segment
            if first_vowel is None and features.vowel:
                first_vowel = segment
            last_voiced = segment

    return AnchorSet(first_voiced, first_vowel, last_voiced), reason


def extract_anchors(root: etree._Element, resolver: FeatureResolver) -> ExtractionResult:
    """Walk *root* once and build the named element collections."""
    collections = ElementCollections()
    report = TraversalReport()

    index = 0
    for element in root.iter(any_ns(SYLLABLE), any_ns(BOUNDARY)):
        if local_name(element) == BOUNDARY:
            collections.boundaries.append(element)
            continue

        feature_set: FeatureSet | None = None
        reason: str | None = None
        try:
            feature_set = resolver.resolve(element)
        except FeatureResolutionError as exc:
            reason = str(exc)

        anchors, scan_reason = _scan_syllable(element, feature_set, collections)
        reason = reason or scan_reason
        if reason is None and not anchors.complete:
            if anchors.first_voiced is None:
                reason = "no voiced phone"
            else:
                reason = "no voiced vowel"

        if reason is None:
            collections.add_anchors(anchors)
            report.outcomes.append(SyllableOutcome(index=index, status="ok"))
        else:
            logger.warning(
                "Could not identify F0 anchors in malformed syllable '%s': %s",
                _describe(element),
                reason,
            )
            report.outcomes.append(
                SyllableOutcome(
                    index=index, status="skipped", reason=reason, line=element.sourceline
                )
            )
        index += 1

    return ExtractionResult(collections=collections, report=report)
