"""Acoustic modelling pipeline -- predict duration and F0 for a markup tree.

Steps:
  1. Identify the voice (``<voice>`` element, caller default, locale default)
  2. Return the tree unmodified if the voice has no duration model
  3. Extract anchor collections
  4. Run the voice's model schedule (normalizing durations after the
     duration model)

The tree is annotated in place and handed back in an
:class:`AcousticParams` container.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from lxml import etree

from .anchors import TraversalReport, extract_anchors
from .config import Settings
from .features import FeatureResolver, LocaleFeatureResolver
from .markup import XML_LANG, find_voice_name
from .scheduler import Schedule, build_schedule, run_schedule
from .voices import VoiceCatalog, VoiceModelBundle

logger = logging.getLogger(__name__)


@dataclass
class AcousticParams:
    """The annotated document and what was done to it."""

    document: etree._Element
    locale: str | None = None
    voice: str | None = None
    report: TraversalReport | None = None
    applied: list[str] = field(default_factory=list)

    @property
    def annotated(self) -> bool:
        return bool(self.applied)


class AcousticModeller:
    """Annotate markup trees with predicted durations and F0 targets."""

    def __init__(
        self,
        voices: VoiceCatalog,
        resolver: FeatureResolver | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.voices = voices
        self.resolver = resolver if resolver is not None else LocaleFeatureResolver.default()
        self.settings = settings if settings is not None else Settings()
        self._schedules: dict[str, Schedule] = {}

    def select_voice(
        self, root: etree._Element, default_voice: str | None = None
    ) -> VoiceModelBundle | None:
        """Pick the voice for *root*: named voice, then *default_voice*, then locale default."""
        name = find_voice_name(root)
        if name is not None:
            voice = self.voices.get(name)
            if voice is not None:
                return voice
            logger.info("Voice '%s' is not in the catalog; falling back", name)
        if default_voice is not None:
            voice = self.voices.get(default_voice)
            if voice is not None:
                return voice
        return self.voices.default_for_locale(root.get(XML_LANG))

    def schedule_for(self, voice: VoiceModelBundle) -> Schedule:
        if voice.name not in self._schedules:
            self._schedules[voice.name] = build_schedule(
                voice, self.settings.unknown_dependency  # type: ignore[arg-type]
            )
        return self._schedules[voice.name]

    def process(self, root: etree._Element, default_voice: str | None = None) -> AcousticParams:
        """Annotate *root* in place.

        Model failures and malformed duration data propagate; malformed
        syllables are skipped and listed in the result's report.
        """
        locale = root.get(XML_LANG)
        voice = self.select_voice(root, default_voice)
        if voice is None or not voice.is_configured:
            logger.info(
                "No acoustic models defined for %s; passing markup through unmodified",
                voice.name if voice is not None else f"locale {locale}",
            )
            return AcousticParams(
                document=root, locale=locale, voice=voice.name if voice is not None else None
            )

        schedule = self.schedule_for(voice)
        extraction = extract_anchors(root, self.resolver)
        applied = run_schedule(schedule, extraction.collections, root)
        logger.debug(
            "Annotated %d segments with voice %s (%d of %d syllables skipped)",
            len(extraction.collections.segments),
            voice.name,
            extraction.report.skip_count,
            extraction.report.syllable_count,
        )
        return AcousticParams(
            document=root,
            locale=locale,
            voice=voice.name,
            report=extraction.report,
            applied=applied,
        )
