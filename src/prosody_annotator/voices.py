"""Voice model bundles and the voice catalog.

A voice file is YAML::

    name: demo
    locale: en_US
    models:
      duration: {type: phone-table, table: {a: 0.12}, default: 0.08}
      leftF0:   {type: f0-target, position: 0, default: 120}
      contour:  {type: f0-contour, target: voicedSegments, after: [leftF0]}
      prosody:  {type: prosody-pitch, target: document, after: [contour]}

Keys ``duration``, ``leftF0``, ``midF0``, ``rightF0`` and ``boundary``
name the fixed model roles. Every other key is an "other" model, which
may declare the collection it targets (``segments`` if omitted, or
``document`` for whole-tree models) and the models it runs ``after``.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .anchors import COLLECTION_NAMES, SEGMENTS
from .exceptions import VoiceConfigurationError
from .features import normalize_locale
from .models import AnyModel, DocumentModel, Model, ModelRegistry

logger = logging.getLogger(__name__)

DOCUMENT_TARGET = "document"


class ModelRole(str, enum.Enum):
    """Fixed roles a voice model can fill."""

    DURATION = "duration"
    LEFT_F0 = "leftF0"
    MID_F0 = "midF0"
    RIGHT_F0 = "rightF0"
    BOUNDARY = "boundary"


FIXED_ROLE_NAMES = frozenset(role.value for role in ModelRole)


@dataclass(frozen=True)
class OtherModel:
    """An extensible model with its target and ordering declaration."""

    name: str
    model: AnyModel
    target: str | None = None
    after: frozenset[str] = frozenset()

    @property
    def target_name(self) -> str:
        if isinstance(self.model, DocumentModel):
            return DOCUMENT_TARGET
        return self.target or SEGMENTS


@dataclass
class VoiceModelBundle:
    """All acoustic models of one voice."""

    name: str
    locale: str | None = None
    fixed: dict[ModelRole, Model] = field(default_factory=dict)
    others: dict[str, OtherModel] = field(default_factory=dict)

    def get_model(self, name: str | ModelRole) -> AnyModel | None:
        key = name.value if isinstance(name, ModelRole) else name
        if key in FIXED_ROLE_NAMES:
            return self.fixed.get(ModelRole(key))
        other = self.others.get(key)
        return other.model if other is not None else None

    @property
    def is_configured(self) -> bool:
        return ModelRole.DURATION in self.fixed

    def model_names(self) -> list[str]:
        return [role.value for role in ModelRole if role in self.fixed] + list(self.others)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def _build_other(name: str, config: dict[str, Any]) -> OtherModel:
    config = dict(config)
    target = config.pop("target", None)
    after = config.pop("after", None) or []
    if isinstance(after, str):
        after = [after]
    if not isinstance(after, list) or not all(isinstance(a, str) for a in after):
        raise VoiceConfigurationError(f"Model '{name}': 'after' must be a list of model names")

    model = ModelRegistry.create(config)
    if isinstance(model, DocumentModel):
        if target not in (None, DOCUMENT_TARGET):
            raise VoiceConfigurationError(
                f"Model '{name}' is a document model and cannot target '{target}'"
            )
    elif target is not None and target not in COLLECTION_NAMES:
        raise VoiceConfigurationError(
            f"Model '{name}' targets unknown collection '{target}'. "
            f"Available: {list(COLLECTION_NAMES)}"
        )
    return OtherModel(name=name, model=model, target=target, after=frozenset(after))


def bundle_from_mapping(data: dict[str, Any]) -> VoiceModelBundle:
    """Build a :class:`VoiceModelBundle` from a parsed voice mapping."""
    if not isinstance(data, dict):
        raise VoiceConfigurationError("Voice must be a YAML mapping")
    name = data.get("name")
    if not isinstance(name, str) or not name:
        raise VoiceConfigurationError("Voice missing required field 'name'")
    locale = data.get("locale")
    models = data.get("models") or {}
    if not isinstance(models, dict):
        raise VoiceConfigurationError(f"Voice {name}: 'models' must be a mapping")

    bundle = VoiceModelBundle(name=name, locale=normalize_locale(locale) if locale else None)
    for model_name, config in models.items():
        if not isinstance(config, dict):
            raise VoiceConfigurationError(f"Voice {name}: model '{model_name}' must be a mapping")
        if model_name in FIXED_ROLE_NAMES:
            if "target" in config or "after" in config:
                raise VoiceConfigurationError(
                    f"Voice {name}: fixed model '{model_name}' cannot declare 'target' or 'after'"
                )
            model = ModelRegistry.create(config)
            if not isinstance(model, Model):
                raise VoiceConfigurationError(
                    f"Voice {name}: '{model_name}' must be an element model"
                )
            bundle.fixed[ModelRole(model_name)] = model
        else:
            bundle.others[model_name] = _build_other(model_name, config)
    logger.debug("Loaded voice %s with models %s", name, bundle.model_names())
    return bundle


def load_voice(path: str | Path) -> VoiceModelBundle:
    """Load a voice model bundle from a YAML file.

    Raises
    ------
    VoiceConfigurationError
        If the file cannot be read or does not describe a valid voice.
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise VoiceConfigurationError(f"Cannot load voice file {path}: {exc}") from exc
    return bundle_from_mapping(data)


class VoiceCatalog:
    """Voices available to the pipeline, by name and by locale."""

    def __init__(self, voices: list[VoiceModelBundle] | None = None) -> None:
        self._voices: dict[str, VoiceModelBundle] = {}
        for voice in voices or []:
            self.add(voice)

    def add(self, voice: VoiceModelBundle) -> None:
        if voice.name in self._voices:
            raise VoiceConfigurationError(f"Duplicate voice name '{voice.name}'")
        self._voices[voice.name] = voice

    def get(self, name: str) -> VoiceModelBundle | None:
        return self._voices.get(name)

    @property
    def names(self) -> list[str]:
        return list(self._voices)

    def default_for_locale(self, locale: str | None) -> VoiceModelBundle | None:
        """First voice matching *locale* exactly, else first sharing its language."""
        if not locale:
            return None
        key = normalize_locale(locale)
        language = key.split("_", 1)[0]
        fallback = None
        for voice in self._voices.values():
            if voice.locale is None:
                continue
            if voice.locale == key:
                return voice
            if fallback is None and voice.locale.split("_", 1)[0] == language:
                fallback = voice
        return fallback

    @classmethod
    def from_directory(cls, directory: str | Path) -> VoiceCatalog:
        """Load every ``*.yaml`` voice file in *directory*."""
        d = Path(directory)
        if not d.is_dir():
            raise VoiceConfigurationError(f"Voice directory not found: {d}")
        return cls([load_voice(p) for p in sorted(d.glob("*.yaml"))])
