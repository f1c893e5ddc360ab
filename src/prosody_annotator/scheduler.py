"""Model application scheduling.

Order of application for one voice:

  1. duration model over ``segments``
  2. duration normalization over ``segments``
  3. F0 group, only when a left F0 model exists:
     leftF0 (firstVoicedSegments, predicted from firstVowels),
     midF0 (firstVowels),
     rightF0 (lastVoicedSegments, predicted from firstVowels),
     boundary (boundaries)
  4. other models, topologically sorted by their ``after`` declarations,
     ties broken by declaration order

The schedule is built once per bundle and can be run on any number of
utterances.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Literal

from lxml import etree

from .anchors import (
    BOUNDARIES,
    FIRST_VOICED_SEGMENTS,
    FIRST_VOWELS,
    LAST_VOICED_SEGMENTS,
    SEGMENTS,
    ElementCollections,
)
from .exceptions import ModelDependencyError, VoiceConfigurationError
from .models import AnyModel, DocumentModel
from .timing import normalize_durations
from .voices import DOCUMENT_TARGET, FIXED_ROLE_NAMES, ModelRole, OtherModel, VoiceModelBundle

logger = logging.getLogger(__name__)

UnknownDependencyPolicy = Literal["error", "ignore"]

# Role, target collection, predictor collection.
_F0_GROUP: tuple[tuple[ModelRole, str, str | None], ...] = (
    (ModelRole.LEFT_F0, FIRST_VOICED_SEGMENTS, FIRST_VOWELS),
    (ModelRole.MID_F0, FIRST_VOWELS, None),
    (ModelRole.RIGHT_F0, LAST_VOICED_SEGMENTS, FIRST_VOWELS),
    (ModelRole.BOUNDARY, BOUNDARIES, None),
)


@dataclass(frozen=True)
class ScheduledStep:
    """One model application: the model and the collections it reads."""

    name: str
    model: AnyModel
    target: str
    predictors: str | None = None
    role: ModelRole | None = None

    def run(self, collections: ElementCollections, root: etree._Element) -> None:
        logger.debug("Applying %s (%s) to %s", self.name, type(self.model).__name__, self.target)
        if isinstance(self.model, DocumentModel):
            self.model.apply(root)
            return
        elements = collections.get(self.target)
        predictors = collections.get(self.predictors) if self.predictors else None
        self.model.apply(elements, predictors)


@dataclass
class Schedule:
    voice: str
    steps: list[ScheduledStep] = field(default_factory=list)

    @property
    def names(self) -> list[str]:
        return [step.name for step in self.steps]


def order_other_models(
    others: dict[str, OtherModel],
    unknown_dependency: UnknownDependencyPolicy = "error",
) -> list[OtherModel]:
    """Sort *others* so every model follows the models it declares ``after``.

    Names of fixed roles are always satisfied, since fixed models run
    first. Raises :class:`ModelDependencyError` on a cycle, and on an
    unknown dependency name unless *unknown_dependency* is ``"ignore"``.
    """
    pending: dict[str, set[str]] = {}
    for name, other in others.items():
        deps: set[str] = set()
        for dep in other.after:
            if dep in FIXED_ROLE_NAMES:
                continue
            if dep not in others:
                if unknown_dependency == "error":
                    raise ModelDependencyError(
                        f"Model '{name}' runs after unknown model '{dep}'. "
                        f"Known: {sorted(FIXED_ROLE_NAMES | set(others))}"
                    )
                logger.warning("Model '%s': ignoring unknown dependency '%s'", name, dep)
                continue
            deps.add(dep)
        pending[name] = deps

    ordered: list[OtherModel] = []
    done: set[str] = set()
    while pending:
        ready = next((n for n, deps in pending.items() if deps <= done), None)
        if ready is None:
            raise ModelDependencyError(
                f"Dependency cycle among models: {sorted(pending)}"
            )
        ordered.append(others[ready])
        done.add(ready)
        del pending[ready]
    return ordered


def build_schedule(
    bundle: VoiceModelBundle,
    unknown_dependency: UnknownDependencyPolicy = "error",
) -> Schedule:
    """Build the ordered model applications for *bundle*.

    Raises :class:`VoiceConfigurationError` if the bundle has no duration
    model; callers treat such voices as unconfigured before getting here.
    """
    duration = bundle.fixed.get(ModelRole.DURATION)
    if duration is None:
        raise VoiceConfigurationError(f"Voice {bundle.name} has no duration model")

    schedule = Schedule(voice=bundle.name)
    schedule.steps.append(
        ScheduledStep(ModelRole.DURATION.value, duration, SEGMENTS, role=ModelRole.DURATION)
    )

    # The left F0 model gates the whole F0 group.
    if ModelRole.LEFT_F0 in bundle.fixed:
        for role, target, predictors in _F0_GROUP:
            model = bundle.fixed.get(role)
            if model is None:
                logger.debug("Voice %s defines no %s model; skipping", bundle.name, role.value)
                continue
            schedule.steps.append(ScheduledStep(role.value, model, target, predictors, role=role))
    elif any(role in bundle.fixed for role, _, _ in _F0_GROUP):
        logger.debug("Voice %s has no leftF0 model; skipping the F0 group", bundle.name)

    for other in order_other_models(bundle.others, unknown_dependency):
        target = other.target_name
        if target != DOCUMENT_TARGET:
            # Raises for names outside the fixed collection set.
            ElementCollections().get(target)
        schedule.steps.append(ScheduledStep(other.name, other.model, target))

    return schedule


def run_schedule(
    schedule: Schedule,
    collections: ElementCollections,
    root: etree._Element,
) -> list[str]:
    """Apply every step of *schedule*, normalizing durations right after the duration model.

    Returns the names of the applied steps. Exceptions raised by models
    propagate unchanged.
    """
    applied: list[str] = []
    for step in schedule.steps:
        step.run(collections, root)
        applied.append(step.name)
        if step.role is ModelRole.DURATION:
            normalize_durations(collections.get(SEGMENTS))
    return applied
