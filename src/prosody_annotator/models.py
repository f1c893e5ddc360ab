"""Acoustic model interface, model registry and reference models.

Two capabilities exist:

* :class:`Model` -- applied to an ordered list of target elements,
  optionally with a parallel list of predictor elements whose properties
  drive the prediction (the left F0 model, for instance, writes onto the
  first voiced segment but predicts from the syllable's vowel).
* :class:`DocumentModel` -- applied to the whole markup tree.

Reference model types registered in :class:`ModelRegistry`:

  phone-table    value looked up by phone symbol (duration in seconds)
  f0-target      Hz value by phone symbol, written as an ``(position,hz)`` pair
  break-table    pause duration in ms by boundary ``breakindex``
  f0-contour     interpolates F0 targets over all voiced segments
  prosody-pitch  scales F0 under ``<prosody pitch="+N%">`` spans
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Any, Sequence

import numpy as np
from lxml import etree

from .exceptions import PredictionError, VoiceConfigurationError
from .markup import DURATION, END, F0, PHONE, PROSODY, any_ns, phone_symbol

_F0_PAIR_RE = re.compile(r"\(\s*([\d.]+)\s*,\s*([\d.]+)\s*\)")
_PERCENT_RE = re.compile(r"^([+\-]?\d+(?:\.\d+)?)%$")


# ---------------------------------------------------------------------------
# F0 attribute helpers
# ---------------------------------------------------------------------------


def parse_f0_targets(text: str | None) -> list[tuple[float, float]]:
    """Parse ``"(0,120) (50,131)"`` into ``[(0.0, 120.0), (50.0, 131.0)]``.

    Raises :class:`PredictionError` if anything other than well-formed
    ``(position,hz)`` pairs is present.
    """
    if not text:
        return []
    if _F0_PAIR_RE.sub("", text).strip():
        raise PredictionError(f"Malformed f0 attribute: '{text}'")
    return [(float(pos), float(hz)) for pos, hz in _F0_PAIR_RE.findall(text)]


def _format_position(pos: float) -> str:
    # Fixed-point, no exponent.
    return f"{pos:.6f}".rstrip("0").rstrip(".")


def format_f0_targets(targets: Sequence[tuple[float, float]]) -> str:
    return " ".join(f"({_format_position(pos)},{hz:.0f})" for pos, hz in targets)


# ---------------------------------------------------------------------------
# Interfaces
# ---------------------------------------------------------------------------


class Model(ABC):
    """A model predicting one value per element and writing it as an attribute."""

    def __init__(self, attribute: str) -> None:
        self.attribute = attribute

    @abstractmethod
    def predict(self, element: etree._Element) -> float:
        """Return the predicted value for *element*."""

    def format_value(self, value: float) -> str:
        return repr(float(value))

    def write(self, element: etree._Element, value: float) -> None:
        element.set(self.attribute, self.format_value(value))

    def apply(
        self,
        elements: Sequence[etree._Element],
        predictors: Sequence[etree._Element] | None = None,
    ) -> None:
        """Predict from *predictors* (default: *elements*) and write onto *elements*."""
        if predictors is None:
            predictors = elements
        if len(predictors) != len(elements):
            raise ValueError(
                f"{type(self).__name__}: {len(elements)} targets but {len(predictors)} predictors"
            )
        for element, predictor in zip(elements, predictors):
            self.write(element, self.predict(predictor))

    def get_params(self) -> dict[str, Any]:
        return {"attribute": self.attribute}


class DocumentModel(ABC):
    """A model applied to the whole markup tree."""

    @abstractmethod
    def apply(self, root: etree._Element) -> None:
        """Modify *root* in place."""

    def get_params(self) -> dict[str, Any]:
        return {}


AnyModel = Model | DocumentModel


class ModelRegistry:
    """Registry mapping model type strings to model classes."""

    _registry: dict[str, type[Model] | type[DocumentModel]] = {}

    @classmethod
    def register(cls, name: str, model_class: type[Model] | type[DocumentModel]) -> None:
        """Register a model class under a name."""
        cls._registry[name] = model_class

    @classmethod
    def create(cls, config: dict[str, Any]) -> AnyModel:
        """Create a model instance from a config dict.

        Parameters
        ----------
        config:
            Must contain a 'type' key matching a registered model name.
            All other keys are passed as constructor arguments.
        """
        model_type = config.get("type")
        if model_type not in cls._registry:
            available = sorted(cls._registry.keys())
            raise VoiceConfigurationError(
                f"Unknown model type '{model_type}'. Available: {available}"
            )

        kwargs = {k: v for k, v in config.items() if k != "type"}
        try:
            return cls._registry[model_type](**kwargs)
        except TypeError as exc:
            raise VoiceConfigurationError(f"Bad arguments for model type '{model_type}': {exc}") from exc

    @classmethod
    def available(cls) -> list[str]:
        """Return list of registered model type names."""
        return sorted(cls._registry.keys())


# ---------------------------------------------------------------------------
# Reference models
# ---------------------------------------------------------------------------


class LookupModel(Model):
    """Looks the predictor's *key* attribute up in a value table."""

    def __init__(
        self,
        attribute: str,
        table: dict[str, float] | None = None,
        default: float | None = None,
        key: str = "p",
    ) -> None:
        super().__init__(attribute)
        self.table = {str(k): float(v) for k, v in (table or {}).items()}
        self.default = None if default is None else float(default)
        self.key = key

    def predict(self, element: etree._Element) -> float:
        value = (element.get(self.key) or "").strip()
        if value in self.table:
            return self.table[value]
        if self.default is not None:
            return self.default
        raise PredictionError(
            f"{type(self).__name__}: no value for {self.key}='{value}' and no default"
        )

    def get_params(self) -> dict[str, Any]:
        return {
            "attribute": self.attribute,
            "key": self.key,
            "table": dict(self.table),
            "default": self.default,
        }


class PhoneTableModel(LookupModel):
    """Per-phone value table; the usual duration model (seconds in ``d``)."""

    def __init__(
        self,
        attribute: str = DURATION,
        table: dict[str, float] | None = None,
        default: float | None = None,
    ) -> None:
        super().__init__(attribute, table=table, default=default, key="p")


class BreakTableModel(LookupModel):
    """Pause duration (ms) of a boundary keyed on its ``breakindex``."""

    def __init__(
        self,
        attribute: str = "duration",
        table: dict[str, float] | None = None,
        default: float | None = None,
    ) -> None:
        super().__init__(attribute, table=table, default=default, key="breakindex")

    def format_value(self, value: float) -> str:
        return str(int(round(value)))


class F0TargetModel(LookupModel):
    """Appends an ``(position,hz)`` F0 target to each element's ``f0`` attribute.

    *position* is the percentage of the segment's duration at which the
    target sits: 0 for left targets, 50 for mid, 100 for right.
    """

    def __init__(
        self,
        position: float,
        table: dict[str, float] | None = None,
        default: float | None = None,
    ) -> None:
        if not 0 <= float(position) <= 100:
            raise VoiceConfigurationError(f"F0 target position must be 0-100, got {position}")
        super().__init__(F0, table=table, default=default, key="p")
        self.position = float(position)

    def write(self, element: etree._Element, value: float) -> None:
        targets = parse_f0_targets(element.get(F0))
        targets.append((self.position, value))
        element.set(F0, format_f0_targets(targets))

    def get_params(self) -> dict[str, Any]:
        params = super().get_params()
        params["position"] = self.position
        return params


class F0ContourModel(Model):
    """Fills voiced segments lacking F0 by interpolating existing targets.

    Target times are placed on the normalized time axis, so this model
    needs ``end`` and millisecond ``d`` on every element it is given.
    """

    def __init__(self, position: float = 50) -> None:
        super().__init__(F0)
        self.position = float(position)

    def predict(self, element: etree._Element) -> float:
        raise PredictionError("F0ContourModel predicts from the whole contour; use apply()")

    def _span(self, element: etree._Element) -> tuple[float, float]:
        end = element.get(END)
        duration = element.get(DURATION)
        if end is None or duration is None:
            raise PredictionError(
                f"Segment '{phone_symbol(element)}' has no normalized timing; "
                "F0 contour needs durations applied first"
            )
        end_s = float(end)
        return end_s - float(duration) / 1000.0, end_s

    def apply(
        self,
        elements: Sequence[etree._Element],
        predictors: Sequence[etree._Element] | None = None,
    ) -> None:
        times: list[float] = []
        values: list[float] = []
        for element in elements:
            start, end = self._span(element)
            for pos, hz in parse_f0_targets(element.get(F0)):
                times.append(start + (end - start) * pos / 100.0)
                values.append(hz)
        if not times:
            return

        order = np.argsort(times, kind="stable")
        xp = np.asarray(times, dtype=np.float64)[order]
        fp = np.asarray(values, dtype=np.float64)[order]
        for element in elements:
            if element.get(F0):
                continue
            start, end = self._span(element)
            t = start + (end - start) * self.position / 100.0
            hz = float(np.interp(t, xp, fp))
            element.set(F0, format_f0_targets([(self.position, hz)]))

    def get_params(self) -> dict[str, Any]:
        return {"position": self.position}


class ProsodyPitchModel(DocumentModel):
    """Scales F0 targets of phones inside ``<prosody pitch="+N%">`` spans."""

    def apply(self, root: etree._Element) -> None:
        for prosody in root.iter(any_ns(PROSODY)):
            match = _PERCENT_RE.match((prosody.get("pitch") or "").strip())
            if match is None:
                continue
            factor = 1.0 + float(match.group(1)) / 100.0
            if factor < 0:
                raise PredictionError(
                    f"Prosody pitch '{prosody.get('pitch')}' (line {prosody.sourceline}) "
                    "would make F0 negative"
                )
            for segment in prosody.iter(any_ns(PHONE)):
                targets = parse_f0_targets(segment.get(F0))
                if not targets:
                    continue
                positions = np.array([pos for pos, _ in targets])
                scaled = np.array([hz for _, hz in targets]) * factor
                segment.set(F0, format_f0_targets(list(zip(positions, scaled))))


ModelRegistry.register("phone-table", PhoneTableModel)
ModelRegistry.register("break-table", BreakTableModel)
ModelRegistry.register("f0-target", F0TargetModel)
ModelRegistry.register("f0-contour", F0ContourModel)
ModelRegistry.register("prosody-pitch", ProsodyPitchModel)
