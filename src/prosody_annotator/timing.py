"""Duration normalization -- seconds to milliseconds plus cumulative end times.

The duration model writes each segment's duration, in seconds, into the
``d`` attribute. Normalization rewrites ``d`` as integer milliseconds and
adds ``end``, the cumulative end time in seconds.

Arithmetic is done on :class:`decimal.Decimal` values parsed from the
attribute text, so sums are exact (``0.05 + 0.12`` is ``0.17``).
Milliseconds are rounded half up.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Sequence

from lxml import etree

from .exceptions import DurationFormatError
from .markup import DURATION, END, phone_symbol

_ONE = Decimal(1)
_MS_PER_SECOND = Decimal(1000)


@dataclass(frozen=True)
class SegmentTiming:
    """Normalized timing of one segment."""

    duration_ms: int
    end_seconds: Decimal

    @property
    def duration_text(self) -> str:
        return str(self.duration_ms)

    @property
    def end_text(self) -> str:
        return format_seconds(self.end_seconds)


def format_seconds(value: Decimal) -> str:
    """Plain decimal text without exponent or trailing zeros."""
    return format(value.normalize(), "f")


def to_milliseconds(seconds: Decimal) -> int:
    return int((seconds * _MS_PER_SECOND).quantize(_ONE, rounding=ROUND_HALF_UP))


def parse_seconds(raw: str | float | Decimal | None) -> Decimal:
    """Parse a duration in seconds.

    Raises :class:`DurationFormatError` for missing, non-numeric,
    non-finite or negative values.
    """
    if raw is None:
        raise DurationFormatError("Segment has no duration")
    try:
        value = Decimal(str(raw).strip())
    except InvalidOperation:
        raise DurationFormatError(f"Duration '{raw}' is not a number") from None
    if not value.is_finite():
        raise DurationFormatError(f"Duration '{raw}' is not finite")
    if value < 0:
        raise DurationFormatError(f"Duration '{raw}' is negative")
    return value


def compute_timings(durations: Sequence[str | float | Decimal]) -> list[SegmentTiming]:
    """Turn per-segment durations in seconds into :class:`SegmentTiming` records."""
    timings: list[SegmentTiming] = []
    cumulative = Decimal(0)
    for raw in durations:
        seconds = parse_seconds(raw)
        cumulative += seconds
        timings.append(SegmentTiming(duration_ms=to_milliseconds(seconds), end_seconds=cumulative))
    return timings


def write_timings(segments: Sequence[etree._Element], timings: Sequence[SegmentTiming]) -> None:
    """Materialize *timings* onto *segments* as ``d`` and ``end`` attributes."""
    if len(segments) != len(timings):
        raise ValueError(f"Got {len(timings)} timings for {len(segments)} segments")
    for segment, timing in zip(segments, timings):
        segment.set(END, timing.end_text)
        segment.set(DURATION, timing.duration_text)


def normalize_durations(segments: Sequence[etree._Element]) -> list[SegmentTiming]:
    """Rewrite segment durations in place and return the computed timings.

    Segments that already carry an ``end`` attribute hold millisecond
    durations; normalizing them again would re-scale them, so this
    raises :class:`DurationFormatError` instead.
    """
    for segment in segments:
        if segment.get(END) is not None:
            raise DurationFormatError(
                f"Segment '{phone_symbol(segment)}' (line {segment.sourceline}) "
                "is already normalized"
            )
    try:
        timings = compute_timings([segment.get(DURATION) for segment in segments])
    except DurationFormatError as exc:
        raise DurationFormatError(f"Cannot normalize segment durations: {exc}") from exc
    write_timings(segments, timings)
    return timings
