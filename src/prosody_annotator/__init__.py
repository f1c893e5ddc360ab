"""Prosody annotator -- duration and F0 prediction over linguistic markup.

Public API re-exports for convenient access::

    from prosody_annotator import AcousticModeller, VoiceCatalog, parse_markup
"""

from ._version import __version__
from .anchors import (
    AnchorSet,
    ElementCollections,
    ExtractionResult,
    SyllableOutcome,
    TraversalReport,
    extract_anchors,
)
from .config import Settings
from .exceptions import (
    DurationFormatError,
    FeatureResolutionError,
    MarkupParseError,
    ModelDependencyError,
    PredictionError,
    ProsodyAnnotatorError,
    UnknownPhoneError,
    VoiceConfigurationError,
)
from .features import FeatureSet, LocaleFeatureResolver, PhoneFeatures
from .markup import load_markup, parse_markup, to_markup_string
from .models import (
    BreakTableModel,
    DocumentModel,
    F0ContourModel,
    F0TargetModel,
    Model,
    ModelRegistry,
    PhoneTableModel,
    ProsodyPitchModel,
)
from .pipeline import AcousticModeller, AcousticParams
from .scheduler import Schedule, ScheduledStep, build_schedule, run_schedule
from .timing import SegmentTiming, compute_timings, normalize_durations
from .voices import ModelRole, OtherModel, VoiceCatalog, VoiceModelBundle, load_voice

__all__ = [
    "__version__",
    # Pipeline
    "AcousticModeller",
    "AcousticParams",
    "Settings",
    # Anchors
    "extract_anchors",
    "AnchorSet",
    "ElementCollections",
    "ExtractionResult",
    "SyllableOutcome",
    "TraversalReport",
    # Scheduling and timing
    "Schedule",
    "ScheduledStep",
    "build_schedule",
    "run_schedule",
    "SegmentTiming",
    "compute_timings",
    "normalize_durations",
    # Voices and models
    "VoiceCatalog",
    "VoiceModelBundle",
    "ModelRole",
    "OtherModel",
    "load_voice",
    "Model",
    "DocumentModel",
    "ModelRegistry",
    "PhoneTableModel",
    "BreakTableModel",
    "F0TargetModel",
    "F0ContourModel",
    "ProsodyPitchModel",
    # Features
    "FeatureSet",
    "PhoneFeatures",
    "LocaleFeatureResolver",
    # Markup
    "parse_markup",
    "load_markup",
    "to_markup_string",
    # Exceptions
    "ProsodyAnnotatorError",
    "MarkupParseError",
    "FeatureResolutionError",
    "UnknownPhoneError",
    "VoiceConfigurationError",
    "ModelDependencyError",
    "DurationFormatError",
    "PredictionError",
]
