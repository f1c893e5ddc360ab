"""Custom exception hierarchy for the prosody_annotator package."""


class ProsodyAnnotatorError(Exception):
    """Base exception for all prosody_annotator errors."""


class MarkupParseError(ProsodyAnnotatorError):
    """Raised when markup text cannot be parsed."""

    def __init__(self, message: str, line: int | None = None, column: int | None = None) -> None:
        self.line = line
        self.column = column
        location = ""
        if line is not None:
            location = f" (line {line}"
            if column is not None:
                location += f", column {column}"
            location += ")"
        super().__init__(f"{message}{location}")


class FeatureResolutionError(ProsodyAnnotatorError):
    """Raised when no phonological feature set applies to an element."""


class UnknownPhoneError(FeatureResolutionError):
    """Raised when a phone symbol is missing from a feature set."""

    def __init__(self, symbol: str, locale: str) -> None:
        self.symbol = symbol
        self.locale = locale
        super().__init__(f"Phone '{symbol}' is not defined for locale {locale}")


class VoiceConfigurationError(ProsodyAnnotatorError):
    """Raised when a voice or its model bundle is misconfigured."""


class ModelDependencyError(VoiceConfigurationError):
    """Raised when model ordering declarations cannot be satisfied."""


class DurationFormatError(ProsodyAnnotatorError):
    """Raised when segment duration data is missing, malformed or already normalized."""


class PredictionError(ProsodyAnnotatorError):
    """Raised when a model cannot produce a value for an element."""
