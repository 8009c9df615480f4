"""
Exception types.

Every failure the core surfaces derives from ``EmulatorError``. The
``user_message`` attribute holds a short text for alerts; ``str(exc)`` keeps
the detailed message for logs.
"""

from typing import Optional


class EmulatorError(Exception):
    """Base class for all cmbemu errors."""

    user_message = "The model could not be used."

    def __init__(self, message: str = "", user_message: Optional[str] = None):
        super().__init__(message or self.user_message)
        if user_message is not None:
            self.user_message = user_message


# --- Archive validation ---


class ValidationError(EmulatorError):
    """Raised when a candidate file is not a compliant model package."""

    user_message = "The file's metadata does not adhere to the expected format."


class NotAnArchiveError(ValidationError):
    """Raised when the file does not start with the zip local-file-header signature."""


class CorruptArchiveError(ValidationError):
    """Raised when the file has the signature but cannot be opened as an archive."""


class MissingEntryError(ValidationError):
    """Raised when a required archive entry is absent."""

    def __init__(self, entry: str):
        super().__init__(
            f"Archive does not contain required entry: {entry}",
            user_message=f"The metadata does not contain the file: {entry}",
        )
        self.entry = entry


# --- Manifest parsing ---


class ParseError(EmulatorError):
    """Raised when the manifests of a package cannot be parsed."""

    user_message = "The file does not contain the required metadata."


class ManifestMissingError(ParseError):
    """Raised when a manifest entry is missing at parse time."""

    def __init__(self, entry: str):
        super().__init__(f"Manifest not found in archive: {entry}")
        self.entry = entry


class ManifestMalformedError(ParseError):
    """Raised when a manifest is structurally unusable."""


# --- Model loading ---


class LoadError(EmulatorError):
    """Raised when the inference backend cannot load a model."""

    user_message = "The model could not be loaded."


class BadModelFormatError(LoadError):
    """Raised when the backend rejects the model blob."""


class AllocationFailedError(LoadError):
    """Raised when tensor buffers cannot be allocated."""


# --- Inference ---


class RunError(EmulatorError):
    """Raised when an inference call fails."""

    user_message = "The model could not be evaluated."


class ShapeMismatchError(RunError):
    """Raised when the parameter vector does not match the model input width."""


class EngineError(RunError):
    """Raised when the backend fails during inference."""


# --- Curve extraction ---


class ExtractError(EmulatorError):
    """Raised when a curve cannot be extracted from raw model output."""

    user_message = "The selected spectrum is not available."


class UnknownSpectrumError(ExtractError):
    """Raised when no output range carries the requested label."""

    def __init__(self, label: str, available=()):
        super().__init__(
            f"Unknown spectrum: {label}. Available: {', '.join(available)}"
        )
        self.label = label


class LengthMismatchError(ExtractError):
    """Raised when an output range and its coordinate grid differ in length."""


class MissingCoordinatesError(ExtractError):
    """Raised when the coordinate manifest has no group for the spectrum."""
