"""Exception hierarchy for ScreenLance.

Startup errors (``ModelLoadError``, ``RegionTooSmallError``) abort before the
translation loop starts. Engine errors are per-request and are turned into a
tagged ``TranslationResult`` by the translation service. Capture and
recognition errors only cost the current tick.
"""


class ScreenLanceError(Exception):
    """Base class for all ScreenLance errors."""


class ModelLoadError(ScreenLanceError):
    """A vocabulary or model graph file is missing or cannot be loaded."""

    def __init__(self, path, what: str, reason: str = ""):
        self.path = path
        self.what = what
        self.reason = reason
        message = f"Failed to load {what} ({path})"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class RegionTooSmallError(ScreenLanceError):
    """The capture region is below the minimum width or height."""

    def __init__(self, width: int, height: int, minimum: int):
        self.width = width
        self.height = height
        self.minimum = minimum
        super().__init__(
            f"Selected region is too small: {width}x{height} (minimum {minimum}x{minimum})"
        )


class TranslationEngineError(ScreenLanceError):
    """Runtime failure while executing a model graph."""


class EncoderFailure(TranslationEngineError):
    """The encoder graph raised during execution."""


class DecoderFailure(TranslationEngineError):
    """The decoder graph raised during a decode step."""

    def __init__(self, message: str, step: int = 0):
        self.step = step
        super().__init__(message)


class CaptureError(ScreenLanceError):
    """Screen capture failed for the current tick."""


class RecognitionError(ScreenLanceError):
    """Text recognition failed for the current tick."""
