"""ScreenLance - Offline screen translator.

This application captures a screen region, recognizes its text with
Tesseract, translates it with a local ONNX encoder-decoder model and shows
the result in an always-on-top overlay.
"""

__version__ = "0.1.0"

from .errors import (
    DecoderFailure,
    EncoderFailure,
    ModelLoadError,
    RegionTooSmallError,
    ScreenLanceError,
)

__all__ = [
    "DecoderFailure",
    "EncoderFailure",
    "ModelLoadError",
    "RegionTooSmallError",
    "ScreenLanceError",
    "__version__",
]
