"""Overlay collaborators displaying translated text.

``TkOverlay`` (in ``overlay.tk``) is imported on demand so headless runs
never need tkinter.
"""

from .base import OVERLAY_HEIGHT, OVERLAY_WIDTH, ConsoleOverlay, place_overlay

__all__ = [
    "ConsoleOverlay",
    "OVERLAY_HEIGHT",
    "OVERLAY_WIDTH",
    "place_overlay",
]
