"""Tk overlay window.

A borderless, always-on-top window placed under the capture region. It is
created on the first ``show_or_update`` call and updated in place afterwards.
"""

import tkinter as tk
from tkinter import font as tkfont
from typing import Optional

from .. import log
from ..capture import CaptureRegion
from .base import OVERLAY_HEIGHT, OVERLAY_WIDTH, place_overlay

logger = log.get_logger()

FONT_FAMILY = "Arial"


class TkOverlay:
    """A top-most window showing the latest translation.

    Drag with the left button to move it, right-click to close it. Closing
    the window is reported by ``pump()`` as a quit event.
    """

    def __init__(
        self,
        font_size: int = 24,
        font_color: str = "#FFFF00",
        background_color: str = "#000000",
        alpha: float = 0.86,
    ):
        """Initialize the overlay (window is created lazily).

        Args:
            font_size: Font size in points.
            font_color: Font color as hex string.
            background_color: Background color as hex string.
            alpha: Window opacity (0.0-1.0).
        """
        self.font_size = font_size
        self.font_color = font_color
        self.background_color = background_color
        self.alpha = alpha

        self._root: Optional[tk.Tk] = None
        self._label: Optional[tk.Label] = None
        self._current_text: str = ""
        self._closed = False
        self._drag_start = (0, 0)

    def show_or_update(self, text: str, region: CaptureRegion) -> None:
        """Display text, creating the window on first use.

        Args:
            text: Text to show.
            region: Capture region the overlay is anchored to.
        """
        if self._closed:
            return
        self._current_text = text
        if self._root is None:
            self._create_window(region)
        self._label.config(text=text)
        self._root.update_idletasks()

    def _create_window(self, region: CaptureRegion) -> None:
        self._root = tk.Tk()
        self._root.title("Translation Overlay")
        self._root.overrideredirect(True)
        self._root.attributes("-topmost", True)
        self._root.attributes("-alpha", self.alpha)
        self._root.configure(bg=self.background_color)

        x, y = place_overlay(region, self._root.winfo_screenwidth(), self._root.winfo_screenheight())
        self._root.geometry(f"{OVERLAY_WIDTH}x{OVERLAY_HEIGHT}+{x}+{y}")

        overlay_font = tkfont.Font(family=FONT_FAMILY, size=self.font_size, weight="bold")
        self._label = tk.Label(
            self._root,
            text="",
            font=overlay_font,
            fg=self.font_color,
            bg=self.background_color,
            justify=tk.CENTER,
            wraplength=OVERLAY_WIDTH - 20,
        )
        self._label.pack(expand=True, fill=tk.BOTH)

        self._label.bind("<Button-1>", self._start_drag)
        self._label.bind("<B1-Motion>", self._on_drag)
        self._label.bind("<Button-3>", lambda event: self.close())

        logger.debug("overlay created", x=x, y=y, region=str(region))

    def _start_drag(self, event):
        self._drag_start = (event.x, event.y)

    def _on_drag(self, event):
        x = self._root.winfo_x() + event.x - self._drag_start[0]
        y = self._root.winfo_y() + event.y - self._drag_start[1]
        self._root.geometry(f"+{x}+{y}")

    def pump(self) -> bool:
        """Process pending Tk events.

        Returns:
            False once the window has been closed, True otherwise.
        """
        if self._closed:
            return False
        if self._root is None:
            return True
        try:
            self._root.update()
        except tk.TclError:
            self._closed = True
            self._root = None
            return False
        return True

    def close(self) -> None:
        """Destroy the window."""
        self._closed = True
        if self._root is not None:
            try:
                self._root.destroy()
            except tk.TclError:
                pass
            self._root = None

    @property
    def text(self) -> str:
        """Text currently displayed."""
        return self._current_text
