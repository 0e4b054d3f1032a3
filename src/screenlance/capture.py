"""Screen region capture using mss.

Frames are numpy arrays in native BGRA format (H, W, 4). ``bgra_to_rgb``
converts them for consumers that need RGB.
"""

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from . import log
from .errors import RegionTooSmallError

logger = log.get_logger()

MIN_REGION_SIZE = 10  # Minimum width and height in pixels

# Type alias for BGRA frame (height, width, 4 channels)
BGRAFrame = NDArray[np.uint8]


@dataclass(frozen=True)
class CaptureRegion:
    """Screen rectangle in pixels, right/bottom exclusive."""

    left: int
    top: int
    right: int
    bottom: int

    @property
    def width(self) -> int:
        return self.right - self.left

    @property
    def height(self) -> int:
        return self.bottom - self.top

    @classmethod
    def from_bounds(cls, left: int, top: int, right: int, bottom: int) -> "CaptureRegion":
        """Build a region from two corners given in any order."""
        return cls(min(left, right), min(top, bottom), max(left, right), max(top, bottom))

    def validate(self, minimum: int = MIN_REGION_SIZE) -> "CaptureRegion":
        """Check the region is large enough to capture.

        Raises:
            RegionTooSmallError: If width or height is below ``minimum``.
        """
        if self.width < minimum or self.height < minimum:
            raise RegionTooSmallError(self.width, self.height, minimum)
        return self

    def as_monitor(self) -> dict:
        """Region in the dict format mss.grab() expects."""
        return {"left": self.left, "top": self.top, "width": self.width, "height": self.height}

    def __str__(self) -> str:
        return f"({self.left}, {self.top}, {self.right}, {self.bottom})"


def bgra_to_rgb(frame: BGRAFrame) -> NDArray[np.uint8]:
    """Convert BGRA numpy array to RGB numpy array.

    Args:
        frame: numpy array of shape (H, W, 4) in BGRA format.

    Returns:
        numpy array of shape (H, W, 3) in RGB format.
    """
    # Reorder channels: B=0, G=1, R=2, A=3 -> R=2, G=1, B=0
    rgb = frame[:, :, [2, 1, 0]]
    return np.ascontiguousarray(rgb)


def primary_monitor_region() -> CaptureRegion:
    """Get the rectangle covering the primary monitor."""
    import mss

    with mss.mss() as sct:
        monitor = sct.monitors[1]
    return CaptureRegion(
        monitor["left"],
        monitor["top"],
        monitor["left"] + monitor["width"],
        monitor["top"] + monitor["height"],
    )


class ScreenCapture:
    """Grabs a fixed screen region."""

    def __init__(self):
        self._sct = None

    def capture(self, region: CaptureRegion) -> BGRAFrame | None:
        """Capture a screen region.

        Args:
            region: Rectangle to grab.

        Returns:
            BGRA frame, or None if capture failed.
        """
        import mss
        from mss.exception import ScreenShotError

        try:
            if self._sct is None:
                self._sct = mss.mss()
            screenshot = self._sct.grab(region.as_monitor())
        except ScreenShotError as e:
            logger.debug("capture failed", region=str(region), error=str(e))
            return None

        frame = np.array(screenshot, dtype=np.uint8)
        if frame.size == 0:
            return None
        return frame

    def close(self) -> None:
        """Release the mss handle."""
        if self._sct is not None:
            self._sct.close()
            self._sct = None
