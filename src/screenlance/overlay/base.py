"""Overlay placement and the console overlay."""

from .. import log
from ..capture import CaptureRegion

logger = log.get_logger()

# Overlay layout constants
OVERLAY_WIDTH = 600
OVERLAY_HEIGHT = 100
OVERLAY_GAP = 5  # Pixels between region bottom and overlay top


def place_overlay(
    region: CaptureRegion,
    screen_width: int,
    screen_height: int,
    width: int = OVERLAY_WIDTH,
    height: int = OVERLAY_HEIGHT,
) -> tuple[int, int]:
    """Compute the overlay's top-left corner.

    The overlay sits just below the region's left edge and is pushed back
    inside the screen when it would overflow.
    """
    x = region.left
    y = region.bottom + OVERLAY_GAP
    if x + width > screen_width:
        x = screen_width - width
    if y + height > screen_height:
        y = screen_height - height
    return max(x, 0), max(y, 0)


class ConsoleOverlay:
    """Logs translations instead of drawing them."""

    def __init__(self):
        self._current_text: str = ""

    def show_or_update(self, text: str, region: CaptureRegion) -> None:
        self._current_text = text
        logger.info("translation", text=text, region=str(region))

    def pump(self) -> bool:
        return True

    def close(self) -> None:
        pass

    @property
    def text(self) -> str:
        return self._current_text
