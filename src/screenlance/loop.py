"""Capture, recognize, translate and display loop.

One ``tick()`` runs the whole pipeline once and reports whether the loop
should go on. ``run()`` schedules ticks ``refresh_rate`` seconds apart and
services UI events in between, so the overlay stays responsive and a quit
event is noticed on the next tick. Nothing interrupts a tick in flight.
"""

import time
from enum import Enum
from typing import Callable, Optional, Protocol

import numpy as np

from . import log
from .capture import BGRAFrame, CaptureRegion
from .errors import CaptureError, RecognitionError
from .keyboard import CancelToken
from .translation.service import TranslationResult, TranslationStatus

logger = log.get_logger()

DEFAULT_REFRESH_RATE = 0.5  # Seconds between ticks
UI_POLL_INTERVAL = 0.05  # Event pumping granularity while waiting (seconds)
DEFAULT_EMPTY_PLACEHOLDER = "..."


class LoopState(Enum):
    """What the loop is doing right now."""

    IDLE = "idle"
    CAPTURING = "capturing"
    RECOGNIZING = "recognizing"
    TRANSLATING = "translating"
    DISPLAYING = "displaying"
    STOPPING = "stopping"


class Capturer(Protocol):
    def capture(self, region: CaptureRegion) -> BGRAFrame | None:
        """Grab the region, or return None on failure."""
        ...


class Recognizer(Protocol):
    def recognize(self, image: BGRAFrame) -> str:
        """Extract text; may raise RecognitionError."""
        ...


class Translator(Protocol):
    def translate(self, text: str) -> TranslationResult:
        """Translate text without raising engine errors."""
        ...


class OverlaySink(Protocol):
    def show_or_update(self, text: str, region: CaptureRegion) -> None:
        """Create the overlay on first call, update it afterwards."""
        ...


class EventPump(Protocol):
    def pump(self) -> bool:
        """Process pending UI events; False means the user quit."""
        ...


class TranslationLoop:
    """Runs capture -> OCR -> translation -> overlay until cancelled.

    Translation only happens when the recognized text differs from the last
    recognized text, compared exactly.
    """

    def __init__(
        self,
        region: CaptureRegion,
        capturer: Capturer,
        recognizer: Recognizer,
        translator: Translator,
        overlay: OverlaySink,
        events: Optional[EventPump] = None,
        cancel: Optional[CancelToken] = None,
        refresh_rate: float = DEFAULT_REFRESH_RATE,
        empty_placeholder: str = DEFAULT_EMPTY_PLACEHOLDER,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize the loop.

        Args:
            region: Validated capture region, fixed for the whole run.
            capturer: Screen capture collaborator.
            recognizer: Text recognition collaborator.
            translator: Translation service.
            overlay: Display collaborator.
            events: UI event pump serviced between ticks.
            cancel: Token checked once per tick.
            refresh_rate: Seconds between ticks.
            empty_placeholder: Shown when translation produced no text.
            sleep: Sleep function (injectable for tests).
        """
        self.region = region.validate()
        self._capturer = capturer
        self._recognizer = recognizer
        self._translator = translator
        self._overlay = overlay
        self._events = events
        self.cancel = cancel or CancelToken()
        self.refresh_rate = refresh_rate
        self.empty_placeholder = empty_placeholder
        self._sleep = sleep

        self.state = LoopState.IDLE
        self.last_recognized_text = ""
        self.translation_count = 0

    # -------------------------------------------------------------------------
    # Scheduling
    # -------------------------------------------------------------------------

    def run(self) -> None:
        """Tick until cancelled or the UI reports a quit event."""
        logger.info("translation loop started", region=str(self.region), refresh_rate=self.refresh_rate)
        while True:
            self._pump_events()
            if not self.tick():
                break
            self._wait(self.refresh_rate)
        logger.info("translation loop stopped", translations=self.translation_count)

    def _pump_events(self) -> None:
        if self._events is not None and not self._events.pump():
            if not self.cancel.cancelled:
                logger.info("quit event received")
            self.cancel.cancel()

    def _wait(self, seconds: float) -> None:
        """Sleep between ticks while keeping UI events flowing."""
        deadline = time.monotonic() + seconds
        while not self.cancel.cancelled:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            self._sleep(min(UI_POLL_INTERVAL, remaining))
            self._pump_events()

    # -------------------------------------------------------------------------
    # Pipeline
    # -------------------------------------------------------------------------

    def tick(self) -> bool:
        """Run the pipeline once.

        Returns:
            False if the loop must stop, True otherwise.
        """
        if self.cancel.cancelled:
            self.state = LoopState.STOPPING
            return False

        try:
            self._process()
        finally:
            if self.state != LoopState.STOPPING:
                self.state = LoopState.IDLE
        return True

    def _process(self) -> None:
        tick_start = time.perf_counter()

        self.state = LoopState.CAPTURING
        try:
            image = self._capturer.capture(self.region)
        except CaptureError as e:
            logger.debug("capture failed", error=str(e))
            return
        if image is None or np.size(image) == 0:
            logger.debug("capture returned no image", region=str(self.region))
            return
        capture_ms = (time.perf_counter() - tick_start) * 1000

        self.state = LoopState.RECOGNIZING
        ocr_start = time.perf_counter()
        try:
            text = self._recognizer.recognize(image)
        except RecognitionError as e:
            logger.debug("recognition failed", error=str(e))
            return
        ocr_ms = (time.perf_counter() - ocr_start) * 1000

        if not text or not text.strip():
            logger.debug("tick timing", capture_ms=round(capture_ms), ocr_ms=round(ocr_ms), result="no text")
            return

        if text == self.last_recognized_text:
            logger.debug("tick timing", capture_ms=round(capture_ms), ocr_ms=round(ocr_ms), result="unchanged")
            return
        self.last_recognized_text = text

        self.state = LoopState.TRANSLATING
        translate_start = time.perf_counter()
        result = self._translator.translate(text)
        translate_ms = (time.perf_counter() - translate_start) * 1000
        self.translation_count += 1

        display_text = self._display_text(result)

        self.state = LoopState.DISPLAYING
        self._overlay.show_or_update(display_text, self.region)

        logger.info("recognized", text=text)
        logger.info("translated", text=display_text, status=result.status.value, cached=result.was_cached)
        logger.debug(
            "tick timing",
            capture_ms=round(capture_ms),
            ocr_ms=round(ocr_ms),
            translate_ms=round(translate_ms),
            total_ms=round((time.perf_counter() - tick_start) * 1000),
        )

    def _display_text(self, result: TranslationResult) -> str:
        """Pick what the overlay shows for a translation result."""
        if result.status == TranslationStatus.EMPTY or not result.text:
            return self.empty_placeholder
        # Failures carry their own sentinel message
        return result.text
