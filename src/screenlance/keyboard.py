"""Global keyboard input and cooperative cancellation."""

import threading
from typing import Callable, Optional

from . import log

logger = log.get_logger()


class CancelToken:
    """Thread-safe "stop requested" flag checked once per loop tick."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class KeyboardListener:
    """Global keyboard listener using pynput."""

    def __init__(self, on_press: Callable[[str], None]):
        """Initialize the keyboard listener.

        Args:
            on_press: Callback receiving the key character (e.g. 'q') or the
                     special key name (e.g. 'esc', 'f1').
        """
        self._on_press = on_press
        self._listener = None

    def _handle_key(self, key) -> None:
        """Handle key press events from pynput."""
        char = getattr(key, "char", None)
        if char:
            self._on_press(char)
            return
        name = getattr(key, "name", None)
        if name:
            self._on_press(name)

    def start(self) -> None:
        """Start listening for keyboard events in a background thread."""
        if self._listener is not None:
            return

        from pynput import keyboard

        self._listener = keyboard.Listener(on_press=self._handle_key)
        self._listener.start()

    def stop(self) -> None:
        """Stop listening for keyboard events."""
        if self._listener is not None:
            self._listener.stop()
            self._listener = None


def cancel_on_key(token: CancelToken, cancel_key: str = "esc") -> KeyboardListener:
    """Create a listener that cancels ``token`` when ``cancel_key`` is pressed."""
    wanted = cancel_key.lower()

    def on_press(key: str) -> None:
        if key.lower() == wanted and not token.cancelled:
            logger.info("cancel key pressed", key=key)
            token.cancel()

    return KeyboardListener(on_press)
