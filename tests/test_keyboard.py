"""Tests for keyboard cancellation."""

from types import SimpleNamespace

from screenlance.keyboard import CancelToken, KeyboardListener, cancel_on_key


class TestCancelToken:
    def test_starts_clear(self):
        assert not CancelToken().cancelled

    def test_cancel_is_sticky(self):
        token = CancelToken()
        token.cancel()
        token.cancel()

        assert token.cancelled


class TestKeyboardListener:
    """Tests for key normalization."""

    def test_character_key(self):
        pressed = []
        listener = KeyboardListener(pressed.append)

        listener._handle_key(SimpleNamespace(char="q"))

        assert pressed == ["q"]

    def test_special_key_uses_name(self):
        """Special keys have no char and report their name."""
        pressed = []
        listener = KeyboardListener(pressed.append)

        listener._handle_key(SimpleNamespace(char=None, name="esc"))

        assert pressed == ["esc"]

    def test_unknown_key_ignored(self):
        pressed = []
        KeyboardListener(pressed.append)._handle_key(object())

        assert pressed == []

    def test_stop_without_start(self):
        KeyboardListener(lambda key: None).stop()


class TestCancelOnKey:
    """Tests for cancel_on_key."""

    def test_escape_cancels(self):
        token = CancelToken()
        listener = cancel_on_key(token)

        listener._handle_key(SimpleNamespace(char=None, name="esc"))

        assert token.cancelled

    def test_other_keys_ignored(self):
        token = CancelToken()
        listener = cancel_on_key(token)

        listener._handle_key(SimpleNamespace(char="a"))
        listener._handle_key(SimpleNamespace(char=None, name="f1"))

        assert not token.cancelled

    def test_custom_key_is_case_insensitive(self):
        token = CancelToken()
        listener = cancel_on_key(token, "Q")

        listener._handle_key(SimpleNamespace(char="q"))

        assert token.cancelled
