"""Tests for the translation service."""

from unittest.mock import MagicMock

import pytest

from screenlance.translation.engine import Engine
from screenlance.translation.service import (
    DECODER_FAILED_TEXT,
    ENCODER_FAILED_TEXT,
    TranslationCache,
    TranslationService,
    TranslationStatus,
)
from screenlance.translation.tokenizer import Direction

EOS = 2


@pytest.fixture
def make_service(tokenizer, fake_encoder, scripted_decoder):
    """Build a service whose decoder emits the ids of ``output_text``."""

    def _make(output_text="Bonjour", encoder_error=None, decoder_error_at=None, cache_size=0, max_steps=128):
        script = tokenizer.encode(output_text, Direction.TARGET) + [EOS]
        encoder = fake_encoder(error=encoder_error)
        decoder = scripted_decoder(
            script,
            vocab_size=tokenizer.vocab_size(Direction.TARGET),
            error_at=decoder_error_at,
        )
        service = TranslationService(
            tokenizer,
            Engine(encoder, decoder),
            bos_id=0,
            eos_id=EOS,
            max_decode_steps=max_steps,
            cache_size=cache_size,
        )
        return service, encoder, decoder

    return _make


class TestTranslate:
    """Tests for TranslationService.translate."""

    def test_normal_path(self, make_service):
        """Source text is encoded, decoded greedily and detokenized."""
        service, encoder, decoder = make_service("Bonjour")

        result = service.translate("Hello")

        assert result.status == TranslationStatus.OK
        assert result.text == "Bonjour"
        assert not result.failed
        assert len(encoder.calls) == 1

    def test_empty_input_skips_engine(self, make_service):
        """Empty text returns EMPTY without any engine call."""
        service, encoder, decoder = make_service()

        result = service.translate("")

        assert result.status == TranslationStatus.EMPTY
        assert result.text == ""
        assert encoder.calls == []
        assert decoder.calls == []

    def test_whitespace_input_is_empty(self, make_service):
        """Text that tokenizes to nothing returns EMPTY."""
        service, encoder, _ = make_service()

        result = service.translate("   ")

        assert result.status == TranslationStatus.EMPTY
        assert encoder.calls == []

    def test_immediate_eos_is_empty_not_failure(self, make_service):
        """A model that says nothing succeeded with empty output."""
        service, _, _ = make_service("")

        result = service.translate("Hello")

        assert result.status == TranslationStatus.EMPTY
        assert result.text == ""
        assert not result.failed

    def test_encoder_failure_returns_sentinel(self, make_service):
        """Encoder errors never escape translate()."""
        service, _, decoder = make_service(encoder_error=RuntimeError("onnx failure"))

        result = service.translate("Hello")

        assert result.status == TranslationStatus.ENCODER_FAILURE
        assert result.text == ENCODER_FAILED_TEXT
        assert result.failed
        assert decoder.calls == []

    def test_decoder_failure_returns_sentinel(self, make_service):
        """Decoder errors never escape translate()."""
        service, _, _ = make_service("Bonjour le monde", decoder_error_at=1)

        result = service.translate("Hello")

        assert result.status == TranslationStatus.DECODER_FAILURE
        assert result.text == DECODER_FAILED_TEXT
        assert result.failed

    def test_id_outside_target_vocabulary_returns_sentinel(self, tokenizer, fake_encoder, scripted_decoder):
        """A decoder vocabulary larger than the target .spm cannot crash translate()."""
        size = tokenizer.vocab_size(Direction.TARGET)
        decoder = scripted_decoder([size + 3, EOS], vocab_size=size + 10)
        service = TranslationService(tokenizer, Engine(fake_encoder(), decoder), bos_id=0, eos_id=EOS, cache_size=10)

        result = service.translate("Hello world")

        assert result.status == TranslationStatus.DECODER_FAILURE
        assert result.text == DECODER_FAILED_TEXT
        # Not cached: the next request runs the model again
        service.translate("Hello world")
        assert len(decoder.calls) == 4

    def test_sentinels_are_distinct_from_empty(self, make_service):
        """Failure text is never the empty string."""
        assert ENCODER_FAILED_TEXT
        assert DECODER_FAILED_TEXT
        assert ENCODER_FAILED_TEXT != DECODER_FAILED_TEXT

    def test_hidden_state_released_after_call(self, tokenizer):
        """The per-call hidden state does not outlive translate()."""
        hidden = MagicMock()
        engine = MagicMock()
        engine.run_encoder.return_value = hidden
        engine.decode_greedy.return_value = tokenizer.encode("Bonjour", Direction.TARGET)
        service = TranslationService(tokenizer, engine, cache_size=0)

        service.translate("Hello")

        hidden.release.assert_called_once()

    def test_configured_special_ids_reach_engine(self, tokenizer):
        """BOS, EOS and max steps are passed through from configuration."""
        engine = MagicMock()
        engine.decode_greedy.return_value = []
        service = TranslationService(tokenizer, engine, bos_id=58100, eos_id=0, max_decode_steps=64)

        service.translate("Hello")

        _, kwargs = engine.decode_greedy.call_args
        assert kwargs == {"bos_id": 58100, "eos_id": 0, "max_steps": 64}


class TestCaching:
    """Tests for the translation cache."""

    def test_repeated_text_uses_cache(self, make_service):
        """A second identical request does not run the model."""
        service, encoder, _ = make_service("Bonjour", cache_size=10)

        first = service.translate("Hello")
        second = service.translate("Hello")

        assert first.text == second.text == "Bonjour"
        assert not first.was_cached
        assert second.was_cached
        assert len(encoder.calls) == 1

    def test_failures_are_not_cached(self, make_service):
        """An engine failure is retried on the next request."""
        service, encoder, _ = make_service(encoder_error=RuntimeError("boom"), cache_size=10)

        service.translate("Hello")
        service.translate("Hello")

        assert len(encoder.calls) == 2

    def test_cache_evicts_least_recently_used(self):
        """The oldest untouched entry goes first."""
        cache = TranslationCache(max_size=2)
        cache.put("a", "A")
        cache.put("b", "B")
        cache.get("a")
        cache.put("c", "C")

        assert cache.get("b") is None
        assert cache.get("a") == "A"
        assert cache.get("c") == "C"
        assert len(cache) == 2

    def test_zero_size_disables_cache(self):
        """A cache of size 0 stores nothing."""
        cache = TranslationCache(max_size=0)
        cache.put("a", "A")

        assert cache.get("a") is None
        assert len(cache) == 0
