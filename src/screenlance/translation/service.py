"""Text-to-text translation on top of the tokenizer and inference engine."""

import time
from dataclasses import dataclass
from enum import Enum

from .. import log
from ..errors import DecoderFailure, EncoderFailure
from .engine import Engine
from .tokenizer import Direction, Tokenizer

logger = log.get_logger()

DEFAULT_BOS_ID = 0
DEFAULT_EOS_ID = 2
DEFAULT_MAX_DECODE_STEPS = 128
DEFAULT_CACHE_SIZE = 200

ENCODER_FAILED_TEXT = "[Translation Error: Encoder Failed]"
DECODER_FAILED_TEXT = "[Translation Error: Decoder Failed]"


class TranslationStatus(Enum):
    """Outcome of a translation request."""

    OK = "ok"
    EMPTY = "empty"
    ENCODER_FAILURE = "encoder_failure"
    DECODER_FAILURE = "decoder_failure"


@dataclass(frozen=True)
class TranslationResult:
    """Tagged result of ``TranslationService.translate``.

    ``EMPTY`` is a success with no output text. Failure statuses carry a
    sentinel message in ``text`` so callers can display it as is.
    """

    status: TranslationStatus
    text: str = ""
    was_cached: bool = False

    @property
    def failed(self) -> bool:
        return self.status in (TranslationStatus.ENCODER_FAILURE, TranslationStatus.DECODER_FAILURE)

    @classmethod
    def empty(cls) -> "TranslationResult":
        return cls(TranslationStatus.EMPTY, "")


class TranslationCache:
    """Bounded cache of successful translations keyed by exact source text."""

    def __init__(self, max_size: int = DEFAULT_CACHE_SIZE):
        """Initialize the cache.

        Args:
            max_size: Maximum number of entries to store (0 disables caching).
        """
        self._cache: dict[str, str] = {}
        self._max_size = max_size

    def get(self, text: str) -> str | None:
        """Get cached translation, refreshing its position if found."""
        if text not in self._cache:
            return None
        translation = self._cache.pop(text)
        self._cache[text] = translation
        return translation

    def put(self, text: str, translation: str) -> None:
        """Store a translation, evicting the least recently used entry if full."""
        if self._max_size <= 0:
            return
        if text in self._cache:
            del self._cache[text]
        elif len(self._cache) >= self._max_size:
            oldest_key = next(iter(self._cache))
            del self._cache[oldest_key]
        self._cache[text] = translation

    def __len__(self) -> int:
        return len(self._cache)


class TranslationService:
    """Translates text with greedy decoding, never raising engine errors."""

    def __init__(
        self,
        tokenizer: Tokenizer,
        engine: Engine,
        bos_id: int = DEFAULT_BOS_ID,
        eos_id: int = DEFAULT_EOS_ID,
        max_decode_steps: int = DEFAULT_MAX_DECODE_STEPS,
        cache_size: int = DEFAULT_CACHE_SIZE,
    ):
        """Initialize the service.

        Args:
            tokenizer: Loaded source/target vocabularies.
            engine: Loaded encoder/decoder sessions.
            bos_id: Decoder start token id of the model.
            eos_id: End-of-sequence token id of the model.
            max_decode_steps: Maximum number of generated tokens.
            cache_size: Number of translations to remember (0 disables).
        """
        self._tokenizer = tokenizer
        self._engine = engine
        self.bos_id = bos_id
        self.eos_id = eos_id
        self.max_decode_steps = max_decode_steps
        self._cache = TranslationCache(cache_size)

    def translate(self, text: str) -> TranslationResult:
        """Translate source text.

        Args:
            text: Source text, possibly empty.

        Returns:
            TranslationResult; engine failures are reported through its status.
        """
        if not text:
            return TranslationResult.empty()

        cached = self._cache.get(text)
        if cached is not None:
            return TranslationResult(TranslationStatus.OK, cached, was_cached=True)

        source_ids = self._tokenizer.encode(text, Direction.SOURCE)
        if not source_ids:
            return TranslationResult.empty()

        start = time.perf_counter()
        try:
            hidden = self._engine.run_encoder(source_ids)
        except EncoderFailure as e:
            logger.error("encoder failed", error=str(e), tokens=len(source_ids))
            return TranslationResult(TranslationStatus.ENCODER_FAILURE, ENCODER_FAILED_TEXT)

        try:
            target_ids = self._engine.decode_greedy(
                hidden,
                bos_id=self.bos_id,
                eos_id=self.eos_id,
                max_steps=self.max_decode_steps,
            )
        except DecoderFailure as e:
            logger.error("decoder failed", error=str(e), step=e.step)
            return TranslationResult(TranslationStatus.DECODER_FAILURE, DECODER_FAILED_TEXT)
        finally:
            hidden.release()

        # Decoder vocabularies may be larger than the target .spm
        try:
            translated = self._tokenizer.decode(target_ids, Direction.TARGET)
        except (IndexError, RuntimeError) as e:
            logger.error("target ids rejected by vocabulary", error=str(e), ids=target_ids)
            return TranslationResult(TranslationStatus.DECODER_FAILURE, DECODER_FAILED_TEXT)

        logger.debug(
            "translation done",
            source_tokens=len(source_ids),
            target_tokens=len(target_ids),
            truncated=len(target_ids) >= self.max_decode_steps,
            ms=round((time.perf_counter() - start) * 1000),
        )

        if not translated:
            return TranslationResult.empty()

        self._cache.put(text, translated)
        return TranslationResult(TranslationStatus.OK, translated)
