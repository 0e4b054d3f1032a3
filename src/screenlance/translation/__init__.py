"""Translation pipeline: tokenizer, inference engine and service."""

from .engine import EncoderHiddenState, Engine, select_next_token
from .service import TranslationResult, TranslationService, TranslationStatus
from .tokenizer import Direction, Tokenizer

__all__ = [
    "Direction",
    "EncoderHiddenState",
    "Engine",
    "Tokenizer",
    "TranslationResult",
    "TranslationService",
    "TranslationStatus",
    "select_next_token",
]
