"""SentencePiece tokenization for the source and target vocabularies."""

from enum import Enum
from pathlib import Path

import sentencepiece as spm

from .. import log
from ..errors import ModelLoadError

logger = log.get_logger()


class Direction(Enum):
    """Which side of the translation a vocabulary belongs to."""

    SOURCE = "source"
    TARGET = "target"


class Tokenizer:
    """Wraps two independent SentencePiece vocabularies.

    The source vocabulary turns recognized text into encoder input ids, the
    target vocabulary turns generated ids back into text. Both are loaded
    once and never modified afterwards.
    """

    def __init__(self, source_path: str | Path, target_path: str | Path):
        """Load both vocabularies.

        Args:
            source_path: Path to the source SentencePiece model.
            target_path: Path to the target SentencePiece model.

        Raises:
            ModelLoadError: If either vocabulary cannot be loaded.
        """
        self._processors = {
            Direction.SOURCE: self._load(Path(source_path), Direction.SOURCE),
            Direction.TARGET: self._load(Path(target_path), Direction.TARGET),
        }

    @staticmethod
    def _load(path: Path, direction: Direction) -> spm.SentencePieceProcessor:
        what = f"{direction.value} vocabulary"
        if not path.is_file():
            raise ModelLoadError(path, what, "file not found")
        processor = spm.SentencePieceProcessor()
        try:
            loaded = processor.Load(str(path))
        except Exception as e:
            raise ModelLoadError(path, what, str(e)) from e
        if loaded is False:
            raise ModelLoadError(path, what, "not a SentencePiece model")
        logger.debug("vocabulary loaded", direction=direction.value, size=processor.GetPieceSize())
        return processor

    def encode(self, text: str, direction: Direction = Direction.SOURCE) -> list[int]:
        """Tokenize text into ids.

        Args:
            text: UTF-8 text.
            direction: Vocabulary to use.

        Returns:
            Token ids; empty for empty text.
        """
        if not text:
            return []
        return list(self._processors[direction].EncodeAsIds(text))

    def decode(self, ids: list[int], direction: Direction = Direction.TARGET) -> str:
        """Detokenize ids into text.

        Args:
            ids: Token ids, possibly empty.
            direction: Vocabulary to use.

        Returns:
            Decoded text; empty for an empty id sequence.
        """
        if not ids:
            return ""
        return self._processors[direction].DecodeIds([int(i) for i in ids])

    def vocab_size(self, direction: Direction) -> int:
        """Number of pieces in a vocabulary."""
        return self._processors[direction].GetPieceSize()
