"""Tests for the tokenizer module."""

import pytest

from screenlance.errors import ModelLoadError
from screenlance.translation.tokenizer import Direction, Tokenizer


class TestEncode:
    """Tests for Tokenizer.encode."""

    @pytest.mark.parametrize("direction", list(Direction))
    def test_empty_text_gives_no_ids(self, tokenizer, direction):
        """Empty input never reaches the vocabulary."""
        assert tokenizer.encode("", direction) == []

    def test_text_gives_ids(self, tokenizer):
        """Non-empty text produces integer ids."""
        ids = tokenizer.encode("Hello world", Direction.SOURCE)

        assert ids
        assert all(isinstance(i, int) for i in ids)

    def test_whitespace_gives_no_ids(self, tokenizer):
        """Whitespace-only text normalizes away to nothing."""
        assert tokenizer.encode("   ", Direction.SOURCE) == []


class TestDecode:
    """Tests for Tokenizer.decode."""

    @pytest.mark.parametrize("direction", list(Direction))
    def test_empty_ids_give_empty_text(self, tokenizer, direction):
        """Decoding nothing (EOS on the first step) is not an error."""
        assert tokenizer.decode([], direction) == ""

    def test_decode_encoded_text(self, tokenizer):
        """Known text survives a round trip through the target vocabulary."""
        ids = tokenizer.encode("Bonjour le monde", Direction.TARGET)

        assert tokenizer.decode(ids, Direction.TARGET) == "Bonjour le monde"

    def test_retokenizing_generated_ids_is_lossless(self, tokenizer):
        """Re-encoding decoded ids gives the same ids back."""
        ids = tokenizer.encode("Save your game before leaving the village.", Direction.TARGET)

        text = tokenizer.decode(ids, Direction.TARGET)

        assert tokenizer.encode(text, Direction.TARGET) == ids

    def test_accepts_numpy_integers(self, tokenizer):
        """Ids coming straight out of numpy are accepted."""
        import numpy as np

        ids = tokenizer.encode("Hello world", Direction.TARGET)

        assert tokenizer.decode(list(np.asarray(ids, dtype=np.int64)), Direction.TARGET) == "Hello world"


class TestLoading:
    """Tests for vocabulary loading failures."""

    def test_missing_source_vocabulary(self, tmp_path, spm_model):
        """A missing file names the file and the direction."""
        missing = tmp_path / "source.spm"

        with pytest.raises(ModelLoadError) as exc_info:
            Tokenizer(missing, spm_model)

        assert exc_info.value.what == "source vocabulary"
        assert str(missing) in str(exc_info.value)

    def test_corrupt_target_vocabulary(self, tmp_path, spm_model):
        """A file that is not a SentencePiece model is reported for its direction."""
        corrupt = tmp_path / "target.spm"
        corrupt.write_bytes(b"\x00garbage\xff")

        with pytest.raises(ModelLoadError) as exc_info:
            Tokenizer(spm_model, corrupt)

        assert exc_info.value.what == "target vocabulary"

    def test_vocab_size(self, tokenizer):
        """Vocabulary size is exposed per direction."""
        assert tokenizer.vocab_size(Direction.SOURCE) > 3
        assert tokenizer.vocab_size(Direction.SOURCE) == tokenizer.vocab_size(Direction.TARGET)
