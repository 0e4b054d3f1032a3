"""Pytest configuration and fixtures."""

import shutil

import numpy as np
import pytest

CORPUS = [
    "Hello world",
    "Hello there, how are you today?",
    "The quick brown fox jumps over the lazy dog.",
    "Press start to continue",
    "Bonjour le monde",
    "Bonjour, comment allez-vous aujourd'hui ?",
    "Le renard brun saute par-dessus le chien paresseux.",
    "Appuyez sur start pour continuer",
    "Save your game before leaving the village.",
    "Sauvegardez votre partie avant de quitter le village.",
]

HIDDEN_SIZE = 4
VOCAB_SIZE = 8


class FakeEncoderSession:
    """Stands in for the encoder InferenceSession."""

    def __init__(self, hidden_size: int = HIDDEN_SIZE, error: Exception | None = None):
        self.hidden_size = hidden_size
        self.error = error
        self.calls = []
        self.last_output = None

    def run(self, output_names, feeds):
        self.calls.append((list(output_names), feeds))
        if self.error is not None:
            raise self.error
        length = feeds["input_ids"].shape[1]
        self.last_output = np.arange(length * self.hidden_size, dtype=np.float32).reshape(1, length, self.hidden_size)
        return [self.last_output]


class ScriptedDecoderSession:
    """Stands in for the decoder InferenceSession.

    Each run puts the highest logit of the last time step on the next token
    of ``script``; once the script is exhausted its last token repeats.
    """

    def __init__(self, script, vocab_size: int = VOCAB_SIZE, error_at: int | None = None):
        self.script = list(script)
        self.vocab_size = vocab_size
        self.error_at = error_at
        self.calls = []

    def run(self, output_names, feeds):
        step = len(self.calls)
        self.calls.append((list(output_names), feeds))
        if self.error_at is not None and step == self.error_at:
            raise RuntimeError("decoder exploded")
        seq_len = feeds["input_ids"].shape[1]
        token = self.script[min(step, len(self.script) - 1)]
        logits = np.zeros((1, seq_len, self.vocab_size), dtype=np.float32)
        logits[0, -1, token] = 1.0
        return [logits]


@pytest.fixture
def fake_encoder():
    """Factory for fake encoder sessions."""
    return FakeEncoderSession


@pytest.fixture
def scripted_decoder():
    """Factory for scripted decoder sessions."""
    return ScriptedDecoderSession


@pytest.fixture(scope="session")
def spm_model(tmp_path_factory):
    """Train a tiny SentencePiece model shared by all tests."""
    import sentencepiece as spm

    workdir = tmp_path_factory.mktemp("spm")
    corpus_path = workdir / "corpus.txt"
    corpus_path.write_text("\n".join(CORPUS * 5) + "\n", encoding="utf-8")

    prefix = workdir / "tiny"
    spm.SentencePieceTrainer.train(
        input=str(corpus_path),
        model_prefix=str(prefix),
        vocab_size=80,
        model_type="bpe",
        character_coverage=1.0,
        hard_vocab_limit=False,
    )
    return workdir / "tiny.model"


@pytest.fixture
def models_dir(tmp_path, spm_model):
    """A models directory with real vocabularies and placeholder graphs."""
    directory = tmp_path / "models"
    directory.mkdir()
    shutil.copy(spm_model, directory / "source.spm")
    shutil.copy(spm_model, directory / "target.spm")
    (directory / "encoder_model.onnx").write_bytes(b"not a real graph")
    (directory / "decoder_model.onnx").write_bytes(b"not a real graph")
    return directory


@pytest.fixture
def tokenizer(spm_model):
    """Tokenizer using the tiny model for both directions."""
    from screenlance.translation.tokenizer import Tokenizer

    return Tokenizer(spm_model, spm_model)
