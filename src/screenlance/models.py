"""Model file layout and download for ScreenLance.

A models directory holds two SentencePiece vocabularies and two ONNX graphs:

    models/
        source.spm
        target.spm
        encoder_model.onnx
        decoder_model.onnx

Exported checkpoints on HuggingFace often keep the graphs in an ``onnx/``
subfolder, which is accepted as well. Downloads use the standard HuggingFace
cache at ~/.cache/huggingface/.
"""

import os
from dataclasses import dataclass
from pathlib import Path

# Suppress HuggingFace Hub warning about unauthenticated requests
os.environ["HF_HUB_DISABLE_IMPLICIT_TOKEN"] = "1"

from huggingface_hub import snapshot_download
from huggingface_hub.utils import LocalEntryNotFoundError

from . import log
from .errors import ModelLoadError

logger = log.get_logger()

SOURCE_VOCAB_FILE = "source.spm"
TARGET_VOCAB_FILE = "target.spm"
ENCODER_MODEL_FILE = "encoder_model.onnx"
DECODER_MODEL_FILE = "decoder_model.onnx"

GRAPH_SUBFOLDER = "onnx"

# Only the files the engine needs are fetched from a repository
DOWNLOAD_PATTERNS = [
    SOURCE_VOCAB_FILE,
    TARGET_VOCAB_FILE,
    ENCODER_MODEL_FILE,
    DECODER_MODEL_FILE,
    f"{GRAPH_SUBFOLDER}/{ENCODER_MODEL_FILE}",
    f"{GRAPH_SUBFOLDER}/{DECODER_MODEL_FILE}",
]


@dataclass(frozen=True)
class ModelFiles:
    """Resolved paths of the four files making up a translation model."""

    source_vocab: Path
    target_vocab: Path
    encoder: Path
    decoder: Path


def _find_file(models_dir: Path, name: str, what: str, subfolder: str | None = None) -> Path:
    candidates = [models_dir / name]
    if subfolder:
        candidates.append(models_dir / subfolder / name)
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    raise ModelLoadError(candidates[0], what, "file not found")


def resolve_model_files(models_dir: str | Path) -> ModelFiles:
    """Locate the model files in a models directory.

    Args:
        models_dir: Directory containing the vocabularies and graphs.

    Returns:
        ModelFiles with the resolved paths.

    Raises:
        ModelLoadError: If any of the four files is missing.
    """
    models_dir = Path(models_dir)
    return ModelFiles(
        source_vocab=_find_file(models_dir, SOURCE_VOCAB_FILE, "source vocabulary"),
        target_vocab=_find_file(models_dir, TARGET_VOCAB_FILE, "target vocabulary"),
        encoder=_find_file(models_dir, ENCODER_MODEL_FILE, "encoder model", GRAPH_SUBFOLDER),
        decoder=_find_file(models_dir, DECODER_MODEL_FILE, "decoder model", GRAPH_SUBFOLDER),
    )


def download_models(repo_id: str) -> Path:
    """Get path to a model repository, downloading if needed.

    Args:
        repo_id: HuggingFace repository id.

    Returns:
        Path to the local snapshot directory.

    Raises:
        ModelLoadError: If the repository cannot be fetched.
    """
    # First try to load from cache (no network request)
    try:
        model_path = snapshot_download(
            repo_id=repo_id,
            allow_patterns=DOWNLOAD_PATTERNS,
            local_files_only=True,
        )
        return Path(model_path)
    except LocalEntryNotFoundError:
        pass

    logger.info("downloading translation model", repo=repo_id)
    try:
        model_path = snapshot_download(repo_id=repo_id, allow_patterns=DOWNLOAD_PATTERNS)
    except Exception as e:
        raise ModelLoadError(repo_id, "model repository", str(e)) from e
    return Path(model_path)


def locate_models(models_dir: str | Path, model_repo: str = "") -> ModelFiles:
    """Resolve model files from the models directory or a HuggingFace repo.

    The local directory wins when it holds a complete model. Otherwise the
    configured repository (if any) is used.

    Raises:
        ModelLoadError: If no complete model can be found.
    """
    try:
        return resolve_model_files(models_dir)
    except ModelLoadError:
        if not model_repo:
            raise
    logger.info("models not found locally", models_dir=str(models_dir), repo=model_repo)
    return resolve_model_files(download_models(model_repo))
