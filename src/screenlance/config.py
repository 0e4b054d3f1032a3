"""Configuration management for ScreenLance."""

import os
from pathlib import Path

import yaml

CONFIG_DIR_NAME = ".screenlance"
CONFIG_FILE_NAME = "config.yml"

DEFAULT_CONFIG = """# Directory holding source.spm, target.spm, encoder_model.onnx, decoder_model.onnx
models_dir: "models"

# Optional HuggingFace repository to fetch the models from when models_dir
# does not contain them (e.g. "Xenova/opus-mt-en-fr")
model_repo: ""

# Capture mode: "fullscreen" (primary monitor) or "region"
capture_mode: fullscreen

# Region in screen pixels [left, top, right, bottom], used in region mode
capture_region: [0, 0, 800, 600]

# Seconds between two capture/recognize/translate ticks
refresh_rate: 0.5

# Tesseract language and page segmentation mode
ocr_language: "eng"
ocr_psm: 6

# Special token ids of the translation model
bos_id: 0
eos_id: 2

# Upper bound on generated tokens per translation
max_decode_steps: 128

# ONNX Runtime intra-op threads (0 = one per CPU)
intra_op_threads: 0

# Number of translations kept in memory (0 disables the cache)
cache_size: 200

# Shown when the model produced no output
empty_placeholder: "..."

# Key that stops the translation loop
cancel_key: "esc"

# Overlay appearance
font_size: 24
font_color: "#FFFF00"
background_color: "#000000"
overlay_alpha: 0.86
"""


class Config:
    """Application configuration."""

    def __init__(
        self,
        models_dir: str = "models",
        model_repo: str = "",
        capture_mode: str = "fullscreen",
        capture_region: tuple[int, int, int, int] = (0, 0, 800, 600),
        refresh_rate: float = 0.5,
        ocr_language: str = "eng",
        ocr_psm: int = 6,
        bos_id: int = 0,
        eos_id: int = 2,
        max_decode_steps: int = 128,
        intra_op_threads: int = 0,
        cache_size: int = 200,
        empty_placeholder: str = "...",
        cancel_key: str = "esc",
        font_size: int = 24,
        font_color: str = "#FFFF00",
        background_color: str = "#000000",
        overlay_alpha: float = 0.86,
    ):
        self.models_dir = models_dir
        self.model_repo = model_repo
        self.capture_mode = capture_mode  # "fullscreen" or "region"
        self.capture_region = tuple(capture_region)
        self.refresh_rate = refresh_rate
        self.ocr_language = ocr_language
        self.ocr_psm = ocr_psm
        self.bos_id = bos_id
        self.eos_id = eos_id
        self.max_decode_steps = max_decode_steps
        self.intra_op_threads = intra_op_threads
        self.cache_size = cache_size
        self.empty_placeholder = empty_placeholder
        self.cancel_key = cancel_key
        self.font_size = font_size
        self.font_color = font_color
        self.background_color = background_color
        self.overlay_alpha = overlay_alpha

    @classmethod
    def load(cls, config_path: str | None = None) -> "Config":
        """Load configuration from YAML file.

        Args:
            config_path: Path to config file. If None, looks for config.yml
                        in common locations.

        Returns:
            Config instance with loaded values.

        Raises:
            ValueError: If a value has the wrong shape (e.g. capture_region).
        """
        if config_path is None:
            search_paths = [
                Path(CONFIG_FILE_NAME),
                Path(__file__).parent.parent / CONFIG_FILE_NAME,
                Path.home() / CONFIG_DIR_NAME / CONFIG_FILE_NAME,
            ]
            for path in search_paths:
                if path.exists():
                    config_path = str(path)
                    break

        if config_path and os.path.exists(config_path):
            try:
                return cls._from_file(config_path)
            except (yaml.YAMLError, TypeError, ValueError) as e:
                raise ValueError(f"Invalid config file {config_path}: {e}") from e

        # No config file found - create default in home directory
        config = cls()
        config._create_default_config()
        return config

    @classmethod
    def _from_file(cls, config_path: str) -> "Config":
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError("top level must be a mapping")
        return cls(
            models_dir=str(data.get("models_dir", "models")),
            model_repo=str(data.get("model_repo") or ""),
            capture_mode=data.get("capture_mode", "fullscreen"),
            capture_region=parse_region(data.get("capture_region", (0, 0, 800, 600))),
            refresh_rate=float(data.get("refresh_rate", 0.5)),
            ocr_language=data.get("ocr_language", "eng"),
            ocr_psm=int(data.get("ocr_psm", 6)),
            bos_id=int(data.get("bos_id", 0)),
            eos_id=int(data.get("eos_id", 2)),
            max_decode_steps=int(data.get("max_decode_steps", 128)),
            intra_op_threads=int(data.get("intra_op_threads", 0)),
            cache_size=int(data.get("cache_size", 200)),
            empty_placeholder=str(data.get("empty_placeholder", "...")),
            cancel_key=str(data.get("cancel_key", "esc")),
            font_size=int(data.get("font_size", 24)),
            font_color=data.get("font_color", "#FFFF00"),
            background_color=data.get("background_color", "#000000"),
            overlay_alpha=float(data.get("overlay_alpha", 0.86)),
        )

    def _create_default_config(self) -> None:
        """Create a default config file in the user's home directory."""
        config_dir = Path.home() / CONFIG_DIR_NAME
        config_path = config_dir / CONFIG_FILE_NAME

        if config_path.exists():
            return

        config_dir.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            f.write(DEFAULT_CONFIG)

        print(f"Created default config at: {config_path}")

    @property
    def thread_count(self) -> int:
        """Intra-op thread count, resolving 0 to the number of CPUs."""
        if self.intra_op_threads > 0:
            return self.intra_op_threads
        return os.cpu_count() or 1


def parse_region(value) -> tuple[int, int, int, int]:
    """Parse a region given as "L,T,R,B" or a 4-item sequence.

    Raises:
        ValueError: If the value does not hold exactly four integers.
    """
    if isinstance(value, str):
        parts = [p.strip() for p in value.split(",")]
    else:
        parts = list(value)
    if len(parts) != 4:
        raise ValueError(f"region must have 4 values (left, top, right, bottom), got {value!r}")
    left, top, right, bottom = (int(p) for p in parts)
    return left, top, right, bottom
