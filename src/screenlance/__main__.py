"""Main entry point for ScreenLance.

This module is executed when running:
- python -m screenlance
- screenlance (via pyproject.toml entry point)
"""

import os
import sys

# Suppress HuggingFace token warning (public models don't need auth)
os.environ["HF_HUB_DISABLE_IMPLICIT_TOKEN"] = "1"

import argparse

from . import log
from .capture import CaptureRegion, ScreenCapture, primary_monitor_region
from .config import Config, parse_region
from .errors import ModelLoadError, RegionTooSmallError
from .keyboard import CancelToken, cancel_on_key
from .loop import TranslationLoop
from .models import locate_models
from .ocr import TesseractRecognizer
from .overlay import ConsoleOverlay
from .translation import Engine, Tokenizer, TranslationService

logger = log.get_logger()


def _parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Offline screen translator: OCR a screen region and translate it locally"
    )
    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to config file (default: config.yml)"
    )
    parser.add_argument(
        "--models-dir", "-m",
        type=str,
        default=None,
        help="Directory with source.spm, target.spm, encoder_model.onnx, decoder_model.onnx"
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--fullscreen", "-f",
        action="store_true",
        help="Capture the whole primary monitor"
    )
    mode.add_argument(
        "--region", "-r",
        type=str,
        default=None,
        help="Capture region as LEFT,TOP,RIGHT,BOTTOM in screen pixels"
    )
    parser.add_argument(
        "--refresh-rate",
        type=float,
        default=None,
        help="Seconds between captures (overrides config)"
    )
    parser.add_argument(
        "--console",
        action="store_true",
        help="Print translations to the console instead of showing an overlay"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging with per-tick timings"
    )

    return parser.parse_args(argv)


def _apply_overrides(config: Config, args: argparse.Namespace) -> None:
    """Override config values with command-line arguments."""
    if args.models_dir:
        config.models_dir = args.models_dir
    if args.fullscreen:
        config.capture_mode = "fullscreen"
    if args.region:
        config.capture_mode = "region"
        config.capture_region = parse_region(args.region)
    if args.refresh_rate is not None:
        config.refresh_rate = args.refresh_rate


def resolve_region(config: Config) -> CaptureRegion:
    """Turn the configured capture mode into a validated region.

    Raises:
        RegionTooSmallError: If the region is below the minimum size.
        ValueError: If the capture mode is unknown.
    """
    if config.capture_mode == "fullscreen":
        region = primary_monitor_region()
    elif config.capture_mode == "region":
        region = CaptureRegion.from_bounds(*config.capture_region)
    else:
        raise ValueError(f"Unknown capture mode: {config.capture_mode!r} (expected 'fullscreen' or 'region')")
    return region.validate()


def build_service(config: Config, debug: bool = False) -> TranslationService:
    """Load vocabularies and model graphs.

    Raises:
        ModelLoadError: If any model file is missing or invalid.
    """
    files = locate_models(config.models_dir, config.model_repo)
    logger.info("loading translation model", models_dir=str(files.encoder.parent))

    tokenizer = Tokenizer(files.source_vocab, files.target_vocab)
    engine = Engine.load(files.encoder, files.decoder, threads=config.thread_count, debug=debug)
    return TranslationService(
        tokenizer,
        engine,
        bos_id=config.bos_id,
        eos_id=config.eos_id,
        max_decode_steps=config.max_decode_steps,
        cache_size=config.cache_size,
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Process exit code.
    """
    args = _parse_arguments(argv)
    log.configure(debug=args.debug)

    try:
        config = Config.load(args.config)
        _apply_overrides(config, args)
    except ValueError as e:
        logger.error("invalid configuration", error=str(e))
        return 1

    logger.info(
        "screenlance starting",
        mode=config.capture_mode,
        models_dir=config.models_dir,
        refresh_rate=config.refresh_rate,
    )

    # Region first: a bad selection must not cost a model load
    try:
        region = resolve_region(config)
    except RegionTooSmallError as e:
        logger.warning("region too small", error=str(e))
        return 0
    except ValueError as e:
        logger.error("invalid capture region", error=str(e))
        return 1

    try:
        service = build_service(config, debug=args.debug)
        recognizer = TesseractRecognizer(config.ocr_language, config.ocr_psm)
        recognizer.load()
    except ModelLoadError as e:
        logger.error("initialization failed", error=str(e))
        return 1

    if args.console:
        overlay = ConsoleOverlay()
    else:
        from .overlay.tk import TkOverlay

        overlay = TkOverlay(
            font_size=config.font_size,
            font_color=config.font_color,
            background_color=config.background_color,
            alpha=config.overlay_alpha,
        )

    capture = ScreenCapture()
    cancel = CancelToken()
    keyboard_listener = cancel_on_key(cancel, config.cancel_key)
    keyboard_listener.start()

    loop = TranslationLoop(
        region=region,
        capturer=capture,
        recognizer=recognizer,
        translator=service,
        overlay=overlay,
        events=overlay,
        cancel=cancel,
        refresh_rate=config.refresh_rate,
        empty_placeholder=config.empty_placeholder,
    )

    logger.info("press the cancel key to quit", key=config.cancel_key)
    try:
        loop.run()
    except KeyboardInterrupt:
        logger.info("interrupted by user")
    finally:
        keyboard_listener.stop()
        capture.close()
        overlay.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
