"""Text recognition using Tesseract OCR."""

from . import log
from .capture import BGRAFrame, bgra_to_rgb
from .errors import ModelLoadError, RecognitionError

logger = log.get_logger()

DEFAULT_LANGUAGE = "eng"
DEFAULT_PSM = 6  # Assume a uniform block of text


class TesseractRecognizer:
    """Extracts text from captured frames with Tesseract.

    Recognized lines are joined with single spaces so a multi-line block is
    translated as one sentence sequence.
    """

    def __init__(self, language: str = DEFAULT_LANGUAGE, psm: int = DEFAULT_PSM):
        """Initialize the recognizer.

        Args:
            language: Tesseract language code (e.g. "eng", "fra").
            psm: Tesseract page segmentation mode.
        """
        self._language = language
        self._psm = psm
        self._loaded = False

    def load(self) -> None:
        """Verify Tesseract is available.

        Raises:
            ModelLoadError: If Tesseract is not installed or the language is missing.
        """
        if self._loaded:
            return

        import pytesseract

        try:
            version = pytesseract.get_tesseract_version()
            languages = pytesseract.get_languages(config="")
        except Exception as e:
            raise ModelLoadError(
                "tesseract",
                "OCR engine",
                "Tesseract is not installed or not in PATH",
            ) from e

        if self._language not in languages:
            raise ModelLoadError(
                "tesseract",
                "OCR engine",
                f"language pack '{self._language}' is not installed",
            )

        logger.info("tesseract ready", version=str(version), language=self._language)
        self._loaded = True

    def is_loaded(self) -> bool:
        """Check if Tesseract has been verified."""
        return self._loaded

    def recognize(self, image: BGRAFrame) -> str:
        """Extract text from a frame.

        Args:
            image: Numpy array (H, W, 4) in BGRA format.

        Returns:
            Recognized text with whitespace collapsed; empty if none.

        Raises:
            RecognitionError: If Tesseract fails on this frame.
        """
        if not self._loaded:
            self.load()

        import pytesseract
        from PIL import Image

        pil_image = Image.fromarray(bgra_to_rgb(image))
        try:
            text = pytesseract.image_to_string(
                pil_image,
                lang=self._language,
                config=f"--psm {self._psm}",
            )
        except (pytesseract.TesseractError, RuntimeError, OSError) as e:
            # RuntimeError: timeout; OSError: binary gone (TesseractNotFoundError)
            raise RecognitionError(str(e) or type(e).__name__) from e

        return " ".join(text.split())
