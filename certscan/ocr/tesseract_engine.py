"""Tesseract OCR engine used as the local, offline fallback backend.

Provides page text with an average word confidence and needs no network
access.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import numpy as np
import pytesseract
from PIL import Image

from certscan.exceptions import OCRBackendError
from certscan.utils.logger import get_logger

from .base import ExtractionMethod

logger = get_logger(__name__)


@dataclass
class OCRResult:
    """OCR result for a document page."""

    text: str
    language: str
    confidence: float
    word_count: int


class TesseractEngine:
    """Wrapper around Tesseract OCR for offline text extraction.

    Args:
        tesseract_cmd: Path to the Tesseract executable.
            If ``None``, uses the system default.
        default_lang: Default OCR language code.
        psm: Tesseract page segmentation mode.
    """

    method = ExtractionMethod.LOCAL_OCR_FALLBACK

    def __init__(
        self,
        tesseract_cmd: str | None = None,
        default_lang: str = "eng",
        psm: int = 3,
    ) -> None:
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.default_lang = default_lang
        self.psm = psm

    def extract_text(self, image: np.ndarray, lang: str | None = None) -> str:
        """Extract page text from an image with a single Tesseract pass.

        Args:
            image: Preprocessed page image as a numpy array.
            lang: OCR language code. Defaults to the engine default.

        Returns:
            Recognized text, empty if nothing was found.

        Raises:
            OCRBackendError: If Tesseract is missing or fails.
        """
        lang = lang or self.default_lang
        text = self._run(pytesseract.image_to_string, image, lang)
        return text.strip()

    def recognize(self, image: np.ndarray, lang: str | None = None) -> OCRResult:
        """Run OCR and report the average word confidence.

        Costs a second Tesseract pass over ``extract_text``.

        Args:
            image: Input image as a numpy array.
            lang: OCR language code. Defaults to the engine default.

        Returns:
            OCRResult containing text and confidence.

        Raises:
            OCRBackendError: If Tesseract is missing or fails.
        """
        lang = lang or self.default_lang
        text = self.extract_text(image, lang)
        data = self._run(
            pytesseract.image_to_data,
            image,
            lang,
            output_type=pytesseract.Output.DICT,
        )

        confidences = [
            float(conf)
            for conf, word in zip(data["conf"], data["text"])
            if float(conf) > 0 and word.strip()
        ]
        avg_conf = sum(confidences) / len(confidences) / 100.0 if confidences else 0.0

        logger.info(
            "Tesseract extracted %d words with average confidence %.2f",
            len(confidences),
            avg_conf,
        )
        return OCRResult(
            text=text,
            language=lang,
            confidence=avg_conf,
            word_count=len(confidences),
        )

    def _run(
        self, func: Callable[..., Any], image: np.ndarray, lang: str, **kwargs: Any
    ) -> Any:
        try:
            return func(
                Image.fromarray(image),
                lang=lang,
                config=f"--psm {self.psm}",
                **kwargs,
            )
        except pytesseract.TesseractNotFoundError as exc:
            raise OCRBackendError("tesseract", "executable not found") from exc
        except pytesseract.TesseractError as exc:
            raise OCRBackendError("tesseract", str(exc)) from exc
