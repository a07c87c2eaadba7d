"""Shared interface for text extraction backends."""

from enum import StrEnum
from typing import Protocol

import numpy as np


class ExtractionMethod(StrEnum):
    """Tag identifying which cascade stage produced a result."""

    NATIVE_TEXT = "native_text"
    CLOUD_VISION = "cloud_vision"
    SELF_HOSTED_OCR = "self_hosted_ocr"
    LOCAL_OCR_FALLBACK = "local_ocr_fallback"


class OCRBackend(Protocol):
    """An OCR engine that turns one page image into text.

    Implementations return an empty string when no text is found and raise
    :class:`~certscan.exceptions.OCRBackendError` subclasses on failure.
    """

    method: ExtractionMethod

    def extract_text(self, image: np.ndarray) -> str: ...
