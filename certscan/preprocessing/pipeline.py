"""Configurable image preprocessing applied before every OCR stage.

Converts pages to grayscale, then optionally deskews, denoises,
normalizes contrast, sharpens and binarizes, recording quality metrics.
The pipeline is deterministic and has no effect on confidence scoring.
"""

from dataclasses import dataclass

import cv2
import numpy as np

from certscan.utils.config import PreprocessingConfig
from certscan.utils.logger import get_logger

from .cleanup import denoise, deskew
from .enhance import binarize, normalize_contrast, sharpen, to_grayscale

logger = get_logger(__name__)


@dataclass
class QualityMetrics:
    """Before/after image quality measurements."""

    sharpness_before: float
    sharpness_after: float
    contrast_before: float
    contrast_after: float


def calculate_sharpness(image: np.ndarray) -> float:
    """Calculate image sharpness as the variance of the Laplacian."""
    return float(cv2.Laplacian(to_grayscale(image), cv2.CV_64F).var())


def calculate_contrast(image: np.ndarray) -> float:
    """Calculate image contrast as the standard deviation of intensities."""
    return float(to_grayscale(image).std())


class PreprocessingPipeline:
    """Prepares page images for OCR.

    Args:
        config: Preprocessing configuration controlling which steps to apply.
    """

    def __init__(self, config: PreprocessingConfig | None = None) -> None:
        self.config = config or PreprocessingConfig()

    def process(self, image: np.ndarray) -> tuple[np.ndarray, QualityMetrics]:
        """Run the preprocessing steps on one page.

        Args:
            image: Page image (BGR or grayscale).

        Returns:
            Tuple of (grayscale processed image, quality metrics).
        """
        sharpness_before = calculate_sharpness(image)
        contrast_before = calculate_contrast(image)

        result = to_grayscale(image)

        if self.config.deskew_enabled:
            result = deskew(result)

        if self.config.denoise_enabled:
            result = denoise(result, method=self.config.denoise_method)

        if self.config.contrast_enabled:
            result = normalize_contrast(
                result,
                clip_limit=self.config.clahe_clip_limit,
                tile_size=self.config.clahe_tile_size,
            )

        if self.config.sharpen_enabled:
            result = sharpen(result, amount=self.config.sharpen_amount)

        if self.config.binarize_enabled:
            result = binarize(result, method=self.config.binarize_method)

        metrics = QualityMetrics(
            sharpness_before=sharpness_before,
            sharpness_after=calculate_sharpness(result),
            contrast_before=contrast_before,
            contrast_after=calculate_contrast(result),
        )
        logger.info(
            "Preprocessing complete: sharpness %.1f->%.1f, contrast %.1f->%.1f",
            metrics.sharpness_before,
            metrics.sharpness_after,
            metrics.contrast_before,
            metrics.contrast_after,
        )
        return result, metrics
