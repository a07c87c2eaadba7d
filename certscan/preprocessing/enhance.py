"""Grayscale conversion, contrast normalization, sharpening, and binarization.

These steps make certificate scans and photos easier to read for OCR
engines: credentials often have colored backgrounds, watermarks, and
low-contrast decorative fonts.
"""

import cv2
import numpy as np

from certscan.utils.logger import get_logger

logger = get_logger(__name__)


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """Convert a BGR or BGRA image to grayscale; grayscale input is returned as-is.

    Args:
        image: Input image.

    Returns:
        Single-channel image.
    """
    if image.ndim == 2:
        return image
    if image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)


def normalize_contrast(
    image: np.ndarray,
    clip_limit: float = 2.0,
    tile_size: int = 8,
) -> np.ndarray:
    """Equalize local contrast with CLAHE.

    Args:
        image: Input image (color or grayscale).
        clip_limit: Threshold for contrast limiting.
        tile_size: Size of the grid for histogram equalization.

    Returns:
        Contrast-normalized grayscale image.
    """
    clahe = cv2.createCLAHE(clipLimit=clip_limit, tileGridSize=(tile_size, tile_size))
    result = clahe.apply(to_grayscale(image))
    logger.debug("Applied CLAHE (clip=%.1f, tile=%d)", clip_limit, tile_size)
    return result


def sharpen(image: np.ndarray, amount: float = 1.0, sigma: float = 1.0) -> np.ndarray:
    """Sharpen glyph edges with an unsharp mask.

    Args:
        image: Input image.
        amount: Strength of the sharpening; 0 disables it.
        sigma: Gaussian blur sigma used to build the mask.

    Returns:
        Sharpened image with the same shape and dtype.
    """
    if amount <= 0:
        return image
    blurred = cv2.GaussianBlur(image, (0, 0), sigma)
    result = cv2.addWeighted(image, 1.0 + amount, blurred, -amount, 0)
    logger.debug("Applied unsharp mask (amount=%.1f, sigma=%.1f)", amount, sigma)
    return result


def binarize(image: np.ndarray, method: str = "adaptive") -> np.ndarray:
    """Binarize an image to black text on white.

    Args:
        image: Input image (color or grayscale).
        method: ``"adaptive"`` (Gaussian adaptive threshold) or ``"otsu"``.

    Returns:
        Binary image with pixel values 0 or 255.

    Raises:
        ValueError: If an unsupported method is specified.
    """
    gray = to_grayscale(image)
    if method == "otsu":
        _, result = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)
    elif method == "adaptive":
        result = cv2.adaptiveThreshold(
            gray, 255, cv2.ADAPTIVE_THRESH_GAUSSIAN_C, cv2.THRESH_BINARY, 31, 10
        )
    else:
        raise ValueError(f"Unsupported binarize method: {method}")
    logger.debug("Applied %s binarization", method)
    return result
