"""Noise reduction and skew correction for scanned credentials."""

import cv2
import numpy as np

from certscan.utils.logger import get_logger

from .enhance import to_grayscale

logger = get_logger(__name__)

_MAX_SKEW_DEGREES = 45.0


def denoise(image: np.ndarray, method: str = "bilateral") -> np.ndarray:
    """Reduce scanner and camera noise.

    Args:
        image: Input image.
        method: ``"bilateral"`` (edge preserving), ``"gaussian"``, or
            ``"median"`` (salt-and-pepper noise).

    Returns:
        Denoised image with the same shape.

    Raises:
        ValueError: If an unsupported method is specified.
    """
    if method == "bilateral":
        result = cv2.bilateralFilter(image, 9, 75, 75)
    elif method == "gaussian":
        result = cv2.GaussianBlur(image, (5, 5), 0)
    elif method == "median":
        result = cv2.medianBlur(image, 3)
    else:
        raise ValueError(f"Unsupported denoise method: {method}")
    logger.debug("Applied %s denoise", method)
    return result


def estimate_skew(image: np.ndarray) -> float:
    """Estimate the skew of text lines in degrees.

    Uses a probabilistic Hough transform on Canny edges and takes the
    median angle of near-horizontal lines.

    Args:
        image: Input image (color or grayscale).

    Returns:
        Estimated skew angle; 0.0 when no lines are found.
    """
    edges = cv2.Canny(to_grayscale(image), 50, 150, apertureSize=3)
    lines = cv2.HoughLinesP(
        edges, 1, np.pi / 180, 100, minLineLength=100, maxLineGap=10
    )
    if lines is None:
        return 0.0

    angles = [
        float(np.degrees(np.arctan2(y2 - y1, x2 - x1)))
        for x1, y1, x2, y2 in lines[:, 0]
    ]
    horizontal = [a for a in angles if abs(a) < _MAX_SKEW_DEGREES]
    if not horizontal:
        return 0.0
    return float(np.median(horizontal))


def deskew(image: np.ndarray, angle_threshold: float = 0.5) -> np.ndarray:
    """Rotate the image so text lines are horizontal.

    Args:
        image: Input image (color or grayscale).
        angle_threshold: Minimum skew (degrees) that triggers a rotation.

    Returns:
        Deskewed image with the same shape and dtype.
    """
    angle = estimate_skew(image)
    if abs(angle) < angle_threshold:
        return image

    h, w = image.shape[:2]
    matrix = cv2.getRotationMatrix2D((w // 2, h // 2), angle, 1.0)
    result = cv2.warpAffine(
        image,
        matrix,
        (w, h),
        flags=cv2.INTER_CUBIC,
        borderMode=cv2.BORDER_REPLICATE,
    )
    logger.info("Corrected skew of %.2f degrees", angle)
    return result
