"""Shared test fixtures for the credential pipeline test suite."""

import io
from datetime import date
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from certscan.scoring.scorer import ConfidenceScorer

CERTIFICATE_TEXT = """STANFORD UNIVERSITY
Certificate of Completion
This is to certify that
Jane Doe
has successfully completed the Machine Learning course
Issued on March 15, 2024
Certificate ID: ML-2024-0042
"""


@pytest.fixture
def sample_image() -> np.ndarray:
    """Create a simple synthetic grayscale test image."""
    image = np.zeros((200, 300), dtype=np.uint8)
    image[50:150, 50:250] = 255
    return image


@pytest.fixture
def sample_color_image() -> np.ndarray:
    """Create a simple synthetic BGR test image."""
    image = np.zeros((200, 300, 3), dtype=np.uint8)
    image[50:150, 50:250] = (255, 255, 255)
    return image


@pytest.fixture
def png_bytes(sample_color_image: np.ndarray) -> bytes:
    """Encode the synthetic color image as PNG bytes."""
    buf = io.BytesIO()
    Image.fromarray(sample_color_image).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def certificate_text() -> str:
    """Recognized text of a typical course completion certificate."""
    return CERTIFICATE_TEXT


@pytest.fixture
def scorer() -> ConfidenceScorer:
    """Scorer with a fixed clock."""
    return ConfidenceScorer(today=lambda: date(2025, 6, 1))


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_dir(project_root: Path) -> Path:
    """Return the configs directory path."""
    return project_root / "configs"
