"""Configuration management for the credential document pipeline.

Loads and validates YAML configuration with sensible defaults for
preprocessing, extraction backends, structuring, scoring, and
normalization settings.
"""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, model_validator

from certscan.scoring.thresholds import (
    CLOUD_VISION_ACCEPT_THRESHOLD,
    HIGH_CONFIDENCE_THRESHOLD,
    REVIEW_THRESHOLD,
    SELF_HOSTED_ACCEPT_THRESHOLD,
)

logger = logging.getLogger(__name__)


DEFAULT_DEGREE_ALIASES: dict[str, str] = {
    "bachelor": "Bachelor",
    "bachelors": "Bachelor",
    "bsc": "Bachelor of Science",
    "ba": "Bachelor of Arts",
    "master": "Master",
    "masters": "Master",
    "msc": "Master of Science",
    "ma": "Master of Arts",
    "phd": "PhD",
    "doctor": "PhD",
    "doctorate": "PhD",
}

DEFAULT_TRUSTED_ISSUERS: list[str] = [
    "coursera",
    "edx",
    "udemy",
    "google",
    "microsoft",
    "amazon",
    "ibm",
    "stanford",
    "mit",
    "harvard",
    "iit",
    "university",
    "college",
    "institute",
]


class PreprocessingConfig(BaseModel):
    """Configuration for image preprocessing before OCR."""

    deskew_enabled: bool = True
    denoise_enabled: bool = True
    denoise_method: str = "bilateral"
    contrast_enabled: bool = True
    clahe_clip_limit: float = 2.0
    clahe_tile_size: int = 8
    sharpen_enabled: bool = True
    sharpen_amount: float = 1.0
    binarize_enabled: bool = False
    binarize_method: str = "adaptive"


class OCRConfig(BaseModel):
    """Configuration for document loading and the local Tesseract engine."""

    tesseract_cmd: str | None = None
    default_lang: str = "eng"
    psm: int = 3
    pdf_dpi: int = 300
    max_pages: int = 3


class CloudVisionConfig(BaseModel):
    """Configuration for the Google Cloud Vision backend."""

    enabled: bool = True
    api_key: str | None = None
    timeout_seconds: float = 20.0


class SelfHostedOCRConfig(BaseModel):
    """Configuration for the self-hosted PaddleOCR service."""

    enabled: bool = True
    base_url: str = "http://localhost:8866"
    timeout_seconds: float = 30.0


class StructurerConfig(BaseModel):
    """Configuration for turning recognized text into fields."""

    use_llm: bool = True
    model_name: str = "gemini-2.0-flash"
    api_key: str | None = None
    timeout_seconds: float = 15.0
    temperature: float = 0.1
    max_output_tokens: int = 500


class ScoringConfig(BaseModel):
    """Configuration for extraction confidence scoring."""

    high_confidence_threshold: float = HIGH_CONFIDENCE_THRESHOLD
    review_threshold: float = REVIEW_THRESHOLD
    date_window_years: int = 10
    trusted_issuers: list[str] = Field(
        default_factory=lambda: list(DEFAULT_TRUSTED_ISSUERS)
    )


class CascadeConfig(BaseModel):
    """Acceptance thresholds for the OCR stages of the extraction cascade."""

    cloud_accept_threshold: float = CLOUD_VISION_ACCEPT_THRESHOLD
    self_hosted_accept_threshold: float = SELF_HOSTED_ACCEPT_THRESHOLD

    @model_validator(mode="after")
    def _check_decreasing(self) -> "CascadeConfig":
        if self.self_hosted_accept_threshold >= self.cloud_accept_threshold:
            raise ValueError(
                "self_hosted_accept_threshold must be below cloud_accept_threshold"
            )
        return self


class NormalizationConfig(BaseModel):
    """Alias tables used by the field normalizer."""

    degree_aliases: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_DEGREE_ALIASES)
    )
    institution_aliases: dict[str, str] = Field(default_factory=dict)


class AppConfig(BaseModel):
    """Top-level application configuration."""

    preprocessing: PreprocessingConfig = Field(default_factory=PreprocessingConfig)
    ocr: OCRConfig = Field(default_factory=OCRConfig)
    cloud_vision: CloudVisionConfig = Field(default_factory=CloudVisionConfig)
    self_hosted: SelfHostedOCRConfig = Field(default_factory=SelfHostedOCRConfig)
    structurer: StructurerConfig = Field(default_factory=StructurerConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    cascade: CascadeConfig = Field(default_factory=CascadeConfig)
    normalization: NormalizationConfig = Field(default_factory=NormalizationConfig)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = Path("configs/config.yaml")

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()
