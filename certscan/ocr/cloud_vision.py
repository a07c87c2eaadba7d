"""Google Cloud Vision OCR backend.

Sends preprocessed page images to ``document_text_detection`` and maps
Google API failures onto the pipeline's backend error taxonomy so that
authentication and quota problems stay distinguishable from "no text".
"""

from dataclasses import dataclass, field

import numpy as np
from google.api_core import exceptions as google_exceptions
from google.api_core.client_options import ClientOptions
from google.auth import exceptions as auth_exceptions
from google.cloud import vision

from certscan.exceptions import (
    BackendAuthError,
    BackendQuotaError,
    BackendTimeoutError,
    BackendUnavailableError,
    OCRBackendError,
)
from certscan.utils.config import CloudVisionConfig
from certscan.utils.logger import get_logger

from .base import ExtractionMethod
from .document_loader import encode_png

logger = get_logger(__name__)

_BACKEND = "cloud_vision"


@dataclass
class VisionAnnotation:
    """Document-structure annotation returned by Cloud Vision."""

    text: str
    logos: list[str] = field(default_factory=list)
    block_count: int = 0


class CloudVisionBackend:
    """High-quality cloud OCR through Google Cloud Vision.

    The API client is created lazily on first use so that constructing the
    cascade never requires credentials.

    Args:
        config: Cloud Vision settings (API key, per-call timeout).
    """

    method = ExtractionMethod.CLOUD_VISION

    def __init__(self, config: CloudVisionConfig | None = None) -> None:
        self.config = config or CloudVisionConfig()
        self._client: vision.ImageAnnotatorClient | None = None

    def _get_client(self) -> vision.ImageAnnotatorClient:
        if self._client is None:
            options = (
                ClientOptions(api_key=self.config.api_key)
                if self.config.api_key
                else None
            )
            try:
                self._client = vision.ImageAnnotatorClient(client_options=options)
            except auth_exceptions.DefaultCredentialsError as exc:
                raise BackendAuthError(_BACKEND, "credentials not configured") from exc
        return self._client

    def extract_text(self, image: np.ndarray) -> str:
        """Recognize the text of one page image.

        Args:
            image: Preprocessed page image.

        Returns:
            Full recognized text, empty if the page has no text.

        Raises:
            OCRBackendError: On authentication, quota, timeout, or
                service failures.
        """
        response = self._annotate(image, [vision.Feature.Type.DOCUMENT_TEXT_DETECTION])
        if response.full_text_annotation and response.full_text_annotation.text:
            return response.full_text_annotation.text
        if response.text_annotations:
            return response.text_annotations[0].description
        return ""

    def extract_structured(self, image: np.ndarray) -> VisionAnnotation:
        """Recognize text together with detected logos and text blocks.

        Args:
            image: Preprocessed page image.

        Returns:
            Text, logo descriptions, and the number of text blocks.
        """
        response = self._annotate(
            image,
            [
                vision.Feature.Type.DOCUMENT_TEXT_DETECTION,
                vision.Feature.Type.LOGO_DETECTION,
            ],
        )
        annotation = response.full_text_annotation
        pages = annotation.pages if annotation else []
        return VisionAnnotation(
            text=annotation.text if annotation else "",
            logos=[logo.description for logo in response.logo_annotations],
            block_count=len(pages[0].blocks) if pages else 0,
        )

    def _annotate(
        self, image: np.ndarray, feature_types: list[vision.Feature.Type]
    ) -> vision.AnnotateImageResponse:
        client = self._get_client()
        request = vision.AnnotateImageRequest(
            image=vision.Image(content=encode_png(image)),
            features=[vision.Feature(type_=t) for t in feature_types],
        )
        try:
            response = client.annotate_image(
                request, timeout=self.config.timeout_seconds
            )
        except (
            google_exceptions.Unauthenticated,
            google_exceptions.PermissionDenied,
        ) as exc:
            raise BackendAuthError(_BACKEND, str(exc)) from exc
        except google_exceptions.ResourceExhausted as exc:
            raise BackendQuotaError(_BACKEND, str(exc)) from exc
        except google_exceptions.DeadlineExceeded as exc:
            raise BackendTimeoutError(_BACKEND, str(exc)) from exc
        except google_exceptions.GoogleAPIError as exc:
            raise BackendUnavailableError(_BACKEND, str(exc)) from exc

        if response.error.message:
            raise OCRBackendError(_BACKEND, response.error.message)

        logger.info(
            "Cloud Vision returned %d characters",
            len(response.full_text_annotation.text)
            if response.full_text_annotation
            else 0,
        )
        return response
