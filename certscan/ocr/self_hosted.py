"""Self-hosted OCR backend speaking to a PaddleOCR HTTP service.

The service accepts ``POST {base_url}/analyze`` with a base64 image and
answers either ``{"text": "..."}`` or ``{"text": [{"text": ..,
"confidence": ..}, ...]}``.
"""

import base64

import numpy as np
import requests

from certscan.exceptions import (
    BackendAuthError,
    BackendQuotaError,
    BackendTimeoutError,
    BackendUnavailableError,
)
from certscan.utils.config import SelfHostedOCRConfig
from certscan.utils.logger import get_logger

from .base import ExtractionMethod
from .document_loader import encode_png

logger = get_logger(__name__)

_BACKEND = "self_hosted_ocr"


class SelfHostedOCRBackend:
    """OCR through an independently deployed PaddleOCR service.

    Args:
        config: Service URL and per-call timeout.
        session: HTTP session to reuse; a new one is created if omitted.
    """

    method = ExtractionMethod.SELF_HOSTED_OCR

    def __init__(
        self,
        config: SelfHostedOCRConfig | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.config = config or SelfHostedOCRConfig()
        self.session = session or requests.Session()

    def extract_text(self, image: np.ndarray) -> str:
        """Recognize the text of one page image.

        Args:
            image: Preprocessed page image.

        Returns:
            Recognized lines joined by newlines.

        Raises:
            OCRBackendError: On timeouts, connection, auth, quota, or
                server errors.
        """
        return self.extract_with_confidence(image)[0]

    def extract_with_confidence(self, image: np.ndarray) -> tuple[str, float]:
        """Recognize text and report the service's mean line confidence.

        Args:
            image: Preprocessed page image.

        Returns:
            Tuple of (text, confidence).
        """
        payload = self._post(image)
        lines = payload.get("text", "")

        if isinstance(lines, list):
            text = "\n".join(str(line.get("text", "")) for line in lines)
            scores = [float(line.get("confidence", 0.0)) for line in lines]
            confidence = sum(scores) / len(scores) if scores else 0.0
        else:
            text = str(lines or "")
            confidence = float(payload.get("confidence", 0.0))

        logger.info(
            "Self-hosted OCR returned %d characters (confidence %.2f)",
            len(text),
            confidence,
        )
        return text, confidence

    def _post(self, image: np.ndarray) -> dict:
        url = f"{self.config.base_url.rstrip('/')}/analyze"
        body = {
            "image": base64.b64encode(encode_png(image)).decode("ascii"),
            "return_confidence": True,
        }
        try:
            response = self.session.post(
                url, json=body, timeout=self.config.timeout_seconds
            )
        except requests.Timeout as exc:
            raise BackendTimeoutError(_BACKEND, f"timed out calling {url}") from exc
        except requests.RequestException as exc:
            raise BackendUnavailableError(_BACKEND, str(exc)) from exc

        if response.status_code in (401, 403):
            raise BackendAuthError(_BACKEND, f"HTTP {response.status_code}")
        if response.status_code == 429:
            raise BackendQuotaError(_BACKEND, "HTTP 429")
        if not response.ok:
            raise BackendUnavailableError(_BACKEND, f"HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise BackendUnavailableError(_BACKEND, "invalid JSON response") from exc
        if not isinstance(payload, dict):
            raise BackendUnavailableError(_BACKEND, "unexpected response shape")
        return payload
