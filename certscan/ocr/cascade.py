"""Extraction cascade: try extraction backends from cheapest and most
reliable to last resort, returning the first result that is good enough.

Stages, in order:

1. Native PDF text, accepted when the scorer calls it high confidence.
2. Preprocessing of the rendered or decoded page images.
3. Cloud Vision OCR, accepted above ``cloud_accept_threshold``.
4. Self-hosted OCR, accepted above ``self_hosted_accept_threshold``.
5. Local Tesseract OCR, always accepted.

Failures of stages 1, 3 and 4 are logged and fall through. A PDF whose
pages cannot be rendered returns its native text result when it has one.
Only input that no stage can open at all raises.
"""

import threading

import numpy as np

from certscan.classification.document_type import DocumentTypeClassifier
from certscan.exceptions import ProcessingCancelledError, UnprocessableDocumentError
from certscan.extraction.base import FieldStructurer
from certscan.preprocessing.pipeline import PreprocessingPipeline
from certscan.scoring.scorer import ConfidenceScorer, ExtractionResult
from certscan.utils.config import CascadeConfig
from certscan.utils.logger import get_logger

from .base import ExtractionMethod, OCRBackend
from .document_loader import PDF_MIME_TYPE, DocumentLoader
from .pdf_handler import PDFHandler
from .tesseract_engine import TesseractEngine

logger = get_logger(__name__)

PAGE_SEPARATOR = "\n\n"


class ExtractionCascade:
    """Orchestrates the extraction stages for one document at a time.

    Holds no per-document state, so one instance can serve concurrent
    calls as long as its collaborators can.

    Args:
        structurer: Turns recognized text into fields.
        scorer: Scores structured fields and owns the high-confidence test.
        classifier: Document type classifier feeding the structurer.
        pdf_handler: Reads embedded PDF text.
        loader: Turns bytes into page images.
        preprocessor: Prepares page images for OCR.
        cloud: Cloud OCR backend, or ``None`` to skip the stage.
        self_hosted: Self-hosted OCR backend, or ``None`` to skip the stage.
        local: Offline OCR backend of last resort.
        config: Acceptance thresholds for the OCR stages.
    """

    def __init__(
        self,
        structurer: FieldStructurer,
        scorer: ConfidenceScorer,
        classifier: DocumentTypeClassifier | None = None,
        pdf_handler: PDFHandler | None = None,
        loader: DocumentLoader | None = None,
        preprocessor: PreprocessingPipeline | None = None,
        cloud: OCRBackend | None = None,
        self_hosted: OCRBackend | None = None,
        local: OCRBackend | None = None,
        config: CascadeConfig | None = None,
    ) -> None:
        self.structurer = structurer
        self.scorer = scorer
        self.classifier = classifier or DocumentTypeClassifier()
        self.pdf_handler = pdf_handler or PDFHandler()
        self.loader = loader or DocumentLoader(self.pdf_handler)
        self.preprocessor = preprocessor or PreprocessingPipeline()
        self.cloud = cloud
        self.self_hosted = self_hosted
        self.local = local or TesseractEngine()
        self.config = config or CascadeConfig()

    def process(
        self,
        data: bytes,
        mime_type: str,
        cancel_event: threading.Event | None = None,
    ) -> ExtractionResult:
        """Extract and score the fields of one document.

        Args:
            data: Raw file bytes.
            mime_type: Declared MIME type of the upload.
            cancel_event: When set, processing stops at the next stage.

        Returns:
            The first accepted result, or the local fallback result.

        Raises:
            UnprocessableDocumentError: If the bytes cannot be opened and
                no native PDF text was read.
            ProcessingCancelledError: If ``cancel_event`` is set.
        """
        _check_cancelled(cancel_event)
        native: ExtractionResult | None = None
        if mime_type.lower() == PDF_MIME_TYPE:
            native = self._try_native_text(data)
            if native is not None and self.scorer.is_high_confidence(native):
                logger.info(
                    "Accepted native PDF text (confidence %.2f)",
                    native.confidence_score,
                )
                return native

        _check_cancelled(cancel_event)
        try:
            pages = self._prepare_pages(data, mime_type)
        except UnprocessableDocumentError as exc:
            if native is None:
                raise
            logger.warning(
                "Pages cannot be rendered, returning native PDF text "
                "(confidence %.2f): %s",
                native.confidence_score,
                exc,
            )
            return native

        stages = (
            (self.cloud, self.config.cloud_accept_threshold),
            (self.self_hosted, self.config.self_hosted_accept_threshold),
        )
        for backend, threshold in stages:
            if backend is None:
                continue
            _check_cancelled(cancel_event)
            result = self._try_backend(backend, pages)
            if result is not None and result.confidence_score > threshold:
                logger.info(
                    "Accepted %s result (confidence %.2f > %.2f)",
                    backend.method.value,
                    result.confidence_score,
                    threshold,
                )
                return result

        _check_cancelled(cancel_event)
        return self._run_local(pages)

    def _try_native_text(self, data: bytes) -> ExtractionResult | None:
        try:
            text = self.pdf_handler.extract_text(data)
            if not text.strip():
                logger.info("PDF has no embedded text")
                return None
            return self._build_result(text, ExtractionMethod.NATIVE_TEXT)
        except Exception as exc:
            logger.warning("Native text extraction failed: %s", exc)
            return None

    def _prepare_pages(self, data: bytes, mime_type: str) -> list[np.ndarray]:
        images = self.loader.load_images(data, mime_type)
        pages = [self.preprocessor.process(image)[0] for image in images]
        logger.debug("Prepared %d page(s) for OCR", len(pages))
        return pages

    def _try_backend(
        self, backend: OCRBackend, pages: list[np.ndarray]
    ) -> ExtractionResult | None:
        try:
            text = self._ocr_pages(backend, pages)
            return self._build_result(text, backend.method)
        except Exception as exc:
            logger.warning("%s stage failed: %s", backend.method.value, exc)
            return None

    def _run_local(self, pages: list[np.ndarray]) -> ExtractionResult:
        try:
            text = self._ocr_pages(self.local, pages)
        except Exception as exc:
            logger.warning("Local OCR failed, scoring empty text: %s", exc)
            text = ""
        result = self._build_result(text, ExtractionMethod.LOCAL_OCR_FALLBACK)
        logger.info(
            "Returning local fallback result (confidence %.2f)",
            result.confidence_score,
        )
        return result

    def _ocr_pages(self, backend: OCRBackend, pages: list[np.ndarray]) -> str:
        texts = [backend.extract_text(page) for page in pages]
        return PAGE_SEPARATOR.join(t.strip() for t in texts if t.strip())

    def _build_result(self, text: str, method: ExtractionMethod) -> ExtractionResult:
        type_info = self.classifier.classify(text)
        fields = self.structurer.structure_text(text, type_info)
        return self.scorer.score_result(fields, method, type_info.type)


def _check_cancelled(cancel_event: threading.Event | None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise ProcessingCancelledError("Document processing was cancelled")
