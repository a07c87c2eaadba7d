"""Entry points of the credential document pipeline.

``DocumentPipeline`` wires every component from an :class:`AppConfig`;
``process_document`` and ``normalize`` are convenience wrappers for
one-off calls.
"""

import threading
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any

from certscan.classification.document_type import DocumentTypeClassifier
from certscan.exceptions import CertScanError
from certscan.extraction.base import FieldStructurer
from certscan.extraction.llm_structurer import GeminiFieldStructurer
from certscan.extraction.rule_extractor import RuleFieldStructurer
from certscan.normalization.normalizer import (
    FieldNormalizer,
    NormalizedFields,
    normalize,
)
from certscan.ocr.cascade import ExtractionCascade
from certscan.ocr.cloud_vision import CloudVisionBackend
from certscan.ocr.document_loader import DocumentLoader
from certscan.ocr.pdf_handler import PDFHandler
from certscan.ocr.self_hosted import SelfHostedOCRBackend
from certscan.ocr.tesseract_engine import TesseractEngine
from certscan.preprocessing.pipeline import PreprocessingPipeline
from certscan.scoring.scorer import ConfidenceScorer, ExtractionResult
from certscan.utils.config import AppConfig
from certscan.utils.logger import get_document_logger, get_logger

__all__ = [
    "BatchItemResult",
    "DocumentPipeline",
    "normalize",
    "process_document",
]

logger = get_logger(__name__)


@dataclass(frozen=True)
class BatchItemResult:
    """Outcome of one document in a batch: a result or the error it raised."""

    index: int
    result: ExtractionResult | None = None
    error: CertScanError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class DocumentPipeline:
    """Credential extraction and normalization built from configuration.

    Args:
        config: Application configuration. Defaults are used if omitted.
    """

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config = config or AppConfig()
        pdf_handler = PDFHandler(
            dpi=self.config.ocr.pdf_dpi, max_pages=self.config.ocr.max_pages
        )
        self.cascade = ExtractionCascade(
            structurer=self._build_structurer(),
            scorer=ConfidenceScorer(self.config.scoring),
            classifier=DocumentTypeClassifier(),
            pdf_handler=pdf_handler,
            loader=DocumentLoader(pdf_handler),
            preprocessor=PreprocessingPipeline(self.config.preprocessing),
            cloud=(
                CloudVisionBackend(self.config.cloud_vision)
                if self.config.cloud_vision.enabled
                else None
            ),
            self_hosted=(
                SelfHostedOCRBackend(self.config.self_hosted)
                if self.config.self_hosted.enabled
                else None
            ),
            local=TesseractEngine(
                tesseract_cmd=self.config.ocr.tesseract_cmd,
                default_lang=self.config.ocr.default_lang,
                psm=self.config.ocr.psm,
            ),
            config=self.config.cascade,
        )
        self.normalizer = FieldNormalizer(self.config.normalization)

    def _build_structurer(self) -> FieldStructurer:
        rules = RuleFieldStructurer()
        if self.config.structurer.use_llm:
            return GeminiFieldStructurer(self.config.structurer, fallback=rules)
        return rules

    def process_document(
        self,
        data: bytes,
        mime_type: str,
        cancel_event: threading.Event | None = None,
    ) -> ExtractionResult:
        """Run the extraction cascade on one uploaded document.

        Args:
            data: Raw file bytes.
            mime_type: Declared MIME type of the upload.
            cancel_event: Optional event that aborts at the next stage.

        Returns:
            Best-effort scored extraction result.

        Raises:
            UnprocessableDocumentError: If the bytes cannot be opened.
            ProcessingCancelledError: If ``cancel_event`` is set.
        """
        logger.info("Processing %d byte document (%s)", len(data), mime_type)
        result = self.cascade.process(data, mime_type, cancel_event)
        logger.info(
            "Extracted via %s with confidence %.2f (review=%s)",
            result.extraction_method.value,
            result.confidence_score,
            result.requires_review,
        )
        return result

    def normalize(self, fields: Mapping[str, Any]) -> NormalizedFields:
        return self.normalizer.normalize(fields)

    def process_batch(
        self,
        documents: Iterable[tuple[bytes, str]],
        max_workers: int = 4,
        cancel_event: threading.Event | None = None,
    ) -> list[BatchItemResult]:
        """Process independent documents on a bounded worker pool.

        Per-document pipeline errors are reported in the matching item
        instead of aborting the batch.

        Args:
            documents: ``(data, mime_type)`` pairs.
            max_workers: Upper bound on concurrently processed documents.
            cancel_event: Shared cancellation event for every document.

        Returns:
            One item per document, in input order.
        """
        items = list(documents)
        logger.info("Processing batch of %d documents (%d workers)", len(items), max_workers)

        def run(index: int, data: bytes, mime_type: str) -> BatchItemResult:
            doc_logger = get_document_logger(logger, index)
            doc_logger.debug("Started (%s)", mime_type)
            try:
                return BatchItemResult(
                    index, result=self.process_document(data, mime_type, cancel_event)
                )
            except CertScanError as exc:
                doc_logger.warning("Failed: %s", exc)
                return BatchItemResult(index, error=exc)

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [
                executor.submit(run, i, data, mime_type)
                for i, (data, mime_type) in enumerate(items)
            ]
            return [future.result() for future in futures]


def process_document(
    data: bytes, mime_type: str, config: AppConfig | None = None
) -> ExtractionResult:
    """Process one document with a pipeline built from ``config``."""
    return DocumentPipeline(config).process_document(data, mime_type)
