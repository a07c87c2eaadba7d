"""PDF handling: embedded text extraction and page rendering.

Embedded text is read with pdfplumber (no rendering); pages are rendered
to numpy arrays with pdf2image for the OCR stages.
"""

import io

import numpy as np
import pdfplumber
from pdf2image import convert_from_bytes

from certscan.utils.logger import get_logger

logger = get_logger(__name__)


class PDFHandler:
    """Reads PDF documents for the extraction cascade.

    Args:
        dpi: Resolution for PDF rendering. Higher values produce
            better OCR results but use more memory.
        max_pages: Maximum number of pages read or rendered.
    """

    def __init__(self, dpi: int = 300, max_pages: int = 3) -> None:
        self.dpi = dpi
        self.max_pages = max_pages

    def extract_text(self, pdf_bytes: bytes) -> str:
        """Extract the embedded text layer of a PDF.

        Args:
            pdf_bytes: Raw PDF bytes.

        Returns:
            Page texts joined by blank lines; empty for scanned PDFs.

        Raises:
            RuntimeError: If the PDF cannot be parsed.
        """
        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                pages = [page.extract_text() or "" for page in pdf.pages[: self.max_pages]]
        except Exception as exc:
            raise RuntimeError(f"PDF text extraction failed: {exc}") from exc

        text = "\n\n".join(p.strip() for p in pages if p.strip())
        logger.info(
            "Extracted %d characters of embedded text from %d pages",
            len(text),
            len(pages),
        )
        return text

    def pdf_to_images(self, pdf_bytes: bytes) -> list[np.ndarray]:
        """Render PDF pages to RGB images.

        Args:
            pdf_bytes: Raw PDF bytes.

        Returns:
            List of page images as numpy arrays (RGB format).

        Raises:
            RuntimeError: If PDF conversion fails.
        """
        try:
            pil_images = convert_from_bytes(
                pdf_bytes, dpi=self.dpi, first_page=1, last_page=self.max_pages
            )
        except Exception as exc:
            raise RuntimeError(f"PDF conversion failed: {exc}") from exc

        images = [np.array(img.convert("RGB")) for img in pil_images]
        logger.info("Converted PDF to %d images at %d DPI", len(images), self.dpi)
        return images
