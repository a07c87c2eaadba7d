"""Loading of uploaded document bytes into page images.

PDFs are rendered page by page; everything else is decoded as an image.
Bytes that cannot be opened either way are an unprocessable document.
"""

import io

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError

from certscan.exceptions import UnprocessableDocumentError
from certscan.utils.logger import get_logger

from .pdf_handler import PDFHandler

logger = get_logger(__name__)

PDF_MIME_TYPE = "application/pdf"


def is_pdf(data: bytes, mime_type: str) -> bool:
    """Whether the document should be treated as a PDF.

    The declared MIME type wins; otherwise the ``%PDF`` magic is checked.
    """
    return mime_type.lower() == PDF_MIME_TYPE or data[:4] == b"%PDF"


def encode_png(image: np.ndarray) -> bytes:
    """Encode an image as PNG bytes for network OCR backends.

    Args:
        image: Image as a numpy array (BGR or grayscale).

    Returns:
        PNG-encoded bytes.

    Raises:
        ValueError: If OpenCV cannot encode the image.
    """
    ok, buffer = cv2.imencode(".png", image)
    if not ok:
        raise ValueError("Failed to encode image as PNG")
    return buffer.tobytes()


class DocumentLoader:
    """Turns raw document bytes into BGR page images.

    Args:
        pdf_handler: Handler used to render PDF pages.
    """

    def __init__(self, pdf_handler: PDFHandler | None = None) -> None:
        self.pdf_handler = pdf_handler or PDFHandler()

    def load_images(self, data: bytes, mime_type: str) -> list[np.ndarray]:
        """Load document pages as images.

        Args:
            data: Raw file bytes.
            mime_type: Declared MIME type of the upload.

        Returns:
            Page images in BGR channel order.

        Raises:
            UnprocessableDocumentError: If the bytes are neither a
                renderable PDF nor a decodable image.
        """
        if not data:
            raise UnprocessableDocumentError("Document is empty")

        if is_pdf(data, mime_type):
            try:
                pages = self.pdf_handler.pdf_to_images(data)
            except RuntimeError as exc:
                raise UnprocessableDocumentError(str(exc)) from exc
            if not pages:
                raise UnprocessableDocumentError("PDF has no pages")
            return [cv2.cvtColor(p, cv2.COLOR_RGB2BGR) for p in pages]

        try:
            with Image.open(io.BytesIO(data)) as img:
                rgb = np.array(img.convert("RGB"))
        except (UnidentifiedImageError, OSError) as exc:
            raise UnprocessableDocumentError(
                f"Cannot open document as image ({mime_type}): {exc}"
            ) from exc

        logger.debug("Decoded %s image of shape %s", mime_type, rgb.shape)
        return [cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR)]
