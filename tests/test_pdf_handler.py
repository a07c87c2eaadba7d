"""Tests for PDF handling and document loading."""

import io
from unittest.mock import MagicMock, patch

import numpy as np
import pytest
from PIL import Image

from certscan.exceptions import UnprocessableDocumentError
from certscan.ocr.document_loader import DocumentLoader, encode_png, is_pdf
from certscan.ocr.pdf_handler import PDFHandler


def _mock_pil_image(width: int = 300, height: int = 200) -> Image.Image:
    """Create a PIL image with a red top-left pixel."""
    array = np.zeros((height, width, 3), dtype=np.uint8)
    array[0, 0] = (255, 0, 0)
    return Image.fromarray(array)


def _mock_pdf(page_texts: list[str | None]) -> MagicMock:
    pdf = MagicMock()
    pdf.pages = [MagicMock(**{"extract_text.return_value": t}) for t in page_texts]
    pdf.__enter__.return_value = pdf
    return pdf


class TestPDFHandler:
    """Tests for the PDFHandler class."""

    def test_init_defaults(self) -> None:
        handler = PDFHandler()
        assert handler.dpi == 300
        assert handler.max_pages == 3

    @patch("certscan.ocr.pdf_handler.pdfplumber.open")
    def test_extract_text_joins_pages(self, mock_open: MagicMock) -> None:
        mock_open.return_value = _mock_pdf(["Page one ", None, "Page two"])

        text = PDFHandler().extract_text(b"%PDF-1.4")

        assert text == "Page one\n\nPage two"

    @patch("certscan.ocr.pdf_handler.pdfplumber.open")
    def test_extract_text_respects_max_pages(self, mock_open: MagicMock) -> None:
        mock_open.return_value = _mock_pdf(["one", "two", "three"])

        assert PDFHandler(max_pages=2).extract_text(b"%PDF-1.4") == "one\n\ntwo"

    @patch("certscan.ocr.pdf_handler.pdfplumber.open")
    def test_extract_text_scanned_pdf(self, mock_open: MagicMock) -> None:
        mock_open.return_value = _mock_pdf([None, ""])
        assert PDFHandler().extract_text(b"%PDF-1.4") == ""

    @patch("certscan.ocr.pdf_handler.pdfplumber.open")
    def test_extract_text_failure(self, mock_open: MagicMock) -> None:
        mock_open.side_effect = ValueError("not a PDF")
        with pytest.raises(RuntimeError, match="PDF text extraction failed"):
            PDFHandler().extract_text(b"garbage")

    @patch("certscan.ocr.pdf_handler.convert_from_bytes")
    def test_pdf_to_images(self, mock_convert: MagicMock) -> None:
        mock_convert.return_value = [_mock_pil_image(), _mock_pil_image()]

        images = PDFHandler(dpi=200, max_pages=2).pdf_to_images(b"%PDF-1.4")

        assert len(images) == 2
        assert all(isinstance(img, np.ndarray) for img in images)
        mock_convert.assert_called_once_with(
            b"%PDF-1.4", dpi=200, first_page=1, last_page=2
        )

    @patch("certscan.ocr.pdf_handler.convert_from_bytes")
    def test_pdf_to_images_failure(self, mock_convert: MagicMock) -> None:
        mock_convert.side_effect = Exception("poppler missing")
        with pytest.raises(RuntimeError, match="PDF conversion failed"):
            PDFHandler().pdf_to_images(b"%PDF-1.4")


class TestDocumentLoader:
    """Tests for turning uploaded bytes into page images."""

    def test_is_pdf(self) -> None:
        assert is_pdf(b"anything", "application/pdf")
        assert is_pdf(b"%PDF-1.7", "application/octet-stream")
        assert not is_pdf(b"\x89PNG", "image/png")

    def test_load_png(self, png_bytes: bytes) -> None:
        images = DocumentLoader().load_images(png_bytes, "image/png")
        assert len(images) == 1
        assert images[0].shape == (200, 300, 3)

    def test_load_converts_rgb_to_bgr(self) -> None:
        buf = io.BytesIO()
        _mock_pil_image().save(buf, format="PNG")

        image = DocumentLoader().load_images(buf.getvalue(), "image/png")[0]

        assert tuple(image[0, 0]) == (0, 0, 255)

    def test_load_pdf_pages(self) -> None:
        handler = MagicMock(spec=PDFHandler)
        handler.pdf_to_images.return_value = [np.array(_mock_pil_image())] * 2

        images = DocumentLoader(handler).load_images(b"%PDF-1.4", "application/pdf")

        assert len(images) == 2
        assert tuple(images[0][0, 0]) == (0, 0, 255)

    def test_unrenderable_pdf(self) -> None:
        handler = MagicMock(spec=PDFHandler)
        handler.pdf_to_images.side_effect = RuntimeError("PDF conversion failed")
        with pytest.raises(UnprocessableDocumentError):
            DocumentLoader(handler).load_images(b"%PDF-1.4", "application/pdf")

    def test_pdf_without_pages(self) -> None:
        handler = MagicMock(spec=PDFHandler)
        handler.pdf_to_images.return_value = []
        with pytest.raises(UnprocessableDocumentError):
            DocumentLoader(handler).load_images(b"%PDF-1.4", "application/pdf")

    def test_garbage_bytes(self) -> None:
        with pytest.raises(UnprocessableDocumentError):
            DocumentLoader().load_images(b"not an image at all", "image/jpeg")

    def test_empty_bytes(self) -> None:
        with pytest.raises(UnprocessableDocumentError):
            DocumentLoader().load_images(b"", "image/png")

    def test_encode_png(self, sample_image: np.ndarray) -> None:
        assert encode_png(sample_image)[:8] == b"\x89PNG\r\n\x1a\n"
