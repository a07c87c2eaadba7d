"""Tests for document type classification."""

import pytest

from certscan.classification.document_type import (
    DocumentType,
    DocumentTypeClassifier,
    DocumentTypeInfo,
    classify,
    get_extraction_strategy,
)


@pytest.fixture
def classifier() -> DocumentTypeClassifier:
    return DocumentTypeClassifier()


class TestClassify:
    """Tests for scoring against the known document types."""

    def test_empty_text_is_unknown(self, classifier: DocumentTypeClassifier) -> None:
        info = classifier.classify("")
        assert info.type == DocumentType.UNKNOWN
        assert info.confidence <= 0.2

    def test_certificate(
        self, classifier: DocumentTypeClassifier, certificate_text: str
    ) -> None:
        info = classifier.classify(certificate_text)
        assert info.type == DocumentType.CERTIFICATE
        assert info.confidence == pytest.approx(0.9)
        assert "Contains keywords: certificate, completion, certify" in info.characteristics
        assert "Matches patterns: 2 found" in info.characteristics
        assert info.extraction_hints[0] == "Look for title, institution, recipient, date"

    def test_diploma(self, classifier: DocumentTypeClassifier) -> None:
        text = "The degree of Bachelor of Science upon graduation"
        info = classifier.classify(text)
        assert info.type == DocumentType.DIPLOMA
        assert info.confidence == pytest.approx(0.9)

    def test_confidence_clipped_to_one(self, classifier: DocumentTypeClassifier) -> None:
        text = (
            "Certificate of Achievement. This is to certify successful completion. "
            "Awarded to Jane Doe, presented by the board."
        )
        info = classifier.classify(text)
        assert info.type == DocumentType.CERTIFICATE
        assert info.confidence == 1.0

    def test_tie_goes_to_first_declared_type(
        self, classifier: DocumentTypeClassifier
    ) -> None:
        info = classifier.classify("diploma certificate")
        assert info.type == DocumentType.CERTIFICATE
        assert info.confidence == pytest.approx(0.4)

    def test_specialised_type(self, classifier: DocumentTypeClassifier) -> None:
        info = classifier.classify("Thank you for your volunteer service to the community")
        assert info.type == DocumentType.VOLUNTEER_CERTIFICATE

    def test_idempotent(
        self, classifier: DocumentTypeClassifier, certificate_text: str
    ) -> None:
        assert classifier.classify(certificate_text) == classifier.classify(certificate_text)

    def test_module_level_classify(self, certificate_text: str) -> None:
        info = classify(certificate_text)
        assert isinstance(info, DocumentTypeInfo)
        assert info.type == DocumentType.CERTIFICATE

    def test_confidence_bounds(self, classifier: DocumentTypeClassifier) -> None:
        samples = [
            "",
            "lorem ipsum",
            "certificate " * 50,
            "transcript grades gpa semester 1 credit hours grade point average",
        ]
        for text in samples:
            info = classifier.classify(text)
            assert 0.0 <= info.confidence <= 1.0


class TestInferType:
    """Tests for the low-confidence inference fallback."""

    def test_institution_with_grades_is_transcript(
        self, classifier: DocumentTypeClassifier
    ) -> None:
        info = classifier.classify("Springfield University\nFinal grade: A")
        assert info.type == DocumentType.TRANSCRIPT
        assert info.confidence == 0.4

    def test_organization_is_certificate(
        self, classifier: DocumentTypeClassifier
    ) -> None:
        info = classifier.classify("Acme Corporation\nEmployee of the month")
        assert info.type == DocumentType.CERTIFICATE
        assert info.confidence == 0.3

    def test_institution_only_is_certificate(
        self, classifier: DocumentTypeClassifier
    ) -> None:
        info = classifier.classify("Springfield College")
        assert info.type == DocumentType.CERTIFICATE
        assert info.confidence == 0.3

    def test_no_signal_is_unknown(self, classifier: DocumentTypeClassifier) -> None:
        info = classifier.classify("lorem ipsum dolor sit amet")
        assert info.type == DocumentType.UNKNOWN
        assert info.confidence == 0.1
        assert info.characteristics == ("No clear document type patterns detected",)


class TestExtractionStrategy:
    """Tests for per-type extraction strategy lookup."""

    def test_known_type(self) -> None:
        strategy = get_extraction_strategy(DocumentType.DIPLOMA)
        assert strategy[0] == "Extract degree name and level"

    def test_accepts_string_value(self) -> None:
        assert get_extraction_strategy("transcript") == get_extraction_strategy(
            DocumentType.TRANSCRIPT
        )

    def test_unknown_type_gets_generic(self) -> None:
        assert get_extraction_strategy(DocumentType.UNKNOWN)[0] == (
            "Use generic extraction patterns"
        )

    def test_invalid_value_gets_generic(self) -> None:
        assert get_extraction_strategy("passport")[0] == "Use generic extraction patterns"
