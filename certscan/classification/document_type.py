"""Document type classification for credential documents.

Scores recognized text against a fixed table of credential types using
keyword and regex evidence, and falls back to coarse inference when no
type is convincing. Classification is pure: no I/O, no hidden state.
"""

import re
from dataclasses import dataclass
from enum import StrEnum

from certscan.utils.logger import get_logger

logger = get_logger(__name__)

KEYWORD_WEIGHT = 0.1
PATTERN_WEIGHT = 0.15
MIN_TYPE_CONFIDENCE = 0.3


class DocumentType(StrEnum):
    """Supported credential document types."""

    CERTIFICATE = "certificate"
    DIPLOMA = "diploma"
    TRANSCRIPT = "transcript"
    AWARD = "award"
    LICENSE = "license"
    WORKSHOP_CERTIFICATE = "workshop_certificate"
    INTERNSHIP_CERTIFICATE = "internship_certificate"
    CONFERENCE_CERTIFICATE = "conference_certificate"
    RESEARCH_CERTIFICATE = "research_certificate"
    VOLUNTEER_CERTIFICATE = "volunteer_certificate"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class DocumentTypeInfo:
    """Classification outcome for a single piece of text."""

    type: DocumentType
    confidence: float
    characteristics: tuple[str, ...] = ()
    extraction_hints: tuple[str, ...] = ()


@dataclass(frozen=True)
class _TypeProfile:
    doc_type: DocumentType
    keywords: tuple[str, ...]
    patterns: tuple[re.Pattern[str], ...]
    boost: float
    hints: tuple[str, ...]


def _compile(*patterns: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


# Declaration order is the tie-break order.
_PROFILES: tuple[_TypeProfile, ...] = (
    _TypeProfile(
        DocumentType.CERTIFICATE,
        ("certificate", "completion", "awarded", "presented", "certify", "achievement"),
        _compile(
            r"certificate\s+of\s+",
            r"this\s+is\s+to\s+certify",
            r"awarded\s+to",
            r"successful\s+completion",
        ),
        0.3,
        (
            "Look for title, institution, recipient, date",
            "Check for verification URL or QR code",
        ),
    ),
    _TypeProfile(
        DocumentType.DIPLOMA,
        ("diploma", "degree", "graduation", "bachelor", "master", "phd", "doctorate"),
        _compile(
            r"diploma\s+in",
            r"degree\s+of",
            r"bachelor\s+of",
            r"master\s+of",
            r"doctor\s+of",
        ),
        0.3,
        (
            "Extract degree name, university, graduation date",
            "Look for degree level (Bachelor, Master, PhD)",
        ),
    ),
    _TypeProfile(
        DocumentType.TRANSCRIPT,
        ("transcript", "grades", "gpa", "semester", "course", "credit", "marks"),
        _compile(
            r"transcript\s+of",
            r"grade\s+point\s+average",
            r"semester\s+\d+",
            r"credit\s+hours",
        ),
        0.3,
        (
            "Extract GPA, semester, course grades",
            "Look for academic year and institution",
        ),
    ),
    _TypeProfile(
        DocumentType.AWARD,
        ("award", "recognition", "honor", "excellence", "outstanding", "achievement"),
        _compile(
            r"award\s+for",
            r"recognition\s+of",
            r"outstanding\s+achievement",
            r"excellence\s+in",
        ),
        0.3,
        (
            "Extract award name, recipient, date, reason",
            "Look for awarding organization",
        ),
    ),
    _TypeProfile(
        DocumentType.LICENSE,
        ("license", "licensed", "permit", "authorization", "credential", "certification"),
        _compile(
            r"license\s+number",
            r"licensed\s+to",
            r"authorization\s+to",
            r"credential\s+number",
        ),
        0.3,
        (
            "Extract license number, issuing authority, expiry date",
            "Look for license type and validity period",
        ),
    ),
    _TypeProfile(
        DocumentType.WORKSHOP_CERTIFICATE,
        ("workshop", "training", "seminar", "course", "program", "attended"),
        _compile(
            r"workshop\s+on",
            r"training\s+program",
            r"seminar\s+on",
            r"attended\s+the",
        ),
        0.2,
        (
            "Extract workshop name, duration, instructor",
            "Look for completion date and organization",
        ),
    ),
    _TypeProfile(
        DocumentType.INTERNSHIP_CERTIFICATE,
        ("internship", "intern", "practical", "experience", "training", "placement"),
        _compile(
            r"internship\s+program",
            r"practical\s+training",
            r"work\s+experience",
            r"placement\s+program",
        ),
        0.2,
        (
            "Extract company name, duration, supervisor",
            "Look for internship period and achievements",
        ),
    ),
    _TypeProfile(
        DocumentType.CONFERENCE_CERTIFICATE,
        ("conference", "symposium", "convention", "meeting", "presentation", "speaker"),
        _compile(
            r"conference\s+on",
            r"symposium\s+on",
            r"presented\s+at",
            r"speaker\s+at",
        ),
        0.2,
        (
            "Extract conference name, date, location",
            "Look for presentation title and organizers",
        ),
    ),
    _TypeProfile(
        DocumentType.RESEARCH_CERTIFICATE,
        ("research", "study", "investigation", "analysis", "findings", "publication"),
        _compile(
            r"research\s+project",
            r"study\s+on",
            r"investigation\s+of",
            r"research\s+work",
        ),
        0.2,
        (
            "Extract research title, supervisor, duration",
            "Look for research area and outcomes",
        ),
    ),
    _TypeProfile(
        DocumentType.VOLUNTEER_CERTIFICATE,
        ("volunteer", "service", "community", "charity", "helping", "contribution"),
        _compile(
            r"volunteer\s+service",
            r"community\s+service",
            r"charity\s+work",
            r"volunteered\s+for",
        ),
        0.2,
        (
            "Extract organization, service type, duration",
            "Look for volunteer hours and impact",
        ),
    ),
)

_EXTRACTION_STRATEGIES: dict[DocumentType, tuple[str, ...]] = {
    DocumentType.CERTIFICATE: (
        "Use pattern-based extraction for title and institution",
        'Look for recipient in "awarded to" patterns',
        "Extract dates from various date formats",
        "Check for verification URLs or QR codes",
    ),
    DocumentType.DIPLOMA: (
        "Extract degree name and level",
        "Look for university and graduation date",
        "Check for academic year information",
        "Extract any honors or distinctions",
    ),
    DocumentType.TRANSCRIPT: (
        "Focus on grade and GPA extraction",
        "Look for semester and course information",
        "Extract academic year and institution",
        "Check for credit hours and grades",
    ),
    DocumentType.AWARD: (
        "Extract award name and recipient",
        "Look for awarding organization",
        "Extract date and reason for award",
        "Check for any monetary value or recognition level",
    ),
    DocumentType.LICENSE: (
        "Extract license number and type",
        "Look for issuing authority",
        "Extract expiry date and validity period",
        "Check for any restrictions or conditions",
    ),
    DocumentType.WORKSHOP_CERTIFICATE: (
        "Extract workshop name and duration",
        "Look for instructor and organization",
        "Extract completion date",
        "Check for any skills or topics covered",
    ),
    DocumentType.INTERNSHIP_CERTIFICATE: (
        "Extract company name and duration",
        "Look for supervisor and department",
        "Extract internship period and achievements",
        "Check for any skills gained or projects completed",
    ),
    DocumentType.CONFERENCE_CERTIFICATE: (
        "Extract conference name and date",
        "Look for location and organizers",
        "Extract presentation title if applicable",
        "Check for any speaker or participant information",
    ),
    DocumentType.RESEARCH_CERTIFICATE: (
        "Extract research title and area",
        "Look for supervisor and institution",
        "Extract research period and outcomes",
        "Check for any publications or presentations",
    ),
    DocumentType.VOLUNTEER_CERTIFICATE: (
        "Extract organization and service type",
        "Look for volunteer hours and duration",
        "Extract impact or contribution made",
        "Check for any recognition or appreciation",
    ),
}

_GENERIC_STRATEGY: tuple[str, ...] = (
    "Use generic extraction patterns",
    "Look for any structured information",
    "Extract common fields like title, recipient, date",
    "Check for any institutional or organizational information",
)


class DocumentTypeClassifier:
    """Classifies credential text into one of the known document types.

    Each candidate type is scored as ``0.1`` per matched keyword plus
    ``0.15`` per matched pattern plus the type's boost. The boost only
    applies to candidates with at least one match, so text without any
    evidence falls through to :meth:`_infer_type`.
    """

    def classify(self, text: str) -> DocumentTypeInfo:
        """Detect the document type of recognized text.

        Args:
            text: Raw recognized text, possibly empty.

        Returns:
            The single best classification for the text.
        """
        text = text or ""
        text_lower = text.lower()
        logger.debug("Classifying document type from %d characters", len(text))

        best: _TypeProfile | None = None
        best_score = 0.0
        best_characteristics: list[str] = []

        for profile in _PROFILES:
            keyword_hits = [k for k in profile.keywords if k in text_lower]
            pattern_hits = [p for p in profile.patterns if p.search(text)]
            if not keyword_hits and not pattern_hits:
                continue

            score = (
                KEYWORD_WEIGHT * len(keyword_hits)
                + PATTERN_WEIGHT * len(pattern_hits)
                + profile.boost
            )
            characteristics: list[str] = []
            if keyword_hits:
                characteristics.append(f"Contains keywords: {', '.join(keyword_hits)}")
            if pattern_hits:
                characteristics.append(f"Matches patterns: {len(pattern_hits)} found")

            if score > best_score:
                best, best_score, best_characteristics = profile, score, characteristics

        confidence = min(1.0, best_score)
        if best is None or confidence < MIN_TYPE_CONFIDENCE:
            info = self._infer_type(text)
        else:
            info = DocumentTypeInfo(
                type=best.doc_type,
                confidence=confidence,
                characteristics=tuple(best_characteristics),
                extraction_hints=best.hints,
            )

        logger.info(
            "Detected document type: %s (confidence=%.2f)",
            info.type.value,
            info.confidence,
        )
        return info

    def _infer_type(self, text: str) -> DocumentTypeInfo:
        """Best-effort label when no candidate type is convincing.

        Args:
            text: Raw recognized text.

        Returns:
            Low-confidence classification (at most 0.4).
        """
        text_lower = text.lower()

        if any(w in text_lower for w in ("university", "college", "institute")):
            if any(w in text_lower for w in ("grade", "gpa", "semester")):
                return DocumentTypeInfo(
                    type=DocumentType.TRANSCRIPT,
                    confidence=0.4,
                    characteristics=(
                        "Contains academic institution and grade information",
                    ),
                    extraction_hints=(
                        "Extract grades, GPA, semester information",
                        "Look for course names and credits",
                    ),
                )
            if any(w in text_lower for w in ("degree", "bachelor", "master")):
                return DocumentTypeInfo(
                    type=DocumentType.DIPLOMA,
                    confidence=0.4,
                    characteristics=("Contains degree-related information",),
                    extraction_hints=(
                        "Extract degree name, university, graduation date",
                        "Look for degree level",
                    ),
                )
            return DocumentTypeInfo(
                type=DocumentType.CERTIFICATE,
                confidence=0.3,
                characteristics=("Contains institutional information",),
                extraction_hints=(
                    "Extract title, institution, recipient, date",
                    "Look for completion or achievement information",
                ),
            )

        if any(w in text_lower for w in ("company", "corporation", "organization")):
            return DocumentTypeInfo(
                type=DocumentType.CERTIFICATE,
                confidence=0.3,
                characteristics=("Contains organizational information",),
                extraction_hints=(
                    "Extract organization name, recipient, achievement",
                    "Look for completion or recognition information",
                ),
            )

        if len(text) > 50 and any(
            w in text_lower for w in ("certificate", "award", "completion")
        ):
            return DocumentTypeInfo(
                type=DocumentType.CERTIFICATE,
                confidence=0.2,
                characteristics=("Generic document with certificate-like content",),
                extraction_hints=(
                    "Extract any available information",
                    "Look for title, recipient, date, issuer",
                ),
            )

        return DocumentTypeInfo(
            type=DocumentType.UNKNOWN,
            confidence=0.1,
            characteristics=("No clear document type patterns detected",),
            extraction_hints=(
                "Try generic extraction",
                "Look for any structured information",
            ),
        )


def get_extraction_strategy(document_type: DocumentType | str) -> tuple[str, ...]:
    """Get extraction strategy recommendations for a document type.

    Args:
        document_type: Document type, as enum member or its string value.

    Returns:
        Ordered strategy recommendations; a generic list for unknown types.
    """
    try:
        key = DocumentType(document_type)
    except ValueError:
        return _GENERIC_STRATEGY
    return _EXTRACTION_STRATEGIES.get(key, _GENERIC_STRATEGY)


_default_classifier = DocumentTypeClassifier()


def classify(text: str) -> DocumentTypeInfo:
    """Classify text with a stateless default classifier."""
    return _default_classifier.classify(text)
