"""Confidence scoring of structured extraction results.

The score starts from a base that reflects how reliable the extraction
method is, then adds evidence from field completeness and plausibility
checks. Scores are clipped to ``[0, 1]``.
"""

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import date

from certscan.classification.document_type import DocumentType
from certscan.ocr.base import ExtractionMethod
from certscan.utils.config import ScoringConfig
from certscan.utils.logger import get_logger

logger = get_logger(__name__)

METHOD_BASE_SCORES: dict[ExtractionMethod, float] = {
    ExtractionMethod.NATIVE_TEXT: 0.9,
    ExtractionMethod.CLOUD_VISION: 0.8,
    ExtractionMethod.SELF_HOSTED_OCR: 0.7,
    ExtractionMethod.LOCAL_OCR_FALLBACK: 0.5,
}

REQUIRED_FIELDS = ("title", "institution", "recipient", "date_issued")

COMPLETENESS_WEIGHT = 0.3
KNOWN_ISSUER_BONUS = 0.2
PLAUSIBILITY_BONUS = 0.1

_TITLE_KEYWORDS = (
    "certificate",
    "diploma",
    "degree",
    "course",
    "program",
    "training",
    "specialization",
    "certification",
    "workshop",
    "bootcamp",
    "internship",
)

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_ALPHA_WORD = re.compile(r"^[A-Za-z]+$")


@dataclass(frozen=True)
class ExtractionResult:
    """Structured fields of one credential with their confidence."""

    confidence_score: float
    extraction_method: ExtractionMethod
    requires_review: bool
    title: str = ""
    institution: str = ""
    recipient: str = ""
    date_issued: str = ""
    certificate_id: str | None = None
    document_type: DocumentType = DocumentType.UNKNOWN
    scoring_factors: tuple[str, ...] = ()


class ConfidenceScorer:
    """Scores structured fields produced by an extraction method.

    Args:
        config: Thresholds, date window, and trusted issuer list.
        today: Clock used for the issue date window.
    """

    def __init__(
        self,
        config: ScoringConfig | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.config = config or ScoringConfig()
        self._today = today

    def score_result(
        self,
        fields: Mapping[str, str],
        method: ExtractionMethod,
        document_type: DocumentType = DocumentType.UNKNOWN,
    ) -> ExtractionResult:
        """Build a scored result from structured fields.

        Args:
            fields: Structured fields for the document.
            method: Extraction method that produced the text.
            document_type: Classifier label of the text.

        Returns:
            Immutable result with score, review flag, and the factors
            that contributed to the score.
        """
        method = ExtractionMethod(method)
        score = METHOD_BASE_SCORES[method]
        factors = [f"Method: {method.value}"]

        present = [f for f in REQUIRED_FIELDS if fields.get(f)]
        completeness = len(present) / len(REQUIRED_FIELDS)
        score += completeness * COMPLETENESS_WEIGHT
        factors.append(f"Completeness: {round(completeness * 100)}%")

        institution = fields.get("institution") or ""
        if institution and self._is_known_issuer(institution):
            score += KNOWN_ISSUER_BONUS
            factors.append("Known issuer")

        date_issued = fields.get("date_issued") or ""
        if date_issued:
            if self._is_valid_date(date_issued):
                score += PLAUSIBILITY_BONUS
                factors.append("Valid date")
            else:
                score -= PLAUSIBILITY_BONUS
                factors.append("Invalid date format")

        recipient = fields.get("recipient") or ""
        if recipient and is_valid_person_name(recipient):
            score += PLAUSIBILITY_BONUS
            factors.append("Valid recipient name")

        title = fields.get("title") or ""
        if title and is_valid_title(title):
            score += PLAUSIBILITY_BONUS
            factors.append("Valid title")

        score = min(max(score, 0.0), 1.0)
        logger.debug("Scored %s result at %.2f: %s", method.value, score, factors)

        return ExtractionResult(
            title=fields.get("title") or "",
            institution=institution,
            recipient=recipient,
            date_issued=date_issued,
            certificate_id=fields.get("certificate_id") or None,
            confidence_score=score,
            extraction_method=method,
            requires_review=score < self.config.review_threshold,
            document_type=document_type,
            scoring_factors=tuple(factors),
        )

    def is_high_confidence(self, result: ExtractionResult) -> bool:
        return result.confidence_score >= self.config.high_confidence_threshold

    def _is_known_issuer(self, institution: str) -> bool:
        lower = institution.lower()
        return any(issuer.lower() in lower for issuer in self.config.trusted_issuers)

    def _is_valid_date(self, value: str) -> bool:
        """ISO ``YYYY-MM-DD`` within the configured window around today."""
        if not _ISO_DATE.match(value):
            return False
        try:
            issued = date.fromisoformat(value)
        except ValueError:
            return False
        today = self._today()
        earliest = date(today.year - self.config.date_window_years, 1, 1)
        latest = date(today.year + 1, 12, 31)
        return earliest <= issued <= latest


def is_valid_person_name(name: str) -> bool:
    """Two to four capitalized alphabetic words."""
    words = name.split()
    if not 2 <= len(words) <= 4:
        return False
    return all(_ALPHA_WORD.match(w) and w[0].isupper() for w in words)


def is_valid_title(title: str) -> bool:
    if not 5 <= len(title) <= 120:
        return False
    lower = title.lower()
    return any(keyword in lower for keyword in _TITLE_KEYWORDS)
