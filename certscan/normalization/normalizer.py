"""Canonicalization of extracted credential fields.

Maps raw field values onto canonical forms (person names, institution
and degree names, ISO dates, 4.0-scale GPAs, identifiers) and combines
the per-field confidences into one overall confidence.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from certscan.utils.config import NormalizationConfig
from certscan.utils.logger import get_logger

logger = get_logger(__name__)

UNPARSED_CONFIDENCE = 0.3

FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "name": ("name", "studentName", "recipient", "student_name"),
    "institution": ("institution", "issuer", "university"),
    "degree": ("degree", "program", "major"),
    "date": ("date", "issueDate", "dateIssued", "issue_date", "date_issued"),
    "gpa": ("gpa", "cgpa"),
    "id_number": (
        "idNumber",
        "studentId",
        "id",
        "id_number",
        "student_id",
        "certificate_id",
    ),
}

_MONTHS: dict[str, int] = {
    name: i + 1
    for i, name in enumerate(
        (
            "january",
            "february",
            "march",
            "april",
            "may",
            "june",
            "july",
            "august",
            "september",
            "october",
            "november",
            "december",
        )
    )
}

_SLASH_DATE = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})")
_ISO_DATE = re.compile(r"(\d{4})-(\d{1,2})-(\d{1,2})")
_DASH_DATE = re.compile(r"(\d{1,2})-(\d{1,2})-(\d{4})")
_NAMED_DATE = re.compile(r"([A-Za-z]+)\s+(\d{1,2}),?\s+(\d{4})")
_NUMBER = re.compile(r"\d+\.?\d*")
_ID_LABELS = frozenset({"ID", "STUDENT", "STU", "NO", "NUMBER", "#"})
_ID_SEPARATORS = re.compile(r"[\s:.]+")
_ID_DISALLOWED = re.compile(r"[^A-Z0-9\-]")


@dataclass(frozen=True)
class FieldValue:
    """A normalized value with its local confidence."""

    value: str
    confidence: float


@dataclass(frozen=True)
class NormalizedFields:
    """Canonical field values with an overall confidence."""

    confidence: float
    original_values: dict[str, Any] = field(default_factory=dict)
    normalized_values: dict[str, str] = field(default_factory=dict)

    @property
    def name(self) -> str | None:
        return self.normalized_values.get("name")

    @property
    def institution(self) -> str | None:
        return self.normalized_values.get("institution")

    @property
    def degree(self) -> str | None:
        return self.normalized_values.get("degree")

    @property
    def date(self) -> str | None:
        return self.normalized_values.get("date")

    @property
    def gpa(self) -> str | None:
        return self.normalized_values.get("gpa")

    @property
    def id_number(self) -> str | None:
        return self.normalized_values.get("id_number")


def _collapse(text: str) -> str:
    return re.sub(r"\s+", " ", text.strip())


def _capitalize_words(text: str) -> str:
    return " ".join(w[:1].upper() + w[1:].lower() for w in text.split(" "))


def normalize_name(name: str) -> FieldValue:
    """Normalize a person's name.

    ``"Last, First"`` is inverted to ``"First Last"``; multi-word names are
    capitalized word by word; single tokens are returned as-is.
    """
    cleaned = _collapse(name)

    if "," in cleaned:
        parts = [p.strip() for p in cleaned.split(",")]
        if len(parts) == 2:
            return FieldValue(f"{parts[1]} {parts[0]}", 0.9)

    if len(cleaned.split(" ")) >= 2:
        return FieldValue(_capitalize_words(cleaned), 0.8)

    return FieldValue(cleaned, 0.6)


def normalize_institution(institution: str, aliases: Mapping[str, str]) -> FieldValue:
    """Normalize an institution name against an alias table."""
    cleaned = _collapse(institution)
    lower = cleaned.lower()
    for key, canonical in aliases.items():
        if key.lower() in lower:
            return FieldValue(canonical, 0.9)
    return FieldValue(_capitalize_words(cleaned), 0.7)


def normalize_degree(degree: str, aliases: Mapping[str, str]) -> FieldValue:
    """Normalize a degree or program name against an alias table."""
    cleaned = _collapse(degree)
    lower = cleaned.lower()
    for key, canonical in aliases.items():
        if key.lower() in lower:
            return FieldValue(canonical, 0.9)
    return FieldValue(_capitalize_words(cleaned), 0.6)


def _to_iso(year: int, month: int, day: int) -> str | None:
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def parse_date(text: str) -> str | None:
    """Parse a date string into ISO ``YYYY-MM-DD``.

    Tries, in order, ``MM/DD/YYYY``, ``YYYY-MM-DD``, ``MM-DD-YYYY`` and
    ``Month DD, YYYY``. Day/month ambiguity is resolved month-first. A
    pattern only wins if it yields a valid calendar date.

    Args:
        text: Raw date text.

    Returns:
        The ISO date, or ``None`` if no pattern parses.
    """
    match = _SLASH_DATE.search(text)
    if match:
        iso = _to_iso(int(match[3]), int(match[1]), int(match[2]))
        if iso:
            return iso

    match = _ISO_DATE.search(text)
    if match:
        iso = _to_iso(int(match[1]), int(match[2]), int(match[3]))
        if iso:
            return iso

    match = _DASH_DATE.search(text)
    if match:
        iso = _to_iso(int(match[3]), int(match[1]), int(match[2]))
        if iso:
            return iso

    match = _NAMED_DATE.search(text)
    if match:
        month = _MONTHS.get(match[1].lower())
        if month:
            iso = _to_iso(int(match[3]), month, int(match[2]))
            if iso:
                return iso

    return None


def normalize_date(value: str) -> FieldValue:
    """Normalize a date to ISO format, keeping the input when unparseable."""
    cleaned = value.strip()
    iso = parse_date(cleaned)
    if iso is None:
        return FieldValue(cleaned, UNPARSED_CONFIDENCE)
    return FieldValue(iso, 0.9)


def normalize_gpa(gpa: str) -> FieldValue:
    """Normalize a GPA onto the 4.0 scale.

    Values in ``[0, 4]`` are kept; values in ``(4, 100]`` are treated as
    percentages and rescaled.
    """
    cleaned = gpa.strip()
    match = _NUMBER.search(cleaned)
    if match:
        value = float(match.group(0))
        if 0 <= value <= 4:
            return FieldValue(f"{value:.2f}", 0.9)
        if 0 <= value <= 100:
            return FieldValue(f"{value / 100 * 4:.2f}", 0.8)
    return FieldValue(cleaned, UNPARSED_CONFIDENCE)


def normalize_id_number(id_number: str) -> FieldValue:
    """Normalize an identifier: uppercase, strip labels, keep ``[A-Z0-9-]``."""
    tokens = [t for t in _ID_SEPARATORS.split(id_number.strip().upper()) if t]
    while tokens and tokens[0] in _ID_LABELS:
        tokens.pop(0)
    while tokens and tokens[-1] in _ID_LABELS:
        tokens.pop()
    return FieldValue(_ID_DISALLOWED.sub("", "".join(tokens)), 0.8)


class FieldNormalizer:
    """Normalizes raw extracted fields into canonical values.

    Args:
        config: Alias tables for institutions and degrees.
    """

    def __init__(self, config: NormalizationConfig | None = None) -> None:
        self.config = config or NormalizationConfig()

    def normalize(self, fields: Mapping[str, Any]) -> NormalizedFields:
        """Normalize every recognized field present in ``fields``.

        Args:
            fields: Raw field map; keys may use any supported alias.

        Returns:
            Normalized values and the product of per-field confidences.
        """
        normalizers = {
            "name": normalize_name,
            "institution": lambda v: normalize_institution(
                v, self.config.institution_aliases
            ),
            "degree": lambda v: normalize_degree(v, self.config.degree_aliases),
            "date": normalize_date,
            "gpa": normalize_gpa,
            "id_number": normalize_id_number,
        }

        normalized: dict[str, str] = {}
        confidence = 1.0
        for name, normalizer in normalizers.items():
            raw = _first_present(fields, FIELD_ALIASES[name])
            if raw is None:
                continue
            result = normalizer(raw)
            normalized[name] = result.value
            confidence *= result.confidence
            logger.debug(
                "Normalized %s: %r -> %r (%.2f)", name, raw, result.value, result.confidence
            )

        return NormalizedFields(
            confidence=round(confidence, 2),
            original_values=dict(fields),
            normalized_values=normalized,
        )


def _first_present(fields: Mapping[str, Any], aliases: tuple[str, ...]) -> str | None:
    for alias in aliases:
        value = fields.get(alias)
        if value is None or isinstance(value, bool):
            continue
        text = value if isinstance(value, str) else str(value)
        if text.strip():
            return text
    return None


def normalize(
    fields: Mapping[str, Any], config: NormalizationConfig | None = None
) -> NormalizedFields:
    """Normalize a raw field map with the given (or default) alias tables."""
    return FieldNormalizer(config).normalize(fields)
