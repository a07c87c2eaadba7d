"""Rule-based structuring of credential text using regex patterns.

Extracts the title, issuing institution, recipient, issue date, and
identifiers from recognized text. Degree, GPA, and ID patterns are only
applied where the detected document type makes them meaningful.
"""

import re

from certscan.classification.document_type import DocumentType, DocumentTypeInfo
from certscan.normalization.normalizer import parse_date
from certscan.utils.logger import get_logger

from .base import RawFieldMap

logger = get_logger(__name__)

_TITLE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"Certificate\s+of\s+(.+?)(?:\n|\bin\b|\bfrom\b|\bissued\b)",
        r"Certificate\s+in\s+(.+?)(?:\n|\bfrom\b|\bissued\b)",
        r"This\s+(?:is\s+to\s+)?certif(?:y|ies)\s+that\s+.+?\s+has\s+"
        r"(?:successfully\s+)?completed\s+(?:the\s+)?(.+?)(?:\n|\bcourse\b|\bprogram\b)",
        r"(?:Award|Diploma|Degree)\s+(?:of|in)\s+(.+?)(?:\n|\bfrom\b|\bissued\b)",
        r"(?:successful\s+)?completion\s+of\s+(?:the\s+)?(.+?)(?:\n|\bcourse\b|\bprogram\b)",
        r"(?:has\s+)?(?:successfully\s+)?(?:completed|finished|passed)\s+(?:the\s+)?"
        r"(.+?)(?:\n|\bcourse\b|\bprogram\b|\bwith\b)",
        r"participated\s+in\s+(?:the\s+)?(.+?)(?:\n|\bprogram\b|\bcourse\b)",
        r"attended\s+(?:the\s+)?(.+?)(?:\n|\bprogram\b|\bcourse\b|\bworkshop\b)",
        r"(?:course|program|certification|training|workshop):\s*([A-Z][^.\n]+)",
        r"(Bachelor\s+of\s+[^.\n]+)",
        r"(Master\s+of\s+[^.\n]+)",
        r"(Diploma\s+in\s+[^.\n]+)",
        r'"([^"\n]+)"',
    )
]

_INSTITUTION_PATTERNS: list[re.Pattern[str]] = [
    re.compile(
        r"\b(?:from|by|at|issued\s+by)\s+([A-Z][^,\n.]{3,80}?(?:University|College|"
        r"Institute|School|Academy|Foundation|Organization|Corporation|Company))",
        re.IGNORECASE,
    ),
    re.compile(
        r"^([A-Z][A-Z &-]{2,60}(?:UNIVERSITY|COLLEGE|INSTITUTE|SCHOOL|ACADEMY|"
        r"FOUNDATION|ORGANIZATION|CORPORATION)(?: +OF +[A-Z &-]{2,30})?)[ \t]*$",
        re.MULTILINE,
    ),
    re.compile(r"\b((?:Indian +|National +)?Institute +of +[A-Z]\w+(?: +[A-Z]\w+)?)"),
    re.compile(r"\b(University +of +[A-Z]\w+(?: +[A-Z]\w+)?)"),
    re.compile(r"\b([A-Z]\w+(?: +[A-Z]\w+)* +(?:University|College|Academy))\b"),
    re.compile(r"\b(Coursera|edX|Udemy|NPTEL|Khan\s+Academy|Udacity)\b", re.IGNORECASE),
    re.compile(r"\b(Google|Microsoft|Amazon|IBM|Oracle|Cisco|Adobe)\b"),
]

_RECIPIENT_PATTERNS: list[re.Pattern[str]] = [
    re.compile(
        r"(?i:present(?:ed)?\s+this\s+certificate\s+to|certify\s+that|awarded\s+to|"
        r"presented\s+to|certificate\s+to|conferred\s+(?:up)?on)\s*[:\-]?\s*"
        r"([A-Z][a-z]+(?: [A-Z]\.?)?(?: [A-Z][a-z]+){1,2})\b"
    ),
    re.compile(r"(?i:name|recipient|student)[ \t]*[:\-][ \t]*([A-Za-z][A-Za-z ,.']{2,60})"),
    re.compile(r"^[ \t]*([A-Z][a-z]+ [A-Z][a-z]+(?: [A-Z][a-z]+)?)[ \t]*$", re.MULTILINE),
]

_DATE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(
        r"(?:issued|dated|given|awarded|completed|date)[^\n\d]{0,20}?\b"
        r"(\d{1,2}[/-]\d{1,2}[/-]\d{4}|\d{4}-\d{1,2}-\d{1,2}|[A-Za-z]+\s+\d{1,2},?\s+\d{4})",
        re.IGNORECASE,
    ),
    re.compile(r"(\d{4}-\d{1,2}-\d{1,2})"),
    re.compile(r"(\d{1,2}[/-]\d{1,2}[/-]\d{4})"),
    re.compile(
        r"((?:January|February|March|April|May|June|July|August|September|October|"
        r"November|December)\s+\d{1,2},?\s+\d{4})",
        re.IGNORECASE,
    ),
    re.compile(
        r"(\d{1,2})(?:st|nd|rd|th)?\s+(?:day\s+of\s+)?(January|February|March|April|May|"
        r"June|July|August|September|October|November|December),?\s+(\d{4})",
        re.IGNORECASE,
    ),
]

_CERTIFICATE_ID_PATTERNS: list[re.Pattern[str]] = [
    re.compile(
        r"(?:certificate|credential|verification|serial)\s*(?:id|no\.?|number|#|code)"
        r"\s*[:\-#]?\s*([A-Z0-9][A-Z0-9\-]{3,})",
        re.IGNORECASE,
    ),
]

_ID_NUMBER_PATTERNS: list[re.Pattern[str]] = [
    re.compile(
        r"(?:student|license|licence|registration|enrol?lment)\s*(?:id|no\.?|number|#)?"
        r"\s*[:\-#]\s*([A-Z0-9][A-Z0-9\-]{3,})",
        re.IGNORECASE,
    ),
]

_DEGREE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(
        r"((?:Bachelor|Master|Doctor|Associate)\s+of\s+[A-Z][A-Za-z ]+?)(?:\n|,|\.|\s+in\s|$)",
        re.IGNORECASE,
    ),
    re.compile(r"(?:degree|program|major)\s*[:\-]\s*([A-Za-z &,.]{3,60})", re.IGNORECASE),
    re.compile(r"\b(B\.?Sc|M\.?Sc|B\.?A|M\.?A|Ph\.?D|MBA|B\.?Tech|M\.?Tech)\b"),
]

_GPA_PATTERNS: list[re.Pattern[str]] = [
    re.compile(
        r"(?:c?gpa|grade\s+point\s+average)\s*[:\-]?\s*(\d{1,3}(?:\.\d{1,2})?)",
        re.IGNORECASE,
    ),
    re.compile(r"(?:percentage|aggregate)\s*[:\-]?\s*(\d{1,3}(?:\.\d{1,2})?)\s*%?", re.IGNORECASE),
]

# Award kinds that name the certificate rather than what it was earned for.
_GENERIC_TITLES = frozenset(
    {"completion", "achievement", "participation", "appreciation", "excellence", "merit"}
)

_TITLE_SKIP_PHRASES = (
    "the following",
    "sponsored project",
    "given this day",
    "under the seal",
    "principal investigator",
    "hereby present",
    "upon recommendation",
    "this certificate",
    "to certify that",
)

_INSTITUTION_KEYWORDS = (
    "university",
    "college",
    "institute",
    "school",
    "academy",
    "foundation",
    "organization",
    "corporation",
    "company",
    "coursera",
    "edx",
    "udemy",
    "udacity",
    "nptel",
    "google",
    "microsoft",
    "amazon",
    "ibm",
    "oracle",
    "cisco",
    "adobe",
)

_NOT_A_PERSON = re.compile(
    r"certificate|completion|achievement|university|institute|college|"
    r"technology|academy|school|project|program|course",
    re.IGNORECASE,
)

_MINOR_WORDS = frozenset({"of", "and", "for", "the", "in", "at", "by", "on"})
_ACRONYMS = {"It": "IT", "Ai": "AI", "Ml": "ML", "Ui": "UI", "Ux": "UX", "Iit": "IIT"}


def _clean_text(value: str) -> str:
    value = re.sub(r"\s+", " ", value)
    value = re.sub(r"^\s*[-•·]\s*", "", value)
    value = re.sub(r"\s*[-•·]\s*$", "", value)
    return value.strip().rstrip(".,;:")


def _title_case(value: str) -> str:
    words = []
    for i, word in enumerate(value.split(" ")):
        if i > 0 and word.lower() in _MINOR_WORDS:
            words.append(word.lower())
            continue
        if word.isupper() and len(word) <= 4:
            words.append(word)
            continue
        cased = word[:1].upper() + word[1:].lower()
        words.append(_ACRONYMS.get(cased, cased))
    return " ".join(words)


def _is_valid_title(title: str) -> bool:
    if not 3 <= len(title) <= 100:
        return False
    alpha = sum(c.isalpha() for c in title)
    if alpha / len(title) < 0.5:
        return False
    lower = title.lower()
    if lower in _GENERIC_TITLES:
        return False
    return not any(phrase in lower for phrase in _TITLE_SKIP_PHRASES)


def _is_valid_institution(institution: str) -> bool:
    if not 3 <= len(institution) <= 100:
        return False
    lower = institution.lower()
    if any(p in lower for p in ("the following", "this certificate", "hereby present")):
        return False
    return any(k in lower for k in _INSTITUTION_KEYWORDS)


def _first_match(patterns: list[re.Pattern[str]], text: str) -> str | None:
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            value = _clean_text(match.group(1))
            if value:
                return value
    return None


class RuleFieldStructurer:
    """Regex-based field structurer for credential text.

    Never raises on empty or garbled input: fields that cannot be found
    are simply absent from the returned map.
    """

    def structure_text(
        self, raw_text: str, type_info: DocumentTypeInfo | None = None
    ) -> RawFieldMap:
        """Extract candidate fields from recognized text.

        Args:
            raw_text: Text produced by an extraction backend.
            type_info: Classification used to decide which type-specific
                fields to look for.

        Returns:
            Field map with keys such as ``title``, ``institution``,
            ``recipient``, ``date_issued``, and ``certificate_id``.
        """
        text = raw_text or ""
        fields: RawFieldMap = {}
        if not text.strip():
            return fields

        doc_type = type_info.type if type_info else DocumentType.UNKNOWN

        extractors = {
            "title": self.extract_title,
            "institution": self.extract_institution,
            "recipient": self.extract_recipient,
            "date_issued": self.extract_date,
            "certificate_id": self.extract_certificate_id,
            "description": self.extract_description,
        }
        if doc_type in (DocumentType.DIPLOMA, DocumentType.TRANSCRIPT):
            extractors["degree"] = self.extract_degree
        if doc_type is DocumentType.TRANSCRIPT:
            extractors["gpa"] = self.extract_gpa
        if doc_type in (DocumentType.TRANSCRIPT, DocumentType.LICENSE):
            extractors["id_number"] = self.extract_id_number

        for name, extractor in extractors.items():
            value = extractor(text)
            if value:
                fields[name] = value

        logger.info(
            "Rule structuring found %d fields for %s document",
            len(fields),
            doc_type.value,
        )
        return fields

    def extract_title(self, text: str) -> str | None:
        for pattern in _TITLE_PATTERNS:
            match = pattern.search(text)
            if not match:
                continue
            title = _title_case(_clean_text(match.group(1)))
            if _is_valid_title(title):
                return title
        return None

    def extract_institution(self, text: str) -> str | None:
        for pattern in _INSTITUTION_PATTERNS:
            match = pattern.search(text)
            if not match:
                continue
            institution = _title_case(_clean_text(match.group(1)))
            if _is_valid_institution(institution):
                return institution
        return None

    def extract_recipient(self, text: str) -> str | None:
        for pattern in _RECIPIENT_PATTERNS:
            for match in pattern.finditer(text):
                name = _clean_text(match.group(1))
                if name and not _NOT_A_PERSON.search(name):
                    return name
        return None

    def extract_date(self, text: str) -> str | None:
        """Find an issue date; ISO formatted when it can be parsed."""
        for pattern in _DATE_PATTERNS:
            match = pattern.search(text)
            if not match:
                continue
            if pattern.groups == 3:
                candidate = f"{match.group(2)} {match.group(1)}, {match.group(3)}"
            else:
                candidate = match.group(1)
            iso = parse_date(candidate)
            if iso:
                return iso
        return None

    def extract_certificate_id(self, text: str) -> str | None:
        return _first_match(_CERTIFICATE_ID_PATTERNS, text)

    def extract_id_number(self, text: str) -> str | None:
        return _first_match(_ID_NUMBER_PATTERNS, text)

    def extract_degree(self, text: str) -> str | None:
        return _first_match(_DEGREE_PATTERNS, text)

    def extract_gpa(self, text: str) -> str | None:
        return _first_match(_GPA_PATTERNS, text)

    def extract_description(self, text: str) -> str | None:
        """The longest line over 20 characters, used as a short summary."""
        lines = [line.strip() for line in text.splitlines()]
        longest = max((line for line in lines if len(line) > 20), key=len, default="")
        return longest or None
