"""LLM-assisted field structuring through the Gemini API.

OCR text of certificates is often noisy enough that regex heuristics miss
fields. When an API key is configured, the text is sent to Gemini with a
JSON-only prompt; any failure falls back to the rule-based structurer.
"""

import json

from google import genai
from google.genai import types

from certscan.classification.document_type import DocumentTypeInfo
from certscan.utils.config import StructurerConfig
from certscan.utils.logger import get_logger

from .base import RawFieldMap
from .rule_extractor import RuleFieldStructurer

logger = get_logger(__name__)

MAX_PROMPT_CHARS = 8000

_FIELDS = ("title", "institution", "recipient", "date_issued", "certificate_id", "description")

STRUCTURING_PROMPT = """Extract certificate information from the OCR text below. Return JSON only.

Use exactly these keys: "title" (certificate or course title), "institution"
(issuing organization), "recipient" (full name of the person), "date_issued"
(YYYY-MM-DD), "certificate_id" (verification or credential ID), and
"description" (one short sentence). Use null for anything not present in the
text. Do not invent values.
{hints}
OCR text:
{text}"""


def _strip_code_fence(text: str) -> str:
    text = text.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()


def parse_response(text: str) -> RawFieldMap:
    """Parse a model response into a field map.

    Args:
        text: Model output, optionally wrapped in a Markdown code fence.

    Returns:
        Non-empty string fields among the expected keys.

    Raises:
        ValueError: If the response is not a JSON object.
    """
    payload = json.loads(_strip_code_fence(text))
    if not isinstance(payload, dict):
        raise ValueError("Expected a JSON object")

    fields: RawFieldMap = {}
    for key in _FIELDS:
        value = payload.get(key)
        if value is None or isinstance(value, (dict, list, bool)):
            continue
        value = str(value).strip()
        if value and value.lower() != "null":
            fields[key] = value
    return fields


class GeminiFieldStructurer:
    """Field structurer backed by a Gemini model with a rule-based fallback.

    Args:
        config: Model name, API key, timeout, and sampling settings.
        fallback: Structurer used when the model cannot be used.
    """

    def __init__(
        self,
        config: StructurerConfig | None = None,
        fallback: RuleFieldStructurer | None = None,
    ) -> None:
        self.config = config or StructurerConfig()
        self.fallback = fallback or RuleFieldStructurer()
        self._client: genai.Client | None = None

    def _get_client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(
                api_key=self.config.api_key,
                http_options=types.HttpOptions(
                    timeout=int(self.config.timeout_seconds * 1000)
                ),
            )
        return self._client

    def structure_text(
        self, raw_text: str, type_info: DocumentTypeInfo | None = None
    ) -> RawFieldMap:
        """Structure text with Gemini, or with the fallback when unavailable.

        Args:
            raw_text: Recognized text of the document.
            type_info: Classification whose hints are included in the prompt.

        Returns:
            Structured field map.
        """
        if not self.config.use_llm or not self.config.api_key or not raw_text.strip():
            return self.fallback.structure_text(raw_text, type_info)

        try:
            response = self._get_client().models.generate_content(
                model=self.config.model_name,
                contents=self._build_prompt(raw_text, type_info),
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    temperature=self.config.temperature,
                    max_output_tokens=self.config.max_output_tokens,
                ),
            )
            fields = parse_response(response.text or "")
        except Exception as exc:
            logger.warning("LLM structuring failed, using rule-based fallback: %s", exc)
            return self.fallback.structure_text(raw_text, type_info)

        logger.info("LLM structuring found %d fields", len(fields))
        return fields

    def _build_prompt(self, raw_text: str, type_info: DocumentTypeInfo | None) -> str:
        hints = ""
        if type_info is not None:
            lines = [f"The document looks like a {type_info.type.value}."]
            lines.extend(f"- {hint}" for hint in type_info.extraction_hints)
            hints = "\n" + "\n".join(lines) + "\n"
        return STRUCTURING_PROMPT.format(hints=hints, text=raw_text[:MAX_PROMPT_CHARS])
