"""Tests for rule-based and LLM-assisted field structuring."""

from unittest.mock import MagicMock, patch

import pytest

from certscan.classification.document_type import DocumentType, DocumentTypeInfo
from certscan.extraction.llm_structurer import GeminiFieldStructurer, parse_response
from certscan.extraction.rule_extractor import RuleFieldStructurer
from certscan.utils.config import StructurerConfig

TRANSCRIPT_TEXT = """Springfield University
Official Transcript
Student ID: S-10234
Name: John Smith
Program: Bachelor of Science in Physics
Cumulative GPA: 3.65
"""

TRANSCRIPT_INFO = DocumentTypeInfo(type=DocumentType.TRANSCRIPT, confidence=0.75)


@pytest.fixture
def rules() -> RuleFieldStructurer:
    return RuleFieldStructurer()


class TestRuleFieldStructurer:
    """Tests for the regex-based structurer."""

    def test_certificate_fields(
        self, rules: RuleFieldStructurer, certificate_text: str
    ) -> None:
        fields = rules.structure_text(certificate_text)
        assert fields["title"] == "Machine Learning"
        assert fields["institution"] == "Stanford University"
        assert fields["recipient"] == "Jane Doe"
        assert fields["date_issued"] == "2024-03-15"
        assert fields["certificate_id"] == "ML-2024-0042"
        assert fields["description"] == (
            "has successfully completed the Machine Learning course"
        )

    def test_transcript_extras(self, rules: RuleFieldStructurer) -> None:
        fields = rules.structure_text(TRANSCRIPT_TEXT, TRANSCRIPT_INFO)
        assert fields["institution"] == "Springfield University"
        assert fields["recipient"] == "John Smith"
        assert fields["id_number"] == "S-10234"
        assert fields["gpa"] == "3.65"
        assert fields["degree"] == "Bachelor of Science"
        assert fields["title"] == "Bachelor of Science in Physics"
        assert "date_issued" not in fields

    def test_type_bias_skips_irrelevant_fields(self, rules: RuleFieldStructurer) -> None:
        info = DocumentTypeInfo(type=DocumentType.CERTIFICATE, confidence=0.6)
        fields = rules.structure_text(TRANSCRIPT_TEXT, info)
        assert "gpa" not in fields
        assert "degree" not in fields
        assert "id_number" not in fields

    def test_license_gets_id_number(self, rules: RuleFieldStructurer) -> None:
        info = DocumentTypeInfo(type=DocumentType.LICENSE, confidence=0.5)
        fields = rules.structure_text("Nursing License\nLicense No: RN-55821", info)
        assert fields["id_number"] == "RN-55821"
        assert "gpa" not in fields

    @pytest.mark.parametrize("text", ["", "   \n\t", "@@@ ### !!! ~~~"])
    def test_empty_or_garbled_input(self, rules: RuleFieldStructurer, text: str) -> None:
        fields = rules.structure_text(text)
        assert isinstance(fields, dict)
        assert "title" not in fields
        assert "recipient" not in fields

    def test_generic_award_kind_is_not_a_title(self, rules: RuleFieldStructurer) -> None:
        assert rules.extract_title("Certificate of Completion\n") is None

    def test_quoted_title(self, rules: RuleFieldStructurer) -> None:
        title = rules.extract_title('For the course "Advanced Python Programming"')
        assert title == "Advanced Python Programming"

    def test_awarded_to_recipient(self, rules: RuleFieldStructurer) -> None:
        assert rules.extract_recipient("This award is presented to Maria Garcia.") == (
            "Maria Garcia"
        )

    def test_institution_from_platform(self, rules: RuleFieldStructurer) -> None:
        assert rules.extract_institution("Offered through coursera") == "Coursera"

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Date: 12/01/2023", "2023-12-01"),
            ("Issued on March 15, 2024", "2024-03-15"),
            ("on the 5th day of June, 2023", "2023-06-05"),
            ("Completed 2022-07-09", "2022-07-09"),
        ],
    )
    def test_dates(self, rules: RuleFieldStructurer, text: str, expected: str) -> None:
        assert rules.extract_date(text) == expected

    def test_unparseable_date(self, rules: RuleFieldStructurer) -> None:
        assert rules.extract_date("Issued in the spring") is None


class TestParseResponse:
    """Tests for parsing the model's JSON output."""

    def test_plain_json(self) -> None:
        fields = parse_response('{"title": "Data Science", "recipient": "Jane Doe"}')
        assert fields == {"title": "Data Science", "recipient": "Jane Doe"}

    def test_code_fence(self) -> None:
        text = '```json\n{"institution": "Coursera"}\n```'
        assert parse_response(text) == {"institution": "Coursera"}

    def test_nulls_and_unknown_keys_dropped(self) -> None:
        text = '{"title": null, "recipient": "null", "date_issued": "", "extra": "x"}'
        assert parse_response(text) == {}

    def test_non_string_values(self) -> None:
        assert parse_response('{"certificate_id": 12345}') == {"certificate_id": "12345"}

    def test_not_an_object(self) -> None:
        with pytest.raises(ValueError):
            parse_response('["title"]')

    def test_invalid_json(self) -> None:
        with pytest.raises(ValueError):
            parse_response("The certificate was issued to Jane Doe")


class TestGeminiFieldStructurer:
    """Tests for the Gemini-backed structurer and its fallback."""

    def _structurer(
        self, response_text: str = "{}", **config: object
    ) -> tuple[GeminiFieldStructurer, MagicMock, MagicMock]:
        fallback = MagicMock()
        fallback.structure_text.return_value = {"title": "from rules"}
        structurer = GeminiFieldStructurer(
            StructurerConfig(api_key="test-key", **config), fallback=fallback
        )
        client = MagicMock()
        client.models.generate_content.return_value.text = response_text
        structurer._client = client
        return structurer, client, fallback

    def test_uses_model_response(self, certificate_text: str) -> None:
        structurer, client, fallback = self._structurer(
            '{"title": "Machine Learning", "recipient": "Jane Doe", "certificate_id": null}'
        )
        fields = structurer.structure_text(certificate_text)
        assert fields == {"title": "Machine Learning", "recipient": "Jane Doe"}
        fallback.structure_text.assert_not_called()
        kwargs = client.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-2.0-flash"
        assert certificate_text in kwargs["contents"]

    def test_prompt_includes_hints(self) -> None:
        structurer, client, _ = self._structurer('{"title": "x"}')
        info = DocumentTypeInfo(
            type=DocumentType.DIPLOMA,
            confidence=0.7,
            extraction_hints=("Extract degree name, university, graduation date",),
        )
        structurer.structure_text("Bachelor of Arts", info)
        prompt = client.models.generate_content.call_args.kwargs["contents"]
        assert "looks like a diploma" in prompt
        assert "- Extract degree name, university, graduation date" in prompt

    def test_falls_back_without_api_key(self) -> None:
        fallback = MagicMock()
        fallback.structure_text.return_value = {"title": "from rules"}
        structurer = GeminiFieldStructurer(StructurerConfig(), fallback=fallback)
        assert structurer.structure_text("some text") == {"title": "from rules"}
        assert structurer._client is None

    def test_falls_back_when_disabled(self) -> None:
        structurer, client, fallback = self._structurer(use_llm=False)
        assert structurer.structure_text("some text") == {"title": "from rules"}
        client.models.generate_content.assert_not_called()

    def test_falls_back_on_empty_text(self) -> None:
        structurer, client, fallback = self._structurer()
        structurer.structure_text("  ")
        client.models.generate_content.assert_not_called()
        fallback.structure_text.assert_called_once()

    def test_falls_back_on_api_error(self) -> None:
        structurer, client, fallback = self._structurer()
        client.models.generate_content.side_effect = RuntimeError("503 unavailable")
        info = DocumentTypeInfo(type=DocumentType.AWARD, confidence=0.5)
        assert structurer.structure_text("text", info) == {"title": "from rules"}
        fallback.structure_text.assert_called_once_with("text", info)

    def test_falls_back_on_invalid_json(self) -> None:
        structurer, _, fallback = self._structurer("Sorry, I cannot help with that.")
        assert structurer.structure_text("text") == {"title": "from rules"}

    @patch("certscan.extraction.llm_structurer.genai.Client")
    def test_client_created_lazily(self, mock_client_cls: MagicMock) -> None:
        mock_client_cls.return_value.models.generate_content.return_value.text = "{}"
        structurer = GeminiFieldStructurer(StructurerConfig(api_key="abc"))
        mock_client_cls.assert_not_called()

        structurer.structure_text("text")
        structurer.structure_text("more text")

        mock_client_cls.assert_called_once()
        assert mock_client_cls.call_args.kwargs["api_key"] == "abc"

    def test_default_fallback_is_rule_based(self) -> None:
        structurer = GeminiFieldStructurer(StructurerConfig())
        assert isinstance(structurer.fallback, RuleFieldStructurer)
