"""Tests for education response parsing and the upstream education call."""

from unittest.mock import MagicMock

import pytest

from neurosoma.agent.contraindications import DEFAULT_ABSOLUTE, MODERATE
from neurosoma.agent.education import (
    DEFAULT_ANATOMY,
    DEFAULT_COMMUNICATION_GUIDE,
    DEFAULT_DISCLAIMER,
    DEFAULT_QUESTIONS,
    DEFAULT_RESEARCH,
    EducationRequest,
    EducationResponse,
    educate,
    get_health_education,
    parse_education_response,
    parse_questions,
    validate_education_request,
)


class TestParseQuestions:

    def test_numbered_and_bulleted(self):
        section = (
            "1. Is breathwork safe with my heart condition?\n"
            "- Which techniques should I avoid entirely?\n"
            "* Short?\n"
        )
        assert parse_questions(section) == [
            "Is breathwork safe with my heart condition?",
            "Which techniques should I avoid entirely?",
        ]

    def test_capped_at_six(self):
        section = "\n".join(f"{i}. Question number {i} about my condition?" for i in range(1, 10))
        assert len(parse_questions(section)) == 6

    def test_empty_uses_defaults(self):
        assert parse_questions("") == list(DEFAULT_QUESTIONS)
        assert parse_questions("No list here, only prose.") == list(DEFAULT_QUESTIONS)


class TestParseEducationResponse:

    def test_well_formed_response(self, sample_response):
        edu = parse_education_response(sample_response)
        assert edu.anatomy_physiology.startswith("The diaphragm")
        assert "RCTs" in edu.research_evidence
        assert "lumbar" in edu.communication_guide
        assert edu.contraindications.absolute == ["Avoid breath holds during pregnancy"]
        assert edu.questions_for_doctor == [
            "Is slow breathing safe with my current blood pressure?",
            "Should I avoid breath holds with my condition?",
            "Could breathwork interact with my pain medication?",
        ]
        assert edu.disclaimer == "This is educational information only."
        assert edu.recommended_protocol_type == MODERATE
        assert edu.raw_response == sample_response

    def test_header_variants(self):
        text = (
            "## Anatomy and Physiology\nLungs.\n"
            "## How to Explain to Your Doctor\nBe precise.\n"
            "## Contraindications and Precautions\nRelative\n- Asthma\n"
            "## Disclaimer\nNot advice."
        )
        edu = parse_education_response(text)
        assert edu.anatomy_physiology == "Lungs."
        assert edu.communication_guide == "Be precise."
        assert edu.contraindications.relative == ["Asthma"]
        assert edu.disclaimer == "Not advice."

    def test_numbered_headers(self):
        text = "## 1. Anatomy & Physiology\nBody text.\n## 2. Research Evidence\nStudies."
        edu = parse_education_response(text)
        assert edu.anatomy_physiology == "Body text."
        assert edu.research_evidence == "Studies."

    def test_bold_headings_use_keyword_scan(self):
        text = "**Research findings**\nA meta-analysis found benefit.\n**Anything else**\nx"
        edu = parse_education_response(text)
        assert edu.research_evidence == "A meta-analysis found benefit."

    def test_unstructured_text_gets_every_default(self):
        edu = parse_education_response("I'm sorry, I can't help with that.")
        assert edu.anatomy_physiology == DEFAULT_ANATOMY
        assert edu.research_evidence == DEFAULT_RESEARCH
        assert edu.communication_guide == DEFAULT_COMMUNICATION_GUIDE
        assert edu.disclaimer == DEFAULT_DISCLAIMER
        assert edu.contraindications.absolute == [DEFAULT_ABSOLUTE]
        assert len(edu.contraindications.warning_signs) == 4
        assert edu.questions_for_doctor == list(DEFAULT_QUESTIONS)
        assert edu.recommended_protocol_type == MODERATE

    def test_questions_always_between_one_and_six(self, sample_response):
        for text in ("", sample_response, "## Questions for Your Doctor\n- tiny"):
            n = len(parse_education_response(text).questions_for_doctor)
            assert 1 <= n <= 6

    def test_round_trips_through_dict(self, sample_response):
        edu = parse_education_response(sample_response)
        assert EducationResponse.from_dict(edu.to_dict()) == edu


class TestValidateEducationRequest:

    def test_missing_question(self):
        with pytest.raises(ValueError, match="required"):
            validate_education_request(EducationRequest(health_question=""))

    def test_short_question(self):
        with pytest.raises(ValueError, match="at least 20"):
            validate_education_request(EducationRequest(health_question="Back pain?"))

    def test_valid_question(self):
        validate_education_request(
            EducationRequest(health_question="I have chronic back pain, can breathwork help?")
        )


class TestGetHealthEducation:

    def test_single_call_and_parse(self, mock_client, sample_response):
        request = EducationRequest(
            health_question="Chronic back pain for years. Can breathing help?",
            condition="chronic back pain",
            current_treatments="ibuprofen",
        )
        edu = get_health_education(request, client=mock_client)

        mock_client.models.generate_content.assert_called_once()
        kwargs = mock_client.models.generate_content.call_args.kwargs
        prompt = kwargs["contents"][0].parts[0].text
        assert "Chronic back pain for years" in prompt
        assert "Specific condition mentioned: chronic back pain" in prompt
        assert "Current treatments/medications: ibuprofen" in prompt
        assert edu.raw_response == sample_response.strip()

    def test_invalid_request_makes_no_call(self, mock_client):
        with pytest.raises(ValueError):
            get_health_education(EducationRequest(health_question="short"), client=mock_client)
        mock_client.models.generate_content.assert_not_called()

    def test_api_error_propagates(self):
        client = MagicMock()
        client.models.generate_content.side_effect = RuntimeError("503 Service Unavailable")
        request = EducationRequest(health_question="Is breathwork safe with asthma attacks?")
        with pytest.raises(RuntimeError):
            get_health_education(request, client=client)

    def test_educate_matches_protocol(self, mock_client):
        request = EducationRequest(
            health_question="Is breathwork safe during my pregnancy?",
            condition="pregnancy",
        )
        edu, protocol = educate(request, client=mock_client)
        assert protocol.type == edu.recommended_protocol_type
        assert "(pregnancy)" in protocol.rationale
