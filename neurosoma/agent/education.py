"""Health education: turn a model-generated markdown answer into a fixed record.

The upstream call is a single generate_content request. Everything after it
(parse_education_response) is pure and tolerant of missing or renamed
sections: every field has a default.
"""

import logging
import re
from dataclasses import dataclass

from google import genai

from neurosoma.agent.contraindications import (
    Contraindications,
    classify_contraindications,
    estimate_protocol_type,
)
from neurosoma.agent.llm import generate_text
from neurosoma.agent.prompts import EDUCATION_SYSTEM_PROMPT, build_education_prompt
from neurosoma.agent.protocol_matcher import MatchedProtocol, match_protocol
from neurosoma.agent.sections import extract_sections, find_section, lookup_section

logger = logging.getLogger(__name__)

MIN_QUESTION_LENGTH = 20
MAX_QUESTIONS = 6
MIN_QUESTION_CHARS = 15

DEFAULT_ANATOMY = "Please consult the full response for anatomical information."
DEFAULT_RESEARCH = (
    "Limited research evidence available for this specific query. "
    "Please consult peer-reviewed sources."
)
DEFAULT_COMMUNICATION_GUIDE = (
    "Use specific, measurable terms to describe your symptoms. Include location, timing, "
    "intensity (1-10 scale), and what makes it better or worse."
)
DEFAULT_DISCLAIMER = (
    "This information is for educational purposes only and does not constitute medical "
    "advice. Please consult a qualified healthcare provider before starting any new "
    "health practice."
)
DEFAULT_QUESTIONS = (
    "Is breathwork safe for my specific condition?",
    "Are there any techniques I should avoid?",
    "How might my current medications interact with breathing exercises?",
    "What warning signs should prompt me to stop and seek help?",
    "Would you recommend working with a certified instructor?",
)

_QUESTION_RE = re.compile(r"^\s*[-*•\d.]+\s*(.+)")


@dataclass(frozen=True)
class EducationRequest:
    health_question: str
    condition: str | None = None
    current_treatments: str | None = None


@dataclass(frozen=True)
class EducationResponse:
    """Structured education derived from one model response."""

    anatomy_physiology: str
    research_evidence: str
    communication_guide: str
    contraindications: Contraindications
    questions_for_doctor: list[str]
    disclaimer: str
    recommended_protocol_type: str
    raw_response: str

    def to_dict(self) -> dict:
        return {
            "anatomy_physiology": self.anatomy_physiology,
            "research_evidence": self.research_evidence,
            "communication_guide": self.communication_guide,
            "contraindications": self.contraindications.to_dict(),
            "questions_for_doctor": list(self.questions_for_doctor),
            "disclaimer": self.disclaimer,
            "recommended_protocol_type": self.recommended_protocol_type,
            "raw_response": self.raw_response,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "EducationResponse":
        return cls(
            anatomy_physiology=data["anatomy_physiology"],
            research_evidence=data["research_evidence"],
            communication_guide=data["communication_guide"],
            contraindications=Contraindications.from_dict(data["contraindications"]),
            questions_for_doctor=list(data["questions_for_doctor"]),
            disclaimer=data["disclaimer"],
            recommended_protocol_type=data["recommended_protocol_type"],
            raw_response=data.get("raw_response", ""),
        )


def parse_questions(section: str) -> list[str]:
    """Pull bulleted or numbered questions out of a section.

    Items of 15 characters or fewer are dropped. Returns 1-6 questions.
    """
    questions = []
    for line in (section or "").splitlines():
        match = _QUESTION_RE.match(line)
        if not match:
            continue
        question = match.group(1).strip()
        if len(question) > MIN_QUESTION_CHARS:
            questions.append(question)

    if not questions:
        return list(DEFAULT_QUESTIONS)
    return questions[:MAX_QUESTIONS]


def parse_education_response(text: str) -> EducationResponse:
    """Parse raw model markdown into an EducationResponse. Never raises."""
    sections = extract_sections(text)
    if not sections:
        logger.debug("No markdown headers in education response, relying on defaults")

    anatomy = lookup_section(
        sections,
        ["anatomy & physiology", "anatomy and physiology"],
        keyword="anatomy",
        default=DEFAULT_ANATOMY,
        text=text,
    )
    research = lookup_section(
        sections,
        ["research evidence"],
        keyword="research",
        default=DEFAULT_RESEARCH,
        text=text,
    )
    communication_guide = lookup_section(
        sections,
        ["how to explain this to your doctor", "how to explain to your doctor"],
        keyword="explain",
        default=DEFAULT_COMMUNICATION_GUIDE,
        text=text,
    )
    contraindications_section = lookup_section(
        sections,
        ["contraindications & precautions", "contraindications and precautions"],
        keyword="contraindication",
        text=text,
    )
    questions_section = lookup_section(
        sections,
        ["questions for your doctor"],
        keyword="question",
        text=text,
    )
    disclaimer = find_section(sections, ["important disclaimer", "disclaimer"]) or DEFAULT_DISCLAIMER

    contraindications = classify_contraindications(contraindications_section)

    return EducationResponse(
        anatomy_physiology=anatomy,
        research_evidence=research,
        communication_guide=communication_guide,
        contraindications=contraindications,
        questions_for_doctor=parse_questions(questions_section),
        disclaimer=disclaimer,
        recommended_protocol_type=estimate_protocol_type(contraindications),
        raw_response=text,
    )


def validate_education_request(request: EducationRequest) -> None:
    """Raise ValueError if the health question is missing or too short."""
    question = request.health_question
    if not question or not isinstance(question, str):
        raise ValueError("Health question is required")
    if len(question) < MIN_QUESTION_LENGTH:
        raise ValueError(
            f"Please provide more detail (at least {MIN_QUESTION_LENGTH} characters)"
        )


def get_health_education(
    request: EducationRequest,
    client: genai.Client | None = None,
) -> EducationResponse:
    """Ask the model for education on a health question and parse the answer.

    Raises ValueError for an invalid request.
    Raises google.genai errors on API failure.
    """
    validate_education_request(request)
    prompt = build_education_prompt(
        request.health_question,
        condition=request.condition,
        current_treatments=request.current_treatments,
    )
    text = generate_text(prompt, EDUCATION_SYSTEM_PROMPT, client=client)
    logger.info("Received education response (%d chars)", len(text))
    return parse_education_response(text)


def educate(
    request: EducationRequest,
    client: genai.Client | None = None,
) -> tuple[EducationResponse, MatchedProtocol]:
    """Education plus the protocol matched to its contraindication tier."""
    education = get_health_education(request, client=client)
    protocol = match_protocol(education.recommended_protocol_type, request.condition)
    return education, protocol
