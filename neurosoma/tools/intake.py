"""Intake: the user's goal, event date and obstacle, validated at the boundary."""

import re
from dataclasses import dataclass
from datetime import date, datetime

GOALS = ("presentation", "conversation", "interview", "deadline", "personal", "pain_management")
OBSTACLES = (
    "anxiety",
    "low_energy",
    "scattered",
    "emotional",
    "creative",
    "physical_tension",
    "performance_anxiety",
    "chronic_pain",
)
EXPERIENCE_LEVELS = ("none", "some", "regular")

DEFAULT_TIME_COMMITMENT = 15
DEFAULT_EXPERIENCE = "some"

GOAL_LABELS = {
    "presentation": "High-Stakes Presentation",
    "conversation": "Difficult Conversation",
    "interview": "Job Interview",
    "deadline": "Creative Deadline",
    "personal": "Personal Event",
    "pain_management": "Pain Management Journey",
}

OBSTACLE_LABELS = {
    "anxiety": "Anxiety / Nervousness",
    "low_energy": "Low Energy / Motivation",
    "scattered": "Scattered Focus / Overthinking",
    "emotional": "Emotional Reactivity",
    "creative": "Creative Block",
    "physical_tension": "Physical Tension",
    "performance_anxiety": "Performance Anxiety",
    "chronic_pain": "Chronic Pain Management",
}

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class IntakeError(ValueError):
    """Invalid intake data. `details` maps field name to message."""

    def __init__(self, details: dict[str, str]):
        self.details = details
        summary = "; ".join(f"{k}: {v}" for k, v in details.items())
        super().__init__(f"Invalid intake data ({summary})")


@dataclass(frozen=True)
class Intake:
    goal: str
    event_date: str
    obstacle: str
    time_commitment: float = DEFAULT_TIME_COMMITMENT
    experience: str = DEFAULT_EXPERIENCE
    email: str | None = None
    symptom_description: str | None = None

    def to_dict(self) -> dict:
        return {
            "goal": self.goal,
            "event_date": self.event_date,
            "obstacle": self.obstacle,
            "time_commitment": self.time_commitment,
            "experience": self.experience,
            "email": self.email,
            "symptom_description": self.symptom_description,
        }


def parse_event_date(value: str) -> date:
    """Parse a calendar date or ISO timestamp. Raises ValueError."""
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    # fromisoformat only learned the "Z" suffix in 3.11
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value).date()


def parse_intake(data: dict) -> Intake:
    """Validate a raw intake dict and return an Intake.

    Raises IntakeError listing every invalid field.
    """
    errors: dict[str, str] = {}

    goal = data.get("goal")
    if goal not in GOALS:
        errors["goal"] = f"must be one of {', '.join(GOALS)}"

    obstacle = data.get("obstacle")
    if obstacle not in OBSTACLES:
        errors["obstacle"] = f"must be one of {', '.join(OBSTACLES)}"

    event_date = data.get("event_date")
    if not isinstance(event_date, str):
        errors["event_date"] = "is required"
    else:
        try:
            parse_event_date(event_date)
        except ValueError:
            errors["event_date"] = f"not a valid date: {event_date!r}"

    time_commitment = data.get("time_commitment")
    if time_commitment is None:
        time_commitment = DEFAULT_TIME_COMMITMENT
    elif isinstance(time_commitment, bool) or not isinstance(time_commitment, (int, float)):
        errors["time_commitment"] = "must be a number of minutes"
    elif time_commitment <= 0:
        errors["time_commitment"] = "must be positive"

    experience = data.get("experience") or DEFAULT_EXPERIENCE
    if experience not in EXPERIENCE_LEVELS:
        errors["experience"] = f"must be one of {', '.join(EXPERIENCE_LEVELS)}"

    email = data.get("email")
    if email is not None and not (isinstance(email, str) and _EMAIL_RE.match(email)):
        errors["email"] = "not a valid email address"

    if errors:
        raise IntakeError(errors)

    return Intake(
        goal=goal,
        event_date=event_date,
        obstacle=obstacle,
        time_commitment=time_commitment,
        experience=experience,
        email=email,
        symptom_description=data.get("symptom_description"),
    )
