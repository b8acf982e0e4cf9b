"""Protocol matching: contraindication tier -> multi-week breathwork protocol.

Three hand-authored protocols, escalating in intensity:
    gentle   (2 weeks) - extended exhalation only, no breath holds
    moderate (3 weeks) - holds released at first urge, coherence, visualization
    standard (4 weeks) - full progression through energized meditation and Kevala

The condition label only changes the rationale text, never the weeks.
"""

import logging
from dataclasses import dataclass, field

from neurosoma.agent.contraindications import GENTLE, MODERATE, STANDARD

logger = logging.getLogger(__name__)

# Composite of an agent.evaluator judge run; not recomputed at runtime
EVALUATION_SCORE = 0.81


@dataclass(frozen=True)
class ProtocolWeek:
    week: int
    title: str
    focus: str
    techniques: list[str]
    duration: str
    frequency: str
    objectives: list[str]
    cautions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "week": self.week,
            "title": self.title,
            "focus": self.focus,
            "techniques": list(self.techniques),
            "duration": self.duration,
            "frequency": self.frequency,
            "objectives": list(self.objectives),
            "cautions": list(self.cautions),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ProtocolWeek":
        return cls(
            week=data["week"],
            title=data["title"],
            focus=data["focus"],
            techniques=list(data.get("techniques", [])),
            duration=data.get("duration", ""),
            frequency=data.get("frequency", ""),
            objectives=list(data.get("objectives", [])),
            cautions=list(data.get("cautions", [])),
        )


@dataclass(frozen=True)
class MatchedProtocol:
    """A complete multi-week protocol selected for a risk tier."""

    type: str
    name: str
    description: str
    duration_weeks: int
    evaluation_score: float
    weeks: list[ProtocolWeek]
    mbht_tracking: bool
    audio_guided: bool
    rationale: str

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "name": self.name,
            "description": self.description,
            "duration_weeks": self.duration_weeks,
            "evaluation_score": self.evaluation_score,
            "weeks": [w.to_dict() for w in self.weeks],
            "mbht_tracking": self.mbht_tracking,
            "audio_guided": self.audio_guided,
            "rationale": self.rationale,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MatchedProtocol":
        return cls(
            type=data["type"],
            name=data["name"],
            description=data["description"],
            duration_weeks=data["duration_weeks"],
            evaluation_score=data["evaluation_score"],
            weeks=[ProtocolWeek.from_dict(w) for w in data.get("weeks", [])],
            mbht_tracking=data["mbht_tracking"],
            audio_guided=data["audio_guided"],
            rationale=data["rationale"],
        )


def _condition_suffix(condition: str | None) -> str:
    return f" ({condition})" if condition else ""


# ---------------------------------------------------------------------------
# Protocol templates
# ---------------------------------------------------------------------------

def _gentle_protocol(condition: str | None) -> MatchedProtocol:
    return MatchedProtocol(
        type=GENTLE,
        name="Gentle Activation Protocol",
        description=(
            "A conservative breathwork approach focused on parasympathetic activation "
            "without intensive techniques. Designed for conditions requiring extra caution."
        ),
        duration_weeks=2,
        evaluation_score=EVALUATION_SCORE,
        mbht_tracking=False,
        audio_guided=True,
        rationale=(
            f"Based on your health profile{_condition_suffix(condition)}, we recommend "
            "starting with our gentlest protocol. This focuses on parasympathetic activation "
            "through extended exhalation, avoiding breath holds or intensive techniques."
        ),
        weeks=[
            ProtocolWeek(
                week=1,
                title="Foundation: Extended Exhalation",
                focus="Parasympathetic activation through 4:8 breathing pattern",
                techniques=[
                    "4:8 Extended Exhalation (4-second inhale, 8-second exhale)",
                    "Diaphragmatic breathing awareness",
                    "Gentle body scan",
                ],
                duration="10-15 minutes per session",
                frequency="Daily, preferably evening",
                objectives=[
                    "Execute 4:8 breathing pattern for 10+ minutes",
                    "Understand physiological basis for breath-based healing",
                ],
                cautions=[
                    "Stop if you feel dizzy or lightheaded",
                    "No breath holds in this protocol",
                    "Listen to your body - shorter sessions are fine",
                ],
            ),
            ProtocolWeek(
                week=2,
                title="Deepening: Relaxation Response",
                focus="Building consistency and body awareness",
                techniques=[
                    "4:8 Extended Exhalation (continued)",
                    "Progressive muscle relaxation with breath",
                    "Gentle visualization (optional)",
                ],
                duration="15-20 minutes per session",
                frequency="Daily",
                objectives=[
                    "Sustain 4:8 pattern with ease",
                    "Notice relaxation response in body",
                ],
                cautions=[
                    "Continue avoiding breath holds",
                    "Consult healthcare provider before advancing",
                ],
            ),
        ],
    )


def _moderate_protocol(condition: str | None) -> MatchedProtocol:
    return MatchedProtocol(
        type=MODERATE,
        name="Adaptive Healing Protocol",
        description=(
            "A balanced breathwork approach with modified breath holds and visualization. "
            "Suitable for most conditions with some precautions."
        ),
        duration_weeks=3,
        evaluation_score=EVALUATION_SCORE,
        mbht_tracking=True,
        audio_guided=True,
        rationale=(
            f"Based on your health profile{_condition_suffix(condition)}, we recommend our "
            'adaptive protocol. This includes gentle breath retention with the "release at '
            'first urge" principle, ensuring safety while providing deeper benefits.'
        ),
        weeks=[
            ProtocolWeek(
                week=1,
                title="Foundation: Extended Exhalation",
                focus="Parasympathetic activation through 4:8 breathing",
                techniques=[
                    "4:8 Extended Exhalation",
                    "SOMA Daily Dose (modified - shorter holds)",
                    "Basic MBHT measurement",
                ],
                duration="15-22 minutes per session",
                frequency="Daily",
                objectives=[
                    "Execute 4:8 breathing pattern",
                    "Complete modified Daily Dose session",
                    "Establish MBHT baseline",
                ],
                cautions=[
                    "Release breath holds at FIRST urge - never force",
                    "Stop if any concerning symptoms arise",
                ],
            ),
            ProtocolWeek(
                week=2,
                title="Building: Coherent Breathing",
                focus="Heart coherence and visualization",
                techniques=[
                    "4:4 Coherent Breathing",
                    "Directed healing visualization",
                    "AUM chanting (optional)",
                ],
                duration="20-25 minutes per session",
                frequency="Daily",
                objectives=[
                    "Execute 4:4 coherent breathing",
                    "Practice visualization during gentle holds",
                ],
                cautions=[
                    "Continue monitoring how you feel",
                    "Skip AUM if any respiratory concerns",
                ],
            ),
            ProtocolWeek(
                week=3,
                title="Integration: Pattern Selection",
                focus="Learning to match techniques to your state",
                techniques=[
                    "Pattern selection based on energy/healing phase",
                    "Full SOMA Energized Meditation (modified)",
                    "Progress tracking with MBHT",
                ],
                duration="25-30 minutes per session",
                frequency="Daily or 5x/week",
                objectives=[
                    "Select appropriate pattern for current state",
                    "Track progress with MBHT measurements",
                ],
                cautions=[
                    "Review with healthcare provider before continuing",
                ],
            ),
        ],
    )


def _standard_protocol(condition: str | None) -> MatchedProtocol:
    return MatchedProtocol(
        type=STANDARD,
        name="Complete Healing Protocol",
        description=(
            "The full SOMA breathwork progression designed for optimal healing, "
            "scored 0.81 on the Data to Wisdom instructional design evaluation."
        ),
        duration_weeks=4,
        evaluation_score=EVALUATION_SCORE,
        mbht_tracking=True,
        audio_guided=True,
        rationale=(
            f"Based on your health profile{_condition_suffix(condition)}, you can follow our "
            "complete protocol. This provides the full progression from parasympathetic "
            "activation through advanced integration practices."
        ),
        weeks=[
            ProtocolWeek(
                week=1,
                title="Foundation: Parasympathetic Activation",
                focus="4:8 breathing for rest-and-digest state",
                techniques=[
                    "4:8 Extended Exhalation",
                    "SOMA Daily Dose with breath retention",
                    "Basic visualization during holds",
                ],
                duration="22 minutes per session",
                frequency="Daily",
                objectives=[
                    "Execute 4:8 breathing for 10+ minutes",
                    "Complete full Daily Dose session",
                    "Establish MBHT baseline",
                ],
                cautions=[
                    "Release at first urge - never force holds",
                ],
            ),
            ProtocolWeek(
                week=2,
                title="Building: Heart Coherence",
                focus="4:4 breathing and directed healing",
                techniques=[
                    "4:4 Coherent Breathing",
                    "AUM Chanting",
                    "Advanced visualization during holds",
                    "MBHT tracking",
                ],
                duration="25-30 minutes per session",
                frequency="Daily",
                objectives=[
                    "Execute 4:4 coherent breathing",
                    "Practice AUM with resonance",
                    "Direct visualization to areas of concern",
                ],
            ),
            ProtocolWeek(
                week=3,
                title="Expansion: Energized Meditation",
                focus="Full SOMA sequence and pattern mastery",
                techniques=[
                    "Full Energized Meditation (Move-Chant-Breathe)",
                    "Pattern selection based on needs",
                    "Energizing patterns (2:2) when appropriate",
                ],
                duration="30-45 minutes per session",
                frequency="Daily or 5x/week",
                objectives=[
                    "Complete full Energized Meditation",
                    "Differentiate and select appropriate patterns",
                ],
            ),
            ProtocolWeek(
                week=4,
                title="Integration: Mastery & Design",
                focus="Advanced states and personal practice design",
                techniques=[
                    "Kevala continuous flow breathing",
                    "Integration journeys",
                    "Personal practice plan design",
                ],
                duration="30-60 minutes per session",
                frequency="5x/week",
                objectives=[
                    "Experience Kevala states",
                    "Evaluate progress with MBHT trends",
                    "Design ongoing personal practice",
                ],
            ),
        ],
    )


_PROTOCOLS = {
    GENTLE: _gentle_protocol,
    MODERATE: _moderate_protocol,
    STANDARD: _standard_protocol,
}

_SAFETY_BADGES = {
    GENTLE: {"label": "Maximum Safety", "color": "green"},
    MODERATE: {"label": "Modified for Safety", "color": "yellow"},
    STANDARD: {"label": "Standard Protocol", "color": "blue"},
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def match_protocol(protocol_type: str, condition: str | None = None) -> MatchedProtocol:
    """Return the protocol for a tier. Unknown tiers get the standard protocol."""
    builder = _PROTOCOLS.get(protocol_type)
    if builder is None:
        logger.debug("Unknown protocol type %r, falling back to standard", protocol_type)
        builder = _standard_protocol
    return builder(condition)


def get_protocol_summary(protocol: MatchedProtocol) -> str:
    """One-line summary for display."""
    return f"{protocol.name} ({protocol.duration_weeks} weeks) - {protocol.description}"


def get_safety_badge(protocol_type: str) -> dict:
    """Safety badge label and color for a protocol tier."""
    return dict(_SAFETY_BADGES.get(protocol_type, _SAFETY_BADGES[STANDARD]))
