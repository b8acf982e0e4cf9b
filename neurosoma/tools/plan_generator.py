"""Deterministic plan generator: intake -> personalized 1-7 day breathwork plan.

No LLM call, no I/O. The plan is assembled from the technique library:

    1. days_until      - event date minus today, at least 1
    2. primary         - first technique mapped to the obstacle, with a
                         beginner substitution for intermediate techniques
    3. schedule        - one DayPlan per curriculum day, min(7, days_until)
    4. ritual          - morning / pre-event / during-event steps

Education, if given, is carried through untouched.
"""

import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone

from neurosoma.agent.education import EducationResponse
from neurosoma.tools.intake import GOAL_LABELS, OBSTACLE_LABELS, Intake, parse_event_date
from neurosoma.tools.technique_library import Technique, TechniqueLibrary, get_library

logger = logging.getLogger(__name__)

MAX_PLAN_DAYS = 7
PRACTICE_TIME_SHARE = 0.6
MIN_PRACTICE_MINUTES = 1
REHEARSAL_MINUTES = 15

CHECK_IN_ID = "mbht"
CORE_PRACTICE_ID = "coherence_breathing"
CORE_PRACTICE_NAME = "Coherence Breathing"
BEGINNER_FALLBACK_ID = "breath_awareness"

# Obstacles that share another obstacle's technique list
OBSTACLE_ALIASES = {"chronic_pain": "physical_tension"}

TASK_CHECK_IN = "check-in"
TASK_PRACTICE = "practice"
TASK_JOURNAL = "journal"


# ---------------------------------------------------------------------------
# Plan records
# ---------------------------------------------------------------------------

@dataclass
class DayTask:
    """A single task. `completed` belongs to the presentation layer."""

    type: str
    description: str
    duration_min: int
    technique_id: str | None = None
    completed: bool = False

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "description": self.description,
            "duration_min": self.duration_min,
            "technique_id": self.technique_id,
            "completed": self.completed,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DayTask":
        return cls(
            type=data["type"],
            description=data["description"],
            duration_min=data["duration_min"],
            technique_id=data.get("technique_id"),
            completed=data.get("completed", False),
        )


@dataclass(frozen=True)
class DayPlan:
    day: int
    title: str
    focus: str
    tasks: list[DayTask] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "day": self.day,
            "title": self.title,
            "focus": self.focus,
            "tasks": [t.to_dict() for t in self.tasks],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DayPlan":
        return cls(
            day=data["day"],
            title=data["title"],
            focus=data["focus"],
            tasks=[DayTask.from_dict(t) for t in data.get("tasks", [])],
        )


@dataclass(frozen=True)
class Ritual:
    morning: list[str]
    pre_event: list[str]
    during_event: list[str]

    def to_dict(self) -> dict:
        return {
            "morning": list(self.morning),
            "pre_event": list(self.pre_event),
            "during_event": list(self.during_event),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Ritual":
        return cls(
            morning=list(data.get("morning", [])),
            pre_event=list(data.get("pre_event", [])),
            during_event=list(data.get("during_event", [])),
        )


@dataclass(frozen=True)
class MatchedTechnique:
    id: str
    title: str
    description: str
    duration_min: int
    category: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "duration_min": self.duration_min,
            "category": self.category,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MatchedTechnique":
        return cls(**{k: data[k] for k in ("id", "title", "description", "duration_min", "category")})


@dataclass(frozen=True)
class UserContext:
    goal: str
    obstacle: str
    days_until: int

    def to_dict(self) -> dict:
        return {"goal": self.goal, "obstacle": self.obstacle, "days_until": self.days_until}

    @classmethod
    def from_dict(cls, data: dict) -> "UserContext":
        return cls(goal=data["goal"], obstacle=data["obstacle"], days_until=data["days_until"])


@dataclass(frozen=True)
class ActionPlan:
    """A generated practice plan, ready to store and display."""

    id: str
    created_at: str
    user_context: UserContext
    matched_technique: MatchedTechnique
    schedule: list[DayPlan]
    ritual: Ritual
    education: EducationResponse | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "created_at": self.created_at,
            "user_context": self.user_context.to_dict(),
            "matched_technique": self.matched_technique.to_dict(),
            "schedule": [d.to_dict() for d in self.schedule],
            "ritual": self.ritual.to_dict(),
            "education": self.education.to_dict() if self.education else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ActionPlan":
        education = data.get("education")
        return cls(
            id=data["id"],
            created_at=data["created_at"],
            user_context=UserContext.from_dict(data["user_context"]),
            matched_technique=MatchedTechnique.from_dict(data["matched_technique"]),
            schedule=[DayPlan.from_dict(d) for d in data.get("schedule", [])],
            ritual=Ritual.from_dict(data["ritual"]),
            education=EducationResponse.from_dict(education) if education else None,
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _to_base36(n: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    out = ""
    while n:
        n, r = divmod(n, 36)
        out = digits[r] + out
    return out or "0"


def generate_plan_id() -> str:
    """Opaque plan id: ns-<base36 millis>-<random hex>."""
    millis = int(time.time() * 1000)
    return f"ns-{_to_base36(millis)}-{uuid.uuid4().hex[:8]}"


def _round_half_up(value: float) -> int:
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


def calculate_days_until(event_date: str, today: date | None = None) -> int:
    """Whole days from today to the event, never less than 1."""
    today = today or date.today()
    diff = (parse_event_date(event_date) - today).days
    return max(1, diff)


def scaled_duration(technique: Technique, time_commitment: float) -> int:
    """Practice minutes: the catalog duration, capped at 60% of the time budget.

    The cap never drops below MIN_PRACTICE_MINUTES, so tiny budgets still
    schedule a real session.
    """
    budget = max(
        MIN_PRACTICE_MINUTES,
        _round_half_up((time_commitment or 15) * PRACTICE_TIME_SHARE),
    )
    return min(technique.duration_minutes, budget)


def select_primary_technique(
    obstacle: str,
    experience: str,
    library: TechniqueLibrary,
) -> Technique | None:
    """Pick the core technique for an obstacle.

    Beginners ("none") are never handed an intermediate technique first:
    the second mapped technique (or breath_awareness) replaces it.
    """
    mapped = OBSTACLE_ALIASES.get(obstacle, obstacle)
    technique_ids = library.techniques_for_obstacle(mapped) or (CORE_PRACTICE_ID,)
    technique = library.get_technique(technique_ids[0])

    if technique and technique.difficulty == "intermediate" and experience == "none":
        fallback_id = technique_ids[1] if len(technique_ids) > 1 else BEGINNER_FALLBACK_ID
        return library.get_technique(fallback_id) or technique

    return technique


# ---------------------------------------------------------------------------
# Schedule and ritual
# ---------------------------------------------------------------------------

def build_schedule(
    intake: Intake,
    primary: Technique | None,
    days_until: int,
    library: TechniqueLibrary,
) -> list[DayPlan]:
    """Build min(7, days_until) days of tasks from the curriculum."""
    schedule = []
    plan_days = min(MAX_PLAN_DAYS, days_until)
    obstacle_label = OBSTACLE_LABELS.get(intake.obstacle, intake.obstacle)

    for day in range(1, plan_days + 1):
        config = library.get_day(day)
        if config is None:
            # Unreachable while the catalog defines all seven days
            logger.debug("No curriculum entry for day %d, skipping", day)
            continue

        tasks = [
            DayTask(
                type=TASK_CHECK_IN,
                technique_id=CHECK_IN_ID,
                description=(
                    "Measure your MBHT baseline (first thing after waking)"
                    if day == 1
                    else "Record your MBHT and compare to Day 1"
                ),
                duration_min=2,
            )
        ]

        for technique_id in config.techniques:
            if technique_id == CHECK_IN_ID:
                continue
            technique = library.get_technique(technique_id)
            if technique is None:
                continue
            tasks.append(DayTask(
                type=TASK_PRACTICE,
                technique_id=technique_id,
                description=f"{technique.name}: {technique.instructions.summary}",
                duration_min=scaled_duration(technique, intake.time_commitment),
            ))

        if day >= 3 and primary and primary.id not in config.techniques:
            tasks.append(DayTask(
                type=TASK_PRACTICE,
                technique_id=primary.id,
                description=f"{primary.name} (Your core intervention for {obstacle_label})",
                duration_min=primary.duration_minutes,
            ))

        if day == 1:
            tasks.append(DayTask(
                type=TASK_JOURNAL,
                description=(
                    "Write down 2-3 situations that trigger your symptoms. "
                    "What does it feel like in your body?"
                ),
                duration_min=5,
            ))
        elif day == 5:
            tasks.append(DayTask(
                type=TASK_JOURNAL,
                description="Draft your daily ritual: What breathing practice will you do each morning?",
                duration_min=10,
            ))
        elif day == 7:
            tasks.append(DayTask(
                type=TASK_CHECK_IN,
                description="Rate your progress (1-10). Compare MBHT to Day 1 baseline.",
                duration_min=5,
            ))

        schedule.append(DayPlan(
            day=day,
            title=f"Day {day}: {config.name}",
            focus=config.focus,
            tasks=tasks,
        ))

    if days_until < MAX_PLAN_DAYS and schedule:
        schedule[-1].tasks.append(DayTask(
            type=TASK_PRACTICE,
            description="Full daily ritual rehearsal",
            duration_min=REHEARSAL_MINUTES,
        ))

    return schedule


def build_ritual(
    intake: Intake,
    primary: Technique | None,
    library: TechniqueLibrary,
) -> Ritual:
    name = primary.name if primary else CORE_PRACTICE_NAME
    goal_plan = library.get_goal_plan(intake.goal)
    event_day_protocol = list(goal_plan.event_day_protocol) if goal_plan else []

    return Ritual(
        morning=[
            "Record your MBHT (compare to Day 1 baseline)",
            f"{name} for 10 minutes",
            "Light movement or stretching",
            "Set intention for the day",
        ],
        pre_event=[
            "Find a quiet spot",
            f"5-min {name}",
            "Body scan for tension areas",
            "Slow diaphragmatic breaths",
        ],
        during_event=[
            "If symptoms increase: 4-7-8 breath (3 cycles)",
            "Maintain diaphragmatic breathing awareness",
            "Pause and breathe before reacting",
            *event_day_protocol,
        ],
    )


def _matched_technique(primary: Technique | None) -> MatchedTechnique:
    if primary is None:
        return MatchedTechnique(
            id=CORE_PRACTICE_ID,
            title=CORE_PRACTICE_NAME,
            description="Balance your nervous system",
            duration_min=10,
            category="core",
        )
    return MatchedTechnique(
        id=primary.id,
        title=primary.name,
        description=primary.short_description,
        duration_min=primary.duration_minutes,
        category=primary.category,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def generate_plan(
    intake: Intake,
    education: EducationResponse | None = None,
    today: date | None = None,
    library: TechniqueLibrary | None = None,
) -> ActionPlan:
    """Generate a complete ActionPlan from validated intake. Never raises."""
    library = library or get_library()
    days_until = calculate_days_until(intake.event_date, today=today)
    primary = select_primary_technique(intake.obstacle, intake.experience or "some", library)

    plan = ActionPlan(
        id=generate_plan_id(),
        created_at=datetime.now(timezone.utc).isoformat(timespec="seconds"),
        user_context=UserContext(
            goal=GOAL_LABELS.get(intake.goal, intake.goal),
            obstacle=OBSTACLE_LABELS.get(intake.obstacle, intake.obstacle),
            days_until=days_until,
        ),
        matched_technique=_matched_technique(primary),
        schedule=build_schedule(intake, primary, days_until, library),
        ritual=build_ritual(intake, primary, library),
        education=education,
    )

    logger.info(
        "Generated plan %s: %d days, primary technique %s",
        plan.id, len(plan.schedule), plan.matched_technique.id,
    )
    return plan
