"""Technique library: static breathwork catalog, curriculum and goal metadata.

Loaded once per process from data/technique_library.json. Every lookup
returns None (or an empty tuple) on a miss so callers can fall back.
"""

import json
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

logger = logging.getLogger(__name__)

LIBRARY_PATH = Path(__file__).parent.parent / "data" / "technique_library.json"

CATEGORIES = (
    "regulation",
    "activation",
    "integration",
    "foundation",
    "physical",
    "assessment",
    "advanced",
    "core",
)


@dataclass(frozen=True)
class TechniqueInstructions:
    summary: str
    steps: tuple[str, ...] = ()


@dataclass(frozen=True)
class Technique:
    id: str
    name: str
    short_description: str
    category: str
    duration_minutes: int
    difficulty: str
    instructions: TechniqueInstructions
    purpose: str = ""
    best_for: tuple[str, ...] = ()
    benefits: tuple[str, ...] = ()
    nap_day: int | None = None


@dataclass(frozen=True)
class DayCurriculumEntry:
    day: int
    name: str
    focus: str
    techniques: tuple[str, ...]
    time_minutes: int
    deliverable: str


@dataclass(frozen=True)
class GoalPlan:
    name: str
    recommended_days: int
    primary_technique: str
    ritual_components: tuple[str, ...] = ()
    event_day_protocol: tuple[str, ...] = ()


@dataclass(frozen=True)
class TechniqueLibrary:
    techniques: dict[str, Technique] = field(default_factory=dict)
    obstacle_technique_map: dict[str, tuple[str, ...]] = field(default_factory=dict)
    goal_plans: dict[str, GoalPlan] = field(default_factory=dict)
    day_curriculum: dict[int, DayCurriculumEntry] = field(default_factory=dict)

    def get_technique(self, technique_id: str | None) -> Technique | None:
        if technique_id is None:
            return None
        return self.techniques.get(technique_id)

    def techniques_for_obstacle(self, obstacle: str) -> tuple[str, ...]:
        return self.obstacle_technique_map.get(obstacle, ())

    def get_goal_plan(self, goal: str) -> GoalPlan | None:
        return self.goal_plans.get(goal)

    def get_day(self, day: int) -> DayCurriculumEntry | None:
        return self.day_curriculum.get(day)


def _parse_technique(raw: dict) -> Technique:
    category = raw["category"]
    if category not in CATEGORIES:
        raise ValueError(f"Technique {raw['id']!r} has unknown category {category!r}")
    instructions = raw.get("instructions", {})
    return Technique(
        id=raw["id"],
        name=raw["name"],
        short_description=raw.get("short_description", ""),
        category=category,
        duration_minutes=int(raw["duration_minutes"]),
        difficulty=raw.get("difficulty", "beginner"),
        instructions=TechniqueInstructions(
            summary=instructions.get("summary", ""),
            steps=tuple(instructions.get("steps", [])),
        ),
        purpose=raw.get("purpose", ""),
        best_for=tuple(raw.get("best_for", [])),
        benefits=tuple(raw.get("benefits", [])),
        nap_day=raw.get("nap_day"),
    )


def parse_library(data: dict) -> TechniqueLibrary:
    """Build a TechniqueLibrary from the catalog's JSON structure.

    Raises ValueError on a malformed catalog (bad category).
    """
    techniques = {}
    for raw in data.get("techniques", []):
        technique = _parse_technique(raw)
        techniques[technique.id] = technique

    goal_plans = {
        goal: GoalPlan(
            name=raw["name"],
            recommended_days=int(raw.get("recommended_days", 7)),
            primary_technique=raw.get("primary_technique", ""),
            ritual_components=tuple(raw.get("ritual_components", [])),
            event_day_protocol=tuple(raw.get("event_day_protocol", [])),
        )
        for goal, raw in data.get("goal_plans", {}).items()
    }

    day_curriculum = {
        int(day): DayCurriculumEntry(
            day=int(day),
            name=raw["name"],
            focus=raw.get("focus", ""),
            techniques=tuple(raw.get("techniques", [])),
            time_minutes=int(raw.get("time_minutes", 15)),
            deliverable=raw.get("deliverable", ""),
        )
        for day, raw in data.get("day_curriculum", {}).items()
    }

    obstacle_map = {
        obstacle: tuple(ids)
        for obstacle, ids in data.get("obstacle_technique_map", {}).items()
    }

    return TechniqueLibrary(
        techniques=techniques,
        obstacle_technique_map=obstacle_map,
        goal_plans=goal_plans,
        day_curriculum=day_curriculum,
    )


def load_library(path: str | Path | None = None) -> TechniqueLibrary:
    """Load the technique catalog from disk."""
    path = Path(path) if path else LIBRARY_PATH
    library = parse_library(json.loads(path.read_text(encoding="utf-8")))
    logger.debug(
        "Loaded %d techniques, %d curriculum days from %s",
        len(library.techniques), len(library.day_curriculum), path,
    )
    return library


@lru_cache(maxsize=1)
def get_library() -> TechniqueLibrary:
    """Process-wide technique library, loaded on first use."""
    return load_library()
