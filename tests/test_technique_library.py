"""Tests for the bundled technique catalog and its loader."""

import json

import pytest

from neurosoma.tools.intake import GOALS, OBSTACLES
from neurosoma.tools.technique_library import (
    CATEGORIES,
    get_library,
    load_library,
    parse_library,
)


class TestCatalogIntegrity:

    def test_loaded_once(self):
        assert get_library() is get_library()

    def test_every_category_is_known(self, library):
        for technique in library.techniques.values():
            assert technique.category in CATEGORIES

    def test_seven_curriculum_days(self, library):
        assert sorted(library.day_curriculum) == list(range(1, 8))

    def test_referenced_ids_exist(self, library):
        referenced = set()
        for entry in library.day_curriculum.values():
            referenced.update(entry.techniques)
        for ids in library.obstacle_technique_map.values():
            referenced.update(ids)
        for goal_plan in library.goal_plans.values():
            referenced.add(goal_plan.primary_technique)
            referenced.update(goal_plan.ritual_components)
        missing = referenced - set(library.techniques)
        assert not missing, f"Unknown technique ids: {missing}"

    def test_obstacles_mapped_except_alias(self, library):
        for obstacle in OBSTACLES:
            if obstacle == "chronic_pain":
                assert library.techniques_for_obstacle(obstacle) == ()
            else:
                assert library.techniques_for_obstacle(obstacle)

    def test_every_goal_has_a_plan(self, library):
        for goal in GOALS:
            assert library.get_goal_plan(goal) is not None

    def test_fallback_techniques_present(self, library):
        assert library.get_technique("coherence_breathing").category == "core"
        assert library.get_technique("breath_awareness").difficulty == "beginner"
        assert library.get_technique("mbht").category == "assessment"


class TestLookupMisses:

    def test_misses_return_none(self, library):
        assert library.get_technique("no_such_technique") is None
        assert library.get_technique(None) is None
        assert library.get_goal_plan("no_such_goal") is None
        assert library.get_day(99) is None
        assert library.techniques_for_obstacle("no_such_obstacle") == ()


class TestLoader:

    def test_load_from_path(self, tmp_path):
        catalog = {
            "techniques": [{
                "id": "only",
                "name": "Only",
                "category": "core",
                "duration_minutes": 4,
                "instructions": {"summary": "Breathe.", "steps": ["In", "Out"]},
            }],
            "day_curriculum": {"1": {"name": "One", "techniques": ["only"]}},
        }
        path = tmp_path / "library.json"
        path.write_text(json.dumps(catalog))

        library = load_library(path)
        technique = library.get_technique("only")
        assert technique.instructions.steps == ("In", "Out")
        assert technique.difficulty == "beginner"
        assert library.get_day(1).techniques == ("only",)
        assert library.goal_plans == {}

    def test_unknown_category_rejected(self):
        with pytest.raises(ValueError, match="unknown category"):
            parse_library({"techniques": [{
                "id": "x", "name": "X", "category": "mystical", "duration_minutes": 1,
            }]})
