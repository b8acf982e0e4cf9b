"""Tests for protocol matching, summaries and safety badges."""

import pytest

from neurosoma.agent.protocol_matcher import (
    MatchedProtocol,
    get_protocol_summary,
    get_safety_badge,
    match_protocol,
)


class TestMatchProtocol:

    @pytest.mark.parametrize("protocol_type,weeks", [
        ("gentle", 2),
        ("moderate", 3),
        ("standard", 4),
    ])
    def test_duration_weeks(self, protocol_type, weeks):
        protocol = match_protocol(protocol_type)
        assert protocol.type == protocol_type
        assert protocol.duration_weeks == weeks
        assert len(protocol.weeks) == weeks
        assert [w.week for w in protocol.weeks] == list(range(1, weeks + 1))

    @pytest.mark.parametrize("unknown", ["extreme", "", "GENTLE", None])
    def test_unknown_type_is_standard(self, unknown):
        assert match_protocol(unknown) == match_protocol("standard")

    def test_condition_only_changes_rationale(self):
        plain = match_protocol("moderate")
        labelled = match_protocol("moderate", "asthma")
        assert "(asthma)" in labelled.rationale
        assert "(" not in plain.rationale.split(",")[0]
        assert labelled.weeks == plain.weeks
        assert labelled.name == plain.name

    def test_gentle_has_no_breath_holds_and_no_tracking(self):
        gentle = match_protocol("gentle")
        assert gentle.mbht_tracking is False
        assert gentle.audio_guided is True
        assert any("No breath holds" in c for c in gentle.weeks[0].cautions)

    def test_evaluation_score_fixed(self):
        assert {match_protocol(t).evaluation_score for t in ("gentle", "moderate", "standard")} == {0.81}

    def test_round_trips_through_dict(self):
        protocol = match_protocol("standard", "insomnia")
        assert MatchedProtocol.from_dict(protocol.to_dict()) == protocol


class TestDisplayHelpers:

    def test_summary(self):
        summary = get_protocol_summary(match_protocol("gentle"))
        assert summary.startswith("Gentle Activation Protocol (2 weeks) - ")

    @pytest.mark.parametrize("protocol_type,label,color", [
        ("gentle", "Maximum Safety", "green"),
        ("moderate", "Modified for Safety", "yellow"),
        ("standard", "Standard Protocol", "blue"),
        ("unknown", "Standard Protocol", "blue"),
    ])
    def test_safety_badge(self, protocol_type, label, color):
        assert get_safety_badge(protocol_type) == {"label": label, "color": color}
