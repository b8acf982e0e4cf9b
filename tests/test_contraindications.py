"""Tests for the contraindication state machine and protocol-type estimator."""

import pytest

from neurosoma.agent.contraindications import (
    DEFAULT_ABSOLUTE,
    DEFAULT_MEDICATION_NOTES,
    DEFAULT_WARNING_SIGNS,
    GENTLE,
    MODERATE,
    STANDARD,
    Bucket,
    Contraindications,
    classify_contraindications,
    classify_line,
    estimate_protocol_type,
)


# ── classify_line ───────────────────────────────────────────────────

class TestClassifyLine:
    """Per-line transition and emit step."""

    @pytest.mark.parametrize("line,expected", [
        ("**Absolute contraindications**", Bucket.ABSOLUTE),
        ("### Relative", Bucket.RELATIVE),
        ("Proceed with caution:", Bucket.RELATIVE),
        ("**Warning signs**", Bucket.WARNING),
        ("When to stop", Bucket.WARNING),
        ("Medication interactions", Bucket.MEDICATION),
    ])
    def test_trigger_switches_bucket(self, line, expected):
        bucket, item = classify_line(Bucket.NONE, line)
        assert bucket == expected
        assert item is None

    def test_first_trigger_in_order_wins(self):
        bucket, _ = classify_line(Bucket.NONE, "Absolute and relative cautions")
        assert bucket == Bucket.ABSOLUTE

    def test_plain_line_keeps_bucket(self):
        bucket, item = classify_line(Bucket.WARNING, "Some prose without triggers")
        assert bucket == Bucket.WARNING
        assert item is None

    @pytest.mark.parametrize("line", ["- item", "* item", "• item", "    - item"])
    def test_bullet_markers_emit_item(self, line):
        bucket, item = classify_line(Bucket.ABSOLUTE, line)
        assert bucket == Bucket.ABSOLUTE
        assert item == "item"

    def test_bold_line_is_not_a_bullet(self):
        _, item = classify_line(Bucket.NONE, "**Absolute**")
        assert item is None

    def test_bullet_with_trigger_switches_then_emits(self):
        bucket, item = classify_line(Bucket.ABSOLUTE, "- Stop if you feel faint")
        assert bucket == Bucket.WARNING
        assert item == "Stop if you feel faint"


# ── classify_contraindications ─────────────────────────────────────

class TestClassifyContraindications:

    def test_empty_section_gets_defaults(self):
        c = classify_contraindications("")
        assert c.absolute == ["Consult healthcare provider before starting any breathwork practice"]
        assert c.warning_signs == [
            "Dizziness or lightheadedness",
            "Chest pain or pressure",
            "Numbness or tingling",
            "Severe anxiety or panic",
        ]
        assert len(c.warning_signs) == 4
        assert c.relative == []
        assert c.medication_notes == DEFAULT_MEDICATION_NOTES

    def test_bold_divider_example(self):
        text = (
            "## Contraindications\n**Absolute**\n- Avoid during pregnancy\n"
            "**Relative**\n- Caution with low blood pressure"
        )
        c = classify_contraindications(text)
        assert c.absolute == ["Avoid during pregnancy"]
        assert c.relative == ["Caution with low blood pressure"]

    def test_bullets_before_any_trigger_default_to_relative(self):
        c = classify_contraindications("- Recent surgery\n- Glaucoma")
        assert c.relative == ["Recent surgery", "Glaucoma"]
        assert c.absolute == [DEFAULT_ABSOLUTE]

    def test_medication_items_are_joined(self):
        c = classify_contraindications("Medication notes\n- Beta blockers\n- SSRIs")
        assert c.medication_notes == "Beta blockers SSRIs"

    def test_defaults_only_fill_empty_buckets(self):
        text = "Absolute\n- Epilepsy\nWarning signs\n- Blurred vision"
        c = classify_contraindications(text)
        assert c.absolute == ["Epilepsy"]
        assert c.warning_signs == ["Blurred vision"]
        assert list(DEFAULT_WARNING_SIGNS) != c.warning_signs

    def test_full_sample_section(self, sample_response):
        from neurosoma.agent.sections import extract_sections

        section = extract_sections(sample_response)["contraindications & precautions"]
        c = classify_contraindications(section)
        assert c.absolute == ["Avoid breath holds during pregnancy"]
        assert c.relative == ["Uncontrolled hypertension", "Recent abdominal surgery"]
        assert c.warning_signs == ["Chest pain", "Fainting"]
        assert c.medication_notes.startswith("Beta blockers")

    def test_record_round_trips_through_dict(self):
        c = classify_contraindications("Absolute\n- A\nRelative\n- B")
        assert Contraindications.from_dict(c.to_dict()) == c


# ── estimate_protocol_type ─────────────────────────────────────────

def _record(absolute: int, relative: int) -> Contraindications:
    return Contraindications(
        absolute=[f"a{i}" for i in range(absolute)],
        relative=[f"r{i}" for i in range(relative)],
        warning_signs=list(DEFAULT_WARNING_SIGNS),
        medication_notes="",
    )


class TestEstimateProtocolType:

    @pytest.mark.parametrize("absolute,relative,expected", [
        (0, 0, STANDARD),
        (0, 2, STANDARD),
        (1, 0, MODERATE),
        (0, 3, MODERATE),
        (2, 4, MODERATE),
        (3, 0, GENTLE),
        (0, 5, GENTLE),
    ])
    def test_tiers(self, absolute, relative, expected):
        assert estimate_protocol_type(_record(absolute, relative)) == expected

    def test_monotonic(self):
        rank = {STANDARD: 0, MODERATE: 1, GENTLE: 2}
        for absolute in range(6):
            for relative in range(8):
                here = rank[estimate_protocol_type(_record(absolute, relative))]
                assert rank[estimate_protocol_type(_record(absolute + 1, relative))] >= here
                assert rank[estimate_protocol_type(_record(absolute, relative + 1))] >= here
