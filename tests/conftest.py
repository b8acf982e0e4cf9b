"""Shared test fixtures for the NeuroSoma test suite."""

from datetime import date, timedelta
from unittest.mock import MagicMock

import pytest

from neurosoma.tools.intake import Intake
from neurosoma.tools.technique_library import get_library

TODAY = date(2026, 3, 2)

SAMPLE_RESPONSE = """\
## Anatomy & Physiology
The diaphragm is the primary muscle of respiration.
Slow exhalation stimulates the vagus nerve.

## Research Evidence
Several RCTs show slow breathing reduces pain intensity.

## How to Explain This to Your Doctor
- Say "intermittent lumbar pain radiating down my left leg"
- Rate it on a 1-10 scale

## Contraindications & Precautions
**Absolute contraindications**
- Avoid breath holds during pregnancy
**Relative contraindications**
- Uncontrolled hypertension
- Recent abdominal surgery
**Warning signs to stop immediately**
- Chest pain
- Fainting
**Medication interactions**
- Beta blockers may blunt heart rate changes
- Sedatives can increase drowsiness

## Questions for Your Doctor
1. Is slow breathing safe with my current blood pressure?
2. Should I avoid breath holds with my condition?
3. Short one?
4. Could breathwork interact with my pain medication?

## Important Disclaimer
This is educational information only.
"""


@pytest.fixture
def library():
    return get_library()


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def make_intake():
    """Build an Intake with an event `days` days after TODAY."""

    def _make(days: int = 7, **overrides) -> Intake:
        fields = {
            "goal": "pain_management",
            "event_date": (TODAY + timedelta(days=days)).isoformat(),
            "obstacle": "chronic_pain",
            "time_commitment": 15,
            "experience": "some",
        }
        fields.update(overrides)
        return Intake(**fields)

    return _make


@pytest.fixture
def sample_response():
    return SAMPLE_RESPONSE


@pytest.fixture
def mock_client():
    """A Gemini client whose generate_content returns SAMPLE_RESPONSE."""
    response = MagicMock()
    response.text = SAMPLE_RESPONSE
    client = MagicMock()
    client.models.generate_content.return_value = response
    return client
