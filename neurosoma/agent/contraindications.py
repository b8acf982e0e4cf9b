"""Contraindication classification and protocol-type estimation.

The contraindications section is classified with a single-pass state
machine. One "current bucket" is carried from line to line; trigger words
switch it, and every bulleted line is emitted into whichever bucket is
active at that point:

    "absolute"             -> ABSOLUTE
    "relative" / "caution" -> RELATIVE
    "warning" / "stop"     -> WARNING
    "medication"           -> MEDICATION

Bullets seen before any trigger land in RELATIVE.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)

GENTLE = "gentle"
MODERATE = "moderate"
STANDARD = "standard"
PROTOCOL_TYPES = (GENTLE, MODERATE, STANDARD)

DEFAULT_ABSOLUTE = "Consult healthcare provider before starting any breathwork practice"
DEFAULT_WARNING_SIGNS = (
    "Dizziness or lightheadedness",
    "Chest pain or pressure",
    "Numbness or tingling",
    "Severe anxiety or panic",
)
DEFAULT_MEDICATION_NOTES = (
    "Discuss any current medications with your healthcare provider before starting breathwork."
)

_BULLET_RE = re.compile(r"^\s*[-*•]\s+(.+)")


class Bucket(Enum):
    NONE = "none"
    ABSOLUTE = "absolute"
    RELATIVE = "relative"
    WARNING = "warning"
    MEDICATION = "medication"


# Checked in order, first match wins
_TRIGGERS = [
    (("absolute",), Bucket.ABSOLUTE),
    (("relative", "caution"), Bucket.RELATIVE),
    (("warning", "stop"), Bucket.WARNING),
    (("medication",), Bucket.MEDICATION),
]


@dataclass(frozen=True)
class Contraindications:
    """Classified contraindications for a breathwork practice."""

    absolute: list[str] = field(default_factory=list)
    relative: list[str] = field(default_factory=list)
    warning_signs: list[str] = field(default_factory=list)
    medication_notes: str = ""

    def to_dict(self) -> dict:
        return {
            "absolute": list(self.absolute),
            "relative": list(self.relative),
            "warning_signs": list(self.warning_signs),
            "medication_notes": self.medication_notes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Contraindications":
        return cls(
            absolute=list(data.get("absolute", [])),
            relative=list(data.get("relative", [])),
            warning_signs=list(data.get("warning_signs", [])),
            medication_notes=data.get("medication_notes", ""),
        )


def classify_line(bucket: Bucket, line: str) -> tuple[Bucket, str | None]:
    """Apply one line to the state machine.

    Returns the new bucket and the bulleted item on this line (or None).
    """
    lowered = line.lower()
    for words, target in _TRIGGERS:
        if any(w in lowered for w in words):
            bucket = target
            break

    match = _BULLET_RE.match(line)
    item = match.group(1).strip() if match else None
    return bucket, item


def classify_contraindications(section_text: str) -> Contraindications:
    """Bucket a contraindications section into a Contraindications record.

    Empty absolute and warning buckets are filled with fixed defaults.
    """
    absolute: list[str] = []
    relative: list[str] = []
    warning_signs: list[str] = []
    medication: list[str] = []

    targets = {
        Bucket.ABSOLUTE: absolute,
        Bucket.RELATIVE: relative,
        Bucket.NONE: relative,
        Bucket.WARNING: warning_signs,
        Bucket.MEDICATION: medication,
    }

    bucket = Bucket.NONE
    for line in (section_text or "").splitlines():
        bucket, item = classify_line(bucket, line)
        if item:
            targets[bucket].append(item)

    if not absolute:
        absolute.append(DEFAULT_ABSOLUTE)
    if not warning_signs:
        warning_signs.extend(DEFAULT_WARNING_SIGNS)

    return Contraindications(
        absolute=absolute,
        relative=relative,
        warning_signs=warning_signs,
        medication_notes=" ".join(medication).strip() or DEFAULT_MEDICATION_NOTES,
    )


def estimate_protocol_type(contraindications: Contraindications) -> str:
    """Map contraindication counts onto a protocol tier.

    More or worse contraindications never select a less conservative tier.
    """
    absolute_count = len(contraindications.absolute)
    relative_count = len(contraindications.relative)

    if absolute_count > 2 or relative_count > 4:
        protocol_type = GENTLE
    elif absolute_count > 0 or relative_count > 2:
        protocol_type = MODERATE
    else:
        protocol_type = STANDARD

    logger.debug(
        "Estimated %s protocol (absolute=%d, relative=%d)",
        protocol_type, absolute_count, relative_count,
    )
    return protocol_type
