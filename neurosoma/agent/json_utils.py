"""Pull a JSON object out of a judge model's reply."""

import json
import re

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$")
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")


def extract_json(text: str) -> dict:
    """Return the first JSON object found in text.

    Accepts fenced replies, prose around the object and trailing commas.
    Raises ValueError when no object can be decoded.
    """
    text = _FENCE_RE.sub("", (text or "").strip())

    candidates = [text]
    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start:
        body = text[start:end + 1]
        candidates += [body, _TRAILING_COMMA_RE.sub(r"\1", body)]

    for candidate in candidates:
        try:
            value = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(value, dict):
            return value

    raise ValueError(f"No JSON object in model reply: {text[:200]!r}")
