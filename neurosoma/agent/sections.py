"""Section extraction for model-generated markdown documents.

The model is asked for a fixed set of `## Header` sections but does not
always comply: headers drift in wording, get numbered ("## 1. Research
Evidence"), bolded, or disappear entirely. Lookup is therefore tiered:

    1. find_section      - exact match on a list of title variants
    2. scan_for_keyword  - loose scan for a headed/bold line containing a keyword
    3. default           - caller-supplied literal

lookup_section() chains the three. Nothing here raises on missing content.
"""

import logging
import re

logger = logging.getLogger(__name__)

_HEADER_RE = re.compile(r"^\s{0,3}(#{1,6})\s+(.+?)\s*#*\s*$")
_ENUMERATION_RE = re.compile(r"^(?:\d+[.)]|[-•])\s*")


def normalize_title(title: str) -> str:
    """Lower-case a header title and strip emphasis, numbering and colons."""
    title = title.strip().replace("*", "").replace("_", " ").strip()
    title = _ENUMERATION_RE.sub("", title)
    title = title.rstrip(":").strip()
    return re.sub(r"\s+", " ", title).lower()


def _section_body(lines: list[str]) -> str:
    body = "\n".join(lines)
    return body.strip() if body.strip() else body


def extract_sections(text: str) -> dict[str, str]:
    """Split a markdown document into {normalized header title: body}.

    Body is everything up to the next header, stripped. A whitespace-only
    body is kept verbatim so callers can tell it apart from a missing
    section. Repeated titles keep the last body seen.
    """
    sections: dict[str, str] = {}
    current_title = None
    body: list[str] = []

    for line in (text or "").splitlines():
        match = _HEADER_RE.match(line)
        if match:
            if current_title is not None:
                sections[current_title] = _section_body(body)
            current_title = normalize_title(match.group(2))
            body = []
        elif current_title is not None:
            body.append(line)

    if current_title is not None:
        sections[current_title] = _section_body(body)

    return sections


def find_section(
    sections: dict[str, str],
    titles: list[str],
    require_content: bool = True,
) -> str | None:
    """Return the body of the first title variant present, or None.

    With require_content, a present-but-empty section is skipped so the
    next variant (or tier) gets a chance.
    """
    for title in titles:
        key = normalize_title(title)
        if key not in sections:
            continue
        body = sections[key]
        if require_content and not body.strip():
            continue
        return body
    return None


def _is_divider(line: str) -> bool:
    return line.startswith("#") or line.startswith("**")


def scan_for_keyword(text: str, keyword: str) -> str:
    """Collect lines after the first headed or bold line containing keyword.

    Stops at the next headed or bold line. Returns "" when nothing matches.
    """
    keyword = keyword.lower()
    in_section = False
    content: list[str] = []

    for line in (text or "").splitlines():
        if not in_section:
            if keyword in line.lower() and _is_divider(line):
                in_section = True
            continue
        if _is_divider(line):
            break
        content.append(line)

    return "\n".join(content).strip()


def lookup_section(
    sections: dict[str, str],
    titles: list[str],
    keyword: str | None = None,
    default: str = "",
    text: str = "",
    require_content: bool = True,
) -> str:
    """Resolve a section via title variants, then keyword scan, then default.

    With require_content=False a present-but-empty section is returned as is
    and the later tiers are not consulted.
    """
    found = find_section(sections, titles, require_content=require_content)
    if found is not None:
        return found

    if keyword:
        scanned = scan_for_keyword(text, keyword)
        if scanned:
            logger.debug("Section %r resolved by keyword scan for %r", titles[:1], keyword)
            return scanned

    logger.debug("Section %r not found, using default", titles[:1])
    return default
