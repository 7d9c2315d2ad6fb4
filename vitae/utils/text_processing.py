"""
Text processing utilities for formatting, matching and display.
"""

import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Pattern

_WHITESPACE_RE = re.compile(r"\s+")
_SLUG_STRIP_RE = re.compile(r"[^a-z0-9]+")


def normalize_whitespace(text: str) -> str:
    """Collapse runs of whitespace into single spaces and trim the ends."""
    return _WHITESPACE_RE.sub(" ", text or "").strip()


def slugify(text: str, fallback: str = "section") -> str:
    """
    Build an id-safe slug from display text.

    Args:
        text: Display text (e.g., "Volunteer Work")
        fallback: Slug returned when text has no usable characters

    Returns:
        Lowercase dash-separated slug

    Example:
        >>> slugify("Volunteer & Community Work")
        'volunteer-community-work'
    """
    slug = _SLUG_STRIP_RE.sub("-", (text or "").lower()).strip("-")
    return slug or fallback


def keyword_pattern(keywords: Iterable[str]) -> Pattern:
    """
    Compile keywords into one case-insensitive pattern anchored at word starts.

    Multi-word keywords match across any whitespace. Matching only at the start
    of a word keeps "work" from matching inside "coursework" while still letting
    "engineer" match "Engineering".

    Args:
        keywords: Keywords or phrases to match

    Returns:
        Compiled regex (matches nothing when keywords is empty)
    """
    alternatives = [
        r"\s+".join(re.escape(part) for part in keyword.split())
        for keyword in sorted(set(keywords), key=len, reverse=True)
        if keyword.strip()
    ]
    if not alternatives:
        return re.compile(r"(?!x)x")
    return re.compile(r"(?<![A-Za-z0-9])(?:" + "|".join(alternatives) + ")", re.IGNORECASE)


def contains_any(text: str, needles: Iterable[str]) -> bool:
    """Case-insensitive substring check against several needles."""
    lowered = (text or "").lower()
    return any(needle.lower() in lowered for needle in needles if needle)


def truncate_display(text: str, width: int = 60) -> str:
    """
    Shorten text for single-line console display.

    Args:
        text: Text to shorten (whitespace is normalized first)
        width: Maximum length including the ellipsis

    Returns:
        Text no longer than width characters
    """
    text = normalize_whitespace(text)
    if len(text) <= width:
        return text
    return text[: max(width - 3, 0)].rstrip() + "..."


def split_items(text: str, separators: str = ",;") -> List[str]:
    """Split a delimited list into trimmed, non-empty items."""
    pattern = "[" + re.escape(separators) + "]"
    return [item.strip() for item in re.split(pattern, text or "") if item.strip()]


# =============================================================================
# CONTACT INFO PATTERNS
# =============================================================================


@dataclass(frozen=True)
class ContactPatterns:
    """Regex patterns for contact details found in resume headers."""

    EMAIL: str = r"[\w.+-]+@[\w-]+(?:\.[\w-]+)+"
    PHONE: str = r"(?<!\w)(?:\+?\d{1,3}[\s.-]?)?\(?\d{3}\)?[\s.-]?\d{3}[\s.-]?\d{4}(?!\w)"
    URL: str = r"(?:https?://|www\.)\S+|\b(?:linkedin|github)\.com/\S*"
    # "City, ST" or "City, State"
    LOCATION: str = r"\b[A-Z][A-Za-z .'-]+,\s*(?:[A-Z]{2}\b|[A-Z][a-z]+(?:\s[A-Z][a-z]+)?)"


def extract_contact_info(text: str) -> Dict[str, str]:
    """
    Pull email, phone, url and location out of free text.

    Args:
        text: Header text (any layout)

    Returns:
        Dict with the keys that were found (email, phone, url, location)

    Example:
        >>> extract_contact_info("Austin, TX | 555-123-4567 | jane@example.com")
        {'email': 'jane@example.com', 'phone': '555-123-4567', 'location': 'Austin, TX'}
    """
    patterns = ContactPatterns()
    found: Dict[str, str] = {}
    for key, pattern in (("email", patterns.EMAIL), ("phone", patterns.PHONE), ("url", patterns.URL)):
        match = re.search(pattern, text or "")
        if match:
            found[key] = match.group(0).rstrip(".,;")

    for segment in re.split(r"[|•·]", text or ""):
        segment = segment.strip()
        if re.search(patterns.EMAIL, segment) or re.search(patterns.URL, segment):
            continue
        match = re.search(patterns.LOCATION, segment)
        if match:
            found["location"] = match.group(0).strip()
            break

    return found


def looks_like_contact_line(text: str, hints: Iterable[str] = ()) -> bool:
    """Check whether a line carries contact details (email, phone, url, separators, hints)."""
    patterns = ContactPatterns()
    text = text or ""
    if any(re.search(p, text) for p in (patterns.EMAIL, patterns.PHONE, patterns.URL)):
        return True
    if re.search(r"\s[|•·]\s", text) and len(text) <= 200:
        return True
    return contains_any(text, hints)
