"""Text normalization helpers shared by scoring, joins and the HTTP layer."""

from __future__ import annotations

import re
from typing import Any, List, Optional

STOPWORDS = frozenset(
    {
        "the", "a", "an", "and", "or", "of", "for", "to", "in", "on", "with",
        "without", "from", "by", "is", "are", "be", "it", "this", "that", "as",
        "at", "i", "you", "my", "your", "me",
        # Filler that shows up in nearly every workshop query.
        "need", "replace", "show", "explain", "what", "where", "how",
    }
)

NON_ALNUM_PATTERN = re.compile(r"[^a-z0-9]+")
WHITESPACE_PATTERN = re.compile(r"\s+")
PART_NO_EDGE_PATTERN = re.compile(r"^[\s(]+|[\s)]+$")
PART_NUMBER_PATTERN = re.compile(r"\b\d{6,9}\b", re.ASCII)
EMPTY_REFS = {"", "-", "N/A"}


def normalize_whitespace(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return WHITESPACE_PATTERN.sub(" ", value).strip()


def tokenize(text: Optional[str]) -> List[str]:
    """Split text into lower-case scoring tokens, dropping stop-words and 1-char tokens."""
    if not text or not isinstance(text, str):
        return []
    tokens = (token.strip() for token in NON_ALNUM_PATTERN.sub(" ", text.lower()).split(" "))
    return [token for token in tokens if len(token) >= 2 and token not in STOPWORDS]


def normalize_part_no(value: Any) -> str:
    """Canonical part identity: no edge parentheses, no whitespace, upper case."""
    if not isinstance(value, str):
        return ""
    trimmed = PART_NO_EDGE_PATTERN.sub("", value)
    return WHITESPACE_PATTERN.sub("", trimmed).strip().upper()


def normalize_ref(value: Any) -> Optional[str]:
    """Normalize a diagram reference label; placeholders become None."""
    if value is None:
        return None
    normalized = WHITESPACE_PATTERN.sub("", str(value)).strip().upper()
    if normalized in EMPTY_REFS:
        return None
    return normalized


def extract_part_numbers(text: Optional[str]) -> List[str]:
    """Return the 6-9 digit part-number tokens in first-seen order, deduplicated."""
    if not text or not isinstance(text, str):
        return []
    seen = set()
    found: List[str] = []
    for match in PART_NUMBER_PATTERN.findall(text):
        normalized = normalize_part_no(match)
        if not normalized or normalized in seen:
            continue
        seen.add(normalized)
        found.append(normalized)
    return found


def clip_text(text: Optional[str], max_chars: int = 1500) -> str:
    if not text or not isinstance(text, str):
        return ""
    if len(text) <= max_chars:
        return text
    return f"{text[:max_chars]}..."
