"""Slug and title helpers."""

import re
import unicodedata

SLUG_PATTERN = re.compile(r"[^a-z0-9]+")
WORD_SPLIT_PATTERN = re.compile(r"[-_\s]+")


def slugify(value: str, fallback: str = "page") -> str:
    """Generate a URL-friendly slug using ASCII characters only."""
    normalized = unicodedata.normalize("NFKD", value)
    normalized = normalized.encode("ascii", "ignore").decode("ascii")
    normalized = normalized.lower()
    normalized = SLUG_PATTERN.sub("-", normalized).strip("-")
    return normalized or fallback


def titleize(value: str) -> str:
    """Capitalize each word of a slug-like label: ``ruby-on-rails`` -> ``Ruby On Rails``."""
    return " ".join(word.capitalize() for word in WORD_SPLIT_PATTERN.split(value) if word)
