"""
Slug helpers - URL-safe identifiers for posts, products and categories.

generate_slug and normalize_slug are pure; generate_unique_slug delegates
the existence check to the caller (usually a repository).
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Callable

DEFAULT_MAX_LENGTH = 120

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

# Characters NFKD does not fold the way a slug needs
_SPECIAL_CHARS: dict[str, str] = {
    # Subscript digits
    **{chr(0x2080 + i): str(i) for i in range(10)},
    # Superscript digits
    "⁰": "0",
    "¹": "1",
    "²": "2",
    "³": "3",
    **{chr(0x2070 + i): str(i) for i in range(4, 10)},
    # Marks
    "™": "",
    "®": "",
    "©": "",
    # Dashes
    "–": "-",
    "—": "-",
    # Curly quotes
    "‘": "",
    "’": "",
    "“": "",
    "”": "",
}
_SPECIAL_TABLE = str.maketrans(_SPECIAL_CHARS)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def _fold(text: str) -> str:
    """Map special characters, strip diacritics, lower-case."""
    text = text.translate(_SPECIAL_TABLE)
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    return stripped.lower()


def _hyphenate(text: str) -> str:
    return _NON_ALNUM.sub("-", text).strip("-")


def generate_slug(title: str | None, max_length: int = DEFAULT_MAX_LENGTH) -> str:
    """
    Generate a URL-safe slug from a title.

    "Hello World" -> "hello-world", "Café CO₂ Laser™" -> "cafe-co2-laser".
    """
    if not title:
        return ""
    slug = _hyphenate(_fold(title.strip()))
    if max_length and len(slug) > max_length:
        slug = slug[:max_length].rstrip("-")
    return slug


def normalize_slug(raw: str | None) -> str:
    """
    Normalize a caller-supplied slug (e.g. "co₂-laser" -> "co2-laser").

    Idempotent: normalize_slug(normalize_slug(s)) == normalize_slug(s).
    """
    if not raw:
        return ""
    return _hyphenate(_fold(raw))


def is_valid_slug(slug: str | None) -> bool:
    """Check slug is lowercase alphanumeric runs joined by single hyphens."""
    return bool(slug) and SLUG_PATTERN.match(slug or "") is not None


def generate_unique_slug(base_slug: str, exists: Callable[[str], bool]) -> str:
    """
    Return base_slug, or the first free base_slug-2, base_slug-3, ...

    There is no upper bound on the number of attempts.
    """
    if not exists(base_slug):
        return base_slug

    counter = 2
    while True:
        candidate = f"{base_slug}-{counter}"
        if not exists(candidate):
            return candidate
        counter += 1
