"""
HTML sanitization for editor rich text and visitor free text.

Rich text keeps an allow-list of formatting tags; form input keeps no tags
at all. Both are built on bleach.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

import bleach
from bleach import html5lib_shim
from bleach.sanitizer import Cleaner

from storefront.rules.models import SanitizerRules

# bleach strips disallowed tags but keeps their text, so script/style
# bodies are dropped before cleaning.
_SCRIPT_BODIES = re.compile(
    r"<(script|style|iframe|object|embed)\b[^>]*>.*?</\1\s*>",
    re.IGNORECASE | re.DOTALL,
)


@dataclass(frozen=True)
class SanitizerConfig:
    """Allow-list configuration for rich text."""

    allow_tags: frozenset[str] = field(
        default_factory=lambda: frozenset(
            [
                "p",
                "br",
                "h2",
                "h3",
                "h4",
                "blockquote",
                "ul",
                "ol",
                "li",
                "strong",
                "b",
                "em",
                "i",
                "u",
                "code",
                "pre",
                "a",
                "img",
                "figure",
                "figcaption",
                "table",
                "thead",
                "tbody",
                "tr",
                "th",
                "td",
            ]
        )
    )
    allow_attrs: dict[str, list[str]] = field(
        default_factory=lambda: {
            "a": ["href", "title", "target", "rel"],
            "img": ["src", "alt", "title", "width", "height"],
        }
    )
    allow_protocols: frozenset[str] = field(
        default_factory=lambda: frozenset(["http", "https", "mailto"])
    )
    add_noopener: bool = True

    @classmethod
    def from_rules(cls, rules: SanitizerRules) -> SanitizerConfig:
        return cls(
            allow_tags=frozenset(rules.allowed_tags),
            allow_attrs={tag: list(attrs) for tag, attrs in rules.allowed_attributes.items()},
            allow_protocols=frozenset(rules.allowed_protocols),
            add_noopener=rules.add_noopener,
        )


DEFAULT_CONFIG = SanitizerConfig()


class _LinkRelFilter(html5lib_shim.Filter):
    """Set rel="noopener noreferrer" on existing anchors that carry an href."""

    def __iter__(self):
        for token in super().__iter__():
            if token["type"] in ("StartTag", "EmptyTag") and token["name"] == "a":
                attrs = dict(token.get("data") or {})
                if (None, "href") in attrs:
                    attrs[(None, "rel")] = "noopener noreferrer"
                    token["data"] = attrs
            yield token


def sanitize_html(raw: str | None, config: SanitizerConfig = DEFAULT_CONFIG) -> str:
    """
    Clean editor-supplied HTML.

    Disallowed tags are stripped, event-handler attributes and script
    URLs are removed. Output never contains executable script.
    """
    if not raw:
        return ""

    text = _SCRIPT_BODIES.sub("", raw)
    cleaner = Cleaner(
        tags=config.allow_tags,
        attributes=config.allow_attrs,
        protocols=config.allow_protocols,
        strip=True,
        strip_comments=True,
        filters=[_LinkRelFilter] if config.add_noopener else [],
    )
    return cleaner.clean(text)


def strip_html(raw: str | None) -> str:
    """Remove every tag from visitor input and trim it."""
    if not raw:
        return ""
    text = _SCRIPT_BODIES.sub("", raw)
    return bleach.clean(text, tags=set(), attributes={}, strip=True, strip_comments=True).strip()


def is_blank_html(raw: str | None) -> bool:
    """True when HTML has no visible text (e.g. "<p></p>" or "<p>&nbsp;</p>")."""
    if not raw:
        return True
    text = strip_html(raw).replace("&nbsp;", " ")
    return not text.strip()
