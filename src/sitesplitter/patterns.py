# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Section pattern catalog: ordered archetypes with textual matching rules.

Static data.  Each archetype carries a display label, a stable type tag,
its priority (= position in the catalog, which is also the default visual
order), class/id keywords and a few structural tag rules.  Matching is purely
textual, so it works the same on malformed markup as on well-formed markup.

Quoted class/id values are extracted in one linear scan; keywords are plain
substring lookups inside each value.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

_FLAGS = re.IGNORECASE

_ATTR_VALUE_RE = re.compile(r"""\b(?:class|id)\s*=\s*(?:"([^"]*)"|'([^']*)')""", _FLAGS)

# ---------------------------------------------------------------------------
# Rule builders
# ---------------------------------------------------------------------------


def _tag_rule(tag: str, *, closing: bool = False) -> re.Pattern[str]:
    """Opening <tag ...> (and closing </tag> when *closing* is set).

    ``[^<>]`` stops at the next tag, so a run of unterminated ``<tag`` prefixes
    stays linear.
    """
    prefix = "</?" if closing else "<"
    return re.compile(rf"{prefix}{re.escape(tag)}\b[^<>]*>", _FLAGS)


def attribute_values(html: str) -> list[str]:
    """Lower-cased values of every quoted ``class``/``id`` attribute in *html*."""
    return [(double or single).lower() for double, single in _ATTR_VALUE_RE.findall(html)]


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SectionPattern:
    """One section archetype of the catalog."""

    type: str
    name: str
    priority: int  # catalog rank; lower renders first
    keywords: tuple[str, ...]  # lower-case substrings of class/id values
    tags: tuple[re.Pattern[str], ...] = ()

    def count(self, html: str, values: Sequence[str] | None = None) -> int:
        """Total hits against *html*: one per tag match, one per (attribute value, keyword) pair.

        *values* lets callers scoring the whole catalog extract attribute values once.
        """
        if values is None:
            values = attribute_values(html)
        tag_hits = sum(len(rule.findall(html)) for rule in self.tags)
        attr_hits = sum(1 for value in values for kw in self.keywords if kw in value)
        return tag_hits + attr_hits


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

_DEFINITIONS: tuple[tuple[str, str, tuple[str, ...], tuple[re.Pattern[str], ...]], ...] = (
    ("hero", "Hero / Top", ("hero", "banner", "jumbotron"), (_tag_rule("header"),)),
    ("navigation", "Navigation", ("nav", "menu"), (_tag_rule("nav"),)),
    ("stats", "Statistics", ("stat", "metric", "counter"), ()),
    ("about", "About", ("about", "intro", "presentation"), ()),
    ("features", "Features", ("feature", "service", "benefit"), ()),
    ("pricing", "Pricing", ("pricing", "price", "plan"), ()),
    ("cards", "Cards / Grid", ("card", "grid", "tile"), ()),
    ("testimonials", "Testimonials", ("testimon", "review", "quote"), ()),
    ("process", "Process", ("process", "step", "how-it-works"), ()),
    ("portfolio", "Portfolio", ("portfolio", "gallery", "showcase"), ()),
    ("team", "Team", ("team", "staff", "member"), ()),
    ("partners", "Partners / Clients", ("partner", "client", "sponsor"), ()),
    ("faq", "FAQ", ("faq", "question", "accordion"), (_tag_rule("details"),)),
    ("blog", "Blog / News", ("blog", "post", "news"), ()),
    ("contact", "Contact / CTA", ("contact", "cta", "newsletter"), (_tag_rule("form"),)),
    ("footer", "Footer", ("footer",), (_tag_rule("footer", closing=True),)),
)

CATALOG: tuple[SectionPattern, ...] = tuple(
    SectionPattern(type=type_, name=name, priority=rank, keywords=keywords, tags=tags)
    for rank, (type_, name, keywords, tags) in enumerate(_DEFINITIONS)
)

SECTION_TYPES: tuple[str, ...] = tuple(p.type for p in CATALOG)

HERO = "hero"
FOOTER = "footer"

_BY_TYPE: dict[str, SectionPattern] = {p.type: p for p in CATALOG}


def pattern_for(section_type: str) -> SectionPattern | None:
    return _BY_TYPE.get(section_type)


def label_for(section_type: str) -> str:
    """Display label for *section_type*; unknown types fall back to a title-cased tag."""
    pattern = pattern_for(section_type)
    return pattern.name if pattern else section_type.replace("_", " ").title()


def count_matches(section_type: str, html: str, values: Sequence[str] | None = None) -> int:
    pattern = pattern_for(section_type)
    return pattern.count(html, values) if pattern else 0
