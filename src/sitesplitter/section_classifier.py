# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Heuristic section classifier — layout outline from raw HTML text.

Pipeline of immutable intermediate sequences:
  1. detect  – hero first (always, confidence 100), then every other catalog
               archetype with at least one rule hit, in catalog order
  2. close   – synthesise a footer (confidence 80) when none was detected
  3. sort    – stable sort that moves the footer to the end
  4. number  – dense ``order`` 0..N-1 in final sequence order

Never fails: empty or adversarial input degrades to ``[hero, footer]``.
"""

from __future__ import annotations

import dataclasses
import logging
import uuid

from . import SectionDescriptor
from .patterns import CATALOG, FOOTER, HERO, attribute_values, count_matches, label_for

logger = logging.getLogger(__name__)

HERO_CONFIDENCE = 100
SYNTHETIC_FOOTER_CONFIDENCE = 80
BASE_CONFIDENCE = 50
CONFIDENCE_PER_MATCH = 15
MAX_CONFIDENCE = 100


def confidence_for(match_count: int) -> int:
    """``min(100, 50 + 15 × hits)`` — non-decreasing in hits, saturating at 100."""
    return min(MAX_CONFIDENCE, BASE_CONFIDENCE + CONFIDENCE_PER_MATCH * match_count)


def _new_id() -> str:
    return str(uuid.uuid4())


def _descriptor(section_type: str, order: int, confidence: int, matches: int) -> SectionDescriptor:
    return SectionDescriptor(
        id=_new_id(),
        type=section_type,
        name=label_for(section_type),
        order=order,
        confidence=confidence,
        matches=matches,
    )


def _detect(html: str) -> tuple[SectionDescriptor, ...]:
    values = attribute_values(html)
    detected = [_descriptor(HERO, 0, HERO_CONFIDENCE, count_matches(HERO, html, values))]
    seen = {HERO}
    for pattern in CATALOG:
        if pattern.type in seen:
            continue
        hits = pattern.count(html, values)
        if hits > 0:
            detected.append(_descriptor(pattern.type, len(detected), confidence_for(hits), hits))
            seen.add(pattern.type)
    return tuple(detected)


def _close(sections: tuple[SectionDescriptor, ...]) -> tuple[SectionDescriptor, ...]:
    if any(s.type == FOOTER for s in sections):
        return sections
    return (*sections, _descriptor(FOOTER, len(sections), SYNTHETIC_FOOTER_CONFIDENCE, 0))


def _footer_last(sections: tuple[SectionDescriptor, ...]) -> tuple[SectionDescriptor, ...]:
    # sorted() is stable: everything but the footer keeps catalog order
    return tuple(sorted(sections, key=lambda s: s.type == FOOTER))


def _renumber(sections: tuple[SectionDescriptor, ...]) -> tuple[SectionDescriptor, ...]:
    return tuple(dataclasses.replace(s, order=i) for i, s in enumerate(sections))


def classify(html: str | None) -> list[SectionDescriptor]:
    """Infer an ordered section outline from raw page markup.

    Args:
        html: Raw page HTML; may be empty, ``None`` or malformed.

    Returns:
        Descriptors in display order.  ``hero`` is first with order 0,
        ``footer`` is last, types are unique and orders are dense.
    """
    text = html or ""
    sections = _renumber(_footer_last(_close(_detect(text))))
    logger.debug(
        "Classified %d sections from %d chars: %s",
        len(sections),
        len(text),
        ",".join(s.type for s in sections),
    )
    return list(sections)
