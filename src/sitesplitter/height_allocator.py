# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Proportional height allocation — map a section outline onto pixel ranges.

Each section type has a weight describing its typical vertical extent
(heroes are tall, footers short).  The total image height is split in
proportion to the weights, with two overriding rules:

- every section gets at least ``MIN_SECTION_HEIGHT`` pixels;
- the last section gets exactly what is left, so heights sum to the total.

When the floor pushes the running offset to or past the total height, every
remaining section is still emitted with height 0 (a placeholder).
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence

from . import AllocatedSection, SectionDescriptor
from .errors import AllocationError

logger = logging.getLogger(__name__)

MIN_SECTION_HEIGHT = 200

# Tunable heuristics, not invariants.  Override via Settings.weights.
DEFAULT_WEIGHTS: dict[str, float] = {
    "hero": 1.2,
    "navigation": 0.3,
    "stats": 0.6,
    "about": 1.0,
    "features": 1.0,
    "pricing": 1.1,
    "cards": 1.0,
    "testimonials": 0.9,
    "process": 0.9,
    "portfolio": 1.1,
    "team": 0.9,
    "partners": 0.5,
    "faq": 0.9,
    "blog": 1.0,
    "contact": 0.8,
    "footer": 0.4,
}

DEFAULT_WEIGHT = 0.8


def weight_for(section_type: str, weights: Mapping[str, float] | None = None) -> float:
    table = DEFAULT_WEIGHTS if weights is None else weights
    return table.get(section_type, DEFAULT_WEIGHT)


def parse_weights(raw: str) -> dict[str, float]:
    """Parse ``"hero=1.5,footer=0.3"`` into a full weight table.

    Unlisted types keep their default weight.

    Raises:
        ValueError: on a malformed pair or a negative, infinite or NaN weight.
    """
    table = dict(DEFAULT_WEIGHTS)
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"expected type=weight, got {item!r}")
        weight = float(value)
        if not math.isfinite(weight) or weight < 0:
            raise ValueError(f"weight for {key.strip()!r} must be a finite number >= 0")
        table[key.strip().lower()] = weight
    return table


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def allocate(
    descriptors: Sequence[SectionDescriptor],
    total_height_px: int,
    *,
    weights: Mapping[str, float] | None = None,
    min_height_px: int = MIN_SECTION_HEIGHT,
) -> list[AllocatedSection]:
    """Assign a start offset and height to every descriptor, in order.

    Args:
        descriptors: Classifier output, already in display order.
        total_height_px: Height of the full-page raster.
        weights: Optional per-type weight table (defaults to DEFAULT_WEIGHTS).
        min_height_px: Floor applied to every non-final section.

    Returns:
        One AllocatedSection per descriptor (never dropped).

    Raises:
        AllocationError: non-positive total height, non-positive or non-finite total weight.
    """
    if not descriptors:
        return []
    if total_height_px <= 0:
        raise AllocationError(f"total height must be positive, got {total_height_px}")

    total_weight = sum(weight_for(d.type, weights) for d in descriptors)
    if not math.isfinite(total_weight) or total_weight <= 0:
        raise AllocationError(f"total section weight must be positive and finite, got {total_weight}")

    per_unit = total_height_px / total_weight
    last = len(descriptors) - 1
    offset = 0
    allocated: list[AllocatedSection] = []

    for index, section in enumerate(descriptors):
        if offset >= total_height_px:
            height = 0
        elif index == last:
            height = total_height_px - offset
        else:
            raw = _round_half_up(per_unit * weight_for(section.type, weights))
            height = max(raw, min_height_px)
        allocated.append(AllocatedSection.from_descriptor(section, start_offset_px=offset, height_px=height))
        offset += height

    overrun = sum(1 for a in allocated if a.height_px == 0)
    if overrun:
        logger.info(
            "Allocation overran %dpx at minimum height %dpx; %d section(s) left as placeholders",
            total_height_px,
            min_height_px,
            overrun,
        )
    return allocated
