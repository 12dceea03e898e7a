# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Property-based fuzz tests using Hypothesis.

Verifies the outline invariants of the classifier and the pixel-range
invariants of the height allocator for arbitrary inputs.
"""

from __future__ import annotations

import pytest
from hypothesis import HealthCheck, example, given, settings
from hypothesis import strategies as st

from sitesplitter import SectionDescriptor
from sitesplitter.height_allocator import MIN_SECTION_HEIGHT, allocate
from sitesplitter.patterns import SECTION_TYPES
from sitesplitter.section_classifier import classify

# ---------------------------------------------------------------------------
# Module-level strategies
# ---------------------------------------------------------------------------

HTML_LIKE = st.text(
    alphabet=st.characters(
        categories=("L", "N", "P", "Z"),
        include_characters="<>/=\"'&;#!.- \n\t",
    ),
    min_size=0,
    max_size=3000,
)

# Fragments that actually trigger catalog rules, mixed with noise.
FRAGMENT = st.one_of(
    st.sampled_from(
        [
            "<header>",
            "</header>",
            "<nav>",
            "<footer>",
            "</footer>",
            "<form>",
            "<details>",
            '<div class="',
            "<div class='",
            '" id="',
            '">',
            "'>",
            "</div>",
            *SECTION_TYPES,
            "testimonial",
            "plan",
            "menu",
        ]
    ),
    st.text(max_size=20),
)

MARKUP = st.lists(FRAGMENT, max_size=80).map("".join)

TYPE_LISTS = st.lists(st.sampled_from([*SECTION_TYPES, "unknown", "call_to_action"]), min_size=1, max_size=20)

HEIGHTS = st.integers(min_value=1, max_value=60_000)

# ---------------------------------------------------------------------------
# Shared settings
# ---------------------------------------------------------------------------

_fuzz_settings = settings(
    max_examples=200,
    suppress_health_check=[HealthCheck.too_slow],
)


def _sections(types: list[str]) -> list[SectionDescriptor]:
    return [SectionDescriptor(id=f"id-{i}", type=t, name=t, order=i, confidence=70) for i, t in enumerate(types)]


# ---------------------------------------------------------------------------
# TestFuzzClassifier
# ---------------------------------------------------------------------------


@pytest.mark.fuzz
class TestFuzzClassifier:
    """Outline invariants for any HTML input."""

    @_fuzz_settings
    @given(html=st.one_of(HTML_LIKE, MARKUP))
    @example("")
    @example("<header>...</header><footer>...</footer>")
    @example('class="' + "hero" * 200)
    def test_outline_invariants(self, html: str) -> None:
        sections = classify(html)
        types = [s.type for s in sections]

        assert len(sections) >= 2
        assert types[0] == "hero"
        assert sections[0].order == 0
        assert sections[0].confidence == 100
        assert types[-1] == "footer"
        assert len(types) == len(set(types))
        assert [s.order for s in sections] == list(range(len(sections)))
        assert all(0 <= s.confidence <= 100 for s in sections)
        assert set(types) <= set(SECTION_TYPES)

    @_fuzz_settings
    @given(html=MARKUP)
    def test_non_footer_sections_keep_catalog_order(self, html: str) -> None:
        types = [s.type for s in classify(html)][:-1]
        ranks = [SECTION_TYPES.index(t) for t in types]
        assert ranks == sorted(ranks)

    @_fuzz_settings
    @given(html=MARKUP)
    def test_deterministic_apart_from_ids(self, html: str) -> None:
        first = [(s.type, s.order, s.confidence, s.matches) for s in classify(html)]
        second = [(s.type, s.order, s.confidence, s.matches) for s in classify(html)]
        assert first == second


# ---------------------------------------------------------------------------
# TestFuzzAllocator
# ---------------------------------------------------------------------------


@pytest.mark.fuzz
class TestFuzzAllocator:
    """Pixel-range invariants for any outline and image height."""

    @_fuzz_settings
    @given(types=TYPE_LISTS, total=HEIGHTS)
    @example(["hero", "footer"], 1000)
    @example(["hero", "features", "pricing", "footer"], 300)
    def test_ranges(self, types: list[str], total: int) -> None:
        result = allocate(_sections(types), total)

        assert len(result) == len(types)
        assert [a.type for a in result] == types

        offset = 0
        for a in result:
            assert a.start_offset_px == offset
            assert a.height_px >= 0
            offset = a.end_offset_px

        for a in result[:-1]:
            if a.start_offset_px < total:
                assert a.height_px >= MIN_SECTION_HEIGHT
            else:
                assert a.height_px == 0

    @_fuzz_settings
    @given(types=TYPE_LISTS, total=HEIGHTS)
    def test_sum_equals_total_without_overrun(self, types: list[str], total: int) -> None:
        result = allocate(_sections(types), total)
        heights_sum = sum(a.height_px for a in result)

        assert heights_sum >= total
        if result[-1].start_offset_px < total:
            assert heights_sum == total
            assert result[-1].height_px == total - result[-1].start_offset_px

    @_fuzz_settings
    @given(html=MARKUP, total=HEIGHTS)
    def test_classifier_output_allocates(self, html: str, total: int) -> None:
        sections = classify(html)
        result = allocate(sections, total)
        assert [a.id for a in result] == [s.id for s in sections]
        assert result[0].start_offset_px == 0
