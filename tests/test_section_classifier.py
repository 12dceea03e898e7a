# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for the regex section classifier."""

from __future__ import annotations

import time

import pytest

from sitesplitter.patterns import SECTION_TYPES
from sitesplitter.section_classifier import classify, confidence_for

LANDING_PAGE = """
<html><body>
<header class="site-header"><nav class="navbar"><a href="/">Home</a></nav></header>
<section class="hero-banner"><h1>Ship faster</h1></section>
<section id="features"><div class="feature">A</div><div class="feature">B</div></section>
<section class="pricing-table"><div class="plan">Basic</div></section>
<section class="testimonials"><blockquote class="quote">Great</blockquote></section>
<section class="faq"><details><summary>Why?</summary></details></section>
<footer class="site-footer">(c) 2025</footer>
<section class="newsletter"><form action="/subscribe"></form></section>
</body></html>
"""


class TestInvariants:
    """Properties that hold for every input."""

    INPUTS = [
        "",
        "plain text, no markup",
        "<div class='x'",
        "<<<>>>\"'''\"",
        LANDING_PAGE,
        "<footer></footer>" * 5,
        '<div class="testimonial"></div>' * 20,
    ]

    @pytest.mark.parametrize("html", INPUTS)
    def test_hero_first_footer_last(self, html: str):
        sections = classify(html)
        assert len(sections) >= 2
        assert sections[0].type == "hero"
        assert sections[0].order == 0
        assert sections[0].confidence == 100
        assert sections[-1].type == "footer"

    @pytest.mark.parametrize("html", INPUTS)
    def test_unique_types(self, html: str):
        types = [s.type for s in classify(html)]
        assert len(types) == len(set(types))

    @pytest.mark.parametrize("html", INPUTS)
    def test_orders_are_dense(self, html: str):
        sections = classify(html)
        assert [s.order for s in sections] == list(range(len(sections)))

    @pytest.mark.parametrize("html", INPUTS)
    def test_confidence_in_range(self, html: str):
        assert all(0 <= s.confidence <= 100 for s in classify(html))

    def test_types_come_from_catalog(self):
        assert {s.type for s in classify(LANDING_PAGE)} <= set(SECTION_TYPES)


class TestDegenerateInput:
    def test_empty_html(self):
        sections = classify("")
        assert [s.type for s in sections] == ["hero", "footer"]
        assert sections[1].confidence == 80
        assert sections[1].matches == 0

    def test_none_html(self):
        assert [s.type for s in classify(None)] == ["hero", "footer"]

    def test_header_and_footer_only(self):
        sections = classify("<header>...</header><footer>...</footer>")
        assert [s.type for s in sections] == ["hero", "footer"]
        assert [s.confidence for s in sections] == [100, 80]


class TestConfidence:
    def test_three_testimonial_markers(self):
        html = '<div class="testimonial">a</div><div class="testimonial">b</div><div class="testimonial">c</div>'
        sections = {s.type: s for s in classify(html)}
        assert sections["testimonials"].confidence == 95
        assert sections["testimonials"].matches == 3

    def test_single_match(self):
        sections = {s.type: s for s in classify('<div id="pricing"></div>')}
        assert sections["pricing"].confidence == 65

    def test_saturates_at_100(self):
        html = '<div class="faq-item"></div>' * 10
        sections = {s.type: s for s in classify(html)}
        assert sections["faq"].confidence == 100

    @pytest.mark.parametrize("hits", range(0, 8))
    def test_non_decreasing(self, hits: int):
        assert confidence_for(hits + 1) >= confidence_for(hits)

    def test_hero_confidence_fixed(self):
        sections = classify('<div class="hero"></div>' * 3)
        assert sections[0].confidence == 100
        assert sections[0].matches == 3

    def test_detected_footer_scores_hits(self):
        # opening + closing tag + class attribute
        sections = classify('<footer class="footer">x</footer>')
        assert sections[-1].type == "footer"
        assert sections[-1].confidence == 95


class TestOrdering:
    def test_catalog_order_not_match_count(self):
        # many contact hits, one stats hit; stats still comes first
        html = '<div class="stat"></div>' + '<div class="contact"></div>' * 6
        types = [s.type for s in classify(html)]
        assert types.index("stats") < types.index("contact")

    def test_footer_moved_to_end(self):
        # the footer markup appears before other sections in the document
        html = '<footer></footer><div class="team"></div><div class="blog"></div>'
        types = [s.type for s in classify(html)]
        assert types == ["hero", "team", "blog", "footer"]

    def test_landing_page_outline(self):
        types = [s.type for s in classify(LANDING_PAGE)]
        assert types[0] == "hero"
        assert types[-1] == "footer"
        for expected in ("navigation", "features", "pricing", "testimonials", "faq", "contact"):
            assert expected in types
        assert types.index("navigation") < types.index("features") < types.index("pricing")

    def test_header_tag_is_not_navigation(self):
        types = [s.type for s in classify("<header><h1>Brand</h1></header>")]
        assert "navigation" not in types

    def test_nav_tag_is_navigation(self):
        types = [s.type for s in classify("<nav><a href='/'>Home</a></nav>")]
        assert types == ["hero", "navigation", "footer"]


class TestMatching:
    def test_case_insensitive(self):
        types = [s.type for s in classify('<DIV CLASS="Pricing-Grid"></DIV>')]
        assert "pricing" in types
        assert "cards" in types

    def test_single_quoted_attributes(self):
        types = [s.type for s in classify("<div class='team-members'></div>")]
        assert "team" in types

    def test_keyword_in_text_is_ignored(self):
        # only class/id values count, not body text
        types = [s.type for s in classify("<p>Read our blog and pricing faq</p>")]
        assert types == ["hero", "footer"]

    def test_form_tag_is_contact(self):
        types = [s.type for s in classify("<form method='post'><input></form>")]
        assert "contact" in types

    def test_details_tag_is_faq(self):
        types = [s.type for s in classify("<details><summary>Q</summary>A</details>")]
        assert "faq" in types


class TestIdempotence:
    def test_same_outline_twice(self):
        a = classify(LANDING_PAGE)
        b = classify(LANDING_PAGE)
        assert [(s.type, s.order, s.confidence) for s in a] == [(s.type, s.order, s.confidence) for s in b]

    def test_ids_are_unique(self):
        ids = [s.id for s in classify(LANDING_PAGE)] + [s.id for s in classify(LANDING_PAGE)]
        assert len(ids) == len(set(ids))


class TestAdversarialInput:
    """Unterminated quotes and tags must not blow up matching time."""

    INPUTS = [
        'class="' + "hero" * 40_000,
        "<div id='" + "pricing-plan " * 20_000,
        "<header" * 40_000,
        "<footer" * 40_000 + "</footer",
        ("<div class='" + "x" * 20) * 5_000,
    ]

    @pytest.mark.parametrize("html", INPUTS)
    def test_classifies_quickly(self, html: str):
        start = time.perf_counter()
        sections = classify(html)
        elapsed = time.perf_counter() - start

        assert elapsed < 2.0
        assert sections[0].type == "hero"
        assert sections[-1].type == "footer"

    def test_unterminated_value_is_not_an_attribute(self):
        types = [s.type for s in classify('<div class="pricing')]
        assert types == ["hero", "footer"]
