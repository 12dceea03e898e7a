# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Site Splitter: cut a full-page website screenshot into labelled sections.

Pipeline: raw HTML -> section outline (classifier) -> pixel ranges
(allocator) -> one PNG per section (slicer).

- SectionDescriptor: one detected section, before pixel allocation
- AllocatedSection: descriptor plus its vertical range in the screenshot
- SectionArtifact: allocated section plus its rendered image payload
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True, kw_only=True)
class SectionDescriptor:
    """A section detected in the page markup."""

    id: str  # opaque, generated per detection
    type: str  # hero, navigation, ..., footer
    name: str  # display label, fixed per type
    order: int  # dense 0..N-1 after finalisation
    confidence: int  # 0-100
    matches: int = 0  # raw rule hits (0 when synthesised)


@dataclass(frozen=True, slots=True, kw_only=True)
class AllocatedSection(SectionDescriptor):
    """A descriptor with its vertical pixel range in the source raster."""

    start_offset_px: int
    height_px: int

    @property
    def end_offset_px(self) -> int:
        return self.start_offset_px + self.height_px

    @property
    def is_placeholder(self) -> bool:
        return self.height_px == 0

    @classmethod
    def from_descriptor(cls, section: SectionDescriptor, *, start_offset_px: int, height_px: int) -> AllocatedSection:
        return cls(
            id=section.id,
            type=section.type,
            name=section.name,
            order=section.order,
            confidence=section.confidence,
            matches=section.matches,
            start_offset_px=start_offset_px,
            height_px=height_px,
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class SectionArtifact(AllocatedSection):
    """Final renderable result for one section."""

    image: str = ""  # data URI, original reference on fallback, "" for placeholders
    media_type: str = "image/png"
    width_px: int = 0  # actual crop size; 0 when not sliced
    crop_height_px: int = 0
    fallback: bool = False  # True when image points at the unsliced original

    @property
    def has_image(self) -> bool:
        return bool(self.image)

    @classmethod
    def from_allocation(
        cls,
        section: SectionDescriptor,
        *,
        image: str = "",
        media_type: str = "image/png",
        width_px: int = 0,
        crop_height_px: int = 0,
        fallback: bool = False,
    ) -> SectionArtifact:
        """Build an artifact; plain descriptors get a zero-height range at offset 0."""
        start = getattr(section, "start_offset_px", 0)
        height = getattr(section, "height_px", 0)
        return cls(
            id=section.id,
            type=section.type,
            name=section.name,
            order=section.order,
            confidence=section.confidence,
            matches=section.matches,
            start_offset_px=start,
            height_px=height,
            image=image,
            media_type=media_type,
            width_px=width_px,
            crop_height_px=crop_height_px,
            fallback=fallback,
        )


__all__ = ["AllocatedSection", "SectionArtifact", "SectionDescriptor"]
