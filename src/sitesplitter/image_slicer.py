# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Image slicer — crop a full-page raster into one PNG per allocated section.

The source image is only read; every slice is an independent copy.  Failure
never aborts the request:

- source cannot be read/decoded  -> every section points at the original
- one crop cannot be encoded     -> that section points at the original
- zero-height allocation         -> empty payload (placeholder)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from PIL import Image

from . import AllocatedSection, SectionArtifact, SectionDescriptor
from .errors import SliceDecodeError, SliceEncodeError
from .raster import (
    DEFAULT_FETCH_TIMEOUT,
    DEFAULT_MAX_IMAGE_BYTES,
    DEFAULT_PNG_COMPRESS_LEVEL,
    RasterSource,
    encode_png,
    load_image,
    source_reference,
    to_data_uri,
)

logger = logging.getLogger(__name__)


def fallback_artifacts(sections: Sequence[SectionDescriptor], reference: str) -> list[SectionArtifact]:
    """Every section pointing at the unsliced original, metadata preserved."""
    return [SectionArtifact.from_allocation(s, image=reference, media_type="", fallback=True) for s in sections]


def _placeholder(section: AllocatedSection) -> SectionArtifact:
    return SectionArtifact.from_allocation(section, image="", media_type="")


def slice_image(
    image: Image.Image,
    allocations: Sequence[AllocatedSection],
    *,
    reference: str,
    compress_level: int = DEFAULT_PNG_COMPRESS_LEVEL,
) -> list[SectionArtifact]:
    """Crop *image* along *allocations* and encode each crop as PNG.

    Args:
        image: Decoded full-page raster (not modified).
        allocations: Height allocator output, in display order.
        reference: Original raster reference used for per-section fallback.
        compress_level: zlib level for PNG output (lossless at any level).
    """
    width, height = image.size
    artifacts: list[SectionArtifact] = []

    for section in allocations:
        if section.height_px <= 0:
            artifacts.append(_placeholder(section))
            continue

        top = section.start_offset_px
        crop_height = min(section.height_px, height - top)
        if crop_height <= 0:
            logger.debug("Section %s starts at %dpx, past image bottom %dpx", section.type, top, height)
            artifacts.append(_placeholder(section))
            continue

        try:
            crop = image.crop((0, top, width, top + crop_height))
            payload = encode_png(crop, compress_level=compress_level)
        except SliceEncodeError as e:
            logger.warning("Section %s (order %d) fell back to full image: %s", section.type, section.order, e)
            artifacts.append(SectionArtifact.from_allocation(section, image=reference, media_type="", fallback=True))
            continue

        artifacts.append(
            SectionArtifact.from_allocation(
                section,
                image=to_data_uri(payload, "image/png"),
                media_type="image/png",
                width_px=width,
                crop_height_px=crop_height,
            )
        )

    return artifacts


def slice_sections(
    source: RasterSource,
    allocations: Sequence[AllocatedSection],
    *,
    compress_level: int = DEFAULT_PNG_COMPRESS_LEVEL,
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT,
    max_image_bytes: int = DEFAULT_MAX_IMAGE_BYTES,
) -> list[SectionArtifact]:
    """Decode *source* and slice it; undecodable sources degrade to fallback artifacts."""
    reference = source_reference(source)
    try:
        image = load_image(source, timeout=fetch_timeout, max_bytes=max_image_bytes)
    except SliceDecodeError as e:
        logger.warning(
            "Source raster could not be decoded, returning unsliced image for %d sections: %s",
            len(allocations),
            e,
        )
        return fallback_artifacts(allocations, reference)

    with image:
        return slice_image(image, allocations, reference=reference, compress_level=compress_level)


async def slice_sections_async(
    source: RasterSource,
    allocations: Sequence[AllocatedSection],
    *,
    compress_level: int = DEFAULT_PNG_COMPRESS_LEVEL,
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT,
    max_image_bytes: int = DEFAULT_MAX_IMAGE_BYTES,
) -> list[SectionArtifact]:
    """slice_sections() in a worker thread (fetch/decode/encode are blocking)."""
    return await asyncio.to_thread(
        slice_sections,
        source,
        allocations,
        compress_level=compress_level,
        fetch_timeout=fetch_timeout,
        max_image_bytes=max_image_bytes,
    )
