# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Split pipeline: decode -> classify -> allocate -> slice.

Each call is independent: no cache, no shared mutable state.  An
undecodable screenshot degrades the result (every section points at the
original image) instead of failing the request.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field

import structlog
from PIL import Image

from . import SectionArtifact
from .capture import CaptureProvider, normalize_url
from .config import Settings
from .errors import AllocationError, SliceDecodeError
from .height_allocator import allocate
from .image_slicer import fallback_artifacts, slice_image
from .pipeline_timer import PipelineTimer
from .raster import RasterSource, load_image, source_reference
from .section_classifier import classify

logger = logging.getLogger(__name__)


@dataclass
class SplitResult:
    """Outcome of one split request."""

    url: str
    title: str
    screenshot: str  # reference to the original, unsliced raster
    artifacts: list[SectionArtifact]
    image_width_px: int = 0
    image_height_px: int = 0
    degraded: bool = False  # True when any section fell back to the original
    warnings: list[str] = field(default_factory=list)
    timings: dict[str, float] = field(default_factory=dict)
    request_id: str = ""

    @property
    def section_count(self) -> int:
        return len(self.artifacts)

    @property
    def fallback_count(self) -> int:
        return sum(1 for a in self.artifacts if a.fallback)


async def split_page(
    html: str | None,
    screenshot: RasterSource,
    *,
    url: str = "",
    title: str = "",
    settings: Settings | None = None,
    timer: PipelineTimer | None = None,
) -> SplitResult:
    """Split a full-page screenshot into section images using the page's HTML."""
    cfg = settings or Settings()
    timer = timer or PipelineTimer()
    request_id = uuid.uuid4().hex[:12]
    reference = source_reference(screenshot)
    warnings: list[str] = []

    with structlog.contextvars.bound_contextvars(request_id=request_id):
        timer.stage("decode")
        image: Image.Image | None
        try:
            image = await asyncio.to_thread(
                load_image,
                screenshot,
                timeout=cfg.fetch_timeout,
                max_bytes=cfg.max_image_bytes,
            )
        except SliceDecodeError as e:
            logger.warning("Screenshot could not be decoded, sections will show the full page: %s", e)
            warnings.append(f"Screenshot could not be decoded; sections show the full page ({e})")
            image = None

        timer.stage("classify")
        descriptors = classify(html)

        if image is None:
            artifacts = fallback_artifacts(descriptors, reference)
            width = height = 0
        else:
            with image:
                width, height = image.size
                timer.stage("allocate")
                try:
                    allocations = allocate(
                        descriptors,
                        height,
                        weights=cfg.weights,
                        min_height_px=cfg.min_section_height,
                    )
                except AllocationError as e:
                    logger.warning("Height allocation failed, sections will show the full page: %s", e)
                    warnings.append(f"Section heights could not be allocated; sections show the full page ({e})")
                    artifacts = fallback_artifacts(descriptors, reference)
                else:
                    timer.stage("slice")
                    artifacts = await asyncio.to_thread(
                        slice_image,
                        image,
                        allocations,
                        reference=reference,
                        compress_level=cfg.png_compress_level,
                    )
        timer.finalize()

        fallbacks = sum(1 for a in artifacts if a.fallback)
        if image is not None and fallbacks and not warnings:
            warnings.append(f"{fallbacks} section(s) could not be encoded and show the full page")

        result = SplitResult(
            url=url,
            title=title,
            screenshot=reference,
            artifacts=artifacts,
            image_width_px=width,
            image_height_px=height,
            degraded=fallbacks > 0,
            warnings=warnings,
            timings=timer.elapsed_per_stage(),
            request_id=request_id,
        )
        logger.info(
            "Split %s into %d sections (%dx%d, degraded=%s)",
            url or "<inline>",
            result.section_count,
            width,
            height,
            result.degraded,
        )
        return result


async def capture_and_split(
    url: str,
    *,
    provider: CaptureProvider,
    settings: Settings | None = None,
) -> SplitResult:
    """Capture *url* with *provider* and split the screenshot.

    Raises:
        InvalidURLError: malformed URL.
        CaptureError: the provider failed (no retry).
    """
    target = normalize_url(url)
    timer = PipelineTimer()
    timer.stage("capture")
    try:
        capture = await provider.capture(target)
    except Exception:
        logger.debug("Capture failed: %s", timer.failure_report())
        raise
    return await split_page(
        capture.html,
        capture.screenshot,
        url=capture.url or target,
        title=capture.title,
        settings=settings,
        timer=timer,
    )
