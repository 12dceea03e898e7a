# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Export section artifacts as PNG files or a single ZIP archive."""

from __future__ import annotations

import io
import logging
import re
import unicodedata
import zipfile
from collections.abc import Iterable, Iterator
from pathlib import Path

from . import SectionArtifact
from .raster import read_raster_bytes, sniff_media_type

logger = logging.getLogger(__name__)

_UNSAFE_RE = re.compile(r"[^a-z0-9._-]+")
_DASHES_RE = re.compile(r"-{2,}")

_EXTENSIONS = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/bmp": ".bmp",
}


def sanitize_filename(name: str) -> str:
    """Filesystem-safe slug: ``"Hero / Top"`` -> ``"hero-top"``."""
    folded = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"\s+", "-", folded.strip().lower())
    slug = _UNSAFE_RE.sub("", slug)
    slug = _DASHES_RE.sub("-", slug).strip("-.")
    return slug or "section"


def artifact_filename(artifact: SectionArtifact, extension: str = ".png") -> str:
    return f"{artifact.order + 1:02d}-{sanitize_filename(artifact.name)}{extension}"


def _payloads(artifacts: Iterable[SectionArtifact]) -> Iterator[tuple[str, bytes]]:
    for artifact in sorted(artifacts, key=lambda a: a.order):
        if not artifact.has_image:
            logger.debug("Skipping placeholder section %s", artifact.type)
            continue
        data = read_raster_bytes(artifact.image)
        # fallback references may point at a JPEG or WebP original
        extension = _EXTENSIONS.get(sniff_media_type(data), ".png")
        yield artifact_filename(artifact, extension), data


def write_artifacts(artifacts: Iterable[SectionArtifact], out_dir: Path) -> list[Path]:
    """Write one PNG per artifact with a payload into *out_dir*.

    Raises:
        SliceDecodeError: a fallback reference could not be read back.
    """
    out_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for filename, data in _payloads(artifacts):
        path = out_dir / filename
        path.write_bytes(data)
        written.append(path)
    logger.info("Wrote %d section images to %s", len(written), out_dir)
    return written


def build_zip(artifacts: Iterable[SectionArtifact]) -> bytes:
    """ZIP archive (deflated) containing every section image."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for filename, data in _payloads(artifacts):
            zf.writestr(filename, data)
    return buf.getvalue()


def write_zip(artifacts: Iterable[SectionArtifact], path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(build_zip(artifacts))
    logger.info("Wrote section archive %s", path)
    return path
