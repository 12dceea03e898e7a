# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Raster source helpers: read, decode and encode full-page screenshots.

A raster source is one of:
- ``data:`` URI (base64 or percent-encoded payload)
- ``http://`` / ``https://`` URL, fetched with urllib
- local filesystem path (``str`` or ``Path``)
- raw image bytes

Every read or decode problem is raised as SliceDecodeError so callers have a
single failure to absorb.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
import urllib.error
import urllib.parse
import urllib.request
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from .errors import SliceDecodeError, SliceEncodeError

logger = logging.getLogger(__name__)

RasterSource = str | bytes | Path

DEFAULT_FETCH_TIMEOUT = 30.0
DEFAULT_MAX_IMAGE_BYTES = 50 * 1024 * 1024
DEFAULT_PNG_COMPRESS_LEVEL = 6

_USER_AGENT = "SiteSplitter/1.0 (+https://github.com/sitesplitter/site-splitter)"

# Modes Pillow can write to PNG without conversion
_PNG_MODES = frozenset({"1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA"})

_MAGIC: tuple[tuple[bytes, str], ...] = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"BM", "image/bmp"),
)


def sniff_media_type(data: bytes) -> str:
    """Media type from magic bytes; ``application/octet-stream`` when unknown."""
    for magic, media_type in _MAGIC:
        if data.startswith(magic):
            return media_type
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return "application/octet-stream"


def to_data_uri(data: bytes, media_type: str | None = None) -> str:
    mt = media_type or sniff_media_type(data)
    return f"data:{mt};base64,{base64.b64encode(data).decode('ascii')}"


def _is_url(source: str) -> bool:
    return source[:8].lower().startswith(("http://", "https://"))


def source_reference(source: RasterSource) -> str:
    """Stable string reference to the original, unsliced raster.

    Strings (data URI, URL, path) are returned unchanged; paths become
    ``str(path)``; raw bytes become a data URI.
    """
    if isinstance(source, bytes | bytearray):
        return to_data_uri(bytes(source))
    return str(source)


def _decode_data_uri(uri: str) -> bytes:
    header, sep, payload = uri.partition(",")
    if not sep:
        raise SliceDecodeError("data URI has no payload separator")
    try:
        if header.lower().endswith(";base64"):
            # Tolerate whitespace/newlines inside the payload
            return base64.b64decode("".join(payload.split()), validate=True)
        return urllib.parse.unquote_to_bytes(payload)
    except (binascii.Error, ValueError) as e:
        raise SliceDecodeError(f"invalid base64 in data URI: {e}") from e


def _fetch(url: str, *, timeout: float, max_bytes: int) -> bytes:
    req = urllib.request.Request(url, headers={"User-Agent": _USER_AGENT})
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:  # noqa: S310  # nosec B310
            data = resp.read(max_bytes + 1)
    except urllib.error.HTTPError as e:
        raise SliceDecodeError(f"image fetch failed with HTTP {e.code}") from e
    except (urllib.error.URLError, TimeoutError, OSError) as e:
        raise SliceDecodeError(f"image fetch failed: {e}") from e
    if len(data) > max_bytes:
        raise SliceDecodeError(f"image exceeds {max_bytes:,} bytes")
    return data


def read_raster_bytes(
    source: RasterSource,
    *,
    timeout: float = DEFAULT_FETCH_TIMEOUT,
    max_bytes: int = DEFAULT_MAX_IMAGE_BYTES,
) -> bytes:
    """Return the encoded image bytes behind *source*.

    Raises:
        SliceDecodeError: empty source, bad data URI, failed fetch or read.
    """
    if isinstance(source, bytes | bytearray):
        data = bytes(source)
    elif isinstance(source, Path):
        try:
            data = source.read_bytes()
        except OSError as e:
            raise SliceDecodeError(f"cannot read {source}: {e}") from e
    else:
        text = source.strip()
        if not text:
            raise SliceDecodeError("empty raster source")
        if text[:5].lower() == "data:":
            data = _decode_data_uri(text)
        elif _is_url(text):
            data = _fetch(text, timeout=timeout, max_bytes=max_bytes)
        else:
            try:
                data = Path(text).read_bytes()
            except OSError as e:
                raise SliceDecodeError(f"cannot read {text[:200]}: {e}") from e
    if not data:
        raise SliceDecodeError("raster source is empty")
    if len(data) > max_bytes:
        raise SliceDecodeError(f"image exceeds {max_bytes:,} bytes")
    return data


def decode_image(data: bytes) -> Image.Image:
    """Decode *data* fully into memory.

    Raises:
        SliceDecodeError: unsupported/corrupt payload or decompression bomb.
    """
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as e:
        raise SliceDecodeError(f"cannot decode image: {e}") from e
    if image.width <= 0 or image.height <= 0:
        raise SliceDecodeError(f"image has no pixels ({image.width}x{image.height})")
    return image


def load_image(
    source: RasterSource,
    *,
    timeout: float = DEFAULT_FETCH_TIMEOUT,
    max_bytes: int = DEFAULT_MAX_IMAGE_BYTES,
) -> Image.Image:
    return decode_image(read_raster_bytes(source, timeout=timeout, max_bytes=max_bytes))


def encode_png(image: Image.Image, *, compress_level: int = DEFAULT_PNG_COMPRESS_LEVEL) -> bytes:
    """Lossless PNG encoding; converts modes PNG cannot store.

    Raises:
        SliceEncodeError: Pillow failed to encode the image.
    """
    try:
        if image.mode not in _PNG_MODES:
            image = image.convert("RGBA" if "A" in image.getbands() else "RGB")
        buf = io.BytesIO()
        image.save(buf, format="PNG", compress_level=compress_level)
    except (OSError, ValueError) as e:
        raise SliceEncodeError(f"cannot encode PNG: {e}") from e
    return buf.getvalue()
