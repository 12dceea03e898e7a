# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Site Splitter exception hierarchy.

All Site Splitter errors inherit from SiteSplitterError, allowing callers
to catch the base class for any failure or specific subclasses for
targeted handling.  Slice errors are normally absorbed by the slicer and
only surface when the raster helpers are used directly.
"""

from __future__ import annotations


class SiteSplitterError(Exception):
    """Base exception for all Site Splitter errors."""


class ConfigError(SiteSplitterError):
    """An environment variable or setting holds an invalid value."""


class InvalidURLError(SiteSplitterError):
    """Capture target URL is empty, malformed, or uses an unsupported scheme."""


class ProviderConfigError(SiteSplitterError):
    """Screenshot provider is not configured (missing API key, unknown provider)."""


class CaptureError(SiteSplitterError):
    """Screenshot provider failed to capture the page."""

    def __init__(self, message: str, *, status_code: int = 0) -> None:
        super().__init__(message)
        self.status_code = status_code


class AllocationError(SiteSplitterError, ValueError):
    """Height allocation called with an unusable total height or weight table."""


class SliceDecodeError(SiteSplitterError):
    """Source raster could not be read or decoded."""


class SliceEncodeError(SiteSplitterError):
    """A cropped section could not be encoded."""
