# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Runtime settings from ``SITESPLITTER_*`` environment variables.

Imports only errors and the allocator/raster defaults, so any module can use it.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from .errors import ConfigError
from .height_allocator import DEFAULT_WEIGHTS, MIN_SECTION_HEIGHT, parse_weights
from .raster import DEFAULT_FETCH_TIMEOUT, DEFAULT_MAX_IMAGE_BYTES, DEFAULT_PNG_COMPRESS_LEVEL

PROVIDERS = ("browser", "firecrawl")

DEFAULT_FIRECRAWL_URL = "https://api.firecrawl.dev/v1/scrape"

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


@dataclass(frozen=True, slots=True)
class Settings:
    """Immutable runtime configuration."""

    log_level: str = "INFO"
    log_json: bool = False
    provider: str = "browser"
    firecrawl_api_key: str = field(default="", repr=False)
    firecrawl_url: str = DEFAULT_FIRECRAWL_URL
    wait_for_ms: int = 3000
    capture_timeout: float = 60.0
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT
    max_image_bytes: int = DEFAULT_MAX_IMAGE_BYTES
    min_section_height: int = MIN_SECTION_HEIGHT
    png_compress_level: int = DEFAULT_PNG_COMPRESS_LEVEL
    viewport_width: int = 1440
    viewport_height: int = 900
    weights: Mapping[str, float] = field(default_factory=lambda: dict(DEFAULT_WEIGHTS))

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from *environ* (defaults to ``os.environ``).

        Raises:
            ConfigError: a variable is set to an invalid value.
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        provider = _str(env, "SITESPLITTER_PROVIDER", defaults.provider).lower()
        if provider not in PROVIDERS:
            raise ConfigError(f"SITESPLITTER_PROVIDER must be one of {', '.join(PROVIDERS)}, got {provider!r}")

        raw_weights = _str(env, "SITESPLITTER_WEIGHTS", "")
        try:
            weights = parse_weights(raw_weights) if raw_weights else dict(DEFAULT_WEIGHTS)
        except ValueError as e:
            raise ConfigError(f"SITESPLITTER_WEIGHTS: {e}") from e

        compress = _int(env, "SITESPLITTER_PNG_COMPRESS_LEVEL", defaults.png_compress_level, minimum=0)
        if compress > 9:
            raise ConfigError(f"SITESPLITTER_PNG_COMPRESS_LEVEL must be 0-9, got {compress}")

        return cls(
            log_level=_str(env, "SITESPLITTER_LOG_LEVEL", defaults.log_level).upper(),
            log_json=_bool(env, "SITESPLITTER_LOG_JSON", defaults.log_json),
            provider=provider,
            firecrawl_api_key=_str(env, "FIRECRAWL_API_KEY", ""),
            firecrawl_url=_str(env, "SITESPLITTER_FIRECRAWL_URL", defaults.firecrawl_url),
            wait_for_ms=_int(env, "SITESPLITTER_WAIT_FOR_MS", defaults.wait_for_ms, minimum=0),
            capture_timeout=_float(env, "SITESPLITTER_CAPTURE_TIMEOUT", defaults.capture_timeout),
            fetch_timeout=_float(env, "SITESPLITTER_FETCH_TIMEOUT", defaults.fetch_timeout),
            max_image_bytes=_int(env, "SITESPLITTER_MAX_IMAGE_BYTES", defaults.max_image_bytes, minimum=1),
            min_section_height=_int(env, "SITESPLITTER_MIN_SECTION_HEIGHT", defaults.min_section_height, minimum=0),
            png_compress_level=compress,
            viewport_width=_int(env, "SITESPLITTER_VIEWPORT_WIDTH", defaults.viewport_width, minimum=1),
            viewport_height=_int(env, "SITESPLITTER_VIEWPORT_HEIGHT", defaults.viewport_height, minimum=1),
            weights=weights,
        )


def _str(env: Mapping[str, str], name: str, default: str) -> str:
    value = env.get(name, "").strip()
    return value or default


def _bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    value = env.get(name, "").strip().lower()
    if not value:
        return default
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigError(f"{name} must be a boolean (true/false), got {value!r}")


def _int(env: Mapping[str, str], name: str, default: int, *, minimum: int) -> int:
    value = env.get(name, "").strip()
    if not value:
        return default
    try:
        parsed = int(value)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from None
    if parsed < minimum:
        raise ConfigError(f"{name} must be >= {minimum}, got {parsed}")
    return parsed


def _float(env: Mapping[str, str], name: str, default: float) -> float:
    value = env.get(name, "").strip()
    if not value:
        return default
    try:
        parsed = float(value)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {value!r}") from None
    if not parsed > 0:
        raise ConfigError(f"{name} must be > 0, got {value!r}")
    return parsed
