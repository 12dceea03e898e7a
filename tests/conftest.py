# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Shared test configuration and fixtures."""

try:
    import sitesplitter  # noqa: F401
except ImportError:
    raise ImportError("sitesplitter is not installed. Run: pip install -e '.[dev]'") from None

import io

import pytest
from PIL import Image


def render_png(width: int, height: int, *, mode: str = "RGB") -> bytes:
    """PNG whose row ``y`` has red channel ``y % 256``, so crops are identifiable by colour."""
    image = Image.new(mode, (width, height))
    for y in range(height):
        color = (y % 256, 40, 200) if mode == "RGB" else (y % 256, 40, 200, 255)
        image.paste(color, (0, y, width, y + 1))
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def make_png():
    return render_png


@pytest.fixture
def png_1000() -> bytes:
    """40x1000 striped PNG."""
    return render_png(40, 1000)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep SITESPLITTER_* variables from the developer shell out of tests."""
    import os

    for name in list(os.environ):
        if name.startswith("SITESPLITTER_") or name == "FIRECRAWL_API_KEY":
            monkeypatch.delenv(name, raising=False)
