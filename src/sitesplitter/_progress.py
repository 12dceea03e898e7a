# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Progress output for the CLI.

Everything goes to stderr through a ``rich`` console and only on an
interactive terminal, so ``--format json`` on stdout stays parseable.
"""

from __future__ import annotations

import contextlib
import sys
from collections.abc import Iterator

from rich.console import Console


def _interactive() -> bool:
    return sys.stderr.isatty()


@contextlib.contextmanager
def status_spinner(msg: str) -> Iterator[None]:
    """Show a spinner with *msg* while the block runs (no-op when piped)."""
    if not _interactive():
        yield
        return
    with Console(stderr=True).status(msg, spinner="dots"):
        yield


def print_step(msg: str) -> None:
    """Print a completed step, e.g. ``✓ Saved 6 images to sections/``."""
    if _interactive():
        Console(stderr=True).print(f"[green]✓[/green] {msg}", highlight=False)
