# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Log setup for the sitesplitter CLI and library callers.

Every module logs through ``logging.getLogger(__name__)``; this routes those
records through structlog so the per-request ``request_id`` bound by the split
pipeline shows up on decode, allocate and slice lines alike.  Output goes to
stderr (console or JSON lines) so stdout stays free for ``--format json``.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import structlog

# Pillow logs every PNG chunk at DEBUG; keep it out of -v output.
_NOISY_LOGGERS = ("PIL", "asyncio")


def configure(*, json_output: bool = False, level: str = "INFO", stream: TextIO | None = None) -> None:
    """Configure structlog with stdlib bridge.

    Args:
        json_output: True for JSON lines, False for human-readable console output.
        level: Root logger level (default INFO; unknown names fall back to INFO).
        stream: Output stream (default stderr, so stdout stays clean for --format json).
    """
    shared_processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    resolved = getattr(logging, level.upper(), None)
    root.setLevel(resolved if isinstance(resolved, int) else logging.INFO)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(root.level, logging.INFO))
