# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Site Splitter CLI: split, classify commands.

Usage:
    sitesplitter split --url URL [-o DIR] [--zip FILE] [--format json|text] [--provider browser|firecrawl]
    sitesplitter split --html FILE --image FILE_OR_URL [-o DIR] [--zip FILE] [--format json|text]
    sitesplitter classify --html FILE [--format json|text]
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path

from .config import PROVIDERS, Settings
from .errors import SiteSplitterError

logger = logging.getLogger(__name__)


def _read_html(path_str: str) -> str:
    path = Path(path_str)
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise SiteSplitterError(f"Cannot read HTML file {path}: {e}") from e


def _image_source(value: str) -> str | Path:
    """Existing files become Paths; anything else (URL, data URI) stays a string."""
    path = Path(value)
    return path if path.is_file() else value


def cmd_split(args: argparse.Namespace, settings: Settings) -> None:
    """Capture (or read) a page and split its screenshot into section images."""
    from ._progress import print_step, status_spinner
    from .capture import get_provider
    from .exporter import write_artifacts, write_zip
    from .pipeline import capture_and_split, split_page
    from .serializer import to_json, to_text

    if args.url and (args.html or args.image):
        print("Error: --url cannot be combined with --html/--image.", file=sys.stderr)
        sys.exit(1)

    if args.url:
        if args.provider:
            settings = replace(settings, provider=args.provider)
        provider = get_provider(settings)
        with status_spinner(f"Capturing {args.url}..."):
            result = asyncio.run(capture_and_split(args.url, provider=provider, settings=settings))
    elif args.html and args.image:
        html = _read_html(args.html)
        with status_spinner("Splitting screenshot..."):
            result = asyncio.run(split_page(html, _image_source(args.image), settings=settings))
    else:
        print(
            "Error: split needs --url, or both --html and --image.\n\n"
            "Examples:\n"
            "  sitesplitter split --url https://example.com -o sections/\n"
            "  sitesplitter split --html page.html --image page.png --zip sections.zip\n",
            file=sys.stderr,
        )
        sys.exit(1)

    if args.format == "json":
        print(to_json(result, include_images=args.include_images))
    else:
        print(to_text(result))

    if args.output:
        written = write_artifacts(result.artifacts, Path(args.output))
        print_step(f"Saved {len(written)} images to {args.output}")
    if args.zip:
        write_zip(result.artifacts, Path(args.zip))
        print_step(f"Saved archive {args.zip}")


def cmd_classify(args: argparse.Namespace, settings: Settings) -> None:
    """Print the section outline detected in an HTML file."""
    from .section_classifier import classify
    from .serializer import outline_to_text, section_to_dict

    sections = classify(_read_html(args.html))
    if args.format == "json":
        print(json.dumps([section_to_dict(s) for s in sections], ensure_ascii=False, indent=2))
    else:
        print(outline_to_text(sections))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Split a full-page website screenshot into labelled section images",
        prog="sitesplitter",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging and tracebacks")
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON lines on stderr")
    subparsers = parser.add_subparsers(dest="command", required=True)

    _split_epilog = """\
examples:
  %(prog)s --url https://example.com                    Capture and print the outline
  %(prog)s --url example.com -o sections/               Save one PNG per section
  %(prog)s --url example.com --zip sections.zip         Save all sections as a ZIP
  %(prog)s --html page.html --image page.png --format json
"""
    p_split = subparsers.add_parser(
        "split",
        help="Split a page screenshot into section images",
        epilog=_split_epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p_split.add_argument("--url", type=str, metavar="URL", help="Page to capture")
    p_split.add_argument("--html", type=str, metavar="FILE", help="Saved page HTML (offline mode)")
    p_split.add_argument("--image", type=str, metavar="SRC", help="Screenshot file, URL or data URI (offline mode)")
    p_split.add_argument("-o", "--output", type=str, metavar="DIR", help="Directory for section PNGs")
    p_split.add_argument("--zip", type=str, metavar="FILE", help="Write all sections into a ZIP archive")
    p_split.add_argument("--format", type=str, choices=["json", "text"], default="text", help="Stdout format")
    p_split.add_argument("--include-images", action="store_true", help="Embed data URIs in JSON output")
    p_split.add_argument("--provider", type=str, choices=list(PROVIDERS), help="Screenshot provider override")

    p_classify = subparsers.add_parser("classify", help="Print the section outline of an HTML file")
    p_classify.add_argument("--html", type=str, metavar="FILE", required=True, help="Page HTML")
    p_classify.add_argument("--format", type=str, choices=["json", "text"], default="text", help="Stdout format")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    from .logging_config import configure

    parser = build_parser()
    args = parser.parse_args(argv)
    commands = {"split": cmd_split, "classify": cmd_classify}

    try:
        settings = Settings.from_env()
        configure(
            json_output=args.json_logs or settings.log_json,
            level="DEBUG" if args.verbose else settings.log_level,
        )
        commands[args.command](args, settings)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(130)
    except SystemExit:
        raise
    except SiteSplitterError as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback

            traceback.print_exc(file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        logger.debug("Unhandled error", exc_info=True)
        print(f"Error: unexpected {type(e).__name__}: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
