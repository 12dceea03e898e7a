# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""SplitResult serialization: JSON and terminal text formats.

Image payloads are large base64 strings, so JSON omits them unless asked.
"""

from __future__ import annotations

import json
from typing import Any

from . import SectionArtifact, SectionDescriptor
from .pipeline import SplitResult


def section_to_dict(section: SectionDescriptor, *, include_images: bool = False) -> dict[str, Any]:
    """Dict form of a descriptor, allocation or artifact (fields present on the object only)."""
    data: dict[str, Any] = {
        "id": section.id,
        "type": section.type,
        "name": section.name,
        "order": section.order,
        "confidence": section.confidence,
        "matches": section.matches,
    }
    if hasattr(section, "start_offset_px"):
        data["start_offset_px"] = section.start_offset_px
        data["height_px"] = section.height_px
    if isinstance(section, SectionArtifact):
        data["width_px"] = section.width_px
        data["crop_height_px"] = section.crop_height_px
        data["fallback"] = section.fallback
        if include_images:
            data["image"] = section.image
    return data


def to_dict(result: SplitResult, *, include_images: bool = False) -> dict[str, Any]:
    return {
        "url": result.url,
        "title": result.title,
        "image": {"width_px": result.image_width_px, "height_px": result.image_height_px},
        "degraded": result.degraded,
        **({"warnings": result.warnings} if result.warnings else {}),
        "sections": [section_to_dict(a, include_images=include_images) for a in result.artifacts],
        "meta": {
            "section_count": result.section_count,
            "timings": result.timings,
            "request_id": result.request_id,
        },
    }


def to_json(result: SplitResult, indent: int = 2, *, include_images: bool = False) -> str:
    """Serialize SplitResult to a JSON string."""
    return json.dumps(to_dict(result, include_images=include_images), ensure_ascii=False, indent=indent)


def _status(artifact: SectionArtifact) -> str:
    if artifact.fallback:
        return "full page (fallback)"
    if not artifact.has_image:
        return "placeholder"
    return f"{artifact.width_px}x{artifact.crop_height_px}"


def to_text(result: SplitResult) -> str:
    """One line per section, e.g. ``[0] Hero / Top  hero  conf=100  y=0+750  1280x750``."""
    header = f"{result.title or result.url or 'page'}: {result.section_count} sections"
    if result.image_height_px:
        header += f" from {result.image_width_px}x{result.image_height_px} screenshot"
    lines = [header]
    for a in result.artifacts:
        lines.append(
            f"[{a.order}] {a.name}  {a.type}  conf={a.confidence}  "
            f"y={a.start_offset_px}+{a.height_px}  {_status(a)}"
        )
    lines.extend(f"warning: {w}" for w in result.warnings)
    return "\n".join(lines)


def outline_to_text(sections: list[SectionDescriptor]) -> str:
    return "\n".join(f"[{s.order}] {s.name}  {s.type}  conf={s.confidence}  hits={s.matches}" for s in sections)
