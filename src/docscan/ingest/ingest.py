"""Ingest stage — OCR result loading, fragment construction, page metadata.

Converts raw OCR engine records into :class:`~docscan.models.TextFragment`
objects so that downstream stages never deal with engine-specific box
formats or malformed coordinates.

Public API
----------
- :func:`fragment_from_record` — one OCR record → fragment (or None)
- :func:`fragments_from_records` — ordered records → fragments
- :func:`load_ocr_json` — read an OCR result file, return :class:`OcrPage`
- :func:`read_page_info` — page-image pixel size via Pillow
- :class:`IngestError` — raised on unreadable inputs
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence

from PIL import Image, UnidentifiedImageError

from ..config import DocScanConfig
from ..geometry import normalize_rect
from ..models import PageInfo, Rect, TextFragment

log = logging.getLogger("docscan.ingest")


class IngestError(Exception):
    """Raised when OCR results or a page image cannot be ingested."""


@dataclass
class OcrPage:
    """Fragments of one scanned page plus its image metadata, if known."""

    fragments: List[TextFragment] = field(default_factory=list)
    page: Optional[PageInfo] = None
    source: Optional[Path] = None


# ---------------------------------------------------------------------------
# Record parsing
# ---------------------------------------------------------------------------


def _coords_from_record(record: dict) -> Optional[Sequence[float]]:
    """Pull ``(left, top, right, bottom)`` out of whichever box key is present."""
    for key in ("bbox", "box"):
        box = record.get(key)
        if box is not None:
            if len(box) < 4:
                raise ValueError(f"{key} needs 4 values, got {len(box)}")
            return [float(v) for v in box[:4]]

    rect = record.get("rect")
    if isinstance(rect, dict):
        return [
            float(rect["left"]),
            float(rect["top"]),
            float(rect["right"]),
            float(rect["bottom"]),
        ]

    # Quadrilateral from detectors such as PaddleOCR (dt_polys); use its hull.
    poly = record.get("polygon") or record.get("points")
    if poly:
        xs = [float(p[0]) for p in poly]
        ys = [float(p[1]) for p in poly]
        return [min(xs), min(ys), max(xs), max(ys)]

    return None


def _build_rect(
    coords: Sequence[float], text: str, cfg: DocScanConfig
) -> Optional[Rect]:
    left, top, right, bottom = coords
    if left <= right and top <= bottom:
        return Rect(left, top, right, bottom)
    if cfg.malformed_rect_policy == "normalize":
        log.warning("Normalizing inverted box %s for %r", list(coords), text)
        return normalize_rect(left, top, right, bottom)
    log.warning("Rejecting inverted box %s for %r", list(coords), text)
    return None


def fragment_from_record(
    record: Any, cfg: DocScanConfig | None = None
) -> Optional[TextFragment]:
    """Convert one OCR record to a fragment.

    Returns None for records that are not mappings or fall below
    ``cfg.min_confidence``.  A missing or unparseable box yields a
    fragment with ``rect=None``.
    """
    cfg = cfg or DocScanConfig()
    if not isinstance(record, dict):
        log.warning("Skipping non-mapping OCR record: %r", record)
        return None

    text = str(record.get("text", ""))
    confidence = record.get("confidence", record.get("score"))
    if confidence is not None:
        try:
            confidence = float(confidence)
        except (TypeError, ValueError):
            log.warning("Ignoring unreadable confidence %r for %r", confidence, text)
            confidence = None
    if confidence is not None:
        if confidence < cfg.min_confidence:
            log.debug("Dropping %r (confidence %.3f)", text, confidence)
            return None

    try:
        coords = _coords_from_record(record)
    except (TypeError, ValueError, KeyError, IndexError) as exc:
        log.warning("Unreadable box for %r: %s", text, exc)
        coords = None

    if coords is None:
        log.debug("No box for %r", text)
        rect = None
    else:
        rect = _build_rect(coords, text, cfg)

    return TextFragment(text=text, rect=rect, confidence=confidence)


def fragments_from_records(
    records: Iterable[Any], cfg: DocScanConfig | None = None
) -> List[TextFragment]:
    """Convert OCR records to fragments, preserving engine order."""
    cfg = cfg or DocScanConfig()
    fragments: List[TextFragment] = []
    for record in records:
        frag = fragment_from_record(record, cfg)
        if frag is not None:
            fragments.append(frag)
    return fragments


# ---------------------------------------------------------------------------
# File loading
# ---------------------------------------------------------------------------


def read_page_info(image_path: Path | str) -> PageInfo:
    """Read the pixel size of a page image without decoding its pixels."""
    image_path = Path(image_path)
    if not image_path.is_file():
        raise IngestError(f"Image not found: {image_path}")
    try:
        with Image.open(image_path) as img:
            width, height = img.size
    except (UnidentifiedImageError, OSError) as exc:
        raise IngestError(f"Cannot read image {image_path}: {exc}") from exc
    return PageInfo(width=width, height=height, image_path=image_path)


def _page_from_payload(payload: dict, base_dir: Path) -> Optional[PageInfo]:
    image = payload.get("image")
    width = payload.get("width")
    height = payload.get("height")
    image_path = base_dir / image if image else None

    if width is not None and height is not None:
        try:
            width, height = int(width), int(height)
        except (TypeError, ValueError) as exc:
            raise IngestError(f"Invalid page size {width!r}x{height!r}: {exc}") from exc
        if width < 0 or height < 0:
            raise IngestError(f"Negative page size {width}x{height}")
        return PageInfo(width=width, height=height, image_path=image_path)
    if image_path is not None:
        return read_page_info(image_path)
    return None


def load_ocr_json(path: Path | str, cfg: DocScanConfig | None = None) -> OcrPage:
    """Load an OCR result file.

    Accepts either a bare list of records or a mapping with a
    ``fragments`` list and optional ``image`` / ``width`` / ``height``.
    The image path is resolved relative to the JSON file.
    """
    cfg = cfg or DocScanConfig()
    path = Path(path)
    if not path.is_file():
        raise IngestError(f"File not found: {path}")

    try:
        with path.open("r", encoding="utf-8") as fh:
            payload = json.load(fh)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise IngestError(f"Cannot read OCR JSON {path}: {exc}") from exc

    if isinstance(payload, list):
        records, page = payload, None
    elif isinstance(payload, dict) and isinstance(payload.get("fragments"), list):
        records = payload["fragments"]
        page = _page_from_payload(payload, path.parent)
    else:
        raise IngestError(
            f"OCR JSON {path} must be a list of records or a mapping with 'fragments'"
        )

    fragments = fragments_from_records(records, cfg)
    log.info(
        "Ingested %s: %d records -> %d fragments",
        path.name,
        len(records),
        len(fragments),
    )
    return OcrPage(fragments=fragments, page=page, source=path)
