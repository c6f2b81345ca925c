"""Viewport ↔ image coordinate mapping and tap hit-testing.

The UI owns a :class:`ViewportState` (scale plus translation) and passes
it in; nothing here keeps state between calls.  A tap in view space maps
to image space as ``((x - offset_x) / scale, (y - offset_y) / scale)``
and is then tested against merged block rectangles, first match in list
order winning.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .config import DocScanConfig
from .geometry import contains
from .models import MergedBlock, PageInfo

logger = logging.getLogger("docscan.viewport")

Point = Tuple[float, float]


@dataclass(frozen=True)
class ViewportState:
    """Scale and translation of the image inside the view."""

    scale: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0

    def __post_init__(self) -> None:
        if self.scale <= 0:
            raise ValueError(f"scale={self.scale} must be > 0")


def apply_transform_gesture(
    state: ViewportState,
    centroid: Point,
    pan: Point,
    zoom: float,
    cfg: DocScanConfig | None = None,
) -> ViewportState:
    """Return the state after a pinch/pan gesture.

    The scale is multiplied by *zoom* and clamped to
    ``[cfg.min_scale, cfg.max_scale]``; offsets are rescaled around
    *centroid* so the point under the fingers stays put, then shifted
    by *pan*.
    """
    cfg = cfg or DocScanConfig()
    new_scale = min(max(state.scale * zoom, cfg.min_scale), cfg.max_scale)
    factor = new_scale / state.scale
    cx, cy = centroid
    px, py = pan
    return ViewportState(
        scale=new_scale,
        offset_x=(state.offset_x - cx) * factor + cx + px,
        offset_y=(state.offset_y - cy) * factor + cy + py,
    )


def view_to_image(state: ViewportState, x: float, y: float) -> Point:
    """Map a view-space point to untransformed image coordinates."""
    return ((x - state.offset_x) / state.scale, (y - state.offset_y) / state.scale)


def image_to_view(state: ViewportState, x: float, y: float) -> Point:
    """Inverse of :func:`view_to_image`."""
    return (x * state.scale + state.offset_x, y * state.scale + state.offset_y)


def hit_test(
    blocks: Sequence[MergedBlock], x: float, y: float
) -> Optional[MergedBlock]:
    """First block (in list order) whose rect contains the image point."""
    for block in blocks:
        if contains(block.rect, x, y):
            return block
    return None


def select_block(
    blocks: Sequence[MergedBlock],
    state: ViewportState,
    tap_x: float,
    tap_y: float,
    page: Optional[PageInfo] = None,
) -> Optional[MergedBlock]:
    """Resolve a view-space tap to the block under it, if any.

    When *page* is given, taps that land outside the page image select
    nothing.
    """
    x, y = view_to_image(state, tap_x, tap_y)
    logger.debug(
        "tap (%.1f, %.1f) scale=%.3f offset=(%.1f, %.1f) -> image (%.1f, %.1f)",
        tap_x,
        tap_y,
        state.scale,
        state.offset_x,
        state.offset_y,
        x,
        y,
    )
    if page is not None and not contains(page.bounds(), x, y):
        return None
    return hit_test(blocks, x, y)
