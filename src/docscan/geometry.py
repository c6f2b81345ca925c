"""Rectangle operations shared by block merging and hit-testing.

All functions are pure and return new :class:`~docscan.models.Rect`
instances.  Intersection is inclusive: rectangles that exactly touch
along an edge or at a corner intersect.  Containment is half-open,
``[left, right) x [top, bottom)``, so a point on a shared edge belongs
to exactly one of two abutting rectangles.
"""

from __future__ import annotations

from .models import Rect


def intersects(a: Rect, b: Rect) -> bool:
    """True if *a* and *b* overlap or touch on both axes."""
    return (
        a.left <= b.right
        and b.left <= a.right
        and a.top <= b.bottom
        and b.top <= a.bottom
    )


def _grow_axis(lo: float, hi: float, margin: float) -> tuple[float, float]:
    new_lo, new_hi = lo - margin, hi + margin
    if new_lo > new_hi:
        mid = (lo + hi) * 0.5
        return mid, mid
    return new_lo, new_hi


def expand(r: Rect, margin: float) -> Rect:
    """Grow *r* by *margin* on every side.

    Negative margins shrink.  An axis that would invert collapses to
    its midpoint instead.
    """
    left, right = _grow_axis(r.left, r.right, margin)
    top, bottom = _grow_axis(r.top, r.bottom, margin)
    return Rect(left, top, right, bottom)


def union(a: Rect, b: Rect) -> Rect:
    """Smallest rectangle containing both *a* and *b*."""
    return Rect(
        min(a.left, b.left),
        min(a.top, b.top),
        max(a.right, b.right),
        max(a.bottom, b.bottom),
    )


def contains(r: Rect, x: float, y: float) -> bool:
    """True if ``(x, y)`` lies in ``[left, right) x [top, bottom)``."""
    return r.left <= x < r.right and r.top <= y < r.bottom


def normalize_rect(left: float, top: float, right: float, bottom: float) -> Rect:
    """Build a Rect, swapping inverted coordinates."""
    return Rect(
        min(left, right),
        min(top, bottom),
        max(left, right),
        max(top, bottom),
    )
