"""Shared test fixtures for docscan."""

import pytest

from docscan.config import DocScanConfig
from docscan.models import MergedBlock, Rect, TextFragment

# ── Helpers ────────────────────────────────────────────────────────────


def make_rect(left: float, top: float, right: float, bottom: float) -> Rect:
    """Create a Rect from four coordinates."""
    return Rect(left, top, right, bottom)


def make_fragment(
    text: str,
    left: float = 0.0,
    top: float = 0.0,
    right: float = 10.0,
    bottom: float = 10.0,
) -> TextFragment:
    """Create a TextFragment with a box (default 10x10 at the origin)."""
    return TextFragment(text=text, rect=Rect(left, top, right, bottom))


def make_block(text: str, left: float, top: float, right: float, bottom: float) -> MergedBlock:
    """Create a single-fragment MergedBlock."""
    return MergedBlock(text=text, rect=Rect(left, top, right, bottom))


# ── Fixtures ───────────────────────────────────────────────────────────


@pytest.fixture
def default_cfg() -> DocScanConfig:
    """Return a default DocScanConfig."""
    return DocScanConfig()


@pytest.fixture
def form_fragments() -> list[TextFragment]:
    """A small scanned form: a label column and a value column, then a footer.

    Layout (approx):
        "Name:"  (20,20)     "John Doe" (100,20)
        "Age: 42" (20,50)
        ...large gap...
        "Page 1"  (20,400)
    """
    return [
        make_fragment("Name:", 20, 20, 80, 40),
        make_fragment("John Doe", 100, 20, 200, 40),
        make_fragment("Age: 42", 20, 50, 110, 70),
        make_fragment("Page 1", 20, 400, 90, 420),
    ]


@pytest.fixture
def bridged_fragments() -> list[TextFragment]:
    """Three boxes on one row where only the middle one bridges the ends.

    A (0..10) and B (120..130) are 110 px apart; C (60..70) sits exactly
    50 px from each.  Ordered A, B, C.
    """
    return [
        make_fragment("A", 0, 0, 10, 10),
        make_fragment("B", 120, 0, 130, 10),
        make_fragment("C", 60, 0, 70, 10),
    ]
