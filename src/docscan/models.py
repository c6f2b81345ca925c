from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Tuple


class InvalidRectError(ValueError):
    """Raised when a Rect would have left > right or top > bottom."""


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in image pixel coordinates."""

    left: float
    top: float
    right: float
    bottom: float

    def __post_init__(self) -> None:
        if self.left > self.right or self.top > self.bottom:
            raise InvalidRectError(
                f"inverted rect ({self.left}, {self.top}, {self.right}, {self.bottom})"
            )

    def width(self) -> float:
        """Horizontal extent in pixels."""
        return self.right - self.left

    def height(self) -> float:
        """Vertical extent in pixels."""
        return self.bottom - self.top

    def area(self) -> float:
        """Area in square pixels."""
        return self.width() * self.height()

    def bbox(self) -> Tuple[float, float, float, float]:
        """Bounding box as ``(left, top, right, bottom)``."""
        return (self.left, self.top, self.right, self.bottom)

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        return {
            "left": self.left,
            "top": self.top,
            "right": self.right,
            "bottom": self.bottom,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Rect":
        """Deserialize from a dict produced by :meth:`to_dict`."""
        return cls(left=d["left"], top=d["top"], right=d["right"], bottom=d["bottom"])

    @classmethod
    def from_bbox(cls, bbox: Sequence[float]) -> "Rect":
        """Build from a ``(left, top, right, bottom)`` sequence."""
        left, top, right, bottom = bbox[:4]
        return cls(left=left, top=top, right=right, bottom=bottom)


@dataclass(frozen=True)
class TextFragment:
    """One OCR-detected piece of text, in engine reading order.

    ``rect`` is None when the engine reported no box, or when ingest
    rejected a malformed one.  Such fragments still feed key/value
    extraction but are skipped by block merging.
    """

    text: str
    rect: Optional[Rect] = None
    confidence: Optional[float] = None

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        d: dict = {
            "text": self.text,
            "rect": self.rect.to_dict() if self.rect is not None else None,
        }
        if self.confidence is not None:
            d["confidence"] = round(self.confidence, 4)
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "TextFragment":
        """Deserialize from a dict produced by :meth:`to_dict`."""
        rect = d.get("rect")
        return cls(
            text=d.get("text", ""),
            rect=Rect.from_dict(rect) if rect else None,
            confidence=d.get("confidence"),
        )


@dataclass(frozen=True)
class MergedBlock:
    """Fragments combined into one logical text region."""

    text: str
    rect: Rect
    fragment_count: int = 1

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        return {
            "text": self.text,
            "rect": self.rect.to_dict(),
            "fragment_count": self.fragment_count,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "MergedBlock":
        """Deserialize from a dict produced by :meth:`to_dict`."""
        return cls(
            text=d["text"],
            rect=Rect.from_dict(d["rect"]),
            fragment_count=d.get("fragment_count", 1),
        )


@dataclass(frozen=True)
class KeyValueEntry:
    """A ``key -> value`` pair recovered from fragment text."""

    key: str
    value: str

    def to_dict(self) -> dict:
        return {"key": self.key, "value": self.value}


@dataclass
class PageInfo:
    """Pixel dimensions of a scanned page image."""

    width: int
    height: int
    image_path: Optional[Path] = None

    def bounds(self) -> Rect:
        """The page as a rectangle anchored at the origin."""
        return Rect(0, 0, self.width, self.height)

    def to_dict(self) -> dict:
        """Serialize page info to a JSON-compatible dict."""
        return {
            "width": self.width,
            "height": self.height,
            "image_path": str(self.image_path) if self.image_path else None,
        }
