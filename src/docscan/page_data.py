"""Serialization helpers for per-page results.

``serialize_page`` converts a :class:`~docscan.pipeline.PageResult` into a
JSON-friendly dict; ``deserialize_page`` rebuilds the fragments, merged
blocks and key/value map from it.

JSON layout
-----------
::

    {
      "version": 1,
      "page_width": 1240,
      "page_height": 1754,
      "fragments": [ {TextFragment.to_dict()}, ... ],
      "blocks": [ {MergedBlock.to_dict()}, ... ],
      "key_values": { "Name:": "John Doe", ... }
    }
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from docscan.models import MergedBlock, PageInfo, TextFragment
from docscan.pipeline import PageResult

FORMAT_VERSION = 1


def serialize_page(result: PageResult) -> dict[str, Any]:
    """Serialize a single page's pipeline output to a JSON-friendly dict."""
    page = result.page
    return {
        "version": FORMAT_VERSION,
        "page_width": page.width if page else None,
        "page_height": page.height if page else None,
        "fragments": [f.to_dict() for f in result.fragments],
        "blocks": [b.to_dict() for b in result.blocks],
        "key_values": dict(result.key_values),
    }


def deserialize_page(
    data: dict[str, Any],
) -> Tuple[List[TextFragment], List[MergedBlock], Dict[str, str], Optional[PageInfo]]:
    """Deserialize a page dict produced by :func:`serialize_page`.

    Returns
    -------
    fragments : list[TextFragment]
    blocks : list[MergedBlock]
    key_values : dict[str, str]
    page : PageInfo or None
    """
    version = data.get("version", FORMAT_VERSION)
    if version != FORMAT_VERSION:
        raise ValueError(f"Unsupported page data version: {version}")

    fragments = [TextFragment.from_dict(f) for f in data.get("fragments", [])]
    blocks = [MergedBlock.from_dict(b) for b in data.get("blocks", [])]
    key_values = dict(data.get("key_values", {}))

    page = None
    if data.get("page_width") is not None and data.get("page_height") is not None:
        page = PageInfo(width=data["page_width"], height=data["page_height"])
    return fragments, blocks, key_values, page
