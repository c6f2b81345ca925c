"""Proximity merging of OCR fragments into text blocks.

One forward pass: each unvisited fragment seeds a cluster and absorbs
later fragments whose threshold-expanded rect touches the cluster's
growing rect.  Earlier fragments are never revisited, so the result
depends on input order.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from ..config import DocScanConfig
from ..geometry import expand, intersects, union
from ..models import MergedBlock, TextFragment

logger = logging.getLogger("docscan.block_merge")


def merge_nearby_blocks(
    fragments: Sequence[TextFragment],
    cfg: DocScanConfig | None = None,
    *,
    threshold: Optional[float] = None,
) -> List[MergedBlock]:
    """Greedily merge fragments whose rectangles lie within *threshold*.

    Single forward pass over the fragments in reading order.  Each
    unvisited fragment seeds a cluster; every later unvisited fragment
    whose rect, expanded by *threshold*, intersects the cluster's
    accumulated rect is absorbed.  The scan runs once per seed, so a
    fragment skipped early in the scan is not retested after the cluster
    grows, and a fragment can never join a cluster seeded after it.

    Known limitation: the result depends on input order.  For three
    collinear fragments A, B, C where only C bridges A and B, the order
    ``[A, B, C]`` yields two blocks while ``[A, C, B]`` yields one.

    Args:
        fragments: OCR fragments in engine reading order.  Fragments
            without a rect are skipped.
        cfg: DocScanConfig supplying ``merge_threshold`` and ``merge_joiner``.
        threshold: Overrides ``cfg.merge_threshold`` when given.

    Returns:
        One MergedBlock per cluster, in seed order.
    """
    cfg = cfg or DocScanConfig()
    dist = cfg.merge_threshold if threshold is None else threshold

    usable = [f for f in fragments if f.rect is not None]
    skipped = len(fragments) - len(usable)
    if skipped:
        logger.debug("merge_nearby_blocks: skipped %d fragments without rect", skipped)

    merged: List[MergedBlock] = []
    visited = [False] * len(usable)

    for i, seed in enumerate(usable):
        if visited[i]:
            continue
        visited[i] = True

        texts = [seed.text]
        bbox = seed.rect

        for j in range(i + 1, len(usable)):
            if visited[j]:
                continue
            other = usable[j]
            if intersects(bbox, expand(other.rect, dist)):
                bbox = union(bbox, other.rect)
                texts.append(other.text)
                visited[j] = True

        merged.append(
            MergedBlock(
                text=cfg.merge_joiner.join(texts),
                rect=bbox,
                fragment_count=len(texts),
            )
        )

    logger.debug(
        "merge_nearby_blocks: %d fragments -> %d blocks (threshold=%s)",
        len(usable),
        len(merged),
        dist,
    )
    return merged
