"""Pipeline stage infrastructure: gating, timing, and stage-result recording.

A page runs through two independent stages over the same fragment list::

    fragments ─┬─ merge ──────→ merged blocks (overlay / hit-testing)
               └─ key_values ─→ key/value map

Every stage produces a :class:`StageResult`.  Gating logic is centralised
in :func:`gate` so that scripts and tests behave identically.

:func:`run_page` performs no file I/O and keeps no state between calls,
so it can be invoked from an OCR callback thread while results of an
earlier call are read elsewhere.
"""

from __future__ import annotations

import logging
import time
import traceback
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generator, List, Optional, Sequence

from .analysis.key_values import extract_key_values
from .config import DocScanConfig
from .grouping.block_merge import merge_nearby_blocks
from .models import MergedBlock, PageInfo, TextFragment

logger = logging.getLogger("docscan.pipeline")


class SkipReason(str, Enum):
    """Why a pipeline stage was skipped."""

    disabled_by_config = "disabled_by_config"
    not_applicable = "not_applicable"


@dataclass
class StageResult:
    """Outcome record for a single pipeline stage."""

    stage: str
    enabled: bool = False
    ran: bool = False
    status: str = "skipped"  # "success" | "skipped" | "failed"
    skip_reason: Optional[str] = None
    duration_ms: int = 0
    counts: Dict[str, Any] = field(default_factory=dict)
    error: Optional[Dict[str, str]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize stage result to a JSON-compatible dict."""
        d: Dict[str, Any] = {
            "stage": self.stage,
            "enabled": self.enabled,
            "ran": self.ran,
            "status": self.status,
        }
        if self.skip_reason is not None:
            d["skip_reason"] = self.skip_reason
        d["duration_ms"] = self.duration_ms
        if self.counts:
            d["counts"] = self.counts
        if self.error is not None:
            d["error"] = self.error
        return d


STAGE_ORDER: List[str] = ["merge", "key_values"]

_STAGE_FLAGS = {
    "merge": "enable_block_merge",
    "key_values": "enable_key_values",
}


def gate(stage: str, cfg: DocScanConfig) -> tuple[bool, Optional[str]]:
    """Decide whether *stage* should run.

    Returns ``(should_run, skip_reason)``.
    """
    flag = _STAGE_FLAGS.get(stage)
    if flag is None:
        return False, SkipReason.not_applicable.value
    if not getattr(cfg, flag):
        return False, SkipReason.disabled_by_config.value
    return True, None


@contextmanager
def run_stage(stage: str, cfg: DocScanConfig) -> Generator[StageResult, None, None]:
    """Context manager that wraps a pipeline stage with gating + timing.

    Usage::

        with run_stage("merge", cfg) as sr:
            if sr.ran:
                blocks = merge_nearby_blocks(fragments, cfg)
                sr.counts["blocks"] = len(blocks)

    The yielded :class:`StageResult` has ``ran=True`` only when
    :func:`gate` approves the stage.
    """
    should_run, skip_reason = gate(stage, cfg)

    flag = _STAGE_FLAGS.get(stage)
    sr = StageResult(stage=stage, enabled=bool(flag and getattr(cfg, flag)))

    if not should_run:
        sr.skip_reason = skip_reason
        yield sr
        return

    sr.ran = True
    t0 = time.perf_counter()
    try:
        yield sr
        if sr.status not in ("success", "failed"):
            sr.status = "success"
    except Exception as exc:
        sr.status = "failed"
        sr.error = {
            "type": type(exc).__name__,
            "message": str(exc),
            "stack": traceback.format_exc(),
        }
        raise
    finally:
        sr.duration_ms = int((time.perf_counter() - t0) * 1000)


@dataclass
class PageResult:
    """Structured result from :func:`run_page` for a single page."""

    page: Optional[PageInfo] = None
    stages: Dict[str, StageResult] = field(default_factory=dict)
    fragments: List[TextFragment] = field(default_factory=list)
    blocks: List[MergedBlock] = field(default_factory=list)
    key_values: Dict[str, str] = field(default_factory=dict)

    def to_summary_dict(self) -> Dict[str, Any]:
        """Return a lightweight summary suitable for JSON serialisation."""
        return {
            "page": self.page.to_dict() if self.page else None,
            "stages": {n: sr.to_dict() for n, sr in self.stages.items()},
            "counts": {
                "fragments": len(self.fragments),
                "fragments_without_rect": sum(
                    1 for f in self.fragments if f.rect is None
                ),
                "blocks": len(self.blocks),
                "key_values": len(self.key_values),
            },
        }


def run_page(
    fragments: Sequence[TextFragment],
    cfg: DocScanConfig | None = None,
    page: Optional[PageInfo] = None,
) -> PageResult:
    """Run block merging and key/value extraction over one page.

    Parameters
    ----------
    fragments : sequence of TextFragment
        OCR fragments in engine reading order.
    cfg : DocScanConfig, optional
        Defaults to ``DocScanConfig()``.
    page : PageInfo, optional
        Image dimensions, carried through for hit-testing and export.
    """
    if cfg is None:
        cfg = DocScanConfig()

    pr = PageResult(page=page, fragments=list(fragments))

    with run_stage("merge", cfg) as sr:
        if sr.ran:
            pr.blocks = merge_nearby_blocks(pr.fragments, cfg)
            sr.counts = {
                "fragments": len(pr.fragments),
                "blocks": len(pr.blocks),
            }
    pr.stages["merge"] = sr

    with run_stage("key_values", cfg) as sr:
        if sr.ran:
            pr.key_values = extract_key_values(pr.fragments, cfg)
            sr.counts = {"key_values": len(pr.key_values)}
    pr.stages["key_values"] = sr

    logger.info(
        "run_page: %d fragments -> %d blocks, %d key/values",
        len(pr.fragments),
        len(pr.blocks),
        len(pr.key_values),
    )
    return pr
