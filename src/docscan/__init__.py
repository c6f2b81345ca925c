"""Text-region core for scanned documents.

Frequently-used symbols are re-exported here for convenience.  For the
ingest adapters or serialization helpers import from the relevant
submodule, e.g.::

    from docscan.ingest import load_ocr_json
    from docscan.page_data import serialize_page
"""

# ── Core models & config ──────────────────────────────────────────────

from .analysis import extract_key_values, key_value_entries
from .config import ConfigLoadError, ConfigValidationError, DocScanConfig
from .geometry import contains, expand, intersects, normalize_rect, union
from .grouping import merge_nearby_blocks
from .models import (
    InvalidRectError,
    KeyValueEntry,
    MergedBlock,
    PageInfo,
    Rect,
    TextFragment,
)
from .pipeline import PageResult, StageResult, run_page
from .viewport import (
    ViewportState,
    apply_transform_gesture,
    hit_test,
    select_block,
    view_to_image,
)

__version__ = "0.1.0"

__all__ = [
    # Models & config
    "DocScanConfig",
    "ConfigLoadError",
    "ConfigValidationError",
    "InvalidRectError",
    "Rect",
    "TextFragment",
    "MergedBlock",
    "KeyValueEntry",
    "PageInfo",
    # Geometry
    "contains",
    "expand",
    "intersects",
    "normalize_rect",
    "union",
    # Grouping & analysis
    "merge_nearby_blocks",
    "extract_key_values",
    "key_value_entries",
    # Viewport
    "ViewportState",
    "apply_transform_gesture",
    "hit_test",
    "select_block",
    "view_to_image",
    # Pipeline
    "PageResult",
    "StageResult",
    "run_page",
]
