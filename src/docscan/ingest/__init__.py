"""Ingest stage — OCR records, result files, and page metadata.

Public API
----------
- :func:`fragment_from_record` — one OCR record → fragment
- :func:`fragments_from_records` — records → fragments in engine order
- :func:`load_ocr_json` — read an OCR result file, return :class:`OcrPage`
- :func:`read_page_info` — page-image pixel dimensions
- :class:`IngestError` — raised on unreadable inputs
"""

from .ingest import (
    IngestError,
    OcrPage,
    fragment_from_record,
    fragments_from_records,
    load_ocr_json,
    read_page_info,
)

__all__ = [
    "IngestError",
    "OcrPage",
    "fragment_from_record",
    "fragments_from_records",
    "load_ocr_json",
    "read_page_info",
]
