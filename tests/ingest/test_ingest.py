"""Tests for docscan.ingest — OCR record conversion and file loading."""

import json
import logging

import pytest
from PIL import Image

from docscan.config import DocScanConfig
from docscan.ingest import (
    IngestError,
    fragment_from_record,
    fragments_from_records,
    load_ocr_json,
    read_page_info,
)
from docscan.models import Rect


class TestFragmentFromRecord:
    def test_bbox_list(self):
        f = fragment_from_record({"text": "Name:", "bbox": [1, 2, 30, 12]})
        assert f.text == "Name:"
        assert f.rect == Rect(1, 2, 30, 12)

    def test_box_key(self):
        f = fragment_from_record({"text": "x", "box": [0, 0, 5, 5]})
        assert f.rect == Rect(0, 0, 5, 5)

    def test_rect_mapping(self):
        rect = {"left": 1, "top": 2, "right": 3, "bottom": 4}
        f = fragment_from_record({"text": "x", "rect": rect})
        assert f.rect == Rect(1, 2, 3, 4)

    def test_polygon_hull(self):
        poly = [[10, 5], [50, 7], [52, 20], [9, 18]]
        f = fragment_from_record({"text": "x", "polygon": poly})
        assert f.rect == Rect(9, 5, 52, 20)

    def test_missing_box(self):
        f = fragment_from_record({"text": "floating"})
        assert f.text == "floating"
        assert f.rect is None

    def test_short_box_treated_as_missing(self, caplog):
        with caplog.at_level(logging.WARNING, logger="docscan.ingest"):
            f = fragment_from_record({"text": "x", "bbox": [1, 2]})
        assert f.rect is None
        assert "Unreadable box" in caplog.text

    def test_inverted_box_rejected_by_default(self, caplog):
        with caplog.at_level(logging.WARNING, logger="docscan.ingest"):
            f = fragment_from_record({"text": "bad", "bbox": [30, 0, 10, 10]})
        assert f is not None
        assert f.rect is None
        assert "Rejecting" in caplog.text

    def test_inverted_box_normalized(self):
        cfg = DocScanConfig(malformed_rect_policy="normalize")
        f = fragment_from_record({"text": "bad", "bbox": [30, 20, 10, 10]}, cfg)
        assert f.rect == Rect(10, 10, 30, 20)

    def test_confidence_kept(self):
        f = fragment_from_record({"text": "x", "bbox": [0, 0, 1, 1], "score": 0.8})
        assert f.confidence == 0.8

    def test_low_confidence_dropped(self):
        cfg = DocScanConfig(min_confidence=0.5)
        rec = {"text": "x", "bbox": [0, 0, 1, 1], "confidence": 0.2}
        assert fragment_from_record(rec, cfg) is None

    def test_unreadable_confidence_ignored(self, caplog):
        rec = {"text": "a", "bbox": [0, 0, 1, 1], "confidence": "high"}
        with caplog.at_level(logging.WARNING, logger="docscan.ingest"):
            f = fragment_from_record(rec)
        assert f.text == "a"
        assert f.confidence is None
        assert f.rect == Rect(0, 0, 1, 1)
        assert "unreadable confidence" in caplog.text

    def test_non_mapping_skipped(self):
        assert fragment_from_record(["not", "a", "dict"]) is None


class TestFragmentsFromRecords:
    def test_order_preserved(self):
        records = [
            {"text": "b", "bbox": [50, 0, 60, 10]},
            {"text": "a", "bbox": [0, 0, 10, 10]},
        ]
        assert [f.text for f in fragments_from_records(records)] == ["b", "a"]

    def test_bad_confidence_does_not_lose_page(self):
        records = [
            {"text": "a", "bbox": [0, 0, 1, 1], "confidence": "high"},
            {"text": "b"},
        ]
        assert [f.text for f in fragments_from_records(records)] == ["a", "b"]

    def test_dropped_records_removed(self):
        records = [{"text": "ok"}, "junk", {"text": "also"}]
        assert [f.text for f in fragments_from_records(records)] == ["ok", "also"]


class TestLoadOcrJson:
    def test_bare_list(self, tmp_path):
        f = tmp_path / "ocr.json"
        f.write_text(json.dumps([{"text": "Name:", "bbox": [0, 0, 10, 10]}]))
        page = load_ocr_json(f)
        assert [fr.text for fr in page.fragments] == ["Name:"]
        assert page.page is None
        assert page.source == f

    def test_mapping_with_dimensions(self, tmp_path):
        f = tmp_path / "ocr.json"
        payload = {
            "width": 800,
            "height": 600,
            "fragments": [{"text": "x", "bbox": [0, 0, 1, 1]}],
        }
        f.write_text(json.dumps(payload))
        page = load_ocr_json(f)
        assert (page.page.width, page.page.height) == (800, 600)

    def test_mapping_reads_image_size(self, tmp_path):
        Image.new("RGB", (64, 48), "white").save(tmp_path / "page.png")
        f = tmp_path / "ocr.json"
        f.write_text(json.dumps({"image": "page.png", "fragments": []}))
        page = load_ocr_json(f)
        assert (page.page.width, page.page.height) == (64, 48)
        assert page.page.image_path == tmp_path / "page.png"

    def test_missing_file(self, tmp_path):
        with pytest.raises(IngestError, match="not found"):
            load_ocr_json(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        f = tmp_path / "ocr.json"
        f.write_text("{not json")
        with pytest.raises(IngestError, match="Cannot read"):
            load_ocr_json(f)

    def test_invalid_utf8(self, tmp_path):
        f = tmp_path / "ocr.json"
        f.write_bytes(b'[{"text": "\xff\xfe"}]')
        with pytest.raises(IngestError, match="Cannot read"):
            load_ocr_json(f)

    def test_negative_page_size(self, tmp_path):
        f = tmp_path / "ocr.json"
        f.write_text(json.dumps({"width": -5, "height": 100, "fragments": []}))
        with pytest.raises(IngestError, match="Negative page size"):
            load_ocr_json(f)

    def test_non_numeric_page_size(self, tmp_path):
        f = tmp_path / "ocr.json"
        f.write_text(json.dumps({"width": "wide", "height": 100, "fragments": []}))
        with pytest.raises(IngestError, match="Invalid page size"):
            load_ocr_json(f)

    def test_zero_page_size_accepted(self, tmp_path):
        f = tmp_path / "ocr.json"
        f.write_text(json.dumps({"width": 0, "height": 0, "fragments": []}))
        page = load_ocr_json(f).page
        assert page.bounds() == Rect(0, 0, 0, 0)

    def test_wrong_shape(self, tmp_path):
        f = tmp_path / "ocr.json"
        f.write_text(json.dumps({"pages": []}))
        with pytest.raises(IngestError, match="fragments"):
            load_ocr_json(f)


class TestReadPageInfo:
    def test_reads_size(self, tmp_path):
        path = tmp_path / "scan.jpg"
        Image.new("RGB", (120, 90)).save(path)
        info = read_page_info(path)
        assert (info.width, info.height) == (120, 90)

    def test_missing_image(self, tmp_path):
        with pytest.raises(IngestError, match="not found"):
            read_page_info(tmp_path / "none.png")

    def test_not_an_image(self, tmp_path):
        path = tmp_path / "fake.png"
        path.write_text("plain text")
        with pytest.raises(IngestError, match="Cannot read image"):
            read_page_info(path)
