"""
Run merging and key/value extraction over one page of OCR output.
Usage:
    python scripts/run_page.py page_ocr.json --config docscan.toml --out page.json --tap 110 60
"""

import argparse
import json
import logging
from pathlib import Path

from docscan import DocScanConfig, ViewportState, run_page, select_block
from docscan.ingest import load_ocr_json
from docscan.page_data import serialize_page


def build_config(args: argparse.Namespace) -> DocScanConfig:
    cfg = DocScanConfig.from_file(args.config) if args.config else DocScanConfig()
    if args.threshold is not None:
        overrides = cfg.to_dict()
        overrides["merge_threshold"] = args.threshold
        cfg = DocScanConfig.from_dict(overrides)
    return cfg


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Merge OCR fragments into blocks and extract key/value pairs"
    )
    parser.add_argument("ocr_json", type=Path, help="OCR result JSON file")
    parser.add_argument(
        "--config", type=Path, default=None, help="YAML or TOML config file"
    )
    parser.add_argument(
        "--threshold", type=float, default=None, help="Merge distance in pixels"
    )
    parser.add_argument(
        "--out", type=Path, default=None, help="Write page JSON to this path"
    )
    parser.add_argument(
        "--tap",
        nargs=2,
        type=float,
        metavar=("X", "Y"),
        help="Hit-test a view-space tap against the merged blocks",
    )
    parser.add_argument(
        "--offset",
        nargs=2,
        type=float,
        default=(0.0, 0.0),
        metavar=("OX", "OY"),
        help="Viewport translation used for --tap",
    )
    parser.add_argument("--scale", type=float, default=1.0, help="Viewport scale")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    cfg = build_config(args)
    ocr_page = load_ocr_json(args.ocr_json, cfg)
    result = run_page(ocr_page.fragments, cfg, page=ocr_page.page)

    for i, block in enumerate(result.blocks):
        x0, y0, x1, y1 = block.rect.bbox()
        first = block.text.splitlines()[0] if block.text else ""
        print(f"B{i}: ({x0:.0f}, {y0:.0f}, {x1:.0f}, {y1:.0f}) x{block.fragment_count} {first!r}")
    for key, value in result.key_values.items():
        print(f"{key} {value}")

    if args.tap:
        state = ViewportState(
            scale=args.scale, offset_x=args.offset[0], offset_y=args.offset[1]
        )
        hit = select_block(result.blocks, state, args.tap[0], args.tap[1], ocr_page.page)
        if hit is None:
            print("Tap: no block")
        else:
            print(f"Tap: B{result.blocks.index(hit)} {hit.text!r}")

    if args.out:
        payload = serialize_page(result)
        payload["summary"] = result.to_summary_dict()
        args.out.write_text(json.dumps(payload, indent=2))
        print(f"Page JSON: {args.out}")


if __name__ == "__main__":
    main()
