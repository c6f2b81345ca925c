"""Spatial grouping of OCR fragments into merged text blocks."""

from .block_merge import merge_nearby_blocks

__all__ = ["merge_nearby_blocks"]
