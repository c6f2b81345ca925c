"""Structural analysis of OCR fragment text.

Public API
----------
- :func:`extract_key_values` — recover ``label: value`` pairs
- :func:`key_value_entries` — map → ordered :class:`KeyValueEntry` list
"""

from .key_values import extract_key_values, key_value_entries

__all__ = ["extract_key_values", "key_value_entries"]
