"""Key/value reconstruction from OCR fragment text.

Labels on scanned forms are usually colon-terminated (``"Name:"``).  The
value is either on the same fragment (``"Name: John Doe"``) or on the
next fragment in reading order (``"Name:"`` followed by ``"John Doe"``).

Rules, applied to each trimmed fragment in order:

1. If a key is pending from the previous fragment, this fragment is its
   value, whatever it contains.
2. Otherwise a fragment ending with the separator becomes the pending key.
3. Otherwise the first separator splits key (separator included) from
   value.  An empty value defers the key to the next fragment, or drops
   it when this is the last fragment.
4. Fragments with no separator and no pending key are ignored.

Rule 1 wins over rule 2, so ``["Total:", "Name:", "Jane"]`` yields
``{"Total:": "Name:"}`` and ``"Jane"`` is ignored.  Repeated keys keep
the last value.  A key still pending at the end of input is discarded.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Sequence, Union

from ..config import DocScanConfig
from ..models import KeyValueEntry, TextFragment

logger = logging.getLogger("docscan.key_values")


def _fragment_text(fragment: Union[TextFragment, str]) -> str:
    if isinstance(fragment, TextFragment):
        return fragment.text
    return fragment


def extract_key_values(
    fragments: Sequence[Union[TextFragment, str]],
    cfg: DocScanConfig | None = None,
) -> Dict[str, str]:
    """Build a ``key -> value`` map from fragments in reading order."""
    cfg = cfg or DocScanConfig()
    sep = cfg.key_separator

    result: Dict[str, str] = {}
    pending_key: Optional[str] = None
    last_idx = len(fragments) - 1

    for idx, fragment in enumerate(fragments):
        text = _fragment_text(fragment).strip()

        if pending_key is not None:
            result[pending_key] = text
            pending_key = None
            continue

        if text.endswith(sep):
            pending_key = text
            continue

        pos = text.find(sep)
        if pos < 0:
            continue

        key = text[: pos + 1].strip()
        value = text[pos + 1 :].strip()
        if value:
            result[key] = value
        elif idx != last_idx:
            pending_key = key

    if pending_key is not None:
        logger.debug("extract_key_values: dropped trailing key %r", pending_key)

    return result


def key_value_entries(mapping: Mapping[str, str]) -> List[KeyValueEntry]:
    """Convert a key/value map into entries, preserving insertion order."""
    return [KeyValueEntry(key=k, value=v) for k, v in mapping.items()]
