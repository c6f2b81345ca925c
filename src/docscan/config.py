from __future__ import annotations

import tomllib
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict

import yaml


class ConfigValidationError(ValueError):
    """Raised when a DocScanConfig field has an invalid value."""


class ConfigLoadError(Exception):
    """Raised when a config file cannot be read or parsed."""


def _check_range(name: str, value: float, lo: float, hi: float) -> None:
    if not (lo <= value <= hi):
        raise ConfigValidationError(f"{name}={value} out of range [{lo}, {hi}]")


def _check_positive(name: str, value: float) -> None:
    if value <= 0:
        raise ConfigValidationError(f"{name}={value} must be > 0")


def _check_non_negative(name: str, value: float) -> None:
    if value < 0:
        raise ConfigValidationError(f"{name}={value} must be >= 0")


MALFORMED_RECT_POLICIES = ("reject", "normalize")


@dataclass
class DocScanConfig:
    """Tunables for block merging, key/value extraction and the viewport."""

    # ── Block merge ────────────────────────────────────────────────────
    # Distance (px) within which two rectangles count as nearby.
    merge_threshold: float = 50.0
    # Separator placed between fragment texts inside a merged block.
    merge_joiner: str = "\n"

    # ── Key/value extraction ───────────────────────────────────────────
    key_separator: str = ":"

    # ── Viewport ───────────────────────────────────────────────────────
    # Scale clamp for pinch gestures; equal bounds disable zoom.
    min_scale: float = 1.0
    max_scale: float = 1.0

    # ── Ingest ─────────────────────────────────────────────────────────
    # "reject" keeps the fragment with no rect, "normalize" swaps coordinates.
    malformed_rect_policy: str = "reject"
    # Records below this OCR confidence are dropped at ingest.
    min_confidence: float = 0.0

    # ── Stage gates ────────────────────────────────────────────────────
    enable_block_merge: bool = True
    enable_key_values: bool = True

    def __post_init__(self) -> None:
        """Validate field ranges to catch misconfiguration early."""
        _check_non_negative("merge_threshold", self.merge_threshold)
        _check_range("min_confidence", self.min_confidence, 0.0, 1.0)

        for name in ("min_scale", "max_scale"):
            _check_positive(name, getattr(self, name))
        if self.min_scale > self.max_scale:
            raise ConfigValidationError(
                f"min_scale ({self.min_scale}) must be <= "
                f"max_scale ({self.max_scale})"
            )

        if len(self.key_separator) != 1 or self.key_separator.isspace():
            raise ConfigValidationError(
                f"key_separator={self.key_separator!r} must be a single "
                f"non-whitespace character"
            )

        if self.malformed_rect_policy not in MALFORMED_RECT_POLICIES:
            raise ConfigValidationError(
                f"malformed_rect_policy={self.malformed_rect_policy!r} must be "
                f"'reject' or 'normalize'"
            )

    # ── Serialization / loading ────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        """Return public fields as a plain dict."""
        return {k: v for k, v in asdict(self).items() if not k.startswith("_")}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DocScanConfig":
        """Build a config from *data*, ignoring keys that are not fields."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def from_yaml(cls, path: Path | str) -> "DocScanConfig":
        """Load a config from a YAML mapping."""
        path = Path(path)
        try:
            with path.open("r", encoding="utf-8") as fh:
                data = yaml.safe_load(fh)
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigLoadError(f"Cannot read config {path}: {exc}") from exc
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigLoadError(f"Config {path} must contain a mapping")
        return cls.from_dict(data)

    @classmethod
    def from_toml(cls, path: Path | str) -> "DocScanConfig":
        """Load a config from TOML, either top level or a ``[docscan]`` table."""
        path = Path(path)
        try:
            with path.open("rb") as fh:
                data = tomllib.load(fh)
        except (OSError, tomllib.TOMLDecodeError) as exc:
            raise ConfigLoadError(f"Cannot read config {path}: {exc}") from exc
        if isinstance(data.get("docscan"), dict):
            data = data["docscan"]
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, path: Path | str) -> "DocScanConfig":
        """Dispatch on file extension (``.yaml``/``.yml``/``.toml``)."""
        path = Path(path)
        suffix = path.suffix.lower()
        if suffix in (".yaml", ".yml"):
            return cls.from_yaml(path)
        if suffix == ".toml":
            return cls.from_toml(path)
        raise ConfigLoadError(f"Unsupported config file type: {path.suffix!r}")
