"""
Engine configuration.

Every tunable lives in one frozen ``OrgraphConfig``. Values come from an
``orgraph.toml`` (read with ``tomllib``) or an ``orgraph.yml`` file; any
section or key that is absent keeps its default. Keys are data, behavior
is code.

Example ``orgraph.toml``::

    [history]
    limit = 50

    [span]
    healthy = 6
    high = 9

    [layout.cleanup.spacious]
    node_separation = 320
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

CONFIG_FILENAMES = ("orgraph.toml", "orgraph.yml", "orgraph.yaml")


@dataclass(frozen=True)
class LayoutSpacing:
    node_separation: float
    rank_separation: float
    margin_x: float
    margin_y: float


@dataclass(frozen=True)
class LayoutConfig:
    node_width: float = 260
    node_height: float = 150
    default: LayoutSpacing = LayoutSpacing(node_separation=240, rank_separation=300, margin_x=150, margin_y=150)
    compact: LayoutSpacing = LayoutSpacing(node_separation=180, rank_separation=220, margin_x=120, margin_y=120)
    spacious: LayoutSpacing = LayoutSpacing(node_separation=280, rank_separation=350, margin_x=180, margin_y=180)
    matrix_column_width: float = 800
    duplicate_offset: float = 60


@dataclass(frozen=True)
class SpanConfig:
    healthy: int = 8
    high: int = 10


@dataclass(frozen=True)
class DuplicateConfig:
    match_threshold: float = 0.6
    strong_match: float = 0.9
    review_match: float = 0.7
    low_confidence: float = 0.6


@dataclass(frozen=True)
class AnalysisConfig:
    max_path_depth: int = 4
    max_paths: int = 5
    sphere_depth: int = 2
    suggestion_limit: int = 5


@dataclass(frozen=True)
class OrgraphConfig:
    history_limit: int = 100
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    span: SpanConfig = field(default_factory=SpanConfig)
    duplicates: DuplicateConfig = field(default_factory=DuplicateConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)


DEFAULT_CONFIG = OrgraphConfig()


def _coerce_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _merge(instance: Any, raw: dict[str, Any], section: str) -> Any:
    """Return ``instance`` with matching keys from ``raw`` applied (unknown keys ignored)."""
    updates: dict[str, Any] = {}
    for f in fields(instance):
        if f.name not in raw:
            continue
        current = getattr(instance, f.name)
        value = raw[f.name]
        key = f"{section}.{f.name}" if section else f.name
        if hasattr(current, "__dataclass_fields__"):
            if not isinstance(value, dict):
                raise ValueError(f"{key} must be a table")
            updates[f.name] = _merge(current, value, key)
        elif isinstance(current, bool) or not isinstance(value, (int, float)) or isinstance(value, bool):
            raise ValueError(f"{key} must be a number")
        elif f.type == "int" and not isinstance(value, int):
            raise ValueError(f"{key} must be an integer")
        else:
            updates[f.name] = value
    return replace(instance, **updates) if updates else instance


def config_from_dict(data: dict[str, Any]) -> OrgraphConfig:
    config = DEFAULT_CONFIG

    history = _coerce_dict(data.get("history"))
    if "limit" in history:
        limit = history["limit"]
        if not isinstance(limit, int) or isinstance(limit, bool) or limit <= 0:
            raise ValueError("history.limit must be a positive integer")
        config = replace(config, history_limit=limit)

    layout_raw = dict(_coerce_dict(data.get("layout")))
    cleanup = _coerce_dict(layout_raw.pop("cleanup", None))
    layout_raw = {**layout_raw, **cleanup}
    config = replace(
        config,
        layout=_merge(config.layout, layout_raw, "layout"),
        span=_merge(config.span, _coerce_dict(data.get("span")), "span"),
        duplicates=_merge(config.duplicates, _coerce_dict(data.get("duplicates")), "duplicates"),
        analysis=_merge(config.analysis, _coerce_dict(data.get("analysis")), "analysis"),
    )

    if config.span.healthy > config.span.high:
        raise ValueError("span.healthy must not exceed span.high")
    return config


def load_config(path: Path) -> OrgraphConfig:
    """Load configuration from a TOML or YAML file."""
    text = path.read_text(encoding="utf-8")
    if path.suffix == ".toml":
        import tomllib

        data = tomllib.loads(text)
    else:
        import yaml

        data = yaml.safe_load(text)
    if data is None:
        return DEFAULT_CONFIG
    if not isinstance(data, dict):
        raise ValueError(f"Invalid configuration at {path}")
    return config_from_dict(data)


def find_config(start: Path) -> Path | None:
    """Find a config file by walking up from ``start``."""
    cur = start.resolve()
    for p in (cur, *cur.parents):
        for name in CONFIG_FILENAMES:
            candidate = p / name
            if candidate.is_file():
                return candidate
    return None
