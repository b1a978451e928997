"""
Saving and restoring a store's persisted state.

The persisted unit is the document, the selection, the scenarios with the
active scenario id, and the pin views. History and clipboard are session
only. Loading re-validates everything: the selection is filtered to ids
that still exist, scenarios whose documents fail validation are dropped,
and an unusable document falls back to an empty one.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ..config import DEFAULT_CONFIG, OrgraphConfig
from ..document.validation import parse_document
from ..errors import ValidationError
from ..models import PinView, Scenario, SelectionState
from .store import GraphStore

STATE_VERSION = 3


def state_to_dict(store: GraphStore) -> dict[str, Any]:
    return {
        "version": STATE_VERSION,
        "document": store.document.to_dict(),
        "selection": store.selection.to_dict(),
        "scenarios": {sid: s.to_dict() for sid, s in store.scenarios.items()},
        "activeScenarioId": store.active_scenario_id,
        "comparisonScenarioId": store.comparison_scenario_id,
        "pinViews": {pid: p.to_dict() for pid, p in store.pin_views.items()},
        "activePinViewId": store.active_pin_view_id,
    }


def save_state(store: GraphStore, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(state_to_dict(store), indent=2) + "\n", encoding="utf-8")


def _restore_scenario(sid: str, raw: Any) -> Scenario:
    if not isinstance(raw, dict) or not isinstance(raw.get("name"), str):
        raise ValueError("scenario entry is not an object with a name")
    tags = raw.get("tags")
    return Scenario(
        id=sid,
        name=raw["name"],
        created_at=raw.get("createdAt", ""),
        document=parse_document(raw.get("document")),
        description=raw.get("description"),
        base_scenario_id=raw.get("baseScenarioId"),
        notes=raw.get("notes"),
        tags=[t for t in tags if isinstance(t, str)] if isinstance(tags, list) else [],
    )


def state_from_dict(data: Any, config: OrgraphConfig = DEFAULT_CONFIG) -> tuple[GraphStore, list[str]]:
    """Migrate a persisted value into a store. Never raises; problems come back as warnings."""
    store = GraphStore(config=config)
    warnings: list[str] = []
    if not isinstance(data, dict) or "document" not in data:
        warnings.append("No persisted document found; starting from an empty organization")
        return store, warnings

    try:
        store.document = parse_document(data["document"])
    except ValidationError as exc:
        # Scenarios and pin views are restored independently of the live document
        warnings.append(f"Persisted document is invalid ({len(exc.issues)} issue(s)); starting from an empty organization")

    node_ids = store.document.node_ids()
    edge_ids = {e.id for e in store.document.edges}
    raw_selection = data.get("selection")
    selection = SelectionState.from_dict(raw_selection) if isinstance(raw_selection, dict) else SelectionState()
    store.selection = SelectionState(
        node_ids=[i for i in selection.node_ids if i in node_ids],
        edge_ids=[i for i in selection.edge_ids if i in edge_ids],
    )

    scenarios = data.get("scenarios")
    for sid, raw in (scenarios.items() if isinstance(scenarios, dict) else []):
        try:
            store.scenarios[sid] = _restore_scenario(sid, raw)
        except (ValidationError, ValueError) as exc:
            warnings.append(f"Dropped scenario {sid}: {str(exc).splitlines()[0]}")

    active = data.get("activeScenarioId")
    store.active_scenario_id = active if active in store.scenarios else None
    comparison = data.get("comparisonScenarioId")
    store.comparison_scenario_id = comparison if comparison in store.scenarios else None

    pin_views = data.get("pinViews")
    for pid, raw in (pin_views.items() if isinstance(pin_views, dict) else []):
        try:
            store.pin_views[pid] = PinView.from_dict(raw)
        except (KeyError, TypeError, AttributeError):
            warnings.append(f"Dropped pin view {pid}: malformed entry")
    active_pin = data.get("activePinViewId")
    store.active_pin_view_id = active_pin if active_pin in store.pin_views else None

    return store, warnings


def load_state(path: Path, config: OrgraphConfig = DEFAULT_CONFIG) -> tuple[GraphStore, list[str]]:
    """Restore a store from ``path``; a missing file gives a fresh store."""
    if not path.exists():
        return GraphStore(config=config), []
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        return GraphStore(config=config), [f"State file is not valid JSON ({exc.msg}); starting from an empty organization"]
    except UnicodeDecodeError as exc:
        return GraphStore(config=config), [f"State file is not UTF-8 text ({exc.reason}); starting from an empty organization"]
    return state_from_dict(data, config)
