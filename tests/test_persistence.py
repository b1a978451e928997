import json
from pathlib import Path

from orgraph.engine import GraphStore, load_state, save_state, state_from_dict, state_to_dict
from orgraph.engine.persistence import STATE_VERSION
from orgraph.models import GraphDocument


def test_save_then_load_keeps_document_scenarios_and_selection(
    chain_store: GraphStore, state_path: Path
) -> None:
    scenario_id = chain_store.create_scenario("Baseline", "as of today")
    chain_store.select_node("b")
    pin_id = chain_store.create_pin_view("Sales view")
    save_state(chain_store, state_path)

    restored, warnings = load_state(state_path)

    assert warnings == []
    assert restored.document.to_dict() == chain_store.document.to_dict()
    assert restored.selection.node_ids == ["b"]
    assert restored.active_scenario_id == scenario_id
    assert restored.scenarios[scenario_id].description == "as of today"
    assert restored.active_pin_view_id == pin_id
    assert restored.pin_views[pin_id].name == "Sales view"


def test_history_is_not_persisted(chain_store: GraphStore, state_path: Path) -> None:
    chain_store.remove_node("c")
    assert chain_store.history.can_undo()
    save_state(chain_store, state_path)

    restored, _ = load_state(state_path)

    assert not restored.undo()
    assert restored.document.node_ids() == {"a", "b"}


def test_state_file_shape(chain_store: GraphStore) -> None:
    data = state_to_dict(chain_store)

    assert data["version"] == STATE_VERSION
    assert set(data) == {
        "version",
        "document",
        "selection",
        "scenarios",
        "activeScenarioId",
        "comparisonScenarioId",
        "pinViews",
        "activePinViewId",
    }


def test_missing_file_gives_fresh_store(tmp_path: Path) -> None:
    store, warnings = load_state(tmp_path / "absent.json")

    assert warnings == []
    assert store.document.nodes == []


def test_invalid_json_falls_back_with_warning(state_path: Path) -> None:
    state_path.write_text("{not json", encoding="utf-8")

    store, warnings = load_state(state_path)

    assert store.document.nodes == []
    assert len(warnings) == 1
    assert warnings[0].startswith("State file is not valid JSON")


def test_missing_document_key_warns() -> None:
    store, warnings = state_from_dict({"version": STATE_VERSION})

    assert store.document.nodes == []
    assert warnings[0].startswith("No persisted document found")


def test_invalid_document_falls_back_to_empty(chain_store: GraphStore) -> None:
    data = state_to_dict(chain_store)
    data["document"]["schema_version"] = "0.0"

    store, warnings = state_from_dict(data)

    assert store.document.nodes == []
    assert warnings[0].startswith("Persisted document is invalid (1 issue(s))")


def test_selection_is_filtered_to_existing_ids(chain_store: GraphStore) -> None:
    data = state_to_dict(chain_store)
    data["selection"] = {"nodeIds": ["a", "ghost"], "edgeIds": ["ab", "nope"]}

    store, warnings = state_from_dict(data)

    assert warnings == []
    assert store.selection.node_ids == ["a"]
    assert store.selection.edge_ids == ["ab"]


def test_bad_scenario_is_dropped_and_active_id_cleared(chain_store: GraphStore) -> None:
    good = chain_store.create_scenario("Good")
    data = state_to_dict(chain_store)
    data["scenarios"]["broken"] = {"id": "broken", "name": "Broken", "document": {"nodes": []}}
    data["activeScenarioId"] = "broken"
    data["comparisonScenarioId"] = good

    store, warnings = state_from_dict(data)

    assert set(store.scenarios) == {good}
    assert store.active_scenario_id is None
    assert store.comparison_scenario_id == good
    assert len(warnings) == 1
    assert warnings[0].startswith("Dropped scenario broken:")


def test_malformed_pin_view_is_dropped(chain_store: GraphStore) -> None:
    data = state_to_dict(chain_store)
    data["pinViews"] = {"p1": {"name": "no lens"}}
    data["activePinViewId"] = "p1"

    store, warnings = state_from_dict(data)

    assert store.pin_views == {}
    assert store.active_pin_view_id is None
    assert warnings == ["Dropped pin view p1: malformed entry"]


def test_saved_file_is_readable_json(chain_store: GraphStore, tmp_path: Path) -> None:
    path = tmp_path / "nested" / "state.json"
    save_state(chain_store, path)

    data = json.loads(path.read_text(encoding="utf-8"))
    assert GraphDocument.from_dict(data["document"]).node_ids() == {"a", "b", "c"}


def test_invalid_document_keeps_scenarios_and_pin_views(chain_store: GraphStore) -> None:
    scenario_id = chain_store.create_scenario("Baseline")
    pin_id = chain_store.create_pin_view("Sales view")
    chain_store.select_node("b")
    data = state_to_dict(chain_store)
    data["document"]["schema_version"] = "0.0"

    store, warnings = state_from_dict(data)

    assert store.document.nodes == []
    assert store.selection.node_ids == []
    assert set(store.scenarios) == {scenario_id}
    assert store.active_scenario_id == scenario_id
    assert store.pin_views[pin_id].name == "Sales view"
    assert len(warnings) == 1


def test_non_utf8_file_falls_back_with_warning(state_path: Path) -> None:
    state_path.write_bytes(b"\xff\xfe\x00bad")

    store, warnings = load_state(state_path)

    assert store.document.nodes == []
    assert len(warnings) == 1
    assert warnings[0].startswith("State file is not UTF-8 text")
