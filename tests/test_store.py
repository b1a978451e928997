import pytest

from builders import document, edge, manager_chain, person
from orgraph.ai import MergeDecision, ParsedPerson, ParsedRelationship
from orgraph.config import OrgraphConfig
from orgraph.document import get_template
from orgraph.engine import AddPersonPayload, GraphStore
from orgraph.errors import CycleRiskError, ScenarioNotFoundError, ValidationError
from orgraph.models import XY, GroupNode


def _dump(store: GraphStore) -> dict:
    return store.document.to_dict()


# -----------------------------------------------------------------------------
# History
# -----------------------------------------------------------------------------


def test_undo_then_redo_restores_each_state(chain_store: GraphStore) -> None:
    before = _dump(chain_store)
    chain_store.add_person(AddPersonPayload(name="Dee", title="Analyst"))
    after = _dump(chain_store)

    assert chain_store.undo() is True
    assert _dump(chain_store) == before
    assert chain_store.redo() is True
    assert _dump(chain_store) == after


def _paste(store: GraphStore) -> None:
    store.copy_nodes(["b", "c"], edge_ids=["ab"])
    store.paste_clipboard(XY(40, 40))


@pytest.mark.parametrize(
    "mutate",
    [
        lambda s: s.remove_node("b"),
        lambda s: s.duplicate_nodes(["b", "c"]),
        lambda s: s.add_relationship("a", "c", "dotted"),
        lambda s: s.update_relationship("bc", type="sponsor", label="exec sponsor"),
        lambda s: s.remove_relationship("ab"),
        _paste,
        lambda s: s.add_group("Sales", ["b", "c"]),
        lambda s: s.toggle_node_lock("c"),
    ],
    ids=[
        "remove_node",
        "duplicate_nodes",
        "add_relationship",
        "update_relationship",
        "remove_relationship",
        "paste_clipboard",
        "add_group",
        "toggle_node_lock",
    ],
)
def test_every_mutation_undoes_and_redoes(chain_store: GraphStore, mutate) -> None:
    before = _dump(chain_store)
    mutate(chain_store)
    after = _dump(chain_store)
    assert after != before

    assert chain_store.undo() is True
    assert _dump(chain_store) == before
    assert chain_store.redo() is True
    assert _dump(chain_store) == after


def test_undo_and_redo_on_empty_history_are_noops(chain_store: GraphStore) -> None:
    before = _dump(chain_store)
    assert chain_store.undo() is False
    assert chain_store.redo() is False
    assert _dump(chain_store) == before


def test_new_mutation_clears_redo(chain_store: GraphStore) -> None:
    chain_store.add_person(AddPersonPayload(name="Dee"))
    chain_store.undo()
    chain_store.add_person(AddPersonPayload(name="Eve"))
    assert chain_store.history.can_redo() is False


def test_history_is_bounded() -> None:
    store = GraphStore(config=OrgraphConfig(history_limit=3))
    for i in range(5):
        store.add_person(AddPersonPayload(name=f"P{i}"))

    undone = 0
    while store.undo():
        undone += 1
    assert undone == 3
    assert [n.name for n in store.document.nodes] == ["P0", "P1"]


def test_unknown_ids_record_no_history(chain_store: GraphStore) -> None:
    chain_store.remove_node("nobody")
    chain_store.remove_relationship("nothing")
    chain_store.update_person("nobody", {"title": "x"})
    chain_store.toggle_node_lock("nobody")
    assert len(chain_store.history) == 0


def test_unrecorded_update_with_manual_checkpoint(chain_store: GraphStore) -> None:
    chain_store.push_history()
    chain_store.update_person("a", {"title": "Chair"}, record_history=False)
    chain_store.update_person("a", {"location": "Oslo"}, record_history=False)
    assert len(chain_store.history) == 1

    chain_store.undo()
    assert chain_store.document.person_by_id("a").attributes.title == "CEO"
    assert chain_store.document.person_by_id("a").attributes.location is None


# -----------------------------------------------------------------------------
# People, groups and relationships
# -----------------------------------------------------------------------------


def test_add_person_selects_and_positions(chain_store: GraphStore) -> None:
    node_id = chain_store.add_person(AddPersonPayload(name="Dee", brands=["Aurora"], position=XY(5, 6)))
    node = chain_store.document.person_by_id(node_id)

    assert node.attributes.brands == ["Aurora"]
    assert chain_store.selection.node_ids == [node_id]
    assert chain_store.document.active_layout.positions[node_id] == XY(5, 6)


def test_update_person_rejects_unknown_fields(chain_store: GraphStore) -> None:
    with pytest.raises(ValueError, match="Unknown person field"):
        chain_store.update_person("a", {"salary": 1})
    assert len(chain_store.history) == 0


def test_update_person_accepts_nested_attributes(chain_store: GraphStore) -> None:
    chain_store.update_person("b", {"name": "Benjamin", "attributes": {"brands": ["Zenith"]}})
    node = chain_store.document.person_by_id("b")
    assert node.name == "Benjamin"
    assert node.attributes.brands == ["Zenith"]


@pytest.mark.parametrize("record_history", [True, False])
def test_bad_nested_key_leaves_person_untouched(chain_store: GraphStore, record_history: bool) -> None:
    before = _dump(chain_store)
    with pytest.raises(ValueError, match="Unknown person field: bogus"):
        chain_store.update_person("a", {"title": "Chair", "attributes": {"bogus": 1}}, record_history=record_history)

    assert chain_store.document.person_by_id("a").attributes.title == "CEO"
    assert _dump(chain_store) == before
    assert len(chain_store.history) == 0


def test_nested_attributes_must_be_a_mapping(chain_store: GraphStore) -> None:
    with pytest.raises(ValueError, match="must be a mapping"):
        chain_store.update_person("a", {"name": "Ada L.", "attributes": ["title"]}, record_history=False)
    assert chain_store.document.person_by_id("a").name == "Ada"


def test_payload_from_role_template() -> None:
    vp = get_template("vp")

    payload = AddPersonPayload.from_template(vp)
    assert (payload.name, payload.title, payload.tier) == ("New VP", "Vice President", "vp")

    payload = AddPersonPayload.from_template(vp, name="Vera", title=None, brands=["Aurora"])
    assert (payload.name, payload.title, payload.brands) == ("Vera", "Vice President", ["Aurora"])


def test_closing_a_reporting_loop_is_refused(chain_store: GraphStore) -> None:
    before = _dump(chain_store)
    assert chain_store.would_create_cycle("c", "a") is True

    with pytest.raises(CycleRiskError):
        chain_store.add_relationship("c", "a", "manager")

    assert _dump(chain_store) == before
    assert len(chain_store.history) == 0


def test_non_manager_edges_may_point_upward(chain_store: GraphStore) -> None:
    edge_id = chain_store.add_relationship("c", "a", "dotted")
    assert chain_store.document.edge_by_id(edge_id).type == "dotted"
    assert chain_store.selection.edge_ids == [edge_id]


def test_retyping_to_manager_is_cycle_checked(chain_store: GraphStore) -> None:
    edge_id = chain_store.add_relationship("c", "a", "dotted")
    with pytest.raises(CycleRiskError):
        chain_store.update_relationship(edge_id, type="manager")
    assert chain_store.document.edge_by_id(edge_id).type == "dotted"


def test_self_loop_and_unknown_endpoint_return_none(chain_store: GraphStore) -> None:
    assert chain_store.add_relationship("a", "a", "sponsor") is None
    assert chain_store.add_relationship("a", "ghost", "manager") is None
    assert len(chain_store.history) == 0


def test_unknown_relationship_type(chain_store: GraphStore) -> None:
    with pytest.raises(ValueError):
        chain_store.add_relationship("a", "c", "rival")


def test_remove_node_cascades(chain_store: GraphStore) -> None:
    group_id = chain_store.add_group("Sales", ["b", "c"])
    chain_store.update_node_position("b", XY(1, 1))
    chain_store.set_lens_filters("hierarchy", focus_ids=["b"], hidden_ids=["b", "c"])
    chain_store.set_selection(node_ids=["b", "c"], edge_ids=["ab"])

    chain_store.remove_node("b")
    doc = chain_store.document

    assert doc.node_by_id("b") is None
    assert [e.id for e in doc.edges] == []
    group = doc.node_by_id(group_id)
    assert isinstance(group, GroupNode)
    assert group.member_ids == ["c"]
    assert "b" not in doc.active_layout.positions
    filters = doc.lens_state["hierarchy"].filters
    assert filters.focus_ids == []
    assert filters.hidden_ids == ["c"]
    assert chain_store.selection.node_ids == ["c"]
    assert chain_store.selection.edge_ids == []


def test_add_group_ignores_unknown_members(chain_store: GraphStore) -> None:
    group_id = chain_store.add_group("Team", ["a", "zzz"], color="#fff")
    assert chain_store.document.node_by_id(group_id).member_ids == ["a"]


def test_duplicate_copies_internal_edges_only(chain_store: GraphStore) -> None:
    chain_store.update_node_position("b", XY(100, 100))
    new_ids = chain_store.duplicate_nodes(["b", "c"])
    doc = chain_store.document

    assert len(new_ids) == 2
    copies = [doc.node_by_id(i) for i in new_ids]
    assert [n.name for n in copies] == ["Ben (copy)", "Cy (copy)"]
    copied_edges = [e for e in doc.edges if e.source in new_ids or e.target in new_ids]
    assert [(e.source, e.target) for e in copied_edges] == [(new_ids[0], new_ids[1])]
    offset = chain_store.config.layout.duplicate_offset
    assert doc.active_layout.positions[new_ids[0]] == XY(100 + offset, 100 + offset)


def test_paste_drops_edges_to_deleted_nodes(chain_store: GraphStore) -> None:
    chain_store.copy_nodes(["b"], edge_ids=["ab"])
    chain_store.remove_node("a")
    pasted = chain_store.paste_clipboard(XY(0, 0))

    assert len(pasted) == 1
    assert not any(e.touches(pasted[0]) for e in chain_store.document.edges)


def test_paste_keeps_edges_to_existing_nodes(chain_store: GraphStore) -> None:
    chain_store.copy_nodes(["b"], edge_ids=["ab"])
    pasted = chain_store.paste_clipboard()
    assert any(e.source == "a" and e.target == pasted[0] for e in chain_store.document.edges)


def test_failed_mutation_leaves_state_untouched(chain_store: GraphStore) -> None:
    before = _dump(chain_store)
    with pytest.raises(ValueError):
        chain_store.update_relationship("ab", type="rival")
    assert _dump(chain_store) == before


def test_import_rejects_invalid_document_without_side_effects(chain_store: GraphStore) -> None:
    before = _dump(chain_store)
    bad = document(nodes=[person("a")], edges=[edge("e", "a", "x")]).to_dict()

    with pytest.raises(ValidationError):
        chain_store.import_document(bad)
    assert _dump(chain_store) == before


def test_import_is_undoable(chain_store: GraphStore) -> None:
    chain_store.import_document(document(nodes=[person("z")]))
    assert [n.id for n in chain_store.document.nodes] == ["z"]
    chain_store.undo()
    assert [n.id for n in chain_store.document.nodes] == ["a", "b", "c"]


# -----------------------------------------------------------------------------
# Layout
# -----------------------------------------------------------------------------


def test_auto_layout_places_every_person(chain_store: GraphStore) -> None:
    chain_store.auto_layout()
    positions = chain_store.document.active_layout.positions
    assert set(positions) == {"a", "b", "c"}
    assert positions["a"].y < positions["b"].y < positions["c"].y


def test_auto_layout_leaves_locked_nodes_in_place(chain_store: GraphStore) -> None:
    chain_store.update_node_position("b", XY(-500, -500))
    chain_store.toggle_node_lock("b")
    chain_store.auto_layout()
    assert chain_store.document.active_layout.positions["b"] == XY(-500, -500)


def test_layout_rejects_unknown_lens(chain_store: GraphStore) -> None:
    with pytest.raises(ValueError):
        chain_store.auto_layout("galaxy")


def test_layout_is_one_undo_step(chain_store: GraphStore) -> None:
    chain_store.cleanup_canvas(mode="compact")
    assert len(chain_store.history) == 1
    chain_store.undo()
    assert chain_store.document.active_layout.positions == {}


# -----------------------------------------------------------------------------
# Scenarios and pin views
# -----------------------------------------------------------------------------


def test_scenarios_own_independent_documents(chain_store: GraphStore) -> None:
    first = chain_store.create_scenario("Current")
    assert chain_store.active_scenario_id == first

    chain_store.remove_node("c")
    second = chain_store.create_scenario("Without Cy")
    assert chain_store.scenarios[second].base_scenario_id == first

    chain_store.switch_scenario(first)
    assert chain_store.document.node_by_id("c") is not None
    assert chain_store.history.can_undo() is False

    chain_store.document.nodes[0].name = "Changed"
    assert chain_store.scenarios[first].document.nodes[0].name == "Ada"


def test_unknown_scenario_raises(chain_store: GraphStore) -> None:
    with pytest.raises(ScenarioNotFoundError):
        chain_store.switch_scenario("missing")
    with pytest.raises(ScenarioNotFoundError):
        chain_store.rename_scenario("missing", "x")
    chain_store.delete_scenario("missing")


def test_deleting_active_scenario_loads_another(chain_store: GraphStore) -> None:
    first = chain_store.create_scenario("One")
    chain_store.remove_node("a")
    second = chain_store.create_scenario("Two")
    chain_store.switch_scenario(second)

    chain_store.delete_scenario(second)
    assert chain_store.active_scenario_id == first
    assert chain_store.document.node_by_id("a") is not None


def test_compare_scenarios(chain_store: GraphStore) -> None:
    base = chain_store.create_scenario("Base")
    chain_store.add_person(AddPersonPayload(name="Dee"))
    chain_store.remove_relationship("bc")
    target = chain_store.create_scenario("Target")

    comparison = chain_store.compare_scenarios(base, target)
    assert comparison.diff.summary.nodes_added == 1
    assert comparison.diff.summary.edges_removed == 1
    assert {"b", "c"} <= comparison.affected_node_ids


def test_pin_view_restores_positions(chain_store: GraphStore) -> None:
    chain_store.update_node_position("a", XY(1, 2))
    pin_id = chain_store.create_pin_view("Board view")
    chain_store.update_node_position("a", XY(9, 9))

    chain_store.restore_pin_view(pin_id)
    assert chain_store.document.active_layout.positions["a"] == XY(1, 2)
    assert chain_store.active_pin_view_id == pin_id

    chain_store.delete_pin_view(pin_id)
    assert chain_store.active_pin_view_id is None


# -----------------------------------------------------------------------------
# AI merge
# -----------------------------------------------------------------------------


def test_apply_merge_decisions_is_one_undo_step(chain_store: GraphStore) -> None:
    before = _dump(chain_store)
    decisions = [
        MergeDecision(ParsedPerson("Ben", title="SVP Sales"), "update", "b"),
        MergeDecision(ParsedPerson("Ada"), "skip", "a"),
        MergeDecision(ParsedPerson("Dee", title="Analyst", brands=["Aurora"]), "create-new"),
    ]
    relationships = [
        ParsedRelationship("Ben", "Dee"),
        ParsedRelationship("Dee", "Ada"),  # would close a loop
        ParsedRelationship("Ada", "Ben"),  # already exists
        ParsedRelationship("Ada", "Nobody"),
    ]

    result = chain_store.apply_merge_decisions(decisions, relationships)
    doc = chain_store.document

    assert result.updated == ["b"]
    assert result.skipped == ["a"]
    assert len(result.created) == 1
    dee = result.created[0]
    assert doc.person_by_id("b").attributes.title == "SVP Sales"
    assert doc.person_by_id("b").attributes.tier == "vp"
    assert doc.person_by_id(dee).attributes.brands == ["Aurora"]
    assert len(result.edges_added) == 1
    assert doc.edge_by_id(result.edges_added[0]).source == "b"
    assert len(result.edges_dropped) == 3

    assert len(chain_store.history) == 1
    chain_store.undo()
    assert _dump(chain_store) == before


def test_update_with_vanished_node_creates_instead(chain_store: GraphStore) -> None:
    result = chain_store.apply_merge_decisions([MergeDecision(ParsedPerson("Zed"), "update", "gone")])
    assert len(result.created) == 1
    assert result.updated == []


def test_merge_with_nothing_to_do_records_no_history() -> None:
    store = GraphStore(document(nodes=[person("a")], edges=[]))
    store.apply_merge_decisions([])
    assert len(store.history) == 0
