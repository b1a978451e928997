"""
The graph store: sole owner and writer of the live document.

Every mutation is synchronous. Recorded mutations run inside ``_mutation``,
which captures a pre-mutation snapshot, applies the change, and only then
pushes the snapshot onto the undo stack; if the change raises, the
document and selection are restored and history is left as it was.

Requests naming unknown ids, self-loops and empty inputs are silent no-ops.
A manager edge that would close a reporting loop raises ``CycleRiskError``.
"""

from __future__ import annotations

import copy
from contextlib import contextmanager
from dataclasses import dataclass, field, fields
from typing import Any, Iterable, Iterator, Literal, Sequence

from ..ai.duplicates import MergeDecision
from ..ai.extraction import ParsedPerson, ParsedRelationship
from ..config import DEFAULT_CONFIG, OrgraphConfig
from ..document.defaults import DEFAULT_DOCUMENT_NAME, create_empty_document
from ..document.templates import RoleTemplate
from ..document.validation import parse_document
from ..errors import CycleRiskError, ScenarioNotFoundError
from ..graph.layout import calculate_cleanup_layout, calculate_layout, calculate_matrix_layout, would_create_cycle
from ..lenses import LENS_BY_ID, is_lens_id
from ..models import (
    RELATIONSHIP_TYPES,
    XY,
    ClipboardPayload,
    GraphDocument,
    GraphEdge,
    GroupNode,
    NodeRoleTier,
    PersonAttributes,
    PersonNode,
    PinView,
    RelationshipMetadata,
    Scenario,
    SelectionState,
    Viewport,
    utc_now,
)
from ..scenario.diff import ScenarioDiff, compute_scenario_diff, get_affected_edges, get_affected_nodes
from .history import GraphSnapshot, HistoryStack
from .ids import new_id

ATTRIBUTE_FIELDS = frozenset(f.name for f in fields(PersonAttributes))
NODE_FIELDS = frozenset({"name", "locked"})
EDGE_META_FIELDS = frozenset({"type", "weight", "label", "lenses", "color_token", "ghost"})


@dataclass
class AddPersonPayload:
    name: str
    title: str = ""
    brands: list[str] = field(default_factory=list)
    channels: list[str] = field(default_factory=list)
    departments: list[str] = field(default_factory=list)
    primary_brand: str | None = None
    primary_channel: str | None = None
    primary_department: str | None = None
    tags: list[str] = field(default_factory=list)
    location: str | None = None
    cost_center: str | None = None
    notes: str | None = None
    tier: NodeRoleTier | None = "manager"
    position: XY | None = None

    @classmethod
    def from_template(cls, template: RoleTemplate, **overrides: Any) -> AddPersonPayload:
        """Payload pre-filled from ``template``; overrides that are ``None`` keep the template value."""
        values: dict[str, Any] = {
            "name": template.default_name,
            "title": template.default_title,
            "tier": template.tier,
            "brands": list(template.suggested_brands),
            "channels": list(template.suggested_channels),
            "departments": list(template.suggested_departments),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


@dataclass
class ScenarioComparison:
    base: Scenario
    target: Scenario
    diff: ScenarioDiff
    affected_node_ids: set[str]
    affected_edge_ids: set[str]


@dataclass
class MergeResult:
    """Outcome of applying AI-import merge decisions."""

    created: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    node_ids: dict[str, str] = field(default_factory=dict)  # parsed name -> node id
    edges_added: list[str] = field(default_factory=list)
    edges_dropped: list[ParsedRelationship] = field(default_factory=list)


class GraphStore:
    """Live document, selection, history, clipboard, scenarios and pin views."""

    def __init__(self, document: GraphDocument | None = None, *, config: OrgraphConfig = DEFAULT_CONFIG):
        self.config = config
        self.document = document.clone() if document is not None else create_empty_document()
        self.selection = SelectionState()
        self.history = HistoryStack(config.history_limit)
        self.clipboard: ClipboardPayload | None = None
        self.scenarios: dict[str, Scenario] = {}
        self.active_scenario_id: str | None = None
        self.comparison_scenario_id: str | None = None
        self.pin_views: dict[str, PinView] = {}
        self.active_pin_view_id: str | None = None

    # -------------------------------------------------------------------------
    # History
    # -------------------------------------------------------------------------

    def _snapshot(self) -> GraphSnapshot:
        return GraphSnapshot.capture(self.document, self.selection)

    def _restore(self, snapshot: GraphSnapshot) -> None:
        self.document = snapshot.document
        self.selection = snapshot.selection

    @contextmanager
    def _mutation(self) -> Iterator[GraphDocument]:
        snapshot = self._snapshot()
        try:
            yield self.document
        except Exception:
            self._restore(snapshot)
            raise
        self.history.record(snapshot)
        self.document.metadata.updated_at = utc_now()

    def push_history(self) -> None:
        """Checkpoint the current state, e.g. before a run of unrecorded edits."""
        self.history.record(self._snapshot())

    def undo(self) -> bool:
        if not self.history.can_undo():
            return False
        snapshot = self.history.undo(self._snapshot())
        self._restore(snapshot)
        return True

    def redo(self) -> bool:
        if not self.history.can_redo():
            return False
        snapshot = self.history.redo(self._snapshot())
        self._restore(snapshot)
        return True

    # -------------------------------------------------------------------------
    # Documents
    # -------------------------------------------------------------------------

    def _replace_document(self, document: GraphDocument) -> None:
        self.document = document
        self.selection = SelectionState()
        self.history.clear()

    def load_document(self, document: GraphDocument) -> None:
        """Replace the live document; selection and history start fresh."""
        self._replace_document(document.clone())

    def import_document(self, data: dict[str, Any] | GraphDocument) -> None:
        """Validate and replace the live document as one undoable step.

        Raises ``ValidationError`` and leaves everything untouched when the
        document is invalid.
        """
        raw = data.to_dict() if isinstance(data, GraphDocument) else data
        document = parse_document(raw)
        with self._mutation():
            self.document = document
            self.selection = SelectionState()

    def export_document(self) -> GraphDocument:
        return self.document.clone()

    def reset(self, name: str = DEFAULT_DOCUMENT_NAME) -> None:
        self._replace_document(create_empty_document(name=name))
        self.clipboard = None

    # -------------------------------------------------------------------------
    # People and groups
    # -------------------------------------------------------------------------

    def _insert_person(self, payload: AddPersonPayload) -> str:
        node_id = new_id("person")
        timestamp = utc_now()
        node = PersonNode(
            id=node_id,
            name=payload.name,
            created_at=timestamp,
            updated_at=timestamp,
            attributes=PersonAttributes(
                title=payload.title,
                brands=list(payload.brands),
                primary_brand=payload.primary_brand,
                channels=list(payload.channels),
                primary_channel=payload.primary_channel,
                departments=list(payload.departments),
                primary_department=payload.primary_department,
                tags=list(payload.tags),
                location=payload.location,
                cost_center=payload.cost_center,
                notes=payload.notes,
                tier=payload.tier,
            ),
        )
        self.document.nodes.append(node)
        layout = self.document.active_layout
        if payload.position is not None:
            layout.positions[node_id] = XY(payload.position.x, payload.position.y)
        return node_id

    def add_person(self, payload: AddPersonPayload) -> str:
        """Create a person (positioned in the active lens when given) and select it."""
        with self._mutation():
            node_id = self._insert_person(payload)
            self.selection = SelectionState(node_ids=[node_id])
        return node_id

    @staticmethod
    def _flatten_person_updates(updates: dict[str, Any]) -> dict[str, Any]:
        """Lift a nested ``attributes`` dict to the top; raises on any unknown key before anything is written."""
        flat: dict[str, Any] = {}
        for key, value in updates.items():
            if key == "attributes":
                if not isinstance(value, dict):
                    raise ValueError("'attributes' must be a mapping")
                flat.update(GraphStore._flatten_person_updates(value))
            elif key in NODE_FIELDS or key in ATTRIBUTE_FIELDS:
                flat[key] = value
            else:
                raise ValueError(f"Unknown person field: {key}")
        return flat

    def _apply_person_updates(self, node: PersonNode, updates: dict[str, Any]) -> None:
        for key, value in self._flatten_person_updates(updates).items():
            if key in NODE_FIELDS:
                setattr(node, key, value)
            else:
                setattr(node.attributes, key, list(value) if isinstance(value, list) else value)
        node.updated_at = utc_now()

    def update_person(self, node_id: str, updates: dict[str, Any], *, record_history: bool = True) -> None:
        """
        Merge ``updates`` into a person.

        Keys are ``name``, ``locked`` or any ``PersonAttributes`` field (a
        nested ``attributes`` dict works too). Every key is checked before
        any field is written. With ``record_history=False`` no undo step is
        pushed; pair it with ``push_history()``.
        """
        node = self.document.person_by_id(node_id)
        if node is None:
            return
        flat = self._flatten_person_updates(updates)

        if not record_history:
            self._apply_person_updates(node, flat)
            self.document.metadata.updated_at = utc_now()
            return

        with self._mutation():
            self._apply_person_updates(self.document.person_by_id(node_id), flat)

    def add_group(self, label: str, member_ids: Sequence[str] = (), color: str | None = None) -> str:
        """Create a group over existing nodes; unknown member ids are ignored."""
        existing = self.document.node_ids()
        group_id = new_id("group")
        timestamp = utc_now()
        with self._mutation() as doc:
            doc.nodes.append(
                GroupNode(
                    id=group_id,
                    name=label,
                    created_at=timestamp,
                    updated_at=timestamp,
                    color=color,
                    collapsed=False,
                    member_ids=[m for m in member_ids if m in existing],
                )
            )
            self.selection = SelectionState(node_ids=[group_id])
        return group_id

    def toggle_node_lock(self, node_id: str) -> None:
        if self.document.person_by_id(node_id) is None:
            return
        with self._mutation() as doc:
            node = doc.person_by_id(node_id)
            node.locked = not node.locked
            node.updated_at = utc_now()

    def add_tag(self, node_id: str, tag: str) -> None:
        node = self.document.person_by_id(node_id)
        if node is None or not tag or tag in node.attributes.tags:
            return
        with self._mutation() as doc:
            node = doc.person_by_id(node_id)
            node.attributes.tags.append(tag)
            node.updated_at = utc_now()

    def remove_node(self, node_id: str) -> None:
        """Delete a node with its incident edges and every reference to it."""
        if self.document.node_by_id(node_id) is None:
            return
        with self._mutation() as doc:
            removed_edges = {e.id for e in doc.edges if e.touches(node_id)}
            doc.nodes = [n for n in doc.nodes if n.id != node_id]
            doc.edges = [e for e in doc.edges if e.id not in removed_edges]
            for node in doc.nodes:
                if isinstance(node, GroupNode) and node_id in node.member_ids:
                    node.member_ids = [m for m in node.member_ids if m != node_id]
            for state in doc.lens_state.values():
                state.layout.positions.pop(node_id, None)
                filters = state.filters
                filters.focus_ids = [i for i in filters.focus_ids if i != node_id]
                filters.hidden_ids = [i for i in filters.hidden_ids if i != node_id]
            self.selection = SelectionState(
                node_ids=[i for i in self.selection.node_ids if i != node_id],
                edge_ids=[i for i in self.selection.edge_ids if i not in removed_edges],
            )

    def duplicate_nodes(self, node_ids: Sequence[str]) -> list[str]:
        """Copy nodes (and edges entirely inside the set) under new ids; selects the copies."""
        originals = [n for n in self.document.nodes if n.id in set(node_ids)]
        if not originals:
            return []
        offset = self.config.layout.duplicate_offset
        with self._mutation() as doc:
            timestamp = utc_now()
            positions = doc.active_layout.positions
            id_map: dict[str, str] = {}
            for original in originals:
                duplicate = copy.deepcopy(original)
                duplicate.id = new_id(original.kind)
                duplicate.name = f"{original.name} (copy)"
                duplicate.created_at = timestamp
                duplicate.updated_at = timestamp
                id_map[original.id] = duplicate.id
                doc.nodes.append(duplicate)
                position = positions.get(original.id)
                if position is not None:
                    positions[duplicate.id] = XY(position.x + offset, position.y + offset)

            new_edges = self._remap_edges(
                [e for e in doc.edges if e.source in id_map and e.target in id_map], id_map, timestamp
            )
            doc.edges.extend(new_edges)
            self.selection = SelectionState(node_ids=list(id_map.values()), edge_ids=[e.id for e in new_edges])
        return list(id_map.values())

    @staticmethod
    def _remap_edges(edges: Iterable[GraphEdge], id_map: dict[str, str], timestamp: str) -> list[GraphEdge]:
        remapped: list[GraphEdge] = []
        for edge in edges:
            clone = copy.deepcopy(edge)
            clone.id = new_id(f"edge-{edge.type}")
            clone.source = id_map.get(edge.source, edge.source)
            clone.target = id_map.get(edge.target, edge.target)
            clone.created_at = timestamp
            clone.updated_at = timestamp
            remapped.append(clone)
        return remapped

    # -------------------------------------------------------------------------
    # Clipboard
    # -------------------------------------------------------------------------

    def copy_nodes(self, node_ids: Sequence[str], edge_ids: Sequence[str] = ()) -> None:
        """Copy nodes plus the chosen edges and every edge between copied nodes."""
        wanted = set(node_ids)
        nodes = [n for n in self.document.nodes if n.id in wanted]
        if not nodes:
            return
        edges = [
            e for e in self.document.edges if e.id in set(edge_ids) or (e.source in wanted and e.target in wanted)
        ]
        self.clipboard = ClipboardPayload(nodes=copy.deepcopy(nodes), edges=copy.deepcopy(edges))

    def paste_clipboard(self, position: XY | None = None) -> list[str]:
        """Paste under new ids; edges whose endpoints no longer exist are left out."""
        if self.clipboard is None or not self.clipboard.nodes:
            return []
        clipboard = self.clipboard
        offset = self.config.layout.duplicate_offset
        with self._mutation() as doc:
            timestamp = utc_now()
            id_map: dict[str, str] = {}
            positions = doc.active_layout.positions
            for index, node in enumerate(clipboard.nodes):
                clone = copy.deepcopy(node)
                clone.id = new_id(node.kind)
                clone.created_at = timestamp
                clone.updated_at = timestamp
                if not clone.name.endswith("(copy)"):
                    clone.name = f"{clone.name} (copy)"
                id_map[node.id] = clone.id
                doc.nodes.append(clone)
                if position is not None:
                    positions[clone.id] = XY(position.x + index * offset, position.y + index * offset)

            present = doc.node_ids()
            for edge in self._remap_edges(clipboard.edges, id_map, timestamp):
                if edge.source in present and edge.target in present and edge.source != edge.target:
                    doc.edges.append(edge)
            self.selection = SelectionState(node_ids=list(id_map.values()))
        return list(id_map.values())

    # -------------------------------------------------------------------------
    # Relationships
    # -------------------------------------------------------------------------

    def would_create_cycle(self, source_id: str, target_id: str) -> bool:
        """True if a manager edge ``source -> target`` would close a reporting loop."""
        return would_create_cycle(self.document.edges, source_id, target_id)

    def _insert_edge(self, source_id: str, target_id: str, rel_type: str, meta: dict[str, Any]) -> str:
        edge_id = new_id(f"edge-{rel_type}")
        timestamp = utc_now()
        self.document.edges.append(
            GraphEdge(
                id=edge_id,
                source=source_id,
                target=target_id,
                metadata=RelationshipMetadata(type=rel_type, **meta),
                created_at=timestamp,
                updated_at=timestamp,
            )
        )
        return edge_id

    def add_relationship(self, source_id: str, target_id: str, rel_type: str = "manager", **meta: Any) -> str | None:
        """
        Connect two nodes; returns the new edge id.

        For ``manager`` edges the source manages the target. Returns None for
        a self-loop or an unknown endpoint.
        """
        if rel_type not in RELATIONSHIP_TYPES:
            raise ValueError(f"Unknown relationship type: {rel_type}")
        unknown_meta = set(meta) - EDGE_META_FIELDS
        if unknown_meta:
            raise ValueError(f"Unknown relationship field: {sorted(unknown_meta)[0]}")
        if source_id == target_id:
            return None
        ids = self.document.node_ids()
        if source_id not in ids or target_id not in ids:
            return None
        if rel_type == "manager" and self.would_create_cycle(source_id, target_id):
            raise CycleRiskError(source_id, target_id)

        with self._mutation():
            edge_id = self._insert_edge(source_id, target_id, rel_type, meta)
            self.selection.edge_ids = [edge_id]
        return edge_id

    def update_relationship(self, edge_id: str, **updates: Any) -> None:
        """Merge metadata fields into an edge; retyping to ``manager`` is cycle-checked."""
        unknown = set(updates) - EDGE_META_FIELDS
        if unknown:
            raise ValueError(f"Unknown relationship field: {sorted(unknown)[0]}")
        edge = self.document.edge_by_id(edge_id)
        if edge is None:
            return
        new_type = updates.get("type", edge.type)
        if new_type not in RELATIONSHIP_TYPES:
            raise ValueError(f"Unknown relationship type: {new_type}")
        if new_type == "manager" and not edge.is_manager:
            others = [e for e in self.document.edges if e.id != edge_id]
            if would_create_cycle(others, edge.source, edge.target):
                raise CycleRiskError(edge.source, edge.target)

        with self._mutation() as doc:
            edge = doc.edge_by_id(edge_id)
            for key, value in updates.items():
                setattr(edge.metadata, key, value)
            edge.updated_at = utc_now()

    def remove_relationship(self, edge_id: str) -> None:
        if self.document.edge_by_id(edge_id) is None:
            return
        with self._mutation() as doc:
            doc.edges = [e for e in doc.edges if e.id != edge_id]
            self.selection.edge_ids = [i for i in self.selection.edge_ids if i != edge_id]

    # -------------------------------------------------------------------------
    # Lens and view state (not recorded in history)
    # -------------------------------------------------------------------------

    def _lens(self, lens: str | None) -> str:
        lens = lens or self.document.lens
        if not is_lens_id(lens):
            raise ValueError(f"Unknown lens: {lens}")
        return lens

    def set_lens(self, lens: str) -> None:
        self.document.lens = self._lens(lens)
        self.document.ensure_lens_state(lens)

    def update_node_position(self, node_id: str, position: XY) -> None:
        layout = self.document.active_layout
        layout.positions[node_id] = XY(position.x, position.y)
        layout.last_updated = utc_now()

    def update_viewport(self, lens: str | None, viewport: Viewport) -> None:
        layout = self.document.ensure_lens_state(self._lens(lens)).layout
        layout.viewport = Viewport(viewport.x, viewport.y, viewport.zoom)
        layout.last_updated = utc_now()

    def toggle_snap(self, lens: str | None = None) -> None:
        layout = self.document.ensure_lens_state(self._lens(lens)).layout
        layout.snap_to_grid = not layout.snap_to_grid
        layout.last_updated = utc_now()

    def toggle_grid(self, lens: str | None = None) -> None:
        layout = self.document.ensure_lens_state(self._lens(lens)).layout
        layout.show_grid = not layout.show_grid
        layout.last_updated = utc_now()

    def set_lens_filters(
        self,
        lens: str | None = None,
        *,
        active_tokens: Sequence[str] | None = None,
        focus_ids: Sequence[str] | None = None,
        hidden_ids: Sequence[str] | None = None,
    ) -> None:
        filters = self.document.ensure_lens_state(self._lens(lens)).filters
        if active_tokens is not None:
            filters.active_tokens = list(active_tokens)
        if focus_ids is not None:
            filters.focus_ids = list(focus_ids)
        if hidden_ids is not None:
            filters.hidden_ids = list(hidden_ids)

    # -------------------------------------------------------------------------
    # Layout (recorded)
    # -------------------------------------------------------------------------

    def _apply_positions(self, lens: str, positions: dict[str, XY]) -> None:
        layout = self.document.ensure_lens_state(lens).layout
        locked = {n.id for n in self.document.person_nodes() if n.locked}
        for node_id, position in positions.items():
            if node_id in locked and node_id in layout.positions:
                continue
            layout.positions[node_id] = position
        layout.last_updated = utc_now()

    def auto_layout(self, lens: str | None = None) -> None:
        """Hierarchy layout, or a column-per-assignment layout for matrix lenses."""
        lens = self._lens(lens)
        dimension = LENS_BY_ID[lens].dimension
        with self._mutation() as doc:
            if dimension is None:
                positions = calculate_layout(doc.nodes, doc.edges, config=self.config.layout)
            else:
                positions = calculate_matrix_layout(doc.nodes, doc.edges, dimension, config=self.config.layout)
            self._apply_positions(lens, positions)

    def cleanup_canvas(self, lens: str | None = None, mode: Literal["compact", "spacious"] = "spacious") -> None:
        lens = self._lens(lens)
        with self._mutation() as doc:
            positions = calculate_cleanup_layout(doc.nodes, doc.edges, mode, config=self.config.layout)
            self._apply_positions(lens, positions)

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    def select_node(self, node_id: str, additive: bool = False) -> None:
        if not additive:
            self.selection.node_ids = [node_id]
        elif node_id not in self.selection.node_ids:
            self.selection.node_ids.append(node_id)

    def select_edge(self, edge_id: str, additive: bool = False) -> None:
        if not additive:
            self.selection.edge_ids = [edge_id]
        elif edge_id not in self.selection.edge_ids:
            self.selection.edge_ids.append(edge_id)

    def set_selection(self, node_ids: Sequence[str] | None = None, edge_ids: Sequence[str] | None = None) -> None:
        if node_ids is not None:
            self.selection.node_ids = list(node_ids)
        if edge_ids is not None:
            self.selection.edge_ids = list(edge_ids)

    def clear_selection(self) -> None:
        self.selection = SelectionState()

    # -------------------------------------------------------------------------
    # Scenarios
    # -------------------------------------------------------------------------

    def _scenario(self, scenario_id: str) -> Scenario:
        scenario = self.scenarios.get(scenario_id)
        if scenario is None:
            raise ScenarioNotFoundError(scenario_id)
        return scenario

    def create_scenario(self, name: str, description: str | None = None, copy_from_current: bool = True) -> str:
        """Snapshot the live document (or an empty one); the first scenario becomes active."""
        scenario_id = new_id("scenario")
        self.scenarios[scenario_id] = Scenario(
            id=scenario_id,
            name=name,
            description=description,
            created_at=utc_now(),
            base_scenario_id=self.active_scenario_id,
            document=self.document.clone() if copy_from_current else create_empty_document(),
        )
        if self.active_scenario_id is None:
            self.active_scenario_id = scenario_id
        return scenario_id

    def switch_scenario(self, scenario_id: str) -> None:
        """Load a scenario's document; undo/redo never cross scenarios."""
        scenario = self._scenario(scenario_id)
        self._replace_document(scenario.document.clone())
        self.active_scenario_id = scenario_id

    def save_active_scenario(self) -> None:
        """Write the live document back into the active scenario."""
        if self.active_scenario_id is None:
            return
        self._scenario(self.active_scenario_id).document = self.document.clone()

    def delete_scenario(self, scenario_id: str) -> None:
        if self.scenarios.pop(scenario_id, None) is None:
            return
        if self.comparison_scenario_id == scenario_id:
            self.comparison_scenario_id = None
        if self.active_scenario_id == scenario_id:
            self.active_scenario_id = next(iter(self.scenarios), None)
            if self.active_scenario_id is not None:
                self._replace_document(self.scenarios[self.active_scenario_id].document.clone())

    def rename_scenario(self, scenario_id: str, name: str, description: str | None = None) -> None:
        scenario = self._scenario(scenario_id)
        scenario.name = name
        if description is not None:
            scenario.description = description

    def update_scenario_notes(self, scenario_id: str, notes: str) -> None:
        self._scenario(scenario_id).notes = notes

    def set_comparison_scenario(self, scenario_id: str | None) -> None:
        if scenario_id is not None:
            self._scenario(scenario_id)
        self.comparison_scenario_id = scenario_id

    def compare_scenarios(self, base_id: str, target_id: str) -> ScenarioComparison:
        base = self._scenario(base_id)
        target = self._scenario(target_id)
        diff = compute_scenario_diff(base.document, target.document)
        affected_nodes = get_affected_nodes(diff)
        return ScenarioComparison(
            base=base,
            target=target,
            diff=diff,
            affected_node_ids=affected_nodes,
            affected_edge_ids=get_affected_edges(diff, affected_nodes),
        )

    # -------------------------------------------------------------------------
    # Pin views
    # -------------------------------------------------------------------------

    def create_pin_view(self, name: str, lens: str | None = None) -> str:
        """Save a lens's positions and viewport under a name."""
        lens = self._lens(lens)
        layout = self.document.ensure_lens_state(lens).layout
        pin_id = new_id("pin")
        self.pin_views[pin_id] = PinView(
            id=pin_id,
            name=name,
            lens=lens,
            positions=copy.deepcopy(layout.positions),
            viewport=copy.deepcopy(layout.viewport),
            created_at=utc_now(),
        )
        self.active_pin_view_id = pin_id
        return pin_id

    def restore_pin_view(self, pin_id: str) -> None:
        """Re-apply a pinned arrangement and switch to its lens."""
        pin = self.pin_views.get(pin_id)
        if pin is None:
            return
        layout = self.document.ensure_lens_state(pin.lens).layout
        layout.positions.update(copy.deepcopy(pin.positions))
        layout.viewport = copy.deepcopy(pin.viewport)
        layout.last_updated = utc_now()
        self.document.lens = pin.lens
        self.active_pin_view_id = pin_id

    def delete_pin_view(self, pin_id: str) -> None:
        self.pin_views.pop(pin_id, None)
        if self.active_pin_view_id == pin_id:
            self.active_pin_view_id = None

    def rename_pin_view(self, pin_id: str, name: str) -> None:
        if pin_id in self.pin_views:
            self.pin_views[pin_id].name = name

    # -------------------------------------------------------------------------
    # AI import
    # -------------------------------------------------------------------------

    @staticmethod
    def _person_updates(person: ParsedPerson) -> dict[str, Any]:
        """Only the fields the extraction actually supplied."""
        updates: dict[str, Any] = {"name": person.name}
        if person.title:
            updates["title"] = person.title
        for name in ("brands", "channels", "departments"):
            values = getattr(person, name)
            if values:
                updates[name] = list(values)
        if person.location:
            updates["location"] = person.location
        return updates

    def apply_merge_decisions(
        self,
        decisions: Sequence[MergeDecision],
        relationships: Sequence[ParsedRelationship] = (),
    ) -> MergeResult:
        """
        Create, update or skip people per decision, then wire relationships.

        The whole import is a single undo step. Relationships naming someone
        with no resolved node, duplicating an existing edge, or closing a
        manager loop are dropped and reported in the result.
        """
        result = MergeResult()
        if not decisions and not relationships:
            return result

        with self._mutation() as doc:
            for decision in decisions:
                person = decision.parsed_person
                existing = doc.person_by_id(decision.existing_node_id) if decision.existing_node_id else None
                if decision.strategy == "skip" and existing is not None:
                    result.skipped.append(existing.id)
                    result.node_ids[person.name] = existing.id
                elif decision.strategy == "update" and existing is not None:
                    self._apply_person_updates(existing, self._person_updates(person))
                    result.updated.append(existing.id)
                    result.node_ids[person.name] = existing.id
                else:
                    node_id = self._insert_person(
                        AddPersonPayload(
                            name=person.name,
                            title=person.title,
                            brands=list(person.brands),
                            channels=list(person.channels),
                            departments=list(person.departments),
                            location=person.location,
                        )
                    )
                    result.created.append(node_id)
                    result.node_ids[person.name] = node_id

            existing_pairs = {(e.source, e.target, e.type) for e in doc.edges}
            for rel in relationships:
                source = result.node_ids.get(rel.source)
                target = result.node_ids.get(rel.target)
                if (
                    source is None
                    or target is None
                    or source == target
                    or (source, target, rel.type) in existing_pairs
                    or (rel.type == "manager" and would_create_cycle(doc.edges, source, target))
                ):
                    result.edges_dropped.append(rel)
                    continue
                result.edges_added.append(self._insert_edge(source, target, rel.type, {}))
                existing_pairs.add((source, target, rel.type))

            self.selection = SelectionState(node_ids=list(result.created))

        return result
