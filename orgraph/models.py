"""Data models for org graph documents.

Field names are snake_case in Python; ``to_dict``/``from_dict`` map them to
the camelCase JSON shape that is persisted and exchanged.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar, Literal, Union

from .lenses import DEFAULT_LENS, LENS_ORDER

SCHEMA_VERSION = "2024.10.01"

RelationshipType = Literal["manager", "sponsor", "dotted", "group"]
NodeKind = Literal["person", "group"]
NodeRoleTier = Literal["ic", "manager", "director", "vp", "c-suite"]

RELATIONSHIP_TYPES = ("manager", "sponsor", "dotted", "group")
NODE_KINDS = ("person", "group")
ROLE_TIERS = ("ic", "manager", "director", "vp", "c-suite")

# Attribute lists that carry an optional "primary" selection
DIMENSIONS = ("brands", "channels", "departments")
PRIMARY_FIELD = {
    "brands": "primary_brand",
    "channels": "primary_channel",
    "departments": "primary_department",
}


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _put(d: dict[str, Any], key: str, value: Any) -> None:
    """Set ``key`` only when ``value`` is not None (optional JSON fields)."""
    if value is not None:
        d[key] = value


# -----------------------------------------------------------------------------
# Geometry
# -----------------------------------------------------------------------------


@dataclass
class XY:
    x: float
    y: float

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict) -> "XY":
        return cls(x=data["x"], y=data["y"])


@dataclass
class Viewport:
    x: float = 0
    y: float = 0
    zoom: float = 1

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "zoom": self.zoom}

    @classmethod
    def from_dict(cls, data: dict) -> "Viewport":
        return cls(x=data["x"], y=data["y"], zoom=data["zoom"])


# -----------------------------------------------------------------------------
# Nodes
# -----------------------------------------------------------------------------


@dataclass
class PersonAttributes:
    title: str = ""
    departments: list[str] = field(default_factory=list)
    primary_department: str | None = None
    brands: list[str] = field(default_factory=list)
    primary_brand: str | None = None
    channels: list[str] = field(default_factory=list)
    primary_channel: str | None = None
    tags: list[str] = field(default_factory=list)
    location: str | None = None
    cost_center: str | None = None
    notes: str | None = None
    job_description: str | None = None
    tier: NodeRoleTier | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "title": self.title,
            "departments": list(self.departments),
            "brands": list(self.brands),
            "channels": list(self.channels),
            "tags": list(self.tags),
        }
        _put(d, "primaryDepartment", self.primary_department)
        _put(d, "primaryBrand", self.primary_brand)
        _put(d, "primaryChannel", self.primary_channel)
        _put(d, "location", self.location)
        _put(d, "costCenter", self.cost_center)
        _put(d, "notes", self.notes)
        _put(d, "jobDescription", self.job_description)
        _put(d, "tier", self.tier)
        return d

    @classmethod
    def from_dict(cls, data: dict) -> "PersonAttributes":
        return cls(
            title=data.get("title", ""),
            departments=list(data.get("departments") or []),
            primary_department=data.get("primaryDepartment"),
            brands=list(data.get("brands") or []),
            primary_brand=data.get("primaryBrand"),
            channels=list(data.get("channels") or []),
            primary_channel=data.get("primaryChannel"),
            tags=list(data.get("tags") or []),
            location=data.get("location"),
            cost_center=data.get("costCenter"),
            notes=data.get("notes"),
            job_description=data.get("jobDescription"),
            tier=data.get("tier"),
        )

    def dimension(self, name: str) -> list[str]:
        """Assignment list for ``brands``, ``channels`` or ``departments``."""
        if name not in DIMENSIONS:
            raise ValueError(f"Unknown dimension: {name}")
        return getattr(self, name)

    def primary(self, name: str) -> str | None:
        return getattr(self, PRIMARY_FIELD[name])


@dataclass
class BaseNode:
    """Fields shared by every node variant."""

    id: str
    name: str
    created_at: str
    updated_at: str

    kind: ClassVar[str] = ""

    def _base_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind,
            "name": self.name,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass
class PersonNode(BaseNode):
    attributes: PersonAttributes = field(default_factory=PersonAttributes)
    locked: bool | None = None

    kind: ClassVar[str] = "person"

    def to_dict(self) -> dict[str, Any]:
        d = self._base_dict()
        d["attributes"] = self.attributes.to_dict()
        _put(d, "locked", self.locked)
        return d

    @classmethod
    def from_dict(cls, data: dict) -> "PersonNode":
        return cls(
            id=data["id"],
            name=data["name"],
            created_at=data.get("createdAt", ""),
            updated_at=data.get("updatedAt", ""),
            attributes=PersonAttributes.from_dict(data.get("attributes") or {}),
            locked=data.get("locked"),
        )


@dataclass
class GroupNode(BaseNode):
    """A visual grouping. ``member_ids`` are weak references: the group does not own them."""

    color: str | None = None
    collapsed: bool | None = None
    member_ids: list[str] = field(default_factory=list)

    kind: ClassVar[str] = "group"

    @property
    def label(self) -> str:
        return self.name

    def to_dict(self) -> dict[str, Any]:
        d = self._base_dict()
        _put(d, "color", self.color)
        _put(d, "collapsed", self.collapsed)
        d["memberIds"] = list(self.member_ids)
        return d

    @classmethod
    def from_dict(cls, data: dict) -> "GroupNode":
        return cls(
            id=data["id"],
            name=data["name"],
            created_at=data.get("createdAt", ""),
            updated_at=data.get("updatedAt", ""),
            color=data.get("color"),
            collapsed=data.get("collapsed"),
            member_ids=list(data.get("memberIds") or []),
        )


GraphNode = Union[PersonNode, GroupNode]


def node_from_dict(data: dict) -> GraphNode:
    """Build the node variant named by the ``kind`` discriminant."""
    kind = data.get("kind")
    if kind == "person":
        return PersonNode.from_dict(data)
    if kind == "group":
        return GroupNode.from_dict(data)
    raise ValueError(f"Unknown node kind: {kind!r}")


# -----------------------------------------------------------------------------
# Edges
# -----------------------------------------------------------------------------


@dataclass
class RelationshipMetadata:
    type: RelationshipType
    weight: float | None = None
    label: str | None = None
    lenses: list[str] | None = None
    color_token: str | None = None
    ghost: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"type": self.type}
        _put(d, "weight", self.weight)
        _put(d, "label", self.label)
        if self.lenses is not None:
            d["lenses"] = list(self.lenses)
        _put(d, "colorToken", self.color_token)
        _put(d, "ghost", self.ghost)
        return d

    @classmethod
    def from_dict(cls, data: dict) -> "RelationshipMetadata":
        lenses = data.get("lenses")
        return cls(
            type=data["type"],
            weight=data.get("weight"),
            label=data.get("label"),
            lenses=list(lenses) if lenses is not None else None,
            color_token=data.get("colorToken"),
            ghost=data.get("ghost"),
        )


@dataclass
class GraphEdge:
    """Directed relationship from ``source`` to ``target``.

    For ``manager`` edges the source manages the target.
    """

    id: str
    source: str
    target: str
    metadata: RelationshipMetadata
    created_at: str = ""
    updated_at: str = ""

    @property
    def type(self) -> str:
        return self.metadata.type

    @property
    def is_manager(self) -> bool:
        return self.metadata.type == "manager"

    def touches(self, node_id: str) -> bool:
        return self.source == node_id or self.target == node_id

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "metadata": self.metadata.to_dict(),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "GraphEdge":
        return cls(
            id=data["id"],
            source=data["source"],
            target=data["target"],
            metadata=RelationshipMetadata.from_dict(data["metadata"]),
            created_at=data.get("createdAt", ""),
            updated_at=data.get("updatedAt", ""),
        )


# -----------------------------------------------------------------------------
# Lens state
# -----------------------------------------------------------------------------


@dataclass
class LayoutState:
    id: str
    positions: dict[str, XY] = field(default_factory=dict)
    viewport: Viewport = field(default_factory=Viewport)
    snap_to_grid: bool = False
    show_grid: bool = True
    last_updated: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "positions": {node_id: pos.to_dict() for node_id, pos in self.positions.items()},
            "viewport": self.viewport.to_dict(),
            "snapToGrid": self.snap_to_grid,
            "showGrid": self.show_grid,
            "lastUpdated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LayoutState":
        return cls(
            id=data["id"],
            positions={k: XY.from_dict(v) for k, v in (data.get("positions") or {}).items()},
            viewport=Viewport.from_dict(data["viewport"]) if data.get("viewport") else Viewport(),
            snap_to_grid=bool(data.get("snapToGrid", False)),
            show_grid=bool(data.get("showGrid", True)),
            last_updated=data.get("lastUpdated", ""),
        )


@dataclass
class LensFilterState:
    active_tokens: list[str] = field(default_factory=list)
    focus_ids: list[str] = field(default_factory=list)
    hidden_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "activeTokens": list(self.active_tokens),
            "focusIds": list(self.focus_ids),
            "hiddenIds": list(self.hidden_ids),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LensFilterState":
        return cls(
            active_tokens=list(data.get("activeTokens") or []),
            focus_ids=list(data.get("focusIds") or []),
            hidden_ids=list(data.get("hiddenIds") or []),
        )


@dataclass
class LensState:
    layout: LayoutState
    filters: LensFilterState = field(default_factory=LensFilterState)

    def to_dict(self) -> dict[str, Any]:
        return {"layout": self.layout.to_dict(), "filters": self.filters.to_dict()}

    @classmethod
    def from_dict(cls, data: dict) -> "LensState":
        return cls(
            layout=LayoutState.from_dict(data["layout"]),
            filters=LensFilterState.from_dict(data.get("filters") or {}),
        )


# -----------------------------------------------------------------------------
# Document
# -----------------------------------------------------------------------------


@dataclass
class DocumentMetadata:
    name: str
    created_at: str
    updated_at: str
    description: str | None = None
    author: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "name": self.name,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        _put(d, "description", self.description)
        _put(d, "author", self.author)
        return d

    @classmethod
    def from_dict(cls, data: dict) -> "DocumentMetadata":
        return cls(
            name=data["name"],
            created_at=data.get("createdAt", ""),
            updated_at=data.get("updatedAt", ""),
            description=data.get("description"),
            author=data.get("author"),
        )


@dataclass
class GraphDocument:
    """The versioned root: nodes, edges, active lens and per-lens state."""

    metadata: DocumentMetadata
    nodes: list[GraphNode] = field(default_factory=list)
    edges: list[GraphEdge] = field(default_factory=list)
    lens: str = DEFAULT_LENS
    lens_state: dict[str, LensState] = field(default_factory=dict)
    schema_version: str = SCHEMA_VERSION

    def node_by_id(self, node_id: str) -> GraphNode | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def person_by_id(self, node_id: str) -> PersonNode | None:
        node = self.node_by_id(node_id)
        return node if isinstance(node, PersonNode) else None

    def edge_by_id(self, edge_id: str) -> GraphEdge | None:
        for edge in self.edges:
            if edge.id == edge_id:
                return edge
        return None

    def person_nodes(self) -> list[PersonNode]:
        return [n for n in self.nodes if isinstance(n, PersonNode)]

    def node_ids(self) -> set[str]:
        return {n.id for n in self.nodes}

    def ensure_lens_state(self, lens: str) -> LensState:
        """Return the lens state, creating a default one if missing."""
        from .document.defaults import create_lens_state

        state = self.lens_state.get(lens)
        if state is None:
            state = create_lens_state(lens)
            self.lens_state[lens] = state
        return state

    @property
    def active_layout(self) -> LayoutState:
        return self.ensure_lens_state(self.lens).layout

    def clone(self) -> "GraphDocument":
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        ordered_lenses = [l for l in LENS_ORDER if l in self.lens_state]
        ordered_lenses += [l for l in self.lens_state if l not in ordered_lenses]
        return {
            "schema_version": self.schema_version,
            "metadata": self.metadata.to_dict(),
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
            "lens": self.lens,
            "lens_state": {l: self.lens_state[l].to_dict() for l in ordered_lenses},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "GraphDocument":
        """Build from an already validated JSON value (see ``parse_document``)."""
        return cls(
            schema_version=data.get("schema_version", SCHEMA_VERSION),
            metadata=DocumentMetadata.from_dict(data["metadata"]),
            nodes=[node_from_dict(n) for n in data.get("nodes", [])],
            edges=[GraphEdge.from_dict(e) for e in data.get("edges", [])],
            lens=data.get("lens", DEFAULT_LENS),
            lens_state={k: LensState.from_dict(v) for k, v in (data.get("lens_state") or {}).items()},
        )


# -----------------------------------------------------------------------------
# Session state
# -----------------------------------------------------------------------------


@dataclass
class SelectionState:
    node_ids: list[str] = field(default_factory=list)
    edge_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, list[str]]:
        return {"nodeIds": list(self.node_ids), "edgeIds": list(self.edge_ids)}

    @classmethod
    def from_dict(cls, data: dict) -> "SelectionState":
        return cls(
            node_ids=[i for i in data.get("nodeIds") or [] if isinstance(i, str)],
            edge_ids=[i for i in data.get("edgeIds") or [] if isinstance(i, str)],
        )


@dataclass
class Scenario:
    """A named, independently owned copy of a whole document."""

    id: str
    name: str
    created_at: str
    document: GraphDocument
    description: str | None = None
    base_scenario_id: str | None = None
    notes: str | None = None
    tags: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "createdAt": self.created_at,
            "document": self.document.to_dict(),
        }
        _put(d, "description", self.description)
        _put(d, "baseScenarioId", self.base_scenario_id)
        _put(d, "notes", self.notes)
        if self.tags:
            d["tags"] = list(self.tags)
        return d


@dataclass
class PinView:
    """A saved lens arrangement (positions + viewport) that can be restored."""

    id: str
    name: str
    lens: str
    positions: dict[str, XY]
    viewport: Viewport
    created_at: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "lens": self.lens,
            "positions": {k: v.to_dict() for k, v in self.positions.items()},
            "viewport": self.viewport.to_dict(),
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PinView":
        return cls(
            id=data["id"],
            name=data["name"],
            lens=data["lens"],
            positions={k: XY.from_dict(v) for k, v in (data.get("positions") or {}).items()},
            viewport=Viewport.from_dict(data["viewport"]),
            created_at=data.get("createdAt", ""),
        )


@dataclass
class ClipboardPayload:
    nodes: list[GraphNode] = field(default_factory=list)
    edges: list[GraphEdge] = field(default_factory=list)
