"""
Structural diff between two documents.

Every node id and edge id present in either document lands in exactly one
of ``added``, ``removed``, ``modified`` or ``unchanged``. Nodes and edges
are matched by id; ``modified`` carries old/new pairs per field.

Assignment lists (brands, channels, departments) and group member lists
are compared as unordered sets: reordering alone is not a change.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Sequence

from ..models import GraphDocument, GraphEdge, GraphNode, GroupNode, PersonNode

DiffType = Literal["added", "removed", "modified", "unchanged"]
Severity = Literal["low", "medium", "high"]
CategoryType = Literal["people", "relationships", "attributes"]

DIFF_TYPES: tuple[DiffType, ...] = ("added", "removed", "modified", "unchanged")


@dataclass
class FieldChange:
    field: str
    old_value: Any
    new_value: Any


@dataclass
class NodeDiff:
    type: DiffType
    node: GraphNode
    original_node: GraphNode | None = None
    changes: list[FieldChange] = field(default_factory=list)


@dataclass
class EdgeDiff:
    type: DiffType
    edge: GraphEdge
    original_edge: GraphEdge | None = None
    changes: list[FieldChange] = field(default_factory=list)


@dataclass
class DiffSummary:
    nodes_added: int = 0
    nodes_removed: int = 0
    nodes_modified: int = 0
    edges_added: int = 0
    edges_removed: int = 0
    edges_modified: int = 0

    @property
    def total(self) -> int:
        return (
            self.nodes_added
            + self.nodes_removed
            + self.nodes_modified
            + self.edges_added
            + self.edges_removed
            + self.edges_modified
        )

    def to_dict(self) -> dict[str, int]:
        return {
            "nodesAdded": self.nodes_added,
            "nodesRemoved": self.nodes_removed,
            "nodesModified": self.nodes_modified,
            "edgesAdded": self.edges_added,
            "edgesRemoved": self.edges_removed,
            "edgesModified": self.edges_modified,
        }


@dataclass
class ScenarioDiff:
    nodes: list[NodeDiff] = field(default_factory=list)
    edges: list[EdgeDiff] = field(default_factory=list)
    summary: DiffSummary = field(default_factory=DiffSummary)

    def nodes_of(self, diff_type: DiffType) -> list[NodeDiff]:
        return [d for d in self.nodes if d.type == diff_type]

    def edges_of(self, diff_type: DiffType) -> list[EdgeDiff]:
        return [d for d in self.edges if d.type == diff_type]


@dataclass
class CategorizedChange:
    description: str
    node_ids: list[str]
    edge_ids: list[str]
    severity: Severity


@dataclass
class ChangeCategory:
    type: CategoryType
    changes: list[CategorizedChange]


def _compare(changes: list[FieldChange], name: str, old: Any, new: Any) -> None:
    if old != new:
        changes.append(FieldChange(name, old, new))


def _compare_set(changes: list[FieldChange], name: str, old: Sequence[str], new: Sequence[str]) -> None:
    if set(old) != set(new):
        changes.append(FieldChange(name, list(old), list(new)))


def node_changes(base: GraphNode, target: GraphNode) -> list[FieldChange]:
    changes: list[FieldChange] = []
    _compare(changes, "name", base.name, target.name)
    _compare(changes, "kind", base.kind, target.kind)

    if isinstance(base, PersonNode) and isinstance(target, PersonNode):
        old, new = base.attributes, target.attributes
        _compare(changes, "title", old.title, new.title)
        _compare(changes, "tier", old.tier, new.tier)
        _compare_set(changes, "brands", old.brands, new.brands)
        _compare_set(changes, "channels", old.channels, new.channels)
        _compare_set(changes, "departments", old.departments, new.departments)
        _compare(changes, "location", old.location, new.location)
    elif isinstance(base, GroupNode) and isinstance(target, GroupNode):
        _compare(changes, "color", base.color, target.color)
        _compare(changes, "collapsed", base.collapsed, target.collapsed)
        _compare_set(changes, "memberIds", base.member_ids, target.member_ids)

    return changes


def edge_changes(base: GraphEdge, target: GraphEdge) -> list[FieldChange]:
    changes: list[FieldChange] = []
    _compare(changes, "source", base.source, target.source)
    _compare(changes, "target", base.target, target.target)
    _compare(changes, "type", base.type, target.type)
    _compare(changes, "ghost", bool(base.metadata.ghost), bool(target.metadata.ghost))
    _compare(changes, "label", base.metadata.label, target.metadata.label)
    return changes


def compute_scenario_diff(base: GraphDocument, target: GraphDocument) -> ScenarioDiff:
    diff = ScenarioDiff()

    base_nodes = {n.id: n for n in base.nodes}
    target_node_ids = {n.id for n in target.nodes}
    for node in target.nodes:
        original = base_nodes.get(node.id)
        if original is None:
            diff.nodes.append(NodeDiff("added", node))
            continue
        changes = node_changes(original, node)
        diff.nodes.append(NodeDiff("modified" if changes else "unchanged", node, original, changes))
    for node in base.nodes:
        if node.id not in target_node_ids:
            diff.nodes.append(NodeDiff("removed", node, node))

    base_edges = {e.id: e for e in base.edges}
    target_edge_ids = {e.id for e in target.edges}
    for edge in target.edges:
        original = base_edges.get(edge.id)
        if original is None:
            diff.edges.append(EdgeDiff("added", edge))
            continue
        changes = edge_changes(original, edge)
        diff.edges.append(EdgeDiff("modified" if changes else "unchanged", edge, original, changes))
    for edge in base.edges:
        if edge.id not in target_edge_ids:
            diff.edges.append(EdgeDiff("removed", edge, edge))

    diff.summary = DiffSummary(
        nodes_added=len(diff.nodes_of("added")),
        nodes_removed=len(diff.nodes_of("removed")),
        nodes_modified=len(diff.nodes_of("modified")),
        edges_added=len(diff.edges_of("added")),
        edges_removed=len(diff.edges_of("removed")),
        edges_modified=len(diff.edges_of("modified")),
    )
    return diff


def get_affected_nodes(diff: ScenarioDiff) -> set[str]:
    """Changed nodes plus both endpoints of every changed edge."""
    affected = {d.node.id for d in diff.nodes if d.type != "unchanged"}
    for d in diff.edges:
        if d.type != "unchanged":
            affected.update((d.edge.source, d.edge.target))
    return affected


def get_affected_edges(diff: ScenarioDiff, node_ids: set[str]) -> set[str]:
    """Changed edges plus every edge touching one of ``node_ids``."""
    return {
        d.edge.id
        for d in diff.edges
        if d.type != "unchanged" or d.edge.source in node_ids or d.edge.target in node_ids
    }


def _fields(changes: list[FieldChange]) -> str:
    return ", ".join(c.field for c in changes)


def categorize_changes(diff: ScenarioDiff) -> list[ChangeCategory]:
    """Group changes into people / relationships / attributes, each with a severity."""
    categories: list[ChangeCategory] = []

    people: list[CategorizedChange] = []
    for d in diff.nodes:
        if d.type == "added":
            people.append(CategorizedChange(f"Added {d.node.name}", [d.node.id], [], "medium"))
        elif d.type == "removed":
            people.append(CategorizedChange(f"Removed {d.node.name}", [d.node.id], [], "high"))
        elif d.type == "modified":
            people.append(CategorizedChange(f"Modified {d.node.name}: {_fields(d.changes)}", [d.node.id], [], "low"))
    if people:
        categories.append(ChangeCategory("people", people))

    relationships: list[CategorizedChange] = []
    for d in diff.edges:
        if d.type == "unchanged":
            continue
        verb = {"added": "Added", "removed": "Removed", "modified": "Modified"}[d.type]
        touches_manager = d.edge.is_manager or (d.original_edge is not None and d.original_edge.is_manager)
        severity: Severity = "high" if touches_manager else "medium"
        relationships.append(
            CategorizedChange(
                f"{verb} {d.edge.type} relationship",
                [d.edge.source, d.edge.target],
                [d.edge.id],
                severity,
            )
        )
    if relationships:
        categories.append(ChangeCategory("relationships", relationships))

    attributes = [
        CategorizedChange(f"Updated {d.node.name}: {_fields(d.changes)}", [d.node.id], [], "low")
        for d in diff.nodes
        if d.type == "modified" and d.changes
    ]
    if attributes:
        categories.append(ChangeCategory("attributes", attributes))

    return categories


def describe_node_change(node_diff: NodeDiff) -> str:
    if node_diff.type == "added":
        return "Added to organization"
    if node_diff.type == "removed":
        return "Removed from organization"
    if node_diff.type == "modified" and node_diff.changes:
        return ", ".join(f"{c.field}: {c.old_value} → {c.new_value}" for c in node_diff.changes)
    return "No changes"
