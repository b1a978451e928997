"""Shortest and bounded-depth paths over the undirected relationship graph."""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from ..models import GraphEdge, GraphNode, PersonNode

Adjacency = dict[str, list[tuple[str, GraphEdge]]]


@dataclass
class PathStep:
    node_id: str
    edge_id: str | None = None
    relationship_type: str | None = None

    def to_dict(self) -> dict[str, str]:
        d = {"nodeId": self.node_id}
        if self.edge_id is not None:
            d["edgeId"] = self.edge_id
        if self.relationship_type is not None:
            d["relationshipType"] = self.relationship_type
        return d


@dataclass
class Path:
    nodes: list[PathStep] = field(default_factory=list)
    distance: int = 0
    description: str = ""

    @property
    def node_ids(self) -> list[str]:
        return [step.node_id for step in self.nodes]

    @property
    def edge_ids(self) -> list[str]:
        return [step.edge_id for step in self.nodes if step.edge_id is not None]

    def to_dict(self) -> dict:
        return {
            "nodes": [step.to_dict() for step in self.nodes],
            "distance": self.distance,
            "description": self.description,
        }


def _hops(n: int) -> str:
    return f"{n} hop{'' if n == 1 else 's'}"


def _same_node(node_id: str) -> Path:
    return Path(nodes=[PathStep(node_id)], distance=0, description="Same person")


def _finish(steps: list[PathStep]) -> Path:
    distance = len(steps) - 1
    return Path(nodes=steps, distance=distance, description=_hops(distance))


def build_adjacency(edges: Iterable[GraphEdge]) -> Adjacency:
    """Undirected adjacency: every edge is traversable both ways."""
    graph: Adjacency = {}
    for edge in edges:
        graph.setdefault(edge.source, []).append((edge.target, edge))
        graph.setdefault(edge.target, []).append((edge.source, edge))
    return graph


def find_shortest_path(source_id: str, target_id: str, edges: Sequence[GraphEdge]) -> Path | None:
    """BFS over all relationship types; ``None`` when the two are disconnected."""
    if source_id == target_id:
        return _same_node(source_id)

    graph = build_adjacency(edges)
    queue: deque[tuple[str, list[PathStep]]] = deque([(source_id, [PathStep(source_id)])])
    visited = {source_id}

    while queue:
        node_id, path = queue.popleft()
        if node_id == target_id:
            return _finish(path)
        for neighbor, edge in graph.get(node_id, []):
            if neighbor in visited:
                continue
            visited.add(neighbor)
            queue.append((neighbor, [*path, PathStep(neighbor, edge.id, edge.type)]))

    return None


def find_all_paths(
    source_id: str,
    target_id: str,
    edges: Sequence[GraphEdge],
    max_depth: int = 4,
    limit: int = 5,
) -> list[Path]:
    """
    Simple paths (no repeated node) from source to target, shortest first.

    A path may hold at most ``max_depth`` nodes. The search is exponential
    in ``max_depth``; keep it small on large graphs.
    """
    if source_id == target_id:
        return [_same_node(source_id)]

    graph = build_adjacency(edges)
    found: list[Path] = []
    visited = {source_id}

    def dfs(node_id: str, path: list[PathStep]) -> None:
        if len(path) > max_depth:
            return
        if node_id == target_id:
            found.append(_finish(list(path)))
            return
        for neighbor, edge in graph.get(node_id, []):
            if neighbor in visited:
                continue
            visited.add(neighbor)
            path.append(PathStep(neighbor, edge.id, edge.type))
            dfs(neighbor, path)
            path.pop()
            visited.discard(neighbor)

    dfs(source_id, [PathStep(source_id)])
    found.sort(key=lambda p: p.distance)
    return found[:limit]


def calculate_distance(a: str, b: str, edges: Sequence[GraphEdge]) -> float:
    """Hop count between two nodes, ``math.inf`` when disconnected."""
    path = find_shortest_path(a, b, edges)
    return path.distance if path else math.inf


def describe_path(path: Path, nodes: Sequence[GraphNode], edges: Sequence[GraphEdge]) -> str:
    """One segment per hop, e.g. ``Ada → Ben (manager) → Ben → Cy (manager)``."""
    if len(path.nodes) <= 1:
        return "Same person"

    node_map = {n.id: n for n in nodes}
    edge_map = {e.id: e for e in edges}
    segments: list[str] = []
    for prev, step in zip(path.nodes, path.nodes[1:]):
        prev_node = node_map.get(prev.node_id)
        node = node_map.get(step.node_id)
        edge = edge_map.get(step.edge_id) if step.edge_id else None
        if prev_node and node and edge:
            segments.append(f"{prev_node.name} → {node.name} ({edge.type})")
    return " → ".join(segments)


def shared_dimensions(a: PersonNode, b: PersonNode) -> dict[str, list[str]]:
    """Brands, channels and departments the two people have in common (order of ``a``)."""
    return {
        name: [v for v in a.attributes.dimension(name) if v in b.attributes.dimension(name)]
        for name in ("brands", "channels", "departments")
    }
