"""Connected subgraphs, proximity rings and team trees."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Sequence

from ..models import GraphEdge, GraphNode


@dataclass
class Subgraph:
    id: str
    node_ids: list[str] = field(default_factory=list)
    edge_ids: list[str] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.node_ids)


@dataclass
class TeamStructure:
    node_ids: list[str]
    edge_ids: list[str]
    depth: int


def _adjacency(nodes: Sequence[GraphNode], edges: Sequence[GraphEdge]) -> dict[str, list[str]]:
    graph: dict[str, list[str]] = {n.id: [] for n in nodes}
    for edge in edges:
        graph.setdefault(edge.source, []).append(edge.target)
        graph.setdefault(edge.target, []).append(edge.source)
    return graph


def identify_subgraphs(nodes: Sequence[GraphNode], edges: Sequence[GraphEdge]) -> list[Subgraph]:
    """Connected components in node order; isolated nodes form their own subgraph."""
    graph = _adjacency(nodes, edges)
    visited: set[str] = set()
    subgraphs: list[Subgraph] = []

    for node in nodes:
        if node.id in visited:
            continue
        component: list[str] = []
        stack = [node.id]
        while stack:
            current = stack.pop()
            if current in visited:
                continue
            visited.add(current)
            component.append(current)
            stack.extend(graph.get(current, []))

        members = set(component)
        subgraphs.append(
            Subgraph(
                id=f"subgraph-{len(subgraphs)}",
                node_ids=component,
                edge_ids=[e.id for e in edges if e.source in members and e.target in members],
            )
        )

    return subgraphs


def group_by_proximity(
    node_id: str,
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    max_distance: int = 2,
) -> dict[int, list[str]]:
    """Hop distance -> node ids, up to ``max_distance``; distance 0 is the origin."""
    graph = _adjacency(nodes, edges)
    groups: dict[int, list[str]] = {}
    queue = deque([(node_id, 0)])
    visited = {node_id}

    while queue:
        current, distance = queue.popleft()
        groups.setdefault(distance, []).append(current)
        if distance >= max_distance:
            continue
        for neighbor in graph.get(current, []):
            if neighbor not in visited:
                visited.add(neighbor)
                queue.append((neighbor, distance + 1))

    return groups


def get_team_structure(manager_id: str, edges: Sequence[GraphEdge], max_depth: int = 10) -> TeamStructure:
    """Everyone under ``manager_id`` by manager edges, level by level."""
    node_ids = [manager_id]
    seen = {manager_id}
    edge_ids: list[str] = []
    level = [manager_id]
    depth = 0

    while level and depth < max_depth:
        next_level: list[str] = []
        for current in level:
            for edge in edges:
                if edge.source != current or not edge.is_manager:
                    continue
                edge_ids.append(edge.id)
                if edge.target not in seen:
                    seen.add(edge.target)
                    node_ids.append(edge.target)
                    next_level.append(edge.target)
        level = next_level
        depth += 1

    return TeamStructure(node_ids=node_ids, edge_ids=edge_ids, depth=depth)
