"""Network analysis: influence, centrality, bridges and connection suggestions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from ..models import GraphEdge, GraphNode, PersonNode
from .pathfinding import shared_dimensions


@dataclass
class NetworkConnection:
    node_id: str
    distance: int
    relationship_type: str | None = None
    edge_id: str | None = None


@dataclass
class ConnectionSuggestion:
    target_id: str
    reason: str
    score: float


def _neighbors(edges: Sequence[GraphEdge], nodes: Sequence[GraphNode] | None = None) -> dict[str, list[str]]:
    graph: dict[str, list[str]] = {n.id: [] for n in nodes} if nodes is not None else {}
    for edge in edges:
        graph.setdefault(edge.source, []).append(edge.target)
        graph.setdefault(edge.target, []).append(edge.source)
    return graph


def get_direct_connections(node_id: str, edges: Sequence[GraphEdge]) -> list[NetworkConnection]:
    """One entry per incident edge, pointing at the node on the other end."""
    connections: list[NetworkConnection] = []
    for edge in edges:
        if edge.source == node_id:
            connections.append(NetworkConnection(edge.target, 1, edge.type, edge.id))
        elif edge.target == node_id:
            connections.append(NetworkConnection(edge.source, 1, edge.type, edge.id))
    return connections


def get_sphere_of_influence(node_id: str, edges: Sequence[GraphEdge], depth: int = 2) -> set[str]:
    """Nodes reachable within ``depth`` undirected hops, not including ``node_id`` itself."""
    graph = _neighbors(edges)
    seen = {node_id}
    frontier = {node_id}
    for _ in range(depth):
        next_frontier: set[str] = set()
        for current in frontier:
            for neighbor in graph.get(current, []):
                if neighbor not in seen:
                    seen.add(neighbor)
                    next_frontier.add(neighbor)
        if not next_frontier:
            break
        frontier = next_frontier
    seen.discard(node_id)
    return seen


def calculate_centrality(node_id: str, nodes: Sequence[GraphNode], edges: Sequence[GraphEdge]) -> float:
    """Degree centrality: incident edges / (node count - 1)."""
    max_possible = len(nodes) - 1
    if max_possible <= 0:
        return 0.0
    return len(get_direct_connections(node_id, edges)) / max_possible


def count_components(graph: dict[str, list[str]], node_ids: Sequence[str], removed: str | None = None) -> int:
    """Connected components among ``node_ids``, treating ``removed`` as absent."""
    visited: set[str] = set()
    if removed is not None:
        visited.add(removed)
    components = 0
    for start in node_ids:
        if start in visited:
            continue
        components += 1
        stack = [start]
        while stack:
            current = stack.pop()
            if current in visited:
                continue
            visited.add(current)
            stack.extend(n for n in graph.get(current, []) if n not in visited)
    return components


def find_bridge_nodes(nodes: Sequence[GraphNode], edges: Sequence[GraphEdge]) -> list[str]:
    """
    Articulation points: nodes whose removal increases the component count.

    Brute force, one component count per node: O(n * (n + m)).
    """
    graph = _neighbors(edges, nodes)
    node_ids = [n.id for n in nodes]
    before = count_components(graph, node_ids)
    bridges: list[str] = []
    for node_id in node_ids:
        remaining = [n for n in node_ids if n != node_id]
        if count_components(graph, remaining, removed=node_id) > before:
            bridges.append(node_id)
    return bridges


def suggest_connections(
    node_id: str,
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    limit: int = 5,
) -> list[ConnectionSuggestion]:
    """Heuristic introductions for a person, best first."""
    node = next((n for n in nodes if n.id == node_id), None)
    if not isinstance(node, PersonNode):
        return []

    connected = {c.node_id for c in get_direct_connections(node_id, edges)}
    suggestions: list[ConnectionSuggestion] = []

    manager_edge = next((e for e in edges if e.target == node_id and e.is_manager), None)
    if manager_edge is not None:
        for edge in edges:
            if (
                edge.is_manager
                and edge.source == manager_edge.source
                and edge.target != node_id
                and edge.target not in connected
            ):
                suggestions.append(ConnectionSuggestion(edge.target, "Team member under same manager", 0.8))

    for other in nodes:
        if other.id == node_id or not isinstance(other, PersonNode) or other.id in connected:
            continue
        shared = shared_dimensions(node, other)
        brands, channels, departments = shared["brands"], shared["channels"], shared["departments"]
        if brands and channels:
            suggestions.append(
                ConnectionSuggestion(other.id, f"Shared brand ({brands[0]}) and channel ({channels[0]})", 0.9)
            )
        elif departments and brands:
            suggestions.append(
                ConnectionSuggestion(other.id, f"Shared department ({departments[0]}) and brand ({brands[0]})", 0.7)
            )

    suggestions.sort(key=lambda s: s.score, reverse=True)
    return suggestions[:limit]


def collaboration_score(a: PersonNode, b: PersonNode) -> float:
    """Affinity in [0, 1] from shared assignments, tier and location."""
    shared = shared_dimensions(a, b)
    score = len(shared["brands"]) * 0.3 + len(shared["channels"]) * 0.3 + len(shared["departments"]) * 0.2
    if a.attributes.tier == b.attributes.tier:
        score += 0.1
    if a.attributes.location and a.attributes.location == b.attributes.location:
        score += 0.1
    return min(score, 1.0)


def find_manager_cycles(edges: Sequence[GraphEdge]) -> list[list[str]]:
    """Reporting loops among manager edges (Tarjan's strongly connected components).

    Imported documents are not checked for cycles, so this reports them
    after the fact. A self-managing node counts as a cycle of one.
    """
    graph: dict[str, list[str]] = {}
    self_loops: set[str] = set()
    for edge in edges:
        if not edge.is_manager:
            continue
        graph.setdefault(edge.source, []).append(edge.target)
        graph.setdefault(edge.target, [])
        if edge.source == edge.target:
            self_loops.add(edge.source)

    counter = 0
    stack: list[str] = []
    lowlinks: dict[str, int] = {}
    index: dict[str, int] = {}
    on_stack: set[str] = set()
    sccs: list[list[str]] = []

    def visit(node: str) -> None:
        nonlocal counter
        index[node] = lowlinks[node] = counter
        counter += 1
        stack.append(node)
        on_stack.add(node)

    for root in graph:
        if root in index:
            continue
        visit(root)
        # Explicit work stack; reporting chains can be long
        work = [(root, iter(graph[root]))]
        while work:
            node, reports = work[-1]
            for report in reports:
                if report not in index:
                    visit(report)
                    work.append((report, iter(graph[report])))
                    break
                if report in on_stack:
                    lowlinks[node] = min(lowlinks[node], index[report])
            else:
                work.pop()
                if work:
                    parent = work[-1][0]
                    lowlinks[parent] = min(lowlinks[parent], lowlinks[node])
                if lowlinks[node] == index[node]:
                    scc = []
                    while True:
                        w = stack.pop()
                        on_stack.discard(w)
                        scc.append(w)
                        if w == node:
                            break
                    if len(scc) > 1 or node in self_loops:
                        sccs.append(scc)

    return sccs
