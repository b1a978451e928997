"""
Automatic layout of org chart nodes.

All functions here are pure: they read nodes and edges and return a fresh
node-id -> top-left ``XY`` map. Callers persist the result into a lens's
``LayoutState``.

Only ``manager`` edges shape the hierarchy; sponsor, dotted and group edges
are ignored for layout. Group nodes are not positioned.
"""

from __future__ import annotations

from collections import deque
from typing import Iterable, Literal, Sequence

from ..config import DEFAULT_CONFIG, LayoutConfig, LayoutSpacing
from ..models import XY, GraphEdge, GraphNode, PersonNode

ChildMap = dict[str, list[str]]
CleanupMode = Literal["compact", "spacious"]


def _manager_edges(edges: Iterable[GraphEdge]) -> list[GraphEdge]:
    return [e for e in edges if e.is_manager]


def build_child_map(edges: Iterable[GraphEdge]) -> ChildMap:
    """Manager id -> direct report ids, from manager edges only."""
    child_map: ChildMap = {}
    for edge in _manager_edges(edges):
        child_map.setdefault(edge.source, []).append(edge.target)
    return child_map


def is_descendant(child_map: ChildMap, root_id: str, search_id: str) -> bool:
    """True if ``search_id`` is reachable below ``root_id`` via manager edges."""
    queue = deque(child_map.get(root_id, []))
    visited: set[str] = set()
    while queue:
        current = queue.popleft()
        if current == search_id:
            return True
        if current in visited:
            continue
        visited.add(current)
        queue.extend(child_map.get(current, []))
    return False


def would_create_cycle(edges: Iterable[GraphEdge], manager_id: str, report_id: str) -> bool:
    """True if a manager edge ``manager_id -> report_id`` would close a reporting loop."""
    if manager_id == report_id:
        return True
    return is_descendant(build_child_map(edges), report_id, manager_id)


# -----------------------------------------------------------------------------
# Ranking
# -----------------------------------------------------------------------------


def _acyclic_pairs(node_ids: Sequence[str], pairs: Sequence[tuple[str, str]]) -> list[tuple[str, str]]:
    """Drop back edges found by DFS so the remaining pairs form a DAG.

    DFS starts from roots (no incoming pair) in node order, so an already
    acyclic input comes back unchanged.
    """
    children: dict[str, list[str]] = {n: [] for n in node_ids}
    has_parent: set[str] = set()
    for src, dst in pairs:
        children[src].append(dst)
        has_parent.add(dst)

    WHITE, GRAY, BLACK = 0, 1, 2
    color = {n: WHITE for n in node_ids}
    back: set[tuple[str, str]] = set()

    starts = [n for n in node_ids if n not in has_parent] + [n for n in node_ids if n in has_parent]
    for start in starts:
        if color[start] != WHITE:
            continue
        color[start] = GRAY
        stack = [(start, iter(children[start]))]
        while stack:
            node, it = stack[-1]
            advanced = False
            for child in it:
                if color[child] == GRAY:
                    back.add((node, child))
                elif color[child] == WHITE:
                    color[child] = GRAY
                    stack.append((child, iter(children[child])))
                    advanced = True
                    break
            if not advanced:
                color[node] = BLACK
                stack.pop()

    return [p for p in pairs if p not in back]


def _hierarchy_pairs(person_ids: Sequence[str], edges: Iterable[GraphEdge]) -> list[tuple[str, str]]:
    present = set(person_ids)
    seen: set[tuple[str, str]] = set()
    pairs: list[tuple[str, str]] = []
    for edge in _manager_edges(edges):
        pair = (edge.source, edge.target)
        if edge.source in present and edge.target in present and edge.source != edge.target and pair not in seen:
            seen.add(pair)
            pairs.append(pair)
    return _acyclic_pairs(person_ids, pairs)


def _longest_path_ranks(node_ids: Sequence[str], pairs: Sequence[tuple[str, str]]) -> dict[str, int]:
    """Top-to-bottom ranks: every report sits at least one rank below each manager."""
    children: dict[str, list[str]] = {n: [] for n in node_ids}
    in_degree = {n: 0 for n in node_ids}
    for src, dst in pairs:
        children[src].append(dst)
        in_degree[dst] += 1

    rank = {n: 0 for n in node_ids}
    queue = deque(n for n in node_ids if in_degree[n] == 0)
    while queue:
        node = queue.popleft()
        for child in children[node]:
            rank[child] = max(rank[child], rank[node] + 1)
            in_degree[child] -= 1
            if in_degree[child] == 0:
                queue.append(child)
    return rank


def assign_ranks(nodes: Sequence[GraphNode], edges: Sequence[GraphEdge]) -> dict[str, int]:
    """Rank of every person node in the hierarchical layout (0 = top)."""
    person_ids = [n.id for n in nodes if isinstance(n, PersonNode)]
    return _longest_path_ranks(person_ids, _hierarchy_pairs(person_ids, edges))


# -----------------------------------------------------------------------------
# Hierarchical layout
# -----------------------------------------------------------------------------


def _tidy_centers(
    node_ids: Sequence[str],
    pairs: Sequence[tuple[str, str]],
    rank: dict[str, int],
    *,
    node_width: float,
    node_separation: float,
    margin_x: float,
) -> dict[str, float]:
    """Horizontal centers from a tidy-tree pass over a spanning forest.

    Each node hangs under its deepest-ranked manager; subtrees occupy
    disjoint horizontal intervals so nodes on one rank never interleave.
    """
    tree_parent: dict[str, str] = {}
    for src, dst in pairs:
        current = tree_parent.get(dst)
        if current is None or rank[src] > rank[current]:
            tree_parent[dst] = src

    kids: dict[str, list[str]] = {n: [] for n in node_ids}
    for src, dst in pairs:
        if tree_parent.get(dst) == src:
            kids[src].append(dst)
    roots = [n for n in node_ids if n not in tree_parent]

    # Post-order subtree widths (iterative; reporting chains can be long)
    width: dict[str, float] = {}
    for root in roots:
        stack = [(root, False)]
        while stack:
            node, expanded = stack.pop()
            if expanded:
                children = kids[node]
                total = sum(width[c] for c in children) + node_separation * max(0, len(children) - 1)
                width[node] = max(node_width, total)
            else:
                stack.append((node, True))
                for child in reversed(kids[node]):
                    stack.append((child, False))

    centers: dict[str, float] = {}
    cursor = margin_x
    for root in roots:
        _place_subtree(root, cursor, kids, width, centers, node_width, node_separation)
        cursor += width[root] + node_separation
    return centers


def _place_subtree(
    root: str,
    left: float,
    kids: dict[str, list[str]],
    width: dict[str, float],
    centers: dict[str, float],
    node_width: float,
    node_separation: float,
) -> None:
    # Pre-order placement, then parents are centered over their children.
    order: list[str] = []
    stack = [(root, left)]
    while stack:
        node, node_left = stack.pop()
        order.append(node)
        children = kids[node]
        if not children:
            centers[node] = node_left + width[node] / 2
            continue
        total = sum(width[c] for c in children) + node_separation * (len(children) - 1)
        child_left = node_left + (width[node] - total) / 2
        placed = []
        for child in children:
            placed.append((child, child_left))
            child_left += width[child] + node_separation
        stack.extend(reversed(placed))

    for node in reversed(order):
        children = kids[node]
        if children:
            centers[node] = (centers[children[0]] + centers[children[-1]]) / 2


def _layout_with_ranks(
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    spacing: LayoutSpacing,
    config: LayoutConfig,
) -> tuple[dict[str, XY], dict[str, float]]:
    """Positions (top-left) plus each node's rank center y."""
    person_ids = [n.id for n in nodes if isinstance(n, PersonNode)]
    pairs = _hierarchy_pairs(person_ids, edges)
    rank = _longest_path_ranks(person_ids, pairs)
    centers = _tidy_centers(
        person_ids,
        pairs,
        rank,
        node_width=config.node_width,
        node_separation=spacing.node_separation,
        margin_x=spacing.margin_x,
    )

    positions: dict[str, XY] = {}
    center_y: dict[str, float] = {}
    for node_id in person_ids:
        cy = spacing.margin_y + config.node_height / 2 + rank[node_id] * (config.node_height + spacing.rank_separation)
        center_y[node_id] = cy
        positions[node_id] = XY(x=centers[node_id] - config.node_width / 2, y=cy - config.node_height / 2)
    return positions, center_y


def calculate_layout(
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    *,
    spacing: LayoutSpacing | None = None,
    config: LayoutConfig = DEFAULT_CONFIG.layout,
) -> dict[str, XY]:
    """Rank-based top-to-bottom layout driven by manager edges."""
    positions, _ = _layout_with_ranks(nodes, edges, spacing or config.default, config)
    return positions


def calculate_cleanup_layout(
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    mode: CleanupMode = "spacious",
    *,
    config: LayoutConfig = DEFAULT_CONFIG.layout,
) -> dict[str, XY]:
    """Re-run the hierarchy with cleanup spacing, even out each rank, center on the origin.

    ``compact`` uses tight spacing and may overlap nodes; ``spacious``
    spacing is wider than a node so nothing overlaps.
    """
    if mode not in ("compact", "spacious"):
        raise ValueError("mode must be one of: compact, spacious")
    spacing = config.compact if mode == "compact" else config.spacious

    positions, center_y = _layout_with_ranks(nodes, edges, spacing, config)
    if not positions:
        return {}

    buckets: dict[float, list[str]] = {}
    for node_id, cy in center_y.items():
        key = round(cy / spacing.rank_separation) * spacing.rank_separation
        buckets.setdefault(key, []).append(node_id)

    for node_ids in buckets.values():
        if len(node_ids) <= 1:
            continue
        node_ids.sort(key=lambda n: positions[n].x)
        total_width = (len(node_ids) - 1) * spacing.node_separation
        start_x = positions[node_ids[0]].x - total_width / 2
        for index, node_id in enumerate(node_ids):
            positions[node_id].x = start_x + index * spacing.node_separation

    xs = [p.x for p in positions.values()]
    ys = [p.y for p in positions.values()]
    offset_x = -(min(xs) + max(xs)) / 2
    offset_y = -(min(ys) + max(ys)) / 2
    for pos in positions.values():
        pos.x += offset_x
        pos.y += offset_y

    return positions


def calculate_matrix_layout(
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    dimension: Literal["brands", "channels", "departments"],
    *,
    config: LayoutConfig = DEFAULT_CONFIG.layout,
) -> dict[str, XY]:
    """One column per primary (or first) assignment, each laid out hierarchically."""
    groups: dict[str, list[PersonNode]] = {}
    for node in nodes:
        if not isinstance(node, PersonNode):
            continue
        assigned = node.attributes.dimension(dimension)
        key = node.attributes.primary(dimension) or (assigned[0] if assigned else "unassigned")
        groups.setdefault(key, []).append(node)

    positions: dict[str, XY] = {}
    for index, members in enumerate(groups.values()):
        ids = {m.id for m in members}
        group_edges = [e for e in edges if e.source in ids and e.target in ids]
        for node_id, pos in calculate_layout(members, group_edges, config=config).items():
            positions[node_id] = XY(x=pos.x + index * config.matrix_column_width, y=pos.y)
    return positions
