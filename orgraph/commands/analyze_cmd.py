"""Read-only analysis commands over the live document."""

from __future__ import annotations

import json
from pathlib import Path

from rich.console import Console
from rich.table import Table

from ..analysis import (
    SpanThresholds,
    average_span,
    calculate_span_metrics,
    leaders_over_threshold,
    span_distribution,
)
from ..config import OrgraphConfig
from ..document import find_matrix_conflicts
from ..graph import (
    calculate_centrality,
    describe_path,
    find_all_paths,
    find_bridge_nodes,
    find_manager_cycles,
    find_shortest_path,
    get_sphere_of_influence,
    suggest_connections,
)
from ..graph.clustering import group_by_proximity
from .session import node_label, open_store, require_node

STATUS_STYLES = {
    "none": "dim",
    "healthy": "green",
    "high": "yellow",
    "critical": "bold red",
}

LEVEL_STYLES = {
    "high": "bold red",
    "medium": "yellow",
    "low": "dim",
}


def run_path(
    state_path: Path,
    config: OrgraphConfig,
    source: str,
    target: str,
    all_paths: bool = False,
    max_depth: int | None = None,
    as_json: bool = False,
) -> int:
    """
    Show how two people are connected, ignoring edge direction.

    Returns:
        Exit code (0 = connected, 1 = unknown node or no path)
    """
    err = Console(stderr=True)
    store = open_store(state_path, config)
    doc = store.document
    src = require_node(doc, source, err)
    dst = require_node(doc, target, err)
    if src is None or dst is None:
        return 1

    if all_paths:
        paths = find_all_paths(
            src.id,
            dst.id,
            doc.edges,
            max_depth=max_depth or config.analysis.max_path_depth,
            limit=config.analysis.max_paths,
        )
    else:
        shortest = find_shortest_path(src.id, dst.id, doc.edges)
        paths = [shortest] if shortest is not None else []

    if as_json:
        print(json.dumps([p.to_dict() for p in paths], indent=2))
        return 0 if paths else 1

    if not paths:
        err.print(f"No connection between {src.name} and {dst.name}", style="yellow")
        return 1

    for path in paths:
        names = " → ".join(node_label(doc, step.node_id) for step in path.nodes)
        Console().print(f"[bold]{path.description}[/bold]: {names}")
        detail = describe_path(path, doc.nodes, doc.edges)
        if detail:
            Console().print(f"  {detail}", style="dim")
    return 0


def run_influence(
    state_path: Path,
    config: OrgraphConfig,
    node_ref: str,
    depth: int | None = None,
) -> int:
    """List everyone within ``depth`` hops of a person, nearest first."""
    err = Console(stderr=True)
    store = open_store(state_path, config)
    doc = store.document
    node = require_node(doc, node_ref, err)
    if node is None:
        return 1

    depth = depth or config.analysis.sphere_depth
    sphere = get_sphere_of_influence(node.id, doc.edges, depth)
    rings = group_by_proximity(node.id, doc.nodes, doc.edges, max_distance=depth)

    table = Table(title=f"Sphere of influence: {node.name} (depth {depth})")
    table.add_column("distance", justify="right")
    table.add_column("name", style="cyan")
    table.add_column("title")
    for distance in sorted(rings):
        for node_id in rings[distance]:
            person = doc.person_by_id(node_id)
            table.add_row(str(distance), node_label(doc, node_id), person.attributes.title if person else "")

    console = Console()
    console.print(table)
    centrality = calculate_centrality(node.id, doc.nodes, doc.edges)
    console.print(f"{len(sphere)} people reachable; degree centrality {centrality:.2f}")
    return 0


def run_span(
    state_path: Path,
    config: OrgraphConfig,
    node_ref: str | None = None,
    as_json: bool = False,
) -> int:
    """Span-of-control metrics for one person or the whole organization."""
    err = Console(stderr=True)
    store = open_store(state_path, config)
    doc = store.document
    thresholds = SpanThresholds.from_config(config.span)

    node_ids = None
    if node_ref is not None:
        node = require_node(doc, node_ref, err)
        if node is None:
            return 1
        node_ids = [node.id]

    metrics = calculate_span_metrics(doc.nodes, doc.edges, thresholds, node_ids=node_ids)
    if as_json:
        print(json.dumps(
            {
                "metrics": [
                    {
                        "nodeId": m.node_id,
                        "directReports": m.direct_reports,
                        "totalTeamSize": m.total_team_size,
                        "depth": m.depth,
                        "status": m.status,
                    }
                    for m in metrics
                ],
                "averageSpan": average_span(metrics),
                "distribution": span_distribution(metrics),
            },
            indent=2,
        ))
        return 0

    table = Table(title="Span of control")
    table.add_column("name", style="cyan", no_wrap=True)
    table.add_column("direct", justify="right")
    table.add_column("team", justify="right")
    table.add_column("depth", justify="right")
    table.add_column("status")
    for m in sorted(metrics, key=lambda m: (-m.direct_reports, node_label(doc, m.node_id))):
        table.add_row(
            node_label(doc, m.node_id),
            str(m.direct_reports),
            str(m.total_team_size),
            str(m.depth),
            f"[{STATUS_STYLES[m.status]}]{m.status}[/]",
        )

    console = Console()
    console.print(table)
    if node_ids is None:
        console.print(f"Average span: {average_span(metrics):.1f}")
        flagged = leaders_over_threshold(metrics)
        if flagged:
            names = ", ".join(node_label(doc, m.node_id) for m in flagged)
            console.print(f"Over {thresholds.healthy} direct reports: {names}", style="yellow")
    return 0


def run_bridges(state_path: Path, config: OrgraphConfig) -> int:
    """People whose removal would split the organization apart."""
    store = open_store(state_path, config)
    doc = store.document
    bridges = find_bridge_nodes(doc.nodes, doc.edges)
    console = Console()
    if not bridges:
        console.print("No bridge nodes", style="green")
        return 0

    table = Table(title="Bridge nodes")
    table.add_column("name", style="cyan", no_wrap=True)
    table.add_column("centrality", justify="right")
    for node_id in bridges:
        table.add_row(node_label(doc, node_id), f"{calculate_centrality(node_id, doc.nodes, doc.edges):.2f}")
    console.print(table)
    return 0


def run_suggest(
    state_path: Path,
    config: OrgraphConfig,
    node_ref: str,
    limit: int | None = None,
) -> int:
    """Suggest people a person is not yet connected to."""
    err = Console(stderr=True)
    store = open_store(state_path, config)
    doc = store.document
    node = require_node(doc, node_ref, err)
    if node is None:
        return 1

    suggestions = suggest_connections(node.id, doc.nodes, doc.edges, limit=limit or config.analysis.suggestion_limit)
    console = Console()
    if not suggestions:
        console.print(f"No suggestions for {node.name}")
        return 0

    table = Table(title=f"Suggested connections for {node.name}")
    table.add_column("name", style="cyan", no_wrap=True)
    table.add_column("score", justify="right")
    table.add_column("reason")
    for s in suggestions:
        table.add_row(node_label(doc, s.target_id), f"{s.score:.1f}", s.reason)
    console.print(table)
    return 0


def run_conflicts(state_path: Path, config: OrgraphConfig) -> int:
    """
    Matrix assignment conflicts and reporting loops.

    Returns:
        Exit code (0 = none at high level, 1 = high-level conflicts or loops)
    """
    store = open_store(state_path, config)
    doc = store.document
    conflicts = find_matrix_conflicts(doc)
    cycles = find_manager_cycles(doc.edges)
    console = Console()

    if conflicts:
        table = Table(title="Matrix conflicts")
        table.add_column("level")
        table.add_column("rule", style="cyan")
        table.add_column("name", no_wrap=True)
        table.add_column("message")
        for c in conflicts:
            table.add_row(f"[{LEVEL_STYLES[c.level]}]{c.level}[/]", c.rule, node_label(doc, c.node_id), c.message)
        console.print(table)

    for cycle in cycles:
        console.print("Reporting loop: " + " → ".join(node_label(doc, n) for n in cycle), style="bold red")

    if not conflicts and not cycles:
        console.print("No conflicts", style="green")
        return 0
    return 1 if cycles or any(c.level == "high" for c in conflicts) else 0
