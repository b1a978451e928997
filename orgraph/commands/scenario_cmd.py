"""Scenario commands: create, list, switch, delete, diff."""

from __future__ import annotations

import json
from pathlib import Path

from rich.console import Console
from rich.table import Table

from ..config import OrgraphConfig
from ..errors import ScenarioNotFoundError
from ..scenario import categorize_changes, describe_node_change
from .session import commit, open_store, resolve_scenario

SEVERITY_STYLES = {
    "high": "bold red",
    "medium": "yellow",
    "low": "dim",
}


def run_scenario_create(
    state_path: Path,
    config: OrgraphConfig,
    name: str,
    description: str | None = None,
    empty: bool = False,
) -> int:
    """Snapshot the live document (or an empty one) as a new scenario."""
    store = open_store(state_path, config)
    before = store.document.clone()
    store.save_active_scenario()
    scenario_id = store.create_scenario(name, description, copy_from_current=not empty)
    commit(store, state_path, "scenario-create", before, {"scenario_id": scenario_id, "name": name})
    Console(stderr=True).print(f"Created scenario '{name}'", style="green")
    print(scenario_id)
    return 0


def run_scenario_list(state_path: Path, config: OrgraphConfig) -> int:
    store = open_store(state_path, config)
    console = Console()
    if not store.scenarios:
        console.print("No scenarios")
        return 0

    table = Table(title="Scenarios")
    table.add_column("", width=1)
    table.add_column("scenario_id", style="cyan", no_wrap=True)
    table.add_column("name")
    table.add_column("nodes", justify="right")
    table.add_column("edges", justify="right")
    table.add_column("created_at")
    for scenario in sorted(store.scenarios.values(), key=lambda s: s.created_at):
        table.add_row(
            "*" if scenario.id == store.active_scenario_id else "",
            scenario.id,
            scenario.name,
            str(len(scenario.document.nodes)),
            str(len(scenario.document.edges)),
            scenario.created_at,
        )
    console.print(table)
    return 0


def run_scenario_switch(state_path: Path, config: OrgraphConfig, scenario_ref: str) -> int:
    """
    Save the live document into the active scenario, then load another.

    Returns:
        Exit code (0 = switched, 1 = unknown scenario)
    """
    err = Console(stderr=True)
    store = open_store(state_path, config)
    scenario = resolve_scenario(store, scenario_ref)
    if scenario is None:
        err.print(f"Error: {ScenarioNotFoundError(scenario_ref)}", style="bold red")
        return 1

    before = store.document.clone()
    store.save_active_scenario()
    store.switch_scenario(scenario.id)
    commit(store, state_path, "scenario-switch", before, {"scenario_id": scenario.id})
    err.print(f"Switched to '{scenario.name}'", style="green")
    return 0


def run_scenario_delete(state_path: Path, config: OrgraphConfig, scenario_ref: str) -> int:
    err = Console(stderr=True)
    store = open_store(state_path, config)
    scenario = resolve_scenario(store, scenario_ref)
    if scenario is None:
        err.print(f"Error: {ScenarioNotFoundError(scenario_ref)}", style="bold red")
        return 1

    before = store.document.clone()
    store.delete_scenario(scenario.id)
    commit(store, state_path, "scenario-delete", before, {"scenario_id": scenario.id})
    err.print(f"Deleted '{scenario.name}'", style="green")
    return 0


def run_scenario_diff(
    state_path: Path,
    config: OrgraphConfig,
    base_ref: str,
    target_ref: str,
    as_json: bool = False,
) -> int:
    """
    Compare two scenarios and list what changed from base to target.

    Returns:
        Exit code (0 = compared, 1 = unknown scenario)
    """
    err = Console(stderr=True)
    store = open_store(state_path, config)
    store.save_active_scenario()
    base = resolve_scenario(store, base_ref)
    target = resolve_scenario(store, target_ref)
    for ref, scenario in ((base_ref, base), (target_ref, target)):
        if scenario is None:
            err.print(f"Error: {ScenarioNotFoundError(ref)}", style="bold red")
            return 1

    comparison = store.compare_scenarios(base.id, target.id)
    diff = comparison.diff
    categories = categorize_changes(diff)

    if as_json:
        print(json.dumps(
            {
                "base": base.id,
                "target": target.id,
                "summary": diff.summary.to_dict(),
                "affectedNodeIds": sorted(comparison.affected_node_ids),
                "affectedEdgeIds": sorted(comparison.affected_edge_ids),
                "categories": [
                    {
                        "type": c.type,
                        "changes": [
                            {
                                "description": ch.description,
                                "nodeIds": ch.node_ids,
                                "edgeIds": ch.edge_ids,
                                "severity": ch.severity,
                            }
                            for ch in c.changes
                        ],
                    }
                    for c in categories
                ],
            },
            indent=2,
        ))
        return 0

    console = Console()
    console.print(f"[bold]{base.name}[/bold] → [bold]{target.name}[/bold]")
    if diff.summary.total == 0:
        console.print("No differences", style="green")
        return 0

    s = diff.summary
    console.print(
        f"People: +{s.nodes_added} -{s.nodes_removed} ~{s.nodes_modified}   "
        f"Relationships: +{s.edges_added} -{s.edges_removed} ~{s.edges_modified}"
    )

    table = Table(title="People")
    table.add_column("name", style="cyan", no_wrap=True)
    table.add_column("change")
    for node_diff in diff.nodes:
        if node_diff.type != "unchanged":
            table.add_row(node_diff.node.name, describe_node_change(node_diff))
    if table.row_count:
        console.print(table)

    for category in categories:
        if category.type == "people":
            continue
        console.print(f"[bold]{category.type.capitalize()}[/bold]")
        for change in category.changes:
            console.print(f"  [{SEVERITY_STYLES[change.severity]}]{change.severity:<6}[/] {change.description}")
    return 0
