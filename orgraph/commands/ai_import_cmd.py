"""Import people and relationships from an AI extraction result."""

from __future__ import annotations

import json
from pathlib import Path

from rich.console import Console
from rich.table import Table

from ..ai import (
    MERGE_STRATEGIES,
    MergeDecision,
    ParsedOrgChart,
    suggest_merge_strategies,
    validate_extraction,
)
from ..config import OrgraphConfig
from .session import commit, node_label, open_store

STRATEGY_STYLES = {
    "create-new": "green",
    "update": "yellow",
    "skip": "dim",
}


def parse_overrides(values: tuple[str, ...]) -> dict[str, str]:
    """Parse ``NAME=STRATEGY`` pairs; raises ValueError on malformed input."""
    overrides: dict[str, str] = {}
    for value in values:
        name, sep, strategy = value.rpartition("=")
        if not sep or not name.strip():
            raise ValueError(f"Expected NAME=STRATEGY, got '{value}'")
        if strategy not in MERGE_STRATEGIES:
            raise ValueError(f"Unknown merge strategy '{strategy}' (choose from {', '.join(MERGE_STRATEGIES)})")
        overrides[name.strip().lower()] = strategy
    return overrides


def _decisions_table(decisions: list[MergeDecision], document) -> Table:
    table = Table(title="Merge plan")
    table.add_column("person", style="cyan", no_wrap=True)
    table.add_column("strategy")
    table.add_column("matches")
    table.add_column("score", justify="right")
    table.add_column("notes")
    for d in decisions:
        strategy = d.strategy + (" ?" if d.requires_review else "")
        table.add_row(
            d.parsed_person.name,
            f"[{STRATEGY_STYLES[d.strategy]}]{strategy}[/]",
            node_label(document, d.existing_node_id) if d.existing_node_id else "",
            f"{d.score:.2f}" if d.score is not None else "",
            "; ".join(d.conflicts),
        )
    return table


def run_ai_import(
    state_path: Path,
    config: OrgraphConfig,
    source: Path,
    apply: bool = False,
    overrides: tuple[str, ...] = (),
) -> int:
    """
    Plan (and with ``apply`` perform) an import of extracted people.

    Uncertain matches are never resolved automatically: applying fails until
    every one of them has an explicit ``NAME=STRATEGY`` override.

    Returns:
        Exit code (0 = planned or applied, 1 = invalid extraction or unresolved review items)
    """
    err = Console(stderr=True)
    try:
        data = json.loads(source.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        err.print(f"Error: {source} is not valid JSON ({exc.msg})", style="bold red")
        return 1
    try:
        chosen = parse_overrides(overrides)
    except ValueError as exc:
        err.print(f"Error: {exc}", style="bold red")
        return 1

    chart = ParsedOrgChart.from_dict(data)
    report = validate_extraction(chart, config.duplicates.low_confidence)
    for warning in report.warnings:
        err.print(f"⚠ {warning}", style="yellow")
    if not report.is_valid:
        for error in report.errors:
            err.print(f"Error: {error}", style="bold red")
        return 1

    store = open_store(state_path, config)
    decisions = suggest_merge_strategies(chart.people, store.document.nodes, config.duplicates)
    decisions = [
        d.with_strategy(chosen[d.parsed_person.name.lower()]) if d.parsed_person.name.lower() in chosen else d
        for d in decisions
    ]
    Console().print(_decisions_table(decisions, store.document))

    unresolved = [
        d.parsed_person.name
        for d in decisions
        if d.requires_review and d.parsed_person.name.lower() not in chosen
    ]
    if not apply:
        if unresolved:
            err.print(f"{len(unresolved)} uncertain match(es) need a decision before applying", style="yellow")
        return 0
    if unresolved:
        err.print(
            "Error: uncertain matches need --override NAME=STRATEGY: " + ", ".join(unresolved),
            style="bold red",
        )
        return 1

    before = store.document.clone()
    result = store.apply_merge_decisions(decisions, report.relationships)
    commit(
        store,
        state_path,
        "ai-import",
        before,
        {
            "source": str(source),
            "created": len(result.created),
            "updated": len(result.updated),
            "skipped": len(result.skipped),
            "edges_dropped": len(result.edges_dropped),
        },
    )
    for rel in result.edges_dropped:
        err.print(f"⚠ Skipped {rel.type} relationship {rel.source} → {rel.target}", style="yellow")
    err.print(
        f"✓ Created {len(result.created)}, updated {len(result.updated)}, skipped {len(result.skipped)}; "
        f"{len(result.edges_added)} relationship(s) added",
        style="bold green",
    )
    return 0
