"""Shared plumbing for commands: open a state file, resolve references, save and journal."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from rich.console import Console

from ..config import OrgraphConfig
from ..engine import GraphStore, load_state, save_state
from ..journal import log_operation, summarize_document_change
from ..models import GraphDocument, GraphNode, Scenario


def open_store(state_path: Path, config: OrgraphConfig) -> GraphStore:
    """Load the state file, printing migration warnings to stderr."""
    store, warnings = load_state(state_path, config)
    err = Console(stderr=True)
    for warning in warnings:
        err.print(f"⚠ {warning}", style="yellow")
    return store


def commit(
    store: GraphStore,
    state_path: Path,
    operation: str,
    before: GraphDocument,
    metadata: dict[str, Any] | None = None,
) -> None:
    """Save the store and journal what changed since ``before``."""
    save_state(store, state_path)
    removed, added = summarize_document_change(before, store.document)
    log_operation(state_path, operation, removed=removed, added=added, metadata=metadata)


class AmbiguousReference(LookupError):
    pass


def resolve_node(document: GraphDocument, ref: str) -> GraphNode | None:
    """Find a node by id, then by case-insensitive name.

    Raises ``AmbiguousReference`` when several nodes share the name.
    """
    node = document.node_by_id(ref)
    if node is not None:
        return node
    matches = [n for n in document.nodes if n.name.lower() == ref.lower()]
    if len(matches) > 1:
        raise AmbiguousReference(f"'{ref}' matches {len(matches)} nodes; use an id")
    return matches[0] if matches else None


def require_node(document: GraphDocument, ref: str, console: Console) -> GraphNode | None:
    """``resolve_node`` that reports failures to ``console`` and returns None."""
    try:
        node = resolve_node(document, ref)
    except AmbiguousReference as exc:
        console.print(f"Error: {exc}", style="bold red")
        return None
    if node is None:
        console.print(f"Error: node '{ref}' not found", style="bold red")
    return node


def resolve_scenario(store: GraphStore, ref: str) -> Scenario | None:
    scenario = store.scenarios.get(ref)
    if scenario is not None:
        return scenario
    matches = [s for s in store.scenarios.values() if s.name.lower() == ref.lower()]
    return matches[0] if len(matches) == 1 else None


def node_label(document: GraphDocument, node_id: str) -> str:
    node = document.node_by_id(node_id)
    return node.name if node is not None else node_id
