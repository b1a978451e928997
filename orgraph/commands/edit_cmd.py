"""Editing commands: add people, connect and disconnect, remove, lay out."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console

from ..config import OrgraphConfig
from ..document.templates import get_template
from ..engine import AddPersonPayload
from ..errors import CycleRiskError
from .session import commit, open_store, require_node


def run_add_person(
    state_path: Path,
    config: OrgraphConfig,
    name: str | None = None,
    title: str | None = None,
    brands: tuple[str, ...] = (),
    channels: tuple[str, ...] = (),
    departments: tuple[str, ...] = (),
    tags: tuple[str, ...] = (),
    location: str | None = None,
    tier: str | None = None,
    reports_to: str | None = None,
    template: str | None = None,
) -> int:
    """
    Add a person, optionally wiring a manager edge from ``reports_to``.

    A role ``template`` fills in name, title and tier; explicit values win.

    Returns:
        Exit code (0 = added, 1 = manager or template not found, 2 = no name)
    """
    err = Console(stderr=True)
    role = None
    if template is not None:
        role = get_template(template)
        if role is None:
            err.print(f"[bold red]Unknown role template:[/bold red] {template}")
            return 1
    elif name is None:
        err.print("[bold red]Error:[/bold red] a name is required unless --template is given")
        return 2

    store = open_store(state_path, config)
    before = store.document.clone()

    manager = None
    if reports_to is not None:
        manager = require_node(store.document, reports_to, err)
        if manager is None:
            return 1

    values = dict(
        name=name,
        title=title,
        brands=list(brands) or None,
        channels=list(channels) or None,
        departments=list(departments) or None,
        primary_brand=brands[0] if brands else None,
        primary_channel=channels[0] if channels else None,
        primary_department=departments[0] if departments else None,
        tags=list(tags),
        location=location,
        tier=tier,
    )
    if role is not None:
        payload = AddPersonPayload.from_template(role, **values)
    else:
        payload = AddPersonPayload(**{k: v for k, v in values.items() if v is not None})
    node_id = store.add_person(payload)
    if manager is not None:
        # a brand-new node cannot close a loop
        store.add_relationship(manager.id, node_id, "manager")

    commit(store, state_path, "add-person", before, {"name": payload.name})
    print(node_id)
    return 0


def run_connect(
    state_path: Path,
    config: OrgraphConfig,
    source: str,
    target: str,
    rel_type: str = "manager",
    label: str | None = None,
) -> int:
    """
    Create a relationship; for ``manager`` the source manages the target.

    Returns:
        Exit code (0 = connected, 1 = unknown node, self-loop or reporting loop)
    """
    err = Console(stderr=True)
    store = open_store(state_path, config)
    src = require_node(store.document, source, err)
    dst = require_node(store.document, target, err)
    if src is None or dst is None:
        return 1

    before = store.document.clone()
    meta = {"label": label} if label else {}
    try:
        edge_id = store.add_relationship(src.id, dst.id, rel_type, **meta)
    except CycleRiskError as exc:
        err.print(f"Error: {exc}", style="bold red")
        return 1
    if edge_id is None:
        err.print("Error: a node cannot be connected to itself", style="bold red")
        return 1

    commit(store, state_path, "connect", before, {"type": rel_type, "edge_id": edge_id})
    err.print(f"{src.name} → {dst.name} ({rel_type})", style="green")
    print(edge_id)
    return 0


def run_disconnect(
    state_path: Path,
    config: OrgraphConfig,
    source: str,
    target: str,
    rel_type: str | None = None,
) -> int:
    """Remove every edge from ``source`` to ``target`` (of ``rel_type`` when given)."""
    err = Console(stderr=True)
    store = open_store(state_path, config)
    src = require_node(store.document, source, err)
    dst = require_node(store.document, target, err)
    if src is None or dst is None:
        return 1

    edge_ids = [
        e.id
        for e in store.document.edges
        if e.source == src.id and e.target == dst.id and (rel_type is None or e.type == rel_type)
    ]
    if not edge_ids:
        err.print(f"No relationship from {src.name} to {dst.name}", style="yellow")
        return 1

    before = store.document.clone()
    for edge_id in edge_ids:
        store.remove_relationship(edge_id)
    commit(store, state_path, "disconnect", before, {"edge_ids": edge_ids})
    err.print(f"Removed {len(edge_ids)} relationship(s)", style="green")
    return 0


def run_remove(state_path: Path, config: OrgraphConfig, node_ref: str) -> int:
    """Delete a node with its edges, positions, group memberships and selection."""
    err = Console(stderr=True)
    store = open_store(state_path, config)
    node = require_node(store.document, node_ref, err)
    if node is None:
        return 1

    before = store.document.clone()
    store.remove_node(node.id)
    commit(store, state_path, "remove", before, {"name": node.name})
    err.print(f"Removed {node.name}", style="green")
    return 0


def run_layout(
    state_path: Path,
    config: OrgraphConfig,
    lens: str | None = None,
    cleanup: str | None = None,
) -> int:
    """
    Recompute positions for a lens.

    Args:
        lens: Lens to lay out (default: the document's active lens)
        cleanup: "compact" or "spacious" to tidy the existing arrangement
            instead of running the full hierarchy layout
    """
    err = Console(stderr=True)
    store = open_store(state_path, config)
    before = store.document.clone()
    try:
        if cleanup is None:
            store.auto_layout(lens)
        else:
            store.cleanup_canvas(lens, cleanup)
    except ValueError as exc:
        err.print(f"Error: {exc}", style="bold red")
        return 1

    lens_id = lens or store.document.lens
    commit(store, state_path, "layout", before, {"lens": lens_id, "mode": cleanup or "auto"})
    placed = len(store.document.ensure_lens_state(lens_id).layout.positions)
    err.print(f"Laid out {placed} node(s) in the {lens_id} lens", style="green")
    return 0
