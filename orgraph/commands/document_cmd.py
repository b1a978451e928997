"""Document lifecycle commands: init, validate, import, export."""

from __future__ import annotations

import json
from pathlib import Path

from rich.console import Console
from rich.table import Table

from ..config import OrgraphConfig
from ..document import document_to_json, validate_document
from ..document.conflicts import find_matrix_conflicts
from ..engine import GraphStore
from ..errors import ValidationError
from ..graph.network import find_manager_cycles
from ..models import GraphDocument
from .session import commit, node_label, open_store


def _issues_table(issues) -> Table:
    table = Table(title="Validation issues")
    table.add_column("category", style="red")
    table.add_column("path", style="cyan")
    table.add_column("message")
    for issue in issues:
        table.add_row(issue.category, issue.path, issue.message)
    return table


def run_init(state_path: Path, config: OrgraphConfig, name: str, force: bool = False) -> int:
    """Create a state file holding an empty organization.

    Returns:
        Exit code (0 = created, 1 = state file already exists)
    """
    console = Console(stderr=True)
    if state_path.exists() and not force:
        console.print(f"Error: {state_path} already exists (use --force to overwrite)", style="bold red")
        return 1

    store = GraphStore(config=config)
    before = store.document.clone()
    store.reset(name=name)
    commit(store, state_path, "init", before, {"name": name})
    console.print(f"Initialized '{name}' in {state_path}", style="green")
    return 0


def run_validate(source: Path) -> int:
    """Check a document file without importing it.

    Structural issues fail the check; reporting loops and matrix conflicts
    are listed as advisories only.
    """
    console = Console()
    err = Console(stderr=True)
    try:
        data = json.loads(source.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        err.print(f"Error: {source} is not valid JSON ({exc.msg}, line {exc.lineno})", style="bold red")
        return 1

    issues = validate_document(data)
    if issues:
        console.print(_issues_table(issues))
        err.print(f"✗ {len(issues)} issue(s) found", style="bold red")
        return 1

    document = GraphDocument.from_dict(data)
    for cycle in find_manager_cycles(document.edges):
        names = " → ".join(node_label(document, n) for n in cycle)
        err.print(f"⚠ Reporting loop: {names}", style="yellow")
    conflicts = find_matrix_conflicts(document)
    if conflicts:
        err.print(f"⚠ {len(conflicts)} matrix conflict(s); run 'orgraph conflicts' after import", style="yellow")

    err.print(
        f"✓ {source} is valid ({len(document.nodes)} nodes, {len(document.edges)} edges)",
        style="bold green",
    )
    return 0


def run_import(state_path: Path, config: OrgraphConfig, source: Path) -> int:
    """Replace the live document with a validated document file."""
    err = Console(stderr=True)
    try:
        data = json.loads(source.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        err.print(f"Error: {source} is not valid JSON ({exc.msg})", style="bold red")
        return 1

    store = open_store(state_path, config)
    before = store.document.clone()
    try:
        store.import_document(data)
    except ValidationError as exc:
        Console().print(_issues_table(exc.issues))
        err.print(f"✗ Import rejected: {len(exc.issues)} issue(s)", style="bold red")
        return 1

    commit(store, state_path, "import", before, {"source": str(source)})
    err.print(
        f"✓ Imported '{store.document.metadata.name}' "
        f"({len(store.document.nodes)} nodes, {len(store.document.edges)} edges)",
        style="green",
    )
    return 0


def run_export(state_path: Path, config: OrgraphConfig, out: Path | None) -> int:
    """Write the live document as JSON to ``out`` (stdout when None)."""
    store = open_store(state_path, config)
    text = document_to_json(store.export_document())
    if out is None:
        print(text, end="")
        return 0
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(text, encoding="utf-8")
    Console(stderr=True).print(f"Exported to {out}", style="green")
    return 0
