"""
Operation journal for state files.

Every command that changes a state file appends one JSON Lines entry to
``.orgraph/journal.log`` beside it, recording what was removed and what was
added. Undo inside a session is cheap; once a change is saved, the journal
is the only account of it.
"""

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .models import GraphDocument

JOURNAL_DIR = ".orgraph"
JOURNAL_FILE = "journal.log"


@dataclass
class Removed:
    """Nodes and edges that an operation deleted."""
    nodes: int = 0
    edges: int = 0
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class Added:
    """Nodes and edges that an operation created."""
    nodes: int = 0
    edges: int = 0
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class JournalEntry:
    timestamp: str
    operation: str
    removed: Removed
    added: Added
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "operation": self.operation,
            "removed": asdict(self.removed),
            "added": asdict(self.added),
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "JournalEntry":
        return cls(
            timestamp=data["timestamp"],
            operation=data["operation"],
            removed=Removed(**data.get("removed", {})),
            added=Added(**data.get("added", {})),
            metadata=data.get("metadata", {}),
        )


def get_journal_path(state_path: Path) -> Path:
    return state_path.parent / JOURNAL_DIR / JOURNAL_FILE


def summarize_document_change(before: GraphDocument, after: GraphDocument) -> tuple[Removed, Added]:
    """Count nodes and edges that disappeared or appeared between two documents."""
    before_nodes, after_nodes = before.node_ids(), after.node_ids()
    before_edges = {e.id for e in before.edges}
    after_edges = {e.id for e in after.edges}

    gone_nodes = sorted(before_nodes - after_nodes)
    gone_edges = sorted(before_edges - after_edges)
    new_nodes = sorted(after_nodes - before_nodes)
    new_edges = sorted(after_edges - before_edges)

    removed = Removed(nodes=len(gone_nodes), edges=len(gone_edges))
    if gone_nodes:
        removed.details["node_ids"] = gone_nodes
    added = Added(nodes=len(new_nodes), edges=len(new_edges))
    if new_nodes:
        added.details["node_ids"] = new_nodes
    return removed, added


def log_operation(
    state_path: Path,
    operation: str,
    removed: Removed | None = None,
    added: Added | None = None,
    metadata: dict[str, Any] | None = None,
) -> JournalEntry:
    """
    Append an entry to the journal.

    Args:
        state_path: Path to the state file the operation changed
        operation: Name of the operation (e.g., "remove", "ai-import")
        removed: Summary of what was deleted
        added: Summary of what was created
        metadata: Additional context (e.g., scenario id, layout mode)
    """
    entry = JournalEntry(
        timestamp=datetime.now(timezone.utc).isoformat(),
        operation=operation,
        removed=removed or Removed(),
        added=added or Added(),
        metadata=metadata or {},
    )

    log_path = get_journal_path(state_path)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    with log_path.open("a", encoding="utf-8") as f:
        f.write(json.dumps(entry.to_dict()) + "\n")

    return entry


def read_journal(state_path: Path, last_n: int | None = None) -> list[JournalEntry]:
    """Entries oldest first; malformed lines are skipped."""
    log_path = get_journal_path(state_path)
    if not log_path.exists():
        return []

    entries = []
    with log_path.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                entries.append(JournalEntry.from_dict(json.loads(line)))
            except (json.JSONDecodeError, KeyError, TypeError):
                continue

    if last_n is not None:
        return entries[-last_n:]
    return entries


def format_journal_entry(entry: JournalEntry) -> str:
    lines = [f"[{entry.timestamp}] {entry.operation}"]
    if entry.removed.nodes or entry.removed.edges:
        lines.append(f"  Removed: {entry.removed.nodes} nodes, {entry.removed.edges} edges")
    if entry.added.nodes or entry.added.edges:
        lines.append(f"  Added: {entry.added.nodes} nodes, {entry.added.edges} edges")
    for key, value in entry.metadata.items():
        lines.append(f"  {key}: {value}")
    return "\n".join(lines)
