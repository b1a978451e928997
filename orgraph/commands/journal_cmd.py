"""Show the operation journal for a state file."""

from __future__ import annotations

import json
from pathlib import Path

from rich.console import Console

from ..journal import format_journal_entry, get_journal_path, read_journal


def run_journal(state_path: Path, last_n: int | None = None, as_json: bool = False) -> int:
    """
    Print journal entries, oldest first.

    Args:
        state_path: State file whose journal to read
        last_n: Only the most recent N entries
        as_json: Emit entries as a JSON array
    """
    entries = read_journal(state_path, last_n)
    if as_json:
        print(json.dumps([e.to_dict() for e in entries], indent=2))
        return 0

    console = Console()
    if not entries:
        console.print(f"No journal entries at {get_journal_path(state_path)}")
        return 0
    for entry in entries:
        console.print(format_journal_entry(entry), highlight=False)
    return 0
