from pathlib import Path

from builders import document, manager_chain, person
from orgraph.journal import (
    Added,
    Removed,
    format_journal_entry,
    get_journal_path,
    log_operation,
    read_journal,
    summarize_document_change,
)


def test_journal_lives_beside_state_file(tmp_path: Path) -> None:
    state = tmp_path / "org" / "orgraph.json"
    assert get_journal_path(state) == tmp_path / "org" / ".orgraph" / "journal.log"


def test_log_and_read_back(state_path: Path) -> None:
    log_operation(state_path, "init")
    log_operation(
        state_path,
        "remove",
        removed=Removed(nodes=1, edges=2, details={"node_ids": ["c"]}),
        metadata={"node": "c"},
    )

    entries = read_journal(state_path)

    assert [e.operation for e in entries] == ["init", "remove"]
    assert entries[1].removed.nodes == 1
    assert entries[1].removed.details == {"node_ids": ["c"]}
    assert entries[1].added == Added()
    assert entries[1].metadata == {"node": "c"}
    assert [e.operation for e in read_journal(state_path, last_n=1)] == ["remove"]


def test_read_skips_malformed_lines(state_path: Path) -> None:
    log_operation(state_path, "init")
    with get_journal_path(state_path).open("a", encoding="utf-8") as f:
        f.write("not json\n\n{\"timestamp\": \"t\"}\n")
    log_operation(state_path, "import")

    assert [e.operation for e in read_journal(state_path)] == ["init", "import"]


def test_read_without_journal_is_empty(state_path: Path) -> None:
    assert read_journal(state_path) == []


def test_summarize_document_change() -> None:
    before = document(
        nodes=[person("a"), person("b"), person("c")],
        edges=manager_chain("a", "b", "c"),
    )
    after = document(
        nodes=[person("a"), person("b"), person("d")],
        edges=manager_chain("a", "b") + manager_chain("b", "d"),
    )

    removed, added = summarize_document_change(before, after)

    assert (removed.nodes, removed.edges) == (1, 1)
    assert removed.details == {"node_ids": ["c"]}
    assert (added.nodes, added.edges) == (1, 1)
    assert added.details == {"node_ids": ["d"]}


def test_unchanged_document_summarizes_to_nothing() -> None:
    doc = document(nodes=[person("a")])
    removed, added = summarize_document_change(doc, doc)

    assert removed == Removed()
    assert added == Added()


def test_format_entry(state_path: Path) -> None:
    entry = log_operation(
        state_path,
        "ai-import",
        added=Added(nodes=3, edges=2),
        metadata={"source": "chart.json"},
    )

    lines = format_journal_entry(entry).splitlines()
    assert lines[0] == f"[{entry.timestamp}] ai-import"
    assert lines[1:] == ["  Added: 3 nodes, 2 edges", "  source: chart.json"]
