"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from builders import document, manager_chain, person
from orgraph.engine import GraphStore
from orgraph.models import GraphDocument


@pytest.fixture
def chain_document() -> GraphDocument:
    """Three people A -> B -> C joined by manager edges (A manages B, B manages C)."""
    return document(
        nodes=[
            person("a", "Ada", title="CEO", tier="c-suite"),
            person("b", "Ben", title="VP Sales", tier="vp"),
            person("c", "Cy", title="Sales Manager", tier="manager"),
        ],
        edges=manager_chain("a", "b", "c"),
    )


@pytest.fixture
def chain_store(chain_document: GraphDocument) -> GraphStore:
    return GraphStore(chain_document)


@pytest.fixture
def state_path(tmp_path: Path) -> Path:
    """State file location inside a scratch directory."""
    return tmp_path / "orgraph.json"
