import copy

import pytest

from builders import TS
from orgraph.document import parse_document, sanitize_document, validate_document
from orgraph.document.validation import IMPORTED_DOCUMENT_NAME
from orgraph.errors import ReferenceIntegrityError, ValidationError
from orgraph.lenses import LENS_ORDER
from orgraph.models import SCHEMA_VERSION


def _person(node_id: str, **attrs) -> dict:
    return {
        "id": node_id,
        "kind": "person",
        "name": node_id.upper(),
        "createdAt": TS,
        "updatedAt": TS,
        "attributes": {"title": "", "departments": [], "brands": [], "channels": [], **attrs},
    }


def _edge(edge_id: str, source: str, target: str, rel_type: str = "manager", **meta) -> dict:
    return {
        "id": edge_id,
        "source": source,
        "target": target,
        "createdAt": TS,
        "metadata": {"type": rel_type, **meta},
    }


def _doc(nodes=(), edges=(), **overrides) -> dict:
    data = {
        "schema_version": SCHEMA_VERSION,
        "metadata": {"name": "Acme", "createdAt": TS, "updatedAt": TS},
        "nodes": list(nodes),
        "edges": list(edges),
        "lens": "hierarchy",
    }
    data.update(overrides)
    return data


def test_minimal_document_is_valid() -> None:
    assert validate_document(_doc()) == []


def test_dangling_edge_raises_reference_error_naming_edge_and_node() -> None:
    data = _doc(nodes=[_person("a")], edges=[_edge("e1", "a", "x")])

    with pytest.raises(ReferenceIntegrityError) as exc_info:
        parse_document(data)

    issues = exc_info.value.issues
    assert len(issues) == 1
    assert issues[0].category == "dangling-reference"
    assert issues[0].edge_id == "e1"
    assert issues[0].node_id == "x"
    assert "e1" in str(exc_info.value)
    assert "x" in str(exc_info.value)


def test_duplicate_node_id_is_a_plain_validation_error() -> None:
    data = _doc(nodes=[_person("a"), _person("a")])

    with pytest.raises(ValidationError) as exc_info:
        parse_document(data)

    assert not isinstance(exc_info.value, ReferenceIntegrityError)
    assert [i.category for i in exc_info.value.issues] == ["duplicate-id"]


def test_every_issue_is_reported_not_just_the_first() -> None:
    data = _doc(
        nodes=[_person("a"), {"id": "b", "kind": "robot", "name": "B", "createdAt": TS, "updatedAt": TS}],
        edges=[_edge("e1", "a", "missing"), _edge("e2", "a", "b", "friend")],
        lens="nope",
    )

    issues = validate_document(data)
    categories = {i.category for i in issues}
    paths = {i.path for i in issues}

    assert "dangling-reference" in categories
    assert "malformed-document" in categories
    assert "nodes[1].kind" in paths
    assert "edges[1].metadata.type" in paths
    assert "lens" in paths


def test_mixed_issues_are_not_reported_as_reference_error() -> None:
    data = _doc(nodes=[_person("a")], edges=[_edge("e1", "a", "x")], lens="nope")

    with pytest.raises(ValidationError) as exc_info:
        parse_document(data)

    assert not isinstance(exc_info.value, ReferenceIntegrityError)
    assert len(exc_info.value.issues) == 2


def test_unsupported_schema_version() -> None:
    issues = validate_document(_doc(schema_version="1999.01.01"))
    assert [i.path for i in issues] == ["schema_version"]


def test_empty_organization_name_is_rejected() -> None:
    data = _doc()
    data["metadata"]["name"] = ""
    issues = validate_document(data)
    assert issues[0].message == "Organization name cannot be empty"


def test_non_object_document() -> None:
    issues = validate_document(["not", "a", "document"])
    assert len(issues) == 1
    assert issues[0].category == "malformed-document"


def test_malformed_lens_state_is_reported() -> None:
    data = _doc(lens_state={"hierarchy": {"layout": {"id": "brand", "positions": {"a": {"x": "1", "y": 2}}}}})
    issues = validate_document(data)
    assert {i.category for i in issues} == {"malformed-lens-state"}
    assert len(issues) == 2


def test_validation_does_not_mutate_input() -> None:
    data = _doc(nodes=[_person("a")], edges=[_edge("e1", "a", "x")])
    snapshot = copy.deepcopy(data)
    validate_document(data)
    assert data == snapshot


def test_sanitize_fills_lens_state_and_defaults() -> None:
    data = _doc(nodes=[_person("a")])
    document = sanitize_document(data)

    assert list(document.lens_state) == LENS_ORDER
    assert document.nodes[0].attributes.tags == []
    assert "lens_state" not in data


def test_sanitize_drops_unknown_edge_lenses() -> None:
    data = _doc(nodes=[_person("a"), _person("b")], edges=[_edge("e1", "a", "b", lenses=["brand", "galaxy"])])
    document = parse_document(data)
    assert document.edges[0].metadata.lenses == ["brand"]


def test_sanitize_replaces_blank_name() -> None:
    data = _doc()
    data["metadata"]["name"] = "   "
    assert parse_document(data).metadata.name == IMPORTED_DOCUMENT_NAME


def test_sanitize_preserves_timestamps() -> None:
    data = _doc(nodes=[_person("a")])
    document = parse_document(data)
    assert document.metadata.updated_at == TS
    assert document.nodes[0].updated_at == TS
