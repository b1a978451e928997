"""
Structural validation of serialized documents.

Validation walks the raw JSON-compatible value and reports every violation
it finds; it never mutates its input. ``sanitize_document`` runs after a
clean validation and fills optional defaults. ``parse_document`` is the
import boundary: validate, then sanitize, or reject the whole document.

Manager-edge cycles are not an import-time violation; see
``orgraph.graph.network.find_manager_cycles``.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Literal

from ..errors import ReferenceIntegrityError, ValidationError
from ..lenses import LENS_ORDER, is_lens_id
from ..models import (
    NODE_KINDS,
    RELATIONSHIP_TYPES,
    ROLE_TIERS,
    SCHEMA_VERSION,
    GraphDocument,
    utc_now,
)

IssueCategory = Literal[
    "duplicate-id",
    "dangling-reference",
    "malformed-lens-state",
    "malformed-document",
]

IMPORTED_DOCUMENT_NAME = "Imported Organization"


@dataclass
class ValidationIssue:
    """A single structural violation."""

    category: IssueCategory
    message: str
    path: str = ""
    edge_id: str | None = None
    node_id: str | None = None

    def __str__(self) -> str:
        loc = f" {self.path}" if self.path else ""
        return f"[{self.category}]{loc} - {self.message}"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_str_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(v, str) for v in value)


class _Checker:
    """Accumulates issues while walking one document."""

    def __init__(self) -> None:
        self.issues: list[ValidationIssue] = []

    def add(self, category: IssueCategory, path: str, message: str, **ids: str | None) -> None:
        self.issues.append(ValidationIssue(category=category, message=message, path=path, **ids))

    def require_str(self, obj: dict, key: str, path: str, *, category: IssueCategory = "malformed-document") -> None:
        if not isinstance(obj.get(key), str):
            self.add(category, f"{path}.{key}", f"'{key}' must be a string")

    def optional(self, obj: dict, key: str, path: str, check, expected: str, *, category: IssueCategory = "malformed-document") -> None:
        if key in obj and obj[key] is not None and not check(obj[key]):
            self.add(category, f"{path}.{key}", f"'{key}' must be {expected}")


def validate_document(data: Any) -> list[ValidationIssue]:
    """Return every structural violation in ``data`` (empty list when valid)."""
    c = _Checker()

    if not isinstance(data, dict):
        c.add("malformed-document", "", "Document must be a JSON object")
        return c.issues

    if data.get("schema_version") != SCHEMA_VERSION:
        c.add(
            "malformed-document",
            "schema_version",
            f"Unsupported schema version {data.get('schema_version')!r} (expected {SCHEMA_VERSION!r})",
        )

    _check_metadata(c, data.get("metadata"))
    node_ids = _check_nodes(c, data.get("nodes"))
    _check_edges(c, data.get("edges"), node_ids)

    if not is_lens_id(data.get("lens")):
        c.add("malformed-document", "lens", f"Unknown lens {data.get('lens')!r}")

    _check_lens_states(c, data.get("lens_state"))

    return c.issues


def _check_metadata(c: _Checker, metadata: Any) -> None:
    if not isinstance(metadata, dict):
        c.add("malformed-document", "metadata", "'metadata' must be an object")
        return
    name = metadata.get("name")
    if not isinstance(name, str):
        c.add("malformed-document", "metadata.name", "'name' must be a string")
    elif len(name) == 0:
        c.add("malformed-document", "metadata.name", "Organization name cannot be empty")
    c.require_str(metadata, "createdAt", "metadata")
    c.require_str(metadata, "updatedAt", "metadata")
    c.optional(metadata, "description", "metadata", lambda v: isinstance(v, str), "a string")
    c.optional(metadata, "author", "metadata", lambda v: isinstance(v, str), "a string")


def _check_nodes(c: _Checker, nodes: Any) -> set[str]:
    """Check node shapes and id uniqueness; return the set of node ids seen."""
    seen: set[str] = set()
    if not isinstance(nodes, list):
        c.add("malformed-document", "nodes", "'nodes' must be a list")
        return seen

    for i, node in enumerate(nodes):
        path = f"nodes[{i}]"
        if not isinstance(node, dict):
            c.add("malformed-document", path, "Node must be an object")
            continue

        node_id = node.get("id")
        if not isinstance(node_id, str):
            c.add("malformed-document", f"{path}.id", "'id' must be a string")
        elif node_id in seen:
            c.add("duplicate-id", "nodes", f"Duplicate node id detected: {node_id}", node_id=node_id)
        else:
            seen.add(node_id)

        c.require_str(node, "name", path)
        c.require_str(node, "createdAt", path)
        c.require_str(node, "updatedAt", path)

        kind = node.get("kind")
        if kind not in NODE_KINDS:
            c.add("malformed-document", f"{path}.kind", f"Unknown node kind {kind!r}")
        elif kind == "person":
            _check_person(c, node, path)
        else:
            c.optional(node, "color", path, lambda v: isinstance(v, str), "a string")
            c.optional(node, "collapsed", path, lambda v: isinstance(v, bool), "a boolean")
            c.optional(node, "memberIds", path, _is_str_list, "a list of strings")

    return seen


def _check_person(c: _Checker, node: dict, path: str) -> None:
    c.optional(node, "locked", path, lambda v: isinstance(v, bool), "a boolean")

    attrs = node.get("attributes")
    apath = f"{path}.attributes"
    if not isinstance(attrs, dict):
        c.add("malformed-document", apath, "'attributes' must be an object")
        return

    c.require_str(attrs, "title", apath)
    for key in ("departments", "brands", "channels"):
        if not _is_str_list(attrs.get(key)):
            c.add("malformed-document", f"{apath}.{key}", f"'{key}' must be a list of strings")
    c.optional(attrs, "tags", apath, _is_str_list, "a list of strings")
    for key in (
        "primaryDepartment",
        "primaryBrand",
        "primaryChannel",
        "location",
        "costCenter",
        "notes",
        "jobDescription",
    ):
        c.optional(attrs, key, apath, lambda v: isinstance(v, str), "a string")
    c.optional(attrs, "tier", apath, lambda v: v in ROLE_TIERS, f"one of {', '.join(ROLE_TIERS)}")


def _check_edges(c: _Checker, edges: Any, node_ids: set[str]) -> None:
    if not isinstance(edges, list):
        c.add("malformed-document", "edges", "'edges' must be a list")
        return

    seen: set[str] = set()
    for i, edge in enumerate(edges):
        path = f"edges[{i}]"
        if not isinstance(edge, dict):
            c.add("malformed-document", path, "Edge must be an object")
            continue

        edge_id = edge.get("id")
        if not isinstance(edge_id, str):
            c.add("malformed-document", f"{path}.id", "'id' must be a string")
            edge_id = None
        elif edge_id in seen:
            c.add("duplicate-id", "edges", f"Duplicate edge id detected: {edge_id}", edge_id=edge_id)
        else:
            seen.add(edge_id)

        for end in ("source", "target"):
            ref = edge.get(end)
            if not isinstance(ref, str):
                c.add("malformed-document", f"{path}.{end}", f"'{end}' must be a string")
            elif ref not in node_ids:
                c.add(
                    "dangling-reference",
                    "edges",
                    f"Edge {edge_id} references missing {end} node {ref}",
                    edge_id=edge_id,
                    node_id=ref,
                )

        c.require_str(edge, "createdAt", path)
        c.optional(edge, "updatedAt", path, lambda v: isinstance(v, str), "a string")

        meta = edge.get("metadata")
        mpath = f"{path}.metadata"
        if not isinstance(meta, dict):
            c.add("malformed-document", mpath, "'metadata' must be an object")
            continue
        if meta.get("type") not in RELATIONSHIP_TYPES:
            c.add("malformed-document", f"{mpath}.type", f"Unknown relationship type {meta.get('type')!r}")
        c.optional(meta, "weight", mpath, _is_number, "a number")
        c.optional(meta, "label", mpath, lambda v: isinstance(v, str), "a string")
        c.optional(meta, "lenses", mpath, _is_str_list, "a list of lens ids")
        c.optional(meta, "colorToken", mpath, lambda v: isinstance(v, str), "a string")
        c.optional(meta, "ghost", mpath, lambda v: isinstance(v, bool), "a boolean")


def _check_lens_states(c: _Checker, lens_state: Any) -> None:
    if lens_state is None:
        return  # filled in by sanitize
    if not isinstance(lens_state, dict):
        c.add("malformed-lens-state", "lens_state", "'lens_state' must be an object keyed by lens id")
        return

    for lens_id, state in lens_state.items():
        path = f"lens_state.{lens_id}"
        if not is_lens_id(lens_id):
            c.add("malformed-lens-state", path, f"Unknown lens {lens_id!r}")
        if not isinstance(state, dict):
            c.add("malformed-lens-state", path, "Lens state must be an object")
            continue

        layout = state.get("layout")
        if layout is not None:
            _check_layout(c, lens_id, layout, f"{path}.layout")

        filters = state.get("filters")
        if filters is not None:
            if not isinstance(filters, dict):
                c.add("malformed-lens-state", f"{path}.filters", "'filters' must be an object")
            else:
                for key in ("activeTokens", "focusIds", "hiddenIds"):
                    c.optional(filters, key, f"{path}.filters", _is_str_list, "a list of strings", category="malformed-lens-state")


def _check_layout(c: _Checker, lens_id: str, layout: Any, path: str) -> None:
    if not isinstance(layout, dict):
        c.add("malformed-lens-state", path, "'layout' must be an object")
        return

    if layout.get("id") != lens_id:
        c.add("malformed-lens-state", f"{path}.id", f"Layout id {layout.get('id')!r} does not match lens {lens_id!r}")

    positions = layout.get("positions")
    if positions is not None:
        if not isinstance(positions, dict):
            c.add("malformed-lens-state", f"{path}.positions", "'positions' must be an object")
        else:
            for node_id, pos in positions.items():
                if not (isinstance(pos, dict) and _is_number(pos.get("x")) and _is_number(pos.get("y"))):
                    c.add("malformed-lens-state", f"{path}.positions.{node_id}", "Position must be {x, y} numbers")

    viewport = layout.get("viewport")
    if viewport is not None and not (
        isinstance(viewport, dict) and all(_is_number(viewport.get(k)) for k in ("x", "y", "zoom"))
    ):
        c.add("malformed-lens-state", f"{path}.viewport", "Viewport must be {x, y, zoom} numbers")

    c.optional(layout, "snapToGrid", path, lambda v: isinstance(v, bool), "a boolean", category="malformed-lens-state")
    c.optional(layout, "showGrid", path, lambda v: isinstance(v, bool), "a boolean", category="malformed-lens-state")
    c.optional(layout, "lastUpdated", path, lambda v: isinstance(v, str), "a string", category="malformed-lens-state")


# -----------------------------------------------------------------------------
# Sanitize
# -----------------------------------------------------------------------------


def _default_layout_dict(lens_id: str, timestamp: str) -> dict[str, Any]:
    return {
        "id": lens_id,
        "positions": {},
        "viewport": {"x": 0, "y": 0, "zoom": 1},
        "snapToGrid": False,
        "showGrid": True,
        "lastUpdated": timestamp,
    }


def _ensure_lens_state_defaults(doc: dict[str, Any], timestamp: str) -> None:
    lens_state = doc.setdefault("lens_state", {})
    if lens_state is None:
        lens_state = doc["lens_state"] = {}

    for lens_id in LENS_ORDER + [doc["lens"]]:
        current = lens_state.get(lens_id)
        if current is None:
            lens_state[lens_id] = {
                "layout": _default_layout_dict(lens_id, timestamp),
                "filters": {"activeTokens": [], "focusIds": [], "hiddenIds": []},
            }
            continue

        layout = current.get("layout")
        if layout is None:
            current["layout"] = _default_layout_dict(lens_id, timestamp)
        else:
            defaults = _default_layout_dict(lens_id, timestamp)
            for key, value in defaults.items():
                if layout.get(key) is None:
                    layout[key] = value

        filters = current.get("filters")
        if filters is None:
            current["filters"] = {"activeTokens": [], "focusIds": [], "hiddenIds": []}
        else:
            for key in ("activeTokens", "focusIds", "hiddenIds"):
                if filters.get(key) is None:
                    filters[key] = []


def sanitize_document(data: dict[str, Any]) -> GraphDocument:
    """Fill optional defaults on a validated document and build the typed model.

    Does not touch ``data``. Existing timestamps are preserved so that a
    serialize/parse round trip is lossless.
    """
    doc = copy.deepcopy(data)
    timestamp = utc_now()

    _ensure_lens_state_defaults(doc, timestamp)

    metadata = doc["metadata"]
    metadata["name"] = metadata["name"].strip() or IMPORTED_DOCUMENT_NAME
    metadata["updatedAt"] = metadata.get("updatedAt") or timestamp

    for node in doc["nodes"]:
        node["updatedAt"] = node.get("updatedAt") or timestamp
        if node["kind"] == "person":
            if node["attributes"].get("tags") is None:
                node["attributes"]["tags"] = []
        elif node.get("memberIds") is None:
            node["memberIds"] = []

    for edge in doc["edges"]:
        edge["updatedAt"] = edge.get("updatedAt") or timestamp
        lenses = edge["metadata"].get("lenses")
        if lenses is not None:
            edge["metadata"]["lenses"] = [lens for lens in lenses if is_lens_id(lens)]

    return GraphDocument.from_dict(doc)


def parse_document(data: Any) -> GraphDocument:
    """Validate and sanitize ``data``; reject it wholesale on any violation."""
    issues = validate_document(data)
    if issues:
        if all(issue.category == "dangling-reference" for issue in issues):
            raise ReferenceIntegrityError(issues)
        raise ValidationError(issues)
    return sanitize_document(data)
