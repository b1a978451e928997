"""JSON import/export of documents."""

from __future__ import annotations

import json
from pathlib import Path

from ..errors import ValidationError
from ..models import GraphDocument
from .validation import ValidationIssue, parse_document


def document_to_json(document: GraphDocument) -> str:
    return json.dumps(document.to_dict(), indent=2) + "\n"


def document_from_json(text: str) -> GraphDocument:
    """Parse and validate a serialized document; invalid JSON counts as a validation failure."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValidationError(
            [ValidationIssue(category="malformed-document", message=f"Invalid JSON: {exc.msg}", path=f"line {exc.lineno}")]
        ) from exc
    return parse_document(data)


def load_document(path: Path) -> GraphDocument:
    return document_from_json(path.read_text(encoding="utf-8"))


def save_document(document: GraphDocument, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(document_to_json(document), encoding="utf-8")
