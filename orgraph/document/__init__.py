"""Document construction, validation and serialization."""

from .defaults import (
    build_default_lens_state,
    create_empty_document,
    create_layout_state,
    create_lens_state,
)
from .validation import (
    ValidationIssue,
    parse_document,
    sanitize_document,
    validate_document,
)
from .conflicts import MatrixConflict, find_matrix_conflicts
from .templates import ROLE_TEMPLATES, TEMPLATE_IDS, RoleTemplate, get_template
from .io import document_from_json, document_to_json, load_document, save_document

__all__ = [
    "build_default_lens_state",
    "create_empty_document",
    "create_layout_state",
    "create_lens_state",
    "ValidationIssue",
    "parse_document",
    "sanitize_document",
    "validate_document",
    "MatrixConflict",
    "find_matrix_conflicts",
    "ROLE_TEMPLATES",
    "TEMPLATE_IDS",
    "RoleTemplate",
    "get_template",
    "document_from_json",
    "document_to_json",
    "load_document",
    "save_document",
]
