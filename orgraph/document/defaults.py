"""Default values for documents and lens state."""

from __future__ import annotations

from ..lenses import DEFAULT_LENS, LENS_ORDER
from ..models import (
    DocumentMetadata,
    GraphDocument,
    LayoutState,
    LensFilterState,
    LensState,
    Viewport,
    utc_now,
)

DEFAULT_DOCUMENT_NAME = "Untitled Organization"


def create_layout_state(lens: str) -> LayoutState:
    return LayoutState(
        id=lens,
        positions={},
        viewport=Viewport(x=0, y=0, zoom=1),
        snap_to_grid=False,
        show_grid=True,
        last_updated=utc_now(),
    )


def create_lens_state(lens: str) -> LensState:
    return LensState(layout=create_layout_state(lens), filters=LensFilterState())


def build_default_lens_state() -> dict[str, LensState]:
    return {lens: create_lens_state(lens) for lens in LENS_ORDER}


def create_empty_document(name: str = DEFAULT_DOCUMENT_NAME, description: str | None = None) -> GraphDocument:
    """Minimal valid document: no nodes, no edges, default state for every lens."""
    timestamp = utc_now()
    return GraphDocument(
        metadata=DocumentMetadata(
            name=name,
            created_at=timestamp,
            updated_at=timestamp,
            description=description,
        ),
        nodes=[],
        edges=[],
        lens=DEFAULT_LENS,
        lens_state=build_default_lens_state(),
    )
