"""
Lens registry.

A lens is a named perspective over the same nodes and edges. Each lens owns
its own layout and filter state; positions are never shared across lenses.
"""

from dataclasses import dataclass
from typing import Literal

LensId = Literal["hierarchy", "brand", "channel", "department"]


@dataclass(frozen=True)
class LensDefinition:
    id: str
    label: str
    description: str
    shortcut: str
    accent: str
    dimension: str | None = None  # person attribute list the lens groups by


# Canonical lens order (prevents implicit dict ordering contract)
LENS_ORDER = ["hierarchy", "brand", "channel", "department"]

LENS_BY_ID = {
    "hierarchy": LensDefinition(
        id="hierarchy",
        label="Classic Hierarchy",
        description="View reporting lines and executive sponsorship.",
        shortcut="1",
        accent="#0f172a",
    ),
    "brand": LensDefinition(
        id="brand",
        label="Brand Lens",
        description="Highlight responsibilities by brand family.",
        shortcut="2",
        accent="#1d4ed8",
        dimension="brands",
    ),
    "channel": LensDefinition(
        id="channel",
        label="Channel Lens",
        description="Explore residential and professional alignment.",
        shortcut="3",
        accent="#0ea5e9",
        dimension="channels",
    ),
    "department": LensDefinition(
        id="department",
        label="Department Lens",
        description="Compare functional org structures across teams.",
        shortcut="4",
        accent="#9333ea",
        dimension="departments",
    ),
}

LENSES = [LENS_BY_ID[lens_id] for lens_id in LENS_ORDER]

DEFAULT_LENS = "hierarchy"


def is_lens_id(value: object) -> bool:
    return isinstance(value, str) and value in LENS_BY_ID
