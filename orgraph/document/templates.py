"""
Role templates.

A template pre-fills a new person's name, title and tier for a common role.
Anything given explicitly when adding the person wins over the template.
"""

from dataclasses import dataclass, field

from ..models import NodeRoleTier


@dataclass(frozen=True)
class RoleTemplate:
    id: str
    label: str
    description: str
    default_name: str
    default_title: str
    tier: NodeRoleTier
    suggested_brands: tuple[str, ...] = field(default=())
    suggested_channels: tuple[str, ...] = field(default=())
    suggested_departments: tuple[str, ...] = field(default=())


# Most senior first
ROLE_TEMPLATES = (
    RoleTemplate(
        id="c-suite",
        label="C-Suite Executive",
        description="CEO, CFO, COO, or other executive leader",
        default_name="New Executive",
        default_title="Chief Executive Officer",
        tier="c-suite",
    ),
    RoleTemplate(
        id="vp",
        label="Vice President",
        description="VP-level leader overseeing major functions",
        default_name="New VP",
        default_title="Vice President",
        tier="vp",
    ),
    RoleTemplate(
        id="director",
        label="Director",
        description="Director managing teams or programs",
        default_name="New Director",
        default_title="Director",
        tier="director",
    ),
    RoleTemplate(
        id="manager",
        label="Manager",
        description="People manager leading a team",
        default_name="New Manager",
        default_title="Manager",
        tier="manager",
    ),
    RoleTemplate(
        id="ic",
        label="Individual Contributor",
        description="Individual contributor or specialist",
        default_name="New Team Member",
        default_title="Specialist",
        tier="ic",
    ),
)

TEMPLATE_IDS = [t.id for t in ROLE_TEMPLATES]


def get_template(template_id: str) -> RoleTemplate | None:
    return next((t for t in ROLE_TEMPLATES if t.id == template_id), None)
