"""
Ownership graph.

Every row hangs off exactly one project:

    Project -> Label
    Project -> Image -> Annotation
    Project -> ProjectMember

Authorization questions about a child row are reduced to a question about
its project. All lookups here are plain reads.
"""

from typing import Any, Dict, Literal, Optional

from sqlalchemy.orm import Session

from clarity_api.core.errors import EntityNotFound
from clarity_api.models import Annotation, Image, Label, Profile, Project, ProjectMember

EntityKind = Literal["profile", "project", "project_member", "label", "image", "annotation"]

MODELS = {
    "profile": Profile,
    "project": Project,
    "project_member": ProjectMember,
    "label": Label,
    "image": Image,
    "annotation": Annotation,
}

# (column on the child, kind of the parent it points at)
PARENT_KEYS = {
    "project_member": ("project_id", "project"),
    "label": ("project_id", "project"),
    "image": ("project_id", "project"),
    "annotation": ("image_id", "image"),
}


def get_entity(db: Session, kind: EntityKind, entity_id: Optional[str]) -> Any:
    if kind not in MODELS:
        raise ValueError(f"Unknown entity kind: {kind}")
    row = db.get(MODELS[kind], entity_id) if entity_id else None
    if row is None:
        raise EntityNotFound(kind, entity_id)
    return row


def project_id_of(db: Session, kind: EntityKind, row: Any) -> str:
    """
    Walk a loaded row up to its project and return the project id.

    Raises EntityNotFound for the first missing ancestor.
    """
    while kind != "project":
        if kind not in PARENT_KEYS:
            raise ValueError(f"{kind} rows do not belong to a project")
        column, parent_kind = PARENT_KEYS[kind]
        row = get_entity(db, parent_kind, getattr(row, column))
        kind = parent_kind
    return row.id


def owner_chain(db: Session, kind: EntityKind, entity_id: str) -> str:
    return project_id_of(db, kind, get_entity(db, kind, entity_id))


def project_id_for_payload(db: Session, kind: EntityKind, payload: Dict[str, Any]) -> str:
    """Resolve the project a new row of `kind` would be attached to."""
    if kind == "project":
        raise ValueError("projects are roots")
    column, parent_kind = PARENT_KEYS[kind]
    return owner_chain(db, parent_kind, payload.get(column))


def project_creator(db: Session, project_id: str) -> str:
    return get_entity(db, "project", project_id).created_by
