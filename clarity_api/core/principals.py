"""
Principal resolution: who is calling, with which global role, and which
projects they have joined.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from clarity_api.core.errors import Unauthenticated
from clarity_api.models.membership import ProjectMember
from clarity_api.models.profile import Profile


@dataclass(frozen=True)
class Principal:
    id: str
    role: str
    memberships: FrozenSet[str] = field(default_factory=frozenset)


def principal_for(profile: Profile, memberships: Iterable[str] = ()) -> Principal:
    return Principal(id=profile.id, role=profile.role, memberships=frozenset(memberships))


def resolve(db: Session, identity: Optional[str]) -> Principal:
    """
    Look up the stored profile for an identity.

    Raises Unauthenticated when no identity is presented or it has no
    active profile. Profiles are created by signup, never here.
    """
    if not identity:
        raise Unauthenticated("Missing identity")

    profile = db.get(Profile, identity)
    if profile is None:
        raise Unauthenticated("Unknown identity")
    if not profile.active:
        raise Unauthenticated("Account inactive")

    project_ids = db.execute(
        select(ProjectMember.project_id).where(ProjectMember.user_id == profile.id)
    ).scalars().all()
    return principal_for(profile, project_ids)


def has_global_role(principal: Principal, *roles: str) -> bool:
    return principal.role in roles
