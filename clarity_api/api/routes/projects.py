"""
Project routes:
- GET    /projects
- POST   /projects
- GET    /projects/stats
- GET    /projects/{id}
- PATCH  /projects/{id}
- DELETE /projects/{id}
- GET    /projects/{id}/members
- POST   /projects/{id}/members
- DELETE /projects/{id}/members/{member_id}
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from clarity_api.api.deps import get_db, get_principal
from clarity_api.core import access
from clarity_api.core.errors import ClarityError, EntityNotFound
from clarity_api.core.principals import Principal
from clarity_api.models.membership import ProjectMember
from clarity_api.models.project import Project
from clarity_api.schemas.project import (
    DashboardStatsOut,
    MemberCreate,
    MemberOut,
    ProjectCreate,
    ProjectOut,
    ProjectUpdate,
)
from clarity_api.services.dashboard import dashboard_stats, image_counts, visible_projects

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects", tags=["projects"])


def _serialize_project(project: Project, image_count: int = 0) -> ProjectOut:
    out = ProjectOut.model_validate(project)
    out.image_count = image_count
    return out


@router.get("", response_model=list[ProjectOut])
def list_projects(principal: Principal = Depends(get_principal), db: Session = Depends(get_db)):
    projects = visible_projects(db, principal)
    counts = image_counts(db, principal, [p.id for p in projects])
    return [_serialize_project(p, counts.get(p.id, 0)) for p in projects]


@router.post("", response_model=ProjectOut)
def create_project(
    payload: ProjectCreate,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    project = access.insert(
        db, principal, "project",
        {**payload.model_dump(), "created_by": principal.id},
        commit=False,
    )
    # creators enroll themselves; the row is bookkeeping, not a grant.
    # Both rows are committed together.
    try:
        access.insert(
            db, principal, "project_member",
            {"project_id": project.id, "user_id": principal.id, "role": principal.role},
        )
    except ClarityError:
        db.rollback()
        raise
    logger.info("Project %s created by %s", project.id, principal.id)
    return _serialize_project(project)


@router.get("/stats", response_model=DashboardStatsOut)
def get_dashboard_stats(principal: Principal = Depends(get_principal), db: Session = Depends(get_db)):
    stats = dashboard_stats(db, principal)
    stats["recent_projects"] = [
        _serialize_project(project, count) for project, count in stats["recent_projects"]
    ]
    return DashboardStatsOut(**stats)


@router.get("/{project_id}", response_model=ProjectOut)
def get_project(
    project_id: str,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    project = access.fetch(db, principal, "project", project_id)
    counts = image_counts(db, principal, [project.id])
    return _serialize_project(project, counts.get(project.id, 0))


@router.patch("/{project_id}", response_model=ProjectOut)
def update_project(
    project_id: str,
    payload: ProjectUpdate,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    changes = {
        k: v for k, v in payload.model_dump(exclude_unset=True).items()
        if v is not None or k == "description"
    }
    project = access.update(db, principal, "project", project_id, changes)
    counts = image_counts(db, principal, [project.id])
    return _serialize_project(project, counts.get(project.id, 0))


@router.delete("/{project_id}")
def delete_project(
    project_id: str,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    access.delete(db, principal, "project", project_id)
    logger.info("Project %s deleted by %s", project_id, principal.id)
    return {"ok": True}


@router.get("/{project_id}/members", response_model=list[MemberOut])
def list_members(
    project_id: str,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    rows = (
        db.query(ProjectMember)
        .filter(ProjectMember.project_id == project_id)
        .order_by(ProjectMember.created_at)
        .all()
    )
    return [MemberOut.model_validate(m) for m in access.visible(db, principal, "project_member", rows)]


@router.post("/{project_id}/members", response_model=MemberOut)
def add_member(
    project_id: str,
    payload: MemberCreate,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    member = access.insert(
        db, principal, "project_member",
        {"project_id": project_id, "user_id": payload.user_id, "role": payload.role},
    )
    return MemberOut.model_validate(member)


@router.delete("/{project_id}/members/{member_id}")
def remove_member(
    project_id: str,
    member_id: str,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    member = db.get(ProjectMember, member_id)
    if member is None or member.project_id != project_id:
        raise EntityNotFound("project_member", member_id)
    access.delete(db, principal, "project_member", member_id)
    return {"ok": True}
