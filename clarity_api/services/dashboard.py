"""
Dashboard numbers for the projects a principal can see.
"""

import math
from collections import Counter
from typing import Dict, List

from sqlalchemy.orm import Session

from clarity_api.core import access
from clarity_api.core.principals import Principal
from clarity_api.models.image import Image
from clarity_api.models.project import Project

RECENT_PROJECTS = 5


def completion_rate(total: int, completed: int) -> int:
    """Percentage of completed images, rounded half up."""
    if total <= 0:
        return 0
    return math.floor(completed / total * 100 + 0.5)


def visible_projects(db: Session, principal: Principal) -> List[Project]:
    rows = db.query(Project).order_by(Project.created_at.desc()).all()
    return access.visible(db, principal, "project", rows)


def _visible_images(db: Session, principal: Principal, project_ids: List[str]) -> List[Image]:
    if not project_ids:
        return []
    rows = db.query(Image).filter(Image.project_id.in_(project_ids)).all()
    return access.visible(db, principal, "image", rows)


def image_counts(db: Session, principal: Principal, project_ids: List[str]) -> Dict[str, int]:
    return dict(Counter(img.project_id for img in _visible_images(db, principal, project_ids)))


def dashboard_stats(db: Session, principal: Principal) -> dict:
    projects = visible_projects(db, principal)
    images = _visible_images(db, principal, [p.id for p in projects])
    counts = Counter(img.project_id for img in images)
    completed = sum(1 for img in images if img.status == "completed")

    return {
        "total_projects": len(projects),
        "total_images": len(images),
        "completed_images": completed,
        "completion_rate": completion_rate(len(images), completed),
        "recent_projects": [
            (project, counts.get(project.id, 0)) for project in projects[:RECENT_PROJECTS]
        ],
    }
