"""
Annotation routes:
- GET    /images/{id}/annotations
- POST   /images/{id}/annotations
- GET    /annotations/{id}
- PATCH  /annotations/{id}
- DELETE /annotations/{id}
- POST   /annotations/{id}/review

Review sets the approval tri-state and records the reviewer. Any caller
allowed to update the annotation may set any of the three values.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from clarity_api.api.deps import get_db, get_principal
from clarity_api.core import access
from clarity_api.core.principals import Principal
from clarity_api.models.annotation import Annotation
from clarity_api.schemas.annotation import (
    AnnotationCreate,
    AnnotationOut,
    AnnotationReview,
    AnnotationUpdate,
)

router = APIRouter(tags=["annotations"])


@router.get("/images/{image_id}/annotations", response_model=list[AnnotationOut])
def list_annotations(
    image_id: str,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    rows = (
        db.query(Annotation)
        .filter(Annotation.image_id == image_id)
        .order_by(Annotation.created_at)
        .all()
    )
    return [
        AnnotationOut.model_validate(a)
        for a in access.visible(db, principal, "annotation", rows)
    ]


@router.post("/images/{image_id}/annotations", response_model=AnnotationOut)
def create_annotation(
    image_id: str,
    payload: AnnotationCreate,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    annotation = access.insert(
        db, principal, "annotation",
        {**payload.model_dump(), "image_id": image_id, "created_by": principal.id},
    )
    return AnnotationOut.model_validate(annotation)


@router.get("/annotations/{annotation_id}", response_model=AnnotationOut)
def get_annotation(
    annotation_id: str,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    return AnnotationOut.model_validate(access.fetch(db, principal, "annotation", annotation_id))


@router.patch("/annotations/{annotation_id}", response_model=AnnotationOut)
def update_annotation(
    annotation_id: str,
    payload: AnnotationUpdate,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    changes = {
        k: v for k, v in payload.model_dump(exclude_unset=True).items()
        if v is not None or k == "notes"
    }
    annotation = access.update(db, principal, "annotation", annotation_id, changes)
    return AnnotationOut.model_validate(annotation)


@router.post("/annotations/{annotation_id}/review", response_model=AnnotationOut)
def review_annotation(
    annotation_id: str,
    payload: AnnotationReview,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    changes = {"is_approved": payload.is_approved, "reviewed_by": principal.id}
    if payload.notes is not None:
        changes["notes"] = payload.notes
    annotation = access.update(db, principal, "annotation", annotation_id, changes)
    return AnnotationOut.model_validate(annotation)


@router.delete("/annotations/{annotation_id}")
def delete_annotation(
    annotation_id: str,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    access.delete(db, principal, "annotation", annotation_id)
    return {"ok": True}
