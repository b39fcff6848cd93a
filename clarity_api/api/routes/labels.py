"""
Label routes:
- GET    /projects/{id}/labels
- POST   /projects/{id}/labels
- GET    /labels/{id}
- PATCH  /labels/{id}
- DELETE /labels/{id}

Deleting a label also deletes the annotations drawn with it.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from clarity_api.api.deps import get_db, get_principal
from clarity_api.core import access
from clarity_api.core.principals import Principal
from clarity_api.models.label import Label
from clarity_api.schemas.label import LabelCreate, LabelOut, LabelUpdate

router = APIRouter(tags=["labels"])


@router.get("/projects/{project_id}/labels", response_model=list[LabelOut])
def list_labels(
    project_id: str,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    rows = db.query(Label).filter(Label.project_id == project_id).order_by(Label.name).all()
    return [LabelOut.model_validate(l) for l in access.visible(db, principal, "label", rows)]


@router.post("/projects/{project_id}/labels", response_model=LabelOut)
def create_label(
    project_id: str,
    payload: LabelCreate,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    label = access.insert(
        db, principal, "label",
        {**payload.model_dump(), "name": payload.name.strip(), "project_id": project_id},
    )
    return LabelOut.model_validate(label)


@router.get("/labels/{label_id}", response_model=LabelOut)
def get_label(
    label_id: str,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    return LabelOut.model_validate(access.fetch(db, principal, "label", label_id))


@router.patch("/labels/{label_id}", response_model=LabelOut)
def update_label(
    label_id: str,
    payload: LabelUpdate,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in changes:
        changes["name"] = changes["name"].strip()
    return LabelOut.model_validate(access.update(db, principal, "label", label_id, changes))


@router.delete("/labels/{label_id}")
def delete_label(
    label_id: str,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    access.delete(db, principal, "label", label_id)
    return {"ok": True}
