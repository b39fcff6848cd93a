"""
Image routes:
- GET    /projects/{id}/images
- POST   /projects/{id}/images
- GET    /images/{id}
- PATCH  /images/{id}
- DELETE /images/{id}

Only image records are kept here. The client uploads the bytes to
`file_path` in its own storage.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from clarity_api.api.deps import get_db, get_principal
from clarity_api.core import access
from clarity_api.core.principals import Principal
from clarity_api.models.image import Image
from clarity_api.schemas.image import ImageCreate, ImageOut, ImageStatus, ImageUpdate
from clarity_api.services.uploads import storage_name

router = APIRouter(tags=["images"])


@router.get("/projects/{project_id}/images", response_model=list[ImageOut])
def list_images(
    project_id: str,
    status: Optional[ImageStatus] = Query(default=None),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    q = db.query(Image).filter(Image.project_id == project_id)
    if status:
        q = q.filter(Image.status == status)
    rows = q.order_by(Image.created_at.desc()).all()
    return [ImageOut.model_validate(i) for i in access.visible(db, principal, "image", rows)]


@router.post("/projects/{project_id}/images", response_model=ImageOut)
def register_image(
    project_id: str,
    payload: ImageCreate,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    filename, file_path = storage_name(project_id, payload.original_filename)
    image = access.insert(
        db, principal, "image",
        {
            **payload.model_dump(),
            "project_id": project_id,
            "filename": filename,
            "file_path": file_path,
            "uploaded_by": principal.id,
            "status": "pending",
        },
    )
    return ImageOut.model_validate(image)


@router.get("/images/{image_id}", response_model=ImageOut)
def get_image(
    image_id: str,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    return ImageOut.model_validate(access.fetch(db, principal, "image", image_id))


@router.patch("/images/{image_id}", response_model=ImageOut)
def update_image(
    image_id: str,
    payload: ImageUpdate,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("status") is None:
        changes.pop("status", None)
    return ImageOut.model_validate(access.update(db, principal, "image", image_id, changes))


@router.delete("/images/{image_id}")
def delete_image(
    image_id: str,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    access.delete(db, principal, "image", image_id)
    return {"ok": True}
