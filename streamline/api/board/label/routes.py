from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from streamline.db.session import get_db
from streamline.core.context import OrgContext, get_org_context
from . import schemas, services

router = APIRouter()

@router.post("/", response_model=schemas.LabelOut)
def create_label(
    label: schemas.LabelCreate,
    db: Session = Depends(get_db),
    ctx: OrgContext = Depends(get_org_context)
):
    return services.create_label(db, ctx, label)

@router.get("/project/{project_id}", response_model=list[schemas.LabelOut])
def get_project_labels(
    project_id: int,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    ctx: OrgContext = Depends(get_org_context)
):
    return services.get_labels(db, ctx, project_id, search)

@router.get("/{label_id}", response_model=schemas.LabelOut)
def get_label(
    label_id: int,
    db: Session = Depends(get_db),
    ctx: OrgContext = Depends(get_org_context)
):
    return services.get_label(db, ctx, label_id)

@router.put("/{label_id}", response_model=schemas.LabelOut)
def update_label(
    label_id: int,
    label: schemas.LabelUpdate,
    db: Session = Depends(get_db),
    ctx: OrgContext = Depends(get_org_context)
):
    return services.update_label(db, ctx, label_id, label)

@router.delete("/{label_id}")
def delete_label(
    label_id: int,
    db: Session = Depends(get_db),
    ctx: OrgContext = Depends(get_org_context)
):
    services.delete_label(db, ctx, label_id)
    return {"success": True, "id": label_id}
