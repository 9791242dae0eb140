from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from streamline.db.session import get_db
from streamline.core.context import OrgContext, get_org_context
from . import schemas, services

router = APIRouter()

@router.post("/", response_model=schemas.ProjectOut)
def create_project(
    project: schemas.ProjectCreate,
    db: Session = Depends(get_db),
    ctx: OrgContext = Depends(get_org_context)
):
    return services.create_project(db, ctx, project)

@router.get("/", response_model=list[schemas.ProjectOut])
def read_projects(
    search: Optional[str] = None,
    include_archived: bool = False,
    db: Session = Depends(get_db),
    ctx: OrgContext = Depends(get_org_context)
):
    return services.get_projects(db, ctx, search, include_archived)

@router.get("/slug/{slug}", response_model=schemas.ProjectOut)
def read_project_by_slug(
    slug: str,
    db: Session = Depends(get_db),
    ctx: OrgContext = Depends(get_org_context)
):
    return services.get_project_by_slug(db, ctx, slug)

@router.get("/{project_id}", response_model=schemas.ProjectOut)
def read_project(
    project_id: int,
    db: Session = Depends(get_db),
    ctx: OrgContext = Depends(get_org_context)
):
    return services.get_project(db, ctx, project_id)

@router.put("/{project_id}", response_model=schemas.ProjectOut)
def update_project(
    project_id: int,
    project: schemas.ProjectUpdate,
    db: Session = Depends(get_db),
    ctx: OrgContext = Depends(get_org_context)
):
    return services.update_project(db, ctx, project_id, project)

@router.patch("/{project_id}/archive", response_model=schemas.ProjectOut)
def archive_project(
    project_id: int,
    payload: schemas.ProjectArchive,
    db: Session = Depends(get_db),
    ctx: OrgContext = Depends(get_org_context)
):
    return services.archive_project(db, ctx, project_id, payload.is_archived)

@router.delete("/{project_id}")
def delete_project(
    project_id: int,
    db: Session = Depends(get_db),
    ctx: OrgContext = Depends(get_org_context)
):
    services.delete_project(db, ctx, project_id)
    return {"success": True, "id": project_id}
