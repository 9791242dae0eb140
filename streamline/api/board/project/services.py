from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from streamline.core.context import OrgContext
from streamline.core.errors import Conflict, NotFound, commit_or_conflict
from streamline.db.models.board.project import Project
from . import schemas

SLUG_TAKEN = "A project with this slug already exists in this organization"


def _slug_exists(db: Session, organization_id: int, slug: str, exclude_id: Optional[int] = None) -> bool:
    query = db.query(Project).filter(Project.organization_id == organization_id, Project.slug == slug)
    if exclude_id is not None:
        query = query.filter(Project.id != exclude_id)
    return db.query(query.exists()).scalar()


def get_scoped_project(db: Session, ctx: OrgContext, project_id: int) -> Project:
    project = db.query(Project).filter(
        Project.id == project_id,
        Project.organization_id == ctx.organization_id
    ).first()
    if not project:
        raise NotFound("Project not found")
    return project


def create_project(db: Session, ctx: OrgContext, project: schemas.ProjectCreate):
    if _slug_exists(db, ctx.organization_id, project.slug):
        raise Conflict(SLUG_TAKEN)

    db_project = Project(**project.model_dump(), organization_id=ctx.organization_id, created_by_id=ctx.user_id)
    db.add(db_project)
    commit_or_conflict(db, SLUG_TAKEN)
    db.refresh(db_project)
    return db_project

def get_projects(db: Session, ctx: OrgContext, search: Optional[str] = None, include_archived: bool = False):
    query = db.query(Project).filter(Project.organization_id == ctx.organization_id)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(Project.name.ilike(pattern), Project.description.ilike(pattern)))
    if not include_archived:
        query = query.filter(Project.is_archived == False)
    return query.order_by(Project.created_at.desc(), Project.id.desc()).all()

def get_project(db: Session, ctx: OrgContext, project_id: int):
    return get_scoped_project(db, ctx, project_id)

def get_project_by_slug(db: Session, ctx: OrgContext, slug: str):
    project = db.query(Project).filter(
        Project.slug == slug,
        Project.organization_id == ctx.organization_id
    ).first()
    if not project:
        raise NotFound("Project not found")
    return project

def update_project(db: Session, ctx: OrgContext, project_id: int, project: schemas.ProjectUpdate):
    db_project = get_scoped_project(db, ctx, project_id)

    data = project.model_dump(exclude_unset=True)
    for key in ("name", "slug", "is_archived"):
        if key in data and data[key] is None:
            del data[key]

    if data.get("slug") and data["slug"] != db_project.slug:
        if _slug_exists(db, ctx.organization_id, data["slug"], exclude_id=db_project.id):
            raise Conflict(SLUG_TAKEN)

    for key, value in data.items():
        setattr(db_project, key, value)
    commit_or_conflict(db, SLUG_TAKEN)
    db.refresh(db_project)
    return db_project

def archive_project(db: Session, ctx: OrgContext, project_id: int, is_archived: bool):
    db_project = get_scoped_project(db, ctx, project_id)
    db_project.is_archived = is_archived
    db.commit()
    db.refresh(db_project)
    return db_project

def delete_project(db: Session, ctx: OrgContext, project_id: int):
    db_project = get_scoped_project(db, ctx, project_id)
    db.delete(db_project)
    db.commit()
