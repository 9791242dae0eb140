from typing import Optional

from sqlalchemy.orm import Session

from streamline.api.board.project.services import get_scoped_project
from streamline.core.context import OrgContext
from streamline.core.errors import Conflict, NotFound, commit_or_conflict
from streamline.db.models.board.label import Label
from streamline.db.models.board.project import Project
from . import schemas

NAME_TAKEN = "A label with this name already exists in this project"


def _name_exists(db: Session, project_id: int, name: str, exclude_id: Optional[int] = None) -> bool:
    query = db.query(Label).filter(Label.project_id == project_id, Label.name == name)
    if exclude_id is not None:
        query = query.filter(Label.id != exclude_id)
    return db.query(query.exists()).scalar()


def create_label(db: Session, ctx: OrgContext, label: schemas.LabelCreate):
    project = get_scoped_project(db, ctx, label.project_id)
    if _name_exists(db, project.id, label.name):
        raise Conflict(NAME_TAKEN)

    db_label = Label(**label.model_dump(exclude_none=True))
    db.add(db_label)
    commit_or_conflict(db, NAME_TAKEN)
    db.refresh(db_label)
    return db_label

def get_labels(db: Session, ctx: OrgContext, project_id: int, search: Optional[str] = None):
    project = get_scoped_project(db, ctx, project_id)
    query = db.query(Label).filter(Label.project_id == project.id)
    if search:
        query = query.filter(Label.name.ilike(f"%{search}%"))
    return query.order_by(Label.name).all()

def get_label(db: Session, ctx: OrgContext, label_id: int):
    label = db.query(Label).join(Label.project).filter(
        Label.id == label_id,
        Project.organization_id == ctx.organization_id
    ).first()
    if not label:
        raise NotFound("Label not found")
    return label

def update_label(db: Session, ctx: OrgContext, label_id: int, label: schemas.LabelUpdate):
    db_label = get_label(db, ctx, label_id)

    data = label.model_dump(exclude_unset=True)
    if data.get("name") is None:
        data.pop("name", None)
    if "name" in data and data["name"] != db_label.name:
        if _name_exists(db, db_label.project_id, data["name"], exclude_id=db_label.id):
            raise Conflict(NAME_TAKEN)

    for key, value in data.items():
        setattr(db_label, key, value)
    commit_or_conflict(db, NAME_TAKEN)
    db.refresh(db_label)
    return db_label

def delete_label(db: Session, ctx: OrgContext, label_id: int):
    db_label = get_label(db, ctx, label_id)
    db.delete(db_label)
    db.commit()
