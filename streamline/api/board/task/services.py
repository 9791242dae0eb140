import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from streamline.api.board.project.services import get_scoped_project
from streamline.core.context import OrgContext
from streamline.core.errors import BadRequest, commit_or_conflict
from streamline.db.models.board.label import Label
from streamline.db.models.board.task import Task, TaskStatus
from streamline.db.models.board.task_assignee import TaskAssignee
from streamline.db.models.board.task_label import TaskLabel
from streamline.db.models.organization import Member
from . import schemas
from .ordering import append_to_column, get_scoped_task, list_board, POSITION_TAKEN

logger = logging.getLogger(__name__)


def _check_assignees(db: Session, ctx: OrgContext, user_ids: List[int]):
    unique_ids = set(user_ids)
    found = db.query(Member.user_id).filter(
        Member.organization_id == ctx.organization_id,
        Member.user_id.in_(unique_ids)
    ).count()
    if found != len(unique_ids):
        raise BadRequest("One or more assignees are not members of this organization")
    return unique_ids


def _check_labels(db: Session, project_id: int, label_ids: List[int]):
    unique_ids = set(label_ids)
    found = db.query(Label.id).filter(Label.project_id == project_id, Label.id.in_(unique_ids)).count()
    if found != len(unique_ids):
        raise BadRequest("One or more labels do not belong to this project")
    return unique_ids


def create_task(db: Session, ctx: OrgContext, task: schemas.TaskCreate):
    project = get_scoped_project(db, ctx, task.project_id)

    data = task.model_dump(exclude={"assignee_ids", "label_ids", "project_id"}, exclude_none=True)
    status = data.pop("status", TaskStatus.TODO)

    db_task = Task(
        **data,
        status=status,
        position=append_to_column(db, project.id, status),
        project_id=project.id,
        created_by_id=ctx.user_id,
    )
    db_task.sync_completion(previous_completed=False)

    if task.assignee_ids:
        db_task.assignees = [TaskAssignee(user_id=uid) for uid in _check_assignees(db, ctx, task.assignee_ids)]
    if task.label_ids:
        db_task.labels = [TaskLabel(label_id=lid) for lid in _check_labels(db, project.id, task.label_ids)]

    db.add(db_task)
    commit_or_conflict(db, POSITION_TAKEN)
    db.refresh(db_task)
    return db_task


def list_tasks(db: Session, ctx: OrgContext, project_id: int, filters: schemas.TaskFilters):
    project = get_scoped_project(db, ctx, project_id)

    query = db.query(Task).filter(Task.project_id == project.id)
    if filters.status:
        query = query.filter(Task.status == filters.status)
    if filters.priority:
        query = query.filter(Task.priority == filters.priority)
    if filters.search:
        pattern = f"%{filters.search}%"
        query = query.filter(or_(Task.title.ilike(pattern), Task.description.ilike(pattern)))
    if filters.assignee_id:
        query = query.filter(Task.assignees.any(TaskAssignee.user_id == filters.assignee_id))
    if filters.label_id:
        query = query.filter(Task.labels.any(TaskLabel.label_id == filters.label_id))

    tasks = query.order_by(Task.position, Task.id).all()
    # Board column order, then position within each column
    column_order = {status: index for index, status in enumerate(TaskStatus)}
    return sorted(tasks, key=lambda t: column_order[t.status])


def get_board(db: Session, ctx: OrgContext, project_id: int):
    project = get_scoped_project(db, ctx, project_id)
    return [
        {"status": status, "tasks": tasks}
        for status, tasks in list_board(db, project.id).items()
    ]


def get_task(db: Session, ctx: OrgContext, task_id: int):
    return get_scoped_task(db, ctx, task_id)


def update_task(db: Session, ctx: OrgContext, task_id: int, task: schemas.TaskUpdate):
    db_task = get_scoped_task(db, ctx, task_id)

    data = task.model_dump(exclude_unset=True)
    is_completed = data.pop("is_completed", None)
    new_status: Optional[TaskStatus] = data.pop("status", None)
    for key in ("title", "priority"):
        if key in data and data[key] is None:
            del data[key]

    if is_completed is True:
        new_status = TaskStatus.DONE
    elif is_completed is False and (new_status or db_task.status) == TaskStatus.DONE:
        new_status = TaskStatus.TODO

    for key, value in data.items():
        setattr(db_task, key, value)

    if new_status is not None and new_status != db_task.status:
        # A plain status change lands at the end of the new column
        previous_completed = db_task.is_completed
        db_task.position = append_to_column(db, db_task.project_id, new_status)
        db_task.status = new_status
        db_task.sync_completion(previous_completed)

    commit_or_conflict(db, POSITION_TAKEN)
    db.refresh(db_task)
    return db_task


def update_assignees(db: Session, ctx: OrgContext, task_id: int, assignee_ids: List[int]):
    db_task = get_scoped_task(db, ctx, task_id)
    user_ids = _check_assignees(db, ctx, assignee_ids) if assignee_ids else set()

    db_task.assignees = [TaskAssignee(user_id=uid) for uid in sorted(user_ids)]
    db.commit()
    db.refresh(db_task)
    return db_task


def update_labels(db: Session, ctx: OrgContext, task_id: int, label_ids: List[int]):
    db_task = get_scoped_task(db, ctx, task_id)
    ids = _check_labels(db, db_task.project_id, label_ids) if label_ids else set()

    db_task.labels = [TaskLabel(label_id=lid) for lid in sorted(ids)]
    db.commit()
    db.refresh(db_task)
    return db_task


def delete_task(db: Session, ctx: OrgContext, task_id: int):
    # The column keeps its gap; readers order by position, not by rank
    db_task = get_scoped_task(db, ctx, task_id)
    project_id = db_task.project_id
    db.delete(db_task)
    db.commit()
    logger.info("Deleted task %s from project %s", task_id, project_id)
