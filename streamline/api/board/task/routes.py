from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from streamline.db.session import get_db
from streamline.core.context import OrgContext, get_org_context
from streamline.db.models.board.task import TaskStatus, TaskPriority
from . import schemas, services, ordering

router = APIRouter()

@router.post("/", response_model=schemas.TaskOut)
def create_task(
    task: schemas.TaskCreate,
    db: Session = Depends(get_db),
    ctx: OrgContext = Depends(get_org_context)
):
    return services.create_task(db, ctx, task)

@router.get("/project/{project_id}", response_model=list[schemas.TaskOut])
def tasks_by_project(
    project_id: int,
    status: Optional[TaskStatus] = None,
    priority: Optional[TaskPriority] = None,
    search: Optional[str] = None,
    assignee_id: Optional[int] = None,
    label_id: Optional[int] = None,
    db: Session = Depends(get_db),
    ctx: OrgContext = Depends(get_org_context)
):
    filters = schemas.TaskFilters(
        status=status, priority=priority, search=search, assignee_id=assignee_id, label_id=label_id
    )
    return services.list_tasks(db, ctx, project_id, filters)

@router.get("/project/{project_id}/board", response_model=list[schemas.BoardColumnOut])
def project_board(
    project_id: int,
    db: Session = Depends(get_db),
    ctx: OrgContext = Depends(get_org_context)
):
    return services.get_board(db, ctx, project_id)

# Kanban drag & drop

@router.patch("/positions")
def bulk_update_positions(
    payload: schemas.BulkTaskPositionUpdate,
    db: Session = Depends(get_db),
    ctx: OrgContext = Depends(get_org_context)
):
    moves = [ordering.PositionMove(task_id=t.id, status=t.status, position=t.position) for t in payload.tasks]
    ordering.bulk_move_positions(db, ctx, moves)
    return {"success": True}

@router.patch("/{task_id}/position", response_model=schemas.TaskOut)
def update_position(
    task_id: int,
    payload: schemas.TaskPositionUpdate,
    db: Session = Depends(get_db),
    ctx: OrgContext = Depends(get_org_context)
):
    return ordering.move_task(db, ctx, task_id, payload.status, payload.position)

@router.patch("/{task_id}/reorder", response_model=schemas.TaskOut)
def reorder_task(
    task_id: int,
    payload: schemas.TaskReorder,
    db: Session = Depends(get_db),
    ctx: OrgContext = Depends(get_org_context)
):
    return ordering.reorder_task(db, ctx, task_id, payload.status, payload.index)

@router.get("/{task_id}", response_model=schemas.TaskOut)
def get_task(
    task_id: int,
    db: Session = Depends(get_db),
    ctx: OrgContext = Depends(get_org_context)
):
    return services.get_task(db, ctx, task_id)

@router.put("/{task_id}", response_model=schemas.TaskOut)
def update_task(
    task_id: int,
    task: schemas.TaskUpdate,
    db: Session = Depends(get_db),
    ctx: OrgContext = Depends(get_org_context)
):
    return services.update_task(db, ctx, task_id, task)

@router.put("/{task_id}/assignees", response_model=schemas.TaskOut)
def update_assignees(
    task_id: int,
    payload: schemas.TaskAssigneesUpdate,
    db: Session = Depends(get_db),
    ctx: OrgContext = Depends(get_org_context)
):
    return services.update_assignees(db, ctx, task_id, payload.assignee_ids)

@router.put("/{task_id}/labels", response_model=schemas.TaskOut)
def update_labels(
    task_id: int,
    payload: schemas.TaskLabelsUpdate,
    db: Session = Depends(get_db),
    ctx: OrgContext = Depends(get_org_context)
):
    return services.update_labels(db, ctx, task_id, payload.label_ids)

@router.delete("/{task_id}")
def delete_task(
    task_id: int,
    db: Session = Depends(get_db),
    ctx: OrgContext = Depends(get_org_context)
):
    services.delete_task(db, ctx, task_id)
    return {"success": True, "id": task_id}
