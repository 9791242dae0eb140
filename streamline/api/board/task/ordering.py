"""Kanban ordering for tasks.

A column is the set of tasks sharing ``(project_id, status)``; ``position`` is
the sort key inside it. The ``uq_tasks_column_position`` constraint on the
tasks table guarantees a slot is never held twice, so every writer here either
commits a collision-free layout or raises ``Conflict`` with nothing applied.

Two ways to move a task:

* ``move_task`` overwrites status/position and leaves neighbours alone. A move
  onto an occupied slot is rejected with ``Conflict``.
* ``bulk_move_positions`` applies a full renumbering (normally the source and
  destination columns of a drag-and-drop) in a single transaction.

``reorder_task`` builds that renumbering server-side with ``plan_reorder``.
"""
import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, Query

from streamline.core.context import OrgContext
from streamline.core.errors import BadRequest, Conflict, NotFound, commit_or_conflict
from streamline.db.models.board.project import Project
from streamline.db.models.board.task import Task, TaskStatus

logger = logging.getLogger(__name__)

POSITION_TAKEN = "Another task already holds this position, reload the board and retry"


@dataclass(frozen=True)
class PositionMove:
    task_id: int
    status: TaskStatus
    position: int


def scoped_tasks(db: Session, ctx: OrgContext) -> Query:
    """Tasks whose project belongs to the caller's active organization."""
    return db.query(Task).join(Task.project).filter(Project.organization_id == ctx.organization_id)


def get_scoped_task(db: Session, ctx: OrgContext, task_id: int) -> Task:
    task = scoped_tasks(db, ctx).filter(Task.id == task_id).first()
    if not task:
        raise NotFound("Task not found")
    return task


def append_to_column(db: Session, project_id: int, status: TaskStatus) -> int:
    """Next free slot at the end of a column; 0 for an empty column.

    Two concurrent appends can read the same maximum. The unique constraint
    rejects the second insert, which the caller sees as a retryable Conflict.
    """
    last = db.query(func.max(Task.position)).filter(
        Task.project_id == project_id,
        Task.status == status,
    ).scalar()
    return 0 if last is None else last + 1


def move_task(db: Session, ctx: OrgContext, task_id: int, status: TaskStatus, position: int) -> Task:
    task = get_scoped_task(db, ctx, task_id)

    previous_completed = task.is_completed
    task.status = status
    task.position = position
    task.sync_completion(previous_completed)

    commit_or_conflict(db, POSITION_TAKEN)
    db.refresh(task)
    return task


def bulk_move_positions(db: Session, ctx: OrgContext, moves: Sequence[PositionMove]) -> None:
    """Apply every move or none of them."""
    if not moves:
        return

    task_ids = [move.task_id for move in moves]
    if len(set(task_ids)) != len(task_ids):
        raise BadRequest("A task can only appear once per reorder")

    tasks = {task.id: task for task in scoped_tasks(db, ctx).filter(Task.id.in_(task_ids)).all()}
    if len(tasks) != len(task_ids):
        raise NotFound("One or more tasks not found")

    try:
        # Park moved tasks on distinct negative slots so swaps inside the
        # payload never collide while rows are updated one by one.
        for offset, move in enumerate(moves, start=1):
            tasks[move.task_id].position = -offset
        db.flush()

        for move in moves:
            task = tasks[move.task_id]
            previous_completed = task.is_completed
            task.status = move.status
            task.position = move.position
            task.sync_completion(previous_completed)
        db.flush()
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise Conflict(POSITION_TAKEN) from e

    logger.info("Reordered %d task(s) in organization %s", len(moves), ctx.organization_id)


def plan_reorder(columns: Dict[TaskStatus, List[int]], task_id: int, status: TaskStatus,
                 index: int) -> List[PositionMove]:
    """Insert-and-shift renumbering for moving one task.

    ``columns`` maps each status to its task ids in display order. The task is
    taken out of its column (followers shift down) and inserted at ``index`` of
    the target column (clamped to its length, followers shift up). Returns the
    complete 0-based layout of every affected column.
    """
    source = next((s for s, ids in columns.items() if task_id in ids), None)
    if source is None:
        raise ValueError(f"Task {task_id} is not on the board")

    affected = [s for s in TaskStatus if s in (source, status)]
    layout = {s: [tid for tid in columns.get(s, []) if tid != task_id] for s in affected}

    target = layout[status]
    target.insert(max(0, min(index, len(target))), task_id)

    return [
        PositionMove(task_id=tid, status=s, position=position)
        for s in affected
        for position, tid in enumerate(layout[s])
    ]


def read_columns(db: Session, project_id: int) -> Dict[TaskStatus, List[int]]:
    rows = db.query(Task.id, Task.status).filter(
        Task.project_id == project_id
    ).order_by(Task.position, Task.id).all()

    columns: Dict[TaskStatus, List[int]] = {s: [] for s in TaskStatus}
    for task_id, status in rows:
        columns[status].append(task_id)
    return columns


def reorder_task(db: Session, ctx: OrgContext, task_id: int, status: TaskStatus, index: int) -> Task:
    """Move one task and renumber both affected columns contiguously."""
    task = get_scoped_task(db, ctx, task_id)
    moves = plan_reorder(read_columns(db, task.project_id), task.id, status, index)
    bulk_move_positions(db, ctx, moves)
    db.refresh(task)
    return task


def list_board(db: Session, project_id: int) -> Dict[TaskStatus, List[Task]]:
    """Tasks grouped by column, each column in position order."""
    tasks = db.query(Task).filter(Task.project_id == project_id).order_by(Task.position, Task.id).all()

    board: Dict[TaskStatus, List[Task]] = {s: [] for s in TaskStatus}
    for task in tasks:
        board[task.status].append(task)
    return board
