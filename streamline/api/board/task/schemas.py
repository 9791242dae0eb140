from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from streamline.api.auth.schemas import UserBrief
from streamline.api.board.label.schemas import LabelBrief
from streamline.db.models.board.task import TaskStatus, TaskPriority


class TaskBase(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    start_date: Optional[datetime] = None
    due_date: Optional[datetime] = None


class TaskCreate(TaskBase):
    project_id: int
    assignee_ids: Optional[List[int]] = None
    label_ids: Optional[List[int]] = None


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    start_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    is_completed: Optional[bool] = None


class TaskFilters(BaseModel):
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    search: Optional[str] = None
    assignee_id: Optional[int] = None
    label_id: Optional[int] = None


class TaskPositionUpdate(BaseModel):
    """Drag-and-drop target for a single task."""
    status: TaskStatus
    position: int = Field(ge=0)


class TaskReorder(BaseModel):
    status: TaskStatus
    index: int = Field(ge=0)


class TaskPositionItem(TaskPositionUpdate):
    id: int


class BulkTaskPositionUpdate(BaseModel):
    tasks: List[TaskPositionItem]


class TaskAssigneesUpdate(BaseModel):
    assignee_ids: List[int]


class TaskLabelsUpdate(BaseModel):
    label_ids: List[int]


class TaskAssigneeOut(BaseModel):
    user: UserBrief

    model_config = {
        "from_attributes": True
    }


class TaskLabelOut(BaseModel):
    label: LabelBrief

    model_config = {
        "from_attributes": True
    }


class TaskOut(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    position: int
    is_completed: bool
    completed_at: Optional[datetime] = None
    start_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    project_id: int
    created_by: Optional[UserBrief] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    assignees: List[TaskAssigneeOut] = []
    labels: List[TaskLabelOut] = []
    comment_count: int = 0

    model_config = {
        "from_attributes": True
    }


class BoardColumnOut(BaseModel):
    status: TaskStatus
    tasks: List[TaskOut]
