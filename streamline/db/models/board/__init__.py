# streamline/db/models/board/__init__.py
from .project import Project
from .task import Task, TaskStatus, TaskPriority
from .label import Label
from .task_label import TaskLabel
from .task_assignee import TaskAssignee
from .comment import Comment
