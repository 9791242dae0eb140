import enum

from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, DateTime, Enum, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from streamline.core.timeutils import utcnow
from streamline.db.session import Base


class TaskStatus(str, enum.Enum):
    """Kanban columns, in board order."""

    BACKLOG = "BACKLOG"
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    IN_REVIEW = "IN_REVIEW"
    DONE = "DONE"
    CANCELLED = "CANCELLED"


class TaskPriority(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class Task(Base):
    __tablename__ = "tasks"
    __table_args__ = (
        # One task per slot within a column
        UniqueConstraint("project_id", "status", "position", name="uq_tasks_column_position"),
    )

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    status = Column(Enum(TaskStatus, name="task_status"), default=TaskStatus.TODO, nullable=False)
    priority = Column(Enum(TaskPriority, name="task_priority"), default=TaskPriority.MEDIUM, nullable=False)
    position = Column(Integer, default=0, nullable=False)
    is_completed = Column(Boolean, default=False, nullable=False)
    completed_at = Column(DateTime, nullable=True)

    start_date = Column(DateTime, nullable=True)
    due_date = Column(DateTime, nullable=True)

    # Foreign keys
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    created_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    project = relationship("Project", back_populates="tasks")
    created_by = relationship("User")

    assignees = relationship("TaskAssignee", back_populates="task", cascade="all, delete-orphan")
    labels = relationship("TaskLabel", back_populates="task", cascade="all, delete-orphan")
    comments = relationship("Comment", back_populates="task", cascade="all, delete-orphan",
                            order_by="Comment.created_at.desc()")

    def sync_completion(self, previous_completed: bool):
        """Keep is_completed/completed_at in step with the DONE column."""
        if self.status == TaskStatus.DONE and not previous_completed:
            self.is_completed = True
            self.completed_at = utcnow()
        elif self.status != TaskStatus.DONE and previous_completed:
            self.is_completed = False
            self.completed_at = None

    @property
    def comment_count(self) -> int:
        return len(self.comments)
