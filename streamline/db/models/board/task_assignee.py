from sqlalchemy import Column, Integer, ForeignKey
from sqlalchemy.orm import relationship
from streamline.db.session import Base

class TaskAssignee(Base):
    __tablename__ = "task_assignees"

    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)

    # Relationships
    task = relationship("Task", back_populates="assignees")
    user = relationship("User")
