from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from streamline.core.timeutils import utcnow
from streamline.db.session import Base


class Project(Base):
    __tablename__ = "projects"
    __table_args__ = (
        UniqueConstraint("organization_id", "slug", name="uq_projects_organization_slug"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    slug = Column(String, nullable=False)
    description = Column(String, nullable=True)
    color = Column(String, nullable=True)
    icon = Column(String, nullable=True)
    is_archived = Column(Boolean, default=False, nullable=False)

    # Foreign keys
    organization_id = Column(Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    created_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    organization = relationship("Organization", back_populates="projects")
    created_by = relationship("User")
    tasks = relationship("Task", back_populates="project", cascade="all, delete")
    labels = relationship("Label", back_populates="project", cascade="all, delete",
                          order_by="Label.name")

    @property
    def task_count(self) -> int:
        return len(self.tasks)

    @property
    def label_count(self) -> int:
        return len(self.labels)
