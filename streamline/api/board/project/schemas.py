from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from streamline.api.auth.schemas import UserBrief

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"

class ProjectBase(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    slug: str = Field(min_length=1, pattern=SLUG_PATTERN)
    color: Optional[str] = None
    icon: Optional[str] = None

class ProjectCreate(ProjectBase):
    pass

class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    slug: Optional[str] = Field(None, min_length=1, pattern=SLUG_PATTERN)
    color: Optional[str] = None
    icon: Optional[str] = None
    is_archived: Optional[bool] = None

class ProjectArchive(BaseModel):
    is_archived: bool

class ProjectOut(ProjectBase):
    id: int
    organization_id: int
    is_archived: bool
    created_by: Optional[UserBrief] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    task_count: int = 0
    label_count: int = 0

    model_config = {
        "from_attributes": True
    }
