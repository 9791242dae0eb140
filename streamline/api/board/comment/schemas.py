from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from streamline.api.auth.schemas import UserBrief

class CommentCreate(BaseModel):
    content: str = Field(min_length=1)
    task_id: int

class CommentUpdate(BaseModel):
    content: str = Field(min_length=1)

class CommentOut(BaseModel):
    id: int
    content: str
    task_id: int
    author: Optional[UserBrief] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }
