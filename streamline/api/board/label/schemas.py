from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

class LabelBrief(BaseModel):
    id: int
    name: str
    color: Optional[str] = None

    model_config = {
        "from_attributes": True
    }

class LabelCreate(BaseModel):
    name: str = Field(min_length=1)
    color: Optional[str] = None
    project_id: int

class LabelUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    color: Optional[str] = None

class LabelOut(LabelBrief):
    project_id: int
    created_at: datetime
    task_count: int = 0
