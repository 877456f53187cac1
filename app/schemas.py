from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from .models import Priority


class TaskCreate(BaseModel):
    title: str
    priority: Priority = Priority.LOW


class TaskStatusUpdate(BaseModel):
    completed: bool


class TaskTitleUpdate(BaseModel):
    title: str


class TaskResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    completed: bool
    priority: Priority
    created_at: datetime


class SuggestionRequest(BaseModel):
    title: str = ""


class Suggestion(BaseModel):
    """AI refinement of a task: never persisted"""

    model_config = ConfigDict(populate_by_name=True)

    refined_title: str = Field(..., alias="refinedTitle")
    subtasks: List[str]
