"""Pydantic schemas for task request/response validation."""

from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from typing import Optional, List, Tuple


class TaskStatus(str, Enum):
    """Colonnes du tableau, dans l'ordre d'affichage"""
    BACKLOG = "backlog"
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Rang utilisé quand order est absent ou égal
PRIORITY_RANK = {
    TaskPriority.HIGH: 0,
    TaskPriority.MEDIUM: 1,
    TaskPriority.LOW: 2,
}


class TaskRecord(BaseModel):
    """Immutable snapshot of a task, the unit the ordering engine works on."""

    id: str
    title: str = ""
    description: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.TODO
    order: Optional[float] = None
    completed: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, frozen=True)


# Schemas tâches

class TaskCreate(BaseModel):
    title: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.TODO
    completed: bool = False
    order: Optional[float] = None


class TaskUpdate(BaseModel):
    """Schema for updating an existing task."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    completed: Optional[bool] = None
    order: Optional[float] = None

    @field_validator("title", "priority")
    @classmethod
    def not_null(cls, value):
        # absent = inchangé, mais null interdit (colonnes obligatoires)
        if value is None:
            raise ValueError("must not be null")
        return value


class TaskResponse(BaseModel):
    """Schema for task responses from API."""

    id: str
    title: str
    description: Optional[str]
    priority: TaskPriority
    status: TaskStatus
    order: Optional[float]
    completed: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TaskMoveRequest(BaseModel):
    """Intention de déplacement émise par le drag & drop"""
    status: TaskStatus
    index: Optional[int] = None  # None = fin de colonne


class BatchUpdateItem(BaseModel):
    id: str
    status: TaskStatus
    order: Optional[float] = None


class BatchUpdateRequest(BaseModel):
    todos: List[BatchUpdateItem]


class BatchUpdateResponse(BaseModel):
    message: str
    todos: List[TaskResponse]


class BoardColumn(BaseModel):
    status: TaskStatus
    tasks: List[TaskResponse]


class BoardResponse(BaseModel):
    columns: List[BoardColumn]


class NormalizeResponse(BaseModel):
    status: TaskStatus
    orders: List[Tuple[str, float]]


class DashboardResponse(BaseModel):
    total: int
    completed: int
    status_counts: dict[str, int]
    recent: List[TaskResponse]
    filtered_total: int
