# task_service/api/v1/schemas/tasks.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import date, datetime

from task_service.db.models.enums import TaskStatus

# Codes and usernames are used as URL path segments in directory lookups
IDENTIFIER_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9._@-]*$"


class TaskBase(BaseModel):
    """Base schema for task"""
    task_subject: str = Field(..., min_length=1, max_length=500, description="Task subject")
    task_detail: Optional[str] = Field(None, description="Task detail")
    assigned_employee: str = Field(..., min_length=1, max_length=255, pattern=IDENTIFIER_PATTERN,
                                   description="Username of the assignee")


class TaskCreate(TaskBase):
    """Schema for creating a task; status, manager and assigned date are set by the service"""
    task_code: str = Field(..., min_length=1, max_length=100, pattern=IDENTIFIER_PATTERN,
                           description="Unique task code")
    project_code: str = Field(..., min_length=1, max_length=100, pattern=IDENTIFIER_PATTERN,
                              description="Owning project code")


class TaskUpdate(TaskBase):
    """Schema for a full task update by the owning manager"""
    task_status: Optional[TaskStatus] = Field(None, description="New status; keeps the current one when omitted")


class TaskStatusUpdate(BaseModel):
    """Schema for updating task status"""
    task_status: TaskStatus = Field(..., description="New task status")


class TaskResponse(BaseModel):
    """Schema for task response"""
    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Internal task ID")
    task_code: str
    task_subject: str
    task_detail: Optional[str] = None
    task_status: TaskStatus
    project_code: str
    assigned_manager: str
    assigned_employee: str
    assigned_date: date
    is_deleted: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, task):
        """Convert Task model to API response"""
        return cls.model_validate(task)


class TaskCounts(BaseModel):
    """Completed vs. non-completed tasks for a project"""
    completed_task_count: int = Field(..., description="Number of completed tasks")
    non_completed_task_count: int = Field(..., description="Number of tasks not completed")


class BulkTaskResult(BaseModel):
    """Result of a project-wide task operation"""
    project_code: str
    affected_count: int
