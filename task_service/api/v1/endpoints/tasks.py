# task_service/api/v1/endpoints/tasks.py
"""Task management endpoints"""
from fastapi import APIRouter, Depends, status, Path
from typing import List

from task_service.api.v1.dependencies import get_task_service
from task_service.api.v1.schemas.auth import Actor
from task_service.api.v1.schemas.tasks import (
    TaskCreate, TaskUpdate, TaskResponse, TaskStatusUpdate, TaskCounts, BulkTaskResult
)
from task_service.auth.dependencies import get_current_actor
from task_service.db.models import TaskStatus
from task_service.services.task_service import TaskService

router = APIRouter()


@router.post("/", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_data: TaskCreate,
    service: TaskService = Depends(get_task_service),
    actor: Actor = Depends(get_current_actor)
):
    """Create a task in one of the caller's projects"""
    task = await service.create(actor, task_data)
    return TaskResponse.from_model(task)


@router.get("/employee/status/{task_status}", response_model=List[TaskResponse])
async def list_my_tasks_by_status(
    task_status: TaskStatus,
    service: TaskService = Depends(get_task_service),
    actor: Actor = Depends(get_current_actor)
):
    """Caller's assigned tasks in a status"""
    tasks = await service.read_all_by_status(actor, task_status)
    return [TaskResponse.from_model(task) for task in tasks]


@router.get("/employee/status-not/{task_status}", response_model=List[TaskResponse])
async def list_my_tasks_excluding_status(
    task_status: TaskStatus,
    service: TaskService = Depends(get_task_service),
    actor: Actor = Depends(get_current_actor)
):
    """Caller's assigned tasks in any other status"""
    tasks = await service.read_all_by_status_is_not(actor, task_status)
    return [TaskResponse.from_model(task) for task in tasks]


@router.get("/count/employee/{assigned_employee}", response_model=int)
async def count_non_completed_tasks(
    assigned_employee: str = Path(..., description="Employee username"),
    service: TaskService = Depends(get_task_service),
    actor: Actor = Depends(get_current_actor)
):
    """Number of open work items an employee still holds"""
    return await service.count_non_completed_by_assignee(assigned_employee)


@router.get("/project/{project_code}", response_model=List[TaskResponse])
async def list_project_tasks(
    project_code: str = Path(..., description="Project code"),
    service: TaskService = Depends(get_task_service),
    actor: Actor = Depends(get_current_actor)
):
    """List a project's tasks; denied outright if any of them is not visible to the caller"""
    tasks = await service.read_all_by_project(actor, project_code)
    return [TaskResponse.from_model(task) for task in tasks]


@router.get("/project/{project_code}/counts", response_model=TaskCounts)
async def get_project_task_counts(
    project_code: str = Path(..., description="Project code"),
    service: TaskService = Depends(get_task_service),
    actor: Actor = Depends(get_current_actor)
):
    counts = await service.counts_by_project(actor, project_code)
    return TaskCounts(**counts)


@router.put("/project/{project_code}/complete", response_model=BulkTaskResult)
async def complete_project_tasks(
    project_code: str = Path(..., description="Project code"),
    service: TaskService = Depends(get_task_service),
    actor: Actor = Depends(get_current_actor)
):
    """Mark every task of a project completed"""
    tasks = await service.complete_by_project(actor, project_code)
    return BulkTaskResult(project_code=project_code, affected_count=len(tasks))


@router.delete("/project/{project_code}", response_model=BulkTaskResult)
async def delete_project_tasks(
    project_code: str = Path(..., description="Project code"),
    service: TaskService = Depends(get_task_service),
    actor: Actor = Depends(get_current_actor)
):
    """Soft-delete every task of a project"""
    tasks = await service.delete_by_project(actor, project_code)
    return BulkTaskResult(project_code=project_code, affected_count=len(tasks))


@router.get("/{task_code}", response_model=TaskResponse)
async def get_task(
    task_code: str,
    service: TaskService = Depends(get_task_service),
    actor: Actor = Depends(get_current_actor)
):
    """Get a specific task by code"""
    task = await service.read_by_code(actor, task_code)
    return TaskResponse.from_model(task)


@router.put("/{task_code}", response_model=TaskResponse)
async def update_task(
    task_code: str,
    updates: TaskUpdate,
    service: TaskService = Depends(get_task_service),
    actor: Actor = Depends(get_current_actor)
):
    """Full update by the owning manager"""
    task = await service.update(actor, task_code, updates)
    return TaskResponse.from_model(task)


@router.patch("/{task_code}/status", response_model=TaskResponse)
async def update_task_status(
    task_code: str,
    status_update: TaskStatusUpdate,
    service: TaskService = Depends(get_task_service),
    actor: Actor = Depends(get_current_actor)
):
    """Status change by the assigned employee"""
    task = await service.update_status(actor, task_code, status_update.task_status)
    return TaskResponse.from_model(task)


@router.delete("/{task_code}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_code: str,
    service: TaskService = Depends(get_task_service),
    actor: Actor = Depends(get_current_actor)
):
    """Soft-delete a task; its code becomes free for reuse"""
    await service.delete(actor, task_code)
