# task_service/db/crud/task.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from typing import Optional, List
from loguru import logger

from task_service.db.models import Task, TaskStatus


def _active():
    """Soft-deleted rows are invisible to every read"""
    return Task.is_deleted.is_(False)


async def get_task_by_code(db: AsyncSession, task_code: str) -> Optional[Task]:
    """Get a live task by its code"""
    result = await db.execute(
        select(Task).filter(Task.task_code == task_code, _active())
    )
    return result.scalars().first()


async def get_tasks_by_project(db: AsyncSession, project_code: str) -> List[Task]:
    """Get all live tasks of a project"""
    result = await db.execute(
        select(Task)
        .filter(Task.project_code == project_code, _active())
        .order_by(Task.id.asc())
    )
    return list(result.scalars().all())


async def get_tasks_by_status_and_assignee(
        db: AsyncSession,
        task_status: TaskStatus,
        assignee: str
) -> List[Task]:
    """Get live tasks in a status assigned to an employee"""
    result = await db.execute(
        select(Task)
        .filter(
            Task.task_status == task_status,
            Task.assigned_employee == assignee,
            _active()
        )
        .order_by(Task.assigned_date.desc(), Task.id.asc())
    )
    return list(result.scalars().all())


async def get_tasks_by_status_not_and_assignee(
        db: AsyncSession,
        task_status: TaskStatus,
        assignee: str
) -> List[Task]:
    """Get live tasks not in a status assigned to an employee"""
    result = await db.execute(
        select(Task)
        .filter(
            Task.task_status != task_status,
            Task.assigned_employee == assignee,
            _active()
        )
        .order_by(Task.assigned_date.desc(), Task.id.asc())
    )
    return list(result.scalars().all())


async def count_non_completed_by_assignee(db: AsyncSession, assignee: str) -> int:
    """Count live, non-completed tasks assigned to an employee"""
    count = await db.scalar(
        select(func.count(Task.id)).filter(
            Task.assigned_employee == assignee,
            Task.task_status != TaskStatus.COMPLETED,
            _active()
        )
    )
    return count or 0


async def save_task(db: AsyncSession, task: Task, commit: bool = True) -> Task:
    """Insert or update a task; flushes so the internal ID is assigned"""
    try:
        db.add(task)
        await db.flush()
        if commit:
            await db.commit()
            await db.refresh(task)
        return task

    except Exception as e:
        logger.error(f"Failed to save task {task.task_code}: {e}")
        await db.rollback()
        raise
