# task_service/services/task_service.py
"""Task lifecycle: repository access, external checks and policy decisions per operation"""
from datetime import date
from typing import Callable, Dict, List, Protocol

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy.ext.asyncio import AsyncSession

from task_service.api.v1.schemas.auth import Actor
from task_service.api.v1.schemas.tasks import TaskCreate, TaskUpdate
from task_service.core import policy
from task_service.core import tracing
from task_service.db import crud
from task_service.db.models import Task, TaskStatus
from task_service.exceptions.tasks import (
    TaskAlreadyExistsError, TaskNotFoundError, ProjectNotFoundError,
    EmployeeNotFoundError, ConcurrentModificationError
)


class ProjectDirectory(Protocol):
    async def project_exists(self, project_code: str) -> bool:
        ...

    async def manager_has_project_access(self, username: str, project_code: str) -> bool:
        ...


class EmployeeDirectory(Protocol):
    async def employee_exists(self, username: str) -> bool:
        ...


class TaskService:
    """
    Orchestrates the public task operations.

    Bulk project operations check every task before touching any of them;
    one denial aborts the whole call and nothing is written.
    """

    def __init__(
        self,
        db: AsyncSession,
        projects: ProjectDirectory,
        employees: EmployeeDirectory,
        today: Callable[[], date] = date.today
    ):
        self.db = db
        self.projects = projects
        self.employees = employees
        self.today = today

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create(self, actor: Actor, task_data: TaskCreate) -> Task:
        if await crud.task.get_task_by_code(self.db, task_data.task_code):
            tracing.warning("Task create rejected, code in use",
                            task_code=task_data.task_code, actor=actor.username)
            raise TaskAlreadyExistsError()

        await self._check_project_exists(task_data.project_code)

        has_access = actor.has_role(policy.MANAGER_ROLE) and \
            await self.projects.manager_has_project_access(actor.username, task_data.project_code)
        self._enforce(policy.can_create(actor, task_data.project_code, has_access), actor, "create")

        await self._check_employee_exists(task_data.assigned_employee)

        task = Task(
            task_code=task_data.task_code,
            task_subject=task_data.task_subject,
            task_detail=task_data.task_detail,
            project_code=task_data.project_code,
            assigned_employee=task_data.assigned_employee,
            task_status=TaskStatus.OPEN,
            assigned_date=self.today(),
            assigned_manager=actor.username,
            is_deleted=False,
        )

        try:
            task = await crud.task.save_task(self.db, task)
        except IntegrityError:
            # Lost a race against a concurrent create of the same code
            raise TaskAlreadyExistsError()

        tracing.info("Task created", task_code=task.task_code,
                     project_code=task.project_code, actor=actor.username)
        return task

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def read_by_code(self, actor: Actor, task_code: str) -> Task:
        task = await self._get_task(task_code)
        self._enforce(policy.check_read_access(actor, task), actor, "read")
        return task

    async def read_all_by_project(self, actor: Actor, project_code: str) -> List[Task]:
        return await self._readable_project_tasks(actor, project_code, "read_project")

    async def read_all_by_status(self, actor: Actor, task_status: TaskStatus) -> List[Task]:
        return await crud.task.get_tasks_by_status_and_assignee(self.db, task_status, actor.username)

    async def read_all_by_status_is_not(self, actor: Actor, task_status: TaskStatus) -> List[Task]:
        return await crud.task.get_tasks_by_status_not_and_assignee(self.db, task_status, actor.username)

    async def counts_by_project(self, actor: Actor, project_code: str) -> Dict[str, int]:
        tasks = await self._readable_project_tasks(actor, project_code, "count_project")
        completed = sum(1 for task in tasks if task.task_status == TaskStatus.COMPLETED)
        return {
            "completed_task_count": completed,
            "non_completed_task_count": len(tasks) - completed,
        }

    async def count_non_completed_by_assignee(self, assigned_employee: str) -> int:
        return await crud.task.count_non_completed_by_assignee(self.db, assigned_employee)

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------

    async def update(self, actor: Actor, task_code: str, task_data: TaskUpdate) -> Task:
        task = await self._get_task(task_code)

        await self._check_employee_exists(task_data.assigned_employee)
        self._enforce(policy.check_update_access(actor, task), actor, "update")
        await self._check_project_exists(task.project_code)

        # Code, internal ID, manager and project stay as stored
        task.assigned_date = policy.compute_assigned_date(task, task_data.assigned_employee, self.today())
        task.task_subject = task_data.task_subject
        task.task_detail = task_data.task_detail
        task.assigned_employee = task_data.assigned_employee
        if task_data.task_status is not None:
            task.task_status = task_data.task_status

        task = await self._save(task)
        tracing.info("Task updated", task_code=task_code, actor=actor.username)
        return task

    async def update_status(self, actor: Actor, task_code: str, task_status: TaskStatus) -> Task:
        task = await self._get_task(task_code)
        self._enforce(policy.check_status_update_access(actor, task), actor, "update_status")

        previous = task.task_status
        task.task_status = task_status

        task = await self._save(task)
        tracing.info("Task status changed", task_code=task_code, actor=actor.username,
                     from_status=previous.value, to_status=task_status.value)
        return task

    async def complete_by_project(self, actor: Actor, project_code: str) -> List[Task]:
        tasks = await self._readable_project_tasks(actor, project_code, "complete_project")
        for task in tasks:
            task.task_status = TaskStatus.COMPLETED
        await self._save_batch(tasks)

        tracing.info("Project tasks completed", project_code=project_code,
                     count=len(tasks), actor=actor.username)
        return tasks

    # ------------------------------------------------------------------
    # Soft delete
    # ------------------------------------------------------------------

    async def delete(self, actor: Actor, task_code: str) -> Task:
        task = await self._get_task(task_code)
        self._enforce(policy.check_update_access(actor, task), actor, "delete")

        self._soft_delete(task)
        task = await self._save(task)
        tracing.info("Task deleted", task_code=task_code, archived_code=task.task_code,
                     actor=actor.username)
        return task

    async def delete_by_project(self, actor: Actor, project_code: str) -> List[Task]:
        tasks = await self._readable_project_tasks(actor, project_code, "delete_project")
        for task in tasks:
            self._soft_delete(task)
        await self._save_batch(tasks)

        tracing.info("Project tasks deleted", project_code=project_code,
                     count=len(tasks), actor=actor.username)
        return tasks

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _soft_delete(task: Task) -> None:
        task.is_deleted = True
        task.task_code = policy.deletion_code(task.task_code, task.id)

    @staticmethod
    def _enforce(decision: policy.Decision, actor: Actor, operation: str) -> None:
        if not decision:
            tracing.warning("Access denied", operation=operation, actor=actor.username,
                            reason=decision.reason)
        policy.enforce(decision)

    async def _get_task(self, task_code: str) -> Task:
        task = await crud.task.get_task_by_code(self.db, task_code)
        if task is None:
            raise TaskNotFoundError()
        return task

    async def _readable_project_tasks(self, actor: Actor, project_code: str, operation: str) -> List[Task]:
        tasks = await crud.task.get_tasks_by_project(self.db, project_code)
        for task in tasks:
            self._enforce(policy.check_read_access(actor, task), actor, operation)
        return tasks

    async def _check_project_exists(self, project_code: str) -> None:
        if not await self.projects.project_exists(project_code):
            raise ProjectNotFoundError(project_code)

    async def _check_employee_exists(self, username: str) -> None:
        if not await self.employees.employee_exists(username):
            raise EmployeeNotFoundError(username)

    async def _save(self, task: Task) -> Task:
        try:
            return await crud.task.save_task(self.db, task)
        except StaleDataError:
            raise ConcurrentModificationError()

    async def _save_batch(self, tasks: List[Task]) -> None:
        try:
            for task in tasks:
                await crud.task.save_task(self.db, task, commit=False)
            await self.db.commit()
        except StaleDataError:
            raise ConcurrentModificationError()


__all__ = ["TaskService", "ProjectDirectory", "EmployeeDirectory"]
