# task_service/api/v1/dependencies.py
"""Per-request wiring of the task service and its collaborators"""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from task_service.auth.dependencies import get_access_token
from task_service.core.config import settings
from task_service.db.database import get_db
from task_service.integrations.directory_client import ProjectDirectoryClient, EmployeeDirectoryClient
from task_service.services.task_service import TaskService


async def get_project_directory(token: str = Depends(get_access_token)) -> ProjectDirectoryClient:
    return ProjectDirectoryClient(settings.PROJECT_SERVICE_URL, access_token=token)


async def get_employee_directory(token: str = Depends(get_access_token)) -> EmployeeDirectoryClient:
    return EmployeeDirectoryClient(settings.USER_SERVICE_URL, access_token=token)


async def get_task_service(
        db: AsyncSession = Depends(get_db),
        projects: ProjectDirectoryClient = Depends(get_project_directory),
        employees: EmployeeDirectoryClient = Depends(get_employee_directory)
) -> TaskService:
    return TaskService(db, projects, employees)
