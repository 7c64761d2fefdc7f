"""
Pytest configuration and fixtures for Task Service tests
"""
import os

# Settings are read at import time; point them at an in-memory database first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ENABLE_JSON_LOGGING", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from datetime import date
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport
from jose import jwt
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from task_service.main import app
from task_service.db.database import get_db, Base
from task_service.db import models  # noqa: F401
from task_service.api.v1.dependencies import get_project_directory, get_employee_directory
from task_service.api.v1.schemas.auth import Actor
from task_service.core.config import settings
from task_service.services.task_service import TaskService

TODAY = date(2026, 10, 17)

# Create test engine
test_engine = create_async_engine(
    "sqlite+aiosqlite://",
    echo=False,
    poolclass=StaticPool,
    connect_args={"check_same_thread": False},
)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    autoflush=False,
    expire_on_commit=False
)


class FakeProjectDirectory:
    """In-memory project service: project code -> assigned manager"""

    def __init__(self, projects: dict):
        self.projects = dict(projects)
        self.error = None
        self.calls = []

    async def project_exists(self, project_code: str) -> bool:
        self.calls.append(("project_exists", project_code))
        if self.error:
            raise self.error
        return project_code in self.projects

    async def manager_has_project_access(self, username: str, project_code: str) -> bool:
        self.calls.append(("manager_has_project_access", username, project_code))
        if self.error:
            raise self.error
        return self.projects.get(project_code) == username


class FakeEmployeeDirectory:
    """In-memory user service"""

    def __init__(self, employees):
        self.employees = set(employees)
        self.error = None

    async def employee_exists(self, username: str) -> bool:
        if self.error:
            raise self.error
        return username in self.employees


class Clock:
    """Settable stand-in for date.today"""

    def __init__(self, today: date = TODAY):
        self.current = today

    def __call__(self) -> date:
        return self.current


def manager(username: str = "m1") -> Actor:
    return Actor(username=username, roles=frozenset({settings.MANAGER_ROLE}))


def employee(username: str = "e1") -> Actor:
    return Actor(username=username, roles=frozenset({settings.EMPLOYEE_ROLE}))


def make_token(username: str, *roles: str) -> str:
    """Keycloak-shaped access token; signature is not checked by the service"""
    claims = {
        "preferred_username": username,
        "resource_access": {settings.KEYCLOAK_CLIENT_ID: {"roles": list(roles)}},
    }
    return jwt.encode(claims, "test-secret", algorithm="HS256")


def auth_headers(username: str, *roles: str) -> dict:
    return {"Authorization": f"Bearer {make_token(username, *roles)}"}


@pytest.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def projects() -> FakeProjectDirectory:
    return FakeProjectDirectory({"P1": "m1", "P2": "m2"})


@pytest.fixture
def employees() -> FakeEmployeeDirectory:
    return FakeEmployeeDirectory({"e1", "e2", "e3"})


@pytest.fixture
def clock() -> Clock:
    return Clock()


@pytest.fixture
def service(db_session, projects, employees, clock) -> TaskService:
    return TaskService(db_session, projects, employees, today=clock)


@pytest.fixture(scope="function")
async def client(db_session: AsyncSession, projects, employees) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database and collaborator overrides"""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_project_directory] = lambda: projects
    app.dependency_overrides[get_employee_directory] = lambda: employees

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def task_payload():
    """Task creation payload for project P1"""
    return {
        "task_code": "T-1",
        "task_subject": "Write release notes",
        "task_detail": "Cover the new access rules",
        "project_code": "P1",
        "assigned_employee": "e1",
    }
