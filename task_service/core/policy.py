# task_service/core/policy.py
"""
Access and lifecycle rules for tasks.

Every function here is a pure decision over its arguments: no database,
no network, no current-user lookup. The lifecycle service fetches what is
needed, asks for a decision and acts on it.

Managers own tasks through ``assigned_manager`` and may do full updates and
deletes; employees hold tasks through ``assigned_employee`` and may only
change status. Read access dispatches on role.
"""
from dataclasses import dataclass
from datetime import date
from typing import Optional, Type

from task_service.api.v1.schemas.auth import Actor
from task_service.core.config import settings
from task_service.exceptions.tasks import (
    AccessDeniedError, ProjectAccessDeniedError, TaskAccessDeniedError
)

MANAGER_ROLE = settings.MANAGER_ROLE
EMPLOYEE_ROLE = settings.EMPLOYEE_ROLE

NO_ROLE_REASON = "Access is denied"
NOT_PROJECT_OWNER_REASON = "Access denied, make sure that you are working on your own project."
NOT_TASK_OWNER_REASON = "Access denied, make sure that you are working on your own task."
NOT_MANAGER_REASON = "Only managers can create tasks."
NO_PROJECT_ACCESS_REASON = "Access denied, you do not manage project {project_code}."


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: Optional[str] = None
    error: Type[AccessDeniedError] = AccessDeniedError

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(True)


def deny(reason: str, error: Type[AccessDeniedError] = AccessDeniedError) -> Decision:
    return Decision(False, reason, error)


def enforce(decision: Decision) -> None:
    """Raise the decision's access error if it denies"""
    if not decision.allowed:
        raise decision.error(decision.reason)


def can_create(actor: Actor, project_code: str, has_project_access: bool) -> Decision:
    """
    Managers may create tasks in projects they have access to.
    ``has_project_access`` is the project service's answer for this actor.
    """
    if not actor.has_role(MANAGER_ROLE):
        return deny(NOT_MANAGER_REASON)
    if not has_project_access:
        return deny(NO_PROJECT_ACCESS_REASON.format(project_code=project_code), ProjectAccessDeniedError)
    return ALLOW


def check_manager_ownership(actor: Actor, task) -> Decision:
    if actor.username == task.assigned_manager:
        return ALLOW
    return deny(NOT_PROJECT_OWNER_REASON, ProjectAccessDeniedError)


def check_employee_ownership(actor: Actor, task) -> Decision:
    if actor.username == task.assigned_employee:
        return ALLOW
    return deny(NOT_TASK_OWNER_REASON, TaskAccessDeniedError)


def check_read_access(actor: Actor, task) -> Decision:
    """Manager role wins over employee role; an actor with neither sees nothing."""
    if actor.has_role(MANAGER_ROLE):
        return check_manager_ownership(actor, task)
    if actor.has_role(EMPLOYEE_ROLE):
        return check_employee_ownership(actor, task)
    return deny(NO_ROLE_REASON)


def check_update_access(actor: Actor, task) -> Decision:
    """Full-field update and delete belong to the owning manager only"""
    return check_manager_ownership(actor, task)


def check_status_update_access(actor: Actor, task) -> Decision:
    """Status-only update belongs to the assigned employee only"""
    return check_employee_ownership(actor, task)


def compute_assigned_date(existing, new_assignee: str, today: date) -> date:
    """Reassignment restarts the clock; keeping the same assignee keeps the date."""
    if new_assignee != existing.assigned_employee:
        return today
    return existing.assigned_date


def deletion_code(original_code: str, internal_id: int) -> str:
    return f"{original_code}-{internal_id}"
