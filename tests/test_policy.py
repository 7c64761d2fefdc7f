"""
Policy engine tests: pure access and transition decisions
"""
import pytest
from datetime import date
from types import SimpleNamespace

from task_service.api.v1.schemas.auth import Actor
from task_service.core import policy
from task_service.core.config import settings
from task_service.exceptions.tasks import (
    AccessDeniedError, ProjectAccessDeniedError, TaskAccessDeniedError
)

USERS = ["m1", "m2", "e1", "e2", ""]


def make_task(manager="m1", employee="e1", assigned_date=date(2026, 1, 5)):
    return SimpleNamespace(assigned_manager=manager, assigned_employee=employee, assigned_date=assigned_date)


def actor(username, *roles):
    return Actor(username=username or "anonymous", roles=frozenset(roles))


class TestOwnership:
    """Ownership checks compare the actor against the task's manager or employee"""

    @pytest.mark.parametrize("username", USERS)
    @pytest.mark.parametrize("owner", ["m1", "m2"])
    def test_manager_ownership_iff_assigned_manager(self, username, owner):
        task = make_task(manager=owner)
        subject = actor(username, settings.MANAGER_ROLE)

        decision = policy.check_manager_ownership(subject, task)

        assert decision.allowed == (subject.username == owner)

    @pytest.mark.parametrize("username", USERS)
    @pytest.mark.parametrize("assignee", ["e1", "e2"])
    def test_employee_ownership_iff_assigned_employee(self, username, assignee):
        task = make_task(employee=assignee)
        subject = actor(username, settings.EMPLOYEE_ROLE)

        decision = policy.check_employee_ownership(subject, task)

        assert decision.allowed == (subject.username == assignee)

    def test_denials_carry_specific_errors(self):
        task = make_task()

        manager_denial = policy.check_manager_ownership(actor("m2"), task)
        employee_denial = policy.check_employee_ownership(actor("e2"), task)

        assert manager_denial.error is ProjectAccessDeniedError
        assert "your own project" in manager_denial.reason
        assert employee_denial.error is TaskAccessDeniedError
        assert "your own task" in employee_denial.reason


class TestReadAccess:
    """Role dispatch for read access"""

    def test_manager_role_uses_manager_ownership(self):
        task = make_task()
        assert policy.check_read_access(actor("m1", settings.MANAGER_ROLE), task)
        assert not policy.check_read_access(actor("m2", settings.MANAGER_ROLE), task)

    def test_employee_role_uses_employee_ownership(self):
        task = make_task()
        assert policy.check_read_access(actor("e1", settings.EMPLOYEE_ROLE), task)
        assert not policy.check_read_access(actor("e2", settings.EMPLOYEE_ROLE), task)

    def test_manager_role_takes_precedence(self):
        """A user holding both roles is judged as a manager"""
        task = make_task(manager="m1", employee="boss")
        both = actor("boss", settings.MANAGER_ROLE, settings.EMPLOYEE_ROLE)

        assert not policy.check_read_access(both, task)

    @pytest.mark.parametrize("username", ["m1", "e1", "someone"])
    @pytest.mark.parametrize("roles", [(), ("Admin",), ("Viewer", "Auditor")])
    def test_roleless_actor_is_always_denied(self, username, roles):
        """Even the named manager or employee is denied without a role"""
        task = make_task()

        decision = policy.check_read_access(actor(username, *roles), task)

        assert not decision.allowed
        assert decision.error is AccessDeniedError
        assert decision.reason == "Access is denied"


class TestUpdateAccess:
    """Full update for the owning manager, status update for the assigned employee"""

    def test_full_update_only_for_owning_manager(self):
        task = make_task()
        assert policy.check_update_access(actor("m1", settings.MANAGER_ROLE), task)
        assert not policy.check_update_access(actor("e1", settings.EMPLOYEE_ROLE), task)
        assert not policy.check_update_access(actor("m2", settings.MANAGER_ROLE), task)

    def test_status_update_only_for_assigned_employee(self):
        task = make_task()
        assert policy.check_status_update_access(actor("e1", settings.EMPLOYEE_ROLE), task)
        assert not policy.check_status_update_access(actor("m1", settings.MANAGER_ROLE), task)
        assert not policy.check_status_update_access(actor("e2", settings.EMPLOYEE_ROLE), task)


class TestCreateAccess:
    """Create needs the manager role and access to the project"""

    def test_manager_with_project_access(self):
        assert policy.can_create(actor("m1", settings.MANAGER_ROLE), "P1", True)

    def test_manager_without_project_access(self):
        decision = policy.can_create(actor("m1", settings.MANAGER_ROLE), "P2", False)
        assert not decision
        assert decision.error is ProjectAccessDeniedError
        assert "P2" in decision.reason

    def test_employee_cannot_create(self):
        decision = policy.can_create(actor("e1", settings.EMPLOYEE_ROLE), "P1", True)
        assert not decision
        assert decision.error is AccessDeniedError

    def test_enforce_raises_decision_error(self):
        with pytest.raises(ProjectAccessDeniedError):
            policy.enforce(policy.can_create(actor("m1", settings.MANAGER_ROLE), "P1", False))
        policy.enforce(policy.ALLOW)


class TestTransitions:
    """Assigned-date and deletion-code derivations"""

    @pytest.mark.parametrize("new_assignee,expected", [
        ("e1", date(2026, 1, 5)),   # same assignee keeps history
        ("e2", date(2026, 10, 17)),  # reassignment restarts the clock
        ("", date(2026, 10, 17)),
    ])
    def test_compute_assigned_date(self, new_assignee, expected):
        task = make_task(employee="e1", assigned_date=date(2026, 1, 5))

        assert policy.compute_assigned_date(task, new_assignee, date(2026, 10, 17)) == expected

    @pytest.mark.parametrize("code,internal_id,expected", [
        ("T-1", 7, "T-1-7"),
        ("PRJ-TSK-0042", 1001, "PRJ-TSK-0042-1001"),
    ])
    def test_deletion_code(self, code, internal_id, expected):
        assert policy.deletion_code(code, internal_id) == expected
