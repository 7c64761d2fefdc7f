# task_service/exceptions/tasks.py
from fastapi import HTTPException, status


class TaskAlreadyExistsError(HTTPException):
    """A live task already uses this code"""
    def __init__(self, detail: str = "Task already exists."):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class TaskNotFoundError(HTTPException):
    """No live task with this code"""
    def __init__(self, detail: str = "Task does not exist."):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class AccessDeniedError(HTTPException):
    """Base access-denied error"""
    def __init__(self, detail: str = "Access is denied"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class ProjectAccessDeniedError(AccessDeniedError):
    """Actor does not manage the task's project"""
    def __init__(self, detail: str = "Access denied, make sure that you are working on your own project."):
        super().__init__(detail=detail)


class TaskAccessDeniedError(AccessDeniedError):
    """Actor is not the task's assignee"""
    def __init__(self, detail: str = "Access denied, make sure that you are working on your own task."):
        super().__init__(detail=detail)


class ProjectNotFoundError(HTTPException):
    def __init__(self, project_code: str):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Project {project_code} does not exist."
        )


class EmployeeNotFoundError(HTTPException):
    def __init__(self, username: str):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Employee {username} does not exist."
        )


class ExternalServiceError(HTTPException):
    """A collaborating service failed or timed out"""
    def __init__(self, service: str, reason: str):
        self.service = service
        self.reason = reason
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{service} unavailable: {reason}"
        )


class ExternalServiceRejectedError(ExternalServiceError):
    """A collaborating service refused the lookup (4xx other than 404)"""
    def __init__(self, service: str, upstream_status: int, reason: str):
        super().__init__(service, reason)
        self.upstream_status = upstream_status
        self.status_code = status.HTTP_502_BAD_GATEWAY
        self.detail = f"{service} rejected the request: {reason}"


class ConcurrentModificationError(HTTPException):
    """The task changed between read and write"""
    def __init__(self, detail: str = "Task was modified concurrently, retry the request."):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)
