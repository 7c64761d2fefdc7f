# task_service/integrations/directory_client.py
"""Clients for the project and user services that own project and employee records"""
import asyncio
import aiohttp
import backoff
from typing import Any, Dict, Optional
from urllib.parse import quote
from loguru import logger

from task_service.core.config import settings
from task_service.core import tracing
from task_service.exceptions.tasks import ExternalServiceError, ExternalServiceRejectedError


def _max_tries() -> int:
    return settings.EXTERNAL_SERVICE_MAX_TRIES


def _is_permanent(exc: ExternalServiceError) -> bool:
    # 4xx answers other than 404 are final
    return isinstance(exc, ExternalServiceRejectedError)


def _log_backoff(details):
    exc = details.get("exception")
    logger.warning(
        f"External call {details['target'].__name__} failed (attempt {details['tries']}), "
        f"retrying in {details['wait']:.2f}s: {exc}"
    )


def _log_giveup(details):
    logger.error(f"External call {details['target'].__name__} gave up after {details['tries']} attempts")


def path_segment(value: str) -> Optional[str]:
    """Percent-encode a value for use as one URL path segment; ``None`` if it cannot name a resource"""
    if value in ("", ".", ".."):
        return None
    return quote(value, safe="")


class DirectoryClient:
    """Async HTTP client for a JSON lookup service"""

    service_name = "directory-service"

    def __init__(
        self,
        base_url: str,
        timeout: Optional[float] = None,
        access_token: Optional[str] = None
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout = aiohttp.ClientTimeout(
            total=timeout if timeout is not None else settings.EXTERNAL_SERVICE_TIMEOUT
        )
        self.access_token = access_token

    def with_token(self, access_token: Optional[str]) -> "DirectoryClient":
        """Same client forwarding the caller's bearer token"""
        return type(self)(self.base_url, self.timeout.total, access_token)

    async def _lookup(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        """GET ``{collection}/{key}`` with the key escaped as a single segment"""
        segment = path_segment(key)
        if segment is None:
            logger.warning(f"{self.service_name} lookup skipped, unusable key {key!r}")
            return None
        return await self._get(f"{collection}/{segment}")

    @backoff.on_exception(
        backoff.expo,
        ExternalServiceError,
        max_tries=_max_tries,
        giveup=_is_permanent,
        on_backoff=_log_backoff,
        on_giveup=_log_giveup
    )
    async def _get(self, path: str) -> Optional[Dict[str, Any]]:
        """GET a resource; ``None`` on 404, raises ExternalServiceError otherwise"""
        url = f"{self.base_url}{path}"
        headers = {tracing.TRACE_HEADER: tracing.get_current_trace_id()}
        if self.access_token:
            headers['Authorization'] = f'Bearer {self.access_token}'

        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.get(url, headers=headers) as response:
                    if response.status == 404:
                        return None
                    if response.status >= 400:
                        body = await response.text()
                        reason = f"HTTP {response.status}: {body[:200]}"
                        if response.status < 500:
                            raise ExternalServiceRejectedError(self.service_name, response.status, reason)
                        raise ExternalServiceError(self.service_name, reason)
                    if response.content_length == 0:
                        return {}
                    return await response.json(content_type=None)

        except asyncio.TimeoutError:
            raise ExternalServiceError(self.service_name, f"request timeout after {self.timeout.total}s")
        except aiohttp.ClientError as e:
            raise ExternalServiceError(self.service_name, f"connection error: {e}")


class ProjectDirectoryClient(DirectoryClient):
    """Project lookups against the project service.

    Instances live for one request, so a project fetched once is reused by
    the existence and manager checks that follow.
    """

    service_name = "project-service"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._projects: Dict[str, Optional[Dict[str, Any]]] = {}

    async def get_project(self, project_code: str) -> Optional[Dict[str, Any]]:
        if project_code not in self._projects:
            self._projects[project_code] = await self._lookup("/api/v1/projects", project_code)
        return self._projects[project_code]

    async def project_exists(self, project_code: str) -> bool:
        return await self.get_project(project_code) is not None

    async def manager_has_project_access(self, username: str, project_code: str) -> bool:
        """A manager has access to a project when they are its assigned manager"""
        project = await self.get_project(project_code)
        if project is None:
            return False
        return project.get("assigned_manager") == username


class EmployeeDirectoryClient(DirectoryClient):
    """Employee lookups against the user service"""

    service_name = "user-service"

    async def employee_exists(self, username: str) -> bool:
        return await self._lookup("/api/v1/users", username) is not None
