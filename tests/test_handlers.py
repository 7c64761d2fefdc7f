"""
Error body shape for handlers that are hard to reach over HTTP
"""
import json
from starlette.requests import Request

from task_service.exceptions.handlers import global_exception_handler


def make_request(path: str) -> Request:
    return Request({
        "type": "http",
        "method": "GET",
        "scheme": "http",
        "server": ("test", 80),
        "root_path": "",
        "path": path,
        "query_string": b"",
        "headers": [(b"authorization", b"Bearer abc.def.ghi")],
    })


class TestGlobalExceptionHandler:
    """Unhandled errors still produce the common error body"""

    async def test_body_shape(self):
        response = await global_exception_handler(make_request("/api/v1/tasks/T-1"), RuntimeError("boom"))

        assert response.status_code == 500
        body = json.loads(response.body)
        assert body["detail"] == "Internal server error"
        assert body["status_code"] == 500
        assert body["path"] == "/api/v1/tasks/T-1"
        assert body["error_type"] == "RuntimeError"
        assert len(body["trace_id"]) == 32
        assert "timestamp" in body
