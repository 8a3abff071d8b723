"""HTTP client for the task manager REST API.

Tasks travel as the plain JSON dicts the server returns. Any non-2xx response
or transport failure raises ApiError carrying the server's ``error`` text.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from task_manager.config import Settings

logger = logging.getLogger(__name__)


class ApiError(Exception):
    def __init__(self, status_code: int | None, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}" if status_code else message)


def _jsonable(payload: dict[str, Any]) -> dict[str, Any]:
    out = {}
    for key, value in payload.items():
        if hasattr(value, "isoformat"):
            value = value.isoformat()
        elif hasattr(value, "value"):
            value = value.value
        out[key] = value
    return out


class TaskApiClient:
    """Thin wrapper over an ``httpx.Client`` whose base_url points at the server."""

    def __init__(self, http: httpx.Client):
        self._http = http

    @classmethod
    def connect(cls, settings: Settings) -> "TaskApiClient":
        return cls(httpx.Client(base_url=settings.api_url, timeout=settings.api_timeout))

    def close(self) -> None:
        self._http.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            resp = self._http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise ApiError(None, f"Request failed: {e}") from e

        if resp.is_success:
            return resp.json()

        try:
            message = resp.json().get("error") or resp.reason_phrase
        except (ValueError, AttributeError):
            message = resp.text or resp.reason_phrase
        raise ApiError(resp.status_code, message)

    # ---- tasks ----

    def list_tasks(self, user_id: int) -> list[dict[str, Any]]:
        return self._request("GET", "/api/tasks", params={"user_id": user_id})

    def get_task(self, task_id: int) -> dict[str, Any]:
        return self._request("GET", f"/api/tasks/{task_id}")

    def create_task(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", "/api/tasks", json=_jsonable(payload))

    def update_task(self, task_id: int, payload: dict[str, Any]) -> dict[str, Any]:
        return self._request("PUT", f"/api/tasks/{task_id}", json=_jsonable(payload))

    def delete_task(self, task_id: int) -> dict[str, Any]:
        return self._request("DELETE", f"/api/tasks/{task_id}")

    # ---- accounts ----

    def register(self, username: str, password: str) -> dict[str, Any]:
        return self._request("POST", "/api/register", json={"username": username, "password": password})

    def login(self, username: str, password: str) -> dict[str, Any]:
        return self._request("POST", "/api/login", json={"username": username, "password": password})
