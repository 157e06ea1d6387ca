import logging
import os
from typing import Any, Dict, List, Optional
import httpx

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:5000/api"


def default_api_url() -> str:
    return os.getenv("TODO_API_URL", DEFAULT_API_URL)


class ApiError(Exception):
    """A request to the task API failed, either in transport or with a non-2xx status"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message if status_code is None else f"{message} (HTTP {status_code})")


class TaskApiClient:
    """Thin async wrapper around the task REST API. Tasks are plain dicts as sent on the wire."""

    def __init__(self, base_url: Optional[str] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = (base_url or default_api_url()).rstrip("/")
        self._client = httpx.AsyncClient(base_url=self.base_url, transport=transport)

    async def __aenter__(self) -> "TaskApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise ApiError(f"Could not reach the task API: {e}") from e

        if response.is_error:
            message = response.reason_phrase
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and body.get("message"):
                message = str(body["message"])
            logger.warning("%s %s -> %d: %s", method, path, response.status_code, message)
            raise ApiError(message, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            logger.warning("%s %s -> %d: body is not JSON", method, path, response.status_code)
            raise ApiError("The task API sent an unreadable response", status_code=response.status_code) from e

    async def list_tasks(self, task_filter: str = "all") -> List[Dict[str, Any]]:
        return await self._request("GET", "/tasks", params={"filter": task_filter})

    async def get_task(self, task_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/tasks/{task_id}")

    async def create_task(self, text: str, priority: str = "medium") -> Dict[str, Any]:
        return await self._request("POST", "/tasks", json={"text": text, "priority": priority})

    async def update_task(self, task_id: str, **fields) -> Dict[str, Any]:
        """PUT only the given fields (text, completed, priority)"""
        return await self._request("PUT", f"/tasks/{task_id}", json=fields)

    async def delete_task(self, task_id: str) -> Dict[str, Any]:
        return await self._request("DELETE", f"/tasks/{task_id}")

    async def clear_completed(self) -> int:
        result = await self._request("DELETE", "/tasks")
        return result["deletedCount"]

    async def get_stats(self) -> Dict[str, int]:
        return await self._request("GET", "/stats")

    async def health(self) -> Dict[str, Any]:
        return await self._request("GET", "/health")
