"""
HTTP client for the board API.

Wraps ``httpx.AsyncClient``; every failure (non-2xx answer, transport error or
timeout) is raised as ``ApiError`` so callers have a single thing to catch.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from taskboard.config import settings

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """A request that did not succeed. ``status`` is None when no response arrived."""

    def __init__(self, message: str, status: Optional[int] = None):
        self.message = message
        self.status = status
        super().__init__(message)

    @property
    def is_conflict(self) -> bool:
        return self.status == 409


class BoardApiClient:
    """Client for the ``/api/v1`` board endpoints"""

    def __init__(
        self,
        token: str,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.timeout = httpx.Timeout(timeout if timeout is not None else settings.CLIENT_TIMEOUT_SECONDS)
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Authorization": f"Bearer {token}"},
            timeout=self.timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "BoardApiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        try:
            response = await self._client.request(method, path, json=json)
        except httpx.TimeoutException as e:
            logger.warning("%s %s timed out", method, path)
            raise ApiError("Request timed out") from e
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise ApiError(f"Request failed: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.is_success and body.get("success", True):
            return body.get("data")

        message = body.get("message") or response.reason_phrase or "Request failed"
        raise ApiError(message, status=response.status_code)

    async def get_board(self, board_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/boards/{board_id}")

    async def reorder_columns(self, board_id: str, column_ids: List[str]) -> Dict[str, Any]:
        return await self._request("PUT", f"/boards/{board_id}/column-order", json={"columnIds": list(column_ids)})

    async def move_task(self, task_id: str, target_column_id: str, new_order: int) -> Dict[str, Any]:
        return await self._request(
            "PATCH",
            f"/tasks/{task_id}/move",
            json={"targetColumnId": target_column_id, "newOrder": new_order},
        )
