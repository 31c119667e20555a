"""HTTP client for the syncboard REST API.

Covers the endpoints this server owns: board records and chat history.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Raised when a REST call fails."""

    def __init__(self, message: str, status_code: int = 0, detail: str = ""):
        self.message = message
        self.status_code = status_code
        self.detail = detail
        super().__init__(message)


class ApiClient:
    """Async REST client. All methods raise ApiError on failure."""

    def __init__(
        self,
        base_url: str,
        token: str = "",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=httpx.Timeout(30.0),
            transport=transport,
        )

    def set_token(self, token: str) -> None:
        self._client.headers["Authorization"] = f"Bearer {token}"

    async def get_board(self, board_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/api/boards/{board_id}")

    async def update_board(
        self,
        board_id: str,
        title: str | None = None,
        description: str | None = None,
        members: list[str] | None = None,
    ) -> dict[str, Any]:
        """PATCH /api/boards/{board_id}. Newly added members get a notification."""
        body = {"title": title, "description": description, "members": members}
        return await self._request(
            "PATCH",
            f"/api/boards/{board_id}",
            json={k: v for k, v in body.items() if v is not None},
        )

    async def get_messages(
        self, board_id: str, page: int = 1, limit: int | None = None
    ) -> dict[str, Any]:
        """GET /api/boards/{board_id}/messages.

        Returns:
            Dict with 'messages' (oldest first), 'total', 'page' and 'pages'.
        """
        params: dict[str, Any] = {"page": page}
        if limit is not None:
            params["limit"] = limit
        return await self._request("GET", f"/api/boards/{board_id}/messages", params=params)

    async def send_message(self, board_id: str, content: str, type: str = "text") -> dict[str, Any]:
        return await self._request(
            "POST", "/api/messages", json={"boardId": board_id, "content": content, "type": type}
        )

    async def close(self) -> None:
        await self._client.aclose()

    # --- Internal ---

    async def _request(
        self,
        method: str,
        url: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        try:
            response = await self._client.request(method, url, json=json, params=params)
        except httpx.TimeoutException as e:
            raise ApiError(f"Request timed out: {method} {url}", detail=str(e)) from e
        except httpx.HTTPError as e:
            raise ApiError(f"Cannot reach server: {e}", detail=str(e)) from e

        if response.status_code >= 400:
            try:
                body = response.json()
                detail = str(body.get("detail", body)) if isinstance(body, dict) else str(body)
            except ValueError:
                detail = response.text[:200]
            raise ApiError(
                f"{method} {url} returned {response.status_code}: {detail}",
                status_code=response.status_code,
                detail=detail,
            )

        if not response.content:
            return {}
        return response.json()
