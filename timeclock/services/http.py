from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Optional
from uuid import uuid4

import httpx

from ..core.errors import TransportError, UnauthorizedError, error_for_response
from ..core.logging import request_id_ctx_var
from .tokens import TokenManager

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


@dataclass
class ApiResponse:
    status: int
    data: Any


def _decode_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def unwrap(data: Any) -> Any:
    """Return ``data["data"]`` when the server wrapped its payload in an envelope."""

    if isinstance(data, dict) and isinstance(data.get("data"), (dict, list)):
        return data["data"]
    return data


class ApiClient:
    """Thin async HTTP client for the time-tracking service.

    The bearer token is read from the ``TokenManager`` on every request, so a
    ``clear()`` is honoured by the very next call. A ``401`` clears the
    credential before ``UnauthorizedError`` is raised.
    """

    def __init__(
        self,
        base_url: str,
        tokens: TokenManager,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.tokens = tokens
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
        )

    def _headers(self, request_id: str) -> dict[str, str]:
        headers = {REQUEST_ID_HEADER: request_id}
        token = self.tokens.current()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def request(self, method: str, path: str, json: Any | None = None) -> ApiResponse:
        request_id = str(uuid4())
        ctx_token = request_id_ctx_var.set(request_id)
        headers = self._headers(request_id)
        start = time.perf_counter()
        try:
            try:
                response = await self._client.request(method, path, json=json, headers=headers)
            except httpx.TimeoutException as exc:
                logger.warning("%s %s timed out", method, path)
                raise TransportError(f"{method} {path} timed out") from exc
            except httpx.HTTPError as exc:
                logger.warning("%s %s failed: %s", method, path, exc)
                raise TransportError(f"{method} {path} failed: {exc}") from exc

            duration_ms = (time.perf_counter() - start) * 1000
            logger.info(
                "http.request.completed",
                extra={
                    "extra_data": {
                        "method": method,
                        "path": path,
                        "status": response.status_code,
                        "duration_ms": round(duration_ms, 2),
                        "authenticated": "Authorization" in headers,
                    }
                },
            )

            body = _decode_body(response)
            if response.status_code >= 400:
                error = error_for_response(response.status_code, body)
                if isinstance(error, UnauthorizedError):
                    logger.warning("Unauthorized response for %s %s; clearing credential", method, path)
                    await self.tokens.clear()
                raise error
            return ApiResponse(status=response.status_code, data=body)
        finally:
            request_id_ctx_var.reset(ctx_token)

    async def get(self, path: str) -> ApiResponse:
        return await self.request("GET", path)

    async def post(self, path: str, json: Any | None = None) -> ApiResponse:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, json: Any | None = None) -> ApiResponse:
        return await self.request("PUT", path, json=json)

    async def delete(self, path: str) -> ApiResponse:
        return await self.request("DELETE", path)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
