"""HTTP client for a deployed GTM Alpha server."""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8000"


class APIError(Exception):
    """The server could not be reached or answered with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class GTMAlphaClient:
    """Async client for the /api routes.

    Args:
        base_url: Server root, e.g. 'http://localhost:8000'.
        timeout: Read timeout in seconds.
        transport: Optional httpx transport (tests pass an httpx.MockTransport).
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = httpx.Timeout(timeout, connect=10.0)
        self._transport = transport

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            try:
                response = await client.request(method, path, **kwargs)
            except httpx.TimeoutException as exc:
                raise APIError(f"Request to {self.base_url}{path} timed out") from exc
            except httpx.HTTPError as exc:
                raise APIError(f"Could not reach {self.base_url}: {exc}") from exc

        if response.is_error:
            detail = response.text
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and "error" in body:
                detail = body["error"]
            raise APIError(f"HTTP {response.status_code}: {detail}", status_code=response.status_code)

        try:
            return response.json()
        except ValueError as exc:
            raise APIError(f"Invalid JSON from {path}") from exc

    async def health(self) -> dict:
        return await self._request("GET", "/api/health")

    async def analyze(self, payload: dict, include_report: bool = False) -> dict:
        """Full consultation. Cached server-side per business for 30 days."""
        body = dict(payload)
        if include_report:
            body["include_report"] = True
        return await self._request("POST", "/api/analyze", json=body)

    async def epic_scores(self, payload: dict) -> dict:
        return await self._request("POST", "/api/epic-scores", json=payload)

    async def consultation_scores(self, consultation_id: str) -> dict:
        """Scores of a stored consultation, by id."""
        return await self._request("GET", "/api/epic-scores", params={"consultation_id": consultation_id})

    async def roadmap(self, payload: dict) -> dict:
        return await self._request("POST", "/api/roadmap", json=payload)
