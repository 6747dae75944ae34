"""Shared plumbing for the learner HTTP clients."""

from typing import Any

import httpx

from gittrainer.config import get_settings

from .session import SessionContext


class ApiClient:
    """Thin wrapper over ``httpx.AsyncClient`` adding the session's bearer token.

    Transport, HTTP status and body decoding errors propagate as
    ``httpx.HTTPError``.
    """

    def __init__(
        self,
        session: SessionContext,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self.session = session
        self.base_url = (base_url or settings.client_api_url).rstrip("/")
        self.timeout = settings.client_timeout_seconds if timeout is None else timeout
        self._transport = transport

    async def request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
    ) -> Any:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            response = await client.request(
                method,
                path,
                json=json,
                headers=self.session.auth_headers(),
            )
            response.raise_for_status()
            try:
                return response.json()
            except ValueError as e:
                raise httpx.DecodingError(
                    f"Invalid JSON from {path}: {e}", request=response.request
                ) from e
