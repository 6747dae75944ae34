"""Authentication calls for the learner client."""

from typing import Any

import structlog

from .base import ApiClient


logger = structlog.get_logger(__name__)


class AuthClient(ApiClient):
    """Register, log in and manage the session's user."""

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        role: str | None = None,
    ) -> dict[str, Any]:
        body = {"username": username, "email": email, "password": password}
        if role is not None:
            body["role"] = role
        data = await self.request("POST", "/api/auth/register", json=body)
        self.session.login(data["token"], data["user"])
        return data

    async def login(self, email: str, password: str) -> dict[str, Any]:
        data = await self.request(
            "POST",
            "/api/auth/login",
            json={"email": email, "password": password},
        )
        self.session.login(data["token"], data["user"])
        return data

    def logout(self) -> None:
        self.session.clear()

    async def profile(self) -> dict[str, Any]:
        """Fetch the current user and refresh the cached copy in the session."""
        user = await self.request("GET", "/api/auth/profile")
        if self.session.token:
            self.session.login(self.session.token, user)
        return user
