"""Learner session persisted between client runs.

Holds the bearer token and the user it was issued for. The session is passed
explicitly to every client instead of living in a global.
"""

from pathlib import Path
from typing import Any

import orjson
import structlog


logger = structlog.get_logger(__name__)


class SessionContext:
    """Bearer token plus the authenticated user, optionally backed by a file."""

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path).expanduser() if path else None
        self.token: str | None = None
        self.user: dict[str, Any] | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    @property
    def user_id(self) -> str | None:
        return self.user.get("id") if self.user else None

    def auth_headers(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def load(self) -> bool:
        """Restore a saved session. Returns True when one was found."""
        if self.path is None or not self.path.exists():
            return False

        try:
            data = orjson.loads(self.path.read_bytes())
        except (OSError, orjson.JSONDecodeError) as e:
            logger.warning("session_load_failed", path=str(self.path), error=str(e))
            return False

        self.token = data.get("token")
        self.user = data.get("user")
        logger.debug("session_loaded", user_id=self.user_id)
        return self.is_authenticated

    def login(self, token: str, user: dict[str, Any]) -> None:
        self.token = token
        self.user = user
        self._save()
        logger.info("session_started", user_id=self.user_id)

    def clear(self) -> None:
        """Forget the token and user and remove the session file."""
        user_id = self.user_id
        self.token = None
        self.user = None
        if self.path is not None:
            self.path.unlink(missing_ok=True)
        logger.info("session_cleared", user_id=user_id)

    def _save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_bytes(orjson.dumps({"token": self.token, "user": self.user}))
