"""HTTP clients used by the learner-facing views."""

from .auth import AuthClient
from .base import ApiClient
from .progress import ProgressClient
from .session import SessionContext


__all__ = [
    "ApiClient",
    "AuthClient",
    "ProgressClient",
    "SessionContext",
]
