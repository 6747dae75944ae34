"""Request-scoped logging context built on contextvars.

Every request gets a request id; authentication adds the user id and the
progress routes add the training module being worked on, so log lines emitted
deep inside services can be tied back to a learner and a module without
threading those values through every call.
"""

from contextvars import ContextVar, Token
from typing import Any
from uuid import UUID, uuid4


request_id_var: ContextVar[str] = ContextVar("request_id", default="")
user_id_var: ContextVar[str | None] = ContextVar("user_id", default=None)
trace_id_var: ContextVar[str | None] = ContextVar("trace_id", default=None)
module_id_var: ContextVar[str | None] = ContextVar("module_id", default=None)

_CONTEXT_VARS: dict[str, ContextVar] = {
    "request_id": request_id_var,
    "user_id": user_id_var,
    "trace_id": trace_id_var,
    "module_id": module_id_var,
}


def generate_request_id() -> str:
    """Generate a new unique request ID."""
    return str(uuid4())


def get_request_id() -> str:
    """Get the current request ID."""
    return request_id_var.get()


def set_request_id(request_id: str | None = None) -> str:
    """Set the request ID for the current context, generating one if missing."""
    rid = request_id or generate_request_id()
    request_id_var.set(rid)
    return rid


def get_user_id() -> str | None:
    return user_id_var.get()


def set_user_id(user_id: str | UUID | None) -> None:
    user_id_var.set(str(user_id) if user_id is not None else None)


def set_trace_id(trace_id: str | None) -> None:
    trace_id_var.set(trace_id)


def set_module_id(module_id: str | None) -> None:
    """Tag subsequent log lines with the training module being updated."""
    module_id_var.set(module_id)


def get_context() -> dict[str, Any]:
    """Return the non-empty context values as a dictionary."""
    return {name: var.get() for name, var in _CONTEXT_VARS.items() if var.get()}


def clear_context() -> None:
    """Reset all context variables at the end of a request."""
    request_id_var.set("")
    user_id_var.set(None)
    trace_id_var.set(None)
    module_id_var.set(None)


class RequestContext:
    """Context manager binding values for a block outside of a request.

    Usage:
        with RequestContext(user_id=user.id, module_id="git-basics"):
            logger.info("resume_computed")
    """

    def __init__(
        self,
        request_id: str | None = None,
        user_id: str | UUID | None = None,
        module_id: str | None = None,
    ) -> None:
        self.values: dict[str, str | None] = {
            "request_id": request_id or generate_request_id(),
            "user_id": str(user_id) if user_id is not None else None,
            "module_id": module_id,
        }
        self._tokens: dict[str, Token] = {}

    def __enter__(self) -> "RequestContext":
        for name, value in self.values.items():
            if value is not None:
                self._tokens[name] = _CONTEXT_VARS[name].set(value)
        return self

    def __exit__(self, *_: object) -> None:
        for name, token in self._tokens.items():
            _CONTEXT_VARS[name].reset(token)
        self._tokens.clear()
