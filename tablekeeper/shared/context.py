"""
Context variables for request tracing across the application.

Trace and request IDs are set by the tracing middleware and read by
the error handlers and the logger.
"""

from contextvars import ContextVar

trace_id_var: ContextVar[str] = ContextVar("trace_id", default="")
request_id_var: ContextVar[str] = ContextVar("request_id", default="")
user_id_var: ContextVar[str] = ContextVar("user_id", default="")


def set_request_context(request_id: str, trace_id: str | None = None) -> None:
    """Bind request and trace IDs for the current request.

    Args:
        request_id: Request ID (from X-Request-ID or generated).
        trace_id: Trace ID, defaults to the request ID.
    """
    request_id_var.set(request_id)
    trace_id_var.set(trace_id or request_id)


def set_user_id(user_id: str) -> None:
    user_id_var.set(user_id)


def clear_request_context() -> None:
    """Reset all request-scoped context variables."""
    request_id_var.set("")
    trace_id_var.set("")
    user_id_var.set("")
