from dataclasses import dataclass


@dataclass(frozen=True)
class RequestContext:
    """Verified caller identity, passed explicitly into policy and services."""

    user_id: int
    role: str
    name: str
    trace_id: str = ""


def build_request_context(user, *, trace_id: str = "") -> RequestContext:
    return RequestContext(user_id=user.id, role=user.role, name=user.name, trace_id=trace_id)
