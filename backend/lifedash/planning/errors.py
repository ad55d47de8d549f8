"""
Planning Errors

Exceptions raised by the project, membership and profile services.
The API layer maps them to HTTP responses; nothing here knows about HTTP.
"""


class PlanningError(Exception):
    """Base exception for planning errors."""
    pass


class ValidationFailed(PlanningError):
    """Input rejected before any write was attempted."""
    pass


class NotFound(PlanningError):
    """A referenced project, shared project or element does not exist."""
    pass


class MembershipConflict(PlanningError):
    """The operation is invalid for the caller's membership state."""
    pass


class AuthRequired(PlanningError):
    """The caller is signed out."""
    pass


class AuthPending(PlanningError):
    """The identity provider has not resolved the caller yet."""
    pass
