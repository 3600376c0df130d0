"""Domain-level exceptions.

All expected failures are expressed as subclasses of DomainException so the
HTTP and CLI layers can catch them uniformly.  Each subclass carries the
HTTP-style status code it is rendered with; anything that is *not* a
DomainException is treated as an unexpected internal fault.
"""


class DomainException(Exception):
    """Base class for all domain (operational) errors."""

    status_code = 500


class ValidationError(DomainException):
    """A business rule or invariant was violated."""

    status_code = 400


class InvalidTransitionError(ValidationError):
    """A lifecycle status change is not in the allowed transition table."""

    def __init__(self, current: str, requested: str) -> None:
        self.current = current
        self.requested = requested
        super().__init__(
            f"Invalid status transition from {current} to {requested}"
        )


class AuthenticationError(DomainException):
    """Missing, invalid or expired credentials."""

    status_code = 401


class AuthorizationError(DomainException):
    """The caller is authenticated but not allowed to do this."""

    status_code = 403


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""

    status_code = 404


class ConflictError(DomainException):
    """The request conflicts with the current state of a resource."""

    status_code = 409


class RateLimitExceededError(DomainException):
    """Too many requests from one client within the current window."""

    status_code = 429
