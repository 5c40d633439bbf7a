"""Domain errors raised by services and mapped to HTTP responses by the API layer."""


class ServiceError(ValueError):
    """Base class for expected, user-facing service failures."""


class ValidationError(ServiceError):
    """Input is missing, malformed or inconsistent (HTTP 400)."""


class NotFoundError(ServiceError):
    """Entity does not exist or belongs to another user (HTTP 404)."""


class AuthenticationError(ServiceError):
    """Supplied credentials do not match (HTTP 401)."""
