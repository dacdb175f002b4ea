"""Domain exceptions raised by services and mapped to HTTP statuses at the edge."""


class DomainError(Exception):
    """Base class for expected, user-facing failures."""

    status_code: int = 400
    error: str = "bad_request"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(DomainError, LookupError):
    """Entity is absent, or present but owned by another issuer."""

    status_code = 404
    error = "not_found"


class BadRequestError(DomainError, ValueError):
    status_code = 400
    error = "bad_request"


class ConflictError(DomainError):
    """A concurrent change to the same allocation group won the race."""

    status_code = 409
    error = "conflict"
