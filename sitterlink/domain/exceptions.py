"""Custom exception hierarchy for SitterLink.

Following error taxonomy: retryable, non-retryable, validation, access.
"""


class SitterLinkError(Exception):
    """Base exception for all application errors."""

    pass


class RetryableError(SitterLinkError):
    """Errors that may succeed when the user repeats the action."""

    pass


class NonRetryableError(SitterLinkError):
    """Errors that will fail again unless the input changes."""

    pass


class ValidationError(NonRetryableError):
    """Input rejected before any store call was made."""

    pass


class AuthenticationError(NonRetryableError):
    """No authenticated user is available."""

    pass


class AccessDeniedError(NonRetryableError):
    """The current user's role does not allow the operation."""

    def __init__(self, required_role: str, actual_role: str | None) -> None:
        """Initialize with the role the operation needs."""
        self.required_role = required_role
        self.actual_role = actual_role
        super().__init__(
            f"Operation requires role '{required_role}', current role: {actual_role}"
        )


class StoreError(RetryableError):
    """Entity store call failed (transport or backend validation)."""

    def __init__(self, entity: str, operation: str, detail: str = "") -> None:
        """Initialize with the entity kind and operation that failed."""
        self.entity = entity
        self.operation = operation
        message = f"{entity}.{operation} failed"
        if detail:
            message += f": {detail}"
        super().__init__(message)
