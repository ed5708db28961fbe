class DomainError(Exception):
    """Base exception class for all domain-specific exceptions."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class ValidationError(DomainError):
    """Exception raised when input is missing or malformed."""


class InvalidInputError(DomainError):
    """Exception raised when a request breaks a business rule."""


class ConflictError(DomainError):
    """Exception raised when a unique value is already taken."""


class ResourceNotFoundError(DomainError):
    """Exception raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: object | None = None) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(f"{resource_type} not found")
