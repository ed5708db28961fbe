"""Authentication-specific exceptions."""

from fastapi import HTTPException, status


class AuthenticationError(HTTPException):
    """Base authentication error."""

    def __init__(self, detail: str = "Authentication failed") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class MissingTokenError(AuthenticationError):
    """No bearer token on the request."""

    def __init__(self) -> None:
        super().__init__(detail="No token provided")


class InvalidTokenError(AuthenticationError):
    """Invalid token provided."""

    def __init__(self) -> None:
        super().__init__(detail="Invalid token")


class TokenExpiredError(AuthenticationError):
    """Token has expired."""

    def __init__(self) -> None:
        super().__init__(detail="Token expired")


class UnknownUserError(AuthenticationError):
    """Token is valid but the user it names no longer exists."""

    def __init__(self) -> None:
        super().__init__(detail="User not found")


class InvalidCredentialsError(AuthenticationError):
    """Invalid credentials provided."""

    def __init__(self) -> None:
        super().__init__(detail="Invalid email or password")


class AuthorizationError(HTTPException):
    """Authenticated, but not allowed."""

    def __init__(self, detail: str = "Forbidden") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class AdminRequiredError(AuthorizationError):
    """Route is reserved for administrators."""

    def __init__(self) -> None:
        super().__init__(detail="Admin access required")
