"""Authentication module exports."""

from olw.auth.context import (
    AdminAuth,
    AuthContext,
    AuthUser,
    CurrentAuth,
    OptionalUser,
)


__all__ = [
    "AdminAuth",
    "AuthContext",
    "AuthUser",
    "CurrentAuth",
    "OptionalUser",
]
