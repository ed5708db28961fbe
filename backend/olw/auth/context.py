"""AuthContext and FastAPI dependencies for the bearer-token gate.

Every protected handler receives an explicit ``AuthContext`` that pairs the
resolved user with the request's ``AsyncSession``. Nothing is stashed on the
request object.

Resolution runs ``Unauthenticated -> TokenPresent -> TokenValid ->
UserResolved``; each failed step raises a 401 with its own message.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Annotated

from fastapi import Depends, Request

from olw.auth.exceptions import AdminRequiredError, AuthenticationError, MissingTokenError, UnknownUserError
from olw.auth.security import decode_access_token
from olw.database.session import DbSession
from olw.users.models import Role, User


if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthUser:
    """The authenticated user as seen by handlers."""

    id: int
    email: str
    name: str | None
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @classmethod
    def from_model(cls, user: User) -> AuthUser:
        return cls(id=user.id, email=user.email, name=user.name, role=user.role)


@dataclass(frozen=True)
class AuthContext:
    """Request-scoped user context."""

    user: AuthUser
    session: AsyncSession

    @property
    def user_id(self) -> int:
        return self.user.id


def extract_bearer_token(request: Request) -> str | None:
    """Return the token from ``Authorization: Bearer <token>``, if well formed."""
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    token = token.strip()
    if scheme != "Bearer" or not token:
        return None
    return token


async def resolve_user(token: str, session: AsyncSession) -> AuthUser:
    """Turn a bearer token into the user it belongs to."""
    payload = decode_access_token(token)
    user = await session.get(User, payload["userId"])
    if user is None:
        raise UnknownUserError
    return AuthUser.from_model(user)


async def get_auth_context(request: Request, session: DbSession) -> AuthContext:
    """Mandatory auth: any failure is a 401."""
    token = extract_bearer_token(request)
    if token is None:
        logger.warning("Missing or malformed Authorization header on %s %s", request.method, request.url.path)
        raise MissingTokenError
    return AuthContext(user=await resolve_user(token, session), session=session)


async def get_optional_user(request: Request, session: DbSession) -> AuthUser | None:
    """Optional auth: never blocks, falls back to an anonymous viewer."""
    token = extract_bearer_token(request)
    if token is None:
        return None
    try:
        return await resolve_user(token, session)
    except AuthenticationError as e:
        logger.debug("Ignoring unusable token on optional-auth route: %s", e.detail)
        return None


async def require_admin(auth: Annotated[AuthContext, Depends(get_auth_context)]) -> AuthContext:
    """Role gate: resolved user must be an ADMIN."""
    if not auth.user.is_admin:
        logger.warning("User %s denied admin access", auth.user_id)
        raise AdminRequiredError
    return auth


CurrentAuth = Annotated[AuthContext, Depends(get_auth_context)]
AdminAuth = Annotated[AuthContext, Depends(require_admin)]
OptionalUser = Annotated[AuthUser | None, Depends(get_optional_user)]
