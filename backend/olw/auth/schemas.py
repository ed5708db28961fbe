from pydantic import EmailStr, Field

from olw.core.schemas import CamelModel
from olw.users.schemas import UserProfile, UserResponse


class RegisterRequest(CamelModel):
    """Registration payload."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)
    name: str | None = Field(None, max_length=255)


class LoginRequest(CamelModel):
    """Login payload."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class AuthResponse(CamelModel):
    """User plus a freshly issued bearer token."""

    user: UserResponse
    token: str


class MeResponse(CamelModel):
    user: UserProfile
