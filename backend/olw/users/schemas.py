from datetime import datetime

from olw.core.schemas import CamelModel
from olw.users.models import Role


class UserResponse(CamelModel):
    """Public view of a user (never includes the password hash)."""

    id: int
    email: str
    name: str | None = None
    role: Role
    created_at: datetime


class UserProfile(UserResponse):
    """Full profile returned by ``/auth/me``."""

    updated_at: datetime


class UserSummary(CamelModel):
    """Compact user reference embedded in admin listings."""

    id: int
    name: str | None = None
    email: str


class AdminUserResponse(UserResponse):
    """User row in the admin user list."""

    submission_count: int = 0
    progress_count: int = 0
