"""Authentication routes: register, login and current profile."""

import logging

from fastapi import APIRouter, Request, status

from olw.auth.context import CurrentAuth
from olw.auth.schemas import AuthResponse, LoginRequest, MeResponse, RegisterRequest
from olw.auth.service import AuthService
from olw.core.schemas import ApiResponse, created, ok
from olw.database.session import DbSession
from olw.middleware.security import auth_rate_limit


router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


@router.post("/register", status_code=status.HTTP_201_CREATED)
@auth_rate_limit
async def register(request: Request, data: RegisterRequest, session: DbSession) -> ApiResponse[AuthResponse]:  # noqa: ARG001
    """Create a new student account."""
    result = await AuthService(session).register(data)
    return created(result, "User registered successfully")


@router.post("/login")
@auth_rate_limit
async def login(request: Request, data: LoginRequest, session: DbSession) -> ApiResponse[AuthResponse]:  # noqa: ARG001
    """Login with email and password."""
    result = await AuthService(session).login(data)
    return ok(result, "Login successful")


@router.get("/me")
async def get_me(auth: CurrentAuth) -> ApiResponse[MeResponse]:
    """Get the current user's profile."""
    profile = await AuthService(auth.session).get_profile(auth.user_id)
    return ok(MeResponse(user=profile))
