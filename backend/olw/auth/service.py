import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from olw.auth.exceptions import InvalidCredentialsError
from olw.auth.password_policy import validate_password_policy
from olw.auth.schemas import AuthResponse, LoginRequest, RegisterRequest
from olw.auth.security import create_access_token, get_password_hash, verify_and_update_password
from olw.exceptions import ConflictError, ResourceNotFoundError
from olw.users.models import Role, User
from olw.users.schemas import UserProfile, UserResponse


logger = logging.getLogger(__name__)


class AuthService:
    """Registration, login and profile lookup."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_user_by_email(self, email: str) -> User | None:
        result = await self._session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def register(self, data: RegisterRequest) -> AuthResponse:
        """
        Create a STUDENT account and issue its first token.

        Raises
        ------
        PasswordPolicyError
            If the password is too short
        ConflictError
            If the email is already registered
        """
        validate_password_policy(data.password)

        if await self.get_user_by_email(data.email) is not None:
            msg = "Email already registered"
            raise ConflictError(msg)

        user = User(
            email=data.email,
            password_hash=get_password_hash(data.password),
            name=data.name,
            role=Role.STUDENT,
        )
        self._session.add(user)

        try:
            await self._session.commit()
        except IntegrityError as e:
            await self._session.rollback()
            msg = "Email already registered"
            raise ConflictError(msg) from e
        await self._session.refresh(user)

        logger.info("Registered user %s (%s)", user.id, user.email)
        return AuthResponse(user=UserResponse.model_validate(user), token=create_access_token(user.id))

    async def login(self, data: LoginRequest) -> AuthResponse:
        """Check credentials and issue a token; rehash if the hasher parameters moved on."""
        user = await self.get_user_by_email(data.email)
        if user is None:
            logger.info("Login failed: unknown email")
            raise InvalidCredentialsError

        verified, updated_hash = verify_and_update_password(data.password, user.password_hash)
        if not verified:
            logger.info("Login failed for user %s: bad password", user.id)
            raise InvalidCredentialsError

        if updated_hash is not None:
            user.password_hash = updated_hash
            await self._session.commit()
            await self._session.refresh(user)

        return AuthResponse(user=UserResponse.model_validate(user), token=create_access_token(user.id))

    async def get_profile(self, user_id: int) -> UserProfile:
        user = await self._session.get(User, user_id)
        if user is None:
            msg = "User"
            raise ResourceNotFoundError(msg, user_id)
        return UserProfile.model_validate(user)
