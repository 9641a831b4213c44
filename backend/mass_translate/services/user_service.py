import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mass_translate.config.settings import settings
from mass_translate.models.user import User
from mass_translate.services.auth_service import hash_password

logger = logging.getLogger(__name__)


class UserServiceError(Exception):
    """Base exception for user service errors"""
    pass


class EmailAlreadyExistsError(UserServiceError):
    """Raised when an email is already registered"""
    pass


class UserService:
    """
    Service for centralized User retrieval and management.
    """

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: str) -> Optional[User]:
        """
        Get user by ID.
        Returns None if not found (caller handles 404).
        """
        result = await db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    @staticmethod
    async def list_users(db: AsyncSession, limit: int, offset: int) -> list[User]:
        result = await db.execute(
            select(User).order_by(User.created_at, User.email).limit(limit).offset(offset)
        )
        return list(result.scalars().all())

    @staticmethod
    async def create(db: AsyncSession, email: str, password: str, is_admin: bool = False) -> User:
        """
        Create a user with a hashed password.

        Raises:
            EmailAlreadyExistsError: If the email is already registered
        """
        if await UserService.get_by_email(db, email):
            raise EmailAlreadyExistsError(email)

        user = User(email=email, hashed_password=hash_password(password), is_admin=is_admin)
        db.add(user)
        try:
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            raise EmailAlreadyExistsError(email) from e
        await db.refresh(user)
        return user

    @staticmethod
    async def update(
        db: AsyncSession,
        user: User,
        email: Optional[str] = None,
        is_admin: Optional[bool] = None,
        password: Optional[str] = None,
    ) -> User:
        """
        Apply the provided fields; omitted fields keep their current value.

        Raises:
            EmailAlreadyExistsError: If the new email belongs to another user
        """
        if email is not None and email != user.email:
            if await UserService.get_by_email(db, email):
                raise EmailAlreadyExistsError(email)
            user.email = email
        if is_admin is not None:
            user.is_admin = is_admin
        if password is not None:
            user.hashed_password = hash_password(password)

        try:
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            raise EmailAlreadyExistsError(email) from e
        await db.refresh(user)
        return user

    @staticmethod
    async def delete(db: AsyncSession, user: User):
        await db.delete(user)
        await db.commit()

    @staticmethod
    async def ensure_admin(db: AsyncSession) -> Optional[User]:
        """
        Register the initial admin from ADMIN_EMAIL / ADMIN_PASSWORD.

        Skipped when ADMIN_EMAIL is empty or "None", or when the account exists.
        """
        email = settings.ADMIN_EMAIL
        if not email or email == "None":
            logger.info("Initial admin registration cancelled")
            return None

        existing = await UserService.get_by_email(db, email)
        if existing:
            logger.info("Initial admin credentials already registered")
            return existing

        if not settings.ADMIN_PASSWORD:
            raise UserServiceError("ADMIN_PASSWORD must be set when ADMIN_EMAIL is configured")

        user = await UserService.create(db, email, settings.ADMIN_PASSWORD, is_admin=True)
        logger.info(f"Initial admin {email} registered")
        return user


user_service = UserService()
