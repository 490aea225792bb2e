# app/services/user_service.py

import html
import logging
from datetime import datetime, UTC
from enum import Enum
from typing import Callable, List, Optional, Tuple
from email_validator import validate_email, EmailNotValidError
from sqlalchemy import select, update, delete, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from config.settings import settings
from models.user import User
from schemas.user_schema import UserCreate, UserUpdate, UserLogin
from infrastructure import password_hashing
from exceptions.domain_exceptions import (
    NotFoundException,
    ConflictException,
    UnauthorizedException,
    ValidationException,
    PersistenceException
)

logger = logging.getLogger(__name__)


class ValidationMode(str, Enum):
    """Which operation a user is being validated for"""
    CREATE = "create"
    UPDATE = "update"
    LOGIN = "login"


def _is_well_formed_email(email: Optional[str]) -> bool:
    if not email:
        return False
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


Rule = Tuple[Callable[[User], bool], str]

# Column sizes of users.nickname and users.email, checked on the sanitized values
NICKNAME_MAX_LENGTH = User.__table__.c.nickname.type.length
EMAIL_MAX_LENGTH = User.__table__.c.email.type.length

REQUIRE_NICKNAME: Rule = (lambda user: bool(user.nickname), "Required Nickname")
REQUIRE_PASSWORD: Rule = (lambda user: bool(user.password), "Required Password")
REQUIRE_EMAIL: Rule = (lambda user: bool(user.email), "Required Email")
WELL_FORMED_EMAIL: Rule = (lambda user: _is_well_formed_email(user.email), "Invalid Email")
NICKNAME_FITS: Rule = (lambda user: len(user.nickname or "") <= NICKNAME_MAX_LENGTH, "Nickname too long")
EMAIL_FITS: Rule = (lambda user: len(user.email or "") <= EMAIL_MAX_LENGTH, "Email too long")

VALIDATION_RULES: dict[ValidationMode, Tuple[Rule, ...]] = {
    ValidationMode.CREATE: (REQUIRE_NICKNAME, REQUIRE_PASSWORD, REQUIRE_EMAIL, WELL_FORMED_EMAIL, NICKNAME_FITS, EMAIL_FITS),
    ValidationMode.UPDATE: (REQUIRE_NICKNAME, REQUIRE_PASSWORD, REQUIRE_EMAIL, WELL_FORMED_EMAIL, NICKNAME_FITS, EMAIL_FITS),
    ValidationMode.LOGIN: (REQUIRE_PASSWORD, REQUIRE_EMAIL, WELL_FORMED_EMAIL),
}


def sanitize(value: Optional[str]) -> str:
    """Trim surrounding whitespace and escape HTML-significant characters"""
    return html.escape((value or "").strip())


class UserService:
    """Service for validating, hashing and persisting user accounts"""

    @staticmethod
    def hash_password(password: str) -> str:
        """Hash a raw password (raises HashingException on failure)"""
        return password_hashing.hash_password(password)

    @staticmethod
    def verify_password(hashed_password: str, password: str) -> bool:
        """Check a candidate password against a stored hash"""
        return password_hashing.verify_password(hashed_password, password)

    @staticmethod
    def prepare_for_create(user: User) -> None:
        """
        Normalize a new user before it is validated and stored

        Clears the id, sanitizes nickname and email and stamps both
        timestamps with the current time.
        """
        now = datetime.now(UTC)
        user.id = None
        user.nickname = sanitize(user.nickname)
        user.email = sanitize(user.email)
        user.created_at = now
        user.updated_at = now

    @staticmethod
    def hash_password_in_place(user: User) -> None:
        """Replace the user's raw password with its hash"""
        user.password = password_hashing.hash_password(user.password)

    @staticmethod
    def validate(user: User, mode: ValidationMode = ValidationMode.CREATE) -> List[str]:
        """
        Run every rule that applies to the given mode

        Args:
            user: User to check
            mode: Operation the user is validated for

        Returns:
            One message per failed rule; empty when the user is valid
        """
        return [message for check, message in VALIDATION_RULES[mode] if not check(user)]

    @staticmethod
    async def _conflicting_field(
        session: AsyncSession,
        nickname: Optional[str],
        email: Optional[str],
        exclude_user_id: Optional[int] = None
    ) -> Optional[str]:
        """Name the unique field already held by another user, if any"""
        query = select(User.nickname, User.email).where(
            or_(User.nickname == nickname, User.email == email)
        )
        if exclude_user_id is not None:
            query = query.where(User.id != exclude_user_id)

        try:
            result = await session.execute(query)
        except SQLAlchemyError as e:
            logger.error(f"Failed to look up conflicting user: {e}")
            raise PersistenceException(message="Could not save user") from e

        for row in result.all():
            if row.email == email:
                return "email"
            if row.nickname == nickname:
                return "nickname"
        return None

    @staticmethod
    async def _raise_for_integrity_error(
        session: AsyncSession,
        error: IntegrityError,
        nickname: Optional[str],
        email: Optional[str],
        exclude_user_id: Optional[int] = None
    ) -> None:
        field = await UserService._conflicting_field(session, nickname, email, exclude_user_id)
        if field is None:
            logger.error(f"Integrity error while saving user: {error}")
            raise PersistenceException(message="Could not save user") from error

        logger.warning(f"User {field} already taken")
        raise ConflictException(
            message=f"{field.capitalize()} already taken",
            details={"field": field}
        ) from error

    @staticmethod
    async def create_user(session: AsyncSession, user: User) -> User:
        """
        Persist a prepared, validated and hashed user

        Raises:
            ConflictException: If nickname or email is already taken
            PersistenceException: For any other storage failure
        """
        nickname, email = user.nickname, user.email

        session.add(user)
        try:
            await session.commit()
        except IntegrityError as e:
            await session.rollback()
            await UserService._raise_for_integrity_error(session, e, nickname, email)
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"Failed to create user: {e}")
            raise PersistenceException(message="Could not save user") from e

        await session.refresh(user)
        logger.info(f"User {user.id} (nickname: {user.nickname}) created")
        return user

    @staticmethod
    async def find_all_users(session: AsyncSession, limit: Optional[int] = None) -> List[User]:
        """Return at most `limit` users ordered by id"""
        if limit is None:
            limit = settings.USER_LIST_LIMIT

        try:
            result = await session.execute(select(User).order_by(User.id).limit(limit))
        except SQLAlchemyError as e:
            logger.error(f"Failed to list users: {e}")
            raise PersistenceException(message="Could not load users") from e
        return list(result.scalars().all())

    @staticmethod
    async def find_user_by_id(session: AsyncSession, user_id: int) -> User:
        """
        Get a user by id

        Raises:
            NotFoundException: If no user has this id
            PersistenceException: For any other storage failure
        """
        query = (
            select(User)
            .where(User.id == user_id)
            .execution_options(populate_existing=True)
        )
        try:
            result = await session.execute(query)
        except SQLAlchemyError as e:
            logger.error(f"Failed to load user {user_id}: {e}")
            raise PersistenceException(message="Could not load user") from e

        user = result.scalar_one_or_none()
        if user is None:
            raise NotFoundException(
                message="User not found",
                details={"user_id": user_id}
            )
        return user

    @staticmethod
    async def update_user(session: AsyncSession, user_id: int, user: User) -> User:
        """
        Overwrite a user's nickname, email and password

        The password on `user` is raw and gets hashed here, before anything
        is written.

        Raises:
            HashingException: If the password cannot be hashed
            NotFoundException: If no user has this id
            ConflictException: If nickname or email belongs to another user
            PersistenceException: For any other storage failure
        """
        UserService.hash_password_in_place(user)

        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(
                nickname=user.nickname,
                email=user.email,
                password=user.password,
                updated_at=datetime.now(UTC),
            )
        )
        try:
            result = await session.execute(stmt)
            if result.rowcount == 0:
                await session.rollback()
                raise NotFoundException(
                    message="User not found",
                    details={"user_id": user_id}
                )
            await session.commit()
        except IntegrityError as e:
            await session.rollback()
            await UserService._raise_for_integrity_error(
                session, e, user.nickname, user.email, exclude_user_id=user_id
            )
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"Failed to update user {user_id}: {e}")
            raise PersistenceException(message="Could not update user") from e

        logger.info(f"User {user_id} updated")
        return await UserService.find_user_by_id(session, user_id)

    @staticmethod
    async def delete_user(session: AsyncSession, user_id: int) -> int:
        """Hard-delete a user; returns the number of rows removed (0 if none)"""
        try:
            result = await session.execute(delete(User).where(User.id == user_id))
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"Failed to delete user {user_id}: {e}")
            raise PersistenceException(message="Could not delete user") from e

        if result.rowcount:
            logger.info(f"User {user_id} deleted")
        return result.rowcount

    @staticmethod
    async def register_user(session: AsyncSession, user_in: UserCreate) -> User:
        """
        Prepare, validate, hash and store a new user

        Raises:
            ValidationException: With every failed rule
            HashingException: If the password cannot be hashed
            ConflictException: If nickname or email is already taken
        """
        user = User(
            nickname=user_in.nickname,
            email=user_in.email,
            password=user_in.password,
        )
        UserService.prepare_for_create(user)

        errors = UserService.validate(user, ValidationMode.CREATE)
        if errors:
            raise ValidationException(message="Invalid user data", errors=errors)

        UserService.hash_password_in_place(user)
        return await UserService.create_user(session, user)

    @staticmethod
    async def modify_user(session: AsyncSession, user_id: int, user_in: UserUpdate) -> User:
        """Sanitize and validate new account data, then update the user"""
        user = User(
            nickname=sanitize(user_in.nickname),
            email=sanitize(user_in.email),
            password=user_in.password,
        )

        errors = UserService.validate(user, ValidationMode.UPDATE)
        if errors:
            raise ValidationException(message="Invalid user data", errors=errors)

        return await UserService.update_user(session, user_id, user)

    @staticmethod
    async def authenticate(session: AsyncSession, credentials: UserLogin) -> User:
        """
        Check an email/password pair and return the matching user

        Raises:
            ValidationException: If email or password is missing or malformed
            UnauthorizedException: If the email is unknown or the password is wrong
        """
        candidate = User(email=sanitize(credentials.email), password=credentials.password)

        errors = UserService.validate(candidate, ValidationMode.LOGIN)
        if errors:
            raise ValidationException(message="Invalid credentials", errors=errors)

        try:
            result = await session.execute(select(User).where(User.email == candidate.email))
        except SQLAlchemyError as e:
            logger.error(f"Failed to load user for login: {e}")
            raise PersistenceException(message="Could not load user") from e

        user = result.scalar_one_or_none()
        if user is None or not UserService.verify_password(user.password, credentials.password):
            logger.warning(f"Failed login attempt for {candidate.email}")
            raise UnauthorizedException(message="Incorrect email or password")

        logger.info(f"User {user.id} ({user.nickname}) authenticated")
        return user
