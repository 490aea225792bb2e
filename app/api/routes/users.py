# app/api/routes/users.py

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from schemas.user_schema import (
    UserCreate,
    UserUpdate,
    UserLogin,
    UserRead,
    UserDeleteResponse
)
from services.user_service import UserService
from infrastructure.postgres_connection import get_db_session
from config.settings import settings


# Create routers
users_router = APIRouter(prefix="/users", tags=["Users"])
login_router = APIRouter(tags=["Login"])


@users_router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_in: UserCreate,
    session: AsyncSession = Depends(get_db_session),
):
    """
    Register a new user.

    - **nickname**: unique, trimmed and HTML-escaped before storage
    - **email**: unique, must be a well-formed address
    - **password**: stored as a bcrypt hash

    Every failed validation rule is listed in the 422 response.
    """
    return await UserService.register_user(session=session, user_in=user_in)


@users_router.get("", response_model=List[UserRead])
async def list_users(
    limit: int = Query(settings.USER_LIST_LIMIT, ge=1, le=settings.USER_LIST_LIMIT, description="Maximum number of users"),
    session: AsyncSession = Depends(get_db_session),
):
    """List users ordered by id."""
    return await UserService.find_all_users(session=session, limit=limit)


@users_router.get("/{user_id}", response_model=UserRead)
async def get_user(
    user_id: int,
    session: AsyncSession = Depends(get_db_session),
):
    """Get a single user by id."""
    return await UserService.find_user_by_id(session=session, user_id=user_id)


@users_router.put("/{user_id}", response_model=UserRead)
async def update_user(
    user_id: int,
    user_in: UserUpdate,
    session: AsyncSession = Depends(get_db_session),
):
    """Replace a user's nickname, email and password."""
    return await UserService.modify_user(session=session, user_id=user_id, user_in=user_in)


@users_router.delete("/{user_id}", response_model=UserDeleteResponse)
async def delete_user(
    user_id: int,
    session: AsyncSession = Depends(get_db_session),
):
    """Delete a user. Deleting an unknown id reports 0 rows affected."""
    rows_affected = await UserService.delete_user(session=session, user_id=user_id)
    return UserDeleteResponse(rows_affected=rows_affected)


@login_router.post("/login", response_model=UserRead)
async def login(
    credentials: UserLogin,
    session: AsyncSession = Depends(get_db_session),
):
    """Check an email/password pair. No session or token is issued."""
    return await UserService.authenticate(session=session, credentials=credentials)
