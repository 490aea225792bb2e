# app/api/routes/likes.py

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from models.like import Like
from schemas.like_schema import LikeCreate, LikeRead, LikesInfo, UnlikeResponse
from services.like_service import LikeService
from infrastructure.postgres_connection import get_db_session


# Create routers
likes_router = APIRouter(prefix="/likes", tags=["Likes"])
post_likes_router = APIRouter(prefix="/posts/{post_id}/likes", tags=["Likes"])


@likes_router.post("", response_model=LikeRead, status_code=status.HTTP_201_CREATED)
async def like_post(
    like_data: LikeCreate,
    session: AsyncSession = Depends(get_db_session),
):
    """
    Like a post.

    Returns 409 if the user already liked this post.
    """
    like = Like(user_id=like_data.user_id, post_id=like_data.post_id)
    return await LikeService.create_like(session=session, like=like)


@likes_router.delete("", response_model=UnlikeResponse)
async def unlike_post(
    user_id: int = Query(..., description="User removing the like"),
    post_id: int = Query(..., description="Post being unliked"),
    session: AsyncSession = Depends(get_db_session),
):
    """Remove a user's like on a post. Reports 0 rows if there was none."""
    rows_affected = await LikeService.unlike(session=session, user_id=user_id, post_id=post_id)
    return UnlikeResponse(rows_affected=rows_affected)


@post_likes_router.get("", response_model=List[LikeRead])
async def list_post_likes(
    post_id: int,
    session: AsyncSession = Depends(get_db_session),
):
    """List every like on a post."""
    return await LikeService.list_likes_by_post(session=session, post_id=post_id)


@post_likes_router.get("/info", response_model=LikesInfo)
async def get_post_likes_info(
    post_id: int,
    user_id: Optional[int] = Query(None, description="User to check for a like"),
    session: AsyncSession = Depends(get_db_session),
):
    """Get the like count of a post and whether `user_id` liked it."""
    return await LikeService.get_likes_info(session=session, post_id=post_id, user_id=user_id)
