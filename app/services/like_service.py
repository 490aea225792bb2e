# app/services/like_service.py

import logging
from datetime import datetime, UTC
from typing import List, Optional
from sqlalchemy import select, delete, exists, func, and_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from models.like import Like
from schemas.like_schema import LikesInfo
from exceptions.domain_exceptions import ConflictException, PersistenceException

logger = logging.getLogger(__name__)


class LikeService:
    """Service for liking and unliking posts"""

    @staticmethod
    async def create_like(session: AsyncSession, like: Like) -> Like:
        """
        Store a new like

        Duplicates are not looked up beforehand; the unique constraint on
        (user_id, post_id) rejects them.

        Args:
            session: Database session
            like: Like carrying user_id and post_id

        Returns:
            The stored like

        Raises:
            ConflictException: If the user already liked the post
            PersistenceException: For any other storage failure
        """
        user_id, post_id = like.user_id, like.post_id
        now = datetime.now(UTC)
        like.created_at = now
        like.updated_at = now

        session.add(like)
        try:
            await session.commit()
        except IntegrityError as e:
            await session.rollback()
            if await LikeService.has_user_liked(session, user_id, post_id):
                logger.warning(f"User {user_id} already liked post {post_id}")
                raise ConflictException(
                    message="Post already liked",
                    details={"user_id": user_id, "post_id": post_id}
                ) from e
            logger.error(f"Integrity error while saving like: {e}")
            raise PersistenceException(message="Could not save like") from e
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"Failed to create like: {e}")
            raise PersistenceException(message="Could not save like") from e

        await session.refresh(like)
        logger.info(f"User {user_id} liked post {post_id}")
        return like

    @staticmethod
    async def delete_like_by_user(session: AsyncSession, user_id: int) -> int:
        """
        Remove one like made by the user, whatever the post

        Only the oldest of the user's likes is removed. Use `unlike` to
        remove the like on a specific post.

        Returns:
            Number of rows removed (0 or 1)
        """
        oldest = (
            select(Like.id)
            .where(Like.user_id == user_id)
            .order_by(Like.id)
            .limit(1)
        )
        try:
            result = await session.execute(oldest)
            like_id = result.scalar_one_or_none()
            if like_id is None:
                return 0

            result = await session.execute(delete(Like).where(Like.id == like_id))
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"Failed to delete like for user {user_id}: {e}")
            raise PersistenceException(message="Could not delete like") from e

        return result.rowcount

    @staticmethod
    async def unlike(session: AsyncSession, user_id: int, post_id: int) -> int:
        """Remove the user's like on a post; returns the rows removed (0 or 1)"""
        stmt = delete(Like).where(
            and_(
                Like.user_id == user_id,
                Like.post_id == post_id
            )
        )
        try:
            result = await session.execute(stmt)
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"Failed to unlike post {post_id} for user {user_id}: {e}")
            raise PersistenceException(message="Could not delete like") from e

        if result.rowcount:
            logger.info(f"User {user_id} unliked post {post_id}")
        return result.rowcount

    @staticmethod
    async def list_likes_by_post(session: AsyncSession, post_id: int) -> List[Like]:
        """Get every like on a post"""
        query = select(Like).where(Like.post_id == post_id).order_by(Like.id)
        try:
            result = await session.execute(query)
        except SQLAlchemyError as e:
            logger.error(f"Failed to list likes for post {post_id}: {e}")
            raise PersistenceException(message="Could not load likes") from e
        return list(result.scalars().all())

    @staticmethod
    async def has_user_liked(session: AsyncSession, user_id: int, post_id: int) -> bool:
        """Check whether the user liked the post without loading the row"""
        query = select(
            exists().where(
                and_(
                    Like.user_id == user_id,
                    Like.post_id == post_id
                )
            )
        )
        try:
            result = await session.execute(query)
        except SQLAlchemyError as e:
            logger.error(f"Failed to check like of post {post_id} by user {user_id}: {e}")
            raise PersistenceException(message="Could not load likes") from e
        return bool(result.scalar())

    @staticmethod
    async def count_likes_by_post(session: AsyncSession, post_id: int) -> int:
        """Count the likes on a post"""
        query = select(func.count()).select_from(Like).where(Like.post_id == post_id)
        try:
            result = await session.execute(query)
        except SQLAlchemyError as e:
            logger.error(f"Failed to count likes for post {post_id}: {e}")
            raise PersistenceException(message="Could not load likes") from e
        return result.scalar() or 0

    @staticmethod
    async def get_likes_info(
        session: AsyncSession,
        post_id: int,
        user_id: Optional[int] = None
    ) -> LikesInfo:
        """
        Get the like count of a post and whether the given user liked it

        Args:
            session: Database session
            post_id: ID of the post
            user_id: Optional ID of the user viewing the post

        Returns:
            LikesInfo; liked_by_user is False when no user is given
        """
        likes_count = await LikeService.count_likes_by_post(session, post_id)
        liked_by_user = False
        if user_id is not None:
            liked_by_user = await LikeService.has_user_liked(session, user_id, post_id)

        return LikesInfo(
            post_id=post_id,
            likes_count=likes_count,
            liked_by_user=liked_by_user
        )
