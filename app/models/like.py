# app/models/like.py

from sqlalchemy import Column, Integer, DateTime, UniqueConstraint
from datetime import datetime, UTC
from infrastructure.postgres_connection import Base


class Like(Base):
    """A user's like on a post; both sides are referenced by id only"""
    __tablename__ = "likes"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, index=True)
    post_id = Column(Integer, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False)

    # One like per user and post
    __table_args__ = (
        UniqueConstraint("user_id", "post_id", name="uq_likes_user_id_post_id"),
    )

    def __repr__(self):
        return f"<Like(id={self.id}, user_id={self.user_id}, post_id={self.post_id})>"
