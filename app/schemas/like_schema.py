# app/schemas/like_schema.py

from pydantic import BaseModel, ConfigDict
from datetime import datetime


class LikeCreate(BaseModel):
    """Schema for liking a post"""
    user_id: int
    post_id: int


class LikeRead(BaseModel):
    """Schema for like response"""
    id: int
    user_id: int
    post_id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LikesInfo(BaseModel):
    """Schema for a post's like count and whether a given user liked it"""
    post_id: int
    likes_count: int
    liked_by_user: bool = False


class UnlikeResponse(BaseModel):
    """Schema for the result of an unlike"""
    rows_affected: int
