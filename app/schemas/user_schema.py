# app/schemas/user_schema.py

from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime


class UserCreate(BaseModel):
    """Schema for registering a new user"""
    nickname: str = ""
    email: str = ""
    password: str = ""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "nickname": "ann",
                "email": "ann@example.com",
                "password": "secret123"
            }
        }
    )


class UserUpdate(BaseModel):
    """Schema for replacing a user's nickname, email and password"""
    nickname: str = ""
    email: str = ""
    password: str = ""


class UserLogin(BaseModel):
    """Schema for checking a user's credentials"""
    email: str = ""
    password: str = ""


class UserRead(BaseModel):
    """Schema for reading user data (the password hash is never exposed)"""
    id: int
    nickname: str
    email: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserDeleteResponse(BaseModel):
    """Schema for the result of a hard delete"""
    rows_affected: int = Field(..., ge=0)
