"""
Pydantic schemas for User model and authentication.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class UserBase(BaseModel):
    """Base user schema."""

    email: EmailStr
    name: str = Field(..., min_length=1)


class UserCreate(UserBase):
    """Schema for user registration."""

    password: str = Field(..., min_length=6)


class UserInDB(UserBase):
    """Schema for user in database."""

    id: int
    avatar: Optional[str] = None
    created_at: datetime

    class Config:
        """Pydantic config."""

        from_attributes = True


class User(UserInDB):
    """Schema for user response."""

    pass


class LoginRequest(BaseModel):
    """Schema for email/password login."""

    email: EmailStr
    password: str


class Token(BaseModel):
    """Schema for JWT token."""

    access_token: str
    token_type: str = "bearer"


class AuthResponse(Token):
    """Schema for register/login responses."""

    message: str
    user: User


class DemoUserResponse(BaseModel):
    """Schema for demo account initialisation."""

    message: str
    user: User
