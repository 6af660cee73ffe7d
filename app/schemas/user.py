"""
Pydantic schemas for User model and authentication payloads.
"""
from pydantic import BaseModel, EmailStr, Field, model_validator
from typing import Optional
from datetime import datetime

from app.models.user import UserRole


class UserRegister(BaseModel):
    """
    Schema for registering a new member account.
    """
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    password_confirmation: str

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.password_confirmation:
            raise ValueError("The password confirmation does not match.")
        return self


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    """
    Schema for user response (basic info).
    """
    id: int
    name: str
    email: EmailStr
    role: UserRole
    avatar: Optional[str] = None
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    """
    Bearer token returned by register, login and refresh.
    """
    token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse
