"""
Pydantic schemas for User entity.
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime
from giftbuddy.models.user import UserRole


class UserBase(BaseModel):
    """Base user schema."""
    name: Optional[str] = Field(default=None, max_length=100)
    birthday: Optional[date] = None
    upi_id: Optional[str] = Field(default=None, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=20)


class UserCreate(UserBase):
    """Schema for admin user creation."""
    name: str = Field(min_length=1, max_length=100)


class ProfileUpsert(UserBase):
    """Schema for the signup hook that creates or refreshes the caller's row."""
    pass


class UserUpdate(BaseModel):
    """Schema for admin user update."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    birthday: Optional[date] = None
    upi_id: Optional[str] = Field(default=None, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=20)
    role: Optional[UserRole] = None


class UserResponse(UserBase):
    """Schema for user response."""
    id: str
    role: UserRole
    created_at: datetime

    class Config:
        from_attributes = True
