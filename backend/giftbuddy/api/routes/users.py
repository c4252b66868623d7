"""
User management routes.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from giftbuddy.db.session import get_db
from giftbuddy.schemas.user import ProfileUpsert, UserCreate, UserResponse, UserUpdate
from giftbuddy.api.dependencies import get_caller, get_current_user_id
from giftbuddy.services.capability import Caller
from giftbuddy.services import user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.put("/me", response_model=UserResponse)
async def upsert_my_profile(
    profile: ProfileUpsert,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Create or refresh the caller's profile after signup."""
    return user_service.upsert_profile(user_id, profile, db)


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """Get current user information."""
    return user_service.get_user(caller.user_id, db)


@router.get("", response_model=List[UserResponse])
async def list_users(
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """List all users (admin)."""
    return user_service.list_users(caller, db)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """Create a member (admin)."""
    return user_service.create_user(user_data, caller, db)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """Get user by ID."""
    return user_service.get_user(user_id, db)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    patch: UserUpdate,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """Update a member (admin)."""
    return user_service.update_user(user_id, patch, caller, db)


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """Delete a member and their contributions (admin)."""
    user_service.delete_user(user_id, caller, db)
    return {"message": "User deleted successfully"}
