"""Authentication API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from recipe_share.api.dependencies import get_current_user
from recipe_share.models.user import User
from recipe_share.schemas.auth import UserResponse

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.get("/me", response_model=UserResponse)
def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Get current user information."""
    return current_user
