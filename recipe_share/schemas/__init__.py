"""Pydantic schemas for API requests and responses."""

from recipe_share.schemas.auth import UserResponse
from recipe_share.schemas.recipe import (
    ErrorResponse,
    RecipeCreate,
    RecipePage,
    RecipeResponse,
    ReviewCreate,
    ReviewResponse,
    UserSummary,
)

__all__ = [
    "UserResponse",
    "UserSummary",
    "ErrorResponse",
    "RecipeCreate",
    "RecipeResponse",
    "RecipePage",
    "ReviewCreate",
    "ReviewResponse",
]
