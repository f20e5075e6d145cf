"""SQLAlchemy models."""

from recipe_share.models.recipe import Recipe, RecipeIngredient, RecipeTag
from recipe_share.models.review import Review
from recipe_share.models.user import User

__all__ = [
    "User",
    "Recipe",
    "RecipeIngredient",
    "RecipeTag",
    "Review",
]
