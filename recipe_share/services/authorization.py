"""Ownership checks gating recipe mutations."""

from recipe_share.models.recipe import Recipe
from recipe_share.models.user import User
from recipe_share.services.errors import UnauthorizedError, update_unauthorized


def is_unauthorized(recipe: Recipe, user: User) -> bool:
    """A user can only modify their own recipes."""
    return recipe.user_id != user.id


def ensure_owner(
    recipe: Recipe,
    user: User,
    error: UnauthorizedError | None = None,
) -> None:
    """Raise ``error`` (UPDATE_UNAUTHORIZED by default) unless ``user`` owns ``recipe``."""
    if is_unauthorized(recipe, user):
        raise error or update_unauthorized()
