"""Recipe service: cached reads, owner-gated mutations and search."""

import logging
from typing import Annotated, Any

from pydantic import Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from recipe_share.config import get_settings
from recipe_share.models.enums import Difficulty, RecipeType
from recipe_share.models.recipe import Recipe, RecipeIngredient, RecipeTag
from recipe_share.models.review import Review
from recipe_share.models.user import User
from recipe_share.schemas.recipe import (
    MAX_INT,
    RecipeCreate,
    RecipePage,
    RecipeResponse,
    ReviewCreate,
)
from recipe_share.services.authorization import ensure_owner
from recipe_share.services.cache import RecipeCache
from recipe_share.services.errors import (
    ErrorCode,
    InternalError,
    NotFoundError,
    ValidationError,
    delete_unauthorized,
    duplicate,
)
from recipe_share.services.messages import get_message
from recipe_share.services.query_builder import (
    SearchFilters,
    build_search_query,
    paginate,
)
from recipe_share.services.renderer import MediaType, render

logger = logging.getLogger(__name__)
settings = get_settings()

# Fields a PATCH body may carry, each with the validator applied to its value
PARTIAL_UPDATE_FIELDS: dict[str, TypeAdapter] = {
    "name": TypeAdapter(Annotated[str, Field(min_length=1, max_length=255)]),
    "description": TypeAdapter(Annotated[str, Field(max_length=2000)] | None),
    "steps": TypeAdapter(Annotated[str, Field(max_length=50000)] | None),
    "difficulty": TypeAdapter(Difficulty | None),
    "kitchen": TypeAdapter(Annotated[str, Field(max_length=100)] | None),
    "rations": TypeAdapter(Annotated[int, Field(ge=1, le=MAX_INT)] | None),
    "time": TypeAdapter(Annotated[int, Field(ge=0, le=MAX_INT)] | None),
    "type": TypeAdapter(RecipeType | None),
}

SCALAR_FIELDS = tuple(PARTIAL_UPDATE_FIELDS)

UNIQUE_VIOLATION_PGCODE = "23505"


def _is_unique_violation(error: IntegrityError) -> bool:
    """Tell unique-constraint violations apart from foreign key and NOT NULL ones."""
    pgcode = getattr(error.orig, "pgcode", None)
    if pgcode is not None:
        return pgcode == UNIQUE_VIOLATION_PGCODE
    return "UNIQUE constraint failed" in str(error.orig)


def _sync_names(collection: list, names: list[str], factory) -> None:
    """Make ``collection`` hold exactly ``names``, keeping rows that already match."""
    for item in list(collection):
        if item.name not in names:
            collection.remove(item)
    existing = {item.name for item in collection}
    for name in names:
        if name not in existing:
            collection.append(factory(name=name))


class RecipeService:
    """Service for recipe reads and mutations.

    Reads go through the cache first. Every mutation is committed to the
    database and then evicts the recipe's cache entries before returning.
    """

    def __init__(
        self,
        db: Session,
        cache: RecipeCache,
        locale: str | None = None,
        page_size: int | None = None,
    ):
        self.db = db
        self.cache = cache
        self.locale = locale
        self.page_size = page_size or settings.page_size

    # --- Lookups ---

    def _find(self, recipe_id: int) -> Recipe | None:
        return self.db.query(Recipe).filter(Recipe.id == recipe_id).first()

    def _get_or_404(self, recipe_id: int) -> Recipe:
        recipe = self._find(recipe_id)
        if recipe is None:
            raise NotFoundError()
        return recipe

    def _name_taken(self, name: str, exclude_id: int | None = None) -> bool:
        query = self.db.query(Recipe.id).filter(Recipe.name == name)
        if exclude_id is not None:
            query = query.filter(Recipe.id != exclude_id)
        return query.first() is not None

    def _commit_or_conflict(self, code: ErrorCode) -> None:
        """Commit, turning a unique-constraint violation into the matching 409."""
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if not _is_unique_violation(e):
                raise
            logger.info(f"Unique constraint rejected write ({code})")
            raise duplicate(code) from None

    # --- Reads ---

    def get_recipe(self, recipe_id: int) -> RecipeResponse:
        """Get the recipe snapshot, loading and caching it on a miss."""
        snapshot = self.cache.get_recipe(recipe_id)
        if snapshot is not None:
            return snapshot

        recipe = self._get_or_404(recipe_id)
        snapshot = RecipeResponse.from_model(recipe)
        self.cache.set_recipe(snapshot)
        return snapshot

    def retrieve_recipe(self, recipe_id: int, media_type: MediaType) -> bytes:
        """Get the rendered body of a recipe for an already negotiated media type."""
        snapshot = self.get_recipe(recipe_id)

        body = self.cache.get_response(recipe_id, media_type)
        if body is None:
            body = render(snapshot, media_type)
            self.cache.set_response(recipe_id, media_type, body)
        return body

    def list_recipes(self, page: int) -> RecipePage:
        """Get an unfiltered listing page, cached for a short time."""
        cached = self.cache.get_page(page)
        if cached is not None:
            return cached

        result = self._run_query(SearchFilters(page=page))
        self.cache.set_page(result)
        return result

    def search_recipes(self, filters: SearchFilters) -> RecipePage:
        """Search recipes. Unfiltered searches are served by the cached listing."""
        if filters.is_unfiltered:
            return self.list_recipes(filters.page)
        return self._run_query(filters)

    def _run_query(self, filters: SearchFilters) -> RecipePage:
        query = build_search_query(self.db, filters)
        recipes, total = paginate(query, filters.page, self.page_size)
        return RecipePage(
            page=filters.page,
            total=total,
            recipes=[RecipeResponse.from_model(recipe) for recipe in recipes],
        )

    # --- Recipe mutations ---

    def create_recipe(self, data: RecipeCreate, user: User) -> Recipe:
        """Create a recipe owned by ``user``. Names are unique across all recipes."""
        if self._name_taken(data.name):
            raise duplicate(ErrorCode.DUPLICATE_RECIPE)

        recipe = Recipe(user_id=user.id, **data.model_dump(include=set(SCALAR_FIELDS)))
        for name in data.ingredients:
            recipe.ingredients.append(RecipeIngredient(name=name))
        for name in data.tags:
            recipe.tags.append(RecipeTag(name=name))

        self.db.add(recipe)
        self._commit_or_conflict(ErrorCode.DUPLICATE_RECIPE)
        self.db.refresh(recipe)
        logger.info(f"User {user.id} created recipe {recipe.id}")
        return recipe

    def update_recipe(self, recipe_id: int, data: RecipeCreate, user: User) -> None:
        """Replace every mutable field of a recipe, including ingredients and tags."""
        recipe = self._get_or_404(recipe_id)
        ensure_owner(recipe, user)

        if self._name_taken(data.name, exclude_id=recipe.id):
            raise duplicate(ErrorCode.DUPLICATE_RECIPE)

        for name, value in data.model_dump(include=set(SCALAR_FIELDS)).items():
            setattr(recipe, name, value)
        _sync_names(recipe.ingredients, data.ingredients, RecipeIngredient)
        _sync_names(recipe.tags, data.tags, RecipeTag)

        self._commit_or_conflict(ErrorCode.DUPLICATE_RECIPE)
        self.cache.evict_recipe(recipe_id)
        logger.info(f"User {user.id} updated recipe {recipe_id}")

    def partial_update_recipe(self, recipe_id: int, body: Any, user: User) -> None:
        """Merge the recognized fields present in ``body`` into the recipe."""
        recipe = self._get_or_404(recipe_id)
        ensure_owner(recipe, user)

        supplied = body if isinstance(body, dict) else {}
        errors: dict[str, str] = {}
        values: dict[str, Any] = {}
        for name, adapter in PARTIAL_UPDATE_FIELDS.items():
            if name not in supplied:
                continue
            try:
                values[name] = adapter.validate_python(supplied[name])
            except PydanticValidationError as e:
                errors[name] = e.errors()[0]["msg"]

        if errors:
            raise ValidationError(errors)
        if not values:
            raise ValidationError({"body": get_message("no_fields_to_update", self.locale)})

        if "name" in values and self._name_taken(values["name"], exclude_id=recipe.id):
            raise duplicate(ErrorCode.DUPLICATE_RECIPE)

        for name, value in values.items():
            setattr(recipe, name, value)

        self._commit_or_conflict(ErrorCode.DUPLICATE_RECIPE)
        self.cache.evict_recipe(recipe_id)
        logger.info(f"User {user.id} patched recipe {recipe_id}: {sorted(values)}")

    def delete_recipe(self, recipe_id: int, user: User) -> None:
        """Delete a recipe. Deleting a recipe that does not exist is a no-op."""
        recipe = self._find(recipe_id)
        if recipe is None:
            return
        ensure_owner(recipe, user, delete_unauthorized())

        try:
            self.db.delete(recipe)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to delete recipe {recipe_id}: {e}")
            raise InternalError() from e

        self.cache.evict_recipe(recipe_id)
        logger.info(f"User {user.id} deleted recipe {recipe_id}")

    # --- Sub-resources ---

    def add_ingredient(self, recipe_id: int, ingredient: str, user: User) -> None:
        recipe = self._get_or_404(recipe_id)
        ensure_owner(recipe, user)

        if recipe.has_ingredient(ingredient):
            raise duplicate(ErrorCode.DUPLICATE_INGREDIENT)

        recipe.ingredients.append(RecipeIngredient(name=ingredient))
        self._commit_or_conflict(ErrorCode.DUPLICATE_INGREDIENT)
        self.cache.evict_recipe(recipe_id)

    def delete_ingredient(self, recipe_id: int, ingredient: str, user: User) -> None:
        recipe = self._find(recipe_id)
        if recipe is None:
            return
        ensure_owner(recipe, user)

        for item in list(recipe.ingredients):
            if item.name == ingredient:
                recipe.ingredients.remove(item)
        self.db.commit()
        self.cache.evict_recipe(recipe_id)

    def add_tag(self, recipe_id: int, tag: str, user: User) -> None:
        recipe = self._get_or_404(recipe_id)
        ensure_owner(recipe, user)

        if recipe.has_tag(tag):
            raise duplicate(ErrorCode.DUPLICATE_TAG)

        recipe.tags.append(RecipeTag(name=tag))
        self._commit_or_conflict(ErrorCode.DUPLICATE_TAG)
        self.cache.evict_recipe(recipe_id)

    def delete_tag(self, recipe_id: int, tag: str, user: User) -> None:
        recipe = self._find(recipe_id)
        if recipe is None:
            return
        ensure_owner(recipe, user)

        for item in list(recipe.tags):
            if item.name == tag:
                recipe.tags.remove(item)
        self.db.commit()
        self.cache.evict_recipe(recipe_id)

    def add_review(self, recipe_id: int, data: ReviewCreate, user: User) -> Review:
        """Add ``user``'s review of a recipe. A user reviews each recipe at most once."""
        recipe = self._get_or_404(recipe_id)

        existing = (
            self.db.query(Review.id)
            .filter(Review.user_id == user.id, Review.recipe_id == recipe.id)
            .first()
        )
        if existing is not None:
            raise duplicate(ErrorCode.DUPLICATE_REVIEW)

        review = Review(
            user_id=user.id,
            recipe_id=recipe.id,
            comment=data.comment,
            rating=data.rating,
        )
        self.db.add(review)
        self._commit_or_conflict(ErrorCode.DUPLICATE_REVIEW)
        self.cache.evict_recipe(recipe_id)
        logger.info(f"User {user.id} reviewed recipe {recipe_id}")
        return review
