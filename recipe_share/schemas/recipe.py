"""Recipe and review schemas."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from recipe_share.models.enums import Difficulty, RecipeType

# Largest value an Integer column holds
MAX_INT = 2**31 - 1

INGREDIENT_MAX_LENGTH = 255
TAG_MAX_LENGTH = 100

IngredientName = Annotated[str, Field(min_length=1, max_length=INGREDIENT_MAX_LENGTH)]
TagName = Annotated[str, Field(min_length=1, max_length=TAG_MAX_LENGTH)]

# --- Shared ---


class UserSummary(BaseModel):
    """Owner or author reference embedded in recipe representations."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str | None


class ErrorResponse(BaseModel):
    """Structured error body for 401 and 409 responses."""

    code: str
    message: str


# --- Review ---


class ReviewCreate(BaseModel):
    """Create a review for a recipe."""

    comment: str = Field(..., min_length=1, max_length=255)
    rating: float = Field(..., ge=0.0, le=5.0)


class ReviewResponse(BaseModel):
    """Review as embedded in a recipe. The review id is not exposed."""

    model_config = ConfigDict(from_attributes=True)

    comment: str
    rating: float
    user: UserSummary


# --- Recipe ---


def _reject_duplicates(values: list[str], kind: str) -> list[str]:
    seen = set()
    for value in values:
        if value in seen:
            raise ValueError(f"duplicate {kind}: {value}")
        seen.add(value)
    return values


class RecipeCreate(BaseModel):
    """Create a recipe, or replace every mutable field of an existing one."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=2000)
    steps: str | None = Field(None, max_length=50000)
    difficulty: Difficulty | None = None
    kitchen: str | None = Field(None, max_length=100)
    rations: int | None = Field(None, ge=1, le=MAX_INT)
    time: int | None = Field(None, ge=0, le=MAX_INT)
    type: RecipeType | None = None
    ingredients: list[IngredientName] = []
    tags: list[TagName] = []

    @field_validator("ingredients")
    @classmethod
    def unique_ingredients(cls, v: list[str]) -> list[str]:
        return _reject_duplicates(v, "ingredient")

    @field_validator("tags")
    @classmethod
    def unique_tags(cls, v: list[str]) -> list[str]:
        return _reject_duplicates(v, "tag")


class RecipeResponse(BaseModel):
    """Full recipe representation, also used as the cached entity snapshot."""

    id: int
    name: str
    description: str | None
    steps: str | None
    difficulty: Difficulty | None
    kitchen: str | None
    rations: int | None
    time: int | None
    type: RecipeType | None
    user: UserSummary
    ingredients: list[str]
    tags: list[str]
    reviews: list[ReviewResponse]

    @classmethod
    def from_model(cls, recipe) -> "RecipeResponse":
        """Build the representation from a Recipe row and its collections."""
        return cls(
            id=recipe.id,
            name=recipe.name,
            description=recipe.description,
            steps=recipe.steps,
            difficulty=recipe.difficulty,
            kitchen=recipe.kitchen,
            rations=recipe.rations,
            time=recipe.time,
            type=recipe.type,
            user=UserSummary.model_validate(recipe.user),
            ingredients=[ingredient.name for ingredient in recipe.ingredients],
            tags=[tag.name for tag in recipe.tags],
            reviews=[ReviewResponse.model_validate(review) for review in recipe.reviews],
        )


class RecipePage(BaseModel):
    """One page of a recipe listing or search."""

    page: int
    total: int
    recipes: list[RecipeResponse]
