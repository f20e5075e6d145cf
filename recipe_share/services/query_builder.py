"""Translate optional search parameters into one paginated recipe query."""

import logging
from dataclasses import dataclass, field

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from recipe_share.models.enums import Difficulty, RecipeType
from recipe_share.models.recipe import Recipe, RecipeIngredient, RecipeTag
from recipe_share.schemas.recipe import MAX_INT
from recipe_share.services.errors import ValidationError
from recipe_share.services.messages import get_message

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {
    "id": Recipe.id,
    "name": Recipe.name,
    "difficulty": Recipe.difficulty,
    "kitchen": Recipe.kitchen,
    "rations": Recipe.rations,
    "time": Recipe.time,
    "type": Recipe.type,
    "createdAt": Recipe.created_at,
}

SORT_DIRECTIONS = {"asc": False, "desc": True}

# Keeps OFFSET within a 64-bit integer for any page size
MAX_PAGE = MAX_INT


@dataclass
class SearchFilters:
    """Parsed search parameters. ``None`` means the filter is absent."""

    name: str | None = None
    description: str | None = None
    difficulty: Difficulty | None = None
    user_id: int | None = None
    kitchen: str | None = None
    rations: tuple[int | None, int | None] | None = None
    time: tuple[int | None, int | None] | None = None
    type: RecipeType | None = None
    ingredient: str | None = None
    tag: str | None = None
    sort_by: list[tuple[str, bool]] = field(default_factory=list)
    page: int = 0

    @property
    def is_unfiltered(self) -> bool:
        """True when only the page was given, so the cached listing can serve it."""
        return (
            self.name is None
            and self.description is None
            and self.difficulty is None
            and self.user_id is None
            and self.kitchen is None
            and self.rations is None
            and self.time is None
            and self.type is None
            and self.ingredient is None
            and self.tag is None
            and not self.sort_by
        )


def parse_int(value: str, low: int = -MAX_INT - 1, high: int = MAX_INT) -> int:
    """Parse an integer parameter, raising ValueError outside ``[low, high]``."""
    number = int(value.strip())
    if not low <= number <= high:
        raise ValueError(f"out of range: {value}")
    return number


def parse_range(token: str) -> tuple[int | None, int | None]:
    """Parse ``"a:b"``, ``"a:"`` or ``":b"`` into inclusive bounds.

    A bare number ``"a"`` means exactly ``a``. Raises ValueError on anything else,
    including bounds an Integer column cannot hold.
    """
    parts = token.split(":")
    if len(parts) == 1:
        value = parse_int(parts[0])
        return value, value
    if len(parts) != 2:
        raise ValueError(f"invalid range token: {token}")
    low, high = (part.strip() for part in parts)
    return (parse_int(low) if low else None, parse_int(high) if high else None)


def parse_sort(token: str) -> list[tuple[str, bool]]:
    """Parse ``"field[:direction],..."`` into ``(field, descending)`` pairs."""
    order = []
    for item in token.split(","):
        item = item.strip()
        if not item:
            continue
        name, _, direction = item.partition(":")
        name = name.strip()
        direction = direction.strip().lower() or "asc"
        if name not in SORTABLE_FIELDS or direction not in SORT_DIRECTIONS:
            raise ValueError(f"invalid sort token: {item}")
        order.append((name, SORT_DIRECTIONS[direction]))
    return order


def parse_search_params(params: dict[str, str | None], locale: str | None = None) -> SearchFilters:
    """Validate raw query-string values and build SearchFilters.

    Every malformed parameter is reported at once as a ValidationError keyed
    by parameter name.
    """
    errors: dict[str, str] = {}

    def text(key: str) -> str | None:
        value = params.get(key)
        if value is None or not value.strip():
            return None
        return value.strip()

    filters = SearchFilters(
        name=text("name"),
        description=text("description"),
        kitchen=text("kitchen"),
        ingredient=text("ingredient"),
        tag=text("tag"),
    )

    if (value := text("difficulty")) is not None:
        try:
            filters.difficulty = Difficulty(value.upper())
        except ValueError:
            errors["difficulty"] = get_message("invalid_value", locale)

    if (value := text("type")) is not None:
        try:
            filters.type = RecipeType(value.upper())
        except ValueError:
            errors["type"] = get_message("invalid_value", locale)

    if (value := text("userId")) is not None:
        try:
            filters.user_id = parse_int(value)
        except ValueError:
            errors["userId"] = get_message("invalid_value", locale)

    for key in ("rations", "time"):
        if (value := text(key)) is not None:
            try:
                setattr(filters, key, parse_range(value))
            except ValueError:
                errors[key] = get_message("invalid_range", locale)

    if (value := text("sortBy")) is not None:
        try:
            filters.sort_by = parse_sort(value)
        except ValueError:
            errors["sortBy"] = get_message("invalid_sort", locale)

    if (value := text("page")) is not None:
        try:
            filters.page = parse_int(value, low=0, high=MAX_PAGE)
        except ValueError:
            errors["page"] = get_message("invalid_value", locale)

    if errors:
        logger.info(f"Rejected search parameters: {sorted(errors)}")
        raise ValidationError(errors)
    return filters


def _apply_range(query: Query, column, bounds: tuple[int | None, int | None]) -> Query:
    low, high = bounds
    if low is not None:
        query = query.filter(column >= low)
    if high is not None:
        query = query.filter(column <= high)
    return query


def build_search_query(db: Session, filters: SearchFilters) -> Query:
    """AND together every present filter and apply the requested ordering."""
    query = db.query(Recipe)

    if filters.name is not None:
        query = query.filter(Recipe.name.icontains(filters.name, autoescape=True))
    if filters.description is not None:
        query = query.filter(Recipe.description.icontains(filters.description, autoescape=True))
    if filters.difficulty is not None:
        query = query.filter(Recipe.difficulty == filters.difficulty)
    if filters.user_id is not None:
        query = query.filter(Recipe.user_id == filters.user_id)
    if filters.kitchen is not None:
        query = query.filter(Recipe.kitchen == filters.kitchen)
    if filters.rations is not None:
        query = _apply_range(query, Recipe.rations, filters.rations)
    if filters.time is not None:
        query = _apply_range(query, Recipe.time, filters.time)
    if filters.type is not None:
        query = query.filter(Recipe.type == filters.type)
    if filters.ingredient is not None:
        query = query.filter(
            Recipe.ingredients.any(
                func.lower(RecipeIngredient.name) == filters.ingredient.lower()
            )
        )
    if filters.tag is not None:
        query = query.filter(Recipe.tags.any(func.lower(RecipeTag.name) == filters.tag.lower()))

    for name, descending in filters.sort_by:
        column = SORTABLE_FIELDS[name]
        query = query.order_by(column.desc() if descending else column.asc())
    # Stable paging regardless of the requested order
    return query.order_by(Recipe.id.asc())


def paginate(query: Query, page: int, page_size: int) -> tuple[list[Recipe], int]:
    """Return the recipes on ``page`` and the total number of matches."""
    total = query.order_by(None).count()
    items = query.offset(page * page_size).limit(page_size).all()
    return items, total
