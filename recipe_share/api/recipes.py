"""Recipe API endpoints."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Header, Path, Query, Response, status

from recipe_share.api.dependencies import get_current_user, get_locale, get_recipe_service
from recipe_share.models.user import User
from recipe_share.schemas.recipe import (
    INGREDIENT_MAX_LENGTH,
    TAG_MAX_LENGTH,
    RecipeCreate,
    RecipePage,
    ReviewCreate,
)
from recipe_share.services.query_builder import MAX_PAGE, parse_search_params
from recipe_share.services.recipe_service import RecipeService
from recipe_share.services.renderer import MediaType, negotiate, render

router = APIRouter(prefix="/api/v1/recipes", tags=["recipes"])

CurrentUser = Annotated[User, Depends(get_current_user)]
Service = Annotated[RecipeService, Depends(get_recipe_service)]
Accept = Annotated[str | None, Header()]
Ingredient = Annotated[str, Path(min_length=1, max_length=INGREDIENT_MAX_LENGTH)]
Tag = Annotated[str, Path(min_length=1, max_length=TAG_MAX_LENGTH)]


def _page_response(result: RecipePage, media_type: MediaType) -> Response:
    return Response(content=render(result, media_type), media_type=media_type.content_type)


# --- Static routes first (before /{recipe_id}) ---


@router.get("")
def list_recipes(
    current_user: CurrentUser,
    service: Service,
    page: Annotated[int, Query(ge=0, le=MAX_PAGE)] = 0,
    accept: Accept = None,
):
    """List all recipes, one page at a time."""
    media_type = negotiate(accept)
    return _page_response(service.list_recipes(page), media_type)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_recipe(
    recipe_data: RecipeCreate,
    current_user: CurrentUser,
    service: Service,
):
    """Create a new recipe owned by the current user."""
    service.create_recipe(recipe_data, current_user)
    return Response(status_code=status.HTTP_201_CREATED)


@router.get("/search")
def search_recipes(
    current_user: CurrentUser,
    service: Service,
    locale: Annotated[str, Depends(get_locale)],
    accept: Accept = None,
    name: str | None = None,
    description: str | None = None,
    difficulty: str | None = None,
    user_id: Annotated[str | None, Query(alias="userId")] = None,
    kitchen: str | None = None,
    rations: Annotated[str | None, Query(description="Range token min:max")] = None,
    time: Annotated[str | None, Query(description="Range token min:max")] = None,
    type: str | None = None,
    ingredient: str | None = None,
    tag: str | None = None,
    sort_by: Annotated[str | None, Query(alias="sortBy", description="field:asc|desc,...")] = None,
    page: str | None = None,
):
    """Search recipes by any combination of filters."""
    media_type = negotiate(accept)
    filters = parse_search_params(
        {
            "name": name,
            "description": description,
            "difficulty": difficulty,
            "userId": user_id,
            "kitchen": kitchen,
            "rations": rations,
            "time": time,
            "type": type,
            "ingredient": ingredient,
            "tag": tag,
            "sortBy": sort_by,
            "page": page,
        },
        locale,
    )
    return _page_response(service.search_recipes(filters), media_type)


# --- Dynamic recipe routes (must be last) ---


@router.get("/{recipe_id}")
def get_recipe(
    recipe_id: int,
    current_user: CurrentUser,
    service: Service,
    accept: Accept = None,
):
    """Get a recipe as JSON or XML."""
    media_type = negotiate(accept)
    body = service.retrieve_recipe(recipe_id, media_type)
    return Response(content=body, media_type=media_type.content_type)


@router.put("/{recipe_id}")
def update_recipe(
    recipe_id: int,
    recipe_data: RecipeCreate,
    current_user: CurrentUser,
    service: Service,
):
    """Replace a recipe."""
    service.update_recipe(recipe_id, recipe_data, current_user)
    return Response(status_code=status.HTTP_200_OK)


@router.patch("/{recipe_id}")
def partial_update_recipe(
    recipe_id: int,
    current_user: CurrentUser,
    service: Service,
    body: Annotated[dict[str, Any] | None, Body()] = None,
):
    """Update only the recipe fields present in the body."""
    service.partial_update_recipe(recipe_id, body, current_user)
    return Response(status_code=status.HTTP_200_OK)


@router.delete("/{recipe_id}")
def delete_recipe(
    recipe_id: int,
    current_user: CurrentUser,
    service: Service,
):
    """Delete a recipe. Succeeds when the recipe does not exist."""
    service.delete_recipe(recipe_id, current_user)
    return Response(status_code=status.HTTP_200_OK)


@router.post("/{recipe_id}/ingredients/{ingredient}", status_code=status.HTTP_201_CREATED)
def add_ingredient(
    recipe_id: int,
    ingredient: Ingredient,
    current_user: CurrentUser,
    service: Service,
):
    """Add an ingredient to a recipe."""
    service.add_ingredient(recipe_id, ingredient, current_user)
    return Response(status_code=status.HTTP_201_CREATED)


@router.delete("/{recipe_id}/ingredients/{ingredient}")
def delete_ingredient(
    recipe_id: int,
    ingredient: str,
    current_user: CurrentUser,
    service: Service,
):
    """Remove an ingredient from a recipe."""
    service.delete_ingredient(recipe_id, ingredient, current_user)
    return Response(status_code=status.HTTP_200_OK)


@router.post("/{recipe_id}/tags/{tag}", status_code=status.HTTP_201_CREATED)
def add_tag(
    recipe_id: int,
    tag: Tag,
    current_user: CurrentUser,
    service: Service,
):
    """Tag a recipe."""
    service.add_tag(recipe_id, tag, current_user)
    return Response(status_code=status.HTTP_201_CREATED)


@router.delete("/{recipe_id}/tags/{tag}")
def delete_tag(
    recipe_id: int,
    tag: str,
    current_user: CurrentUser,
    service: Service,
):
    """Remove a tag from a recipe."""
    service.delete_tag(recipe_id, tag, current_user)
    return Response(status_code=status.HTTP_200_OK)


@router.post("/{recipe_id}/reviews", status_code=status.HTTP_201_CREATED)
def add_review(
    recipe_id: int,
    review_data: ReviewCreate,
    current_user: CurrentUser,
    service: Service,
):
    """Review a recipe. Each user may review a recipe once."""
    service.add_review(recipe_id, review_data, current_user)
    return Response(status_code=status.HTTP_201_CREATED)
