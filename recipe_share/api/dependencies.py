"""FastAPI dependencies for authentication, database, cache and services."""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from recipe_share.database import get_db
from recipe_share.models.user import User
from recipe_share.services.auth import decode_access_token, get_user_by_id
from recipe_share.services.cache import RecipeCache, get_recipe_cache
from recipe_share.services.messages import resolve_locale
from recipe_share.services.recipe_service import RecipeService

security = HTTPBearer()


def _credentials_error(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Get the current authenticated user from JWT token."""
    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise _credentials_error("Invalid authentication credentials")

    user_id = payload.get("sub")
    if user_id is None or not str(user_id).isdigit():
        raise _credentials_error("Invalid authentication credentials")

    user = get_user_by_id(db, int(user_id))
    if user is None:
        raise _credentials_error("User not found")

    return user


def get_cache() -> RecipeCache:
    """Get the shared recipe cache."""
    return get_recipe_cache()


def get_locale(accept_language: Annotated[str | None, Header()] = None) -> str:
    """Resolve the message locale from the Accept-Language header."""
    return resolve_locale(accept_language)


def get_recipe_service(
    db: Annotated[Session, Depends(get_db)],
    cache: Annotated[RecipeCache, Depends(get_cache)],
    locale: Annotated[str, Depends(get_locale)],
) -> RecipeService:
    """Get recipe service with dependencies."""
    return RecipeService(db, cache, locale=locale)
