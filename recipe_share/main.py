"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from recipe_share.api import auth, recipes
from recipe_share.config import get_settings
from recipe_share.schemas.recipe import ErrorResponse
from recipe_share.services.errors import (
    NotFoundError,
    RecipeShareError,
    UnsupportedMediaTypeError,
    ValidationError,
)
from recipe_share.services.messages import get_message, resolve_locale

settings = get_settings()
logger = logging.getLogger(__name__)

# Leading entries of a validation error location that name the request part
REQUEST_PARTS = ("body", "query", "path", "header")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    logging.basicConfig(level=settings.log_level.upper())
    logger.info(f"Starting recipe API ({settings.environment}, cache={settings.cache_backend})")
    yield


app = FastAPI(
    title="Recipe Share API",
    description="Share, search and review recipes",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware for development
if settings.is_development:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(RecipeShareError)
async def recipe_share_error_handler(request: Request, exc: RecipeShareError) -> Response:
    """Render service errors with the response shape for their kind."""
    if isinstance(exc, ValidationError):
        return JSONResponse(status_code=exc.status_code, content=exc.errors)
    if isinstance(exc, NotFoundError | UnsupportedMediaTypeError) or exc.code is None:
        return Response(status_code=exc.status_code)

    locale = resolve_locale(request.headers.get("accept-language"))
    body = ErrorResponse(code=exc.code, message=get_message(exc.message_key or "", locale))
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report invalid payloads and parameters as 400 ``{field: message}``."""
    errors: dict[str, str] = {}
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in REQUEST_PARTS]
        errors.setdefault(".".join(location) or "body", error.get("msg", "Invalid value"))
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=errors)


# Register routers
app.include_router(auth.router)
app.include_router(recipes.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "environment": settings.environment}
