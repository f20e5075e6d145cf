"""Error types raised by the recipe services and mapped to HTTP responses in main."""

from enum import StrEnum

from fastapi import status


class ErrorCode(StrEnum):
    """Machine-readable error codes returned to clients."""

    VALIDATION = "VALIDATION"
    UPDATE_UNAUTHORIZED = "UPDATE_UNAUTHORIZED"
    DELETE_UNAUTHORIZED = "DELETE_UNAUTHORIZED"
    DUPLICATE_RECIPE = "DUPLICATE_RECIPE"
    DUPLICATE_INGREDIENT = "DUPLICATE_INGREDIENT"
    DUPLICATE_TAG = "DUPLICATE_TAG"
    DUPLICATE_REVIEW = "DUPLICATE_REVIEW"


class RecipeShareError(Exception):
    """Base error for recipe service failures.

    ``message_key`` is looked up in the message catalog for the request's
    locale when the error is rendered.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, code: str | None = None, message_key: str | None = None):
        self.code = code
        self.message_key = message_key
        super().__init__(code or self.__class__.__name__)


class ValidationError(RecipeShareError):
    """Malformed input. Rendered as ``{field: message}``."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        super().__init__(ErrorCode.VALIDATION)


class NotFoundError(RecipeShareError):
    """Referenced recipe does not exist. Rendered with an empty body."""

    status_code = status.HTTP_404_NOT_FOUND


class UnauthorizedError(RecipeShareError):
    """Acting user does not own the recipe."""

    status_code = status.HTTP_401_UNAUTHORIZED


class ConflictError(RecipeShareError):
    """A uniqueness rule (recipe name, ingredient, tag, review) was violated."""

    status_code = status.HTTP_409_CONFLICT


class UnsupportedMediaTypeError(RecipeShareError):
    """Client accepts neither JSON nor XML."""

    status_code = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE


class InternalError(RecipeShareError):
    """The store failed to carry out a mutation."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def update_unauthorized() -> UnauthorizedError:
    return UnauthorizedError(ErrorCode.UPDATE_UNAUTHORIZED, "update_unauthorized")


def delete_unauthorized() -> UnauthorizedError:
    return UnauthorizedError(ErrorCode.DELETE_UNAUTHORIZED, "delete_unauthorized")


def duplicate(code: ErrorCode) -> ConflictError:
    """Build the conflict error for a duplicate recipe, ingredient, tag or review."""
    return ConflictError(code, code.lower())
