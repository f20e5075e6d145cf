"""JSON/XML rendering of recipes and content negotiation."""

import xml.etree.ElementTree as ET
from enum import StrEnum

from recipe_share.schemas.recipe import RecipePage, RecipeResponse
from recipe_share.services.errors import UnsupportedMediaTypeError


class MediaType(StrEnum):
    """Representations a recipe can be rendered as. Values double as cache key suffixes."""

    JSON = "json"
    XML = "xml"

    @property
    def content_type(self) -> str:
        return f"application/{self.value}"


def _parse_accept(accept: str) -> list[tuple[str, float, int]]:
    ranges = []
    for position, part in enumerate(accept.split(",")):
        pieces = part.strip().split(";")
        media_range = pieces[0].strip().lower()
        if not media_range:
            continue
        quality = 1.0
        for param in pieces[1:]:
            name, _, value = param.strip().partition("=")
            if name.strip() == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = 0.0
        ranges.append((media_range, quality, position))
    return ranges


def _quality(media_type: MediaType, ranges: list[tuple[str, float, int]]) -> tuple[float, int]:
    """Quality and specificity of the most specific range matching ``media_type``."""
    best = (0.0, -1)
    for media_range, quality, _ in ranges:
        if media_range == media_type.content_type:
            specificity = 2
        elif media_range == "application/*":
            specificity = 1
        elif media_range == "*/*":
            specificity = 0
        else:
            continue
        if specificity > best[1]:
            best = (quality, specificity)
    return best


def negotiate(accept: str | None) -> MediaType:
    """Choose JSON or XML from an Accept header.

    A missing header accepts anything. Ties go to JSON. Raises
    UnsupportedMediaTypeError when neither representation is acceptable.
    """
    if not accept or not accept.strip():
        return MediaType.JSON

    ranges = _parse_accept(accept)
    json_q, _ = _quality(MediaType.JSON, ranges)
    xml_q, _ = _quality(MediaType.XML, ranges)

    if json_q <= 0 and xml_q <= 0:
        raise UnsupportedMediaTypeError()
    return MediaType.XML if xml_q > json_q else MediaType.JSON


def to_json(model: RecipeResponse | RecipePage) -> bytes:
    return model.model_dump_json().encode("utf-8")


def _text(parent: ET.Element, tag: str, value) -> None:
    element = ET.SubElement(parent, tag)
    if value is not None:
        element.text = str(value.value if hasattr(value, "value") else value)


XML_FIELDS = ("name", "description", "steps", "difficulty", "kitchen", "rations", "time", "type")


def _recipe_element(recipe: RecipeResponse) -> ET.Element:
    root = ET.Element("recipe", id=str(recipe.id))
    for field in XML_FIELDS:
        _text(root, field, getattr(recipe, field))

    user = ET.SubElement(root, "user", id=str(recipe.user.id))
    if recipe.user.name is not None:
        user.text = recipe.user.name

    ingredients = ET.SubElement(root, "ingredients")
    for name in recipe.ingredients:
        _text(ingredients, "ingredient", name)

    tags = ET.SubElement(root, "tags")
    for name in recipe.tags:
        _text(tags, "tag", name)

    reviews = ET.SubElement(root, "reviews")
    for review in recipe.reviews:
        element = ET.SubElement(reviews, "review", user=str(review.user.id))
        _text(element, "comment", review.comment)
        _text(element, "rating", review.rating)
    return root


def to_xml(model: RecipeResponse | RecipePage) -> bytes:
    """Render a recipe as ``<recipe>`` or a page as ``<recipes page= total=>``."""
    if isinstance(model, RecipePage):
        root = ET.Element("recipes", page=str(model.page), total=str(model.total))
        for recipe in model.recipes:
            root.append(_recipe_element(recipe))
    else:
        root = _recipe_element(model)
    return ET.tostring(root, encoding="utf-8", xml_declaration=True)


def render(model: RecipeResponse | RecipePage, media_type: MediaType) -> bytes:
    if media_type is MediaType.XML:
        return to_xml(model)
    return to_json(model)
