"""Localized user-facing messages."""

from recipe_share.config import get_settings

settings = get_settings()

MESSAGES: dict[str, dict[str, str]] = {
    "en": {
        "update_unauthorized": "You can only modify your own recipes",
        "delete_unauthorized": "You can only delete your own recipes",
        "duplicate_recipe": "A recipe with this name already exists",
        "duplicate_ingredient": "The recipe already contains this ingredient",
        "duplicate_tag": "The recipe already has this tag",
        "duplicate_review": "You have already reviewed this recipe",
        "no_fields_to_update": "No recognized fields to update",
        "invalid_range": "Expected a range like min:max with numeric bounds",
        "invalid_sort": "Unknown sort field or direction",
        "invalid_value": "Invalid value",
    },
    "es": {
        "update_unauthorized": "Solo puedes modificar tus propias recetas",
        "delete_unauthorized": "Solo puedes borrar tus propias recetas",
        "duplicate_recipe": "Ya existe una receta con este nombre",
        "duplicate_ingredient": "La receta ya contiene este ingrediente",
        "duplicate_tag": "La receta ya tiene esta etiqueta",
        "duplicate_review": "Ya has valorado esta receta",
        "no_fields_to_update": "No hay campos reconocidos para actualizar",
        "invalid_range": "Se esperaba un rango como min:max con valores numericos",
        "invalid_sort": "Campo o direccion de ordenacion desconocidos",
        "invalid_value": "Valor no valido",
    },
}


def resolve_locale(accept_language: str | None) -> str:
    """Pick the first supported language from an Accept-Language header.

    Quality values are honored; unsupported languages fall back to the
    configured default locale.
    """
    if not accept_language:
        return settings.default_locale

    candidates = []
    for position, part in enumerate(accept_language.split(",")):
        pieces = part.strip().split(";")
        language = pieces[0].strip().lower().split("-")[0]
        quality = 1.0
        for param in pieces[1:]:
            name, _, value = param.strip().partition("=")
            if name == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = 0.0
        if language and quality > 0:
            candidates.append((-quality, position, language))

    for _, _, language in sorted(candidates):
        if language in MESSAGES:
            return language
    return settings.default_locale


def get_message(key: str, locale: str | None = None) -> str:
    """Look up a message, falling back to the default locale and then to the key."""
    catalog = MESSAGES.get(locale or settings.default_locale, {})
    if key in catalog:
        return catalog[key]
    return MESSAGES.get(settings.default_locale, {}).get(key, key)
