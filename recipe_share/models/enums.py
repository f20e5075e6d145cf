"""Enums for model fields."""

from enum import Enum


class Difficulty(str, Enum):
    """How demanding a recipe is to prepare."""

    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"


class RecipeType(str, Enum):
    """Course or category a recipe belongs to."""

    APPETIZER = "APPETIZER"
    MAIN = "MAIN"
    SIDE = "SIDE"
    DESSERT = "DESSERT"
    DRINK = "DRINK"
    OTHER = "OTHER"
