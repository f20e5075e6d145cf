"""Recipe, RecipeIngredient and RecipeTag models."""

from sqlalchemy import Column, Enum, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from recipe_share.database import Base
from recipe_share.models.enums import Difficulty, RecipeType
from recipe_share.models.mixins import TimestampMixin


class Recipe(Base, TimestampMixin):
    """Recipe shared by its owner and readable by every user."""

    __tablename__ = "recipes"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # Names are unique across all recipes, not per owner
    name = Column(String(255), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    steps = Column(Text, nullable=True)
    difficulty = Column(Enum(Difficulty), nullable=True, index=True)
    kitchen = Column(String(100), nullable=True, index=True)
    rations = Column(Integer, nullable=True)
    time = Column(Integer, nullable=True)  # minutes
    type = Column(Enum(RecipeType), nullable=True, index=True)

    # Relationships
    user = relationship("User", backref="recipes")
    ingredients = relationship(
        "RecipeIngredient",
        back_populates="recipe",
        cascade="all, delete-orphan",
        order_by="RecipeIngredient.id",
    )
    tags = relationship(
        "RecipeTag",
        back_populates="recipe",
        cascade="all, delete-orphan",
        order_by="RecipeTag.id",
    )
    reviews = relationship(
        "Review",
        back_populates="recipe",
        cascade="all, delete-orphan",
        order_by="Review.id",
    )

    def has_ingredient(self, name: str) -> bool:
        """Check if the recipe already lists an ingredient."""
        return any(ingredient.name == name for ingredient in self.ingredients)

    def has_tag(self, name: str) -> bool:
        """Check if the recipe already carries a tag."""
        return any(tag.name == name for tag in self.tags)


class RecipeIngredient(Base):
    """Ingredient text within a recipe."""

    __tablename__ = "recipe_ingredients"
    __table_args__ = (UniqueConstraint("recipe_id", "name", name="uq_recipe_ingredient"),)

    id = Column(Integer, primary_key=True, index=True)
    recipe_id = Column(Integer, ForeignKey("recipes.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False, index=True)

    # Relationships
    recipe = relationship("Recipe", back_populates="ingredients")


class RecipeTag(Base):
    """Tag attached to a recipe."""

    __tablename__ = "recipe_tags"
    __table_args__ = (UniqueConstraint("recipe_id", "name", name="uq_recipe_tag"),)

    id = Column(Integer, primary_key=True, index=True)
    recipe_id = Column(Integer, ForeignKey("recipes.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False, index=True)

    # Relationships
    recipe = relationship("Recipe", back_populates="tags")
