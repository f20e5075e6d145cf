"""Review model."""

from sqlalchemy import Column, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from recipe_share.database import Base
from recipe_share.models.mixins import TimestampMixin


class Review(Base, TimestampMixin):
    """A user's rating and comment on a recipe. One per user and recipe."""

    __tablename__ = "reviews"
    __table_args__ = (UniqueConstraint("user_id", "recipe_id", name="uq_review_user_recipe"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    recipe_id = Column(Integer, ForeignKey("recipes.id"), nullable=False, index=True)
    comment = Column(String(255), nullable=False)
    rating = Column(Float, nullable=False)  # 0.0 - 5.0

    # Relationships
    user = relationship("User", backref="reviews")
    recipe = relationship("Recipe", back_populates="reviews")
