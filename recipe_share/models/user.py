"""User model."""

from sqlalchemy import Column, Integer, String

from recipe_share.database import Base
from recipe_share.models.mixins import TimestampMixin


class User(Base, TimestampMixin):
    """User model, used as the ownership token for recipes and reviews."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=True)
