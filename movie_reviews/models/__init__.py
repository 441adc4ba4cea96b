"""SQLAlchemy ORM models package."""

from movie_reviews.database import Base
from movie_reviews.models.review import Review, ReviewTranslation

__all__ = ["Base", "Review", "ReviewTranslation"]
