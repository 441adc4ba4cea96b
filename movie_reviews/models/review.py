"""Review ORM models — one row per review, one row per cached translation.

Translations live in their own table keyed by (movie_id, review_id, language)
so a cache refresh rewrites exactly one language and nothing else.
"""

from sqlalchemy import (
    Column, Integer, BigInteger, Text, String, TIMESTAMP,
    ForeignKeyConstraint, func,
)
from sqlalchemy.orm import relationship

from movie_reviews.database import Base


class Review(Base):
    """
    A single reviewer's opinion of a single movie.
    (movie_id, review_id) is immutable once created, and so is reviewer_id.
    """

    __tablename__ = "movie_reviews"

    movie_id = Column(Integer, primary_key=True, autoincrement=False)
    review_id = Column(Integer, primary_key=True, autoincrement=False)

    # Secondary lookup for "all reviews by this reviewer"
    reviewer_id = Column(String(255), nullable=False, index=True)

    review_date = Column(String(32), nullable=True)
    content = Column(Text, nullable=False)
    created_at = Column(
        TIMESTAMP(timezone=True), nullable=False, server_default=func.now()
    )

    # Relationships
    translations = relationship(
        "ReviewTranslation",
        back_populates="review",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class ReviewTranslation(Base):
    """Cached machine translation of a review's content into one language."""

    __tablename__ = "review_translations"
    __table_args__ = (
        ForeignKeyConstraint(
            ["movie_id", "review_id"],
            ["movie_reviews.movie_id", "movie_reviews.review_id"],
            ondelete="CASCADE",
        ),
    )

    movie_id = Column(Integer, primary_key=True, autoincrement=False)
    review_id = Column(Integer, primary_key=True, autoincrement=False)
    language = Column(String(16), primary_key=True)

    content = Column(Text, nullable=False)
    last_updated = Column(String(40), nullable=False)   # ISO-8601, UTC
    ttl = Column(BigInteger, nullable=False)             # expiry, epoch seconds

    review = relationship("Review", back_populates="translations")
