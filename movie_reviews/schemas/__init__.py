"""Pydantic schemas package."""

from movie_reviews.schemas.review import (
    MessageResponse,
    ReviewCreate,
    ReviewCreated,
    ReviewListResponse,
    ReviewRead,
    ReviewUpdate,
    TranslationEntry,
    TranslationResponse,
)

__all__ = [
    "ReviewCreate", "ReviewUpdate", "ReviewRead", "ReviewListResponse",
    "ReviewCreated", "MessageResponse",
    "TranslationEntry", "TranslationResponse",
]
