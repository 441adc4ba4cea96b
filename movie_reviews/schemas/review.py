"""Pydantic schemas for review and translation endpoints.

The wire format is camelCase (movieId, reviewerId, ...); Python attributes stay
snake_case and are mapped through aliases.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

if TYPE_CHECKING:
    from movie_reviews.models.review import Review


class CamelModel(BaseModel):
    """Base model that serialises to camelCase and accepts either spelling."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class TranslationEntry(CamelModel):
    """A cached machine translation of a review's content."""

    content: str
    last_updated: str                  # ISO-8601 timestamp
    ttl: int                           # absolute expiry, epoch seconds


class ReviewRead(CamelModel):
    """A review as returned by the listing endpoints."""

    movie_id: int
    review_id: int
    reviewer_id: str
    review_date: Optional[str] = None
    content: str
    translations: dict[str, TranslationEntry] = Field(default_factory=dict)

    @classmethod
    def from_review(cls, review: Review) -> ReviewRead:
        """Flatten the ORM translation rows into a language-keyed mapping."""
        return cls(
            movie_id=review.movie_id,
            review_id=review.review_id,
            reviewer_id=review.reviewer_id,
            review_date=review.review_date,
            content=review.content,
            translations={
                t.language: TranslationEntry(
                    content=t.content, last_updated=t.last_updated, ttl=t.ttl
                )
                for t in review.translations
            },
        )


class _ReviewBody(CamelModel):
    reviewer_id: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    review_date: Optional[str] = None

    @field_validator("review_date")
    @classmethod
    def check_review_date(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        try:
            date.fromisoformat(value)
        except ValueError as exc:
            raise ValueError("reviewDate must be an ISO-8601 date (YYYY-MM-DD)") from exc
        return value


class ReviewCreate(_ReviewBody):
    """Body for POST /movies/{movieId}/reviews."""


class ReviewUpdate(_ReviewBody):
    """
    Body for PUT /movies/{movieId}/reviews/{reviewId}.
    A full overwrite of content and reviewDate; reviewerId is only used for
    the ownership check and is never written.
    """


class ReviewListResponse(BaseModel):
    """Envelope for the listing endpoints."""

    data: list[ReviewRead]


class ReviewCreated(CamelModel):
    """Response for a successfully added review."""

    message: str
    movie_id: int
    review_id: int


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str


class TranslationResponse(CamelModel):
    """Response for GET /movies/{movieId}/reviews/{reviewId}/translate/{language}."""

    movie_id: int
    review_id: int
    language: str
    translated_content: str
    last_updated: str
    cached: bool
