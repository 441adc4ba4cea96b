"""
Review store — every read and write against the reviews tables.

Reviews are keyed by (movie_id, review_id). Cached translations are stored
one row per language and written with a targeted upsert, so refreshing one
language never clobbers another or any review field.

Writes commit their own transaction and roll back on failure. Database errors
surface as StoreError; a missing review surfaces as ReviewNotFoundError.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from movie_reviews.models.review import Review, ReviewTranslation
from movie_reviews.schemas.review import TranslationEntry

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when the underlying database operation fails."""


class ReviewNotFoundError(Exception):
    """Raised when no review exists for the requested key."""

    def __init__(self, movie_id: int, review_id: int) -> None:
        super().__init__(f"Review {review_id} for movie {movie_id} not found")
        self.movie_id = movie_id
        self.review_id = review_id


# ── Reads ─────────────────────────────────────────────────────────────────────


async def get_review(db: AsyncSession, movie_id: int, review_id: int) -> Review:
    """Return the review with its cached translations, or raise ReviewNotFoundError."""
    try:
        result = await db.execute(
            select(Review).where(
                Review.movie_id == movie_id,
                Review.review_id == review_id,
            )
        )
        review = result.scalar_one_or_none()
    except SQLAlchemyError as exc:
        raise StoreError(f"Failed to load review {movie_id}/{review_id}") from exc

    if review is None:
        raise ReviewNotFoundError(movie_id, review_id)
    return review


async def list_reviews(
    db: AsyncSession,
    reviewer_id: Optional[str] = None,
) -> list[Review]:
    """All reviews, or only those by reviewer_id (served by the reviewer index)."""
    stmt = select(Review).order_by(Review.movie_id, Review.review_id)
    if reviewer_id:
        stmt = stmt.where(Review.reviewer_id == reviewer_id)
    try:
        result = await db.execute(stmt)
    except SQLAlchemyError as exc:
        raise StoreError("Failed to list reviews") from exc
    return list(result.scalars().all())


async def list_movie_reviews(
    db: AsyncSession,
    movie_id: int,
    reviewer_id: Optional[str] = None,
) -> list[Review]:
    """Reviews for one movie, optionally narrowed to a single reviewer."""
    stmt = (
        select(Review)
        .where(Review.movie_id == movie_id)
        .order_by(Review.review_id)
    )
    if reviewer_id:
        stmt = stmt.where(Review.reviewer_id == reviewer_id)
    try:
        result = await db.execute(stmt)
    except SQLAlchemyError as exc:
        raise StoreError(f"Failed to list reviews for movie {movie_id}") from exc
    return list(result.scalars().all())


# ── Writes ────────────────────────────────────────────────────────────────────


async def add_review(
    db: AsyncSession,
    movie_id: int,
    reviewer_id: str,
    content: str,
    review_date: Optional[str] = None,
) -> int:
    """Insert a new review under the next free review_id for the movie."""
    try:
        result = await db.execute(
            text("""
                SELECT COALESCE(MAX(review_id), 0) + 1
                FROM movie_reviews WHERE movie_id = :movie_id
            """),
            {"movie_id": movie_id},
        )
        review_id = int(result.scalar_one())

        await db.execute(
            text("""
                INSERT INTO movie_reviews
                    (movie_id, review_id, reviewer_id, review_date, content)
                VALUES
                    (:movie_id, :review_id, :reviewer_id, :review_date, :content)
            """),
            {
                "movie_id": movie_id,
                "review_id": review_id,
                "reviewer_id": reviewer_id,
                "review_date": review_date,
                "content": content,
            },
        )
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        raise StoreError(f"Failed to add review for movie {movie_id}") from exc

    logger.info("Added review %d for movie %d", review_id, movie_id)
    return review_id


async def update_review(
    db: AsyncSession,
    movie_id: int,
    review_id: int,
    content: str,
    review_date: Optional[str] = None,
) -> None:
    """
    Overwrite content and review_date. reviewer_id and the key are never
    touched. Callers are expected to have checked ownership first.
    """
    try:
        await db.execute(
            text("""
                UPDATE movie_reviews
                SET content = :content, review_date = :review_date
                WHERE movie_id = :movie_id AND review_id = :review_id
            """),
            {
                "content": content,
                "review_date": review_date,
                "movie_id": movie_id,
                "review_id": review_id,
            },
        )
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        raise StoreError(f"Failed to update review {movie_id}/{review_id}") from exc

    logger.info("Updated review %d for movie %d", review_id, movie_id)


async def put_translation(
    db: AsyncSession,
    movie_id: int,
    review_id: int,
    language: str,
    entry: TranslationEntry,
) -> None:
    """Insert or replace the cached translation for a single language."""
    try:
        await db.execute(
            text("""
                INSERT INTO review_translations
                    (movie_id, review_id, language, content, last_updated, ttl)
                VALUES
                    (:movie_id, :review_id, :language, :content, :last_updated, :ttl)
                ON CONFLICT (movie_id, review_id, language) DO UPDATE
                SET content      = excluded.content,
                    last_updated = excluded.last_updated,
                    ttl          = excluded.ttl
            """),
            {
                "movie_id": movie_id,
                "review_id": review_id,
                "language": language,
                "content": entry.content,
                "last_updated": entry.last_updated,
                "ttl": entry.ttl,
            },
        )
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        raise StoreError(
            f"Failed to store '{language}' translation of review {movie_id}/{review_id}"
        ) from exc


async def batch_load(db: AsyncSession, items: list[dict[str, Any]]) -> int:
    """
    Load seed reviews (camelCase dicts, optionally with translations).
    Keys that already exist are skipped. Returns the number inserted.
    """
    inserted = 0
    try:
        for item in items:
            key = (int(item["movieId"]), int(item["reviewId"]))
            if await db.get(Review, key) is not None:
                continue
            review = Review(
                movie_id=key[0],
                review_id=key[1],
                reviewer_id=item["reviewerId"],
                review_date=item.get("reviewDate"),
                content=item["content"],
            )
            for language, entry in (item.get("translations") or {}).items():
                review.translations.append(
                    ReviewTranslation(
                        language=language,
                        content=entry["content"],
                        last_updated=entry["lastUpdated"],
                        ttl=int(entry["ttl"]),
                    )
                )
            db.add(review)
            inserted += 1
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        raise StoreError("Batch load of reviews failed") from exc

    logger.info("Batch-loaded %d of %d reviews", inserted, len(items))
    return inserted
