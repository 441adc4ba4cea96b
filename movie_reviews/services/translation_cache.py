"""
Translation cache — serves a review's translation from its per-language cache
entry while that entry is fresh, otherwise translates and stores a new one.

Flow for (movie_id, review_id, language):
  1. Load the review (ReviewNotFoundError if missing).
  2. Entry present and now < ttl   → return it. No translator call, no write.
  3. Entry missing or expired      → one translator call.
  4. Store {content, lastUpdated=now, ttl=now+window} for that language only.
     The write is best-effort: if it fails the fresh translation is still
     returned and the failure is logged.
  5. Translator failure            → TranslationServiceError, nothing written.

Expired entries are never swept; they are simply ignored and overwritten on
the next miss. Concurrent misses for the same key may both translate and both
write; the later write wins. Requests are not serialised per key.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from movie_reviews.models.review import ReviewTranslation
from movie_reviews.schemas.review import TranslationEntry
from movie_reviews.services import review_store
from movie_reviews.services.review_store import StoreError
from movie_reviews.services.translator import Translator

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class TranslationResult:
    """Translated text and when it was produced."""

    content: str
    last_updated: str
    cached: bool


class TranslationCache:
    """
    Read-through cache of review translations with an absolute-expiry TTL.
    Holds no state of its own; every entry lives in the review store.
    """

    def __init__(
        self,
        translator: Translator,
        ttl_seconds: int,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.translator = translator
        self.ttl_seconds = ttl_seconds
        self.clock = clock

    @staticmethod
    def is_fresh(entry: Optional[ReviewTranslation], now: datetime) -> bool:
        """An entry is servable only while now is strictly before its ttl."""
        return entry is not None and now.timestamp() < entry.ttl

    def new_entry(self, content: str, now: datetime) -> TranslationEntry:
        return TranslationEntry(
            content=content,
            last_updated=now.isoformat(),
            ttl=int(now.timestamp()) + self.ttl_seconds,
        )

    async def translate(
        self,
        db: AsyncSession,
        movie_id: int,
        review_id: int,
        language: str,
    ) -> TranslationResult:
        """Return the review translated into language, using the cache when fresh."""
        review = await review_store.get_review(db, movie_id, review_id)
        now = self.clock()

        cached = next(
            (t for t in review.translations if t.language == language), None
        )
        if self.is_fresh(cached, now):
            logger.debug(
                "Translation cache HIT (movie=%d review=%d lang=%s)",
                movie_id, review_id, language,
            )
            return TranslationResult(
                content=cached.content,
                last_updated=cached.last_updated,
                cached=True,
            )

        logger.debug(
            "Translation cache %s (movie=%d review=%d lang=%s)",
            "EXPIRED" if cached is not None else "MISS",
            movie_id, review_id, language,
        )

        # Raises TranslationServiceError; nothing has been written yet.
        translated = await self.translator.translate(review.content, language)

        entry = self.new_entry(translated, self.clock())
        try:
            await review_store.put_translation(
                db, movie_id, review_id, language, entry
            )
            logger.info(
                "Cached '%s' translation of review %d/%d until %d",
                language, movie_id, review_id, entry.ttl,
            )
        except StoreError as exc:
            logger.warning(
                "Could not cache '%s' translation of review %d/%d: %s",
                language, movie_id, review_id, exc,
            )

        return TranslationResult(
            content=entry.content,
            last_updated=entry.last_updated,
            cached=False,
        )
