"""Translation endpoint — machine translation of a review, cached per language."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from movie_reviews.config import settings
from movie_reviews.database import get_db
from movie_reviews.schemas.review import TranslationResponse
from movie_reviews.services.review_store import ReviewNotFoundError, StoreError
from movie_reviews.services.translation_cache import TranslationCache
from movie_reviews.services.translator import (
    TranslationServiceError,
    Translator,
    get_translator,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/movies", tags=["translations"])

# ISO 639 language with an optional script/region subtag, e.g. fr, pt-BR, zh-Hant
_LANGUAGE_PATTERN = r"^[a-zA-Z]{2,3}(-[a-zA-Z]{2,4})?$"


def get_translation_cache(
    translator: Translator = Depends(get_translator),
) -> TranslationCache:
    """FastAPI dependency: cache manager bound to the shared translator."""
    return TranslationCache(translator, ttl_seconds=settings.translation_ttl_seconds)


@router.get(
    "/{movie_id}/reviews/{review_id}/translate/{language}",
    response_model=TranslationResponse,
)
async def translate_review(
    movie_id: int,
    review_id: int,
    language: str = Path(..., pattern=_LANGUAGE_PATTERN),
    cache: TranslationCache = Depends(get_translation_cache),
    db: AsyncSession = Depends(get_db),
) -> TranslationResponse:
    """
    Return the review's content translated into `language`.

    - Served from the stored translation while its ttl is in the future
    - Otherwise translated once and stored with a fresh ttl
    - A failed cache write does not fail the request
    """
    language = language.lower()
    try:
        result = await cache.translate(db, movie_id, review_id, language)
    except ReviewNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Review not found",
        ) from exc
    except TranslationServiceError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Translation service unavailable",
        ) from exc
    except StoreError as exc:
        logger.error("Store error while translating review %d/%d: %s", movie_id, review_id, exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load review",
        ) from exc

    return TranslationResponse(
        movie_id=movie_id,
        review_id=review_id,
        language=language,
        translated_content=result.content,
        last_updated=result.last_updated,
        cached=result.cached,
    )
