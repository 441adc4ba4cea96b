"""
Reviews router — listing, creation and owner-only updates.

Endpoints:
  GET  /movies/all-reviews                      — every review (?reviewerId= filter)
  GET  /movies/{movie_id}/reviews               — reviews for one movie (?reviewerId=)
  POST /movies/{movie_id}/reviews               — add a review          [token]
  PUT  /movies/{movie_id}/reviews/{review_id}   — update own review     [token + owner]

Authentication: a user-pool JWT in the `token` cookie, or an
`Authorization: Bearer` header. Missing → 401, invalid → 403. Both are decided
before the store is touched.

An update leaves the review's cached translations in place; they keep being
served until their ttl expires.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from movie_reviews.config import settings
from movie_reviews.database import get_db
from movie_reviews.schemas.review import (
    MessageResponse,
    ReviewCreate,
    ReviewCreated,
    ReviewListResponse,
    ReviewRead,
    ReviewUpdate,
)
from movie_reviews.services import review_store
from movie_reviews.services.ownership_guard import OwnershipError, OwnershipGuard
from movie_reviews.services.review_store import ReviewNotFoundError, StoreError
from movie_reviews.services.token_verifier import (
    TokenVerificationError,
    TokenVerifier,
    get_token_verifier,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/movies", tags=["reviews"])


# ── Auth dependencies ────────────────────────────────────────────────────────


async def require_token(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> dict[str, Any]:
    """Return the verified token claims of the caller."""
    token = request.cookies.get(settings.token_cookie_name)
    if not token and authorization and authorization.lower().startswith("bearer "):
        token = authorization[len("bearer "):].strip()

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized request: Missing token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return await verifier.verify(token)
    except TokenVerificationError as exc:
        logger.warning("JWT verification failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden: Invalid token",
        ) from exc


@lru_cache(maxsize=1)
def get_ownership_guard() -> OwnershipGuard:
    """FastAPI dependency: process-wide ownership guard."""
    return OwnershipGuard(
        strict=settings.strict_ownership,
        identity_claim=settings.ownership_claim,
    )


# ── Helpers ──────────────────────────────────────────────────────────────────


def _store_failure(exc: StoreError, action: str) -> HTTPException:
    logger.error("Store error while %s: %s", action, exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}",
    )


def _listing(reviews: list) -> ReviewListResponse:
    if not reviews:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No reviews found",
        )
    return ReviewListResponse(data=[ReviewRead.from_review(r) for r in reviews])


# ── Endpoints ────────────────────────────────────────────────────────────────


@router.get("/all-reviews", response_model=ReviewListResponse)
async def list_all_reviews(
    reviewer_id: Optional[str] = Query(default=None, alias="reviewerId"),
    db: AsyncSession = Depends(get_db),
) -> ReviewListResponse:
    """Every review in the table, or only those written by reviewerId."""
    try:
        reviews = await review_store.list_reviews(db, reviewer_id=reviewer_id)
    except StoreError as exc:
        raise _store_failure(exc, "list reviews") from exc
    return _listing(reviews)


@router.get("/{movie_id}/reviews", response_model=ReviewListResponse)
async def list_movie_reviews(
    movie_id: int,
    reviewer_id: Optional[str] = Query(default=None, alias="reviewerId"),
    db: AsyncSession = Depends(get_db),
) -> ReviewListResponse:
    """Reviews for one movie, optionally only those by reviewerId."""
    try:
        reviews = await review_store.list_movie_reviews(
            db, movie_id, reviewer_id=reviewer_id
        )
    except StoreError as exc:
        raise _store_failure(exc, "list movie reviews") from exc
    return _listing(reviews)


@router.post(
    "/{movie_id}/reviews",
    response_model=ReviewCreated,
    status_code=status.HTTP_201_CREATED,
)
async def add_review(
    movie_id: int,
    body: ReviewCreate,
    _claims: dict = Depends(require_token),
    db: AsyncSession = Depends(get_db),
) -> ReviewCreated:
    """Add a review; the next free reviewId for the movie is assigned."""
    try:
        review_id = await review_store.add_review(
            db,
            movie_id,
            reviewer_id=body.reviewer_id,
            content=body.content,
            review_date=body.review_date,
        )
    except StoreError as exc:
        raise _store_failure(exc, "add review") from exc

    return ReviewCreated(
        message="Review added successfully",
        movie_id=movie_id,
        review_id=review_id,
    )


@router.put("/{movie_id}/reviews/{review_id}", response_model=MessageResponse)
async def update_review(
    movie_id: int,
    review_id: int,
    body: ReviewUpdate,
    claims: dict = Depends(require_token),
    guard: OwnershipGuard = Depends(get_ownership_guard),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """
    Overwrite content and reviewDate of a review owned by the caller.
    reviewDate is cleared when omitted. Repeating the same body is a no-op.
    """
    try:
        await guard.update(db, movie_id, review_id, body, claims)
    except ReviewNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Review not found",
        ) from exc
    except OwnershipError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden: reviewerId mismatch",
        ) from exc
    except StoreError as exc:
        raise _store_failure(exc, "update review") from exc

    return MessageResponse(message="Review updated successfully")
