"""
OwnershipGuard — only a review's author may change it.

Token presence and validity are checked before the guard runs (see
routers/reviews.py); by the time update() is called the caller holds a
verified token.

Cached translations are not touched by an update. Entries for the old text
stay servable until their ttl passes; freshness is decided by ttl alone.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from movie_reviews.models.review import Review
from movie_reviews.schemas.review import ReviewUpdate
from movie_reviews.services import review_store

logger = logging.getLogger(__name__)


class OwnershipError(Exception):
    """Raised when the requester is not the author of the review."""


class OwnershipGuard:
    """
    Gate for review mutations.

    Rules:
    1. The review must exist (ReviewNotFoundError otherwise).
    2. The reviewerId supplied in the body must equal the stored author.
    3. In strict mode the token's identity claim must also equal the stored
       author. Without it, any holder of a valid token who knows the author's
       reviewerId passes rule 2. Cognito puts `email` only in id tokens, so
       with the default claim an access token never satisfies this rule.
    4. Only content and reviewDate are written; the key and author never are.
    """

    def __init__(self, strict: bool = False, identity_claim: str = "email") -> None:
        self.strict = strict
        self.identity_claim = identity_claim

    async def authorize(
        self,
        db: AsyncSession,
        movie_id: int,
        review_id: int,
        reviewer_id: str,
        claims: dict[str, Any],
    ) -> Review:
        """Return the stored review if the requester owns it, else raise."""
        review = await review_store.get_review(db, movie_id, review_id)

        if review.reviewer_id != reviewer_id:
            logger.warning(
                "Ownership denied for review %d/%d: body reviewerId does not match author",
                movie_id, review_id,
            )
            raise OwnershipError("reviewerId mismatch")

        if self.strict:
            identity = claims.get(self.identity_claim)
            if identity is None:
                logger.warning(
                    "Ownership denied for review %d/%d: %s token has no '%s' claim",
                    movie_id, review_id, claims.get("token_use", "unknown"),
                    self.identity_claim,
                )
                raise OwnershipError(f"token carries no '{self.identity_claim}' claim")
            if identity != review.reviewer_id:
                logger.warning(
                    "Ownership denied for review %d/%d: token '%s' claim does not match author",
                    movie_id, review_id, self.identity_claim,
                )
                raise OwnershipError("token identity does not match reviewer")

        return review

    async def update(
        self,
        db: AsyncSession,
        movie_id: int,
        review_id: int,
        body: ReviewUpdate,
        claims: dict[str, Any],
    ) -> None:
        """Check ownership, then overwrite content and reviewDate."""
        await self.authorize(db, movie_id, review_id, body.reviewer_id, claims)
        await review_store.update_review(
            db,
            movie_id,
            review_id,
            content=body.content,
            review_date=body.review_date,
        )
