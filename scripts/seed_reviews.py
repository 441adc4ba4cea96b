"""
seed_reviews.py — batch-load reviews into the reviews table.

Without --csv the bundled seed reviews (movie_reviews/utils/seed_data.py) are
loaded. A CSV must have movieId, reviewId, reviewerId, content columns and may
have reviewDate. Existing (movieId, reviewId) keys are skipped, so the script
is safe to re-run.

Usage:
    python scripts/seed_reviews.py                          # bundled seed data
    python scripts/seed_reviews.py --csv data/reviews.csv   # load from CSV
    python scripts/seed_reviews.py --csv data/reviews.csv --dry-run
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from typing import Any, Optional

import pandas as pd

from movie_reviews.database import AsyncSessionLocal, engine
from movie_reviews.models import Base
from movie_reviews.services import review_store
from movie_reviews.utils.seed_data import MOVIE_REVIEWS

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger(__name__)

_REQUIRED_COLUMNS = ("movieId", "reviewId", "reviewerId", "content")


def load_csv(path: str) -> list[dict[str, Any]]:
    """Read review rows from a CSV, dropping rows missing a required column."""
    df = pd.read_csv(path)
    missing = [c for c in _REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"CSV is missing columns: {', '.join(missing)}")

    before = len(df)
    df = df.dropna(subset=list(_REQUIRED_COLUMNS))
    if len(df) < before:
        logger.warning("Dropped %d incomplete rows", before - len(df))

    items: list[dict[str, Any]] = []
    for row in df.to_dict(orient="records"):
        review_date = row.get("reviewDate")
        items.append(
            {
                "movieId": int(row["movieId"]),
                "reviewId": int(row["reviewId"]),
                "reviewerId": str(row["reviewerId"]).strip(),
                "content": str(row["content"]).strip(),
                "reviewDate": None if pd.isna(review_date) else str(review_date),
            }
        )
    return items


async def seed(items: list[dict[str, Any]], dry_run: bool = False) -> int:
    """Create tables if needed and batch-load items. Returns rows inserted."""
    if dry_run:
        logger.info("Dry run: %d reviews parsed, nothing written", len(items))
        return 0

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        inserted = await review_store.batch_load(session, items)

    await engine.dispose()
    return inserted


def main(argv: Optional[list[str]] = None) -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Seed the movie reviews table.")
    parser.add_argument("--csv", help="Path to a reviews CSV (defaults to bundled seed data)")
    parser.add_argument("--dry-run", action="store_true", help="Parse only, no DB writes")
    args = parser.parse_args(argv)

    items = load_csv(args.csv) if args.csv else MOVIE_REVIEWS
    inserted = asyncio.run(seed(items, dry_run=args.dry_run))
    logger.info("Seeding complete: %d new reviews", inserted)


if __name__ == "__main__":
    main()
