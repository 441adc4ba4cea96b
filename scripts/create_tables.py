"""
create_tables.py — idempotent table creation script.
Run this before starting the API for the first time, or after schema changes.
Safe to run multiple times (all DDL uses IF NOT EXISTS).

Usage:
    python scripts/create_tables.py
"""

from __future__ import annotations

import asyncio

from movie_reviews.database import engine
from movie_reviews.models import Base


async def main() -> None:
    """Create all tables."""
    print("Creating tables...")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    print("  ✓ All tables created (IF NOT EXISTS)")

    print("\nDone. Run `python scripts/seed_reviews.py` next.")
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
