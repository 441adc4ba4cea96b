"""Shared fixtures: a throwaway SQLite database and fake external collaborators."""

from __future__ import annotations

import asyncio
import os
import tempfile
from pathlib import Path

# Settings are read at import time, so the environment must be in place first.
_DB_DIR = tempfile.mkdtemp(prefix="movie-reviews-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{Path(_DB_DIR) / 'test.db'}"
os.environ["GOOGLE_API_KEY"] = "test-key"
os.environ["COGNITO_USER_POOL_ID"] = "eu-west-1_TestPool"
os.environ["COGNITO_REGION"] = "eu-west-1"
os.environ["APP_ENV"] = "test"
os.environ["STRICT_OWNERSHIP"] = "false"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from movie_reviews.database import AsyncSessionLocal, engine  # noqa: E402
from movie_reviews.main import app  # noqa: E402
from movie_reviews.models import Base  # noqa: E402
from movie_reviews.services import review_store  # noqa: E402
from movie_reviews.services.token_verifier import (  # noqa: E402
    TokenVerificationError,
    get_token_verifier,
)
from movie_reviews.services.translator import (  # noqa: E402
    TranslationServiceError,
    get_translator,
)

VALID_TOKEN = "valid-token"


def run(coro):
    """Drive a coroutine to completion from a synchronous test."""
    return asyncio.run(coro)


class FakeTranslator:
    """Records every call; returns a tagged copy of the text or fails on demand."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []
        self.fail = False
        self.responses: dict[str, str] = {}

    async def translate(self, text: str, language: str) -> str:
        self.calls.append((text, language))
        if self.fail:
            raise TranslationServiceError("translator down")
        return self.responses.get(language, f"[{language}] {text}")


class FakeVerifier:
    """Accepts VALID_TOKEN only; claims can be adjusted per test."""

    def __init__(self) -> None:
        self.claims = {"sub": "user-123", "email": "a@x.com", "token_use": "id"}
        self.calls: list[str] = []

    async def verify(self, token: str) -> dict:
        self.calls.append(token)
        if token != VALID_TOKEN:
            raise TokenVerificationError("signature mismatch")
        return dict(self.claims)


async def _reset_schema() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture(autouse=True)
def fresh_db():
    run(_reset_schema())
    yield


@pytest.fixture
def seed():
    """Insert reviews (camelCase dicts) straight into the store."""

    def _seed(*items: dict) -> None:
        async def _load():
            async with AsyncSessionLocal() as session:
                await review_store.batch_load(session, list(items))

        run(_load())

    return _seed


@pytest.fixture
def fetch():
    """Load a review in a fresh session, or None if it does not exist."""

    def _fetch(movie_id: int, review_id: int):
        async def _get():
            async with AsyncSessionLocal() as session:
                try:
                    return await review_store.get_review(session, movie_id, review_id)
                except review_store.ReviewNotFoundError:
                    return None

        return run(_get())

    return _fetch


@pytest.fixture
def translator() -> FakeTranslator:
    return FakeTranslator()


@pytest.fixture
def verifier() -> FakeVerifier:
    return FakeVerifier()


@pytest.fixture
def client(translator, verifier):
    app.dependency_overrides[get_translator] = lambda: translator
    app.dependency_overrides[get_token_verifier] = lambda: verifier
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {VALID_TOKEN}"}
