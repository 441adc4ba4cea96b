"""HTTP tests for the reviews router: listing, adding and owner-only updates."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from conftest import VALID_TOKEN
from movie_reviews.services.review_store import StoreError

OWNER = "a@x.com"


def _review(movie_id=1, review_id=1, reviewer=OWNER, content="Great film"):
    return {
        "movieId": movie_id,
        "reviewId": review_id,
        "reviewerId": reviewer,
        "reviewDate": "2025-01-01",
        "content": content,
    }


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


class TestListAllReviews:
    def test_returns_every_review(self, client, seed):
        seed(_review(1, 1), _review(2, 1, reviewer="b@x.com"))

        resp = client.get("/movies/all-reviews")

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert [(r["movieId"], r["reviewId"]) for r in data] == [(1, 1), (2, 1)]
        assert data[0]["reviewerId"] == OWNER
        assert data[0]["translations"] == {}

    def test_filters_by_reviewer(self, client, seed):
        seed(_review(1, 1), _review(2, 1, reviewer="b@x.com"), _review(3, 1))

        resp = client.get("/movies/all-reviews", params={"reviewerId": "b@x.com"})

        assert resp.status_code == 200
        assert [r["movieId"] for r in resp.json()["data"]] == [2]

    def test_empty_table_is_404(self, client):
        assert client.get("/movies/all-reviews").status_code == 404

    def test_unknown_reviewer_is_404(self, client, seed):
        seed(_review())
        resp = client.get("/movies/all-reviews", params={"reviewerId": "nobody@x.com"})
        assert resp.status_code == 404


class TestListMovieReviews:
    def test_returns_reviews_for_movie_only(self, client, seed):
        seed(_review(1, 1), _review(1, 2, reviewer="b@x.com"), _review(2, 1))

        resp = client.get("/movies/1/reviews")

        assert resp.status_code == 200
        assert [r["reviewId"] for r in resp.json()["data"]] == [1, 2]

    def test_filters_by_reviewer(self, client, seed):
        seed(_review(1, 1), _review(1, 2, reviewer="b@x.com"))

        resp = client.get("/movies/1/reviews", params={"reviewerId": "b@x.com"})

        assert [r["reviewId"] for r in resp.json()["data"]] == [2]

    def test_includes_cached_translations(self, client, seed):
        review = _review()
        review["translations"] = {
            "fr": {"content": "Excellent film", "lastUpdated": "2025-01-02T00:00:00+00:00", "ttl": 1}
        }
        seed(review)

        data = client.get("/movies/1/reviews").json()["data"]

        assert data[0]["translations"]["fr"] == {
            "content": "Excellent film",
            "lastUpdated": "2025-01-02T00:00:00+00:00",
            "ttl": 1,
        }

    def test_unknown_movie_is_404(self, client):
        assert client.get("/movies/42/reviews").status_code == 404

    def test_non_integer_movie_id_is_400(self, client):
        assert client.get("/movies/abc/reviews").status_code == 400


# ---------------------------------------------------------------------------
# Adding
# ---------------------------------------------------------------------------


class TestAddReview:
    def test_creates_review_with_next_id(self, client, seed, fetch, auth_headers):
        seed(_review(1, 1))

        resp = client.post(
            "/movies/1/reviews",
            json={"reviewerId": "c@x.com", "content": "Loved it", "reviewDate": "2025-04-04"},
            headers=auth_headers,
        )

        assert resp.status_code == 201
        assert resp.json() == {
            "message": "Review added successfully",
            "movieId": 1,
            "reviewId": 2,
        }
        stored = fetch(1, 2)
        assert stored.reviewer_id == "c@x.com"
        assert stored.content == "Loved it"

    def test_first_review_of_movie_gets_id_1(self, client, auth_headers):
        resp = client.post(
            "/movies/7/reviews",
            json={"reviewerId": "c@x.com", "content": "First!"},
            headers=auth_headers,
        )
        assert resp.json()["reviewId"] == 1

    def test_requires_token(self, client):
        resp = client.post("/movies/1/reviews", json={"reviewerId": "c@x.com", "content": "x"})
        assert resp.status_code == 401

    def test_invalid_token_is_403(self, client):
        resp = client.post(
            "/movies/1/reviews",
            json={"reviewerId": "c@x.com", "content": "x"},
            headers={"Authorization": "Bearer forged"},
        )
        assert resp.status_code == 403

    def test_missing_content_is_400(self, client, auth_headers):
        resp = client.post("/movies/1/reviews", json={"reviewerId": "c@x.com"}, headers=auth_headers)
        assert resp.status_code == 400

    def test_bad_review_date_is_400(self, client, auth_headers):
        resp = client.post(
            "/movies/1/reviews",
            json={"reviewerId": "c@x.com", "content": "x", "reviewDate": "yesterday"},
            headers=auth_headers,
        )
        assert resp.status_code == 400


# ---------------------------------------------------------------------------
# Updating
# ---------------------------------------------------------------------------


class TestUpdateReview:
    def test_owner_updates_content_and_date(self, client, seed, fetch, auth_headers):
        seed(_review())

        resp = client.put(
            "/movies/1/reviews/1",
            json={"reviewerId": OWNER, "content": "Changed my mind", "reviewDate": "2025-05-05"},
            headers=auth_headers,
        )

        assert resp.status_code == 200
        assert resp.json() == {"message": "Review updated successfully"}
        stored = fetch(1, 1)
        assert stored.content == "Changed my mind"
        assert stored.review_date == "2025-05-05"
        assert stored.reviewer_id == OWNER

    def test_token_accepted_from_cookie(self, client, seed, fetch):
        seed(_review())
        resp = client.put(
            "/movies/1/reviews/1",
            json={"reviewerId": OWNER, "content": "Via cookie"},
            headers={"Cookie": f"token={VALID_TOKEN}"},
        )

        assert resp.status_code == 200
        assert fetch(1, 1).content == "Via cookie"

    def test_other_reviewer_is_forbidden(self, client, seed, fetch, auth_headers):
        seed(_review())

        resp = client.put(
            "/movies/1/reviews/1",
            json={"reviewerId": "b@x.com", "content": "Hijacked"},
            headers=auth_headers,
        )

        assert resp.status_code == 403
        assert fetch(1, 1).content == "Great film"

    def test_missing_review_is_404(self, client, auth_headers):
        resp = client.put(
            "/movies/1/reviews/99",
            json={"reviewerId": OWNER, "content": "x"},
            headers=auth_headers,
        )
        assert resp.status_code == 404

    def test_same_body_twice_is_idempotent(self, client, seed, fetch, auth_headers):
        seed(_review())
        body = {"reviewerId": OWNER, "content": "Settled", "reviewDate": "2025-06-06"}

        assert client.put("/movies/1/reviews/1", json=body, headers=auth_headers).status_code == 200
        first = fetch(1, 1)
        assert client.put("/movies/1/reviews/1", json=body, headers=auth_headers).status_code == 200
        second = fetch(1, 1)

        assert (first.content, first.review_date) == (second.content, second.review_date)

    def test_missing_token_is_401_before_store_read(self, client, seed):
        seed(_review())
        with patch(
            "movie_reviews.services.review_store.get_review", new_callable=AsyncMock
        ) as get_review:
            resp = client.put("/movies/1/reviews/1", json={"reviewerId": OWNER, "content": "x"})

        assert resp.status_code == 401
        get_review.assert_not_called()

    def test_invalid_token_is_403_before_store_read(self, client, seed, verifier):
        seed(_review())
        with patch(
            "movie_reviews.services.review_store.get_review", new_callable=AsyncMock
        ) as get_review:
            resp = client.put(
                "/movies/1/reviews/1",
                json={"reviewerId": OWNER, "content": "x"},
                headers={"Authorization": "Bearer expired"},
            )

        assert resp.status_code == 403
        assert verifier.calls == ["expired"]
        get_review.assert_not_called()

    def test_missing_reviewer_id_is_400(self, client, seed, auth_headers):
        seed(_review())
        resp = client.put("/movies/1/reviews/1", json={"content": "x"}, headers=auth_headers)
        assert resp.status_code == 400

    def test_store_failure_is_500(self, client, seed, auth_headers):
        seed(_review())
        with patch(
            "movie_reviews.services.review_store.update_review",
            new_callable=AsyncMock,
            side_effect=StoreError("db down"),
        ):
            resp = client.put(
                "/movies/1/reviews/1",
                json={"reviewerId": OWNER, "content": "x"},
                headers=auth_headers,
            )
        assert resp.status_code == 500


class TestDatabaseUnavailable:
    @pytest.fixture
    def db_down(self, client):
        with patch.object(
            AsyncSession,
            "execute",
            new_callable=AsyncMock,
            side_effect=OperationalError("SELECT 1", {}, Exception("connection refused")),
        ):
            yield

    def test_list_all_reviews_is_500(self, client, db_down):
        resp = client.get("/movies/all-reviews")
        assert resp.status_code == 500
        assert resp.json()["detail"] == "Failed to list reviews"

    def test_list_movie_reviews_is_500(self, client, db_down):
        assert client.get("/movies/1/reviews").status_code == 500

    def test_add_review_is_500(self, client, db_down, auth_headers):
        resp = client.post(
            "/movies/1/reviews",
            json={"reviewerId": OWNER, "content": "Great film"},
            headers=auth_headers,
        )
        assert resp.status_code == 500
        assert resp.json()["detail"] == "Failed to add review"

    def test_update_review_is_500(self, client, db_down, auth_headers):
        resp = client.put(
            "/movies/1/reviews/1",
            json={"reviewerId": OWNER, "content": "x"},
            headers=auth_headers,
        )
        assert resp.status_code == 500


class TestHealth:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"

    def test_ready(self, client):
        resp = client.get("/ready")
        assert resp.status_code == 200
        assert resp.json() == {"db": "ok"}
