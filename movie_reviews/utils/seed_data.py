"""Seed reviews loaded by scripts/seed_reviews.py (camelCase, as on the wire)."""

MOVIE_REVIEWS: list[dict] = [
    {
        "movieId": 1234,
        "reviewId": 1,
        "reviewerId": "reviewer1@example.com",
        "reviewDate": "2025-01-20",
        "content": "A visually stunning film with a gripping storyline.",
    },
    {
        "movieId": 1234,
        "reviewId": 2,
        "reviewerId": "reviewer2@example.com",
        "reviewDate": "2025-01-22",
        "content": "The pacing drags in the middle, but the ending makes up for it.",
    },
    {
        "movieId": 1234,
        "reviewId": 3,
        "reviewerId": "reviewer3@example.com",
        "reviewDate": "2025-02-01",
        "content": "Great performances all round. The score is unforgettable.",
    },
    {
        "movieId": 2345,
        "reviewId": 1,
        "reviewerId": "reviewer1@example.com",
        "reviewDate": "2025-02-10",
        "content": "A clever thriller that keeps you guessing until the last scene.",
    },
    {
        "movieId": 2345,
        "reviewId": 2,
        "reviewerId": "reviewer4@example.com",
        "reviewDate": "2025-02-14",
        "content": "Predictable plot and flat characters. Not worth the hype.",
    },
    {
        "movieId": 3456,
        "reviewId": 1,
        "reviewerId": "reviewer2@example.com",
        "reviewDate": "2025-03-05",
        "content": "A heartfelt family drama with a wonderful lead performance.",
    },
]
