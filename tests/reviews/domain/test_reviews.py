"""Tests for the Review aggregate and the ReviewLog."""

from datetime import UTC, datetime

import pytest
from bookstore.reviews.log import ReviewLog
from bookstore.reviews.review import Review, clamp_rating
from protean.exceptions import ValidationError


class TestRatingClamp:
    @pytest.mark.parametrize(
        "given_rating, stored_rating",
        [(-3, 1), (0, 1), (1, 1), (3, 3), (5, 5), (6, 5), (99, 5)],
    )
    def test_rating_is_clamped(self, given_rating, stored_rating):
        review = Review.write("B1", "alice", given_rating, "ok")
        assert review.rating == stored_rating

    def test_clamp_accepts_numeric_strings(self):
        assert clamp_rating("4") == 4

    @pytest.mark.parametrize("rating", ["five", None, "", [4]])
    def test_non_numeric_rating_is_rejected(self, rating):
        with pytest.raises(ValidationError) as exc_info:
            Review.write("B1", "alice", rating, "ok")
        assert "rating" in exc_info.value.messages


class TestReview:
    def test_write_sets_timestamp(self):
        review = Review.write("B1", "alice", 4, "Great read")
        assert review.created_at is not None
        assert review.comment == "Great read"
        assert review.id is not None

    def test_explicit_timestamp_is_kept(self):
        when = datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)
        assert Review.write("B1", "alice", 4, "", created_at=when).created_at == when


class TestReviewLog:
    def test_reviews_for_item_in_insertion_order(self):
        log = ReviewLog()
        log.append(Review.write("B1", "alice", 5, "first"))
        log.append(Review.write("B2", "alice", 2, "other"))
        log.append(Review.write("B1", "bob", 3, "second"))

        assert [review.comment for review in log.reviews_for("B1")] == ["first", "second"]
        assert len(log) == 3

    def test_average_rating(self):
        log = ReviewLog()
        log.append(Review.write("B1", "alice", 5, ""))
        log.append(Review.write("B1", "bob", 2, ""))
        assert log.average_rating("B1") == pytest.approx(3.5)
        assert log.average_rating("B9") is None
