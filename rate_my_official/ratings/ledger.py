"""Review ledger: creation, reporting and removal of reviews.

Two structural rules are enforced on every submission, in this order:

1. a user reviews an official at most once per event;
2. the official must have been assigned to that event.

Both checks and the insert run inside one ``BEGIN IMMEDIATE`` transaction, and
the schema's ``UNIQUE (user_id, official_id, event_id)`` constraint backs up the
first rule, so two concurrent submissions cannot both land.
"""

from __future__ import annotations

import sqlite3
from datetime import UTC, datetime
from typing import Any

import structlog

from rate_my_official.models.review import CATEGORIES, ReviewCreate, ReviewWithDetails
from rate_my_official.ratings.aggregator import RatingAggregator
from rate_my_official.ratings.exceptions import (
    DuplicateReviewError,
    OfficialNotAssignedError,
    ReviewNotFoundError,
    UserNotFoundError,
)
from rate_my_official.schema.connection import transaction
from rate_my_official.storage.integrity import row_exists

logger = structlog.get_logger(__name__)

_REVIEW_DETAILS_SQL = f"""
    SELECT
        r.id AS id, r.official_id AS official_id, r.user_id AS user_id, r.event_id AS event_id,
        {", ".join(f"r.{c} AS {c}" for c in CATEGORIES)},
        r.comment AS comment, r.created_at AS created_at,
        r.is_reported AS is_reported, r.is_anonymous AS is_anonymous,
        u.first_name AS user_first_name,
        u.last_name  AS user_last_name,
        u.user_type  AS user_user_type,
        u.photo_url  AS user_photo_url,
        e.name       AS event_name,
        e.date       AS event_date
    FROM reviews AS r
    JOIN users AS u ON u.id = r.user_id
    JOIN events AS e ON e.id = r.event_id
"""  # noqa: S608


def _to_review(row: sqlite3.Row) -> ReviewWithDetails:
    data: dict[str, Any] = {key: row[key] for key in row.keys()}
    data["user"] = {
        "first_name": data.pop("user_first_name"),
        "last_name": data.pop("user_last_name"),
        "user_type": data.pop("user_user_type"),
        "photo_url": data.pop("user_photo_url"),
    }
    data["event"] = {"name": data.pop("event_name"), "date": data.pop("event_date")}
    return ReviewWithDetails.model_validate(data)


class ReviewLedger:
    """Owns the review rows and keeps official ratings in step with them."""

    def __init__(self, conn: sqlite3.Connection, aggregator: RatingAggregator | None = None):
        self.conn = conn
        self.aggregator = aggregator or RatingAggregator(conn)

    def submit_review(
        self, official_id: int, user_id: int, review: ReviewCreate
    ) -> ReviewWithDetails:
        """
        Persist a review and recompute the official's rating.

        Args:
            official_id: Official being reviewed.
            user_id: Authenticated reviewer.
            review: Validated form input (scores already checked to be 1-5).

        Returns:
            The stored review joined with reviewer and event summaries.

        Raises:
            DuplicateReviewError: The user already reviewed this official for this event.
            OfficialNotAssignedError: The official did not work this event.
            UserNotFoundError: The reviewer has no user row.
        """
        log = logger.bind(official_id=official_id, event_id=review.event_id, user_id=user_id)

        with transaction(self.conn):
            if row_exists(
                self.conn,
                "reviews",
                user_id=user_id,
                official_id=official_id,
                event_id=review.event_id,
            ):
                log.info("Rejected duplicate review")
                raise DuplicateReviewError(user_id, official_id, review.event_id)

            if not row_exists(
                self.conn, "event_officials", official_id=official_id, event_id=review.event_id
            ):
                log.info("Rejected review for unassigned official")
                raise OfficialNotAssignedError(official_id, review.event_id)

            review_id = self._insert(official_id, user_id, review)
            self.aggregator.recompute_official(official_id)

        log.info("Review submitted", review_id=review_id)
        return self.get_review(review_id)

    def _insert(self, official_id: int, user_id: int, review: ReviewCreate) -> int:
        scores = review.scores()
        columns = ["official_id", "user_id", "event_id", *CATEGORIES]
        columns += ["comment", "created_at", "is_reported", "is_anonymous"]
        values = [official_id, user_id, review.event_id, *scores.values()]
        values += [review.comment or "", datetime.now(UTC).isoformat(), 0, int(review.is_anonymous)]

        try:
            cursor = self.conn.execute(
                f"INSERT INTO reviews ({', '.join(columns)}) "  # noqa: S608
                f"VALUES ({', '.join('?' for _ in columns)})",
                values,
            )
        except sqlite3.IntegrityError as e:
            message = str(e)
            if "UNIQUE constraint failed: reviews" in message:
                raise DuplicateReviewError(user_id, official_id, review.event_id) from e
            if "FOREIGN KEY constraint failed" in message:
                raise UserNotFoundError(user_id) from e
            raise
        return cursor.lastrowid

    def get_review(self, review_id: int) -> ReviewWithDetails:
        """Return one review with details, or raise ``ReviewNotFoundError``."""
        row = self.conn.execute(f"{_REVIEW_DETAILS_SQL} WHERE r.id = ?", (review_id,)).fetchone()
        if row is None:
            raise ReviewNotFoundError(review_id)
        return _to_review(row)

    def get_reviews_for_official(self, official_id: int) -> list[ReviewWithDetails]:
        """Reviews of an official, newest first."""
        rows = self.conn.execute(
            f"{_REVIEW_DETAILS_SQL} WHERE r.official_id = ? ORDER BY r.created_at DESC, r.id DESC",
            (official_id,),
        ).fetchall()
        return [_to_review(row) for row in rows]

    def get_reported_reviews(self) -> list[ReviewWithDetails]:
        """The moderation queue: every reported review, newest first."""
        rows = self.conn.execute(
            f"{_REVIEW_DETAILS_SQL} WHERE r.is_reported = 1 ORDER BY r.created_at DESC, r.id DESC"
        ).fetchall()
        return [_to_review(row) for row in rows]

    def report_review(self, review_id: int) -> None:
        """Flag a review for moderation. Reported reviews still count toward ratings."""
        with transaction(self.conn):
            cursor = self.conn.execute(
                "UPDATE reviews SET is_reported = 1 WHERE id = ?", (review_id,)
            )
            if cursor.rowcount == 0:
                raise ReviewNotFoundError(review_id)
        logger.info("Review reported", review_id=review_id)

    def delete_review(self, review_id: int) -> None:
        """Remove a review and recompute its official's rating."""
        with transaction(self.conn):
            row = self.conn.execute(
                "SELECT official_id FROM reviews WHERE id = ?", (review_id,)
            ).fetchone()
            if row is None:
                raise ReviewNotFoundError(review_id)

            official_id = row["official_id"]
            self.conn.execute("DELETE FROM reviews WHERE id = ?", (review_id,))
            self.aggregator.recompute_official(official_id)

        logger.info("Review deleted", review_id=review_id, official_id=official_id)
