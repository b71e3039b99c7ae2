"""Rating aggregation for officials.

An official's ``average_rating`` and ``total_reviews`` are denormalized caches.
They are always rebuilt from a fresh read of the official's current reviews and
written with a plain overwrite, so any number of recomputations, in any order,
converge on the same values.

Rounding is round-half-up on exact fractions. The overall score is computed in
two stages: each category mean is rounded first, and ``overall`` is the rounded
mean of those six rounded values (not of the raw scores).
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

import structlog

from rate_my_official.models.rating import CategoryAverages
from rate_my_official.models.review import CATEGORIES, ReviewScores
from rate_my_official.schema.connection import transaction

logger = structlog.get_logger(__name__)

# Inner joins drop reviews whose user or event row no longer exists.
_SCORES_FOR_OFFICIAL_SQL = f"""
    SELECT {", ".join(f"r.{c} AS {c}" for c in CATEGORIES)}
    FROM reviews AS r
    JOIN users AS u ON u.id = r.user_id
    JOIN events AS e ON e.id = r.event_id
    WHERE r.official_id = ?
"""  # noqa: S608


def round_half_up(numerator: int, denominator: int) -> int:
    """Round ``numerator / denominator`` to the nearest integer, halves going up.

    Only defined for non-negative numerators and positive denominators, which is
    all a 1-5 score average ever needs.
    """
    if denominator <= 0:
        raise ValueError("denominator must be positive")
    return (2 * numerator + denominator) // (2 * denominator)


def calculate_category_averages(
    reviews: Iterable[ReviewScores | Mapping[str, int] | sqlite3.Row],
) -> CategoryAverages:
    """
    Compute the rounded per-category means and the overall score.

    Args:
        reviews: Score carriers; either ``ReviewScores`` models or rows/mappings
            keyed by category name.

    Returns:
        CategoryAverages with every field 0 when ``reviews`` is empty.
    """
    sums = dict.fromkeys(CATEGORIES, 0)
    count = 0
    for review in reviews:
        scores = review.scores() if isinstance(review, ReviewScores) else review
        for category in CATEGORIES:
            sums[category] += int(scores[category])
        count += 1

    if count == 0:
        return CategoryAverages()

    averages = {category: round_half_up(total, count) for category, total in sums.items()}
    overall = round_half_up(sum(averages.values()), len(CATEGORIES))
    return CategoryAverages(**averages, overall=overall)


@dataclass
class RefreshSummary:
    """Outcome of a full rating refresh."""

    succeeded: list[int] = field(default_factory=list)
    failed: dict[int, str] = field(default_factory=dict)

    @property
    def attempted(self) -> int:
        return len(self.succeeded) + len(self.failed)

    @property
    def ok(self) -> bool:
        return not self.failed


class RatingAggregator:
    """Recomputes and persists the cached rating fields on officials."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def _fetch_scores(self, official_id: int) -> list[sqlite3.Row]:
        return self.conn.execute(_SCORES_FOR_OFFICIAL_SQL, (official_id,)).fetchall()

    def get_category_averages(self, official_id: int) -> CategoryAverages:
        """Return freshly computed category averages for display."""
        return calculate_category_averages(self._fetch_scores(official_id))

    def recompute_official(self, official_id: int) -> None:
        """
        Rebuild ``average_rating`` and ``total_reviews`` for one official.

        An unknown ``official_id`` updates zero rows and is not an error.
        Joins the caller's transaction when there is one.
        """
        with transaction(self.conn):
            rows = self._fetch_scores(official_id)
            averages = calculate_category_averages(rows)
            cursor = self.conn.execute(
                "UPDATE officials SET average_rating = ?, total_reviews = ? WHERE id = ?",
                (averages.overall, len(rows), official_id),
            )

        if cursor.rowcount == 0:
            logger.debug("No official row to update", official_id=official_id)
        else:
            logger.debug(
                "Official rating recomputed",
                official_id=official_id,
                average_rating=averages.overall,
                total_reviews=len(rows),
            )

    def recompute_all(self) -> RefreshSummary:
        """
        Recompute every official, one at a time.

        A failure on one official is logged and recorded, and the batch moves on;
        every official is always attempted.
        """
        official_ids = [row[0] for row in self.conn.execute("SELECT id FROM officials ORDER BY id")]
        logger.info("Refreshing all official ratings", count=len(official_ids))

        summary = RefreshSummary()
        for official_id in official_ids:
            try:
                self.recompute_official(official_id)
            except Exception as e:
                logger.error(
                    "Failed to recompute official rating",
                    official_id=official_id,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                summary.failed[official_id] = str(e)
            else:
                summary.succeeded.append(official_id)

        logger.info(
            "Completed refresh of all official ratings",
            succeeded=len(summary.succeeded),
            failed=len(summary.failed),
        )
        return summary
