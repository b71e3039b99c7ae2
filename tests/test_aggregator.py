"""Tests for rating aggregation."""

import pytest

from rate_my_official.models.rating import CategoryAverages
from rate_my_official.models.review import CATEGORIES, ReviewScores
from rate_my_official.ratings.aggregator import (
    RatingAggregator,
    RefreshSummary,
    calculate_category_averages,
    round_half_up,
)
from rate_my_official.ratings.ledger import ReviewLedger


def _scores(**overrides):
    values = dict.fromkeys(CATEGORIES, 3)
    values.update(overrides)
    return values


def _rating(conn, official_id):
    row = conn.execute(
        "SELECT average_rating, total_reviews FROM officials WHERE id = ?", (official_id,)
    ).fetchone()
    return tuple(row)


@pytest.mark.parametrize(
    ("numerator", "denominator", "expected"),
    [
        (15, 5, 3),
        (5, 2, 3),  # 2.5 rounds up
        (7, 2, 4),  # 3.5 rounds up
        (25, 6, 4),  # 4.17
        (29, 6, 5),  # 4.83
        (1, 3, 0),
        (0, 4, 0),
    ],
)
def test_round_half_up(numerator, denominator, expected):
    assert round_half_up(numerator, denominator) == expected


def test_round_half_up_rejects_zero_denominator():
    with pytest.raises(ValueError):
        round_half_up(3, 0)


def test_no_reviews_gives_all_zero():
    assert calculate_category_averages([]) == CategoryAverages()


def test_mechanics_one_through_five_averages_to_three():
    reviews = [_scores(mechanics=score) for score in (1, 2, 3, 4, 5)]

    averages = calculate_category_averages(reviews)

    assert averages.mechanics == 3


def test_overall_is_rounded_mean_of_rounded_categories():
    # Category averages {4, 4, 4, 4, 4, 5}: overall = round(25 / 6) = 4
    review = ReviewScores(**_scores(
        mechanics=4, professionalism=4, positioning=4, stalling=4, consistency=4, appearance=5
    ))

    averages = calculate_category_averages([review])

    assert [getattr(averages, c) for c in CATEGORIES] == [4, 4, 4, 4, 4, 5]
    assert averages.overall == 4


def test_two_stage_rounding_differs_from_grand_mean():
    # Three categories average 2.5 (-> 3) and three average 2.
    # Grand mean of the raw scores is 27 / 12 = 2.25 (-> 2); two-stage gives 3.
    reviews = [
        _scores(mechanics=2, professionalism=2, positioning=2, stalling=2, consistency=2, appearance=2),
        _scores(mechanics=3, professionalism=3, positioning=3, stalling=2, consistency=2, appearance=2),
    ]

    averages = calculate_category_averages(reviews)

    assert averages.overall == 3


def test_fives_and_ones_scenario(db_connection, seed, review_form):
    official = seed.official()
    event = seed.event(officials=[official])
    ledger = ReviewLedger(db_connection)

    ledger.submit_review(official.id, seed.user().id, review_form(event.id, score=5))
    ledger.submit_review(official.id, seed.user().id, review_form(event.id, score=1))

    averages = RatingAggregator(db_connection).get_category_averages(official.id)
    assert all(getattr(averages, c) == 3 for c in CATEGORIES)
    assert averages.overall == 3
    assert _rating(db_connection, official.id) == (3, 2)


def test_recompute_official_without_reviews_writes_zero(db_connection, seed):
    official = seed.official()
    db_connection.execute(
        "UPDATE officials SET average_rating = 4, total_reviews = 9 WHERE id = ?", (official.id,)
    )

    RatingAggregator(db_connection).recompute_official(official.id)

    assert _rating(db_connection, official.id) == (0, 0)


def test_recompute_official_is_idempotent(db_connection, seed, review_form):
    official = seed.official()
    event = seed.event(officials=[official])
    ledger = ReviewLedger(db_connection)
    ledger.submit_review(official.id, seed.user().id, review_form(event.id, score=4))
    ledger.submit_review(official.id, seed.user().id, review_form(event.id, score=2, mechanics=5))
    aggregator = RatingAggregator(db_connection)

    aggregator.recompute_official(official.id)
    first = _rating(db_connection, official.id)
    aggregator.recompute_official(official.id)

    assert _rating(db_connection, official.id) == first


def test_recompute_unknown_official_is_a_no_op(db_connection):
    RatingAggregator(db_connection).recompute_official(424242)


def test_orphaned_reviews_are_excluded(db_connection, seed, review_form):
    official = seed.official()
    event = seed.event(officials=[official])
    kept, gone = seed.user(), seed.user()
    ledger = ReviewLedger(db_connection)
    ledger.submit_review(official.id, kept.id, review_form(event.id, score=5))
    ledger.submit_review(official.id, gone.id, review_form(event.id, score=1))

    # Simulate a user removed without cascading to their reviews.
    db_connection.execute("PRAGMA foreign_keys = OFF")
    db_connection.execute("DELETE FROM users WHERE id = ?", (gone.id,))
    db_connection.execute("PRAGMA foreign_keys = ON")

    RatingAggregator(db_connection).recompute_official(official.id)

    assert _rating(db_connection, official.id) == (5, 1)


def test_recompute_all_repairs_stale_caches(db_connection, seed, review_form):
    official = seed.official()
    event = seed.event(officials=[official])
    ReviewLedger(db_connection).submit_review(
        official.id, seed.user().id, review_form(event.id, score=4)
    )
    db_connection.execute("UPDATE officials SET average_rating = 1, total_reviews = 7")

    summary = RatingAggregator(db_connection).recompute_all()

    assert summary.ok
    assert _rating(db_connection, official.id) == (4, 1)


def test_recompute_all_covers_every_official(db_connection, seed):
    officials = [seed.official() for _ in range(25)]

    summary = RatingAggregator(db_connection).recompute_all()

    assert summary.attempted == 25
    assert summary.succeeded == [o.id for o in officials]


def test_recompute_all_continues_past_a_failing_official(db_connection, seed, review_form):
    first, broken, last = seed.official(), seed.official(), seed.official()
    event = seed.event(officials=[first, broken, last])
    ledger = ReviewLedger(db_connection)
    for official in (first, broken, last):
        ledger.submit_review(official.id, seed.user().id, review_form(event.id, score=5))
    db_connection.execute("UPDATE officials SET average_rating = 0, total_reviews = 0")

    aggregator = RatingAggregator(db_connection)
    original = aggregator.recompute_official

    def flaky(official_id):
        if official_id == broken.id:
            raise RuntimeError("boom")
        original(official_id)

    aggregator.recompute_official = flaky
    summary = aggregator.recompute_all()

    assert not summary.ok
    assert summary.failed == {broken.id: "boom"}
    assert summary.succeeded == [first.id, last.id]
    assert _rating(db_connection, first.id) == (5, 1)
    assert _rating(db_connection, last.id) == (5, 1)
    assert _rating(db_connection, broken.id) == (0, 0)


def test_refresh_summary_counts():
    summary = RefreshSummary(succeeded=[1, 2], failed={3: "locked"})

    assert summary.attempted == 3
    assert not summary.ok
    assert RefreshSummary().ok
