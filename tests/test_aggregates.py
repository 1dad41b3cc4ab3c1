import random
from datetime import datetime, timedelta, timezone

from mechanic_backend.services.aggregates import generate_mock_earnings, summarize_ratings

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def test_no_ratings():
    assert summarize_ratings([]) == {
        "averageRating": 0,
        "totalReviews": 0,
        "ratingDistribution": {1: 0, 2: 0, 3: 0, 4: 0, 5: 0},
    }


def test_example_ratings():
    result = summarize_ratings([5, 5, 4, 3])

    assert result["averageRating"] == 4.3
    assert result["totalReviews"] == 4
    assert result["ratingDistribution"] == {1: 0, 2: 0, 3: 1, 4: 1, 5: 2}


def test_distribution_sums_to_count():
    rng = random.Random(7)
    for _ in range(50):
        ratings = [rng.randint(1, 5) for _ in range(rng.randint(1, 40))]
        result = summarize_ratings(ratings)
        assert sum(result["ratingDistribution"].values()) == result["totalReviews"] == len(ratings)
        assert abs(result["averageRating"] - sum(ratings) / len(ratings)) <= 0.05


def test_average_rounds_half_up():
    # 4.25 must come out as 4.3, not banker's 4.2
    assert summarize_ratings([5, 4, 4, 4])["averageRating"] == 4.3


def test_out_of_range_rating_left_out_of_distribution():
    result = summarize_ratings([5, 0])

    assert result["totalReviews"] == 2
    assert result["averageRating"] == 2.5
    assert sum(result["ratingDistribution"].values()) == 1


def test_earnings_deterministic_with_seed():
    a = generate_mock_earnings(now=NOW, rng=random.Random(1))
    b = generate_mock_earnings(now=NOW, rng=random.Random(1))
    assert a == b


def test_earnings_sorted_newest_first_and_summary():
    result = generate_mock_earnings(now=NOW, rng=random.Random(3))
    dates = [e["date"] for e in result["earnings"]]
    amounts = [e["amount"] for e in result["earnings"]]

    assert dates == sorted(dates, reverse=True)
    assert all(15 <= a <= 44 for a in amounts)
    summary = result["summary"]
    assert summary["totalEarnings"] == sum(amounts)
    assert summary["completedJobs"] == len(amounts)
    assert summary["averagePerJob"] == round(sum(amounts) / len(amounts))


def test_earnings_window_and_date_range():
    start = NOW - timedelta(days=10)
    end = NOW - timedelta(days=3)

    result = generate_mock_earnings(start, end, now=NOW, rng=random.Random(5))

    for e in result["earnings"]:
        d = datetime.fromisoformat(e["date"])
        assert start <= d <= end


def test_earnings_never_older_than_window():
    result = generate_mock_earnings(now=NOW, rng=random.Random(9), days=90)
    oldest = NOW - timedelta(days=89)
    assert all(datetime.fromisoformat(e["date"]) >= oldest for e in result["earnings"])


def test_earnings_search():
    result = generate_mock_earnings(search="pickup", now=NOW, rng=random.Random(11))

    assert result["earnings"]
    assert all(e["type"] == "Pickup" for e in result["earnings"])


def test_earnings_empty_window():
    result = generate_mock_earnings(
        NOW + timedelta(days=1), None, now=NOW, rng=random.Random(1)
    )
    assert result == {
        "earnings": [],
        "summary": {"totalEarnings": 0, "completedJobs": 0, "averagePerJob": 0},
    }
