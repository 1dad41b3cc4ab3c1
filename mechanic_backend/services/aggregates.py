from __future__ import annotations

import logging
import random
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable

logger = logging.getLogger(__name__)

RATING_VALUES = (1, 2, 3, 4, 5)


def _round_half_up(value: float, places: int) -> float:
    quant = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quant, rounding=ROUND_HALF_UP))


def empty_distribution() -> dict[int, int]:
    return {r: 0 for r in RATING_VALUES}


def summarize_ratings(ratings: Iterable[int]) -> dict[str, Any]:
    """
    Mean rating (one decimal) and per-star distribution.

    Out-of-range ratings still count toward the mean and total but are kept
    out of the distribution and logged.
    """
    values = list(ratings)
    distribution = empty_distribution()
    if not values:
        return {"averageRating": 0, "totalReviews": 0, "ratingDistribution": distribution}

    for rating in values:
        if rating in distribution:
            distribution[rating] += 1
        else:
            logger.warning("Rating outside 1..5 ignored in distribution: %r", rating)

    average = sum(values) / len(values)
    return {
        "averageRating": _round_half_up(average, 1),
        "totalReviews": len(values),
        "ratingDistribution": distribution,
    }


# ---------- Driver earnings (placeholder) ----------

_MAKES = ["Toyota", "Honda", "Ford", "Chevrolet", "BMW", "Mercedes"]
_MODELS = ["Camry", "Civic", "F-150", "Silverado", "3 Series", "C-Class"]


def generate_mock_earnings(
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    search: str | None = None,
    *,
    now: datetime | None = None,
    rng: random.Random | None = None,
    days: int = 90,
) -> dict[str, Any]:
    """
    Synthetic earnings for the driver dashboard. Stand-in until payouts are
    recorded in the store; pass a seeded `rng` for repeatable output.
    """
    rng = rng or random.Random()
    now = now or datetime.now(timezone.utc)
    term = (search or "").lower()

    earnings: list[dict[str, Any]] = []
    total = 0

    for i in range(days):
        day = now - timedelta(days=i)
        if start_date and day < start_date:
            continue
        if end_date and day > end_date:
            continue

        for j in range(rng.randint(0, 3)):
            amount = rng.randint(15, 44)
            shop_name = f"Auto Shop {rng.randint(1, 20)}"
            customer_name = f"Customer {rng.randint(1, 100)}"
            job_type = "Pickup" if rng.random() > 0.5 else "Return"
            vehicle = f"{rng.randint(2015, 2022)} {rng.choice(_MAKES)} {rng.choice(_MODELS)}"

            if term and not any(
                term in field.lower() for field in (shop_name, customer_name, job_type)
            ):
                continue

            total += amount
            earnings.append(
                {
                    "id": f"job-{i}-{j}",
                    "date": day.isoformat(),
                    "type": job_type,
                    "customerName": customer_name,
                    "shopName": shop_name,
                    "vehicle": vehicle,
                    "amount": amount,
                    "status": "completed",
                }
            )

    earnings.sort(key=lambda e: e["date"], reverse=True)
    count = len(earnings)
    return {
        "earnings": earnings,
        "summary": {
            "totalEarnings": total,
            "completedJobs": count,
            "averagePerJob": int(_round_half_up(total / count, 0)) if count else 0,
        },
    }
