from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from mechanic_backend.core.config import settings
from mechanic_backend.core.deps import Principal, get_current_principal
from mechanic_backend.core.errors import BadRequest
from mechanic_backend.services.aggregates import generate_mock_earnings

router = APIRouter(tags=["earnings"])


def _parse_date(value: str | None, name: str) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise BadRequest(f"Invalid {name}", details=f"{value!r} is not an ISO date")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@router.get("/driver-earnings")
def driver_earnings(
    start_date: str | None = None,
    end_date: str | None = None,
    search: str | None = None,
    principal: Principal = Depends(get_current_principal),
):
    # TODO: replace the generator with a query over completed pickups once driver payouts are stored
    return generate_mock_earnings(
        _parse_date(start_date, "start_date"),
        _parse_date(end_date, "end_date"),
        search,
        days=settings.earnings_window_days,
    )
