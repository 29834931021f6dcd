from datetime import datetime, timedelta, timezone

from .config import DEFAULT_SALES_WINDOW_DAYS
from .schemas import VelocityEstimate


def utcnow():
    """Current time as naive UTC, matching how ledger timestamps are stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class VelocityEstimator:
    """
    Average daily units sold for a position over a trailing window.

    The rate is a flat average, total / window_days, with no smoothing or
    recency weighting, so it can be reproduced from the ledger alone.
    """

    def __init__(self, repository, window_days=DEFAULT_SALES_WINDOW_DAYS, clock=utcnow):
        self.repository = repository
        self.window_days = _check_window(window_days)
        self.clock = clock

    def estimate(self, position, window_days=None) -> VelocityEstimate:
        window_days = self.window_days if window_days is None else _check_window(window_days)
        now = self.clock()
        since = now - timedelta(days=window_days)

        total = self.repository.fetch_recent_sales_total(
            position.product_id, position.warehouse_id, since, until=now
        )
        rate = total / window_days if total else 0.0

        return VelocityEstimate(
            total_units_sold=total,
            window_days=window_days,
            average_daily_rate=rate,
        )


def _check_window(window_days):
    if isinstance(window_days, bool) or not isinstance(window_days, int) or window_days <= 0:
        raise ValueError(f"window_days must be a positive integer, got {window_days!r}")
    return window_days
