from decimal import ROUND_HALF_UP, Decimal

from .schemas import Projection

CRITICAL = "critical"
HIGH = "high"
MEDIUM = "medium"
LOW = "low"


class StockoutProjector:
    """
    Decides whether a low-stock position is alerted and how many days of
    stock it has left at its current sales velocity.
    """

    def project(self, position, velocity) -> Projection:
        # Below threshold but no recent sales: not urgent, suppressed.
        if velocity.total_units_sold == 0:
            return Projection.excluded()

        return Projection(
            included=True,
            days_until_stockout=days_until_stockout(
                position.current_stock, velocity.total_units_sold, velocity.window_days
            ),
        )


def days_until_stockout(current_stock, total_units_sold, window_days):
    """
    round(current_stock / (total_units_sold / window_days)), half away from
    zero, evaluated in exact decimal arithmetic.

    A position with stock left never reports 0 days; 0 means stocked out.
    """
    if current_stock <= 0:
        return 0

    ratio = Decimal(current_stock * window_days) / Decimal(total_units_sold)
    days = int(ratio.quantize(Decimal(1), rounding=ROUND_HALF_UP))
    return max(days, 1)


def classify_urgency(days, current_stock):
    """Bucket an admitted alert into critical / high / medium / low."""
    if current_stock <= 0 or days <= 3:
        return CRITICAL
    if days <= 7:
        return HIGH
    if days <= 14:
        return MEDIUM
    return LOW
