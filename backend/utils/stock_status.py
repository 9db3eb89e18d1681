# backend/utils/stock_status.py
import enum
from typing import Optional

# Fixed absolute band above the minimum that still counts as "warning".
# It does not scale with min_stock.
WARNING_BUFFER = 10


class StockStatus(str, enum.Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    NORMAL = "normal"


def classify(current: float, minimum: float) -> StockStatus:
    """Classify a stock level against its reorder threshold.

    critical: below the minimum
    warning:  from the minimum up to minimum + WARNING_BUFFER (inclusive)
    normal:   anything above that
    """
    if current < minimum:
        return StockStatus.CRITICAL
    if current <= minimum + WARNING_BUFFER:
        return StockStatus.WARNING
    return StockStatus.NORMAL


def stock_percentage(current: float, minimum: float) -> Optional[int]:
    # Display helper: percentage of the minimum, undefined when there is no minimum
    if not minimum:
        return None
    return round(current / minimum * 100)
