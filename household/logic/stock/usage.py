"""Consumption rates and reorder timing for stock items.

Provides:
  calculate_daily_usage_from_logs(logs, lookback_days, today)
  calculate_order_by_date(run_out, profile, safety_buffer_days, now)
  get_reorder_status(order_by, today)
plus the weight-tracking helpers used when an item is weighed on a scale.
"""
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, Optional, Any

from household.domain.StockItem import UsageLog, ShippingProfile
from household.utilities.constants import USAGE_LOOKBACK_DAYS, SAFETY_BUFFER_DAYS, REORDER_SOON_DAYS

REORDER_STATUSES = ("plenty", "reorder_soon", "order_now", "overdue", "no_data")

REORDER_LABELS = {
    "overdue": "Overdue",
    "order_now": "Order Now",
    "reorder_soon": "Order Soon",
    "plenty": "Plenty",
    "no_data": "Log Usage",
}

REORDER_BADGES = {
    "overdue": "destructive",
    "order_now": "destructive",
    "reorder_soon": "secondary",
    "plenty": "default",
    "no_data": "outline",
}


def _confidence(points: int) -> str:
    if points >= 7:
        return "good"
    if points >= 3:
        return "moderate"
    if points >= 1:
        return "low"
    return "none"


def calculate_daily_usage_from_logs(logs: Iterable[UsageLog], lookback_days: int = USAGE_LOOKBACK_DAYS,
                                    today: Optional[date] = None) -> Dict[str, Any]:
    """Average daily consumption over the lookback window.

    Returns {daily_usage, data_points, confidence}; daily_usage is None when no
    log falls inside the window.
    """
    today = today or date.today()
    cutoff = today - timedelta(days=lookback_days)
    recent = [l for l in logs if l.logged_date >= cutoff]
    if not recent:
        return {"daily_usage": None, "data_points": 0, "confidence": "none"}

    total_used = sum(l.amount_used for l in recent)
    dates = [l.logged_date for l in recent]
    span_days = max(1, (max(dates) - min(dates)).days)
    return {
        "daily_usage": round(total_used / span_days, 2),
        "data_points": len(recent),
        "confidence": _confidence(len(recent)),
    }


def _past_cutoff(now: datetime, cutoff_time: str) -> bool:
    parts = cutoff_time.split(":")
    hour = int(parts[0])
    minute = int(parts[1]) if len(parts) > 1 and parts[1] else 0
    return (now.hour, now.minute) >= (hour, minute)


def calculate_order_by_date(run_out: date, profile: ShippingProfile, safety_buffer_days: int = SAFETY_BUFFER_DAYS,
                            now: Optional[datetime] = None) -> Dict[str, Any]:
    """Latest date an order can be placed and still arrive before run_out.

    Walks back max dispatch + max delivery + buffer days from the run-out date.
    Weekend days do not count when the retailer neither dispatches nor
    delivers at weekends. An order-by date of today that is already past the
    retailer cutoff moves one day earlier.
    """
    now = now or datetime.now()
    max_lead = profile.dispatch_days_max + profile.delivery_days_max + safety_buffer_days
    skip_weekends = not profile.dispatches_weekends and not profile.delivers_weekends

    order_by = run_out
    remaining = max_lead
    while remaining > 0:
        order_by -= timedelta(days=1)
        if skip_weekends and order_by.weekday() >= 5:
            continue
        remaining -= 1

    if profile.cutoff_time and order_by == now.date() and _past_cutoff(now, profile.cutoff_time):
        order_by -= timedelta(days=1)

    return {"order_by_date": order_by, "max_lead_time_days": max_lead}


def get_reorder_status(order_by: Optional[date], today: Optional[date] = None) -> str:
    if order_by is None:
        return "no_data"
    today = today or date.today()
    diff = (order_by - today).days
    if diff < 0:
        return "overdue"
    if diff == 0:
        return "order_now"
    if diff <= REORDER_SOON_DAYS:
        return "reorder_soon"
    return "plenty"


def get_reorder_status_label(status: str) -> str:
    return REORDER_LABELS.get(status, REORDER_LABELS["no_data"])


def get_reorder_badge_variant(status: str) -> str:
    return REORDER_BADGES.get(status, "outline")


# --- Weight tracking ---

def calculate_usage_rate(previous_weight: float, current_weight: float, days_between: int) -> Optional[float]:
    """Usage per day between two weighings, None when it cannot be derived."""
    if days_between <= 0:
        return None
    used = previous_weight - current_weight
    if used <= 0:
        return None
    return used / days_between


def calculate_remaining_from_weight(current_weight: float, empty_weight: float) -> float:
    return max(0.0, current_weight - empty_weight)


def calculate_weight_based_usage(full_weight: Optional[float], current_weight: Optional[float],
                                 empty_weight: float, opened_at: Optional[date],
                                 last_weighed_at: Optional[date], manual_rate: float,
                                 today: Optional[date] = None) -> Dict[str, Any]:
    """Usage rate and remaining amount for an item tracked by weight.

    The rate comes from (full - current) over the days since opening when
    both are known, otherwise the manual rate applies.
    """
    if current_weight is None:
        return {"usage_rate_per_day": manual_rate, "remaining": 0.0, "days_remaining": None, "source": "manual"}

    remaining = calculate_remaining_from_weight(current_weight, empty_weight)
    rate = None
    if full_weight is not None and opened_at is not None:
        used = (full_weight - empty_weight) - remaining
        end = last_weighed_at or today or date.today()
        days = (end - opened_at).days
        if days > 0 and used > 0:
            rate = used / days
    if rate is None or rate <= 0:
        rate = manual_rate

    return {
        "usage_rate_per_day": rate,
        "remaining": remaining,
        "days_remaining": max(0.0, remaining / rate) if rate > 0 else None,
        "source": "weight_based" if full_weight is not None else "manual",
    }


def validate_weight_log(reading_type: str, existing_full_weight: Optional[float],
                        finished_at: Optional[date]) -> Optional[str]:
    """Error message for a weight reading that is not allowed, None when it is."""
    if reading_type not in ("full", "regular", "empty"):
        return f"Unknown reading type: {reading_type}"
    if finished_at is not None:
        return "This item has been marked as finished. Create a new item to track usage."
    if reading_type == "full" and existing_full_weight is not None:
        return "Full weight has already been recorded for this item."
    return None


__all__ = [
    'REORDER_STATUSES', 'calculate_daily_usage_from_logs', 'calculate_order_by_date',
    'get_reorder_status', 'get_reorder_status_label', 'get_reorder_badge_variant',
    'calculate_usage_rate', 'calculate_remaining_from_weight', 'calculate_weight_based_usage',
    'validate_weight_log',
]
