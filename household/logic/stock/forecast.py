"""Run-out forecasting and spend statistics for stock items."""
import math
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Any

from household.domain.StockItem import StockItem, ShippingProfile
from household.logic.stock.usage import calculate_order_by_date, get_reorder_status
from household.utilities.constants import LOW_STOCK_DAYS, DAYS_PER_MONTH


def _status_level(remaining: float, days_remaining: float) -> str:
    if remaining <= 0:
        return "empty"
    if days_remaining <= LOW_STOCK_DAYS:
        return "low"
    return "healthy"


def calculate_forecast(item: StockItem, today: Optional[date] = None, usage_rate: Optional[float] = None,
                       profile: Optional[ShippingProfile] = None, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Forecast for one item.

    usage_rate overrides the item's manual rate (pass the log-derived rate
    when one exists). With a shipping profile and a finite run-out date the
    result also carries the order-by date and reorder status.
    """
    today = today or date.today()
    rate = usage_rate if usage_rate is not None else item.usage_rate_per_day
    remaining = item.current_remaining

    days_remaining = max(0.0, remaining / rate) if rate > 0 else math.inf
    finite = math.isfinite(days_remaining)
    run_out = today + timedelta(days=int(days_remaining)) if finite else None

    monthly_usage = rate * DAYS_PER_MONTH
    monthly_cost = (monthly_usage / item.total_size) * item.cost_per_item if item.total_size > 0 else 0.0

    forecast = {
        "item_id": item.id,
        "name": item.name,
        "usage_rate_per_day": rate,
        "days_remaining": round(days_remaining) if finite else None,
        "run_out_date": run_out,
        "monthly_usage": monthly_usage,
        "monthly_cost": monthly_cost,
        "yearly_cost": monthly_cost * 12,
        "status_level": _status_level(remaining, days_remaining),
        "percent_remaining": round(remaining / item.total_size * 100) if item.total_size > 0 else 0,
        "order_by_date": None,
        "max_lead_time_days": None,
        "reorder_status": "no_data",
    }
    if profile is not None and run_out is not None:
        order = calculate_order_by_date(run_out, profile, now=now or datetime.combine(today, datetime.min.time()))
        forecast["order_by_date"] = order["order_by_date"]
        forecast["max_lead_time_days"] = order["max_lead_time_days"]
        forecast["reorder_status"] = get_reorder_status(order["order_by_date"], today)
    return forecast


def calculate_purchase(required_amount: float, pack_size: int, cost_per_item: float) -> Dict[str, Any]:
    """Whole packs needed to cover required_amount (never rounds down)."""
    if pack_size <= 0:
        raise ValueError("pack_size must be positive")
    packs = math.ceil(required_amount / pack_size)
    return {
        "required_amount": required_amount,
        "packs_needed": packs,
        "actual_purchase_quantity": packs * pack_size,
        "total_cost": round(packs * cost_per_item, 2),
    }


def calculate_aggregate_stats(items: List[StockItem], today: Optional[date] = None,
                              rates: Optional[Dict[str, float]] = None) -> Dict[str, Any]:
    """Monthly and yearly spend totals over active items, with per-category breakdown."""
    rates = rates or {}
    active = [i for i in items if i.status == "active"]
    total_monthly = 0.0
    low_count = 0
    empty_count = 0
    by_category: Dict[str, Dict[str, float]] = defaultdict(lambda: {"monthly": 0.0, "yearly": 0.0})

    for item in active:
        f = calculate_forecast(item, today, usage_rate=rates.get(item.id))
        total_monthly += f["monthly_cost"]
        if f["status_level"] == "low":
            low_count += 1
        elif f["status_level"] == "empty":
            empty_count += 1
        by_category[item.category]["monthly"] += f["monthly_cost"]
        by_category[item.category]["yearly"] += f["yearly_cost"]

    return {
        "total_monthly_cost": round(total_monthly, 2),
        "total_yearly_cost": round(total_monthly * 12, 2),
        "low_stock_count": low_count,
        "empty_count": empty_count,
        "cost_by_category": {k: {"monthly": round(v["monthly"], 2), "yearly": round(v["yearly"], 2)}
                             for k, v in by_category.items()},
        "active_item_count": len(active),
        "total_item_count": len(items),
    }


__all__ = ['calculate_forecast', 'calculate_purchase', 'calculate_aggregate_stats']
