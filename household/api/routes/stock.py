import logging
from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from household.api.security import get_current_user
from household.domain.StockItem import StockItem, UsageLog
from household.events.event_helpers import publish_reorder_due
from household.infra.Stock_Repository import (
    ShippingProfileRepository,
    StockRepository,
    UsageLogRepository,
    WeightReadingRepository,
)
from household.logic.stock.forecast import calculate_forecast, calculate_purchase, calculate_aggregate_stats
from household.logic.stock.usage import (
    calculate_daily_usage_from_logs,
    calculate_weight_based_usage,
    get_reorder_status_label,
    validate_weight_log,
)
from household.utilities.validators import StockItemInput, UsageLogInput, WeightLogInput, ShippingProfileInput, PurchaseInput

router = APIRouter(prefix="/api/stock", tags=["stock"])
logger = logging.getLogger(__name__)


def get_stock_repository() -> StockRepository:
    return StockRepository()


def get_usage_repository() -> UsageLogRepository:
    return UsageLogRepository()


def get_profile_repository() -> ShippingProfileRepository:
    return ShippingProfileRepository()


def get_weight_repository() -> WeightReadingRepository:
    return WeightReadingRepository()


def _require_item(repo: StockRepository, item_id: str, user_id: str) -> StockItem:
    item = repo.get_item(item_id, user_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Item not found")
    return item


@router.get("/items")
def list_items(kind: Optional[str] = Query(None, pattern=r'^(toiletry|grocery)$'),
               user: dict = Depends(get_current_user), repo: StockRepository = Depends(get_stock_repository)):
    items = repo.list_items(user["id"], kind)
    return {"items": [i.to_dict() for i in items], "count": len(items)}


@router.post("/items", status_code=201)
def create_item(payload: StockItemInput, user: dict = Depends(get_current_user),
                repo: StockRepository = Depends(get_stock_repository)):
    row = StockItem(**payload.model_dump()).to_dict()
    row.pop("id")
    return repo.insert(row, user["id"])


@router.get("/items/{item_id}")
def get_item(item_id: str, user: dict = Depends(get_current_user), repo: StockRepository = Depends(get_stock_repository)):
    return _require_item(repo, item_id, user["id"]).to_dict()


@router.put("/items/{item_id}")
def update_item(item_id: str, payload: StockItemInput, user: dict = Depends(get_current_user),
                repo: StockRepository = Depends(get_stock_repository)):
    updated = repo.update(item_id, payload.model_dump(), user["id"])
    if updated is None:
        raise HTTPException(status_code=404, detail="Item not found")
    return updated


@router.delete("/items/{item_id}")
def delete_item(item_id: str, user: dict = Depends(get_current_user), repo: StockRepository = Depends(get_stock_repository)):
    if not repo.delete(item_id, user["id"]):
        raise HTTPException(status_code=404, detail="Item not found")
    return {"status": "deleted", "id": item_id}


@router.post("/items/{item_id}/usage", status_code=201)
def log_usage(item_id: str, payload: UsageLogInput, user: dict = Depends(get_current_user),
              repo: StockRepository = Depends(get_stock_repository),
              logs: UsageLogRepository = Depends(get_usage_repository)):
    """Record consumption and decrement the remaining amount."""
    item = _require_item(repo, item_id, user["id"])
    log = UsageLog(payload.logged_date or date.today(), payload.amount_used, item.id)
    stored = logs.insert(log.to_dict(), user["id"])
    repo.update(item.id, {"current_remaining": max(0.0, item.current_remaining - payload.amount_used)}, user["id"])
    return stored


@router.get("/items/{item_id}/weights")
def list_weights(item_id: str, user: dict = Depends(get_current_user),
                 repo: StockRepository = Depends(get_stock_repository),
                 readings: WeightReadingRepository = Depends(get_weight_repository)):
    item = _require_item(repo, item_id, user["id"])
    rows = readings.readings_for_item(item.id, user["id"])
    return {"readings": rows, "count": len(rows)}


@router.post("/items/{item_id}/weights")
def log_weight(item_id: str, payload: WeightLogInput, user: dict = Depends(get_current_user),
               repo: StockRepository = Depends(get_stock_repository),
               readings: WeightReadingRepository = Depends(get_weight_repository)):
    """Record a scale reading (full, regular or empty) and recompute remaining and usage rate."""
    item = _require_item(repo, item_id, user["id"])
    error = validate_weight_log(payload.reading_type, item.full_weight, item.finished_at)
    if error:
        raise HTTPException(status_code=400, detail=error)

    when = payload.recorded_at or date.today()
    changes = {"last_weighed_at": when.isoformat()}
    if payload.reading_type == "full":
        changes.update(full_weight=payload.weight, current_weight=payload.weight, opened_at=when.isoformat())
    elif payload.reading_type == "empty":
        changes.update(empty_weight=payload.weight, current_weight=payload.weight,
                       finished_at=when.isoformat(), status="out_of_stock")
    else:
        changes["current_weight"] = payload.weight

    merged = StockItem.from_dict({**item.to_dict(), **changes})
    usage = calculate_weight_based_usage(merged.full_weight, merged.current_weight, merged.empty_weight,
                                         merged.opened_at, merged.last_weighed_at, item.usage_rate_per_day)
    if merged.current_weight is not None:
        changes["current_remaining"] = usage["remaining"]
    if usage["source"] == "weight_based":
        changes["usage_rate_per_day"] = usage["usage_rate_per_day"]
    reading = readings.insert({"item_id": item.id, "reading_type": payload.reading_type, "weight": payload.weight,
                               "recorded_at": when.isoformat()}, user["id"])
    updated = repo.update(item.id, changes, user["id"])
    return {"item": updated, "usage": usage, "reading": reading}


@router.get("/retailers")
def list_profiles(user: dict = Depends(get_current_user), profiles: ShippingProfileRepository = Depends(get_profile_repository)):
    return {"profiles": profiles.list(user["id"])}


@router.put("/retailers/{retailer}")
def save_profile(retailer: str, payload: ShippingProfileInput, user: dict = Depends(get_current_user),
                 profiles: ShippingProfileRepository = Depends(get_profile_repository)):
    row = dict(payload.model_dump(), retailer=retailer.strip(), user_id=user["id"])
    return profiles.upsert(row, keys=("user_id", "retailer"), user_id=user["id"])


@router.get("/forecasts")
def forecasts(kind: Optional[str] = Query(None, pattern=r'^(toiletry|grocery)$'),
              user: dict = Depends(get_current_user), repo: StockRepository = Depends(get_stock_repository),
              logs: UsageLogRepository = Depends(get_usage_repository),
              profiles: ShippingProfileRepository = Depends(get_profile_repository)):
    """Forecast every active item (log-based rate when logs exist) plus spend totals.

    Items that must be ordered today or are overdue raise a stock.reorder_due alert
    once per reorder status and order-by date.
    """
    today = date.today()
    now = datetime.now()
    items = repo.list_items(user["id"], kind)
    logs_by_item = logs.logs_by_item(user["id"])
    profile_map = profiles.profiles_by_retailer(user["id"])

    results = []
    rates = {}
    for item in items:
        if item.status != "active":
            continue
        usage = calculate_daily_usage_from_logs(logs_by_item.get(item.id, []), today=today)
        if usage["daily_usage"] is not None:
            rates[item.id] = usage["daily_usage"]
        forecast = calculate_forecast(item, today, usage_rate=rates.get(item.id),
                                      profile=profile_map.get(item.retailer), now=now)
        forecast["usage"] = usage
        forecast["reorder_label"] = get_reorder_status_label(forecast["reorder_status"])
        status = forecast["reorder_status"]
        alert_key = f"{status}:{forecast['order_by_date']}" if status in ("overdue", "order_now") else None
        if repo.claim_reorder_alert(item.id, user["id"], alert_key) and alert_key:
            publish_reorder_due(item, status, forecast["order_by_date"])
        results.append(forecast)

    return {"forecasts": results, "stats": calculate_aggregate_stats(items, today, rates)}


@router.post("/purchase")
def purchase(payload: PurchaseInput):
    return calculate_purchase(payload.required_amount, payload.pack_size, payload.cost_per_item)
