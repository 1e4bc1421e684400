"""Shipment tracking workflows shared by the webhook, the poller and registration.

apply_tracking_update() is the single place a TrackingMore snapshot is
written back: shipment row, checkpoint events (upserted on
shipment/time/message so replays change nothing) and the parent order.
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from household.domain.Shipment import Shipment
from household.events.event_helpers import publish_shipment_delivered
from household.infra.Shipment_Repository import ShipmentRepository, ShipmentEventRepository, OrderRepository
from household.infra.trackingmore import TrackingMoreClient, TrackingMoreError
from household.logic.tracking.status import map_status, detect_carrier, extract_events, needs_poll, parse_timestamp
from household.utilities import config
from household.utilities.constants import POLL_BATCH_LIMIT

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TrackingUpdate:
    """Normalised TrackingMore snapshot (from a webhook body or a poll response)."""

    def __init__(self, tracking_number: str, raw_status: Optional[str] = None, carrier_code: Optional[str] = None,
                 event_time: Optional[str] = None, trackingmore_id: Optional[str] = None,
                 raw: Optional[Dict[str, Any]] = None, events: Optional[List[Dict[str, Any]]] = None):
        self.tracking_number = tracking_number
        self.status = map_status(raw_status)
        self.carrier_code = carrier_code
        self.event_time = event_time
        self.trackingmore_id = trackingmore_id
        self.raw = raw or {}
        self.events = events or []

    @classmethod
    def from_tracking(cls, tracking: Dict[str, Any], raw: Optional[Dict[str, Any]] = None):
        """From a TrackingMore v4 tracking object."""
        return cls(
            tracking_number=tracking.get("tracking_number") or "",
            raw_status=tracking.get("delivery_status"),
            carrier_code=tracking.get("courier_code"),
            event_time=tracking.get("latest_event_time"),
            trackingmore_id=tracking.get("id"),
            raw=raw if raw is not None else tracking,
            events=extract_events(tracking),
        )

    @classmethod
    def from_webhook(cls, body: Dict[str, Any]):
        """From a webhook body: v4 envelope {data: {...}} or the flat legacy shape."""
        data = body.get("data") if isinstance(body.get("data"), dict) else {}
        return cls(
            tracking_number=data.get("tracking_number") or body.get("tracking_number") or "",
            raw_status=data.get("delivery_status") or body.get("status"),
            carrier_code=data.get("courier_code") or body.get("carrier"),
            event_time=data.get("latest_event_time") or body.get("event_time"),
            trackingmore_id=data.get("id"),
            raw=body,
            events=extract_events(data),
        )


def apply_tracking_update(shipment: Shipment, update: TrackingUpdate, now: datetime,
                          shipments: ShipmentRepository, events: ShipmentEventRepository,
                          orders: OrderRepository) -> Shipment:
    now_iso = now.isoformat()
    was_delivered = shipment.is_delivered

    shipment.status = update.status
    shipment.last_event_at = update.event_time or shipment.last_event_at or now_iso
    shipment.last_synced_at = now_iso
    shipment.raw_latest = update.raw
    if update.carrier_code:
        shipment.carrier_code = update.carrier_code
    if update.trackingmore_id:
        shipment.trackingmore_id = update.trackingmore_id
    if shipment.is_delivered and not shipment.delivered_at:
        shipment.delivered_at = update.event_time or now_iso
    shipments.save(shipment)

    for evt in update.events:
        events.upsert_event(shipment.id, evt)

    if shipment.is_delivered:
        if shipment.order_id:
            orders.update(shipment.order_id, {"status": "delivered", "updated_at": now_iso})
        if not was_delivered:
            logger.info("Shipment %s delivered", shipment.tracking_number)
            publish_shipment_delivered(shipment, shipment.delivered_at)
    return shipment


def select_for_poll(all_shipments: List[Shipment], now: datetime, limit: int = POLL_BATCH_LIMIT) -> List[Shipment]:
    """Shipments due for a refresh, never-synced first then oldest sync first."""
    due = [s for s in all_shipments if needs_poll(s, now)]
    epoch = datetime.min.replace(tzinfo=timezone.utc)
    due.sort(key=lambda s: parse_timestamp(s.last_synced_at) or epoch)
    return due[:limit]


async def poll_shipments(client: TrackingMoreClient, shipments: ShipmentRepository, events: ShipmentEventRepository,
                         orders: OrderRepository, now: Optional[datetime] = None,
                         rate_limit: Optional[float] = None) -> Dict[str, Any]:
    """Refresh due shipments from TrackingMore; per-shipment failures are counted, not raised."""
    now = now or utcnow()
    delay = config.POLL_RATE_LIMIT_SECONDS if rate_limit is None else rate_limit
    batch = select_for_poll(shipments.all_shipments(), now)
    updated = 0
    errors = 0
    for i, shipment in enumerate(batch):
        if i and delay:
            await asyncio.sleep(delay)
        try:
            tracking = await client.get_tracking(shipment.tracking_number, shipment.carrier_code)
            if not tracking:
                shipments.update(shipment.id, {"last_synced_at": now.isoformat()})
                continue
            apply_tracking_update(shipment, TrackingUpdate.from_tracking(tracking), now, shipments, events, orders)
            updated += 1
        except Exception:
            logger.exception("Poll error for %s", shipment.tracking_number)
            errors += 1
    logger.info("TrackingMore poll: %d polled, %d updated, %d errors", len(batch), updated, errors)
    return {"success": True, "polled": len(batch), "updated": updated, "errors": errors}


async def register_shipment(client: TrackingMoreClient, shipments: ShipmentRepository, user_id: str,
                            tracking_number: str, carrier_code: Optional[str] = None,
                            order_id: Optional[str] = None, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Store a shipment for the user and register it with TrackingMore.

    Registration problems are reported in registration_error; the shipment
    row is kept either way so the poller can pick it up later.
    """
    now = now or utcnow()
    tracking_number = tracking_number.strip().upper()
    carrier = carrier_code or detect_carrier(tracking_number)

    existing = shipments.find_one(user_id, tracking_number=tracking_number)
    if existing and existing.get("trackingmore_id"):
        return {"success": True, "shipment_id": existing["id"], "trackingmore_id": existing["trackingmore_id"],
                "carrier_code": existing.get("carrier_code"), "already_registered": True,
                "registration_error": None}

    row = {"tracking_number": tracking_number, "carrier_code": carrier, "order_id": order_id}
    if existing is None:
        row["status"] = "pending"
    stored = shipments.upsert(dict(row, user_id=user_id), keys=("user_id", "tracking_number"), user_id=user_id)

    trackingmore_id = None
    registration_error = None
    if not client.configured:
        registration_error = "TRACKINGMORE_API_KEY not configured"
    else:
        try:
            trackingmore_id = await client.create_tracking(tracking_number, carrier)
        except TrackingMoreError as e:
            registration_error = str(e)
        except Exception as e:
            logger.exception("TrackingMore error for %s", tracking_number)
            registration_error = str(e)

    if trackingmore_id:
        shipments.update(stored["id"], {"trackingmore_id": trackingmore_id, "last_synced_at": now.isoformat()})

    return {
        "success": True,
        "shipment_id": stored["id"],
        "trackingmore_id": trackingmore_id,
        "carrier_code": carrier,
        "registration_error": registration_error,
    }


__all__ = ['utcnow', 'TrackingUpdate', 'apply_tracking_update', 'select_for_poll', 'poll_shipments', 'register_shipment']
