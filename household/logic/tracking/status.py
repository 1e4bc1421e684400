"""TrackingMore vocabulary helpers: status mapping, carrier detection, checkpoint extraction, poll scheduling."""
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from household.domain.Shipment import Shipment
from household.utilities.constants import (
    POLL_STALE_AFTER_HOURS,
    PENDING_BACKOFF_AFTER_HOURS,
    PENDING_BACKOFF_INTERVAL_HOURS,
)

_STATUS_GROUPS = (
    ("delivered", {"delivered", "signed", "pickup"}),
    ("in_transit", {"transit", "intransit", "in_transit", "in transit"}),
    ("out_for_delivery", {"outfordelivery", "out_for_delivery"}),
    ("exception", {"exception", "failed", "expired", "undelivered"}),
    ("pending", {"notfound", "not_found", "pending"}),
)

# checked in order; the first match wins
CARRIER_PATTERNS = (
    (re.compile(r"^[A-Z]{2}\d{9}GB$", re.I), "royal-mail", "Royal Mail"),
    (re.compile(r"^\d{14}$"), "dpd", "DPD"),
    (re.compile(r"^H[A-Z0-9]{15,20}$", re.I), "evri", "Evri"),
    (re.compile(r"^JD\d{16,18}$", re.I), "yodel", "Yodel"),
    (re.compile(r"^\d{10,22}$"), "dhl", "DHL"),
    (re.compile(r"^1Z[A-Z0-9]{16}$", re.I), "ups", "UPS"),
    (re.compile(r"^\d{12,15}$"), "fedex", "FedEx"),
)


def map_status(raw: Optional[str]) -> str:
    s = (raw or "").strip().lower()
    for status, aliases in _STATUS_GROUPS:
        if s in aliases:
            return status
    return "unknown"


def detect_carrier(tracking_number: str) -> Optional[str]:
    for pattern, code, _name in CARRIER_PATTERNS:
        if pattern.match(tracking_number or ""):
            return code
    return None


def extract_events(tracking: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Flatten origin and destination checkpoints; entries without a time are dropped."""
    checkpoints = []
    for side in ("origin_info", "destination_info"):
        info = tracking.get(side) or {}
        if isinstance(info, dict):
            checkpoints.extend(info.get("trackinfo") or [])

    events = []
    for evt in checkpoints:
        if not isinstance(evt, dict):
            continue
        event_time = evt.get("Date") or evt.get("checkpoint_date")
        if not event_time:
            continue
        events.append({
            "event_time": event_time,
            "message": evt.get("StatusDescription") or evt.get("checkpoint_delivery_status") or evt.get("Details") or "",
            "location": evt.get("Details") or evt.get("location"),
            "status": evt.get("checkpoint_delivery_status"),
            "raw": evt,
        })
    return events


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        ts = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def needs_poll(shipment: Shipment, now: datetime) -> bool:
    """Whether a shipment is due for a TrackingMore refresh.

    Delivered shipments never are. Others refresh when never synced or synced
    more than an hour ago; pending shipments older than 48 hours only every
    6 hours.
    """
    if shipment.is_delivered:
        return False
    synced = parse_timestamp(shipment.last_synced_at)
    if synced is not None and synced >= now - timedelta(hours=POLL_STALE_AFTER_HOURS):
        return False
    created = parse_timestamp(shipment.created_at)
    if shipment.status == "pending" and created is not None \
            and created < now - timedelta(hours=PENDING_BACKOFF_AFTER_HOURS):
        return synced is None or synced < now - timedelta(hours=PENDING_BACKOFF_INTERVAL_HOURS)
    return True


__all__ = ['CARRIER_PATTERNS', 'map_status', 'detect_carrier', 'extract_events', 'parse_timestamp', 'needs_poll']
