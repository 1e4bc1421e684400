"""Parcel tracking entities: shipments, their checkpoint events and the online orders they fulfil."""
from typing import Any, Dict, Optional

SHIPMENT_STATUSES = ("pending", "in_transit", "out_for_delivery", "delivered", "exception", "unknown")


class Shipment:
    def __init__(self, id: str = "", tracking_number: str = "", carrier_code: Optional[str] = None,
                 status: str = "pending", trackingmore_id: Optional[str] = None,
                 order_id: Optional[str] = None, last_event_at: Optional[str] = None,
                 last_synced_at: Optional[str] = None, delivered_at: Optional[str] = None,
                 raw_latest: Optional[Dict[str, Any]] = None, created_at: Optional[str] = None,
                 user_id: str = ""):
        self.id = id
        self.tracking_number = tracking_number
        self.carrier_code = carrier_code
        self.status = status
        self.trackingmore_id = trackingmore_id
        self.order_id = order_id
        self.last_event_at = last_event_at
        self.last_synced_at = last_synced_at
        self.delivered_at = delivered_at
        self.raw_latest = raw_latest
        self.created_at = created_at
        self.user_id = user_id

    def __repr__(self) -> str:
        return f"Shipment({self.tracking_number!r}, {self.status})"

    @property
    def is_delivered(self) -> bool:
        return self.status == "delivered"

    @staticmethod
    def from_dict(data):
        d = dict(data) if isinstance(data, dict) else {}
        allowed = {"id", "tracking_number", "carrier_code", "status", "trackingmore_id", "order_id",
                   "last_event_at", "last_synced_at", "delivered_at", "raw_latest", "created_at", "user_id"}
        return Shipment(**{k: v for k, v in d.items() if k in allowed})

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "tracking_number": self.tracking_number,
            "carrier_code": self.carrier_code,
            "status": self.status,
            "trackingmore_id": self.trackingmore_id,
            "order_id": self.order_id,
            "last_event_at": self.last_event_at,
            "last_synced_at": self.last_synced_at,
            "delivered_at": self.delivered_at,
            "raw_latest": self.raw_latest,
            "created_at": self.created_at,
        }
