"""Shipment persistence: shipments, checkpoint events and online orders."""
from typing import List, Optional

from household.domain.Shipment import Shipment
from household.infra.Table_Repository import TableRepository, Row


class ShipmentRepository(TableRepository):
    table = "shipments"

    def find_for_update(self, tracking_number: str, trackingmore_id: Optional[str] = None) -> Optional[Shipment]:
        """Unscoped lookup used by inbound webhooks: TrackingMore id first, then tracking number."""
        row = None
        if trackingmore_id:
            row = self.find_one(trackingmore_id=trackingmore_id)
        if row is None:
            row = self.find_one(tracking_number=tracking_number)
        return Shipment.from_dict(row) if row else None

    def all_shipments(self) -> List[Shipment]:
        return [Shipment.from_dict(r) for r in self.list()]

    def save(self, shipment: Shipment) -> Row:
        return self.update(shipment.id, shipment.to_dict())


class ShipmentEventRepository(TableRepository):
    table = "shipment_events"

    def upsert_event(self, shipment_id: str, event: Row) -> Row:
        row = dict(event, shipment_id=shipment_id)
        return self.upsert(row, keys=("shipment_id", "event_time", "message"))

    def for_shipment(self, shipment_id: str) -> List[Row]:
        return sorted(self.list(shipment_id=shipment_id), key=lambda e: str(e.get("event_time")), reverse=True)


class OrderRepository(TableRepository):
    table = "online_orders"
