"""Publishing helpers for household events.

Quick import:
    from household.events.event_helpers import publish_reorder_due, publish_shipment_delivered
"""
from __future__ import annotations
from typing import Any, Optional

from .Event_Bus import create_event, STOCK_REORDER_DUE, SHIPMENT_DELIVERED

__all__ = ['publish_reorder_due', 'publish_shipment_delivered', 'STOCK_REORDER_DUE', 'SHIPMENT_DELIVERED']


def publish_reorder_due(item: Any, reorder_status: str, order_by_date: Optional[Any] = None):
    """Publish a stock.reorder_due event (item overdue or to be ordered today)."""
    create_event(STOCK_REORDER_DUE, {
        'item': item,
        'reorder_status': reorder_status,
        'order_by_date': order_by_date,
    })


def publish_shipment_delivered(shipment: Any, delivered_at: Optional[str]):
    create_event(SHIPMENT_DELIVERED, {
        'shipment': shipment,
        'delivered_at': delivered_at,
    })
