"""Web-facing observers for household events.

Subscribes to the GLOBAL_EVENT_BUS for stock.reorder_due and
shipment.delivered and keeps a capped in-memory ring buffer that the API
serves from /api/alerts. Each event gets an auto-increment id so clients
can poll with since=<last id seen>. A Lock guards the buffer; with several
worker processes each keeps its own buffer.
"""
from __future__ import annotations
from datetime import datetime, timezone, date
from threading import Lock
from typing import List, Dict, Any, Optional

from .Event_Bus import GLOBAL_EVENT_BUS, STOCK_REORDER_DUE, SHIPMENT_DELIVERED
from household.utilities.constants import MAX_ALERT_EVENTS

_lock = Lock()
_events: List[Dict[str, Any]] = []
_next_id = 1
_started = False


def _record(event_name: str, payload: Any):
    global _next_id
    evt: Dict[str, Any] = {'type': event_name, 'ts': datetime.now(timezone.utc).isoformat()}
    if isinstance(payload, dict):
        item = payload.get('item')
        if item is not None:
            evt['item_id'] = getattr(item, 'id', '')
            evt['name'] = getattr(item, 'name', '')
            evt['user_id'] = getattr(item, 'user_id', '')
        shipment = payload.get('shipment')
        if shipment is not None:
            evt['shipment_id'] = getattr(shipment, 'id', '')
            evt['tracking_number'] = getattr(shipment, 'tracking_number', '')
            evt['user_id'] = getattr(shipment, 'user_id', '')
        for k in ('reorder_status', 'order_by_date', 'delivered_at'):
            if k in payload:
                v = payload[k]
                evt[k] = v.isoformat() if isinstance(v, date) else v
    with _lock:
        evt['id'] = _next_id
        _next_id += 1
        _events.append(evt)
        if len(_events) > MAX_ALERT_EVENTS:
            del _events[: len(_events) - MAX_ALERT_EVENTS]


def start():
    """Idempotent start: subscribe observers once."""
    global _started
    if _started:
        return
    GLOBAL_EVENT_BUS.subscribe(STOCK_REORDER_DUE, _record)
    GLOBAL_EVENT_BUS.subscribe(SHIPMENT_DELIVERED, _record)
    _started = True


def get_events(since: Optional[int] = None, user_id: Optional[str] = None) -> Dict[str, Any]:
    """Events newer than 'since' (exclusive), optionally only those owned by user_id.

    next_cursor is the largest id seen so the client can poll with since=next_cursor.
    """
    with _lock:
        data = list(_events) if since is None else [e for e in _events if e['id'] > since]
        next_cursor = _events[-1]['id'] if _events else since or 0
    if user_id is not None:
        data = [e for e in data if e.get('user_id') == user_id]
    return {'events': data, 'next_cursor': next_cursor}


def clear():
    with _lock:
        _events.clear()


__all__ = ['start', 'get_events', 'clear']
