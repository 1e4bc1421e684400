"""Parcel tracking endpoints: registration, polling, the inbound TrackingMore webhook and shipment listing."""
import hmac
import logging
from typing import Optional

import httpx
from pydantic import ValidationError
from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from household.api.security import get_current_user, get_http_client
from household.infra.Shipment_Repository import ShipmentRepository, ShipmentEventRepository, OrderRepository
from household.infra.trackingmore import TrackingMoreClient
from household.logic.tracking.shipments import (
    TrackingUpdate,
    apply_tracking_update,
    poll_shipments,
    register_shipment,
    utcnow,
)
from household.utilities import config
from household.utilities.validators import RegisterShipmentInput, WebhookBody

router = APIRouter(prefix="/api/tracking", tags=["tracking"])
logger = logging.getLogger(__name__)

# identical body for every outcome a caller must not be able to tell apart
ACK = {"success": True}


def get_shipment_repository() -> ShipmentRepository:
    return ShipmentRepository()


def get_event_repository() -> ShipmentEventRepository:
    return ShipmentEventRepository()


def get_order_repository() -> OrderRepository:
    return OrderRepository()


def get_trackingmore_client(http: httpx.AsyncClient = Depends(get_http_client)) -> TrackingMoreClient:
    return TrackingMoreClient(http)


def _secret_ok(provided: str) -> bool:
    expected = config.TRACKING_WEBHOOK_SECRET
    if not expected:
        return True
    return bool(provided) and hmac.compare_digest(provided.encode(), expected.encode())


@router.post("/register")
async def register(payload: RegisterShipmentInput, user: dict = Depends(get_current_user),
                   client: TrackingMoreClient = Depends(get_trackingmore_client),
                   shipments: ShipmentRepository = Depends(get_shipment_repository)):
    if not payload.tracking_number or not payload.tracking_number.strip():
        raise HTTPException(status_code=400, detail="tracking_number required")
    try:
        return await register_shipment(client, shipments, user["id"], payload.tracking_number,
                                       payload.carrier_code, payload.order_id, now=utcnow())
    except Exception as e:
        logger.error("Register error: %s", e)
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/poll")
async def poll(user: dict = Depends(get_current_user),
               client: TrackingMoreClient = Depends(get_trackingmore_client),
               shipments: ShipmentRepository = Depends(get_shipment_repository),
               events: ShipmentEventRepository = Depends(get_event_repository),
               orders: OrderRepository = Depends(get_order_repository)):
    if not client.configured:
        raise HTTPException(status_code=500, detail="TRACKINGMORE_API_KEY not set")
    return await poll_shipments(client, shipments, events, orders, now=utcnow())


@router.post("/webhook")
async def webhook(request: Request, secret: Optional[str] = Query(None),
                  x_webhook_secret: Optional[str] = Header(None),
                  shipments: ShipmentRepository = Depends(get_shipment_repository),
                  events: ShipmentEventRepository = Depends(get_event_repository),
                  orders: OrderRepository = Depends(get_order_repository)):
    """Inbound TrackingMore status push.

    Wrong secret, malformed body and unknown tracking number all get the same
    200 acknowledgement; only a body without a tracking number is a 400.
    """
    if not _secret_ok(secret or x_webhook_secret or ""):
        logger.warning("Tracking webhook rejected: bad secret")
        return ACK
    try:
        body = await request.json()
        WebhookBody.model_validate(body)
    except (ValueError, ValidationError):
        logger.warning("Tracking webhook ignored: malformed body")
        return ACK

    try:
        update = TrackingUpdate.from_webhook(body)
        if not update.tracking_number:
            return JSONResponse(status_code=400, content={"error": "Missing tracking_number"})
        shipment = shipments.find_for_update(update.tracking_number, update.trackingmore_id)
        if shipment is None:
            return ACK
        apply_tracking_update(shipment, update, utcnow(), shipments, events, orders)
        return ACK
    except Exception:
        logger.exception("Webhook error")
        return JSONResponse(status_code=500, content={"error": "Internal error"})


@router.get("/shipments")
def list_shipments(user: dict = Depends(get_current_user),
                   shipments: ShipmentRepository = Depends(get_shipment_repository),
                   events: ShipmentEventRepository = Depends(get_event_repository)):
    rows = sorted(shipments.list(user["id"]), key=lambda r: str(r.get("created_at")), reverse=True)
    for row in rows:
        row["events"] = events.for_shipment(row["id"])
    return {"shipments": rows, "count": len(rows)}
