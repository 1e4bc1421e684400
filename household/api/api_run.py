from typing import Optional
import logging

import httpx
from fastapi import FastAPI, Depends, Query

from household.api.security import get_current_user, HTTP_TIMEOUT_SECONDS
from household.events.web_observers import start as start_event_observers, get_events as get_web_events
from household.infra.Shipment_Repository import ShipmentRepository, ShipmentEventRepository, OrderRepository
from household.infra.trackingmore import TrackingMoreClient
from household.logic.tracking.shipments import poll_shipments
from household.utilities import config
from household.utilities.sync import BackgroundSync

# Routers
from household.api.routes import bills, gmail, investments, mealplan, paycycle, stock, tracking

# Logging
logger = logging.getLogger("household_app")

# Initialize FastAPI app
app = FastAPI(title="Household Ledger API")

# Include routers
app.include_router(paycycle.router)
app.include_router(bills.router)
app.include_router(stock.router)
app.include_router(investments.router)
app.include_router(mealplan.router)
app.include_router(tracking.router)
app.include_router(gmail.router)

background_sync = BackgroundSync()


async def _tracking_poll_job():
    async with httpx.AsyncClient(timeout=HTTP_TIMEOUT_SECONDS) as http:
        result = await poll_shipments(TrackingMoreClient(http), ShipmentRepository(),
                                      ShipmentEventRepository(), OrderRepository())
    logger.info("Tracking poll: %s polled, %s updated, %s errors",
                result["polled"], result["updated"], result["errors"])
    return result


background_sync.register("tracking-poll", _tracking_poll_job)


@app.on_event("startup")
def _startup_web_observers():
    """Register event bus subscribers for web alerts when the app starts."""
    start_event_observers()
    logger.info("Web observers for household events started")


@app.on_event("startup")
async def _startup_background_sync():
    if not config.BACKGROUND_SYNC_ENABLED:
        logger.info("Background sync disabled")
        return
    if not config.TRACKINGMORE_API_KEY:
        logger.warning("Background sync enabled but TRACKINGMORE_API_KEY not set; not starting")
        return
    background_sync.start()


@app.on_event("shutdown")
async def _shutdown_background_sync():
    await background_sync.stop()


@app.get("/api/health")
def health():
    return {"status": "ok"}


@app.get("/api/alerts")
def api_alerts(since: Optional[int] = Query(default=None, ge=0), user: dict = Depends(get_current_user)):
    """Stock reorder and delivery alerts for the caller, newer than 'since'."""
    return get_web_events(since, user["id"])


@app.get("/api/sync/status")
def sync_status(user: dict = Depends(get_current_user)):
    return background_sync.status()
