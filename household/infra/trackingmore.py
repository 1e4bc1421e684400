"""TrackingMore v4 REST client (async, httpx)."""
import logging
from typing import Any, Dict, Optional

import httpx

from household.utilities import config
from household.utilities.constants import TRACKINGMORE_ALREADY_EXISTS

logger = logging.getLogger(__name__)


class TrackingMoreError(Exception):
    pass


class TrackingMoreClient:
    def __init__(self, http: httpx.AsyncClient, api_key: Optional[str] = None, base_url: Optional[str] = None):
        self.http = http
        self.api_key = api_key if api_key is not None else config.TRACKINGMORE_API_KEY
        self.base_url = (base_url or config.TRACKINGMORE_BASE_URL).rstrip("/")

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _headers(self) -> Dict[str, str]:
        return {"Tracking-Api-Key": self.api_key, "Content-Type": "application/json"}

    async def get_tracking(self, tracking_number: str, courier_code: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """First tracking record TrackingMore holds for the number, or None."""
        params = {"tracking_numbers": tracking_number}
        if courier_code:
            params["courier_code"] = courier_code
        response = await self.http.get(f"{self.base_url}/trackings/get", params=params, headers=self._headers())
        if response.status_code >= 500:
            raise TrackingMoreError(f"TrackingMore returned {response.status_code}")
        data = response.json().get("data") or []
        if isinstance(data, list):
            return data[0] if data else None
        return data or None

    async def create_tracking(self, tracking_number: str, courier_code: Optional[str] = None) -> str:
        """Register a number and return its TrackingMore id (existing registrations are looked up)."""
        body = {"tracking_number": tracking_number}
        if courier_code:
            body["courier_code"] = courier_code
        response = await self.http.post(f"{self.base_url}/trackings/create", json=body, headers=self._headers())
        data = response.json()
        created = data.get("data") or {}
        if response.is_success and isinstance(created, dict) and created.get("id"):
            return created["id"]
        meta = data.get("meta") or {}
        if meta.get("code") == TRACKINGMORE_ALREADY_EXISTS:
            existing = await self.get_tracking(tracking_number)
            if existing and existing.get("id"):
                return existing["id"]
        logger.error("TrackingMore registration failed for %s: %s", tracking_number, meta)
        raise TrackingMoreError(meta.get("message") or "Registration failed")
