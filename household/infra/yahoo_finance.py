"""Quote lookup against the Yahoo Finance chart API."""
from datetime import datetime, timezone, date
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from household.utilities import config


class QuoteError(Exception):
    pass


def parse_chart(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Latest non-null close (and the close before it) from a chart response."""
    results = (payload.get("chart") or {}).get("result") or []
    if not results:
        raise QuoteError("No data returned from Yahoo Finance")
    result = results[0]
    meta = result.get("meta") or {}
    timestamps = result.get("timestamp") or []
    quotes = (result.get("indicators") or {}).get("quote") or [{}]
    closes = quotes[0].get("close") or []

    price = meta.get("regularMarketPrice")
    previous: Optional[float] = meta.get("previousClose") or meta.get("chartPreviousClose")
    quote_date = date.today()
    for i in range(min(len(timestamps), len(closes)) - 1, -1, -1):
        if closes[i] is not None:
            quote_date = datetime.fromtimestamp(timestamps[i], tz=timezone.utc).date()
            price = closes[i]
            if i > 0 and closes[i - 1] is not None:
                previous = closes[i - 1]
            break
    if not price:
        raise QuoteError("Could not determine current price")
    return {"price": price, "previous_close": previous, "date": quote_date, "currency": meta.get("currency") or "GBP"}


class YahooFinanceClient:
    def __init__(self, http: httpx.AsyncClient, base_url: Optional[str] = None):
        self.http = http
        self.base_url = (base_url or config.YAHOO_CHART_URL).rstrip("/")

    async def fetch_quote(self, ticker: str) -> Dict[str, Any]:
        url = f"{self.base_url}/{quote(ticker, safe='')}"
        response = await self.http.get(url, params={"range": "5d", "interval": "1d"},
                                       headers={"User-Agent": "Mozilla/5.0"})
        if response.status_code != 200:
            raise QuoteError(f"Yahoo Finance returned {response.status_code}")
        return parse_chart(response.json())
