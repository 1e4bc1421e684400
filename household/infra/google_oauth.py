"""Google OAuth helpers for the read-only Gmail connection."""
import base64
import hashlib
import hmac
import json
import time
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx

from household.utilities import config

AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"
SCOPES = (
    "https://www.googleapis.com/auth/gmail.readonly",
    "https://www.googleapis.com/auth/userinfo.email",
)


class OAuthError(Exception):
    pass


def _sign(payload: bytes) -> str:
    return hmac.new(config.GOOGLE_CLIENT_SECRET.encode(), payload, hashlib.sha256).hexdigest()


def encode_state(user_id: str, origin: str, timestamp: Optional[int] = None) -> str:
    """base64 JSON {userId, timestamp, origin, sig}; sig is an HMAC over the other fields."""
    data = {"userId": user_id, "timestamp": timestamp or int(time.time() * 1000), "origin": origin}
    raw = json.dumps(data, sort_keys=True).encode()
    data["sig"] = _sign(raw)
    return base64.urlsafe_b64encode(json.dumps(data).encode()).decode()


def decode_state(state: str) -> Dict[str, Any]:
    try:
        data = json.loads(base64.urlsafe_b64decode(state.encode()))
    except (ValueError, TypeError) as e:
        raise OAuthError("invalid_state") from e
    if not isinstance(data, dict):
        raise OAuthError("invalid_state")
    sig = data.pop("sig", "")
    raw = json.dumps(data, sort_keys=True).encode()
    if not sig or not hmac.compare_digest(sig, _sign(raw)) or not data.get("userId"):
        raise OAuthError("invalid_state")
    return data


def build_auth_url(state: str, redirect_uri: Optional[str] = None) -> str:
    params = {
        "client_id": config.GOOGLE_CLIENT_ID,
        "redirect_uri": redirect_uri or config.GOOGLE_REDIRECT_URI,
        "response_type": "code",
        "scope": " ".join(SCOPES),
        "access_type": "offline",
        "prompt": "consent",
        "state": state,
    }
    return f"{AUTH_URL}?{urlencode(params)}"


class GoogleOAuthClient:
    def __init__(self, http: httpx.AsyncClient):
        self.http = http

    async def _token_request(self, form: Dict[str, str]) -> Dict[str, Any]:
        form = dict(form, client_id=config.GOOGLE_CLIENT_ID, client_secret=config.GOOGLE_CLIENT_SECRET)
        response = await self.http.post(TOKEN_URL, data=form)
        if response.status_code != 200:
            raise OAuthError(f"Token request failed: {response.text}")
        return response.json()

    async def exchange_code(self, code: str, redirect_uri: Optional[str] = None) -> Dict[str, Any]:
        return await self._token_request({
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": redirect_uri or config.GOOGLE_REDIRECT_URI,
        })

    async def refresh(self, refresh_token: str) -> Dict[str, Any]:
        return await self._token_request({"refresh_token": refresh_token, "grant_type": "refresh_token"})

    async def user_email(self, access_token: str) -> str:
        response = await self.http.get(USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"})
        if response.status_code != 200:
            raise OAuthError("Failed to get user info")
        return response.json().get("email", "")
