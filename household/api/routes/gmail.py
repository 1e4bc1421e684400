"""Gmail OAuth connection management (read-only scope)."""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from urllib.parse import quote

import httpx
from fastapi import APIRouter, Depends, HTTPException, Header
from fastapi.responses import RedirectResponse

from household.api.security import get_current_user, get_http_client, get_user_repository, bearer_token
from household.infra.Gmail_Repository import GmailConnectionRepository
from household.infra.User_Repository import UserRepository
from household.infra.google_oauth import GoogleOAuthClient, OAuthError, build_auth_url, decode_state, encode_state
from household.utilities import config
from household.utilities.validators import GmailOAuthRequest

router = APIRouter(prefix="/api/gmail", tags=["gmail"])
logger = logging.getLogger(__name__)


def get_connection_repository() -> GmailConnectionRepository:
    return GmailConnectionRepository()


def get_oauth_client(http: httpx.AsyncClient = Depends(get_http_client)) -> GoogleOAuthClient:
    return GoogleOAuthClient(http)


def _expires_at(expires_in) -> str:
    return (datetime.now(timezone.utc) + timedelta(seconds=int(expires_in or 0))).isoformat()


def _settings_redirect(query: str) -> RedirectResponse:
    return RedirectResponse(f"{config.APP_URL.rstrip('/')}/settings?{query}", status_code=302)


def _require_configured():
    if not config.GOOGLE_CLIENT_ID or not config.GOOGLE_CLIENT_SECRET:
        raise HTTPException(status_code=400, detail="Gmail integration not configured")


@router.post("/oauth")
async def oauth_action(payload: GmailOAuthRequest, authorization: Optional[str] = Header(None),
                       users: UserRepository = Depends(get_user_repository),
                       oauth: GoogleOAuthClient = Depends(get_oauth_client),
                       connections: GmailConnectionRepository = Depends(get_connection_repository)):
    _require_configured()
    user = users.get_by_token(bearer_token(authorization))

    if payload.action == "exchange_token":
        try:
            tokens = await oauth.exchange_code(payload.code or "", payload.redirect_uri)
            email = await oauth.user_email(tokens["access_token"])
        except OAuthError as e:
            raise HTTPException(status_code=500, detail=str(e))
        return {
            "access_token": tokens.get("access_token"),
            "refresh_token": tokens.get("refresh_token"),
            "expires_in": tokens.get("expires_in"),
            "email": email,
        }

    if user is None:
        raise HTTPException(status_code=401, detail="Unauthorized")

    if payload.action == "get_auth_url":
        state = encode_state(user["id"], config.APP_URL)
        return {"authUrl": build_auth_url(state)}

    connection = connections.for_user(user["id"])
    if not connection or not connection.get("refresh_token"):
        raise HTTPException(status_code=404, detail="No Gmail connection found")
    try:
        tokens = await oauth.refresh(connection["refresh_token"])
    except OAuthError as e:
        logger.warning("Gmail token refresh failed for user %s: %s", user["id"], e)
        connections.update(connection["id"], {"status": "error"})
        raise HTTPException(status_code=500, detail="Token refresh failed")
    connections.update(connection["id"], {
        "access_token": tokens["access_token"],
        "token_expires_at": _expires_at(tokens.get("expires_in")),
        "status": "active",
    })
    return {"access_token": tokens["access_token"], "expires_in": tokens.get("expires_in")}


@router.get("/oauth/callback")
async def oauth_callback(code: Optional[str] = None, state: Optional[str] = None, error: Optional[str] = None,
                         oauth: GoogleOAuthClient = Depends(get_oauth_client),
                         connections: GmailConnectionRepository = Depends(get_connection_repository)):
    """Google redirect target: exchange the code, store the connection, bounce back to the settings page."""
    if error:
        return _settings_redirect(f"gmail_error={quote(error)}")
    if not config.GOOGLE_CLIENT_ID or not config.GOOGLE_CLIENT_SECRET:
        return _settings_redirect("gmail_error=not_configured")
    if not code or not state:
        return _settings_redirect("gmail_error=missing_code")
    try:
        user_id = decode_state(state)["userId"]
    except OAuthError:
        return _settings_redirect("gmail_error=invalid_state")

    try:
        tokens = await oauth.exchange_code(code)
    except OAuthError as e:
        logger.error("Gmail token exchange failed: %s", e)
        return _settings_redirect("gmail_error=token_exchange_failed")
    if not tokens.get("refresh_token"):
        logger.warning("No refresh token received for user %s; re-authorisation may be needed", user_id)
    try:
        email = await oauth.user_email(tokens["access_token"])
    except OAuthError:
        return _settings_redirect("gmail_error=user_info_failed")

    changes = {
        "email": email,
        "access_token": tokens["access_token"],
        "token_expires_at": _expires_at(tokens.get("expires_in")),
        "status": "active",
        "updated_at": datetime.now(timezone.utc).isoformat(),
    }
    if tokens.get("refresh_token"):
        changes["refresh_token"] = tokens["refresh_token"]
    connections.save_connection(user_id, **changes)
    logger.info("Gmail connected for user %s", user_id)
    return _settings_redirect("gmail_connected=true")


@router.get("/connection")
def connection_status(user: dict = Depends(get_current_user),
                      connections: GmailConnectionRepository = Depends(get_connection_repository)):
    conn = connections.for_user(user["id"])
    if conn is None:
        return {"connected": False}
    return {"connected": conn.get("status") == "active", "email": conn.get("email"),
            "status": conn.get("status"), "token_expires_at": conn.get("token_expires_at")}
