"""Request dependencies: bearer-token authentication and the outbound HTTP client."""
import logging
from typing import AsyncIterator, Optional

import httpx
from fastapi import Depends, Header, HTTPException

from household.infra.User_Repository import UserRepository

logger = logging.getLogger(__name__)

HTTP_TIMEOUT_SECONDS = 15.0


def get_user_repository() -> UserRepository:
    return UserRepository()


def bearer_token(authorization: Optional[str]) -> str:
    if not authorization or not authorization.lower().startswith("bearer "):
        return ""
    return authorization[7:].strip()


def get_current_user(authorization: Optional[str] = Header(None),
                     users: UserRepository = Depends(get_user_repository)) -> dict:
    """Resolve the calling user from 'Authorization: Bearer <token>' or fail with 401."""
    user = users.get_by_token(bearer_token(authorization))
    if user is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user


async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(timeout=HTTP_TIMEOUT_SECONDS) as client:
        yield client
