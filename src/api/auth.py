"""
Bearer-token access control for the gamification API

Callers (the BeeLearn web app and course backend) send one of the shared
keys listed in API_KEYS as `Authorization: Bearer <key>`. Keys are read on
every request so they can be rotated without a restart.
"""
import hmac
import logging
import os
from typing import Optional

from fastapi import HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_api_keys() -> list[str]:
    """Service keys from the comma-separated API_KEYS variable"""
    raw = os.getenv("API_KEYS", "")
    return [key.strip() for key in raw.split(",") if key.strip()]


def _matches_any(candidate: str, keys: list[str]) -> bool:
    return any(hmac.compare_digest(candidate.encode(), key.encode()) for key in keys)


async def verify_api_key(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme)
) -> str:
    """
    FastAPI dependency guarding every gamification route

    Raises:
        HTTPException: 503 when the service has no keys configured,
            401 when the bearer token is missing or unknown
    """
    keys = get_api_keys()
    if not keys:
        logger.error("API_KEYS is empty, gamification API is locked")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Gamification API has no access keys configured"
        )

    if credentials is None or not _matches_any(credentials.credentials, keys):
        logger.warning("Rejected gamification API call with a missing or unknown key")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="A valid service key is required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return credentials.credentials
