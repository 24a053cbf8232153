"""
NoteKeeper Backend — Caller Identity
======================================

What:  Resolves the caller's user id from the `Authorization: Bearer <jwt>`
       header. Every /api route depends on `get_current_user_id`.
How:   Tokens are issued by the external auth service; this module only
       verifies the signature (python-jose) and reads the user-id claim.

The id is taken from the configured claim (`id` by default) and falls back to
`sub`. Missing header, bad signature, expired token and missing claim are all
reported as AuthenticationError (401).
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from notekeeper.config import settings
from notekeeper.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

# auto_error=False: a missing header is reported through our own 401 envelope
bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(data: Dict[str, Any]) -> str:
    """Sign a token with the shared secret. Used by tests and local tooling."""
    return jwt.encode(data.copy(), settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_user_id(token: str) -> str:
    """Verify `token` and return the user id it carries."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.warning("Bearer token rejected: %s", str(e))
        raise AuthenticationError()

    user_id = payload.get(settings.jwt_user_claim) or payload.get("sub")
    if not user_id:
        logger.warning("Bearer token has no '%s' or 'sub' claim", settings.jwt_user_claim)
        raise AuthenticationError()
    return str(user_id)


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """FastAPI dependency returning the authenticated caller's id."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()
    return decode_user_id(credentials.credentials)
