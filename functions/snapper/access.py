"""
Caller identity and the group read gate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from snapper.config import Settings, get_settings
from snapper.db import DbClient
from snapper.errors import Forbidden, NotFound

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Identity:
    user_id: str
    email: Optional[str] = None


def decode_identity(
    token: Optional[str], secret: Optional[str], algorithm: str = "HS256"
) -> Optional[Identity]:
    """Return the identity carried by a session token, or None."""
    if not token or not secret:
        return None
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
    except JWTError as exc:
        logger.info("Rejected session token: %s", exc)
        return None
    user_id = payload.get("id") or payload.get("sub")
    if not user_id:
        return None
    return Identity(user_id=str(user_id), email=payload.get("email"))


def get_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> Optional[Identity]:
    token = credentials.credentials if credentials else None
    if not token:
        token = request.cookies.get(settings.session_cookie_name)
    return decode_identity(token, settings.jwt_secret, settings.jwt_algorithm)


def require_identity(
    identity: Optional[Identity] = Depends(get_identity),
) -> Identity:
    if identity is None:
        raise Forbidden("Forbidden")
    return identity


class AccessGate:
    """
    Decides whether the caller may read a group.

    Any signed-in caller is let through; membership is enforced by the
    group management endpoints, not here. Anonymous callers only see groups
    whose access policy is ``public``.
    """

    def __init__(self, db: DbClient):
        self.db = db

    def check(self, identity: Optional[Identity], group_id: int) -> None:
        if identity is not None:
            return
        group = self.db.get_group(group_id)
        if group is None:
            raise NotFound("Group not found")
        if not group.is_public:
            raise Forbidden("Forbidden")
