"""Token issue/verify for the admin login flow."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Tuple

import jwt

from c4knives.config import Config
from c4knives.errors import InvalidCredentials, Unauthenticated

from .crud import get_admin_by_username, public_admin
from .security import create_access_token, decode_access_token, dummy_verify, verify_password


def issue_token(
    conn: Any,
    cfg: Config,
    username: str,
    password: str,
    *,
    now: datetime | None = None,
) -> Tuple[str, Dict[str, Any]]:
    """Check a username/password pair and sign a 24h token for the admin.

    Unknown username and wrong password raise the same InvalidCredentials.
    """
    row = get_admin_by_username(conn, username)
    if row is None:
        # Keep the failure path as slow as a real password check.
        dummy_verify()
        raise InvalidCredentials()
    if not verify_password(password, str(row["password_hash"])):
        raise InvalidCredentials()

    admin = public_admin(row)
    token = create_access_token(secret=cfg.AUTH_JWT_SECRET, admin_id=admin["id"], now=now)
    return token, admin


def verify_token(cfg: Config, token: str | None) -> str:
    """Return the admin id a token was issued for, or raise Unauthenticated."""
    if not token or not token.strip():
        raise Unauthenticated()

    try:
        payload = decode_access_token(token=token.strip(), secret=cfg.AUTH_JWT_SECRET)
    except (jwt.InvalidTokenError, ValueError):
        raise Unauthenticated()

    sub = payload.get("sub")
    if not sub or not isinstance(sub, str):
        raise Unauthenticated()
    return sub
