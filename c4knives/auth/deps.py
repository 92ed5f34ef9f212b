from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import Depends, Header, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from c4knives.db import connect
from c4knives.errors import Unauthenticated

from .crud import get_admin_by_id, public_admin
from .tokens import verify_token


AUTH_HEADER = "x-auth-token"

_bearer = HTTPBearer(auto_error=False)


def _debug(msg: str) -> None:
    print(f"[auth] {msg}")


def require_admin(
    request: Request,
    x_auth_token: Optional[str] = Header(default=None, alias=AUTH_HEADER),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> Dict[str, Any]:
    """Admit the request only if it carries a valid token for the stored admin.

    The token is read from `x-auth-token` (what the React client sends). An
    `Authorization: Bearer <token>` header is accepted as a fallback for scripts.

    Every failure raises the same Unauthenticated so clients cannot tell a
    missing token from an expired or forged one.
    """

    cfg = getattr(request.app.state, "cfg", None)
    if cfg is None:
        raise RuntimeError("server_config_missing")

    token = x_auth_token
    if not token and credentials is not None and credentials.credentials:
        token = credentials.credentials

    admin_id = verify_token(cfg, token)

    with connect(cfg.DB_DSN) as conn:
        row = get_admin_by_id(conn, admin_id)
    if row is None:
        _debug(f"token subject does not match the admin account: {admin_id}")
        raise Unauthenticated()

    request.state.admin_id = admin_id
    return public_admin(row)
