from __future__ import annotations

from typing import Any, Dict, Optional

from c4knives.config import Config
from c4knives.db import connect
from c4knives.util.ids import new_id
from c4knives.util.time import utcnow_iso

from .security import hash_password


def public_admin(row: Any | Dict[str, Any]) -> Dict[str, Any]:
    """The admin as returned to clients: id + username, never the hash."""
    d = dict(row)
    return {"id": str(d["admin_id"]), "username": str(d["username"])}


def count_admins(conn: Any) -> int:
    row = conn.execute("SELECT COUNT(*) AS n FROM admins").fetchone()
    return int(row["n"])


def get_admin_by_username(conn: Any, username: str) -> Optional[Any]:
    # Exact, case-sensitive match.
    if not username:
        return None
    return conn.execute(
        "SELECT * FROM admins WHERE username=?",
        (username,),
    ).fetchone()


def get_admin_by_id(conn: Any, admin_id: str) -> Optional[Any]:
    if not admin_id:
        return None
    return conn.execute(
        "SELECT * FROM admins WHERE admin_id=?",
        (str(admin_id),),
    ).fetchone()


def create_admin(conn: Any, *, username: str, password: str) -> Optional[Dict[str, Any]]:
    """Insert the admin credential unless one already exists.

    The singleton slot makes the insert a no-op when another admin row is
    present, so this never overwrites or duplicates. Returns the new public
    admin, or None when nothing was inserted.
    """
    if not username:
        raise ValueError("username_blank")

    cur = conn.execute(
        """
        INSERT INTO admins (admin_id, slot, username, password_hash, created_at)
        VALUES (?,1,?,?,?)
        ON CONFLICT DO NOTHING
        """,
        (new_id(), username, hash_password(password), utcnow_iso()),
    )
    if not cur.rowcount:
        return None
    row = get_admin_by_username(conn, username)
    if row is None:
        raise RuntimeError("admin row missing after insert")
    return public_admin(row)


def bootstrap_admin_if_needed(cfg: Config) -> Optional[Dict[str, Any]]:
    """Create the admin account if the admins table is empty.

    Controlled via environment variables so a new clone has a deterministic way to log in.

    - AUTH_BOOTSTRAP_ADMIN_USERNAME (default: admin)
    - AUTH_BOOTSTRAP_ADMIN_PASSWORD (default: admin123)

    Never touches an existing admin.
    """

    with connect(cfg.DB_DSN) as conn:
        if count_admins(conn) > 0:
            return None

        username = (cfg.AUTH_BOOTSTRAP_ADMIN_USERNAME or "").strip()
        password = cfg.AUTH_BOOTSTRAP_ADMIN_PASSWORD or ""

        # If env explicitly clears these, don't create anything.
        if not username or not password:
            return None

        return create_admin(conn, username=username, password=password)
