from __future__ import annotations

from typing import Any, Dict, List, Mapping

from c4knives.errors import ValidationError
from c4knives.util.ids import new_id
from c4knives.util.time import utcnow_iso


REQUIRED_FIELDS = ("name", "email", "message")


def message_to_dict(row: Any) -> Dict[str, Any]:
    d = dict(row)
    return {
        "id": d["id"],
        "name": d["name"],
        "email": d["email"],
        "message": d["message"],
        "createdAt": d["created_at"],
    }


def create_message(conn: Any, fields: Mapping[str, Any]) -> Dict[str, Any]:
    """Save a message from the public contact form.

    Only presence is checked (non-blank name, email and message). Length and
    format rules live in the client form.
    """
    values = {k: str(fields.get(k) or "").strip() for k in REQUIRED_FIELDS}
    if not all(values.values()):
        raise ValidationError()

    msg_id = new_id()
    conn.execute(
        """
        INSERT INTO contact_messages (id, name, email, message, created_at)
        VALUES (?,?,?,?,?)
        """,
        (msg_id, values["name"], values["email"], values["message"], utcnow_iso()),
    )
    row = conn.execute("SELECT * FROM contact_messages WHERE id=?", (msg_id,)).fetchone()
    return message_to_dict(row)


def list_messages(conn: Any) -> List[Dict[str, Any]]:
    rows = conn.execute(
        "SELECT * FROM contact_messages ORDER BY created_at DESC, row_id DESC"
    ).fetchall()
    return [message_to_dict(r) for r in rows]
