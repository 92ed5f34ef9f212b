from __future__ import annotations

from typing import Any, Dict, List, Mapping

from c4knives.errors import NotFound
from c4knives.util.ids import is_valid_id, new_id
from c4knives.util.time import utcnow_iso

from .common import merge_fields, require_fields, set_clause, to_columns


TESTIMONIAL_COLUMNS: Dict[str, str] = {
    "name": "name",
    "role": "role",
    "content": "content",
    "rating": "rating",
    "imageUrl": "image_url",
}

REQUIRED_FIELDS = ("name", "role", "content", "rating")

# None on update clears these.
NULLABLE_FIELDS = ("imageUrl",)

NOT_FOUND_MSG = "Testimonial not found"


def testimonial_to_dict(row: Any) -> Dict[str, Any]:
    d = dict(row)
    return {
        "id": d["id"],
        "name": d["name"],
        "role": d["role"],
        "content": d["content"],
        "rating": int(d["rating"]),
        "imageUrl": d["image_url"],
        "createdAt": d["created_at"],
    }


def _fetch(conn: Any, testimonial_id: str) -> Any:
    if not is_valid_id(testimonial_id):
        return None
    return conn.execute("SELECT * FROM testimonials WHERE id=?", (testimonial_id,)).fetchone()


def list_testimonials(conn: Any) -> List[Dict[str, Any]]:
    rows = conn.execute("SELECT * FROM testimonials ORDER BY created_at DESC, row_id DESC").fetchall()
    return [testimonial_to_dict(r) for r in rows]


def get_testimonial(conn: Any, testimonial_id: str) -> Dict[str, Any]:
    row = _fetch(conn, testimonial_id)
    if row is None:
        raise NotFound(NOT_FOUND_MSG)
    return testimonial_to_dict(row)


def create_testimonial(conn: Any, fields: Mapping[str, Any]) -> Dict[str, Any]:
    record = merge_fields({}, fields, TESTIMONIAL_COLUMNS)
    require_fields(record, REQUIRED_FIELDS)

    values = to_columns(record, TESTIMONIAL_COLUMNS)
    values["id"] = new_id()
    values["created_at"] = utcnow_iso()
    cols = list(values)
    conn.execute(
        f"INSERT INTO testimonials ({', '.join(cols)}) VALUES ({', '.join('?' for _ in cols)})",
        [values[c] for c in cols],
    )
    return get_testimonial(conn, values["id"])


def update_testimonial(conn: Any, testimonial_id: str, changes: Mapping[str, Any]) -> Dict[str, Any]:
    current = get_testimonial(conn, testimonial_id)
    merged = merge_fields(current, changes, TESTIMONIAL_COLUMNS, NULLABLE_FIELDS)
    require_fields(merged, REQUIRED_FIELDS)
    sets, params = set_clause(to_columns(merged, TESTIMONIAL_COLUMNS))
    conn.execute(f"UPDATE testimonials SET {sets} WHERE id=?", params + [testimonial_id])
    return get_testimonial(conn, testimonial_id)


def delete_testimonial(conn: Any, testimonial_id: str) -> None:
    if _fetch(conn, testimonial_id) is None:
        raise NotFound(NOT_FOUND_MSG)
    conn.execute("DELETE FROM testimonials WHERE id=?", (testimonial_id,))
