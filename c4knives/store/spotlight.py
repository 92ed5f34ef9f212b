"""The homepage spotlight: a single record under a fixed id.

Creation is an upsert on that id, so concurrent first writes cannot leave two
spotlights behind.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from c4knives.util.time import utcnow_iso

from .common import merge_fields, set_clause, to_columns


SPOTLIGHT_ID = "current"

SPOTLIGHT_COLUMNS: Dict[str, str] = {
    "title": "title",
    "description": "description",
    "imageUrl": "image_url",
    "videoUrl": "video_url",
    "productId": "product_id",
}

# None on update unlinks the product.
NULLABLE_FIELDS = ("productId",)


def spotlight_to_dict(row: Any) -> Dict[str, Any]:
    d = dict(row)
    return {
        "id": d["id"],
        "title": d["title"],
        "description": d["description"],
        "imageUrl": d["image_url"],
        "videoUrl": d["video_url"],
        "productId": d["product_id"],
        "updatedAt": d["updated_at"],
    }


def find_spotlight(conn: Any) -> Optional[Dict[str, Any]]:
    """The spotlight, or None if it was never written."""
    row = conn.execute("SELECT * FROM spotlight WHERE id=?", (SPOTLIGHT_ID,)).fetchone()
    return spotlight_to_dict(row) if row is not None else None


def get_or_create_spotlight(conn: Any) -> Dict[str, Any]:
    conn.execute(
        "INSERT INTO spotlight (id, updated_at) VALUES (?, ?) ON CONFLICT (id) DO NOTHING",
        (SPOTLIGHT_ID, utcnow_iso()),
    )
    found = find_spotlight(conn)
    if found is None:
        raise RuntimeError("spotlight row missing after upsert")
    return found


def update_spotlight(conn: Any, changes: Mapping[str, Any]) -> Dict[str, Any]:
    current = get_or_create_spotlight(conn)
    merged = merge_fields(current, changes, SPOTLIGHT_COLUMNS, NULLABLE_FIELDS)
    values = to_columns(merged, SPOTLIGHT_COLUMNS)
    values["updated_at"] = utcnow_iso()
    sets, params = set_clause(values)
    conn.execute(f"UPDATE spotlight SET {sets} WHERE id=?", params + [SPOTLIGHT_ID])
    return get_or_create_spotlight(conn)
