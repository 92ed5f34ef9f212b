from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping

from c4knives.errors import NotFound
from c4knives.util.ids import is_valid_id, new_id
from c4knives.util.time import utcnow_iso

from .common import merge_fields, require_fields, set_clause, to_columns


# Wire field -> column. Also the allow-list for create/update.
PRODUCT_COLUMNS: Dict[str, str] = {
    "name": "name",
    "description": "description",
    "price": "price",
    "imageUrl": "image_url",
    "tags": "tags_json",
    "isCurrentlyAvailable": "is_currently_available",
    "sequenceId": "sequence_id",
}

PRODUCT_DEFAULTS: Dict[str, Any] = {
    "price": 0,
    "tags": [],
    "isCurrentlyAvailable": False,
    "sequenceId": 0,
}

REQUIRED_FIELDS = ("name", "description", "imageUrl")

NOT_FOUND_MSG = "Product not found"


def product_to_dict(row: Any) -> Dict[str, Any]:
    d = dict(row)
    try:
        tags = json.loads(d.get("tags_json") or "[]")
    except ValueError:
        tags = []
    return {
        "id": d["id"],
        "name": d["name"],
        "description": d["description"],
        "price": d["price"],
        "imageUrl": d["image_url"],
        "tags": tags,
        "isCurrentlyAvailable": bool(d["is_currently_available"]),
        "sequenceId": int(d["sequence_id"] or 0),
        "createdAt": d["created_at"],
    }


def _encode(record: Mapping[str, Any]) -> Dict[str, Any]:
    values = to_columns(record, PRODUCT_COLUMNS)
    if "tags_json" in values:
        values["tags_json"] = json.dumps(list(values["tags_json"] or []))
    if "is_currently_available" in values:
        values["is_currently_available"] = 1 if values["is_currently_available"] else 0
    return values


def _fetch(conn: Any, product_id: str) -> Any:
    if not is_valid_id(product_id):
        return None
    return conn.execute("SELECT * FROM products WHERE id=?", (product_id,)).fetchone()


def list_products(conn: Any) -> List[Dict[str, Any]]:
    rows = conn.execute("SELECT * FROM products ORDER BY created_at DESC, row_id DESC").fetchall()
    return [product_to_dict(r) for r in rows]


def get_product(conn: Any, product_id: str) -> Dict[str, Any]:
    row = _fetch(conn, product_id)
    if row is None:
        raise NotFound(NOT_FOUND_MSG)
    return product_to_dict(row)


def create_product(conn: Any, fields: Mapping[str, Any]) -> Dict[str, Any]:
    record = merge_fields(PRODUCT_DEFAULTS, fields, PRODUCT_COLUMNS)
    require_fields(record, REQUIRED_FIELDS)

    values = _encode(record)
    values["id"] = new_id()
    values["created_at"] = utcnow_iso()
    cols = list(values)
    conn.execute(
        f"INSERT INTO products ({', '.join(cols)}) VALUES ({', '.join('?' for _ in cols)})",
        [values[c] for c in cols],
    )
    return get_product(conn, values["id"])


def update_product(conn: Any, product_id: str, changes: Mapping[str, Any]) -> Dict[str, Any]:
    current = get_product(conn, product_id)
    merged = merge_fields(current, changes, PRODUCT_COLUMNS)
    require_fields(merged, REQUIRED_FIELDS)
    sets, params = set_clause(_encode(merged))
    conn.execute(f"UPDATE products SET {sets} WHERE id=?", params + [product_id])
    return get_product(conn, product_id)


def delete_product(conn: Any, product_id: str) -> None:
    if _fetch(conn, product_id) is None:
        raise NotFound(NOT_FOUND_MSG)
    conn.execute("DELETE FROM products WHERE id=?", (product_id,))
