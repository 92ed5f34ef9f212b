from __future__ import annotations

from typing import Any, Dict, Mapping

from c4knives.util.time import utcnow_iso

from .common import merge_fields, set_clause, to_columns


# Site-wide contact details and the knife counter shown on the homepage.
METADATA_ID = "site"

METADATA_COLUMNS: Dict[str, str] = {
    "knifeCounter": "knife_counter",
    "email": "email",
    "phone": "phone",
    "address": "address",
    "instagram": "instagram",
    "facebook": "facebook",
    "youtube": "youtube",
}


def metadata_to_dict(row: Any) -> Dict[str, Any]:
    d = dict(row)
    out: Dict[str, Any] = {"id": d["id"]}
    for field, col in METADATA_COLUMNS.items():
        out[field] = d[col]
    out["knifeCounter"] = int(out["knifeCounter"] or 0)
    out["updatedAt"] = d["updated_at"]
    return out


def get_or_create_metadata(conn: Any) -> Dict[str, Any]:
    """Return the metadata row, creating it with empty defaults on first read."""
    conn.execute(
        "INSERT INTO site_metadata (id, updated_at) VALUES (?, ?) ON CONFLICT (id) DO NOTHING",
        (METADATA_ID, utcnow_iso()),
    )
    row = conn.execute("SELECT * FROM site_metadata WHERE id=?", (METADATA_ID,)).fetchone()
    return metadata_to_dict(row)


def update_metadata(conn: Any, changes: Mapping[str, Any]) -> Dict[str, Any]:
    current = get_or_create_metadata(conn)
    merged = merge_fields(current, changes, METADATA_COLUMNS)
    values = to_columns(merged, METADATA_COLUMNS)
    values["updated_at"] = utcnow_iso()
    sets, params = set_clause(values)
    conn.execute(f"UPDATE site_metadata SET {sets} WHERE id=?", params + [METADATA_ID])
    return get_or_create_metadata(conn)
