"""Database schema for the C4 Knives storefront.

SQLite is the default store; Postgres is supported for deployments.

Timestamps are ISO-8601 TEXT (UTC, with 'Z') for portability. ISO strings sort
lexicographically in time order, so `ORDER BY created_at DESC` is newest first.

Public ids are 32-char hex strings (uuid4). Collections also carry an
autoincrement `row_id` so rows created within the same second still sort in
insertion order.

NOTE: The Postgres schema is generated from the SQLite schema with a small set of
transformations (types + autoincrement).
"""

from __future__ import annotations

import re


SCHEMA_SQLITE = r"""
PRAGMA foreign_keys = ON;

-- Admin credential
-- NOTE: `slot` is UNIQUE and pinned to 1, so the table can never hold more
-- than one admin even if two processes bootstrap at the same time.
CREATE TABLE IF NOT EXISTS admins (
    admin_id TEXT PRIMARY KEY,
    slot INTEGER NOT NULL DEFAULT 1 UNIQUE CHECK (slot = 1),
    username TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS products (
    row_id INTEGER PRIMARY KEY AUTOINCREMENT,
    id TEXT NOT NULL UNIQUE,
    name TEXT NOT NULL,
    description TEXT NOT NULL,
    price REAL NOT NULL DEFAULT 0 CHECK (price >= 0),
    image_url TEXT NOT NULL,
    tags_json TEXT NOT NULL DEFAULT '[]',
    is_currently_available INTEGER NOT NULL DEFAULT 0,
    sequence_id INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_products_created ON products (created_at);

CREATE TABLE IF NOT EXISTS testimonials (
    row_id INTEGER PRIMARY KEY AUTOINCREMENT,
    id TEXT NOT NULL UNIQUE,
    name TEXT NOT NULL,
    role TEXT NOT NULL,
    content TEXT NOT NULL,
    rating INTEGER NOT NULL CHECK (rating BETWEEN 1 AND 5),
    image_url TEXT,
    created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_testimonials_created ON testimonials (created_at);

CREATE TABLE IF NOT EXISTS contact_messages (
    row_id INTEGER PRIMARY KEY AUTOINCREMENT,
    id TEXT NOT NULL UNIQUE,
    name TEXT NOT NULL,
    email TEXT NOT NULL,
    message TEXT NOT NULL,
    created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_contact_messages_created ON contact_messages (created_at);

-- Singletons: one row each, keyed by a fixed id.
CREATE TABLE IF NOT EXISTS spotlight (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL DEFAULT '',
    description TEXT NOT NULL DEFAULT '',
    image_url TEXT NOT NULL DEFAULT '',
    video_url TEXT NOT NULL DEFAULT '',
    product_id TEXT,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS site_metadata (
    id TEXT PRIMARY KEY,
    knife_counter INTEGER NOT NULL DEFAULT 0 CHECK (knife_counter >= 0),
    email TEXT NOT NULL DEFAULT '',
    phone TEXT NOT NULL DEFAULT '',
    address TEXT NOT NULL DEFAULT '',
    instagram TEXT NOT NULL DEFAULT '',
    facebook TEXT NOT NULL DEFAULT '',
    youtube TEXT NOT NULL DEFAULT '',
    updated_at TEXT NOT NULL
);
"""


def _sqlite_to_postgres(ddl: str) -> str:
    # Remove SQLite pragmas
    lines: list[str] = []
    for line in ddl.splitlines():
        if line.strip().upper().startswith("PRAGMA "):
            continue
        lines.append(line)
    out = "\n".join(lines)

    # Types
    out = re.sub(r"\bREAL\b", "DOUBLE PRECISION", out)

    # AUTOINCREMENT primary keys
    out = re.sub(
        r"INTEGER\s+PRIMARY\s+KEY\s+AUTOINCREMENT",
        "BIGSERIAL PRIMARY KEY",
        out,
        flags=re.IGNORECASE,
    )
    out = re.sub(r"\bAUTOINCREMENT\b", "", out, flags=re.IGNORECASE)

    return out


SCHEMA_POSTGRES = _sqlite_to_postgres(SCHEMA_SQLITE)


def get_schema_sql(dialect: str) -> str:
    d = (dialect or "").lower()
    if d.startswith("post"):
        return SCHEMA_POSTGRES
    return SCHEMA_SQLITE
