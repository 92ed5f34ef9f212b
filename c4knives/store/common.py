from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping

from c4knives.errors import ValidationError


def merge_fields(
    current: Mapping[str, Any],
    changes: Mapping[str, Any] | None,
    allowed: Iterable[str],
    nullable: Iterable[str] = (),
) -> Dict[str, Any]:
    """Overlay `changes` on `current`, taking only keys in `allowed`.

    Unknown keys are ignored, not rejected. Values of None count as "not
    provided" and leave the current value in place, except for keys in
    `nullable`, where None clears the field.
    """
    allow = set(allowed)
    clearable = set(nullable)
    merged = dict(current)
    for key, value in (changes or {}).items():
        if key not in allow:
            continue
        if value is None and key not in clearable:
            continue
        merged[key] = value
    return merged


def to_columns(record: Mapping[str, Any], columns: Mapping[str, str]) -> Dict[str, Any]:
    """Map wire field names to column names (only fields present in `columns`)."""
    return {col: record[field] for field, col in columns.items() if field in record}


def set_clause(values: Mapping[str, Any]) -> tuple[str, list[Any]]:
    cols = list(values)
    return ", ".join(f"{c}=?" for c in cols), [values[c] for c in cols]


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def require_fields(record: Mapping[str, Any], names: Iterable[str]) -> None:
    """Raise ValidationError when a required field is absent or blank."""
    missing = [n for n in names if _blank(record.get(n))]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")
