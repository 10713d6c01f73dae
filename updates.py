"""
Allow-listed partial updates.

Each entity declares its updatable columns as a dataclass of optional
fields. A request payload is narrowed to those fields (camelCase or
snake_case keys) and anything else is dropped. Kept values are converted
to the declared field type; only the fields that were actually set become
SET clauses.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, ClassVar, Iterator, get_args, get_type_hints

from database import get_db, now_iso
from errors import ValidationError


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _coerce(name: str, kind: type, value: Any) -> Any:
    """Convert `value` to the declared column type or fail with 400."""
    if kind is str:
        if not isinstance(value, str):
            raise ValidationError(f"{_camel(name)} must be a string")
        return value
    # JSON true/false would otherwise pass as 1/0
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValidationError(f"{_camel(name)} must be a number")
    try:
        return kind(value)
    except (OverflowError, ValueError):
        raise ValidationError(f"{_camel(name)} must be a number")


@dataclass
class FieldUpdate:
    """Base for per-entity update structures. Unset fields stay None."""

    table: ClassVar[str] = ""

    @classmethod
    def column_types(cls) -> dict[str, type]:
        """Field name to its scalar type, unwrapping Optional[...]."""
        hints = get_type_hints(cls)
        types = {}
        for f in fields(cls):
            args = [a for a in get_args(hints[f.name]) if a is not type(None)]
            types[f.name] = args[0] if args else hints[f.name]
        return types

    @classmethod
    def from_payload(cls, payload: dict[str, Any]):
        types = cls.column_types()
        values = {}
        for f in fields(cls):
            for key in (f.name, _camel(f.name)):
                if payload.get(key) is not None:
                    values[f.name] = _coerce(f.name, types[f.name], payload[key])
                    break
        return cls(**values)

    def assignments(self) -> Iterator[tuple[str, Any]]:
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None:
                yield f.name, value


def apply_update(update: FieldUpdate, row_id: int) -> bool:
    """Write the set fields of `update` to row `row_id`. Returns True if a row changed."""
    pairs = list(update.assignments())
    if not pairs:
        raise ValidationError("No valid fields to update")

    columns = ", ".join(f"{name} = ?" for name, _ in pairs)
    params = [value for _, value in pairs]
    params.extend([now_iso(), row_id])

    db = get_db()
    cur = db.execute(
        f"UPDATE {update.table} SET {columns}, updated_at = ? WHERE id = ?",
        params,
    )
    db.commit()
    return cur.rowcount > 0
