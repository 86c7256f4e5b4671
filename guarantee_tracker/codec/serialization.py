"""Conversion between guarantee records and plain dict payloads."""

from dataclasses import fields
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from guarantee_tracker.models import (
    ChangeEvent,
    ChangeKind,
    GuaranteeRecord,
    GuaranteeStatus,
)


def record_to_dict(record: Any) -> dict:
    """Convert a record dataclass without deep copy.

    Parameters
    ----------
    record : Any
        A flat dataclass instance (``GuaranteeRecord``, ``NewGuarantee``).

    Returns
    -------
    dict
        Serialized dictionary.
    """
    return {f.name: serialize_value(getattr(record, f.name)) for f in fields(record)}


def serialize_value(value: Any) -> Any:
    """Serialize a value for JSON output."""
    if isinstance(value, Decimal):
        return str(value)
    elif isinstance(value, Enum):
        return value.value
    elif isinstance(value, datetime):
        return value.isoformat()
    elif isinstance(value, date):
        return value.isoformat()
    elif isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [serialize_value(v) for v in value]
    return value


def record_from_dict(data: dict[str, Any]) -> GuaranteeRecord:
    """Build a record from a row or JSON payload.

    Raises
    ------
    ValueError
        If a field is missing or malformed.
    """
    if not isinstance(data, dict):
        raise ValueError(f"Guarantee payload must be an object, got {type(data).__name__}")
    try:
        return GuaranteeRecord(
            id=str(data["id"]),
            guarantee_number=data["guarantee_number"],
            guarantee_type=data["guarantee_type"],
            value=_to_decimal(data["value"]),
            currency=data["currency"],
            issue_date=_to_date(data["issue_date"]),
            expiry_date=_to_date(data["expiry_date"]),
            status=GuaranteeStatus(data["status"]),
            bank_name=data["bank_name"],
            created_at=_to_datetime(data["created_at"]),
            updated_at=_to_datetime(data["updated_at"]) if data.get("updated_at") else None,
        )
    except KeyError as e:
        raise ValueError(f"Missing field {e.args[0]!r} in guarantee payload") from e


def change_from_payload(payload: dict[str, Any]) -> ChangeEvent:
    """Decode a ``{eventType, new, old}`` change notification.

    Raises
    ------
    ValueError
        If the payload shape is not recognised.
    """
    try:
        kind = ChangeKind(str(payload.get("eventType", "")).upper())
    except ValueError as e:
        raise ValueError(f"Unknown change event type: {payload.get('eventType')!r}") from e

    if kind is ChangeKind.DELETE:
        old = payload.get("old") or {}
        if not isinstance(old, dict) or "id" not in old:
            raise ValueError("DELETE event without old.id")
        return ChangeEvent.delete(str(old["id"]))

    new = payload.get("new")
    if not new:
        raise ValueError(f"{kind.value} event without new record")
    if not isinstance(new, dict):
        raise ValueError(f"{kind.value} event with non-object new record")
    record = record_from_dict(new)
    if kind is ChangeKind.INSERT:
        return ChangeEvent.insert(record)
    return ChangeEvent.update(record)


def _to_decimal(value: Any) -> Decimal:
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Invalid decimal value: {value!r}") from e


def _to_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _to_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    # Postgres JSON renders "+00:00" offsets and sometimes a bare "Z"
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
