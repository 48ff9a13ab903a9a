"""Validation and canonicalization of raw entry payloads."""

from __future__ import annotations

import math
from datetime import date as date_type
from datetime import datetime, time, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Mapping, Optional, Type, TypeVar

from .errors import EntryValidationError
from .models import Category, EntryPatch, EntryType, NewEntry, ensure_utc, utcnow

__all__ = [
    "MAX_DESCRIPTION_LENGTH",
    "normalize_entry_patch",
    "normalize_new_entry",
    "parse_category",
    "parse_datetime",
    "parse_entry_type",
    "signed_amount",
]

MAX_DESCRIPTION_LENGTH = 200
REQUIRED_FIELDS = ("description", "category", "amount", "type")
FIELD_LABELS = {
    "description": "Description",
    "category": "Category",
    "amount": "Amount",
    "type": "Type",
    "date": "Date",
}

EnumT = TypeVar("EnumT", Category, EntryType)


def signed_amount(entry_type: EntryType, magnitude: float) -> float:
    """Expenses are stored negative and income positive."""

    value = abs(magnitude)
    return -value if entry_type is EntryType.EXPENSE else value


def normalize_new_entry(
    owner_id: str,
    fields: Mapping[str, Any],
    *,
    now: Optional[datetime] = None,
) -> NewEntry:
    """Validate a create payload and return the canonical record to persist."""

    errors: Dict[str, str] = {}
    for name in REQUIRED_FIELDS:
        if _is_blank(fields.get(name)):
            errors[name] = f"{FIELD_LABELS[name]} is required"

    description = _collect(errors, "description", fields, parse_description)
    category = _collect(errors, "category", fields, parse_category)
    entry_type = _collect(errors, "type", fields, parse_entry_type)
    amount = _collect(errors, "amount", fields, parse_amount)
    entry_date = _collect(errors, "date", fields, parse_datetime)

    if errors:
        raise _validation_failure(errors)

    return NewEntry(
        owner_id=owner_id,
        date=entry_date or now or utcnow(),
        description=description,
        category=category,
        entry_type=entry_type,
        amount=signed_amount(entry_type, amount),
    )


def normalize_entry_patch(fields: Mapping[str, Any]) -> EntryPatch:
    """Validate the supplied subset of fields for a partial update.

    `None` values are treated as "not supplied"; every other value must pass
    the same rules as on create.
    """

    errors: Dict[str, str] = {}
    supplied = {key: value for key, value in fields.items() if value is not None}
    for name in REQUIRED_FIELDS:
        if name in supplied and _is_blank(supplied[name]):
            errors[name] = f"{FIELD_LABELS[name]} cannot be empty"

    description = _collect(errors, "description", supplied, parse_description)
    category = _collect(errors, "category", supplied, parse_category)
    entry_type = _collect(errors, "type", supplied, parse_entry_type)
    amount = _collect(errors, "amount", supplied, parse_amount)
    entry_date = _collect(errors, "date", supplied, parse_datetime)

    if errors:
        raise _validation_failure(errors)

    return EntryPatch(
        description=description,
        category=category,
        entry_type=entry_type,
        date=entry_date,
        amount_magnitude=abs(amount) if amount is not None else None,
    )


def parse_description(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError("Description must be text")
    cleaned = value.strip()
    if not cleaned:
        raise ValueError("Description is required")
    if len(cleaned) > MAX_DESCRIPTION_LENGTH:
        raise ValueError(
            f"Description cannot exceed {MAX_DESCRIPTION_LENGTH} characters"
        )
    return cleaned


def parse_category(value: Any) -> Category:
    return _parse_enum(Category, value, "Invalid category")


def parse_entry_type(value: Any) -> EntryType:
    return _parse_enum(EntryType, value, "Type must be either income or expense")


def parse_amount(value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError("Amount must be a number")
    if isinstance(value, (int, float, Decimal)):
        amount = float(value)
    elif isinstance(value, str):
        try:
            amount = float(Decimal(value.strip()))
        except (InvalidOperation, ValueError) as exc:
            raise ValueError("Amount must be a number") from exc
    else:
        raise ValueError("Amount must be a number")
    if not math.isfinite(amount):
        raise ValueError("Amount must be a finite number")
    if amount == 0:
        raise ValueError("Amount cannot be zero")
    return amount


def parse_datetime(value: Any) -> datetime:
    """Accept datetimes, dates, and ISO-8601 strings; return aware UTC."""

    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, date_type):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = f"{text[:-1]}+00:00"
        try:
            return ensure_utc(datetime.fromisoformat(text))
        except ValueError as exc:
            raise ValueError("Date must be an ISO-8601 timestamp") from exc
    raise ValueError("Date must be an ISO-8601 timestamp")


def _parse_enum(enum_cls: Type[EnumT], value: Any, message: str) -> EnumT:
    if isinstance(value, enum_cls):
        return value
    if not isinstance(value, str):
        raise ValueError(message)
    try:
        return enum_cls(value.strip().lower())
    except ValueError as exc:
        raise ValueError(message) from exc


def _collect(
    errors: Dict[str, str],
    name: str,
    fields: Mapping[str, Any],
    parser: Callable[[Any], Any],
) -> Any:
    if name in errors:
        return None
    value = fields.get(name)
    if _is_blank(value):
        return None
    try:
        return parser(value)
    except ValueError as exc:
        errors[name] = str(exc)
        return None


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def _validation_failure(errors: Dict[str, str]) -> EntryValidationError:
    message = "; ".join(errors.values())
    return EntryValidationError(message, details={"fields": dict(errors)})
