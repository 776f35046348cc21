from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from sqlalchemy import Boolean, Integer, String, Text, DateTime
from sqlalchemy.orm import DeclarativeMeta

from armory.extensions import db
from armory.models import ASSET_TYPES, ROLES
from armory.time_utils import parse_iso_datetime


# Integer columns are 32-bit signed; larger values overflow the database
MAX_INT = 2_147_483_647
MAX_QUANTITY = MAX_INT


class ValidationError(ValueError):
    """400-level input problem."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., duplicate base name)."""


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: JSON key -> model attribute the client may set (security boundary)
    - required_on_create: JSON keys required for POST
    """
    writable_fields: dict[str, str]
    required_on_create: set[str] = field(default_factory=set)


PURCHASE_POLICY = ModelValidationPolicy(
    writable_fields={
        "assetId": "asset_id",
        "baseId": "base_id",
        "quantity": "quantity",
        "purchaseDate": "purchase_date",
    },
    required_on_create={"assetId", "baseId", "quantity", "purchaseDate"},
)

TRANSFER_POLICY = ModelValidationPolicy(
    writable_fields={
        "assetId": "asset_id",
        "fromBaseId": "from_base_id",
        "toBaseId": "to_base_id",
        "quantity": "quantity",
        "transferDate": "transfer_date",
    },
    required_on_create={"assetId", "fromBaseId", "toBaseId", "quantity", "transferDate"},
)

ASSIGNMENT_POLICY = ModelValidationPolicy(
    writable_fields={
        "assetId": "asset_id",
        "baseId": "base_id",
        "assignedTo": "assigned_to",
        "personnelId": "personnel_id",
        "quantity": "quantity",
        "assignedDate": "assigned_date",
        "reason": "reason",
    },
    required_on_create={"assetId", "baseId", "assignedTo", "quantity", "assignedDate"},
)

BASE_POLICY = ModelValidationPolicy(
    writable_fields={"name": "name", "location": "location"},
    required_on_create={"name", "location"},
)

ASSET_POLICY = ModelValidationPolicy(
    writable_fields={"type": "type", "description": "description"},
    required_on_create={"type", "description"},
)


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def _bounded_int(value: int, label: str) -> int:
    if value > MAX_INT or value < -MAX_INT - 1:
        raise ValidationError(f"{label} is out of range")
    return value


def _coerce_value(col, value: Any, label: str):
    coltype = col.type

    if value is None:
        return None

    # Integers - strict validation to reject floats and scientific notation
    if isinstance(coltype, Integer):
        # Already an int (but not bool which is a subclass of int)
        if isinstance(value, int) and not isinstance(value, bool):
            return _bounded_int(value, label)
        # String input - must be plain digits (with optional leading minus)
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                raise ValidationError(f"{label} must be an integer")
            if 'e' in stripped.lower():
                raise ValidationError(f"{label} must be a plain integer (scientific notation not allowed)")
            if '.' in stripped:
                raise ValidationError(f"{label} must be an integer (no decimals)")
            try:
                parsed = int(stripped)
            except ValueError:
                raise ValidationError(f"{label} must be an integer")
            return _bounded_int(parsed, label)
        if isinstance(value, float):
            raise ValidationError(f"{label} must be an integer, not a decimal")
        raise ValidationError(f"{label} must be an integer")

    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        return bool(value)

    # Datetimes (accept ISO-8601 strings; normalize to UTC)
    if isinstance(coltype, DateTime):
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                dt = parse_iso_datetime(value)
            except ValueError:
                raise ValidationError(f"{label} must be an ISO-8601 datetime")
            if dt is None:
                raise ValidationError(f"{label} must be an ISO-8601 datetime")
            return dt
        raise ValidationError(f"{label} must be a datetime")

    if isinstance(coltype, (String, Text)):
        return str(value).strip()

    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned dict keyed by model attribute names.

    Unknown keys are rejected rather than ignored so a UI typo surfaces
    as a 400 instead of a silently dropped field.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    if not partial:
        missing = sorted(f for f in policy.required_on_create if payload.get(f) in (None, ""))
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = _columns_by_key(model)

    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")

    cleaned: dict = {}

    for k, raw in payload.items():
        attr = policy.writable_fields[k]
        col = cols[attr]

        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null")
            cleaned[attr] = None
            continue

        val = _coerce_value(col, raw, k)

        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank")

        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        cleaned[attr] = val

    return cleaned


def enforce_positive_quantity(cleaned: dict) -> None:
    quantity = cleaned.get("quantity")
    if quantity is None or quantity <= 0:
        raise ValidationError("quantity must be > 0")
    if quantity > MAX_QUANTITY:
        raise ValidationError(f"quantity cannot exceed {MAX_QUANTITY:,}")


def enforce_rules_transfer(cleaned: dict) -> None:
    enforce_positive_quantity(cleaned)
    if cleaned.get("from_base_id") == cleaned.get("to_base_id"):
        raise ValidationError("fromBaseId and toBaseId must differ")


def enforce_rules_asset(cleaned: dict) -> None:
    if "type" in cleaned and cleaned["type"] not in ASSET_TYPES:
        raise ValidationError(f"type must be one of: {', '.join(ASSET_TYPES)}")


def enforce_rules_user(role: Any, email: Any) -> None:
    if role not in ROLES:
        raise ValidationError(f"role must be one of: {', '.join(ROLES)}")
    if not isinstance(email, str) or "@" not in email or email.startswith("@") or email.endswith("@"):
        raise ValidationError("email must be a valid email address")


def require_existing(model, pk: Any, label: str):
    """Resolve a referenced row or fail with a 400 naming the field."""
    row = db.session.get(model, pk)
    if row is None:
        raise ValidationError(f"{label} {pk} not found")
    return row
