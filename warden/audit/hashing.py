"""Canonical serialization and SHA-256 hashing for audit entries.

The canonical form is compact JSON over the hashed fields in a fixed
order. Absent optional fields are omitted rather than written as null,
timestamps are epoch milliseconds, and keys inside `details` are sorted.
Changing any of this breaks verification of existing chains, so the
layout is versioned by CANONICAL_VERSION.
"""

import hashlib
import json
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from pydantic import BaseModel

from warden.audit.models import AuditEntry, truncate_ms

GENESIS_HASH = "0" * 64
CANONICAL_VERSION = 1

HASHED_FIELDS = (
    "id",
    "userId",
    "userEmail",
    "action",
    "targetId",
    "targetType",
    "details",
    "ipAddress",
    "userAgent",
    "timestamp",
    "previousHash",
)


def to_epoch_ms(value: datetime) -> int:
    """Convert a datetime to integer milliseconds since the epoch."""
    value = truncate_ms(value)
    return int(value.timestamp()) * 1000 + value.microsecond // 1000


def _sorted(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _sorted(value[key]) for key in sorted(value)}
    if isinstance(value, list | tuple):
        return [_sorted(item) for item in value]
    return value


def details_payload(details: BaseModel | None) -> dict[str, Any] | None:
    """JSON form of a details variant with unset keys and empty `extra` dropped."""
    if details is None:
        return None
    payload = details.model_dump(mode="json", by_alias=True, exclude_none=True)
    if not payload.get("extra"):
        payload.pop("extra", None)
    return payload


def entry_fields(entry: AuditEntry) -> dict[str, Any]:
    """Extract the hashed fields of an entry under their durable names."""
    return {
        "id": entry.id,
        "userId": entry.user_id,
        "userEmail": entry.user_email,
        "action": entry.action.value,
        "targetId": entry.target_id,
        "targetType": entry.target_type.value if entry.target_type else None,
        "details": details_payload(entry.details),
        "ipAddress": entry.ip_address,
        "userAgent": entry.user_agent,
        "timestamp": entry.timestamp,
        "previousHash": entry.previous_hash,
    }


def canonicalize(fields: Mapping[str, Any], version: int = CANONICAL_VERSION) -> bytes:
    """Serialize hashed fields to canonical bytes.

    Args:
        fields: Mapping keyed by HASHED_FIELDS names; extra keys are ignored
        version: Canonical layout version

    Returns:
        UTF-8 encoded canonical JSON
    """
    if version != CANONICAL_VERSION:
        raise ValueError(f"Unsupported canonical version: {version}")

    payload: dict[str, Any] = {}
    for name in HASHED_FIELDS:
        value = fields.get(name)
        if value is None:
            continue
        if isinstance(value, datetime):
            value = to_epoch_ms(value)
        elif name == "details":
            value = _sorted(value)
        payload[name] = value

    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def sha256_hex(data: bytes) -> str:
    """Lowercase hex SHA-256 digest."""
    return hashlib.sha256(data).hexdigest()


def compute_entry_hash(entry: AuditEntry | Mapping[str, Any]) -> str:
    """Hash an entry (or its field mapping) over every field except `hash`."""
    fields = entry_fields(entry) if isinstance(entry, AuditEntry) else entry
    return sha256_hex(canonicalize(fields))


def segment_digest(hashes: Iterable[str]) -> str:
    """Digest over an ordered run of entry hashes, used by checkpoints."""
    digest = hashlib.sha256()
    for entry_hash in hashes:
        digest.update(entry_hash.encode("ascii"))
    return digest.hexdigest()
