"""Audit domain models.

Contains all Pydantic models for the hash-chained audit log:
- AuditEntry and the Actor/AuditTarget it records
- Typed details variants
- ChainVerification, AuditCheckpoint and AuditStats
"""

from warden.audit.models.details import (
    AuditDetails,
    ContactDetails,
    GenericDetails,
    SessionDetails,
    SettingsDetails,
    UserDetails,
    details_match_action,
)
from warden.audit.models.entry import (
    Actor,
    AuditEntry,
    AuditTarget,
    truncate_ms,
    utc_now,
)
from warden.audit.models.enums import AuditAction, TargetType
from warden.audit.models.verification import (
    AuditCheckpoint,
    AuditStats,
    ChainVerification,
)

__all__ = [
    "Actor",
    "AuditAction",
    "AuditCheckpoint",
    "AuditDetails",
    "AuditEntry",
    "AuditStats",
    "AuditTarget",
    "ChainVerification",
    "ContactDetails",
    "GenericDetails",
    "SessionDetails",
    "SettingsDetails",
    "TargetType",
    "UserDetails",
    "details_match_action",
    "truncate_ms",
    "utc_now",
]
