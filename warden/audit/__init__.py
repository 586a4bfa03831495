"""Tamper-evident, hash-chained audit log."""

from warden.audit.chain import HashChainAuditLog, verify_entries
from warden.audit.export import export_csv
from warden.audit.hashing import CANONICAL_VERSION, GENESIS_HASH, compute_entry_hash
from warden.audit.recorders import AuditRecorder
from warden.audit.store import AuditLogStore

__all__ = [
    "CANONICAL_VERSION",
    "GENESIS_HASH",
    "AuditLogStore",
    "AuditRecorder",
    "HashChainAuditLog",
    "compute_entry_hash",
    "export_csv",
    "verify_entries",
]
