"""AuditLogStore implementations."""

from warden.audit.stores.inmemory import InMemoryAuditLogStore
from warden.audit.stores.postgres import PostgresAuditLogStore

__all__ = [
    "InMemoryAuditLogStore",
    "PostgresAuditLogStore",
]
