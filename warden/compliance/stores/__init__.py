"""ComplianceStore implementations."""

from warden.compliance.stores.inmemory import InMemoryComplianceStore
from warden.compliance.stores.postgres import PostgresComplianceStore

__all__ = [
    "InMemoryComplianceStore",
    "PostgresComplianceStore",
]
