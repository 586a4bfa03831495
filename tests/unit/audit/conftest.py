"""Fixtures for audit log tests."""

import pytest

from warden.audit.chain import HashChainAuditLog
from warden.audit.stores.inmemory import InMemoryAuditLogStore
from warden.config.models.audit import AuditConfig


@pytest.fixture
def store() -> InMemoryAuditLogStore:
    """Create a fresh store for each test."""
    return InMemoryAuditLogStore()


@pytest.fixture
def audit_log(store: InMemoryAuditLogStore, clock) -> HashChainAuditLog:
    """Audit log without a capacity limit."""
    return HashChainAuditLog(store, AuditConfig(max_entries=None), clock=clock)
