"""Fixtures for compliance tests."""

import pytest
import pytest_asyncio

from warden.compliance.stores.inmemory import InMemoryComplianceStore
from warden.compliance.workflow import ComplianceWorkflow


@pytest.fixture
def compliance_store():
    return InMemoryComplianceStore()


@pytest.fixture
def workflow(compliance_store, clock):
    """Workflow with default configuration and the test clock."""
    return ComplianceWorkflow(compliance_store, clock=clock)


@pytest_asyncio.fixture
async def record(workflow, actor):
    """A fresh draft record for contact-1."""
    return await workflow.create_record("contact-1", "Acme Traders", actor)
