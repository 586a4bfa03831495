"""Tests for InMemoryComplianceStore."""

import pytest

from warden.compliance.models import ComplianceRecord, KYCStatus
from warden.compliance.stores.inmemory import InMemoryComplianceStore
from warden.errors import ConflictError


def _record(contact_id: str = "contact-1") -> ComplianceRecord:
    return ComplianceRecord(contact_id=contact_id, contact_name="Acme", created_by="user-1")


@pytest.fixture
def store():
    return InMemoryComplianceStore()


class TestInMemoryComplianceStore:
    """Tests for insert, update and lookup."""

    @pytest.mark.asyncio
    async def test_insert_sets_version(self, store):
        stored = await store.put(_record(), expected_version=None)

        assert stored.version == 1
        assert await store.get(stored.id) == stored
        assert await store.get_by_contact("contact-1") == stored

    @pytest.mark.asyncio
    async def test_get_missing(self, store):
        assert await store.get("kyc_missing") is None
        assert await store.get_by_contact("contact-404") is None

    @pytest.mark.asyncio
    async def test_returned_copies_are_isolated(self, store):
        """Mutating a returned record does not change stored state."""
        stored = await store.put(_record(), expected_version=None)

        fetched = await store.get(stored.id)
        fetched.status = KYCStatus.APPROVED
        fetched.history.clear()

        assert (await store.get(stored.id)).status == KYCStatus.DRAFT

    @pytest.mark.asyncio
    async def test_duplicate_contact(self, store):
        await store.put(_record(), expected_version=None)

        with pytest.raises(ConflictError, match="contact"):
            await store.put(_record(), expected_version=None)

    @pytest.mark.asyncio
    async def test_duplicate_id(self, store):
        stored = await store.put(_record(), expected_version=None)
        clone = stored.model_copy(update={"contact_id": "contact-2"})

        with pytest.raises(ConflictError):
            await store.put(clone, expected_version=None)

    @pytest.mark.asyncio
    async def test_update_bumps_version(self, store):
        stored = await store.put(_record(), expected_version=None)
        stored.status = KYCStatus.PENDING_REVIEW

        updated = await store.put(stored, expected_version=1)

        assert updated.version == 2
        assert (await store.get(stored.id)).status == KYCStatus.PENDING_REVIEW

    @pytest.mark.asyncio
    async def test_stale_update(self, store):
        stored = await store.put(_record(), expected_version=None)
        await store.put(stored, expected_version=1)

        with pytest.raises(ConflictError, match="expected 1"):
            await store.put(stored, expected_version=1)

    @pytest.mark.asyncio
    async def test_update_missing_record(self, store):
        with pytest.raises(ConflictError):
            await store.put(_record(), expected_version=1)

    @pytest.mark.asyncio
    async def test_contact_cannot_change(self, store):
        stored = await store.put(_record(), expected_version=None)
        moved = stored.model_copy(update={"contact_id": "contact-2"})

        with pytest.raises(ConflictError):
            await store.put(moved, expected_version=1)

    @pytest.mark.asyncio
    async def test_list_all_oldest_first(self, store):
        first = await store.put(_record("contact-1"), expected_version=None)
        second = await store.put(_record("contact-2"), expected_version=None)

        assert [r.id for r in await store.list_all()] == [first.id, second.id]
