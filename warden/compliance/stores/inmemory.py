"""In-memory implementation of ComplianceStore."""

import asyncio

from warden.compliance.models import ComplianceRecord
from warden.compliance.store import ComplianceStore
from warden.errors import ConflictError


class InMemoryComplianceStore(ComplianceStore):
    """In-memory implementation of ComplianceStore for testing and development.

    Stores deep copies so callers can never mutate stored state.
    Not suitable for production use.
    """

    def __init__(self) -> None:
        """Initialize empty storage."""
        self._records: dict[str, ComplianceRecord] = {}
        self._by_contact: dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def get(self, record_id: str) -> ComplianceRecord | None:
        """Get a record by ID."""
        record = self._records.get(record_id)
        return record.model_copy(deep=True) if record else None

    async def get_by_contact(self, contact_id: str) -> ComplianceRecord | None:
        """Get the record for a contact."""
        record_id = self._by_contact.get(contact_id)
        return await self.get(record_id) if record_id else None

    async def list_all(self) -> list[ComplianceRecord]:
        """List all records, oldest first."""
        records = sorted(self._records.values(), key=lambda r: r.created_at)
        return [r.model_copy(deep=True) for r in records]

    async def put(
        self, record: ComplianceRecord, expected_version: int | None
    ) -> ComplianceRecord:
        """Insert or update a record."""
        async with self._lock:
            current = self._records.get(record.id)
            if expected_version is None:
                if current is not None:
                    raise ConflictError(f"Compliance record already exists: {record.id}")
                if record.contact_id in self._by_contact:
                    raise ConflictError(
                        f"Compliance record already exists for contact: {record.contact_id}"
                    )
                version = 1
            else:
                if current is None or current.version != expected_version:
                    found = current.version if current else None
                    raise ConflictError(
                        f"Compliance record {record.id} is at version {found}, "
                        f"expected {expected_version}"
                    )
                if current.contact_id != record.contact_id:
                    raise ConflictError(f"Compliance record {record.id} cannot change contact")
                version = expected_version + 1

            stored = record.model_copy(update={"version": version}, deep=True)
            self._records[stored.id] = stored
            self._by_contact[stored.contact_id] = stored.id
            return stored.model_copy(deep=True)
