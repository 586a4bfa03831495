"""ComplianceStore abstract interface."""

from abc import ABC, abstractmethod

from warden.compliance.models import ComplianceRecord


class ComplianceStore(ABC):
    """Abstract interface for compliance record storage.

    Records are written whole, so a status change, its history entry and
    the recomputed risk commit together. Writes are guarded by the
    record's version.
    """

    @abstractmethod
    async def get(self, record_id: str) -> ComplianceRecord | None:
        """Get a record by ID."""
        pass

    @abstractmethod
    async def get_by_contact(self, contact_id: str) -> ComplianceRecord | None:
        """Get the record for a contact."""
        pass

    @abstractmethod
    async def list_all(self) -> list[ComplianceRecord]:
        """List all records, oldest first."""
        pass

    @abstractmethod
    async def put(
        self, record: ComplianceRecord, expected_version: int | None
    ) -> ComplianceRecord:
        """Insert or update a record.

        Args:
            record: Full record to write
            expected_version: None to insert; otherwise the version the
                caller read, which must still be current

        Returns:
            The stored record with its new version

        Raises:
            ConflictError: Duplicate id/contact on insert, or stale version on update
            StorageError: If the write fails
        """
        pass
