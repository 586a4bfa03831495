"""AuditLogStore abstract interface."""

from abc import ABC, abstractmethod

from warden.audit.models import AuditCheckpoint, AuditEntry


class AuditLogStore(ABC):
    """Abstract interface for audit log storage.

    Holds the live, ordered entry sequence plus archived segments behind
    checkpoints. The store does not compute hashes; it only guarantees
    that `append` never persists an entry that does not extend the
    current tail.
    """

    @abstractmethod
    async def get_all(self) -> list[AuditEntry]:
        """Get all live entries, oldest first."""
        pass

    @abstractmethod
    async def get(self, entry_id: str) -> AuditEntry | None:
        """Get a live entry by ID."""
        pass

    @abstractmethod
    async def get_last(self) -> AuditEntry | None:
        """Get the newest live entry."""
        pass

    @abstractmethod
    async def count(self) -> int:
        """Count live entries."""
        pass

    @abstractmethod
    async def get_tail_hash(self) -> str:
        """Hash the next entry must link to.

        The newest entry's hash, else the latest checkpoint's end hash,
        else the genesis hash.
        """
        pass

    @abstractmethod
    async def append(self, entry: AuditEntry) -> None:
        """Persist an entry at the end of the log.

        Raises:
            ConflictError: If entry.previous_hash is not the current tail hash
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def overwrite(self, entries: list[AuditEntry]) -> None:
        """Replace the live entry sequence wholesale."""
        pass

    @abstractmethod
    async def archive_prefix(self, count: int, checkpoint: AuditCheckpoint) -> None:
        """Atomically move the oldest `count` live entries behind a checkpoint."""
        pass

    @abstractmethod
    async def list_checkpoints(self) -> list[AuditCheckpoint]:
        """List checkpoints in sequence order."""
        pass

    @abstractmethod
    async def latest_checkpoint(self) -> AuditCheckpoint | None:
        """Get the checkpoint with the highest sequence."""
        pass

    @abstractmethod
    async def snapshot(self) -> tuple[AuditCheckpoint | None, list[AuditEntry]]:
        """Read the latest checkpoint and the live entries as of one instant.

        An archive committed by another writer is seen either entirely or
        not at all, so the entries always continue from the checkpoint.
        """
        pass

    @abstractmethod
    async def get_archived(self, checkpoint_id: str) -> list[AuditEntry]:
        """Get the entries archived under a checkpoint, oldest first."""
        pass
