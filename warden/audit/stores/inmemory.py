"""In-memory implementation of AuditLogStore."""

import asyncio

from warden.audit.hashing import GENESIS_HASH
from warden.audit.models import AuditCheckpoint, AuditEntry
from warden.audit.store import AuditLogStore
from warden.errors import ConflictError, ValidationError


class InMemoryAuditLogStore(AuditLogStore):
    """In-memory implementation of AuditLogStore for testing and development.

    Uses a list for the live sequence and a dict of archived segments.
    Not suitable for production use.
    """

    def __init__(self) -> None:
        """Initialize empty storage."""
        self._entries: list[AuditEntry] = []
        self._checkpoints: list[AuditCheckpoint] = []
        self._archive: dict[str, list[AuditEntry]] = {}
        self._lock = asyncio.Lock()

    async def get_all(self) -> list[AuditEntry]:
        """Get all live entries, oldest first."""
        return list(self._entries)

    async def get(self, entry_id: str) -> AuditEntry | None:
        """Get a live entry by ID."""
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    async def get_last(self) -> AuditEntry | None:
        """Get the newest live entry."""
        return self._entries[-1] if self._entries else None

    async def count(self) -> int:
        """Count live entries."""
        return len(self._entries)

    async def get_tail_hash(self) -> str:
        """Hash the next entry must link to."""
        return self._tail_hash()

    def _tail_hash(self) -> str:
        if self._entries:
            return self._entries[-1].hash
        if self._checkpoints:
            return self._checkpoints[-1].end_hash
        return GENESIS_HASH

    async def append(self, entry: AuditEntry) -> None:
        """Persist an entry at the end of the log."""
        async with self._lock:
            tail = self._tail_hash()
            if entry.previous_hash != tail:
                raise ConflictError(
                    f"Entry {entry.id} links to {entry.previous_hash}, tail is {tail}"
                )
            self._entries.append(entry)

    async def overwrite(self, entries: list[AuditEntry]) -> None:
        """Replace the live entry sequence wholesale."""
        async with self._lock:
            self._entries = list(entries)

    async def archive_prefix(self, count: int, checkpoint: AuditCheckpoint) -> None:
        """Atomically move the oldest `count` live entries behind a checkpoint."""
        async with self._lock:
            if count < 1 or count > len(self._entries):
                raise ValidationError(
                    f"Cannot archive {count} of {len(self._entries)} entries"
                )
            self._archive[checkpoint.id] = self._entries[:count]
            self._entries = self._entries[count:]
            self._checkpoints.append(checkpoint)

    async def list_checkpoints(self) -> list[AuditCheckpoint]:
        """List checkpoints in sequence order."""
        return list(self._checkpoints)

    async def latest_checkpoint(self) -> AuditCheckpoint | None:
        """Get the checkpoint with the highest sequence."""
        return self._checkpoints[-1] if self._checkpoints else None

    async def snapshot(self) -> tuple[AuditCheckpoint | None, list[AuditEntry]]:
        """Read the latest checkpoint and the live entries together."""
        async with self._lock:
            latest = self._checkpoints[-1] if self._checkpoints else None
            return latest, list(self._entries)

    async def get_archived(self, checkpoint_id: str) -> list[AuditEntry]:
        """Get the entries archived under a checkpoint, oldest first."""
        return list(self._archive.get(checkpoint_id, []))
