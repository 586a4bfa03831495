"""PostgreSQL implementation of AuditLogStore.

Uses asyncpg for async database access. Live and archived entries share
the audit_entries table; archived rows point at their checkpoint.
"""

import json
from typing import Any

import asyncpg

from warden.audit.hashing import GENESIS_HASH
from warden.audit.models import AuditCheckpoint, AuditEntry
from warden.audit.store import AuditLogStore
from warden.db.pool import PostgresPool
from warden.errors import ConflictError, StorageError, ValidationError
from warden.observability.logging import get_logger
from warden.observability.metrics import STORE_ERRORS

logger = get_logger(__name__)

# Serializes appends across processes sharing the database.
APPEND_LOCK_KEY = 0x5741524445


_ENTRY_COLUMNS = """
    id, user_id, user_email, action, target_id, target_type, details,
    ip_address, user_agent, timestamp, previous_hash, hash
"""

_INSERT_ENTRY = f"""
    INSERT INTO audit_entries ({_ENTRY_COLUMNS})
    VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12)
"""

_CHECKPOINT_COLUMNS = """
    id, sequence, start_hash, end_hash, entry_count, segment_digest,
    first_timestamp, last_timestamp, reason, created_at
"""


class PostgresAuditLogStore(AuditLogStore):
    """PostgreSQL implementation of AuditLogStore.

    Appends run in a transaction holding an advisory lock, re-read the
    tail and insert only if the entry links to it. The unique constraint
    on previous_hash backs this up against a forked write.
    """

    def __init__(self, pool: PostgresPool) -> None:
        """Initialize with connection pool.

        Args:
            pool: PostgreSQL connection pool
        """
        self._pool = pool

    async def get_all(self) -> list[AuditEntry]:
        """Get all live entries, oldest first."""
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(
                    f"""
                    SELECT {_ENTRY_COLUMNS} FROM audit_entries
                    WHERE checkpoint_id IS NULL
                    ORDER BY seq
                    """
                )
                return [self._row_to_entry(row) for row in rows]
        except asyncpg.PostgresError as e:
            raise self._wrap("get_all", e) from e

    async def get(self, entry_id: str) -> AuditEntry | None:
        """Get a live entry by ID."""
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"""
                    SELECT {_ENTRY_COLUMNS} FROM audit_entries
                    WHERE id = $1 AND checkpoint_id IS NULL
                    """,
                    entry_id,
                )
                return self._row_to_entry(row) if row else None
        except asyncpg.PostgresError as e:
            raise self._wrap("get", e, entry_id=entry_id) from e

    async def get_last(self) -> AuditEntry | None:
        """Get the newest live entry."""
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"""
                    SELECT {_ENTRY_COLUMNS} FROM audit_entries
                    WHERE checkpoint_id IS NULL
                    ORDER BY seq DESC
                    LIMIT 1
                    """
                )
                return self._row_to_entry(row) if row else None
        except asyncpg.PostgresError as e:
            raise self._wrap("get_last", e) from e

    async def count(self) -> int:
        """Count live entries."""
        try:
            async with self._pool.acquire() as conn:
                return await conn.fetchval(
                    "SELECT COUNT(*) FROM audit_entries WHERE checkpoint_id IS NULL"
                )
        except asyncpg.PostgresError as e:
            raise self._wrap("count", e) from e

    async def get_tail_hash(self) -> str:
        """Hash the next entry must link to."""
        try:
            async with self._pool.acquire() as conn:
                return await self._tail_hash(conn)
        except asyncpg.PostgresError as e:
            raise self._wrap("get_tail_hash", e) from e

    async def append(self, entry: AuditEntry) -> None:
        """Persist an entry at the end of the log."""
        try:
            async with self._pool.acquire() as conn:
                async with conn.transaction():
                    await conn.execute("SELECT pg_advisory_xact_lock($1)", APPEND_LOCK_KEY)
                    tail = await self._tail_hash(conn)
                    if entry.previous_hash != tail:
                        raise ConflictError(
                            f"Entry {entry.id} links to {entry.previous_hash}, tail is {tail}"
                        )
                    await conn.execute(_INSERT_ENTRY, *self._entry_values(entry))
            logger.debug("audit_entry_persisted", entry_id=entry.id)
        except asyncpg.UniqueViolationError as e:
            raise ConflictError(f"Entry {entry.id} conflicts with the chain: {e}", cause=e) from e
        except asyncpg.PostgresError as e:
            raise self._wrap("append", e, entry_id=entry.id) from e

    async def overwrite(self, entries: list[AuditEntry]) -> None:
        """Replace the live entry sequence wholesale."""
        try:
            async with self._pool.acquire() as conn:
                async with conn.transaction():
                    await conn.execute("SELECT pg_advisory_xact_lock($1)", APPEND_LOCK_KEY)
                    await conn.execute("DELETE FROM audit_entries WHERE checkpoint_id IS NULL")
                    await conn.executemany(
                        _INSERT_ENTRY, [self._entry_values(entry) for entry in entries]
                    )
            logger.warning("audit_log_overwritten", entry_count=len(entries))
        except asyncpg.PostgresError as e:
            raise self._wrap("overwrite", e) from e

    async def archive_prefix(self, count: int, checkpoint: AuditCheckpoint) -> None:
        """Atomically move the oldest `count` live entries behind a checkpoint."""
        try:
            async with self._pool.acquire() as conn:
                async with conn.transaction():
                    await conn.execute("SELECT pg_advisory_xact_lock($1)", APPEND_LOCK_KEY)
                    live = await conn.fetchval(
                        "SELECT COUNT(*) FROM audit_entries WHERE checkpoint_id IS NULL"
                    )
                    if count < 1 or count > live:
                        raise ValidationError(f"Cannot archive {count} of {live} entries")
                    await conn.execute(
                        """
                        INSERT INTO audit_checkpoints (
                            id, sequence, start_hash, end_hash, entry_count,
                            segment_digest, first_timestamp, last_timestamp,
                            reason, created_at
                        ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
                        """,
                        checkpoint.id,
                        checkpoint.sequence,
                        checkpoint.start_hash,
                        checkpoint.end_hash,
                        checkpoint.entry_count,
                        checkpoint.segment_digest,
                        checkpoint.first_timestamp,
                        checkpoint.last_timestamp,
                        checkpoint.reason,
                        checkpoint.created_at,
                    )
                    await conn.execute(
                        """
                        UPDATE audit_entries SET checkpoint_id = $1
                        WHERE seq IN (
                            SELECT seq FROM audit_entries
                            WHERE checkpoint_id IS NULL
                            ORDER BY seq
                            LIMIT $2
                        )
                        """,
                        checkpoint.id,
                        count,
                    )
        except asyncpg.PostgresError as e:
            raise self._wrap("archive_prefix", e, checkpoint_id=checkpoint.id) from e

    async def list_checkpoints(self) -> list[AuditCheckpoint]:
        """List checkpoints in sequence order."""
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(
                    f"SELECT {_CHECKPOINT_COLUMNS} FROM audit_checkpoints ORDER BY sequence"
                )
                return [AuditCheckpoint(**dict(row)) for row in rows]
        except asyncpg.PostgresError as e:
            raise self._wrap("list_checkpoints", e) from e

    async def latest_checkpoint(self) -> AuditCheckpoint | None:
        """Get the checkpoint with the highest sequence."""
        try:
            async with self._pool.acquire() as conn:
                return await self._latest_checkpoint(conn)
        except asyncpg.PostgresError as e:
            raise self._wrap("latest_checkpoint", e) from e

    async def snapshot(self) -> tuple[AuditCheckpoint | None, list[AuditEntry]]:
        """Read the latest checkpoint and the live entries in one transaction.

        REPEATABLE READ pins both queries to the same database snapshot, so
        an archive committed in between is invisible to the second query.
        """
        try:
            async with self._pool.acquire() as conn:
                async with conn.transaction(isolation="repeatable_read", readonly=True):
                    latest = await self._latest_checkpoint(conn)
                    rows = await conn.fetch(
                        f"""
                        SELECT {_ENTRY_COLUMNS} FROM audit_entries
                        WHERE checkpoint_id IS NULL
                        ORDER BY seq
                        """
                    )
                return latest, [self._row_to_entry(row) for row in rows]
        except asyncpg.PostgresError as e:
            raise self._wrap("snapshot", e) from e

    async def get_archived(self, checkpoint_id: str) -> list[AuditEntry]:
        """Get the entries archived under a checkpoint, oldest first."""
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(
                    f"""
                    SELECT {_ENTRY_COLUMNS} FROM audit_entries
                    WHERE checkpoint_id = $1
                    ORDER BY seq
                    """,
                    checkpoint_id,
                )
                return [self._row_to_entry(row) for row in rows]
        except asyncpg.PostgresError as e:
            raise self._wrap("get_archived", e, checkpoint_id=checkpoint_id) from e

    async def _latest_checkpoint(self, conn: asyncpg.Connection) -> AuditCheckpoint | None:
        row = await conn.fetchrow(
            f"SELECT {_CHECKPOINT_COLUMNS} FROM audit_checkpoints ORDER BY sequence DESC LIMIT 1"
        )
        return AuditCheckpoint(**dict(row)) if row else None

    async def _tail_hash(self, conn: asyncpg.Connection) -> str:
        tail = await conn.fetchval("SELECT hash FROM audit_entries ORDER BY seq DESC LIMIT 1")
        return tail or GENESIS_HASH

    def _wrap(self, operation: str, error: Exception, **context: Any) -> StorageError:
        STORE_ERRORS.labels(store="audit", operation=operation).inc()
        logger.error(f"postgres_audit_{operation}_error", error=str(error), **context)
        return StorageError(f"Audit store {operation} failed: {error}", cause=error)

    def _entry_values(self, entry: AuditEntry) -> tuple[Any, ...]:
        details = None
        if entry.details is not None:
            details = json.dumps(entry.details.model_dump(mode="json", by_alias=True))
        return (
            entry.id,
            entry.user_id,
            entry.user_email,
            entry.action.value,
            entry.target_id,
            entry.target_type.value if entry.target_type else None,
            details,
            entry.ip_address,
            entry.user_agent,
            entry.timestamp,
            entry.previous_hash,
            entry.hash,
        )

    def _row_to_entry(self, row: asyncpg.Record) -> AuditEntry:
        details = row["details"]
        if isinstance(details, str):
            details = json.loads(details)
        return AuditEntry(
            id=row["id"],
            user_id=row["user_id"],
            user_email=row["user_email"],
            action=row["action"],
            target_id=row["target_id"],
            target_type=row["target_type"],
            details=details,
            ip_address=row["ip_address"],
            user_agent=row["user_agent"],
            timestamp=row["timestamp"],
            previous_hash=row["previous_hash"],
            hash=row["hash"],
        )
