"""PostgreSQL implementation of ComplianceStore.

Uses asyncpg for async database access. Each record is one JSONB
document; indexed columns are denormalized copies for queries.
"""

import json

import asyncpg

from warden.compliance.models import ComplianceRecord
from warden.compliance.store import ComplianceStore
from warden.db.pool import PostgresPool
from warden.errors import ConflictError, StorageError
from warden.observability.logging import get_logger
from warden.observability.metrics import STORE_ERRORS

logger = get_logger(__name__)


class PostgresComplianceStore(ComplianceStore):
    """PostgreSQL implementation of ComplianceStore.

    Updates are conditional on the version column, so a stale writer
    changes nothing and gets a ConflictError.
    """

    def __init__(self, pool: PostgresPool) -> None:
        """Initialize with connection pool.

        Args:
            pool: PostgreSQL connection pool
        """
        self._pool = pool

    async def get(self, record_id: str) -> ComplianceRecord | None:
        """Get a record by ID."""
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    "SELECT record, version FROM compliance_records WHERE id = $1",
                    record_id,
                )
                return self._row_to_record(row) if row else None
        except asyncpg.PostgresError as e:
            raise self._wrap("get", e, record_id=record_id) from e

    async def get_by_contact(self, contact_id: str) -> ComplianceRecord | None:
        """Get the record for a contact."""
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    "SELECT record, version FROM compliance_records WHERE contact_id = $1",
                    contact_id,
                )
                return self._row_to_record(row) if row else None
        except asyncpg.PostgresError as e:
            raise self._wrap("get_by_contact", e, contact_id=contact_id) from e

    async def list_all(self) -> list[ComplianceRecord]:
        """List all records, oldest first."""
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(
                    "SELECT record, version FROM compliance_records ORDER BY created_at, id"
                )
                return [self._row_to_record(row) for row in rows]
        except asyncpg.PostgresError as e:
            raise self._wrap("list_all", e) from e

    async def put(
        self, record: ComplianceRecord, expected_version: int | None
    ) -> ComplianceRecord:
        """Insert or update a record."""
        version = 1 if expected_version is None else expected_version + 1
        stored = record.model_copy(update={"version": version}, deep=True)
        body = stored.model_dump_json(by_alias=True, exclude={"version"})

        try:
            async with self._pool.acquire() as conn:
                if expected_version is None:
                    await conn.execute(
                        """
                        INSERT INTO compliance_records (
                            id, contact_id, status, risk_level, risk_score,
                            version, record, expires_at, created_at, updated_at
                        ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
                        """,
                        stored.id,
                        stored.contact_id,
                        stored.status.value,
                        stored.risk_level.value,
                        stored.risk_score,
                        version,
                        body,
                        stored.expires_at,
                        stored.created_at,
                        stored.updated_at,
                    )
                else:
                    result = await conn.execute(
                        """
                        UPDATE compliance_records
                        SET status = $3, risk_level = $4, risk_score = $5,
                            version = $6, record = $7, expires_at = $8,
                            updated_at = $9
                        WHERE id = $1 AND contact_id = $2 AND version = $10
                        """,
                        stored.id,
                        stored.contact_id,
                        stored.status.value,
                        stored.risk_level.value,
                        stored.risk_score,
                        version,
                        body,
                        stored.expires_at,
                        stored.updated_at,
                        expected_version,
                    )
                    if result.split()[-1] == "0":
                        raise ConflictError(
                            f"Compliance record {stored.id} is not at version {expected_version}"
                        )
            logger.debug("compliance_record_saved", record_id=stored.id, version=version)
            return stored
        except asyncpg.UniqueViolationError as e:
            raise ConflictError(
                f"Compliance record already exists for contact: {stored.contact_id}", cause=e
            ) from e
        except asyncpg.PostgresError as e:
            raise self._wrap("put", e, record_id=stored.id) from e

    def _wrap(self, operation: str, error: Exception, **context: str) -> StorageError:
        STORE_ERRORS.labels(store="compliance", operation=operation).inc()
        logger.error(f"postgres_compliance_{operation}_error", error=str(error), **context)
        return StorageError(f"Compliance store {operation} failed: {error}", cause=error)

    def _row_to_record(self, row: asyncpg.Record) -> ComplianceRecord:
        body = row["record"]
        if isinstance(body, str):
            body = json.loads(body)
        return ComplianceRecord.model_validate({**body, "version": row["version"]})
