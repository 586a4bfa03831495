"""HashChainAuditLog: append-only, tamper-evident activity log.

Every entry stores the hash of its predecessor and a hash over its own
canonical content. Appends are serialized through one writer lock, and
the store refuses any entry that does not extend the current tail, so
the chain can never fork. Old entries are never dropped: capacity and
retention limits move them behind an AuditCheckpoint that keeps the
archived segment verifiable.
"""

import asyncio
import json
import time
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime, timedelta
from typing import Any
from uuid import uuid4

from pydantic import BaseModel

from warden.audit.hashing import (
    GENESIS_HASH,
    canonicalize,
    compute_entry_hash,
    details_payload,
    segment_digest,
)
from warden.audit.models import (
    Actor,
    AuditAction,
    AuditCheckpoint,
    AuditEntry,
    AuditStats,
    AuditTarget,
    ChainVerification,
    GenericDetails,
    TargetType,
    details_match_action,
    truncate_ms,
    utc_now,
)
from warden.audit.store import AuditLogStore
from warden.config.models.audit import AuditConfig
from warden.errors import ConflictError, NotFoundError, ValidationError
from warden.observability.logging import get_logger
from warden.observability.metrics import (
    AUDIT_APPEND_CONFLICTS,
    AUDIT_APPEND_LATENCY,
    AUDIT_APPENDS,
    AUDIT_CHAIN_VERIFICATIONS,
    AUDIT_ENTRIES_ARCHIVED,
)

logger = get_logger(__name__)


def verify_entries(entries: list[AuditEntry], start_hash: str = GENESIS_HASH) -> ChainVerification:
    """Walk a run of entries and report the first broken link.

    Args:
        entries: Entries oldest first
        start_hash: Hash the first entry must link to

    Returns:
        ChainVerification; on failure broken_at == verified_entries == index
    """
    running_hash = start_hash
    for index, entry in enumerate(entries):
        reason = None
        if entry.previous_hash != running_hash:
            reason = "previous_hash_mismatch"
        elif compute_entry_hash(entry) != entry.hash:
            reason = "hash_mismatch"

        if reason is not None:
            return ChainVerification(
                valid=False,
                total_entries=len(entries),
                verified_entries=index,
                broken_at=index,
                reason=reason,
                start_hash=start_hash,
            )
        running_hash = entry.hash

    return ChainVerification(
        valid=True,
        total_entries=len(entries),
        verified_entries=len(entries),
        start_hash=start_hash,
    )


def _newest_first(entries: Iterable[AuditEntry]) -> list[AuditEntry]:
    # Reversing first keeps later appends ahead of earlier ones on equal timestamps
    return sorted(reversed(list(entries)), key=lambda e: e.timestamp, reverse=True)


def _limited(entries: list[AuditEntry], limit: int | None) -> list[AuditEntry]:
    return entries if limit is None else entries[:limit]


def _parse_action(action: AuditAction | str) -> AuditAction:
    try:
        return AuditAction(action)
    except ValueError as e:
        raise ValidationError(f"Unknown audit action: {action}", cause=e) from e


class HashChainAuditLog:
    """Tamper-evident audit log over an AuditLogStore.

    One instance is the single writer for its store within a process.
    Multiple processes sharing a database are kept linear by the store's
    tail check; a lost race is rebuilt against the new tail.
    """

    def __init__(
        self,
        store: AuditLogStore,
        config: AuditConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize the log.

        Args:
            store: Backing entry store
            config: Capacity, retention and defaults
            clock: Source of current UTC time
        """
        self._store = store
        self._config = config or AuditConfig()
        self._clock = clock
        self._write_lock = asyncio.Lock()

    @property
    def store(self) -> AuditLogStore:
        return self._store

    async def append(
        self,
        actor: Actor,
        action: AuditAction | str,
        target: AuditTarget | None = None,
        details: BaseModel | Mapping[str, Any] | None = None,
        *,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuditEntry:
        """Append one entry to the chain.

        The entry's hash is computed before it is handed to the store, so
        no reader ever sees an entry without its final hash.

        Args:
            actor: Who acted; must have id and email
            action: AuditAction or its string value
            target: Entity acted on
            details: Typed details variant, or a plain mapping stored as generic details
            ip_address: Client address, defaults to config
            user_agent: Client user agent, defaults to config

        Returns:
            The persisted entry

        Raises:
            ValidationError: Missing actor identity, unknown action, mismatched details
                or text that cannot be encoded
            ConflictError: Tail kept moving after all retries
            StorageError: Store write failed
        """
        if not actor.id or not actor.email:
            raise ValidationError("Actor must have an id and an email")

        action = _parse_action(action)

        if isinstance(details, Mapping):
            details = GenericDetails(extra=dict(details))
        if details is not None and not details_match_action(details, action):
            raise ValidationError(
                f"Details of kind '{getattr(details, 'kind', None)}' "
                f"do not fit action '{action.value}'"
            )

        entry_id = f"audit_{uuid4()}"
        ip_address = ip_address or self._config.default_ip_address
        user_agent = user_agent or self._config.default_user_agent
        try:
            canonicalize({
                "userId": actor.id,
                "userEmail": actor.email,
                "targetId": target.id if target else None,
                "details": details_payload(details),
                "ipAddress": ip_address,
                "userAgent": user_agent,
            })
        except UnicodeEncodeError as e:
            raise ValidationError("Audit entry text is not encodable as UTF-8", cause=e) from e

        attempts = self._config.append_retries + 1
        started = time.perf_counter()

        async with self._write_lock:
            for attempt in range(1, attempts + 1):
                entry = self._build_entry(
                    entry_id=entry_id,
                    actor=actor,
                    action=action,
                    target=target,
                    details=details,
                    ip_address=ip_address,
                    user_agent=user_agent,
                    previous_hash=await self._store.get_tail_hash(),
                )
                try:
                    await self._store.append(entry)
                    break
                except ConflictError:
                    AUDIT_APPEND_CONFLICTS.inc()
                    logger.warning(
                        "audit_append_conflict",
                        entry_id=entry_id,
                        attempt=attempt,
                        max_attempts=attempts,
                    )
                    if attempt == attempts:
                        raise

            await self._enforce_capacity()

        AUDIT_APPENDS.labels(action=action.value).inc()
        AUDIT_APPEND_LATENCY.observe(time.perf_counter() - started)
        logger.info(
            "audit_entry_appended",
            entry_id=entry.id,
            action=action.value,
            user_id=actor.id,
            target_type=entry.target_type.value if entry.target_type else None,
        )
        return entry

    def _build_entry(
        self,
        *,
        entry_id: str,
        actor: Actor,
        action: AuditAction,
        target: AuditTarget | None,
        details: BaseModel | None,
        ip_address: str,
        user_agent: str,
        previous_hash: str,
    ) -> AuditEntry:
        timestamp = truncate_ms(self._clock())
        target_id = target.id if target else None
        target_type = target.type if target else None
        entry_hash = compute_entry_hash({
            "id": entry_id,
            "userId": actor.id,
            "userEmail": actor.email,
            "action": action.value,
            "targetId": target_id,
            "targetType": target_type.value if target_type else None,
            "details": details_payload(details),
            "ipAddress": ip_address,
            "userAgent": user_agent,
            "timestamp": timestamp,
            "previousHash": previous_hash,
        })
        return AuditEntry(
            id=entry_id,
            user_id=actor.id,
            user_email=actor.email,
            action=action,
            target_id=target_id,
            target_type=target_type,
            details=details,
            ip_address=ip_address,
            user_agent=user_agent,
            timestamp=timestamp,
            previous_hash=previous_hash,
            hash=entry_hash,
        )

    async def _enforce_capacity(self) -> None:
        max_entries = self._config.max_entries
        if max_entries is None:
            return
        live = await self._store.count()
        if live > max_entries:
            # Archive down to the low-water mark, not just below the cap
            keep = int(max_entries * self._config.archive_low_water)
            await self._archive(live - keep, reason="capacity")

    async def _archive(self, count: int, reason: str) -> AuditCheckpoint:
        segment = (await self._store.get_all())[:count]
        latest = await self._store.latest_checkpoint()
        checkpoint = AuditCheckpoint(
            sequence=latest.sequence + 1 if latest else 1,
            start_hash=segment[0].previous_hash,
            end_hash=segment[-1].hash,
            entry_count=len(segment),
            segment_digest=segment_digest(entry.hash for entry in segment),
            first_timestamp=segment[0].timestamp,
            last_timestamp=segment[-1].timestamp,
            reason=reason,
            created_at=truncate_ms(self._clock()),
        )
        await self._store.archive_prefix(len(segment), checkpoint)

        AUDIT_ENTRIES_ARCHIVED.labels(reason=reason).inc(len(segment))
        logger.info(
            "audit_entries_archived",
            checkpoint_id=checkpoint.id,
            sequence=checkpoint.sequence,
            entry_count=checkpoint.entry_count,
            reason=reason,
        )
        return checkpoint

    async def verify_chain(self) -> ChainVerification:
        """Verify the live chain.

        Starts from the latest checkpoint's end hash, or the genesis hash
        when nothing has been archived. Never repairs anything.
        """
        async with self._write_lock:
            latest, entries = await self._store.snapshot()
        start_hash = latest.end_hash if latest else GENESIS_HASH

        result = verify_entries(entries, start_hash)
        self._record_verification(result, scope="live")
        return result

    async def verify_archive(self, checkpoint_id: str) -> ChainVerification:
        """Verify one archived segment against its checkpoint.

        Checks the hash walk from the checkpoint's start hash, then that
        the segment ends at end_hash with the recorded count and digest,
        and that the checkpoint continues from its predecessor.

        Raises:
            NotFoundError: Unknown checkpoint
        """
        checkpoints = await self._store.list_checkpoints()
        position = next(
            (i for i, c in enumerate(checkpoints) if c.id == checkpoint_id), None
        )
        if position is None:
            raise NotFoundError("Checkpoint", checkpoint_id)
        checkpoint = checkpoints[position]
        entries = await self._store.get_archived(checkpoint_id)

        result = verify_entries(entries, checkpoint.start_hash)
        if result.valid:
            expected_start = (
                checkpoints[position - 1].end_hash if position > 0 else GENESIS_HASH
            )
            reason = None
            broken_at = len(entries)
            if checkpoint.start_hash != expected_start:
                reason, broken_at = "checkpoint_discontinuity", 0
            elif (
                len(entries) != checkpoint.entry_count
                or not entries
                or entries[-1].hash != checkpoint.end_hash
                or segment_digest(e.hash for e in entries) != checkpoint.segment_digest
            ):
                reason = "checkpoint_mismatch"

            if reason is not None:
                result = ChainVerification(
                    valid=False,
                    total_entries=len(entries),
                    verified_entries=broken_at,
                    broken_at=broken_at,
                    reason=reason,
                    start_hash=checkpoint.start_hash,
                )

        self._record_verification(result, scope="archive", checkpoint_id=checkpoint_id)
        return result

    def _record_verification(self, result: ChainVerification, **context: Any) -> None:
        AUDIT_CHAIN_VERIFICATIONS.labels(result="valid" if result.valid else "broken").inc()
        if result.valid:
            logger.info(
                "audit_chain_verified", total_entries=result.total_entries, **context
            )
        else:
            logger.error(
                "audit_chain_broken",
                broken_at=result.broken_at,
                reason=result.reason,
                verified_entries=result.verified_entries,
                total_entries=result.total_entries,
                **context,
            )

    # Queries

    async def get_entry(self, entry_id: str) -> AuditEntry:
        """Get a live entry by ID.

        Raises:
            NotFoundError: No live entry with this ID
        """
        entry = await self._store.get(entry_id)
        if entry is None:
            raise NotFoundError("Audit entry", entry_id)
        return entry

    async def by_user(self, user_id: str, limit: int | None = None) -> list[AuditEntry]:
        """Entries by one actor, newest first."""
        entries = [e for e in await self._store.get_all() if e.user_id == user_id]
        return _limited(_newest_first(entries), limit)

    async def by_action(
        self, action: AuditAction | str, limit: int | None = None
    ) -> list[AuditEntry]:
        """Entries with one action, newest first.

        Raises:
            ValidationError: Unknown action string
        """
        action = _parse_action(action)
        entries = [e for e in await self._store.get_all() if e.action == action]
        return _limited(_newest_first(entries), limit)

    async def by_target(
        self,
        target_id: str,
        target_type: TargetType | None = None,
        limit: int | None = None,
    ) -> list[AuditEntry]:
        """Entries about one entity, optionally narrowed by type, newest first."""
        entries = [
            e
            for e in await self._store.get_all()
            if e.target_id == target_id
            and (target_type is None or e.target_type == target_type)
        ]
        return _limited(_newest_first(entries), limit)

    async def by_time_range(self, start: datetime, end: datetime) -> list[AuditEntry]:
        """Entries with start <= timestamp <= end, newest first."""
        start, end = truncate_ms(start), truncate_ms(end)
        entries = [e for e in await self._store.get_all() if start <= e.timestamp <= end]
        return _newest_first(entries)

    async def recent(self, limit: int = 100) -> list[AuditEntry]:
        """Newest entries."""
        return _newest_first(await self._store.get_all())[:limit]

    async def search(self, query: str, limit: int | None = None) -> list[AuditEntry]:
        """Case-insensitive substring match over e-mail, action and details."""
        needle = query.lower()
        matches = []
        for entry in await self._store.get_all():
            details = json.dumps(details_payload(entry.details) or {}, sort_keys=True)
            haystack = (entry.user_email, entry.action.value, details)
            if any(needle in field.lower() for field in haystack):
                matches.append(entry)
        return _limited(_newest_first(matches), limit)

    async def stats(self) -> AuditStats:
        """Counts by action and user e-mail plus recent activity."""
        entries = await self._store.get_all()
        now = truncate_ms(self._clock())
        day_ago = now - timedelta(hours=24)
        week_ago = now - timedelta(days=7)

        by_action: dict[str, int] = {}
        by_user: dict[str, int] = {}
        for entry in entries:
            by_action[entry.action.value] = by_action.get(entry.action.value, 0) + 1
            by_user[entry.user_email] = by_user.get(entry.user_email, 0) + 1

        return AuditStats(
            total_entries=len(entries),
            entries_by_action=by_action,
            entries_by_user=by_user,
            last_24_hours=sum(1 for e in entries if e.timestamp >= day_ago),
            last_7_days=sum(1 for e in entries if e.timestamp >= week_ago),
        )

    async def prune(self, keep_days: int | None = None) -> int:
        """Archive entries older than the cutoff behind a checkpoint.

        Only the contiguous run of oldest entries before the cutoff is
        archived, so the live chain stays a suffix of the full chain.

        Returns:
            Number of entries archived
        """
        keep_days = keep_days if keep_days is not None else self._config.retention_days
        cutoff = truncate_ms(self._clock()) - timedelta(days=keep_days)

        async with self._write_lock:
            count = 0
            for entry in await self._store.get_all():
                if entry.timestamp >= cutoff:
                    break
                count += 1
            if count:
                await self._archive(count, reason="retention")

        logger.info("audit_log_pruned", keep_days=keep_days, archived=count)
        return count

    async def checkpoints(self) -> list[AuditCheckpoint]:
        """Checkpoints in sequence order."""
        return await self._store.list_checkpoints()
