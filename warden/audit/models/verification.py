"""Chain verification results, checkpoints and statistics."""

from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from warden.audit.models.entry import utc_now
from warden.errors import ChainIntegrityError


class ChainVerification(BaseModel):
    """Outcome of walking the hash chain."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    valid: bool
    total_entries: int
    verified_entries: int
    broken_at: int | None = None
    reason: str | None = Field(
        default=None, description="previous_hash_mismatch or hash_mismatch"
    )
    start_hash: str = Field(..., description="Hash the walk started from")

    def raise_for_status(self) -> None:
        """Raise ChainIntegrityError if the chain is broken."""
        if not self.valid:
            raise ChainIntegrityError(self)


class AuditCheckpoint(BaseModel):
    """Continuity record for a segment of entries moved out of the live log.

    The live chain resumes from `end_hash`; the archived segment can be
    re-verified on its own from `start_hash`.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str = Field(default_factory=lambda: f"ckpt_{uuid4()}")
    sequence: int = Field(..., ge=1, description="1-based checkpoint order")
    start_hash: str = Field(..., description="previous_hash of the first archived entry")
    end_hash: str = Field(..., description="hash of the last archived entry")
    entry_count: int = Field(..., ge=1)
    segment_digest: str = Field(..., description="SHA-256 over the archived entry hashes")
    first_timestamp: datetime
    last_timestamp: datetime
    reason: str = Field(..., description="retention or capacity")
    created_at: datetime = Field(default_factory=utc_now)


class AuditStats(BaseModel):
    """Aggregate counts over the live log."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_entries: int
    entries_by_action: dict[str, int]
    entries_by_user: dict[str, int]
    last_24_hours: int
    last_7_days: int
