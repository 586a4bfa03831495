"""AuditEntry model and the identities it references."""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from warden.audit.models.details import AuditDetails
from warden.audit.models.enums import AuditAction, TargetType


def truncate_ms(value: datetime) -> datetime:
    """Normalize to UTC with millisecond precision.

    Naive datetimes are taken to be UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    value = value.astimezone(UTC)
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


def utc_now() -> datetime:
    """Return current UTC time truncated to milliseconds."""
    return truncate_ms(datetime.now(UTC))


class Actor(BaseModel):
    """Identity of whoever performed an action.

    Supplied by the host application's auth/session layer.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Stable user id")
    email: str = Field(..., description="User e-mail")
    name: str = Field(default="", description="Display name")


class AuditTarget(BaseModel):
    """Entity an action was performed on."""

    model_config = ConfigDict(frozen=True)

    type: TargetType = Field(..., description="Entity kind")
    id: str | None = Field(default=None, description="Entity id")
    name: str | None = Field(default=None, description="Display name, not hashed")


class AuditEntry(BaseModel):
    """One immutable, hash-linked record of an actor action.

    `hash` covers every other field, including `previous_hash`, so editing
    any stored entry or splicing the sequence breaks verification.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str = Field(..., description="Unique identifier")
    user_id: str = Field(..., description="Acting user id")
    user_email: str = Field(..., description="Acting user e-mail")
    action: AuditAction = Field(..., description="What was done")
    target_id: str | None = Field(default=None, description="Affected entity id")
    target_type: TargetType | None = Field(default=None, description="Affected entity kind")
    details: AuditDetails | None = Field(default=None, description="Action metadata")
    ip_address: str = Field(..., description="Client address")
    user_agent: str = Field(..., description="Client user agent")
    timestamp: datetime = Field(..., description="UTC time, millisecond precision")
    previous_hash: str = Field(..., description="Hash of the preceding entry")
    hash: str = Field(..., description="SHA-256 over the canonical entry")
