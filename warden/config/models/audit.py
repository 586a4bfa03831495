"""Audit log configuration models."""

from pydantic import BaseModel, Field


class AuditConfig(BaseModel):
    """Hash-chained audit log settings."""

    max_entries: int | None = Field(
        default=10000,
        gt=0,
        description="Live entries kept before the oldest are archived behind a checkpoint",
    )
    archive_low_water: float = Field(
        default=0.9,
        gt=0,
        le=1,
        description="Fraction of max_entries left live after a capacity archive",
    )
    retention_days: int = Field(
        default=90,
        gt=0,
        description="Default age cutoff for prune()",
    )
    default_ip_address: str = Field(
        default="unknown",
        description="Recorded when the caller supplies no client address",
    )
    default_user_agent: str = Field(
        default="unknown",
        description="Recorded when the caller supplies no user agent",
    )
    append_retries: int = Field(
        default=3,
        ge=0,
        description="Rebuild attempts when another writer moved the chain tail",
    )
