"""ComplianceRecord and the documents, checks and history it owns."""

from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from warden.audit.models import utc_now
from warden.compliance.models.enums import (
    CheckStatus,
    CheckType,
    DocumentStatus,
    DocumentType,
    KYCAction,
    KYCStatus,
    RiskLevel,
)

_DURABLE = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class KYCDocument(BaseModel):
    """Identity or address document attached to a record."""

    model_config = _DURABLE

    id: str = Field(default_factory=lambda: f"doc_{uuid4()}")
    type: DocumentType
    name: str = Field(default="", description="Display name, e.g. the file name")
    status: DocumentStatus = DocumentStatus.PENDING
    uploaded_at: datetime = Field(default_factory=utc_now)
    verified_at: datetime | None = None
    verified_by: str | None = None
    expires_at: datetime | None = None
    notes: str = ""


class NewDocument(BaseModel):
    """Caller-supplied fields for add_document."""

    type: DocumentType
    name: str = ""
    status: DocumentStatus = DocumentStatus.PENDING
    expires_at: datetime | None = None
    notes: str = ""


class ComplianceCheck(BaseModel):
    """One review check on a record."""

    model_config = _DURABLE

    id: str = Field(default_factory=lambda: f"check_{uuid4()}")
    type: CheckType
    status: CheckStatus = CheckStatus.PENDING
    checked_at: datetime | None = None
    checked_by: str | None = None
    findings: str = ""
    automated: bool = False


class TransitionEntry(BaseModel):
    """Immutable history item for one applied action."""

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    id: str = Field(default_factory=lambda: f"hist_{uuid4()}")
    action: KYCAction
    from_status: KYCStatus
    to_status: KYCStatus
    user_id: str
    user_name: str
    reason: str = ""
    timestamp: datetime = Field(default_factory=utc_now)


class ComplianceRecord(BaseModel):
    """KYC compliance state for one contact.

    `version` increments on every successful write and is used for
    optimistic concurrency by the store.
    """

    model_config = _DURABLE

    id: str = Field(default_factory=lambda: f"kyc_{uuid4()}")
    contact_id: str
    contact_name: str = ""
    status: KYCStatus = KYCStatus.DRAFT
    risk_level: RiskLevel = RiskLevel.CRITICAL
    risk_score: int = Field(default=100, ge=0, le=100)
    documents: list[KYCDocument] = Field(default_factory=list)
    checks: list[ComplianceCheck] = Field(default_factory=list)
    history: list[TransitionEntry] = Field(default_factory=list)
    assigned_to: str | None = None
    notes: str = ""
    created_by: str
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    approved_at: datetime | None = None
    approved_by: str | None = None
    expires_at: datetime | None = None
    version: int = Field(default=0, ge=0)

    def find_document(self, document_id: str) -> KYCDocument | None:
        return next((d for d in self.documents if d.id == document_id), None)

    def find_check(self, check_type: CheckType) -> ComplianceCheck | None:
        return next((c for c in self.checks if c.type == check_type), None)


def default_checks() -> list[ComplianceCheck]:
    """Checks seeded on every new record; only sanctions screening is automated."""
    return [
        ComplianceCheck(type=CheckType.IDENTITY),
        ComplianceCheck(type=CheckType.ADDRESS),
        ComplianceCheck(type=CheckType.FINANCIAL),
        ComplianceCheck(type=CheckType.SANCTIONS, automated=True),
    ]
