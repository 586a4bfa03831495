"""Enums for the KYC compliance domain."""

from enum import Enum


class KYCStatus(str, Enum):
    """Lifecycle state of a compliance record."""

    DRAFT = "draft"
    PENDING_REVIEW = "pending_review"
    COMPLIANCE_CHECK = "compliance_check"
    APPROVED = "approved"
    REJECTED = "rejected"
    EXPIRED = "expired"
    SUSPENDED = "suspended"


class KYCAction(str, Enum):
    """Workflow actions.

    CREATE only appears in history as the first entry; no status offers it.
    """

    CREATE = "create"
    SUBMIT_FOR_REVIEW = "submit_for_review"
    APPROVE_REVIEW = "approve_review"
    REJECT_REVIEW = "reject_review"
    REQUEST_CHANGES = "request_changes"
    COMPLETE_COMPLIANCE = "complete_compliance"
    FAIL_COMPLIANCE = "fail_compliance"
    FINAL_APPROVE = "final_approve"
    FINAL_REJECT = "final_reject"
    EXPIRE = "expire"
    SUSPEND = "suspend"
    REACTIVATE = "reactivate"


class RiskLevel(str, Enum):
    """Categorical risk derived from the score."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class DocumentType(str, Enum):
    PAN = "pan"
    GSTIN = "gstin"
    AADHAR = "aadhar"
    PASSPORT = "passport"
    ADDRESS_PROOF = "address_proof"
    BANK_STATEMENT = "bank_statement"
    OTHER = "other"


class DocumentStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"
    EXPIRED = "expired"


class CheckType(str, Enum):
    IDENTITY = "identity"
    ADDRESS = "address"
    FINANCIAL = "financial"
    REGULATORY = "regulatory"
    SANCTIONS = "sanctions"


class CheckStatus(str, Enum):
    PENDING = "pending"
    PASSED = "passed"
    FAILED = "failed"
    WAIVED = "waived"
