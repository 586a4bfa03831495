"""Compliance domain models.

Contains all Pydantic models for the KYC workflow:
- ComplianceRecord with its documents, checks and transition history
- RiskAssessment and ComplianceStats
"""

from warden.compliance.models.enums import (
    CheckStatus,
    CheckType,
    DocumentStatus,
    DocumentType,
    KYCAction,
    KYCStatus,
    RiskLevel,
)
from warden.compliance.models.record import (
    ComplianceCheck,
    ComplianceRecord,
    KYCDocument,
    NewDocument,
    TransitionEntry,
    default_checks,
)
from warden.compliance.models.stats import (
    ComplianceStats,
    RiskAssessment,
    RiskFactors,
)

__all__ = [
    "CheckStatus",
    "CheckType",
    "ComplianceCheck",
    "ComplianceRecord",
    "ComplianceStats",
    "DocumentStatus",
    "DocumentType",
    "KYCAction",
    "KYCDocument",
    "KYCStatus",
    "NewDocument",
    "RiskAssessment",
    "RiskFactors",
    "RiskLevel",
    "TransitionEntry",
    "default_checks",
]
