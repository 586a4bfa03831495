"""Compliance workflow and risk scoring configuration models."""

from pydantic import BaseModel, Field, model_validator

from warden.compliance.models.enums import DocumentType


class RiskWeights(BaseModel):
    """Points added per outstanding compliance gap."""

    missing_document: int = Field(default=20, ge=0)
    rejected_document: int = Field(default=25, ge=0)
    expired_document: int = Field(default=15, ge=0)
    failed_check: int = Field(default=30, ge=0)
    pending_check: int = Field(default=10, ge=0)


class RiskThresholds(BaseModel):
    """Minimum score for each risk level above 'low'."""

    medium: int = Field(default=25, ge=0, le=100)
    high: int = Field(default=50, ge=0, le=100)
    critical: int = Field(default=75, ge=0, le=100)

    @model_validator(mode="after")
    def check_ordering(self) -> "RiskThresholds":
        """Thresholds must rise with severity."""
        if not self.medium <= self.high <= self.critical:
            raise ValueError("risk thresholds must satisfy medium <= high <= critical")
        return self


class RiskConfig(BaseModel):
    """Risk scoring configuration."""

    weights: RiskWeights = Field(default_factory=RiskWeights)
    thresholds: RiskThresholds = Field(default_factory=RiskThresholds)
    max_score: int = Field(default=100, gt=0, le=100, description="Score cap")


class ComplianceConfig(BaseModel):
    """KYC compliance workflow settings."""

    approval_validity_days: int = Field(
        default=365,
        gt=0,
        description="Days an approval stays valid",
    )
    expiring_window_days: int = Field(
        default=30,
        gt=0,
        description="Window used for the expiring-soon statistic",
    )
    required_documents: list[DocumentType] = Field(
        default_factory=lambda: [
            DocumentType.PAN,
            DocumentType.GSTIN,
            DocumentType.ADDRESS_PROOF,
        ],
        description="Document types that must be verified",
    )
    system_actor_id: str = Field(
        default="system",
        description="Actor id recorded by scheduled jobs",
    )
    system_actor_name: str = Field(
        default="Compliance Scheduler",
        description="Actor name recorded by scheduled jobs",
    )
    risk: RiskConfig = Field(default_factory=RiskConfig)
