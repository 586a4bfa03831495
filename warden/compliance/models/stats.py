"""Risk assessment and aggregate statistics models."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from warden.compliance.models.enums import RiskLevel


class RiskFactors(BaseModel):
    """Counts that feed the risk score."""

    model_config = ConfigDict(frozen=True)

    missing_documents: int = 0
    rejected_documents: int = 0
    expired_documents: int = 0
    failed_checks: int = 0
    pending_checks: int = 0


class RiskAssessment(BaseModel):
    """Score, level and the factors behind them."""

    model_config = ConfigDict(frozen=True)

    score: int = Field(..., ge=0, le=100)
    level: RiskLevel
    factors: RiskFactors


class ComplianceStats(BaseModel):
    """Aggregate counts over all records."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total: int
    by_status: dict[str, int]
    by_risk: dict[str, int]
    pending_review: int
    compliance_queue: int
    expiring_soon: int
    average_processing_time: float = Field(
        default=0.0, description="Mean seconds from creation to approval, 0 when none"
    )
