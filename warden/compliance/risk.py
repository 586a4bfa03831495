"""RiskScorer: deterministic risk from a record's documents and checks."""

from warden.compliance.models import (
    CheckStatus,
    ComplianceRecord,
    DocumentStatus,
    DocumentType,
    RiskAssessment,
    RiskFactors,
    RiskLevel,
)
from warden.config.models.compliance import RiskConfig


class RiskScorer:
    """Weighted count of outstanding compliance gaps, capped at max_score.

    Pure function of the record's documents and checks; scoring an
    unchanged record twice gives the same result.
    """

    def __init__(
        self,
        config: RiskConfig | None = None,
        required_documents: list[DocumentType] | None = None,
    ) -> None:
        self._config = config or RiskConfig()
        if required_documents is None:
            required_documents = [
                DocumentType.PAN,
                DocumentType.GSTIN,
                DocumentType.ADDRESS_PROOF,
            ]
        self._required = list(required_documents)

    def factors(self, record: ComplianceRecord) -> RiskFactors:
        verified = {d.type for d in record.documents if d.status == DocumentStatus.VERIFIED}
        return RiskFactors(
            missing_documents=sum(1 for t in self._required if t not in verified),
            rejected_documents=sum(
                1 for d in record.documents if d.status == DocumentStatus.REJECTED
            ),
            expired_documents=sum(
                1 for d in record.documents if d.status == DocumentStatus.EXPIRED
            ),
            failed_checks=sum(1 for c in record.checks if c.status == CheckStatus.FAILED),
            pending_checks=sum(1 for c in record.checks if c.status == CheckStatus.PENDING),
        )

    def level_for(self, score: int) -> RiskLevel:
        thresholds = self._config.thresholds
        if score >= thresholds.critical:
            return RiskLevel.CRITICAL
        if score >= thresholds.high:
            return RiskLevel.HIGH
        if score >= thresholds.medium:
            return RiskLevel.MEDIUM
        return RiskLevel.LOW

    def assess(self, record: ComplianceRecord) -> RiskAssessment:
        """Score a record without modifying it."""
        factors = self.factors(record)
        weights = self._config.weights
        raw = (
            factors.missing_documents * weights.missing_document
            + factors.rejected_documents * weights.rejected_document
            + factors.expired_documents * weights.expired_document
            + factors.failed_checks * weights.failed_check
            + factors.pending_checks * weights.pending_check
        )
        score = min(self._config.max_score, raw)
        return RiskAssessment(score=score, level=self.level_for(score), factors=factors)
