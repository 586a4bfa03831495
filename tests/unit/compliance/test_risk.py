"""Tests for RiskScorer."""

import pytest

from warden.compliance.models import (
    CheckStatus,
    CheckType,
    ComplianceRecord,
    DocumentStatus,
    DocumentType,
    KYCDocument,
    RiskLevel,
    default_checks,
)
from warden.compliance.risk import RiskScorer
from warden.config.models.compliance import RiskConfig, RiskThresholds


def _record(documents=None, check_statuses=None) -> ComplianceRecord:
    checks = default_checks()
    for check in checks:
        check.status = (check_statuses or {}).get(check.type, CheckStatus.PENDING)
    return ComplianceRecord(
        contact_id="contact-1",
        created_by="user-1",
        documents=documents or [],
        checks=checks,
    )


def _verified(*types: DocumentType) -> list[KYCDocument]:
    return [KYCDocument(type=t, status=DocumentStatus.VERIFIED) for t in types]


ALL_PASSED = {t: CheckStatus.PASSED for t in CheckType}
REQUIRED = (DocumentType.PAN, DocumentType.GSTIN, DocumentType.ADDRESS_PROOF)


@pytest.fixture
def scorer():
    return RiskScorer()


class TestAssess:
    """Tests for score and level computation."""

    def test_fresh_record_is_critical(self, scorer):
        """Three missing documents and four pending checks cap at 100."""
        assessment = scorer.assess(_record())

        assert assessment.score == 100
        assert assessment.level == RiskLevel.CRITICAL
        assert assessment.factors.missing_documents == 3
        assert assessment.factors.pending_checks == 4

    def test_missing_documents_and_failed_check(self, scorer):
        """60 for missing documents plus 30 for one failed check."""
        statuses = dict(ALL_PASSED)
        statuses[CheckType.IDENTITY] = CheckStatus.FAILED

        assessment = scorer.assess(_record(check_statuses=statuses))

        assert assessment.score == 90
        assert assessment.level == RiskLevel.CRITICAL

    def test_fully_verified_is_low(self, scorer):
        assessment = scorer.assess(_record(_verified(*REQUIRED), ALL_PASSED))

        assert assessment.score == 0
        assert assessment.level == RiskLevel.LOW

    def test_pending_document_still_missing(self, scorer):
        """Only verified documents satisfy a requirement."""
        documents = [KYCDocument(type=DocumentType.PAN)] + _verified(
            DocumentType.GSTIN, DocumentType.ADDRESS_PROOF
        )

        assessment = scorer.assess(_record(documents, ALL_PASSED))

        assert assessment.score == 20
        assert assessment.level == RiskLevel.LOW

    def test_rejected_and_expired_documents(self, scorer):
        """Rejected and expired documents add on top of being missing."""
        documents = [
            KYCDocument(type=DocumentType.PAN, status=DocumentStatus.REJECTED),
            KYCDocument(type=DocumentType.GSTIN, status=DocumentStatus.EXPIRED),
        ] + _verified(DocumentType.ADDRESS_PROOF)

        assessment = scorer.assess(_record(documents, ALL_PASSED))

        assert assessment.score == 20 + 20 + 25 + 15
        assert assessment.level == RiskLevel.CRITICAL

    def test_waived_check_adds_nothing(self, scorer):
        statuses = dict(ALL_PASSED)
        statuses[CheckType.SANCTIONS] = CheckStatus.WAIVED

        assert scorer.assess(_record(_verified(*REQUIRED), statuses)).score == 0

    def test_score_capped(self, scorer):
        """Raw score above the cap is clamped."""
        statuses = {t: CheckStatus.FAILED for t in CheckType}

        assessment = scorer.assess(_record(check_statuses=statuses))

        assert assessment.score == 100

    def test_idempotent(self, scorer):
        record = _record(_verified(DocumentType.PAN))
        assert scorer.assess(record) == scorer.assess(record)

    def test_verifying_a_document_never_raises_score(self, scorer):
        before = scorer.assess(_record([KYCDocument(type=DocumentType.PAN)]))
        after = scorer.assess(_record(_verified(DocumentType.PAN)))

        assert after.score <= before.score


class TestLevels:
    """Tests for level thresholds."""

    @pytest.mark.parametrize(
        ("score", "level"),
        [
            (0, RiskLevel.LOW),
            (24, RiskLevel.LOW),
            (25, RiskLevel.MEDIUM),
            (49, RiskLevel.MEDIUM),
            (50, RiskLevel.HIGH),
            (74, RiskLevel.HIGH),
            (75, RiskLevel.CRITICAL),
            (100, RiskLevel.CRITICAL),
        ],
    )
    def test_default_boundaries(self, scorer, score, level):
        assert scorer.level_for(score) == level

    def test_custom_thresholds(self):
        scorer = RiskScorer(RiskConfig(thresholds=RiskThresholds(medium=10, high=20, critical=30)))

        assert scorer.level_for(15) == RiskLevel.MEDIUM
        assert scorer.level_for(30) == RiskLevel.CRITICAL

    def test_thresholds_must_be_ordered(self):
        with pytest.raises(ValueError):
            RiskThresholds(medium=60, high=50, critical=75)

    def test_custom_required_documents(self):
        """Only configured document types count as missing."""
        scorer = RiskScorer(required_documents=[DocumentType.PASSPORT])

        assert scorer.assess(_record(check_statuses=ALL_PASSED)).score == 20

    def test_empty_required_documents_respected(self):
        """An explicitly empty requirement list is not replaced by defaults."""
        scorer = RiskScorer(required_documents=[])

        assessment = scorer.assess(_record(check_statuses=ALL_PASSED))

        assert assessment.factors.missing_documents == 0
        assert assessment.score == 0
