"""Tests for the error hierarchy."""

import pytest

from warden.audit.models import ChainVerification
from warden.compliance.models import KYCAction, KYCStatus
from warden.errors import (
    ChainIntegrityError,
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    StorageError,
    ValidationError,
    WardenError,
)


class TestHierarchy:
    """Tests for subclass relationships."""

    @pytest.mark.parametrize(
        "error_cls",
        [ValidationError, NotFoundError, StorageError, ConflictError, ChainIntegrityError],
    )
    def test_all_are_warden_errors(self, error_cls):
        assert issubclass(error_cls, WardenError)

    def test_conflict_is_storage_error(self):
        """Callers retrying storage failures also catch conflicts."""
        assert issubclass(ConflictError, StorageError)

    def test_cause_kept(self):
        cause = RuntimeError("connection reset")
        error = StorageError("write failed", cause=cause)

        assert error.cause is cause
        assert error.message == "write failed"


class TestMessages:
    """Tests for formatted messages."""

    def test_invalid_transition(self):
        error = InvalidTransitionError(
            KYCStatus.APPROVED,
            KYCAction.SUBMIT_FOR_REVIEW,
            [KYCAction.EXPIRE, KYCAction.SUSPEND, KYCAction.REACTIVATE],
        )

        assert str(error) == (
            "Invalid transition: cannot perform 'submit_for_review' from status "
            "'approved'. Valid actions: expire, suspend, reactivate"
        )
        assert error.status == KYCStatus.APPROVED
        assert error.action == KYCAction.SUBMIT_FOR_REVIEW

    def test_invalid_transition_without_actions(self):
        error = InvalidTransitionError("draft", "create", [])
        assert str(error).endswith("Valid actions: none")

    def test_not_found(self):
        error = NotFoundError("Document", "doc_1")

        assert str(error) == "Document not found: doc_1"
        assert (error.entity, error.entity_id) == ("Document", "doc_1")

    def test_chain_integrity(self):
        verification = ChainVerification(
            valid=False,
            total_entries=3,
            verified_entries=1,
            broken_at=1,
            reason="hash_mismatch",
            start_hash="0" * 64,
        )
        error = ChainIntegrityError(verification)

        assert str(error) == "Audit chain broken at index 1 (1/3 verified)"
        assert error.verification is verification
