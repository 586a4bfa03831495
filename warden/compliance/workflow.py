"""ComplianceWorkflow: KYC state machine over a ComplianceStore.

Every mutation follows the same path: take the record's mutex, load the
current version, change a copy, recompute risk, and write the whole
record back conditioned on the version that was read. A failure at any
step leaves the stored record untouched.
"""

from collections.abc import Callable
from datetime import datetime, timedelta

from warden.audit.models import Actor, truncate_ms, utc_now
from warden.compliance.locks import RecordMutex, contact_key, record_key
from warden.compliance.models import (
    CheckStatus,
    CheckType,
    ComplianceRecord,
    ComplianceStats,
    DocumentStatus,
    KYCAction,
    KYCDocument,
    KYCStatus,
    NewDocument,
    RiskLevel,
    TransitionEntry,
    default_checks,
)
from warden.compliance.risk import RiskScorer
from warden.compliance.store import ComplianceStore
from warden.compliance.transitions import (
    available_actions,
    is_valid_transition,
    target_status,
)
from warden.config.models.compliance import ComplianceConfig
from warden.errors import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from warden.observability.logging import get_logger
from warden.observability.metrics import (
    COMPLIANCE_TRANSITIONS,
    COMPLIANCE_TRANSITIONS_REJECTED,
    RISK_SCORE,
)

logger = get_logger(__name__)

Mutation = Callable[[ComplianceRecord, datetime], None]


def _parse_status(status: KYCStatus | str) -> KYCStatus:
    try:
        return KYCStatus(status)
    except ValueError as e:
        raise ValidationError(f"Unknown KYC status: {status}", cause=e) from e


def _parse_action(action: KYCAction | str) -> KYCAction:
    try:
        return KYCAction(action)
    except ValueError as e:
        raise ValidationError(f"Unknown KYC action: {action}", cause=e) from e


class ComplianceWorkflow:
    """Applies KYC workflow operations to records in a ComplianceStore."""

    def __init__(
        self,
        store: ComplianceStore,
        config: ComplianceConfig | None = None,
        scorer: RiskScorer | None = None,
        clock: Callable[[], datetime] = utc_now,
        mutex: RecordMutex | None = None,
    ) -> None:
        """Initialize the workflow.

        Args:
            store: Backing record store
            config: Approval validity, expiry window and risk settings
            scorer: Risk scorer; built from config when omitted
            clock: Source of current UTC time
            mutex: Per-record lock registry; share one between workflows
                over the same store
        """
        self._store = store
        self._config = config or ComplianceConfig()
        self._scorer = scorer or RiskScorer(
            self._config.risk,
            list(self._config.required_documents),
        )
        self._clock = clock
        self._mutex = mutex or RecordMutex()

    @property
    def store(self) -> ComplianceStore:
        return self._store

    @staticmethod
    def get_available_actions(status: KYCStatus | str) -> list[KYCAction]:
        return available_actions(_parse_status(status))

    @staticmethod
    def is_valid_transition(status: KYCStatus | str, action: KYCAction | str) -> bool:
        return is_valid_transition(_parse_status(status), _parse_action(action))

    def _now(self) -> datetime:
        return truncate_ms(self._clock())

    def _apply_risk(self, record: ComplianceRecord) -> None:
        assessment = self._scorer.assess(record)
        record.risk_score = assessment.score
        record.risk_level = assessment.level
        RISK_SCORE.observe(assessment.score)

    # Commands

    async def create_record(
        self, contact_id: str, contact_name: str, actor: Actor
    ) -> ComplianceRecord:
        """Open a draft record for a contact.

        Raises:
            ValidationError: Empty contact id, or the contact already has a record
        """
        if not contact_id:
            raise ValidationError("contact_id is required")
        if not actor.id:
            raise ValidationError("Actor must have an id")

        async with self._mutex.acquire(contact_key(contact_id)):
            if await self._store.get_by_contact(contact_id) is not None:
                raise ValidationError(
                    f"Compliance record already exists for contact: {contact_id}"
                )

            now = self._now()
            record = ComplianceRecord(
                contact_id=contact_id,
                contact_name=contact_name,
                checks=default_checks(),
                history=[
                    TransitionEntry(
                        action=KYCAction.CREATE,
                        from_status=KYCStatus.DRAFT,
                        to_status=KYCStatus.DRAFT,
                        user_id=actor.id,
                        user_name=actor.name,
                        reason="KYC record created",
                        timestamp=now,
                    )
                ],
                created_by=actor.id,
                created_at=now,
                updated_at=now,
            )
            self._apply_risk(record)

            try:
                stored = await self._store.put(record, expected_version=None)
            except ConflictError as e:
                if await self._store.get_by_contact(contact_id) is not None:
                    raise ValidationError(
                        f"Compliance record already exists for contact: {contact_id}",
                        cause=e,
                    ) from e
                raise

        logger.info(
            "compliance_record_created",
            record_id=stored.id,
            contact_id=contact_id,
            user_id=actor.id,
            risk_score=stored.risk_score,
        )
        return stored

    async def _mutate(
        self, record_id: str, mutation: Mutation, operation: str
    ) -> ComplianceRecord:
        async with self._mutex.acquire(record_key(record_id)):
            record = await self._store.get(record_id)
            if record is None:
                raise NotFoundError("Compliance record", record_id)

            expected_version = record.version
            working = record.model_copy(deep=True)
            now = self._now()
            mutation(working, now)
            previous_score = working.risk_score
            self._apply_risk(working)
            working.updated_at = now
            stored = await self._store.put(working, expected_version=expected_version)

        if stored.risk_score != previous_score:
            logger.info(
                "risk_score_updated",
                record_id=record_id,
                operation=operation,
                previous_score=previous_score,
                risk_score=stored.risk_score,
                risk_level=stored.risk_level.value,
            )
        return stored

    async def transition(
        self,
        record_id: str,
        action: KYCAction | str,
        actor: Actor,
        reason: str = "",
    ) -> ComplianceRecord:
        """Apply a workflow action.

        Raises:
            NotFoundError: Unknown record
            InvalidTransitionError: Action not allowed from the current status
            ValidationError: Unknown action string
        """
        action = _parse_action(action)

        def apply(record: ComplianceRecord, now: datetime) -> None:
            current = record.status
            if not is_valid_transition(current, action):
                COMPLIANCE_TRANSITIONS_REJECTED.labels(
                    action=action.value, status=current.value
                ).inc()
                logger.warning(
                    "compliance_transition_rejected",
                    record_id=record_id,
                    action=action.value,
                    status=current.value,
                )
                raise InvalidTransitionError(current, action, available_actions(current))

            new_status = target_status(action)
            record.history.append(
                TransitionEntry(
                    action=action,
                    from_status=current,
                    to_status=new_status,
                    user_id=actor.id,
                    user_name=actor.name,
                    reason=reason,
                    timestamp=now,
                )
            )
            record.status = new_status
            if new_status == KYCStatus.APPROVED:
                record.approved_at = now
                record.approved_by = actor.id
                record.expires_at = now + timedelta(days=self._config.approval_validity_days)

        stored = await self._mutate(record_id, apply, operation="transition")
        last = stored.history[-1]
        COMPLIANCE_TRANSITIONS.labels(
            action=action.value,
            from_status=last.from_status.value,
            to_status=last.to_status.value,
        ).inc()
        logger.info(
            "compliance_transition_applied",
            record_id=record_id,
            action=action.value,
            from_status=last.from_status.value,
            to_status=last.to_status.value,
            user_id=actor.id,
        )
        return stored

    async def add_document(self, record_id: str, document: NewDocument) -> ComplianceRecord:
        """Attach a document and recompute risk.

        Raises:
            NotFoundError: Unknown record
        """

        def apply(record: ComplianceRecord, now: datetime) -> None:
            record.documents.append(
                KYCDocument(
                    type=document.type,
                    name=document.name,
                    status=document.status,
                    uploaded_at=now,
                    expires_at=document.expires_at,
                    notes=document.notes,
                )
            )

        stored = await self._mutate(record_id, apply, operation="add_document")
        logger.info(
            "compliance_document_added",
            record_id=record_id,
            document_id=stored.documents[-1].id,
            document_type=document.type.value,
        )
        return stored

    async def verify_document(
        self,
        record_id: str,
        document_id: str,
        actor: Actor,
        verified: bool,
        notes: str = "",
    ) -> ComplianceRecord:
        """Mark a document verified or rejected and recompute risk.

        Raises:
            NotFoundError: Unknown record or document
        """

        def apply(record: ComplianceRecord, now: datetime) -> None:
            document = record.find_document(document_id)
            if document is None:
                raise NotFoundError("Document", document_id)
            document.status = DocumentStatus.VERIFIED if verified else DocumentStatus.REJECTED
            document.verified_at = now
            document.verified_by = actor.id
            document.notes = notes

        stored = await self._mutate(record_id, apply, operation="verify_document")
        logger.info(
            "compliance_document_reviewed",
            record_id=record_id,
            document_id=document_id,
            verified=verified,
            user_id=actor.id,
        )
        return stored

    async def complete_compliance_check(
        self,
        record_id: str,
        check_type: CheckType | str,
        actor: Actor,
        passed: bool,
        findings: str = "",
    ) -> ComplianceRecord:
        """Record the outcome of a check and recompute risk.

        Raises:
            NotFoundError: Unknown record, or the record has no check of this type
            ValidationError: Unknown check type
        """
        try:
            check_type = CheckType(check_type)
        except ValueError as e:
            raise ValidationError(f"Unknown check type: {check_type}", cause=e) from e

        def apply(record: ComplianceRecord, now: datetime) -> None:
            check = record.find_check(check_type)
            if check is None:
                raise NotFoundError("Compliance check", check_type.value)
            check.status = CheckStatus.PASSED if passed else CheckStatus.FAILED
            check.checked_at = now
            check.checked_by = actor.id
            check.findings = findings

        stored = await self._mutate(record_id, apply, operation="complete_check")
        logger.info(
            "compliance_check_completed",
            record_id=record_id,
            check_type=check_type.value,
            passed=passed,
            user_id=actor.id,
        )
        return stored

    async def update_risk_score(self, record_id: str) -> ComplianceRecord:
        """Recompute and persist risk without any other change."""
        return await self._mutate(record_id, lambda record, now: None, operation="rescore")

    async def expire_documents(self, record_id: str, as_of: datetime) -> ComplianceRecord:
        """Mark verified documents whose expires_at has passed as expired."""

        def apply(record: ComplianceRecord, now: datetime) -> None:
            for document in record.documents:
                if (
                    document.status == DocumentStatus.VERIFIED
                    and document.expires_at is not None
                    and document.expires_at <= as_of
                ):
                    document.status = DocumentStatus.EXPIRED

        return await self._mutate(record_id, apply, operation="expire_documents")

    # Queries

    async def get_record(self, record_id: str) -> ComplianceRecord:
        """Get a record by ID.

        Raises:
            NotFoundError: Unknown record
        """
        record = await self._store.get(record_id)
        if record is None:
            raise NotFoundError("Compliance record", record_id)
        return record

    async def get_record_by_contact(self, contact_id: str) -> ComplianceRecord | None:
        return await self._store.get_by_contact(contact_id)

    async def list_records(self) -> list[ComplianceRecord]:
        return await self._store.list_all()

    async def by_status(self, status: KYCStatus | str) -> list[ComplianceRecord]:
        status = _parse_status(status)
        return [r for r in await self._store.list_all() if r.status == status]

    async def pending_reviews(self) -> list[ComplianceRecord]:
        return await self.by_status(KYCStatus.PENDING_REVIEW)

    async def compliance_queue(self) -> list[ComplianceRecord]:
        return await self.by_status(KYCStatus.COMPLIANCE_CHECK)

    async def high_risk(self) -> list[ComplianceRecord]:
        return [
            r
            for r in await self._store.list_all()
            if r.risk_level in (RiskLevel.HIGH, RiskLevel.CRITICAL)
        ]

    async def expiring_within(self, days: int | None = None) -> list[ComplianceRecord]:
        """Approved records whose approval lapses before now + days.

        Records already past their expiry but not yet expired are included.
        """
        days = days if days is not None else self._config.expiring_window_days
        cutoff = self._now() + timedelta(days=days)
        return [
            r
            for r in await self._store.list_all()
            if r.status == KYCStatus.APPROVED
            and r.expires_at is not None
            and r.expires_at < cutoff
        ]

    async def stats(self) -> ComplianceStats:
        """Counts by status and risk, queue sizes and mean time to approval."""
        records = await self._store.list_all()
        by_status = {status.value: 0 for status in KYCStatus}
        by_risk = {level.value: 0 for level in RiskLevel}
        processing_seconds: list[float] = []

        for record in records:
            by_status[record.status.value] += 1
            by_risk[record.risk_level.value] += 1
            if record.approved_at is not None:
                processing_seconds.append(
                    (record.approved_at - record.created_at).total_seconds()
                )

        expiring = await self.expiring_within(self._config.expiring_window_days)
        return ComplianceStats(
            total=len(records),
            by_status=by_status,
            by_risk=by_risk,
            pending_review=by_status[KYCStatus.PENDING_REVIEW.value],
            compliance_queue=by_status[KYCStatus.COMPLIANCE_CHECK.value],
            expiring_soon=len(expiring),
            average_processing_time=(
                sum(processing_seconds) / len(processing_seconds)
                if processing_seconds
                else 0.0
            ),
        )
