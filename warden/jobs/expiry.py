"""Compliance expiry sweep.

Scheduled job that marks verified documents past their expires_at as
expired and moves approved records past their expires_at to `expired`.
Runs daily by default.
"""

from dataclasses import dataclass, field
from datetime import datetime

from warden.audit.models import Actor, truncate_ms, utc_now
from warden.compliance.models import DocumentStatus, KYCAction, KYCStatus
from warden.compliance.workflow import ComplianceWorkflow
from warden.config.models.compliance import ComplianceConfig
from warden.errors import WardenError
from warden.observability.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ExpireRecordsInput:
    """Input for the expiry sweep."""

    as_of: datetime | None = None  # None = now


@dataclass
class ExpireRecordsOutput:
    """Output from the expiry sweep."""

    documents_expired: int
    records_expired: int
    success: bool
    expired_record_ids: list[str] = field(default_factory=list)
    failed_record_ids: list[str] = field(default_factory=list)
    error: str | None = None


class ExpireRecordsWorkflow:
    """Workflow to expire lapsed documents and approvals.

    Idempotent: expired documents and records are skipped on later runs
    because both changes are one-way until a record is reactivated.
    A failure on one record is logged and the sweep continues.
    """

    WORKFLOW_NAME = "expire-compliance-records"
    CRON_SCHEDULE = "0 2 * * *"  # Daily at 02:00

    def __init__(
        self, workflow: ComplianceWorkflow, config: ComplianceConfig | None = None
    ) -> None:
        """Initialize workflow.

        Args:
            workflow: Compliance workflow whose records are swept
            config: Supplies the system actor recorded in history
        """
        self._workflow = workflow
        config = config or ComplianceConfig()
        self._actor = Actor(
            id=config.system_actor_id,
            email=f"{config.system_actor_id}@warden.local",
            name=config.system_actor_name,
        )

    async def run(self, input_data: ExpireRecordsInput) -> ExpireRecordsOutput:
        """Execute the sweep.

        Args:
            input_data: Optional reference time

        Returns:
            ExpireRecordsOutput with counts of expired documents and records
        """
        as_of = truncate_ms(input_data.as_of or utc_now())
        documents_expired = 0
        expired_ids: list[str] = []
        failed_ids: list[str] = []

        for record in await self._workflow.list_records():
            try:
                lapsed_documents = [
                    d
                    for d in record.documents
                    if d.status == DocumentStatus.VERIFIED
                    and d.expires_at is not None
                    and d.expires_at <= as_of
                ]
                if lapsed_documents:
                    record = await self._workflow.expire_documents(record.id, as_of)
                    documents_expired += len(lapsed_documents)

                if (
                    record.status == KYCStatus.APPROVED
                    and record.expires_at is not None
                    and record.expires_at <= as_of
                ):
                    await self._workflow.transition(
                        record.id,
                        KYCAction.EXPIRE,
                        self._actor,
                        reason="Approval validity lapsed",
                    )
                    expired_ids.append(record.id)
            except WardenError as e:
                failed_ids.append(record.id)
                logger.error(
                    "compliance_expiry_record_failed",
                    record_id=record.id,
                    error=str(e),
                )

        logger.info(
            "compliance_expiry_completed",
            documents_expired=documents_expired,
            records_expired=len(expired_ids),
            failed=len(failed_ids),
        )
        return ExpireRecordsOutput(
            documents_expired=documents_expired,
            records_expired=len(expired_ids),
            success=not failed_ids,
            expired_record_ids=expired_ids,
            failed_record_ids=failed_ids,
            error=f"{len(failed_ids)} record(s) failed" if failed_ids else None,
        )
