"""Bootstrap module for wiring Warden from configuration.

Builds the stores selected by `storage.backend`, then the audit log,
compliance workflow and expiry job on top of them. Handles:
- Logging setup from the observability section
- In-memory or PostgreSQL stores
- Optional Prometheus metrics endpoint

Example usage:

    from warden.bootstrap import bootstrap

    ctx = bootstrap()
    entry = await ctx.audit_log.append(actor, "user.login")
    record = await ctx.workflow.create_record("contact-1", "Acme Traders", actor)
"""

from dataclasses import dataclass

from prometheus_client import start_http_server

from warden.audit.chain import HashChainAuditLog
from warden.audit.recorders import AuditRecorder
from warden.audit.store import AuditLogStore
from warden.audit.stores.inmemory import InMemoryAuditLogStore
from warden.audit.stores.postgres import PostgresAuditLogStore
from warden.compliance.store import ComplianceStore
from warden.compliance.stores.inmemory import InMemoryComplianceStore
from warden.compliance.stores.postgres import PostgresComplianceStore
from warden.compliance.workflow import ComplianceWorkflow
from warden.config import get_settings
from warden.config.settings import Settings
from warden.db.pool import PostgresPool
from warden.jobs.expiry import ExpireRecordsWorkflow
from warden.observability.logging import get_logger, setup_logging

logger = get_logger(__name__)


@dataclass
class WardenContext:
    """Wired components returned from bootstrap."""

    settings: Settings
    audit_store: AuditLogStore
    compliance_store: ComplianceStore
    audit_log: HashChainAuditLog
    recorder: AuditRecorder
    workflow: ComplianceWorkflow
    expiry_job: ExpireRecordsWorkflow
    pool: PostgresPool | None = None

    async def close(self) -> None:
        """Release the database pool, if any."""
        if self.pool is not None:
            await self.pool.close()


def bootstrap(
    settings: Settings | None = None,
    start_metrics_server: bool = False,
) -> WardenContext:
    """Build a WardenContext.

    No connection is opened here; the Postgres pool connects on first use.

    Args:
        settings: Settings to use (default: get_settings())
        start_metrics_server: Serve Prometheus metrics on
            observability.metrics.port when metrics are enabled

    Returns:
        WardenContext with all components sharing the selected stores
    """
    settings = settings or get_settings()
    log_config = settings.observability.logging
    setup_logging(
        level=log_config.level,
        format=log_config.format,
        redact_pii=log_config.redact_pii,
    )

    pool: PostgresPool | None = None
    audit_store: AuditLogStore
    compliance_store: ComplianceStore
    if settings.storage.backend == "postgres":
        pool = PostgresPool.from_config(settings.storage.postgres)
        audit_store = PostgresAuditLogStore(pool)
        compliance_store = PostgresComplianceStore(pool)
    else:
        audit_store = InMemoryAuditLogStore()
        compliance_store = InMemoryComplianceStore()

    audit_log = HashChainAuditLog(audit_store, settings.audit)
    workflow = ComplianceWorkflow(compliance_store, settings.compliance)

    metrics = settings.observability.metrics
    if start_metrics_server and metrics.enabled:
        start_http_server(metrics.port)
        logger.info("metrics_server_started", port=metrics.port)

    logger.info(
        "warden_bootstrapped",
        backend=settings.storage.backend,
        max_entries=settings.audit.max_entries,
    )

    return WardenContext(
        settings=settings,
        audit_store=audit_store,
        compliance_store=compliance_store,
        audit_log=audit_log,
        recorder=AuditRecorder(audit_log),
        workflow=workflow,
        expiry_job=ExpireRecordsWorkflow(workflow, settings.compliance),
        pool=pool,
    )
