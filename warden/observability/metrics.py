"""Prometheus metrics for Warden.

Tracks audit log growth and integrity checks, compliance transitions,
risk distribution and storage failures.
"""

from prometheus_client import Counter, Histogram

# Audit log metrics
AUDIT_APPENDS = Counter(
    "warden_audit_appends_total",
    "Total number of audit entries appended",
    labelnames=["action"],
)

AUDIT_APPEND_LATENCY = Histogram(
    "warden_audit_append_latency_seconds",
    "Audit append latency in seconds, including the wait for the writer lock",
    buckets=(0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
)

AUDIT_APPEND_CONFLICTS = Counter(
    "warden_audit_append_conflicts_total",
    "Appends rebuilt because another writer moved the chain tail",
)

AUDIT_CHAIN_VERIFICATIONS = Counter(
    "warden_audit_chain_verifications_total",
    "Total number of chain verifications",
    labelnames=["result"],
)

AUDIT_ENTRIES_ARCHIVED = Counter(
    "warden_audit_entries_archived_total",
    "Entries moved behind a checkpoint by retention or capacity limits",
    labelnames=["reason"],
)

# Compliance metrics
COMPLIANCE_TRANSITIONS = Counter(
    "warden_compliance_transitions_total",
    "Total number of applied compliance transitions",
    labelnames=["action", "from_status", "to_status"],
)

COMPLIANCE_TRANSITIONS_REJECTED = Counter(
    "warden_compliance_transitions_rejected_total",
    "Transitions refused because the action was not legal",
    labelnames=["action", "status"],
)

RISK_SCORE = Histogram(
    "warden_risk_score",
    "Risk score after each recomputation",
    buckets=(0, 10, 25, 40, 50, 60, 75, 90, 100),
)

# Storage metrics
STORE_ERRORS = Counter(
    "warden_store_errors_total",
    "Total number of storage errors",
    labelnames=["store", "operation"],
)
