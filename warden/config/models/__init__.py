"""Configuration section models."""

from warden.config.models.audit import AuditConfig
from warden.config.models.compliance import (
    ComplianceConfig,
    RiskConfig,
    RiskThresholds,
    RiskWeights,
)
from warden.config.models.observability import (
    LoggingConfig,
    MetricsConfig,
    ObservabilityConfig,
)
from warden.config.models.storage import PostgresConfig, StorageConfig

__all__ = [
    "AuditConfig",
    "ComplianceConfig",
    "RiskConfig",
    "RiskThresholds",
    "RiskWeights",
    "LoggingConfig",
    "MetricsConfig",
    "ObservabilityConfig",
    "PostgresConfig",
    "StorageConfig",
]
