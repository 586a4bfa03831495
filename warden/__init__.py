"""Warden: tamper-evident audit trail and compliance workflow engine."""

__version__ = "0.1.0"
