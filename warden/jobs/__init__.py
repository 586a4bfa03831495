"""Scheduled background jobs."""

from warden.jobs.expiry import (
    ExpireRecordsInput,
    ExpireRecordsOutput,
    ExpireRecordsWorkflow,
)

__all__ = [
    "ExpireRecordsInput",
    "ExpireRecordsOutput",
    "ExpireRecordsWorkflow",
]
