"""Error hierarchy for the audit and compliance engine.

Every component raises one of these so callers can tell user-facing
problems (validation, illegal transitions, missing entities) apart from
retryable persistence failures and integrity violations.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from warden.audit.models import ChainVerification


class WardenError(Exception):
    """Base exception for all engine errors."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class ValidationError(WardenError):
    """Raised on malformed input or a violated uniqueness rule.

    Examples:
        - A second compliance record for the same contact
        - An actor without an id or email
    """


class InvalidTransitionError(WardenError):
    """Raised when an action is not legal from the record's current status."""

    def __init__(self, status: Any, action: Any, valid_actions: Iterable[Any]) -> None:
        self.status = status
        self.action = action
        self.valid_actions = list(valid_actions)
        allowed = ", ".join(_value(a) for a in self.valid_actions) or "none"
        super().__init__(
            f"Invalid transition: cannot perform '{_value(action)}' from status "
            f"'{_value(status)}'. Valid actions: {allowed}"
        )


class NotFoundError(WardenError):
    """Raised when a record, document, check or entry id does not exist."""

    def __init__(self, entity: str, entity_id: Any) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")


class StorageError(WardenError):
    """Raised when the persistence layer fails.

    Reads are safe to retry. A failed write is unconfirmed and should be
    re-issued with the same intended content.
    """


class ConflictError(StorageError):
    """Raised when a write loses a race.

    Examples:
        - Optimistic version mismatch on a compliance record
        - Duplicate record id or contact id
        - Audit entry whose previous hash is no longer the chain tail
    """


class ChainIntegrityError(WardenError):
    """Raised when the audit hash chain fails verification."""

    def __init__(self, verification: ChainVerification) -> None:
        self.verification = verification
        super().__init__(
            f"Audit chain broken at index {verification.broken_at} "
            f"({verification.verified_entries}/{verification.total_entries} verified)"
        )


def _value(item: Any) -> str:
    return str(getattr(item, "value", item))
