"""KYC state machine.

Both tables are keyed by the closed enums; every status and every action
has an entry.
"""

from warden.compliance.models import KYCAction, KYCStatus

# Actions allowed from each status, in display order
AVAILABLE_ACTIONS: dict[KYCStatus, tuple[KYCAction, ...]] = {
    KYCStatus.DRAFT: (KYCAction.SUBMIT_FOR_REVIEW,),
    KYCStatus.PENDING_REVIEW: (
        KYCAction.APPROVE_REVIEW,
        KYCAction.REJECT_REVIEW,
        KYCAction.REQUEST_CHANGES,
    ),
    KYCStatus.COMPLIANCE_CHECK: (
        KYCAction.COMPLETE_COMPLIANCE,
        KYCAction.FAIL_COMPLIANCE,
        KYCAction.FINAL_APPROVE,
        KYCAction.FINAL_REJECT,
    ),
    KYCStatus.APPROVED: (KYCAction.EXPIRE, KYCAction.SUSPEND, KYCAction.REACTIVATE),
    KYCStatus.REJECTED: (KYCAction.REACTIVATE,),
    KYCStatus.EXPIRED: (KYCAction.REACTIVATE,),
    KYCStatus.SUSPENDED: (KYCAction.REACTIVATE,),
}

# Status a record lands in after each action
TARGET_STATUS: dict[KYCAction, KYCStatus] = {
    KYCAction.CREATE: KYCStatus.DRAFT,
    KYCAction.SUBMIT_FOR_REVIEW: KYCStatus.PENDING_REVIEW,
    KYCAction.APPROVE_REVIEW: KYCStatus.COMPLIANCE_CHECK,
    KYCAction.REJECT_REVIEW: KYCStatus.DRAFT,
    KYCAction.REQUEST_CHANGES: KYCStatus.DRAFT,
    KYCAction.COMPLETE_COMPLIANCE: KYCStatus.APPROVED,
    KYCAction.FAIL_COMPLIANCE: KYCStatus.REJECTED,
    KYCAction.FINAL_APPROVE: KYCStatus.APPROVED,
    KYCAction.FINAL_REJECT: KYCStatus.REJECTED,
    KYCAction.EXPIRE: KYCStatus.EXPIRED,
    KYCAction.SUSPEND: KYCStatus.SUSPENDED,
    KYCAction.REACTIVATE: KYCStatus.DRAFT,
}


def available_actions(status: KYCStatus) -> list[KYCAction]:
    """Actions allowed from a status, in display order."""
    return list(AVAILABLE_ACTIONS[status])


def target_status(action: KYCAction) -> KYCStatus:
    """Status a record lands in after an action."""
    return TARGET_STATUS[action]


def is_valid_transition(status: KYCStatus, action: KYCAction) -> bool:
    return action in AVAILABLE_ACTIONS[status]
