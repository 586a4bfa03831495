"""Per-action convenience recorders over HashChainAuditLog.

Each method builds the target reference and typed details for one kind
of user action so callers never assemble details by hand.
"""

from typing import Any

from warden.audit.chain import HashChainAuditLog
from warden.audit.models import (
    Actor,
    AuditAction,
    AuditEntry,
    AuditTarget,
    ContactDetails,
    SessionDetails,
    SettingsDetails,
    TargetType,
    UserDetails,
)


class AuditRecorder:
    """Typed front end for recording user, contact, settings and session actions."""

    def __init__(self, log: HashChainAuditLog) -> None:
        self._log = log

    async def login(self, actor: Actor, **client: Any) -> AuditEntry:
        return await self._log.append(actor, AuditAction.USER_LOGIN, **client)

    async def logout(self, actor: Actor, **client: Any) -> AuditEntry:
        return await self._log.append(actor, AuditAction.USER_LOGOUT, **client)

    async def invite(self, actor: Actor, invitee_email: str, role: str) -> AuditEntry:
        return await self._log.append(
            actor,
            AuditAction.USER_INVITE,
            details=UserDetails(invitee_email=invitee_email, role=role),
        )

    async def approve_user(
        self, actor: Actor, approved_user_id: str, approved_email: str
    ) -> AuditEntry:
        return await self._log.append(
            actor,
            AuditAction.USER_APPROVE,
            AuditTarget(type=TargetType.USER, id=approved_user_id),
            UserDetails(approved_email=approved_email),
        )

    async def reject_user(
        self, actor: Actor, rejected_user_id: str, rejected_email: str
    ) -> AuditEntry:
        return await self._log.append(
            actor,
            AuditAction.USER_REJECT,
            AuditTarget(type=TargetType.USER, id=rejected_user_id),
            UserDetails(rejected_email=rejected_email),
        )

    async def suspend_user(
        self,
        actor: Actor,
        suspended_user_id: str,
        suspended_email: str,
        reason: str | None = None,
    ) -> AuditEntry:
        return await self._log.append(
            actor,
            AuditAction.USER_SUSPEND,
            AuditTarget(type=TargetType.USER, id=suspended_user_id),
            UserDetails(suspended_email=suspended_email, reason=reason),
        )

    async def change_role(
        self,
        actor: Actor,
        target_user_id: str,
        target_email: str,
        old_role: str,
        new_role: str,
    ) -> AuditEntry:
        return await self._log.append(
            actor,
            AuditAction.USER_ROLE_CHANGE,
            AuditTarget(type=TargetType.USER, id=target_user_id),
            UserDetails(target_email=target_email, old_role=old_role, new_role=new_role),
        )

    async def create_contact(
        self, actor: Actor, contact_id: str, contact_name: str
    ) -> AuditEntry:
        return await self._log.append(
            actor,
            AuditAction.CONTACT_CREATE,
            AuditTarget(type=TargetType.CONTACT, id=contact_id, name=contact_name),
            ContactDetails(contact_name=contact_name),
        )

    async def update_contact(
        self,
        actor: Actor,
        contact_id: str,
        contact_name: str,
        changed_fields: list[str],
    ) -> AuditEntry:
        return await self._log.append(
            actor,
            AuditAction.CONTACT_UPDATE,
            AuditTarget(type=TargetType.CONTACT, id=contact_id, name=contact_name),
            ContactDetails(contact_name=contact_name, changed_fields=changed_fields),
        )

    async def delete_contact(
        self, actor: Actor, contact_id: str, contact_name: str
    ) -> AuditEntry:
        return await self._log.append(
            actor,
            AuditAction.CONTACT_DELETE,
            AuditTarget(type=TargetType.CONTACT, id=contact_id, name=contact_name),
            ContactDetails(contact_name=contact_name),
        )

    async def export_contacts(
        self, actor: Actor, contact_count: int, format: str
    ) -> AuditEntry:
        return await self._log.append(
            actor,
            AuditAction.CONTACT_EXPORT,
            details=ContactDetails(contact_count=contact_count, format=format),
        )

    async def import_contacts(
        self, actor: Actor, contact_count: int, source: str
    ) -> AuditEntry:
        return await self._log.append(
            actor,
            AuditAction.CONTACT_IMPORT,
            details=ContactDetails(contact_count=contact_count, source=source),
        )

    async def update_setting(
        self, actor: Actor, setting_key: str, old_value: Any, new_value: Any
    ) -> AuditEntry:
        return await self._log.append(
            actor,
            AuditAction.SETTINGS_UPDATE,
            AuditTarget(type=TargetType.SETTINGS),
            SettingsDetails(setting_key=setting_key, old_value=old_value, new_value=new_value),
        )

    async def revoke_session(
        self, actor: Actor, revoked_session_id: str, revoked_user_id: str
    ) -> AuditEntry:
        return await self._log.append(
            actor,
            AuditAction.SESSION_REVOKE,
            AuditTarget(type=TargetType.SESSION, id=revoked_session_id),
            SessionDetails(revoked_user_id=revoked_user_id),
        )
