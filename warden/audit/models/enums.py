"""Enums for the audit domain."""

from enum import Enum


class AuditAction(str, Enum):
    """Closed set of actor actions recorded in the audit log."""

    USER_LOGIN = "user.login"
    USER_LOGOUT = "user.logout"
    USER_INVITE = "user.invite"
    USER_APPROVE = "user.approve"
    USER_REJECT = "user.reject"
    USER_SUSPEND = "user.suspend"
    USER_ROLE_CHANGE = "user.role_change"
    CONTACT_CREATE = "contact.create"
    CONTACT_UPDATE = "contact.update"
    CONTACT_DELETE = "contact.delete"
    CONTACT_EXPORT = "contact.export"
    CONTACT_IMPORT = "contact.import"
    SETTINGS_UPDATE = "settings.update"
    SESSION_REVOKE = "session.revoke"

    @property
    def category(self) -> str:
        """Prefix before the dot: user, contact, settings or session."""
        return self.value.split(".", 1)[0]


class TargetType(str, Enum):
    """Kind of entity an action was performed on."""

    USER = "user"
    CONTACT = "contact"
    SETTINGS = "settings"
    SESSION = "session"
