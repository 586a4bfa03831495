"""Typed metadata attached to audit entries.

Each action category has its own variant, selected by the `kind`
discriminator. Every variant also carries an `extra` map so new keys can
be recorded without a schema change.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from warden.audit.models.enums import AuditAction


class _DetailsBase(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    extra: dict[str, Any] = Field(
        default_factory=dict, description="Forward-compatible extension keys"
    )


class UserDetails(_DetailsBase):
    """Details for user.* actions (invites, approvals, role changes)."""

    kind: Literal["user"] = "user"
    invitee_email: str | None = None
    role: str | None = None
    approved_email: str | None = None
    rejected_email: str | None = None
    suspended_email: str | None = None
    target_email: str | None = None
    old_role: str | None = None
    new_role: str | None = None
    reason: str | None = None


class ContactDetails(_DetailsBase):
    """Details for contact.* actions."""

    kind: Literal["contact"] = "contact"
    contact_name: str | None = None
    changed_fields: list[str] | None = None
    contact_count: int | None = None
    format: str | None = None
    source: str | None = None


class SettingsDetails(_DetailsBase):
    """Details for settings.* actions."""

    kind: Literal["settings"] = "settings"
    setting_key: str | None = None
    old_value: Any = None
    new_value: Any = None


class SessionDetails(_DetailsBase):
    """Details for session.* actions."""

    kind: Literal["session"] = "session"
    revoked_user_id: str | None = None


class GenericDetails(_DetailsBase):
    """Untyped details; everything lives in `extra`."""

    kind: Literal["generic"] = "generic"


AuditDetails = Annotated[
    UserDetails | ContactDetails | SettingsDetails | SessionDetails | GenericDetails,
    Field(discriminator="kind"),
]


def details_match_action(details: BaseModel, action: AuditAction) -> bool:
    """Whether a details variant may accompany an action.

    Generic details fit any action; typed variants only fit their category.
    """
    kind = getattr(details, "kind", None)
    return kind == "generic" or kind == action.category
