"""Tests for canonical serialization and entry hashing."""

import hashlib
import json
from datetime import UTC, datetime

import pytest

from warden.audit.hashing import (
    CANONICAL_VERSION,
    GENESIS_HASH,
    HASHED_FIELDS,
    canonicalize,
    compute_entry_hash,
    details_payload,
    entry_fields,
    segment_digest,
    to_epoch_ms,
)
from warden.audit.models import (
    AuditAction,
    AuditEntry,
    GenericDetails,
    SettingsDetails,
    UserDetails,
)

NOON = datetime(2026, 1, 15, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def fields() -> dict:
    return {
        "id": "audit_1",
        "userId": "u1",
        "userEmail": "a@example.com",
        "action": "user.login",
        "targetId": None,
        "targetType": None,
        "details": None,
        "ipAddress": "10.0.0.1",
        "userAgent": "pytest",
        "timestamp": NOON,
        "previousHash": GENESIS_HASH,
    }


class TestConstants:
    """Tests for hashing constants."""

    def test_genesis_is_64_zeros(self) -> None:
        """Genesis hash is sixty-four zero characters."""
        assert GENESIS_HASH == "0" * 64

    def test_canonical_version(self) -> None:
        """Current canonical layout is version 1."""
        assert CANONICAL_VERSION == 1


class TestCanonicalize:
    """Tests for canonicalize."""

    def test_exact_bytes(self, fields: dict) -> None:
        """Absent fields are omitted and the order is fixed."""
        expected = (
            '{"id":"audit_1","userId":"u1","userEmail":"a@example.com",'
            '"action":"user.login","ipAddress":"10.0.0.1","userAgent":"pytest",'
            '"timestamp":1768478400000,"previousHash":"' + "0" * 64 + '"}'
        )
        assert canonicalize(fields) == expected.encode("utf-8")

    def test_hash_is_sha256_of_canonical_bytes(self, fields: dict) -> None:
        """Entry hash is lowercase hex SHA-256 over the canonical form."""
        assert compute_entry_hash(fields) == hashlib.sha256(canonicalize(fields)).hexdigest()

    def test_key_order_follows_hashed_fields(self, fields: dict) -> None:
        """Keys appear in HASHED_FIELDS order regardless of input order."""
        fields["targetId"] = "c1"
        fields["targetType"] = "contact"
        fields["details"] = {"kind": "generic"}
        shuffled = dict(reversed(list(fields.items())))

        keys = list(json.loads(canonicalize(shuffled)))
        assert keys == list(HASHED_FIELDS)

    def test_details_keys_sorted_recursively(self, fields: dict) -> None:
        """Nested details keys are sorted."""
        fields["details"] = {"kind": "generic", "extra": {"b": 1, "a": {"d": 2, "c": 3}}}

        assert b'"details":{"extra":{"a":{"c":3,"d":2},"b":1},"kind":"generic"}' in (
            canonicalize(fields)
        )

    def test_hash_field_is_ignored(self, fields: dict) -> None:
        """A stray hash key does not change the canonical form."""
        with_hash = {**fields, "hash": "f" * 64}
        assert canonicalize(with_hash) == canonicalize(fields)

    def test_unsupported_version_raises(self, fields: dict) -> None:
        """Unknown layout versions are refused."""
        with pytest.raises(ValueError, match="Unsupported canonical version"):
            canonicalize(fields, version=2)


class TestEpochMillis:
    """Tests for timestamp conversion."""

    def test_whole_seconds(self) -> None:
        """Noon on 2026-01-15 UTC."""
        assert to_epoch_ms(NOON) == 1768478400000

    def test_sub_millisecond_truncated(self) -> None:
        """Microseconds below one millisecond are dropped."""
        assert to_epoch_ms(NOON.replace(microsecond=123999)) == 1768478400123

    def test_naive_treated_as_utc(self) -> None:
        """Naive datetimes are read as UTC."""
        assert to_epoch_ms(NOON.replace(tzinfo=None)) == 1768478400000


class TestDetailsPayload:
    """Tests for details_payload."""

    def test_typed_variant(self) -> None:
        """Unset keys and empty extra are dropped; keys use durable names."""
        payload = details_payload(UserDetails(invitee_email="new@example.com", role="admin"))
        assert payload == {"kind": "user", "inviteeEmail": "new@example.com", "role": "admin"}

    def test_extra_kept_when_present(self) -> None:
        """Non-empty extension map is hashed."""
        payload = details_payload(GenericDetails(extra={"source": "api"}))
        assert payload == {"kind": "generic", "extra": {"source": "api"}}

    def test_settings_values_any_json(self) -> None:
        """Settings values may be any JSON value."""
        payload = details_payload(
            SettingsDetails(setting_key="theme", old_value=["a"], new_value={"b": 1})
        )
        assert payload == {
            "kind": "settings",
            "settingKey": "theme",
            "oldValue": ["a"],
            "newValue": {"b": 1},
        }

    def test_none(self) -> None:
        assert details_payload(None) is None


class TestComputeEntryHash:
    """Tests for hashing whole entries."""

    def test_entry_and_fields_agree(self, fields: dict) -> None:
        """Hashing an entry equals hashing its field mapping."""
        entry = AuditEntry(
            id="audit_1",
            user_id="u1",
            user_email="a@example.com",
            action=AuditAction.USER_LOGIN,
            ip_address="10.0.0.1",
            user_agent="pytest",
            timestamp=NOON,
            previous_hash=GENESIS_HASH,
            hash="",
        )
        assert entry_fields(entry)["action"] == "user.login"
        assert compute_entry_hash(entry) == compute_entry_hash(fields)

    def test_any_field_change_changes_hash(self, fields: dict) -> None:
        """Each hashed field contributes to the digest."""
        original = compute_entry_hash(fields)
        for name, value in [
            ("id", "audit_2"),
            ("userEmail", "b@example.com"),
            ("action", "user.logout"),
            ("ipAddress", "10.0.0.2"),
            ("timestamp", NOON.replace(microsecond=1000)),
            ("previousHash", "1" * 64),
        ]:
            assert compute_entry_hash({**fields, name: value}) != original, name


class TestSegmentDigest:
    """Tests for segment_digest."""

    def test_order_sensitive(self) -> None:
        """Reordering hashes changes the digest."""
        assert segment_digest(["a" * 64, "b" * 64]) != segment_digest(["b" * 64, "a" * 64])

    def test_deterministic(self) -> None:
        assert segment_digest(iter(["a" * 64])) == segment_digest(["a" * 64])
