"""Create audit log and compliance record tables.

Revision ID: 001
Revises:
Create Date: 2026-10-18

Tables: audit_checkpoints, audit_entries, compliance_records
"""

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import JSONB

revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create audit and compliance tables."""
    # audit_checkpoints table
    op.create_table(
        "audit_checkpoints",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("sequence", sa.Integer, nullable=False, unique=True),
        sa.Column("start_hash", sa.String(64), nullable=False),
        sa.Column("end_hash", sa.String(64), nullable=False),
        sa.Column("entry_count", sa.Integer, nullable=False),
        sa.Column("segment_digest", sa.String(64), nullable=False),
        sa.Column("first_timestamp", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("last_timestamp", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("reason", sa.String(20), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("NOW()")),
    )

    # audit_entries table; live rows have checkpoint_id NULL
    op.create_table(
        "audit_entries",
        sa.Column("seq", sa.BigInteger, sa.Identity(), primary_key=True),
        sa.Column("id", sa.String(64), nullable=False, unique=True),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("user_email", sa.String(320), nullable=False),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("target_id", sa.String(255)),
        sa.Column("target_type", sa.String(20)),
        sa.Column("details", JSONB),
        sa.Column("ip_address", sa.String(64), nullable=False),
        sa.Column("user_agent", sa.Text, nullable=False),
        sa.Column("timestamp", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("previous_hash", sa.String(64), nullable=False, unique=True),
        sa.Column("hash", sa.String(64), nullable=False),
        sa.Column("checkpoint_id", sa.String(64), sa.ForeignKey("audit_checkpoints.id")),
    )
    op.create_index(
        "idx_audit_entries_live",
        "audit_entries",
        ["seq"],
        postgresql_where=sa.text("checkpoint_id IS NULL"),
    )
    op.create_index("idx_audit_entries_checkpoint", "audit_entries", ["checkpoint_id"])

    # compliance_records table; the record body is one JSONB document
    op.create_table(
        "compliance_records",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("contact_id", sa.String(255), nullable=False, unique=True),
        sa.Column("status", sa.String(30), nullable=False),
        sa.Column("risk_level", sa.String(20), nullable=False),
        sa.Column("risk_score", sa.Integer, nullable=False),
        sa.Column("version", sa.Integer, nullable=False),
        sa.Column("record", JSONB, nullable=False),
        sa.Column("expires_at", sa.TIMESTAMP(timezone=True)),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=False),
    )
    op.create_index("idx_compliance_records_status", "compliance_records", ["status"])
    op.create_index("idx_compliance_records_risk", "compliance_records", ["risk_level"])


def downgrade() -> None:
    """Drop audit and compliance tables."""
    op.drop_table("compliance_records")
    op.drop_table("audit_entries")
    op.drop_table("audit_checkpoints")
