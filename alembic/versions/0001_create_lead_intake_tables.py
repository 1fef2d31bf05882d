"""create users, leads, messages and duplicate_leads

Revision ID: 0001_lead_intake
Revises:
Create Date: 2026-10-18 09:00:00.000000

This migration:
  UPGRADE:
    1. ``users``: customers, with UNIQUE email and UNIQUE phone.
    2. ``leads``: partner leads, UNIQUE correlation_id, status CHECK.
    3. ``messages``: lead conversation thread, channel/direction/status
       CHECKs and a (lead_id, created_at) index for thread reads.
    4. ``duplicate_leads``: rebate audit rows for re-submissions.

  DOWNGRADE:
    Drops the four tables in reverse dependency order.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001_lead_intake"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(255), unique=True),
        sa.Column("phone", sa.String(50), unique=True),
        sa.Column("first_name", sa.String(100)),
        sa.Column("last_name", sa.String(100)),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )

    op.create_table(
        "leads",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("address_line1", sa.String(255)),
        sa.Column("address_line2", sa.String(255)),
        sa.Column("city", sa.String(100)),
        sa.Column("state", sa.String(50)),
        sa.Column("postal_code", sa.String(20)),
        sa.Column("source", sa.String(255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("category", sa.String(255)),
        sa.Column("urgency", sa.String(100)),
        sa.Column("correlation_id", sa.Uuid(), unique=True),
        sa.Column("al_account_id", sa.String(100)),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("converted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("received_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("processed_at", sa.DateTime(timezone=True)),
        sa.CheckConstraint(
            "status IN ('duplicate', 'pending', 'processed')", name="ck_lead_status"
        ),
    )
    op.create_index("ix_leads_user_id", "leads", ["user_id"])
    op.create_index("ix_leads_received_at", "leads", ["received_at"])
    op.create_index("ix_leads_status", "leads", ["status"])

    op.create_table(
        "messages",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("lead_id", sa.Uuid(), sa.ForeignKey("leads.id"), nullable=False),
        sa.Column("channel", sa.String(10), nullable=False),
        sa.Column("direction", sa.String(10), nullable=False),
        sa.Column("from_address", sa.String(255), nullable=False),
        sa.Column("to_address", sa.String(255), nullable=False),
        sa.Column("subject", sa.String(255)),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("html_body", sa.Text()),
        sa.Column("status", sa.String(20), nullable=False, server_default="draft"),
        sa.Column("external_id", sa.String(255)),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("sent_at", sa.DateTime(timezone=True)),
        sa.Column("delivered_at", sa.DateTime(timezone=True)),
        sa.Column("read_at", sa.DateTime(timezone=True)),
        sa.CheckConstraint("channel IN ('email', 'sms')", name="ck_message_channel"),
        sa.CheckConstraint(
            "direction IN ('inbound', 'outbound')", name="ck_message_direction"
        ),
        sa.CheckConstraint(
            "status IN ('delivered', 'draft', 'failed', 'received', 'sending', 'sent')",
            name="ck_message_status",
        ),
    )
    op.create_index(
        "ix_messages_lead_id_created_at", "messages", ["lead_id", "created_at"]
    )

    op.create_table(
        "duplicate_leads",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "original_lead_id", sa.Uuid(), sa.ForeignKey("leads.id"), nullable=False
        ),
        sa.Column("duplicate_lead_id", sa.Uuid(), sa.ForeignKey("leads.id")),
        sa.Column("match_criteria", sa.String(50), nullable=False),
        sa.Column("detected_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "rebate_claimed", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("rebate_status", sa.String(20)),
        sa.CheckConstraint(
            "rebate_status IS NULL OR rebate_status IN "
            "('approved', 'pending', 'rejected', 'submitted')",
            name="ck_duplicate_rebate_status",
        ),
    )
    op.create_index(
        "ix_duplicate_leads_original_lead_id", "duplicate_leads", ["original_lead_id"]
    )


def downgrade() -> None:
    op.drop_index("ix_duplicate_leads_original_lead_id", table_name="duplicate_leads")
    op.drop_table("duplicate_leads")
    op.drop_index("ix_messages_lead_id_created_at", table_name="messages")
    op.drop_table("messages")
    op.drop_index("ix_leads_status", table_name="leads")
    op.drop_index("ix_leads_received_at", table_name="leads")
    op.drop_index("ix_leads_user_id", table_name="leads")
    op.drop_table("leads")
    op.drop_table("users")
