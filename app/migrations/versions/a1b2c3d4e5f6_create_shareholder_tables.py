"""create shareholder, verification_session and verification_event tables

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "a1b2c3d4e5f6"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "shareholder",
        sa.Column("SHAREHOLDER_CODE", sa.String(6), primary_key=True),
        sa.Column("UUID", sa.String(36), nullable=False),
        sa.Column("NAME", sa.String(100), nullable=True),
        sa.Column("ID_LAST_FOUR", sa.String(4), nullable=True),
        sa.Column("ORIGINAL_ADDRESS", sa.String(200), nullable=True),
        sa.Column("UPDATED_ADDRESS", sa.String(200), nullable=True),
        sa.Column("ORIGINAL_HOME_PHONE", sa.String(20), nullable=True),
        sa.Column("UPDATED_HOME_PHONE", sa.String(20), nullable=True),
        sa.Column("ORIGINAL_MOBILE_PHONE", sa.String(20), nullable=True),
        sa.Column("UPDATED_MOBILE_PHONE", sa.String(20), nullable=True),
        sa.Column("LOGIN_COUNT", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("UPDATE_COUNT", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("CREATED_AT", sa.DateTime(), nullable=True),
        sa.Column("UPDATED_AT", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_shareholder_UUID", "shareholder", ["UUID"], unique=True)
    op.create_index("ix_shareholder_ID_LAST_FOUR", "shareholder", ["ID_LAST_FOUR"])

    op.create_table(
        "verification_session",
        sa.Column("LOG_ID", sa.String(36), primary_key=True),
        sa.Column("SHAREHOLDER_UUID", sa.String(36), nullable=True),
        sa.Column("SHAREHOLDER_CODE", sa.String(6), nullable=True),
        sa.Column("ACTION_TYPE", sa.String(10), nullable=False),
        sa.Column("VERIFICATION_TYPE", sa.String(10), nullable=True),
        sa.Column("PHONE_NUMBER_USED", sa.String(20), nullable=True),
        sa.Column("RANDOM_CODE", sa.String(4), nullable=True),
        sa.Column("ACTION_TIME", sa.DateTime(), nullable=True),
        sa.Column("PHONE_VERIFICATION_TIME", sa.DateTime(), nullable=True),
        sa.Column("HAS_UPDATED_DATA", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("UPDATED_ADDRESS", sa.String(200), nullable=True),
        sa.Column("UPDATED_HOME_PHONE", sa.String(20), nullable=True),
        sa.Column("UPDATED_MOBILE_PHONE", sa.String(20), nullable=True),
    )
    op.create_index("ix_verification_session_SHAREHOLDER_UUID", "verification_session", ["SHAREHOLDER_UUID"])
    op.create_index("ix_verification_session_SHAREHOLDER_CODE", "verification_session", ["SHAREHOLDER_CODE"])
    op.create_index(
        "idx_session_uuid_phone_time",
        "verification_session",
        ["SHAREHOLDER_UUID", "PHONE_NUMBER_USED", "ACTION_TIME"],
    )

    op.create_table(
        "verification_event",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("log_id", sa.String(36), nullable=True),
        sa.Column("shareholder_code", sa.String(6), nullable=True),
        sa.Column("shareholder_uuid", sa.String(36), nullable=True),
        sa.Column("event_type", sa.String(30), nullable=False),
        sa.Column("occurred_at", sa.DateTime(), nullable=True),
        sa.Column("details", sa.JSON(), nullable=True),
    )
    op.create_index("ix_verification_event_log_id", "verification_event", ["log_id"])
    op.create_index("ix_verification_event_shareholder_code", "verification_event", ["shareholder_code"])
    op.create_index("ix_verification_event_event_type", "verification_event", ["event_type"])
    op.create_index("ix_verification_event_occurred_at", "verification_event", ["occurred_at"])
    op.create_index("idx_event_log_time", "verification_event", ["log_id", "occurred_at"])


def downgrade():
    op.drop_table("verification_event")
    op.drop_table("verification_session")
    op.drop_table("shareholder")
