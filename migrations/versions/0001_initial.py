"""users, provider profiles and otp codes

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-17
"""

from alembic import op
import sqlalchemy as sa


revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("phone", sa.String(20), nullable=False),
        sa.Column("role", sa.String(10), nullable=False, server_default="buyer"),
        sa.Column("name", sa.String(120), nullable=True),
        sa.Column("avatar_base64", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime, nullable=False),
        sa.Column("updated_at", sa.DateTime, nullable=False),
        sa.CheckConstraint("role in ('buyer','provider')", name="ck_users_role"),
    )
    op.create_index("ix_users_phone", "users", ["phone"], unique=True)

    op.create_table(
        "provider_profiles",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("verification_status", sa.String(10), nullable=False, server_default="pending"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime, nullable=False),
        sa.Column("updated_at", sa.DateTime, nullable=False),
        sa.CheckConstraint(
            "verification_status in ('pending','approved','rejected')",
            name="ck_provider_profiles_status",
        ),
    )
    op.create_index("ix_provider_profiles_user_id", "provider_profiles", ["user_id"], unique=True)

    op.create_table(
        "provider_documents",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column(
            "provider_profile_id",
            sa.Integer,
            sa.ForeignKey("provider_profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("cnic_front_base64", sa.Text, nullable=False),
        sa.Column("cnic_back_base64", sa.Text, nullable=False),
        sa.Column("selfie_base64", sa.Text, nullable=False),
        sa.Column("submitted_at", sa.DateTime, nullable=False),
    )
    op.create_index(
        "ix_provider_documents_provider_profile_id",
        "provider_documents",
        ["provider_profile_id"],
    )

    op.create_table(
        "otp_codes",
        sa.Column("phone", sa.String(20), primary_key=True),
        sa.Column("code_hash", sa.String(64), nullable=False),
        sa.Column("attempts", sa.Integer, nullable=False, server_default="0"),
        sa.Column("expires_at", sa.DateTime, nullable=False),
        sa.Column("consumed_at", sa.DateTime, nullable=True),
        sa.Column("created_at", sa.DateTime, nullable=False),
    )
    op.create_index("ix_otp_codes_expires_at", "otp_codes", ["expires_at"])


def downgrade():
    op.drop_index("ix_otp_codes_expires_at", table_name="otp_codes")
    op.drop_table("otp_codes")
    op.drop_index("ix_provider_documents_provider_profile_id", table_name="provider_documents")
    op.drop_table("provider_documents")
    op.drop_index("ix_provider_profiles_user_id", table_name="provider_profiles")
    op.drop_table("provider_profiles")
    op.drop_index("ix_users_phone", table_name="users")
    op.drop_table("users")
