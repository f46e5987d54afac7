from __future__ import annotations

import sqlalchemy as sa

from alembic import op

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "customer",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("first_name", sa.String(length=120), nullable=True),
        sa.Column("last_name", sa.String(length=120), nullable=True),
        sa.Column("password_hash", sa.String(length=255), nullable=True),
        sa.Column("has_password", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("google_id", sa.String(length=255), nullable=True),
        sa.Column("apple_id", sa.String(length=255), nullable=True),
        sa.Column("facebook_id", sa.String(length=255), nullable=True),
        sa.Column("oidc_id", sa.String(length=255), nullable=True),
        sa.UniqueConstraint("google_id", name="uq_customer_google_id"),
        sa.UniqueConstraint("apple_id", name="uq_customer_apple_id"),
        sa.UniqueConstraint("facebook_id", name="uq_customer_facebook_id"),
        sa.UniqueConstraint("oidc_id", name="uq_customer_oidc_id"),
    )
    op.create_index("ix_customer_email", "customer", ["email"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_customer_email", table_name="customer")
    op.drop_table("customer")
