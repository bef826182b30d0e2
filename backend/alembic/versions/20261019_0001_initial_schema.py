"""initial schema

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "sponsors",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("github_api_id", sa.BigInteger(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_sponsors_id", "sponsors", ["id"])
    op.create_index("ix_sponsors_github_api_id", "sponsors", ["github_api_id"], unique=True)

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("github_api_id", sa.BigInteger(), nullable=False),
        sa.Column("github_api_login", sa.String(length=255), nullable=False),
        sa.Column("github_api_access_token", sa.String(length=512)),
        sa.Column("name", sa.String(length=255)),
        sa.Column("email", sa.String(length=255)),
        sa.Column("avatar_url", sa.String(length=512)),
        sa.Column(
            "sponsor_id",
            sa.Integer(),
            sa.ForeignKey("sponsors.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_github_api_id", "users", ["github_api_id"], unique=True)
    op.create_index("ix_users_github_api_login", "users", ["github_api_login"])

    op.create_table(
        "token_blacklist",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("token_jti", sa.String(length=256), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_token_blacklist_token_jti", "token_blacklist", ["token_jti"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_token_blacklist_token_jti", table_name="token_blacklist")
    op.drop_table("token_blacklist")
    op.drop_index("ix_users_github_api_login", table_name="users")
    op.drop_index("ix_users_github_api_id", table_name="users")
    op.drop_index("ix_users_id", table_name="users")
    op.drop_table("users")
    op.drop_index("ix_sponsors_github_api_id", table_name="sponsors")
    op.drop_index("ix_sponsors_id", table_name="sponsors")
    op.drop_table("sponsors")
