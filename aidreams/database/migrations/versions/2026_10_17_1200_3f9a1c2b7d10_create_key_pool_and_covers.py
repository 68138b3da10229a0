"""Create community key pool and fallback covers

Revision ID: 3f9a1c2b7d10
Revises:
Create Date: 2026-10-17 12:00:00.000000

"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3f9a1c2b7d10"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "community_api_keys",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "provider_type",
            sa.Enum(
                "openrouter",
                "stable_diffusion",
                name="providertype",
                native_enum=False,
                length=32,
            ),
            nullable=False,
        ),
        sa.Column("secret", sa.String(), nullable=False),
        sa.Column("contributor_id", sa.Uuid(), nullable=False),
        sa.Column("usage_count", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("secret"),
    )
    op.create_index(
        "ix_community_api_keys_contributor_id",
        "community_api_keys",
        ["contributor_id"],
    )
    op.create_index(
        "ix_community_api_keys_provider_active",
        "community_api_keys",
        ["provider_type", "is_active"],
    )
    op.create_index(
        "ix_community_api_keys_usage_count", "community_api_keys", ["usage_count"]
    )

    # Gallery rows are seeded out of band
    op.create_table(
        "covers",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("url", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    op.drop_table("covers")
    op.drop_index("ix_community_api_keys_usage_count", table_name="community_api_keys")
    op.drop_index(
        "ix_community_api_keys_provider_active", table_name="community_api_keys"
    )
    op.drop_index(
        "ix_community_api_keys_contributor_id", table_name="community_api_keys"
    )
    op.drop_table("community_api_keys")
