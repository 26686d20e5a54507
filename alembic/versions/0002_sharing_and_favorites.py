"""Public sharing and staff favorites

Revision ID: 0002_sharing_and_favorites
Revises: 0001_initial_schema
Create Date: 2026-10-19

"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0002_sharing_and_favorites"
down_revision = "0001_initial_schema"
branch_labels = None
depends_on = None


def _has_table(insp: sa.Inspector, table: str) -> bool:
    return table in insp.get_table_names()


def _has_column(insp: sa.Inspector, table: str, column: str) -> bool:
    if not _has_table(insp, table):
        return False
    cols = {c["name"] for c in insp.get_columns(table)}
    return column in cols


def upgrade() -> None:
    bind = op.get_bind()
    insp = sa.inspect(bind)

    with op.batch_alter_table("applications", schema=None) as batch_op:
        if not _has_column(insp, "applications", "is_public"):
            batch_op.add_column(sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.false()))
        if not _has_column(insp, "applications", "public_token"):
            batch_op.add_column(sa.Column("public_token", sa.String(length=128), nullable=True))
            batch_op.create_index("ix_applications_public_token", ["public_token"], unique=True)

    if not _has_table(insp, "favorites"):
        op.create_table(
            "favorites",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("user_id", sa.String(length=120), nullable=False, index=True),
            sa.Column(
                "application_id",
                sa.String(length=36),
                sa.ForeignKey("applications.id", ondelete="CASCADE"),
                nullable=False,
                index=True,
            ),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.UniqueConstraint("user_id", "application_id", name="uq_favorite_user_application"),
        )


def downgrade() -> None:
    bind = op.get_bind()
    insp = sa.inspect(bind)

    if _has_table(insp, "favorites"):
        op.drop_table("favorites")

    if _has_column(insp, "applications", "public_token"):
        with op.batch_alter_table("applications", schema=None) as batch_op:
            batch_op.drop_index("ix_applications_public_token")
            batch_op.drop_column("public_token")
            batch_op.drop_column("is_public")
