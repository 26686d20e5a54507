"""Initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19

"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def _child_key() -> list[sa.Column]:
    return [
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "application_id",
            sa.String(length=36),
            sa.ForeignKey("applications.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "applications",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone_number", sa.String(length=20), nullable=True),
        sa.Column("birth_year", sa.Integer(), nullable=True),
        sa.Column("country_of_origin", sa.String(length=2), nullable=True),
        sa.Column("country_of_residence", sa.String(length=2), nullable=False),
        sa.Column("city", sa.String(length=100), nullable=True),
        sa.Column("time_zone", sa.String(length=64), nullable=True),
        sa.Column("highest_formal_education_level", sa.String(length=40), nullable=True),
        sa.Column("current_job_status", sa.String(length=40), nullable=True),
        sa.Column("category", sa.String(length=200), nullable=False),
        sa.Column("availability", sa.String(length=20), nullable=True),
        sa.Column("available_in", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("hours_per_week", sa.Integer(), nullable=True),
        sa.Column("available_from", sa.Date(), nullable=True),
        sa.Column("expected_salary", sa.Numeric(10, 2), nullable=True),
        sa.Column("resume_url", sa.String(length=800), nullable=True),
        sa.Column("video_url", sa.String(length=800), nullable=True),
        sa.Column("portfolio_links", sa.JSON(), nullable=False, server_default=sa.text("'[]'")),
        sa.Column("portfolio_file_url", sa.String(length=800), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=False, server_default=sa.text("'[]'")),
        sa.Column("source", sa.String(length=120), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="active"),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_applications_email", "applications", ["email"], unique=True)
    op.create_index("ix_applications_category", "applications", ["category"], unique=False)
    op.create_index("ix_applications_status", "applications", ["status"], unique=False)

    op.create_table(
        "languages",
        *_child_key(),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("proficiency", sa.String(length=20), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_table(
        "socials",
        *_child_key(),
        sa.Column("platform", sa.String(length=20), nullable=False),
        sa.Column("url", sa.String(length=800), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_table(
        "skills",
        *_child_key(),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=False, server_default=sa.text("'[]'")),
        sa.Column("level", sa.String(length=20), nullable=True),
        sa.Column("total_experience", sa.Integer(), nullable=True),
        sa.Column("start_year", sa.Integer(), nullable=True),
        sa.Column("institution", sa.String(length=200), nullable=True),
        sa.Column("self_taught", sa.Boolean(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_table(
        "categories",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False, unique=True),
        *_timestamps(),
    )
    op.create_table(
        "experiences",
        *_child_key(),
        sa.Column("company", sa.String(length=200), nullable=True),
        sa.Column("position", sa.String(length=200), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("start_year", sa.Integer(), nullable=True),
        sa.Column("end_year", sa.Integer(), nullable=True),
        sa.Column("is_current", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("links", sa.JSON(), nullable=False, server_default=sa.text("'[]'")),
        sa.Column("achievements", sa.JSON(), nullable=False, server_default=sa.text("'[]'")),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_table(
        "experience_categories",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "experience_id",
            sa.String(length=36),
            sa.ForeignKey("experiences.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column(
            "category_id",
            sa.String(length=36),
            sa.ForeignKey("categories.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.UniqueConstraint("experience_id", "category_id", name="uq_experience_category"),
    )


def downgrade() -> None:
    op.drop_table("experience_categories")
    op.drop_table("experiences")
    op.drop_table("categories")
    op.drop_table("skills")
    op.drop_table("socials")
    op.drop_table("languages")
    op.drop_index("ix_applications_status", table_name="applications")
    op.drop_index("ix_applications_category", table_name="applications")
    op.drop_index("ix_applications_email", table_name="applications")
    op.drop_table("applications")
