"""Initial schema.

Revision ID: 001
Revises:
Create Date: 2026-10-17 00:00:00.000000
"""

import sqlalchemy as sa

from alembic import op

revision = "001"
down_revision = None
branch_labels = None
depends_on = None

WORK_TYPES = ("movie", "series", "music", "book", "graphic-novel")


def upgrade() -> None:
    # Users
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(20), unique=True, nullable=False, index=True),
        sa.Column("email", sa.String(255), unique=True, nullable=False, index=True),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("recommendation_version", sa.Integer, nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime, server_default=sa.func.now()),
    )

    # Works
    op.create_table(
        "works",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(500), nullable=False, index=True),
        sa.Column("type", sa.Enum(*WORK_TYPES, name="work_type_enum"), nullable=False),
        sa.Column("year", sa.Integer, nullable=True),
        sa.Column("genres", sa.JSON, nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("creator", sa.String(300), nullable=True),
        sa.Column("cover_url", sa.String(1000), nullable=True),
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime, server_default=sa.func.now()),
    )

    # Ratings: one per user per work
    op.create_table(
        "ratings",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.Integer,
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column(
            "work_id",
            sa.Integer,
            sa.ForeignKey("works.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("score", sa.Float, nullable=False),
        sa.Column("rated_at", sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "work_id", name="uq_rating_user_work"),
    )


def downgrade() -> None:
    op.drop_table("ratings")
    op.drop_table("works")
    op.execute("DROP TYPE IF EXISTS work_type_enum")
    op.drop_table("users")
