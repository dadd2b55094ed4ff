"""add numbering rules and sequence counters

Revision ID: 4a8e2c1d7b90
Revises:
Create Date: 2026-03-02

"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "4a8e2c1d7b90"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "numbering_rules",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("template", sa.String(length=200), nullable=False),
        sa.Column("sequence_width", sa.Integer(), nullable=False),
        sa.Column("department_code", sa.String(length=32), nullable=True),
        sa.Column("document_type_codes", sa.JSON(), nullable=False),
        sa.Column("effective_from", sa.Date(), nullable=False),
        sa.Column("effective_until", sa.Date(), nullable=True),
        sa.Column("priority", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("sequence_width >= 1", name="ck_numbering_rules_sequence_width"),
        sa.CheckConstraint(
            "effective_until IS NULL OR effective_until >= effective_from",
            name="ck_numbering_rules_effective_period",
        ),
    )
    op.create_index("ix_numbering_rules_window", "numbering_rules", ["effective_from", "effective_until"])
    op.create_index(op.f("ix_numbering_rules_department_code"), "numbering_rules", ["department_code"])

    op.create_table(
        "sequence_counters",
        sa.Column("rule_id", sa.Integer(), sa.ForeignKey("numbering_rules.id"), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("department_code", sa.String(length=32), nullable=False),
        sa.Column("last_value", sa.BigInteger(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("rule_id", "year", "month", "department_code", name="pk_sequence_counters"),
    )


def downgrade() -> None:
    op.drop_table("sequence_counters")
    op.drop_index(op.f("ix_numbering_rules_department_code"), table_name="numbering_rules")
    op.drop_index("ix_numbering_rules_window", table_name="numbering_rules")
    op.drop_table("numbering_rules")
