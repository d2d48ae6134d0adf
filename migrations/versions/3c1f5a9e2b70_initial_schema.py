"""initial schema

Revision ID: 3c1f5a9e2b70
Revises:
Create Date: 2026-10-18 09:12:44.481302

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3c1f5a9e2b70"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create payments, admins, forms, questions, responses and feedback."""
    op.create_table(
        "forms",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("slug", sa.String(length=200), nullable=False),
        sa.Column("title", sa.String(length=300), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("payment_amount", sa.String(length=80), nullable=False),
        sa.Column("admin_wallet_address", sa.String(length=64), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug", name="uq_forms_slug"),
    )
    op.create_index("ix_forms_admin_wallet", "forms", ["admin_wallet_address"])

    op.create_table(
        "form_questions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("form_id", sa.Integer(), nullable=False),
        sa.Column("question_text", sa.Text(), nullable=False),
        sa.Column("question_type", sa.String(length=16), nullable=False),
        sa.Column("question_options", sa.JSON(), nullable=True),
        sa.Column("is_required", sa.Boolean(), nullable=False),
        sa.Column("order_index", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "question_type IN ('text', 'textarea', 'select', 'radio', 'checkbox')",
            name="ck_form_questions_type",
        ),
        sa.ForeignKeyConstraint(["form_id"], ["forms.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_form_questions_form_order", "form_questions", ["form_id", "order_index"]
    )

    op.create_table(
        "payments",
        sa.Column("payment_hash", sa.String(length=100), nullable=False),
        sa.Column("wallet_address", sa.String(length=64), nullable=False),
        sa.Column("amount", sa.String(length=80), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("purpose", sa.String(length=16), nullable=False),
        sa.Column("block_number", sa.BigInteger(), nullable=True),
        sa.Column("gas_used", sa.BigInteger(), nullable=True),
        sa.Column("form_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "status IN ('pending', 'confirmed', 'failed')", name="ck_payments_status"
        ),
        sa.CheckConstraint(
            "purpose IN ('feedback', 'form', 'admin')", name="ck_payments_purpose"
        ),
        sa.ForeignKeyConstraint(["form_id"], ["forms.id"]),
        sa.PrimaryKeyConstraint("payment_hash"),
    )
    op.create_index("ix_payments_wallet_status", "payments", ["wallet_address", "status"])
    op.create_index("ix_payments_wallet_form", "payments", ["wallet_address", "form_id"])

    op.create_table(
        "admins",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("wallet_address", sa.String(length=64), nullable=False),
        sa.Column("payment_hash", sa.String(length=100), nullable=False),
        sa.Column("amount", sa.String(length=80), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["payment_hash"], ["payments.payment_hash"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("wallet_address", name="uq_admins_wallet_address"),
    )

    op.create_table(
        "feedback",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("feedback", sa.Text(), nullable=False),
        sa.Column("category", sa.String(length=32), nullable=False),
        sa.Column("wallet_address", sa.String(length=64), nullable=False),
        sa.Column("payment_hash", sa.String(length=100), nullable=False),
        sa.Column("is_anonymous", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["payment_hash"], ["payments.payment_hash"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("wallet_address", name="uq_feedback_wallet_address"),
    )
    op.create_index("ix_feedback_category_created", "feedback", ["category", "created_at"])

    op.create_table(
        "form_responses",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("form_id", sa.Integer(), nullable=False),
        sa.Column("response_data", sa.JSON(), nullable=False),
        sa.Column("wallet_address", sa.String(length=64), nullable=False),
        sa.Column("payment_hash", sa.String(length=100), nullable=False),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["form_id"], ["forms.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["payment_hash"], ["payments.payment_hash"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "uq_form_responses_form_wallet",
        "form_responses",
        ["form_id", "wallet_address"],
        unique=True,
    )


def downgrade() -> None:
    """Drop every table created by upgrade."""
    op.drop_index("uq_form_responses_form_wallet", table_name="form_responses")
    op.drop_table("form_responses")
    op.drop_index("ix_feedback_category_created", table_name="feedback")
    op.drop_table("feedback")
    op.drop_table("admins")
    op.drop_index("ix_payments_wallet_form", table_name="payments")
    op.drop_index("ix_payments_wallet_status", table_name="payments")
    op.drop_table("payments")
    op.drop_index("ix_form_questions_form_order", table_name="form_questions")
    op.drop_table("form_questions")
    op.drop_index("ix_forms_admin_wallet", table_name="forms")
    op.drop_table("forms")
