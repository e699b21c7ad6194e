"""initial schema: identities, profiles, payments, earnings, referrals, withdrawals, ledger

Revision ID: 5c2e7a91d4f0
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

revision = "5c2e7a91d4f0"
down_revision = None
branch_labels = None
depends_on = None

submission_status = sa.Enum("pending", "approved", "rejected", name="submission_status")
withdrawal_status = sa.Enum("processing", "approved", "rejected", name="withdrawal_status")
referral_status = sa.Enum("Pending", "Invested", name="referral_status")
transaction_kind = sa.Enum(
    "signup_bonus",
    "daily_earning",
    "referral_bonus",
    "withdrawal",
    "admin_adjustment",
    name="transaction_kind",
)


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=120), nullable=False),
        sa.Column("password_hash", sa.String(length=256), nullable=False),
        sa.Column("is_admin", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "profiles",
        sa.Column("id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("username", sa.String(length=20), nullable=False),
        sa.Column("email", sa.String(length=120), nullable=False),
        sa.Column("balance", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("invested", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("investment_plan_id", sa.String(length=10), nullable=True),
        sa.Column("investment_amount", sa.Numeric(12, 2), nullable=True),
        sa.Column("daily_return_amount", sa.Numeric(12, 2), nullable=True),
        sa.Column("investment_date", sa.DateTime(), nullable=True),
        sa.Column("withdrawal_method", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_profiles_username", "profiles", ["username"], unique=True)
    op.create_index("ix_profiles_email", "profiles", ["email"], unique=True)
    op.create_index("ix_profiles_invested", "profiles", ["invested"])
    op.create_index("ix_profiles_created_at", "profiles", ["created_at"])

    op.create_table(
        "payment_submissions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("account_name", sa.String(length=120), nullable=False),
        sa.Column("account_number", sa.String(length=20), nullable=False),
        sa.Column("payment_platform", sa.String(length=40), nullable=False),
        sa.Column("screenshot_url", sa.String(length=500), nullable=True),
        sa.Column("screenshot_path", sa.String(length=300), nullable=True),
        sa.Column("status", submission_status, nullable=False),
        sa.Column("referrer_id", sa.Integer(), sa.ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True),
        sa.Column("investment_plan_id", sa.String(length=10), nullable=False),
        sa.Column("investment_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("daily_return_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True),
        sa.Column("user_email", sa.String(length=120), nullable=True),
        sa.Column("decided_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_payment_submissions_account_number", "payment_submissions", ["account_number"])
    op.create_index("ix_payment_submissions_status", "payment_submissions", ["status"])
    op.create_index("ix_payment_submissions_referrer_id", "payment_submissions", ["referrer_id"])
    op.create_index("ix_payment_submissions_user_id", "payment_submissions", ["user_id"])
    op.create_index("ix_payment_submissions_created_at", "payment_submissions", ["created_at"])

    op.create_table(
        "earnings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("earned_on", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("user_id", "earned_on", name="uq_earnings_user_day"),
    )
    op.create_index("ix_earnings_user_id", "earnings", ["user_id"])
    op.create_index("ix_earnings_earned_on", "earnings", ["earned_on"])

    op.create_table(
        "referrals",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("referrer_id", sa.Integer(), sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
        sa.Column("referred_user_id", sa.Integer(), sa.ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True),
        sa.Column("submission_id", sa.Integer(), sa.ForeignKey("payment_submissions.id"), nullable=True),
        sa.Column("status", referral_status, nullable=False),
        sa.Column("bonus_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("submission_id"),
    )
    op.create_index("ix_referrals_referrer_id", "referrals", ["referrer_id"])
    op.create_index("ix_referrals_referred_user_id", "referrals", ["referred_user_id"])
    op.create_index("ix_referrals_created_at", "referrals", ["created_at"])

    op.create_table(
        "withdrawals",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("method", sa.String(length=40), nullable=False),
        sa.Column("account_name", sa.String(length=120), nullable=False),
        sa.Column("account_number", sa.String(length=20), nullable=False),
        sa.Column("status", withdrawal_status, nullable=False),
        sa.Column("decided_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_withdrawals_user_id", "withdrawals", ["user_id"])
    op.create_index("ix_withdrawals_status", "withdrawals", ["status"])
    op.create_index("ix_withdrawals_created_at", "withdrawals", ["created_at"])

    op.create_table(
        "wallet_transactions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("kind", transaction_kind, nullable=False),
        sa.Column("reference", sa.String(length=80), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_wallet_transactions_user_id", "wallet_transactions", ["user_id"])


def downgrade():
    op.drop_table("wallet_transactions")
    op.drop_table("withdrawals")
    op.drop_table("referrals")
    op.drop_table("earnings")
    op.drop_table("payment_submissions")
    op.drop_table("profiles")
    op.drop_table("users")

    bind = op.get_bind()
    if bind.dialect.name != "sqlite":
        # Postgres keeps enum types after the tables are gone
        for enum_type in (transaction_kind, withdrawal_status, referral_status, submission_status):
            enum_type.drop(bind, checkfirst=True)
