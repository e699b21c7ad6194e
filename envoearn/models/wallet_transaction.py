from datetime import datetime

from envoearn.extensions import db
from .enums import TransactionKind, enum_values


class WalletTransaction(db.Model):
    """One row per balance change; amount is signed."""

    __tablename__ = "wallet_transactions"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    kind = db.Column(
        db.Enum(TransactionKind, name="transaction_kind", values_callable=enum_values),
        nullable=False,
    )
    reference = db.Column(db.String(80), nullable=True)  # e.g. "withdrawal:12"
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
