# envoearn/models/withdrawal.py
from datetime import datetime

from envoearn.extensions import db
from .enums import WithdrawalStatus, enum_values


class Withdrawal(db.Model):
    __tablename__ = "withdrawals"

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(
        db.Integer, db.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )

    amount = db.Column(db.Numeric(12, 2), nullable=False)

    # Payout details copied from the profile at request time
    method = db.Column(db.String(40), nullable=False)
    account_name = db.Column(db.String(120), nullable=False)
    account_number = db.Column(db.String(20), nullable=False)

    # Lifecycle: processing -> approved | rejected
    status = db.Column(
        db.Enum(WithdrawalStatus, name="withdrawal_status", values_callable=enum_values),
        nullable=False,
        default=WithdrawalStatus.PROCESSING,
        index=True,
    )

    decided_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<Withdrawal id={self.id} user_id={self.user_id} amount={self.amount} status={self.status.value}>"

    @property
    def is_processing(self) -> bool:
        return self.status == WithdrawalStatus.PROCESSING

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "amount": float(self.amount),
            "method": self.method,
            "account_name": self.account_name,
            "account_number": self.account_number,
            "status": self.status.value,
            "decided_at": self.decided_at.isoformat() if self.decided_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
