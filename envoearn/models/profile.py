# envoearn/models/profile.py
from datetime import datetime
from decimal import Decimal

from envoearn.extensions import db


class Profile(db.Model):
    __tablename__ = "profiles"

    id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    username = db.Column(db.String(20), unique=True, nullable=False, index=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)

    balance = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal("0.00"))

    invested = db.Column(db.Boolean, nullable=False, default=False, index=True)
    investment_plan_id = db.Column(db.String(10), nullable=True)
    investment_amount = db.Column(db.Numeric(12, 2), nullable=True)
    daily_return_amount = db.Column(db.Numeric(12, 2), nullable=True)
    investment_date = db.Column(db.DateTime, nullable=True)

    # {"method": "easypaisa", "account_name": "...", "account_number": "03..."}
    withdrawal_method = db.Column(db.JSON, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

    user = db.relationship("User", back_populates="profile")
    earnings = db.relationship(
        "Earning", backref="profile", lazy="dynamic", cascade="all, delete-orphan"
    )
    withdrawals = db.relationship(
        "Withdrawal", backref="profile", lazy="dynamic", cascade="all, delete-orphan"
    )
    transactions = db.relationship(
        "WalletTransaction", backref="profile", lazy="dynamic", cascade="all, delete-orphan"
    )
    referrals_given = db.relationship(
        "Referral",
        foreign_keys="Referral.referrer_id",
        backref="referrer",
        lazy="dynamic",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Profile id={self.id} username={self.username} balance={self.balance}>"

    @property
    def has_withdrawal_method(self) -> bool:
        method = self.withdrawal_method or {}
        return bool(method.get("account_name") and method.get("account_number"))

    def to_dict(self):
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "balance": float(self.balance or 0),
            "invested": bool(self.invested),
            "investment_plan_id": self.investment_plan_id,
            "investment_amount": float(self.investment_amount or 0),
            "daily_return_amount": float(self.daily_return_amount or 0),
            "withdrawal_method": self.withdrawal_method,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
