# envoearn/models/payment_submission.py
from datetime import datetime

from envoearn.extensions import db
from .enums import SubmissionStatus, enum_values


class PaymentSubmission(db.Model):
    __tablename__ = "payment_submissions"

    id = db.Column(db.Integer, primary_key=True)

    account_name = db.Column(db.String(120), nullable=False)
    # sender's mobile number; registration looks submissions up by it
    account_number = db.Column(db.String(20), nullable=False, index=True)
    payment_platform = db.Column(db.String(40), nullable=False)

    screenshot_url = db.Column(db.String(500), nullable=True)
    screenshot_path = db.Column(db.String(300), nullable=True)

    status = db.Column(
        db.Enum(SubmissionStatus, name="submission_status", values_callable=enum_values),
        nullable=False,
        default=SubmissionStatus.PENDING,
        index=True,
    )

    referrer_id = db.Column(
        db.Integer, db.ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True
    )

    investment_plan_id = db.Column(db.String(10), nullable=False)
    investment_amount = db.Column(db.Numeric(12, 2), nullable=False)
    daily_return_amount = db.Column(db.Numeric(12, 2), nullable=False)

    # filled in by registration
    user_id = db.Column(
        db.Integer, db.ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True
    )
    user_email = db.Column(db.String(120), nullable=True)

    decided_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

    def __repr__(self) -> str:
        return (
            f"<PaymentSubmission id={self.id} phone={self.account_number} "
            f"status={self.status.value if self.status else None}>"
        )

    def to_dict(self):
        return {
            "id": self.id,
            "account_name": self.account_name,
            "account_number": self.account_number,
            "payment_platform": self.payment_platform,
            "screenshot_url": self.screenshot_url,
            "status": self.status.value,
            "referrer_id": self.referrer_id,
            "investment_plan_id": self.investment_plan_id,
            "investment_amount": float(self.investment_amount or 0),
            "daily_return_amount": float(self.daily_return_amount or 0),
            "user_id": self.user_id,
            "user_email": self.user_email,
            "decided_at": self.decided_at.isoformat() if self.decided_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
