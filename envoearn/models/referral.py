from datetime import datetime

from envoearn.extensions import db
from .enums import ReferralStatus, enum_values


class Referral(db.Model):
    __tablename__ = "referrals"

    id = db.Column(db.Integer, primary_key=True)

    referrer_id = db.Column(
        db.Integer, db.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # null until the invitee registers
    referred_user_id = db.Column(
        db.Integer, db.ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True
    )
    # the approved submission that earned this bonus (once per submission)
    submission_id = db.Column(
        db.Integer, db.ForeignKey("payment_submissions.id"), nullable=True, unique=True
    )

    status = db.Column(
        db.Enum(ReferralStatus, name="referral_status", values_callable=enum_values),
        nullable=False,
        default=ReferralStatus.INVESTED,
    )
    bonus_amount = db.Column(db.Numeric(12, 2), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

    referred_user = db.relationship("Profile", foreign_keys=[referred_user_id])

    def __repr__(self) -> str:
        return (
            f"<Referral id={self.id} referrer_id={self.referrer_id} "
            f"referred_user_id={self.referred_user_id} bonus={self.bonus_amount}>"
        )
