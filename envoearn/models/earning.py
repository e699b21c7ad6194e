from datetime import datetime

from envoearn.extensions import db


class Earning(db.Model):
    __tablename__ = "earnings"
    # one daily credit per investor per calendar day
    __table_args__ = (
        db.UniqueConstraint("user_id", "earned_on", name="uq_earnings_user_day"),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    earned_on = db.Column(db.Date, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            "amount": float(self.amount),
            "earned_on": self.earned_on.isoformat(),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
