# envoearn/services/accrual.py
import logging
from dataclasses import dataclass
from datetime import date

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from envoearn.errors import DependencyError, EnvoError
from envoearn.extensions import db
from envoearn.models import Earning, Profile, TransactionKind
from envoearn.utils import business_today, money
from .wallet import credit_balance

logger = logging.getLogger(__name__)


@dataclass
class AccrualReport:
    message: str
    users_paid: int = 0
    users_skipped: int = 0

    def to_dict(self):
        return {
            "message": self.message,
            "users_paid": self.users_paid,
            "users_skipped": self.users_skipped,
        }


def _pay_one(profile_id: int, amount, today: date) -> bool:
    """Earning row + balance credit for one investor, in its own savepoint."""
    try:
        with db.session.begin_nested():
            earning = Earning(user_id=profile_id, amount=amount, earned_on=today)
            db.session.add(earning)
            db.session.flush()
            credit_balance(
                profile_id,
                amount,
                TransactionKind.DAILY_EARNING,
                reference=f"earning:{earning.id}",
            )
    except IntegrityError:
        # an overlapping run already paid this user today
        logger.warning("Profile %s already has an earning for %s", profile_id, today)
        return False
    except (SQLAlchemyError, EnvoError) as e:
        logger.error("Failed to credit daily earning for profile %s: %s", profile_id, e)
        return False
    return True


def run_daily_accrual(today: date | None = None) -> AccrualReport:
    """Credit the fixed daily amount once per calendar day to every investor.

    Safe to run repeatedly: users with an earning for `today` are skipped,
    and the (user_id, earned_on) unique constraint catches overlapping runs.
    """
    today = today or business_today()
    amount = money(current_app.config["DAILY_EARNING_AMOUNT"])

    try:
        investor_ids = [
            row.id for row in db.session.query(Profile.id).filter(Profile.invested.is_(True)).all()
        ]
    except SQLAlchemyError as e:
        raise DependencyError(f"Failed to fetch profiles: {e}")

    if not investor_ids:
        return AccrualReport(message="No invested users to process.")

    try:
        already_paid = {
            row.user_id
            for row in db.session.query(Earning.user_id).filter(Earning.earned_on == today).all()
        }
    except SQLAlchemyError as e:
        raise DependencyError(f"Failed to check earnings: {e}")

    to_pay = [pid for pid in investor_ids if pid not in already_paid]
    if not to_pay:
        return AccrualReport(
            message="All invested users have already received their earnings for today.",
            users_skipped=len(investor_ids),
        )

    paid = 0
    for profile_id in to_pay:
        if _pay_one(profile_id, amount, today):
            paid += 1

    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise DependencyError(f"Failed to save daily earnings: {e}")

    report = AccrualReport(
        message="Successfully processed daily earnings.",
        users_paid=paid,
        users_skipped=len(investor_ids) - paid,
    )
    logger.info(
        "Daily accrual for %s: paid=%s skipped=%s", today, report.users_paid, report.users_skipped
    )
    return report
