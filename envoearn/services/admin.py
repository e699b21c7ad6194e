# envoearn/services/admin.py
"""Read models and maintenance actions behind the admin console."""
import csv
import io
import logging
from datetime import date, timedelta

from sqlalchemy import func, or_, update
from sqlalchemy.exc import SQLAlchemyError

from envoearn.errors import DependencyError, NotFoundError
from envoearn.extensions import db
from envoearn.models import (
    Earning,
    PaymentSubmission,
    Profile,
    Referral,
    Withdrawal,
    WithdrawalStatus,
)
from envoearn.utils import business_today, day_bounds_utc, money
from . import identity
from .wallet import adjust_balance

logger = logging.getLogger(__name__)

MISSING_USERNAME = "N/A"
USERS_CSV_HEADER = ["Username", "Email", "Registration Date", "Balance", "Invested"]


def _get_profile(profile_id: int) -> Profile:
    profile = db.session.get(Profile, profile_id)
    if profile is None:
        raise NotFoundError(f"User {profile_id} not found.")
    return profile


# ==========================================================
#                  WITHDRAWALS
# ==========================================================
def list_withdrawals(search: str | None = None, limit: int = 200) -> list[dict]:
    query = (
        db.session.query(Withdrawal, Profile.username)
        .outerjoin(Profile, Profile.id == Withdrawal.user_id)
    )
    search = (search or "").strip()
    if search:
        query = query.filter(Profile.username.ilike(f"%{search}%"))

    rows = query.order_by(Withdrawal.created_at.desc(), Withdrawal.id.desc()).limit(limit).all()

    items = []
    for withdrawal, username in rows:
        item = withdrawal.to_dict()
        item["username"] = username or MISSING_USERNAME
        items.append(item)
    return items


# ==========================================================
#                  USERS
# ==========================================================
def _user_query(search: str | None = None):
    query = Profile.query
    search = (search or "").strip()
    if search:
        like = f"%{search}%"
        query = query.filter(or_(Profile.username.ilike(like), Profile.email.ilike(like)))
    return query.order_by(Profile.created_at.desc(), Profile.id.desc())


def list_users(search: str | None = None) -> list[Profile]:
    return _user_query(search).all()


def user_details(profile_id: int) -> dict:
    profile = _get_profile(profile_id)
    earnings = profile.earnings.order_by(Earning.created_at.desc(), Earning.id.desc()).all()
    withdrawals = profile.withdrawals.order_by(Withdrawal.created_at.desc(), Withdrawal.id.desc()).all()
    return {
        "profile": profile.to_dict(),
        "earnings": [e.to_dict() for e in earnings],
        "withdrawals": [w.to_dict() for w in withdrawals],
    }


def set_user_balance(profile_id: int, new_balance, admin_id=None) -> Profile:
    profile = _get_profile(profile_id)
    try:
        adjust_balance(profile.id, new_balance, reference=f"admin:{admin_id}" if admin_id else None)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise DependencyError(f"Failed to update balance: {e}")

    logger.info("Balance of profile %s set to %s by admin %s", profile.id, money(new_balance), admin_id)
    db.session.refresh(profile)
    return profile


def delete_user(profile_id: int) -> None:
    """Remove a user with everything they own.

    Earnings, withdrawals, ledger rows and referrals they gave go with the
    profile; referrals they received and submissions pointing at them are
    un-linked first.
    """
    profile = _get_profile(profile_id)
    try:
        db.session.execute(
            update(Referral)
            .where(Referral.referred_user_id == profile.id)
            .values(referred_user_id=None)
            .execution_options(synchronize_session=False)
        )
        db.session.execute(
            update(PaymentSubmission)
            .where(PaymentSubmission.referrer_id == profile.id)
            .values(referrer_id=None)
            .execution_options(synchronize_session=False)
        )
        db.session.execute(
            update(PaymentSubmission)
            .where(PaymentSubmission.user_id == profile.id)
            .values(user_id=None)
            .execution_options(synchronize_session=False)
        )
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise DependencyError(f"Could not delete user profile: {e}")

    # the identity owns the profile; deleting it cascades
    if not identity.admin_delete(profile_id):
        try:
            db.session.delete(profile)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise DependencyError(f"Could not delete user profile: {e}")

    logger.info("User %s deleted", profile_id)


# ==========================================================
#                  CSV EXPORTS
# ==========================================================
def export_users_csv(search: str | None = None) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(USERS_CSV_HEADER)
    for profile in _user_query(search).all():
        writer.writerow([
            profile.username,
            profile.email,
            profile.created_at.date().isoformat() if profile.created_at else "",
            f"{money(profile.balance):.2f}",
            "true" if profile.invested else "false",
        ])
    return buf.getvalue()


def export_user_details_csv(profile_id: int) -> tuple[str, str]:
    """Profile, earnings and withdrawals blocks. Returns (filename, csv text)."""
    details = user_details(profile_id)
    profile = details["profile"]

    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")

    writer.writerow(["Category", "Key", "Value"])
    writer.writerow(["Profile", "Username", profile["username"]])
    writer.writerow(["Profile", "Email", profile["email"]])
    writer.writerow(["Profile", "Balance", f"{profile['balance']:.2f}"])
    writer.writerow(["Profile", "Invested", "true" if profile["invested"] else "false"])
    writer.writerow(["Profile", "Registration Date", profile["created_at"] or ""])
    writer.writerow([])

    writer.writerow(["Type", "Date", "Amount"])
    for e in details["earnings"]:
        writer.writerow(["Earning", e["created_at"] or e["earned_on"], f"{e['amount']:.2f}"])
    writer.writerow([])

    writer.writerow(["Type", "Date", "Amount", "Status"])
    for w in details["withdrawals"]:
        writer.writerow(["Withdrawal", w["created_at"] or "", f"{w['amount']:.2f}", w["status"]])

    return f"{profile['username']}_details.csv", buf.getvalue()


# ==========================================================
#                  STATISTICS
# ==========================================================
def _day_label(day: date) -> str:
    return f"{day:%b} {day.day}"


def platform_stats(today: date | None = None) -> dict:
    today = today or business_today()

    total_users = db.session.query(func.count(Profile.id)).scalar() or 0
    total_investment = db.session.query(
        func.coalesce(func.sum(Profile.investment_amount), 0)
    ).filter(Profile.invested.is_(True)).scalar()
    total_withdrawals = db.session.query(
        func.coalesce(func.sum(Withdrawal.amount), 0)
    ).filter(Withdrawal.status == WithdrawalStatus.APPROVED).scalar()

    series = []
    for offset in range(6, -1, -1):
        day = today - timedelta(days=offset)
        start, end = day_bounds_utc(day)

        new_users = db.session.query(func.count(Profile.id)).filter(
            Profile.created_at >= start, Profile.created_at < end
        ).scalar() or 0
        withdrawn = db.session.query(
            func.coalesce(func.sum(Withdrawal.amount), 0)
        ).filter(
            Withdrawal.status == WithdrawalStatus.APPROVED,
            Withdrawal.created_at >= start,
            Withdrawal.created_at < end,
        ).scalar()

        series.append({
            "date": day.isoformat(),
            "name": _day_label(day),
            "users": new_users,
            "withdrawals": float(money(withdrawn)),
        })

    return {
        "total_users": total_users,
        "total_investment": float(money(total_investment)),
        "total_withdrawals": float(money(total_withdrawals)),
        "series": series,
    }
