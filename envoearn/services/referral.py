# envoearn/services/referral.py
import logging
from decimal import Decimal

from flask import current_app
from sqlalchemy import func

from envoearn.extensions import db
from envoearn.models import Profile, Referral, ReferralStatus, TransactionKind
from envoearn.utils import money
from .plans import is_top_tier
from .wallet import credit_balance

logger = logging.getLogger(__name__)

PENDING_REGISTRATION = "Pending Registration"


def referral_bonus_for_plan(plan_id) -> Decimal:
    """Bonus a referrer earns when the invitee's payment on this plan is approved."""
    if is_top_tier(plan_id):
        return money(current_app.config["TOP_TIER_REFERRAL_BONUS"])
    return money(current_app.config["REFERRAL_BONUS"])


def credit_referrer(referrer_id: int, amount, reference=None):
    return credit_balance(referrer_id, amount, TransactionKind.REFERRAL_BONUS, reference=reference)


def record_referral(referrer_id: int, referred_user_id, bonus_amount, submission_id=None) -> Referral:
    referral = Referral(
        referrer_id=referrer_id,
        referred_user_id=referred_user_id,
        submission_id=submission_id,
        status=ReferralStatus.INVESTED,
        bonus_amount=money(bonus_amount),
    )
    db.session.add(referral)
    return referral


def backfill_referral(referrer_id: int, referred_user_id: int, submission_id=None) -> Referral | None:
    """Attach a newly registered invitee to the referral their approval created."""
    referral = None
    if submission_id is not None:
        referral = Referral.query.filter_by(
            submission_id=submission_id, referred_user_id=None
        ).first()

    if referral is None:
        referral = (
            Referral.query
            .filter_by(referrer_id=referrer_id, referred_user_id=None)
            .order_by(Referral.created_at.desc(), Referral.id.desc())
            .first()
        )

    if referral is None:
        logger.warning(
            "No open referral of referrer %s to back-fill with user %s", referrer_id, referred_user_id
        )
        return None

    referral.referred_user_id = referred_user_id
    return referral


def completed_referral_count(profile_id: int) -> int:
    return Referral.query.filter_by(
        referrer_id=profile_id, status=ReferralStatus.INVESTED
    ).count()


def total_referral_bonus(profile_id: int) -> Decimal:
    total = db.session.query(
        func.coalesce(func.sum(Referral.bonus_amount), 0)
    ).filter(
        Referral.referrer_id == profile_id,
        Referral.status == ReferralStatus.INVESTED,
    ).scalar()
    return money(total)


def referrals_for(profile_id: int) -> list[dict]:
    rows = (
        db.session.query(Referral, Profile.username)
        .outerjoin(Profile, Profile.id == Referral.referred_user_id)
        .filter(Referral.referrer_id == profile_id)
        .order_by(Referral.created_at.desc())
        .all()
    )
    return [
        {
            "id": referral.id,
            "referred_user_id": referral.referred_user_id,
            "referred_username": username or PENDING_REGISTRATION,
            "status": referral.status.value,
            "bonus_amount": float(referral.bonus_amount),
            "created_at": referral.created_at.isoformat() if referral.created_at else None,
        }
        for referral, username in rows
    ]


def referral_link(profile_id: int) -> str:
    base = (current_app.config.get("APP_BASE_URL") or "").rstrip("/")
    return f"{base}/invest?ref={profile_id}"
