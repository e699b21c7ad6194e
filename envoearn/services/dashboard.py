# envoearn/services/dashboard.py
from envoearn.errors import NotFoundError
from envoearn.extensions import db
from envoearn.models import Earning, Profile
from .plans import plan_name
from .referral import referral_link, referrals_for, total_referral_bonus


def dashboard_summary(profile_id: int) -> dict:
    profile = db.session.get(Profile, profile_id)
    if profile is None:
        raise NotFoundError(f"Profile {profile_id} not found.")

    earnings = (
        profile.earnings
        .order_by(Earning.earned_on.desc(), Earning.id.desc())
        .all()
    )

    return {
        "profile": profile.to_dict(),
        "plan_name": plan_name(profile.investment_plan_id) if profile.investment_plan_id else None,
        "total_investment": float(profile.investment_amount or 0),
        # earnings, bonuses and withdrawals all land on the balance
        "total_earnings": float(profile.balance or 0),
        "referral_bonus": float(total_referral_bonus(profile.id)),
        "earnings": [e.to_dict() for e in earnings],
    }


def referral_summary(profile_id: int) -> dict:
    profile = db.session.get(Profile, profile_id)
    if profile is None:
        raise NotFoundError(f"Profile {profile_id} not found.")

    referrals = referrals_for(profile.id)
    return {
        "referral_link": referral_link(profile.id),
        "referral_count": len(referrals),
        "total_bonus": float(total_referral_bonus(profile.id)),
        "referrals": referrals,
    }
