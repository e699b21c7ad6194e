# envoearn/services/withdrawals.py
import logging
from datetime import datetime

from flask import current_app
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from envoearn.errors import (
    DependencyError,
    InsufficientFundsError,
    InvalidTransitionError,
    NotFoundError,
    PayoutMethodMissingError,
    ReferralLockError,
    ValidationError,
)
from envoearn.extensions import db
from envoearn.models import Profile, TransactionKind, Withdrawal, WithdrawalStatus
from envoearn.utils import money, parse_money
from .plans import is_top_tier
from .referral import completed_referral_count
from .wallet import debit_balance

logger = logging.getLogger(__name__)


def _get_profile(profile_id: int) -> Profile:
    profile = db.session.get(Profile, profile_id)
    if profile is None:
        raise NotFoundError(f"Profile {profile_id} not found.")
    return profile


def approved_withdrawal_count(profile_id: int) -> int:
    return Withdrawal.query.filter_by(
        user_id=profile_id, status=WithdrawalStatus.APPROVED
    ).count()


def is_referral_locked(profile: Profile) -> bool:
    """Non top-tier investors must bring referrals after their first payouts."""
    if is_top_tier(profile.investment_plan_id):
        return False
    threshold = current_app.config["WITHDRAWAL_LOCK_THRESHOLD"]
    required = current_app.config["REQUIRED_REFERRALS_TO_UNLOCK"]
    return (
        approved_withdrawal_count(profile.id) >= threshold
        and completed_referral_count(profile.id) < required
    )


def save_withdrawal_method(profile_id: int, method: str, account_name: str, account_number: str) -> dict:
    errors = {}
    method = (method or "").strip().lower()
    account_name = (account_name or "").strip()
    account_number = (account_number or "").strip()

    if method not in current_app.config.get("PAYMENT_PLATFORMS", []):
        errors["method"] = ["Please select a platform."]
    if len(account_name) < 2:
        errors["account_name"] = ["Account name is required."]
    if len(account_number) < 11:
        errors["account_number"] = ["A valid account number is required."]
    if errors:
        raise ValidationError(errors=errors)

    profile = _get_profile(profile_id)
    profile.withdrawal_method = {
        "method": method,
        "account_name": account_name,
        "account_number": account_number,
    }
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise DependencyError(f"Could not save your withdrawal method: {e}")

    return profile.withdrawal_method


def request_withdrawal(profile_id: int, amount) -> Withdrawal:
    """Queue a payout. The balance is only debited when an admin approves it."""
    min_amount = money(current_app.config["MIN_WITHDRAWAL_AMOUNT"])
    amount = parse_money(amount)
    if amount is None:
        raise ValidationError(errors={"amount": ["Enter a valid withdrawal amount."]})
    if amount < min_amount:
        raise ValidationError(errors={"amount": [f"Minimum withdrawal is {min_amount:,.0f} PKR."]})

    profile = _get_profile(profile_id)

    if is_referral_locked(profile):
        required = current_app.config["REQUIRED_REFERRALS_TO_UNLOCK"]
        raise ReferralLockError(f"You must refer {required} users to continue withdrawing.")

    if amount > money(profile.balance):
        raise InsufficientFundsError()

    if not profile.has_withdrawal_method:
        raise PayoutMethodMissingError()

    payout = profile.withdrawal_method
    withdrawal = Withdrawal(
        user_id=profile.id,
        amount=amount,
        method=payout.get("method") or "easypaisa",
        account_name=payout["account_name"],
        account_number=payout["account_number"],
        status=WithdrawalStatus.PROCESSING,
    )
    try:
        db.session.add(withdrawal)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise DependencyError(f"Submission failed: {e}")

    logger.info("Withdrawal %s of %s requested by profile %s", withdrawal.id, amount, profile.id)
    return withdrawal


def decide_withdrawal(withdrawal_id: int, decision) -> Withdrawal:
    """processing -> approved (debits) | rejected. Status and debit commit together."""
    try:
        new_status = WithdrawalStatus(decision)
    except ValueError:
        raise ValidationError("Decision must be 'approved' or 'rejected'.")

    withdrawal = db.session.get(Withdrawal, withdrawal_id)
    if withdrawal is None:
        raise NotFoundError(f"Withdrawal {withdrawal_id} not found.")

    if not withdrawal.status.can_transition_to(new_status):
        raise InvalidTransitionError(
            f"Withdrawal {withdrawal_id} is already {withdrawal.status.value}."
        )

    stmt = (
        update(Withdrawal)
        .where(Withdrawal.id == withdrawal_id, Withdrawal.status == WithdrawalStatus.PROCESSING)
        .values(status=new_status, decided_at=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )
    try:
        changed = db.session.execute(stmt).rowcount
        if not changed:
            raise InvalidTransitionError(f"Withdrawal {withdrawal_id} was already decided.")

        if new_status == WithdrawalStatus.APPROVED:
            # raises InsufficientFundsError if the balance no longer covers it
            debit_balance(
                withdrawal.user_id,
                withdrawal.amount,
                TransactionKind.WITHDRAWAL,
                reference=f"withdrawal:{withdrawal.id}",
            )
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise DependencyError(f"Failed to update withdrawal status: {e}")
    except Exception:
        db.session.rollback()
        raise

    db.session.refresh(withdrawal)
    current_app.logger.info("Withdrawal %s %s", withdrawal.id, new_status.value)
    return withdrawal


def withdrawal_history(profile_id: int) -> list[Withdrawal]:
    return (
        Withdrawal.query
        .filter_by(user_id=profile_id)
        .order_by(Withdrawal.created_at.desc(), Withdrawal.id.desc())
        .all()
    )


def withdrawal_overview(profile_id: int) -> dict:
    profile = _get_profile(profile_id)
    return {
        "balance": float(profile.balance or 0),
        "withdrawal_method": profile.withdrawal_method,
        "investment_plan_id": profile.investment_plan_id,
        "min_withdrawal": float(current_app.config["MIN_WITHDRAWAL_AMOUNT"]),
        "approved_withdrawals": approved_withdrawal_count(profile.id),
        "completed_referrals": completed_referral_count(profile.id),
        "referral_locked": is_referral_locked(profile),
        "history": [w.to_dict() for w in withdrawal_history(profile.id)],
    }
