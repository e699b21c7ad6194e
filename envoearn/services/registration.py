# envoearn/services/registration.py
import logging
import re
from datetime import datetime
from decimal import Decimal

from flask import current_app
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from envoearn.errors import (
    DependencyError,
    DuplicateEmailError,
    DuplicateUsernameError,
    EnvoError,
    NoApprovedPaymentError,
    SubmissionAlreadyUsedError,
    ValidationError,
)
from envoearn.extensions import db
from envoearn.models import Profile, SubmissionStatus, TransactionKind
from envoearn.utils import money
from . import identity
from .email import send_welcome_email
from .outcome import Outcome
from .referral import backfill_referral
from .submissions import latest_submission_for_phone
from .wallet import credit_balance

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _validate(username, email, password, phone) -> dict:
    errors = {}
    username = (username or "").strip()
    if len(username) < 3:
        errors["username"] = ["Username must be at least 3 characters."]
    elif len(username) > 20:
        errors["username"] = ["Username must be less than 20 characters."]

    if not EMAIL_PATTERN.match((email or "").strip()):
        errors["email"] = ["Please enter a valid email."]

    if len(password or "") < 8:
        errors["password"] = ["Password must be at least 8 characters."]

    if len((phone or "").strip()) < 11:
        errors["phone"] = ["Valid phone number is required for verification."]

    return errors


def _check_unique(username: str, email: str) -> None:
    existing = Profile.query.filter(
        or_(Profile.username == username, Profile.email == email)
    ).first()
    if existing is None:
        return
    if existing.username == username:
        raise DuplicateUsernameError()
    raise DuplicateEmailError()


def register_account(username: str, email: str, password: str, phone: str) -> Outcome:
    """Create the login and investor profile for an approved payment.

    Every precondition is checked before anything is written. If any write
    after the identity fails, the identity is deleted again so no account is
    left without a profile.
    """
    errors = _validate(username, email, password, phone)
    if errors:
        raise ValidationError(errors=errors)

    username = username.strip()
    email = email.strip().lower()
    phone = phone.strip()

    submission = latest_submission_for_phone(phone)
    if submission is None or submission.status != SubmissionStatus.APPROVED:
        raise NoApprovedPaymentError()
    if submission.user_id is not None:
        raise SubmissionAlreadyUsedError()

    _check_unique(username, email)

    # 1. identity
    user = identity.signup(email, password)
    user_id = user.id

    # 2-4. profile, submission link and referral back-fill commit together
    referred = submission.referrer_id is not None
    try:
        profile = Profile(
            id=user_id,
            username=username,
            email=email,
            balance=Decimal("0.00"),
            invested=True,
            investment_plan_id=submission.investment_plan_id,
            investment_amount=submission.investment_amount,
            daily_return_amount=submission.daily_return_amount,
            investment_date=datetime.utcnow(),
        )
        db.session.add(profile)
        db.session.flush()

        if referred:
            credit_balance(
                profile.id,
                money(current_app.config["SIGNUP_REFERRAL_BONUS"]),
                TransactionKind.SIGNUP_BONUS,
                reference=f"submission:{submission.id}",
            )

        submission.user_id = profile.id
        submission.user_email = email

        if referred:
            backfill_referral(submission.referrer_id, profile.id, submission_id=submission.id)

        db.session.commit()
    except (SQLAlchemyError, EnvoError) as e:
        db.session.rollback()
        logger.error("Profile creation for identity %s failed, removing identity: %s", user_id, e)
        try:
            identity.admin_delete(user_id)
        except DependencyError:
            logger.critical("Identity %s (%s) is orphaned without a profile", user_id, email)
        raise DependencyError(f"Could not create user profile: {e}")

    logger.info("Registered %s (profile %s) from submission %s", username, profile.id, submission.id)

    outcome = Outcome(result=profile)

    # 5. welcome mail
    sent = send_welcome_email(email, username)
    if not sent.get("success"):
        outcome.warn("Welcome email to %s failed: %s", email, sent.get("error"))

    return outcome
