# envoearn/services/submissions.py
"""Payment intake and the admin approval gate."""
import logging
import re
from datetime import datetime

from flask import current_app
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from envoearn.errors import (
    DependencyError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from envoearn.extensions import db
from envoearn.models import PaymentSubmission, Profile, SubmissionStatus
from .outcome import Outcome
from .plans import get_plan
from .referral import credit_referrer, record_referral, referral_bonus_for_plan
from .storage import allowed_image, get_storage, proof_path

logger = logging.getLogger(__name__)

PHONE_PATTERN = re.compile(r"^03\d{9}$")


def _validate_intake(account_name, account_number, platform, screenshot, plan_id) -> dict:
    errors = {}

    if not account_name or len(account_name.strip()) < 2:
        errors["account_name"] = ["Account name must be at least 2 characters."]

    if not account_number or not PHONE_PATTERN.match(account_number.strip()):
        errors["account_number"] = [
            "Phone number must be a valid Pakistani mobile number (e.g., 03001234567)."
        ]

    platforms = current_app.config.get("PAYMENT_PLATFORMS", [])
    if not platform or platform.strip().lower() not in platforms:
        errors["payment_platform"] = ["Please select a payment platform."]

    if screenshot is None or not getattr(screenshot, "filename", None):
        errors["screenshot"] = ["A screenshot is required."]
    elif not allowed_image(screenshot.filename):
        errors["screenshot"] = ["Screenshot must be an image (png, jpg, jpeg, gif, webp)."]

    if get_plan(plan_id) is None:
        errors["plan_id"] = ["Please choose a valid investment plan."]

    return errors


def submit_payment(
    account_name: str,
    account_number: str,
    platform: str,
    screenshot,
    plan_id: str,
    referrer_id=None,
    uploader_id=None,
) -> PaymentSubmission:
    """Record a pending payment claim and store its proof."""
    errors = _validate_intake(account_name, account_number, platform, screenshot, plan_id)
    if errors:
        raise ValidationError(errors=errors)

    account_number = account_number.strip()
    plan = get_plan(plan_id)

    if referrer_id is not None and db.session.get(Profile, referrer_id) is None:
        logger.warning("Dropping unknown referrer %s on submission from %s", referrer_id, account_number)
        referrer_id = None

    storage = get_storage()
    path = proof_path(uploader_id or account_number, screenshot.filename)
    url = storage.upload(screenshot, path)

    submission = PaymentSubmission(
        account_name=account_name.strip(),
        account_number=account_number,
        payment_platform=platform.strip().lower(),
        screenshot_url=url,
        screenshot_path=path,
        status=SubmissionStatus.PENDING,
        referrer_id=referrer_id,
        investment_plan_id=plan.id,
        investment_amount=plan.amount,
        daily_return_amount=plan.daily_return,
    )

    try:
        db.session.add(submission)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        try:
            storage.delete(path)
        except DependencyError:
            logger.error("Orphaned proof %s left in storage", path)
        raise DependencyError(f"Could not save your submission: {e}")

    logger.info(
        "Submission %s received from %s (plan %s, referrer %s)",
        submission.id, account_number, plan.id, referrer_id,
    )
    return submission


def latest_submission_for_phone(phone: str) -> PaymentSubmission | None:
    return (
        PaymentSubmission.query
        .filter_by(account_number=(phone or "").strip())
        .order_by(PaymentSubmission.created_at.desc(), PaymentSubmission.id.desc())
        .first()
    )


def pending_submissions() -> list[PaymentSubmission]:
    return (
        PaymentSubmission.query
        .filter_by(status=SubmissionStatus.PENDING)
        .order_by(PaymentSubmission.created_at.asc())
        .all()
    )


def _award_referral(submission: PaymentSubmission, outcome: Outcome) -> None:
    bonus = referral_bonus_for_plan(submission.investment_plan_id)
    try:
        credit_referrer(
            submission.referrer_id, bonus, reference=f"submission:{submission.id}"
        )
        record_referral(
            submission.referrer_id, None, bonus, submission_id=submission.id
        )
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        outcome.warn(
            "Referral bonus for referrer %s on submission %s failed: %s",
            submission.referrer_id, submission.id, e,
        )
        return

    logger.info(
        "Referral bonus %s credited to %s for submission %s",
        bonus, submission.referrer_id, submission.id,
    )


def _delete_proof(submission: PaymentSubmission, outcome: Outcome) -> None:
    if not submission.screenshot_path:
        return

    try:
        get_storage().delete(submission.screenshot_path)
        submission.screenshot_path = None
        submission.screenshot_url = None
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        outcome.warn("Could not delete proof of submission %s: %s", submission.id, e)


def decide_submission(submission_id: int, decision) -> Outcome:
    """pending -> approved | rejected.

    The status change is committed on its own. Referral credit and proof
    deletion are attached effects: their failures are reported on the
    returned Outcome and never undo the decision.
    """
    try:
        new_status = SubmissionStatus(decision)
    except ValueError:
        raise ValidationError("Decision must be 'approved' or 'rejected'.")

    submission = db.session.get(PaymentSubmission, submission_id)
    if submission is None:
        raise NotFoundError(f"Submission {submission_id} not found.")

    if not submission.status.can_transition_to(new_status):
        raise InvalidTransitionError(
            f"Submission {submission_id} is already {submission.status.value}."
        )

    # guarded on the current status so two admins cannot both decide it
    stmt = (
        update(PaymentSubmission)
        .where(
            PaymentSubmission.id == submission_id,
            PaymentSubmission.status == SubmissionStatus.PENDING,
        )
        .values(status=new_status, decided_at=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )
    try:
        changed = db.session.execute(stmt).rowcount
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise DependencyError(f"Failed to {new_status.value} submission: {e}")

    db.session.refresh(submission)
    if not changed:
        raise InvalidTransitionError(
            f"Submission {submission_id} is already {submission.status.value}."
        )

    current_app.logger.info("Submission %s %s", submission.id, new_status.value)

    outcome = Outcome(result=submission)

    if new_status == SubmissionStatus.APPROVED and submission.referrer_id:
        _award_referral(submission, outcome)

    _delete_proof(submission, outcome)
    return outcome
