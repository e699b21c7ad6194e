from flask import current_app, jsonify, request, session
from flask_login import current_user

from envoearn.errors import NotFoundError, ValidationError
from envoearn.services.plans import PLANS
from envoearn.services.submissions import latest_submission_for_phone, submit_payment
from . import invest_bp
from .forms import PaymentForm


def _referrer_id(raw):
    """?ref= carries the referrer's profile id; anything else is ignored."""
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        return None


@invest_bp.route("/plans")
def plans():
    return jsonify({
        "plans": [plan.to_dict() for plan in PLANS.values()],
        "payment_platforms": current_app.config.get("PAYMENT_PLATFORMS", []),
    })


@invest_bp.route("/submit", methods=["POST"])
def submit():
    form = PaymentForm()
    if not form.validate_on_submit():
        raise ValidationError(errors=form.errors)

    referrer_id = _referrer_id(form.ref.data or session.get("ref"))
    uploader_id = current_user.id if current_user.is_authenticated else None

    submission = submit_payment(
        account_name=form.account_name.data,
        account_number=form.account_number.data,
        platform=form.payment_platform.data,
        screenshot=form.screenshot.data,
        plan_id=form.plan_id.data,
        referrer_id=referrer_id,
        uploader_id=uploader_id,
    )
    session.pop("ref", None)  # ✅ prevent referral carrying over to the next payment

    return jsonify({
        "message": "Payment submitted. Please wait for approval.",
        "submission": submission.to_dict(),
        "status_url": f"/invest/status?phone={submission.account_number}",
    }), 201


@invest_bp.route("/status")
def status():
    phone = (request.args.get("phone") or "").strip()
    if not phone:
        raise ValidationError(errors={"phone": ["Phone number is required."]})

    submission = latest_submission_for_phone(phone)
    if submission is None:
        raise NotFoundError("No payment submission found for this phone number.")

    return jsonify({"status": submission.status.value})
