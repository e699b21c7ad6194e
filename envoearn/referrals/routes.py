# envoearn/referrals/routes.py
from flask import current_app, jsonify
from flask_login import current_user, login_required

from envoearn.errors import NotFoundError, ValidationError
from envoearn.services.dashboard import referral_summary
from envoearn.services.withdrawals import (
    request_withdrawal,
    save_withdrawal_method,
    withdrawal_history,
    withdrawal_overview,
)
from . import referral_bp
from .forms import WithdrawalForm, WithdrawalMethodForm


def _require_profile():
    if current_user.profile is None:
        raise NotFoundError("No investor profile for this account.")
    return current_user.profile


@referral_bp.route("/")
@login_required
def referral_stats():
    profile = _require_profile()
    return jsonify(referral_summary(profile.id))


@referral_bp.route("/withdraw", methods=["GET"])
@login_required
def withdraw_overview():
    profile = _require_profile()
    return jsonify(withdrawal_overview(profile.id))


@referral_bp.route("/withdrawal-method", methods=["POST"])
@login_required
def save_method():
    profile = _require_profile()
    form = WithdrawalMethodForm()
    if not form.validate_on_submit():
        raise ValidationError(errors=form.errors)

    method = save_withdrawal_method(
        profile.id,
        form.method.data,
        form.account_name.data,
        form.account_number.data,
    )
    return jsonify({"message": "Withdrawal method saved.", "withdrawal_method": method})


@referral_bp.route("/withdraw", methods=["POST"])
@login_required
def request_withdrawal_view():
    profile = _require_profile()
    form = WithdrawalForm()
    if not form.validate_on_submit():
        raise ValidationError(errors=form.errors)

    withdrawal = request_withdrawal(profile.id, form.amount.data)

    current_app.logger.info(
        "Profile %s requested withdrawal %s of %s", profile.id, withdrawal.id, withdrawal.amount
    )
    return jsonify({
        "message": "Your withdrawal request has been submitted.",
        "withdrawal": withdrawal.to_dict(),
    }), 201


@referral_bp.route("/withdrawals")
@login_required
def withdrawal_history_view():
    profile = _require_profile()
    return jsonify({"withdrawals": [w.to_dict() for w in withdrawal_history(profile.id)]})
