# envoearn/admin/withdrawals.py
from flask import current_app, jsonify, request
from flask_login import current_user, login_required

from envoearn.errors import ValidationError
from envoearn.services.admin import list_withdrawals
from envoearn.services.withdrawals import decide_withdrawal
from envoearn.utils import admin_required
from . import admin_bp
from .forms import DecisionForm


@admin_bp.route("/withdrawals", methods=["GET"])
@login_required
@admin_required
def withdrawals():
    search = request.args.get("q")
    return jsonify({"withdrawals": list_withdrawals(search)})


@admin_bp.route("/withdrawals/<int:withdrawal_id>/status", methods=["POST"])
@login_required
@admin_required
def update_withdrawal_status(withdrawal_id: int):
    form = DecisionForm()
    if not form.validate_on_submit():
        raise ValidationError(errors=form.errors)

    # approved debits the balance in the same transaction; insufficient funds
    # leaves the withdrawal processing
    wr = decide_withdrawal(withdrawal_id, form.status.data)

    current_app.logger.info(
        f"Admin {current_user.id} set withdrawal {wr.id} → {wr.status.value}"
    )
    return jsonify({
        "message": f"Withdrawal #{wr.id} updated to {wr.status.value}.",
        "withdrawal": wr.to_dict(),
    })
