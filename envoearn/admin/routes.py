# envoearn/admin/routes.py
from flask import Response, current_app, jsonify, request
from flask_login import current_user, login_required

from envoearn.errors import ValidationError
from envoearn.services import admin as admin_service
from envoearn.services.submissions import decide_submission, pending_submissions
from envoearn.utils import admin_required
from . import admin_bp
from .forms import BalanceForm, DecisionForm


def _csv_response(text: str, filename: str) -> Response:
    return Response(
        text,
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@admin_bp.route("/", methods=["GET"])
@login_required
@admin_required
def stats():
    return jsonify(admin_service.platform_stats())


# ---------------------------
# APPROVALS
# ---------------------------
@admin_bp.route("/approvals", methods=["GET"])
@login_required
@admin_required
def approvals():
    return jsonify({"submissions": [s.to_dict() for s in pending_submissions()]})


@admin_bp.route("/approvals/<int:submission_id>", methods=["POST"])
@login_required
@admin_required
def decide_approval(submission_id: int):
    form = DecisionForm()
    if not form.validate_on_submit():
        raise ValidationError(errors=form.errors)

    outcome = decide_submission(submission_id, form.status.data)
    submission = outcome.result

    current_app.logger.info(
        f"Admin {current_user.id} set submission {submission.id} → {submission.status.value}"
    )
    return jsonify({
        "message": f"Submission has been {submission.status.value}.",
        "submission": submission.to_dict(),
        "warnings": outcome.warnings,
    })


# ---------------------------
# USERS
# ---------------------------
@admin_bp.route("/users", methods=["GET"])
@login_required
@admin_required
def users():
    search = request.args.get("q")
    return jsonify({"users": [p.to_dict() for p in admin_service.list_users(search)]})


@admin_bp.route("/users/<int:user_id>", methods=["GET"])
@login_required
@admin_required
def user_details(user_id: int):
    return jsonify(admin_service.user_details(user_id))


@admin_bp.route("/users/<int:user_id>/balance", methods=["POST"])
@login_required
@admin_required
def update_balance(user_id: int):
    form = BalanceForm()
    if not form.validate_on_submit():
        raise ValidationError(errors=form.errors)

    profile = admin_service.set_user_balance(user_id, form.balance.data, admin_id=current_user.id)
    return jsonify({"message": "Balance updated.", "profile": profile.to_dict()})


@admin_bp.route("/users/<int:user_id>", methods=["DELETE"])
@login_required
@admin_required
def delete_user(user_id: int):
    admin_service.delete_user(user_id)
    current_app.logger.info(f"Admin {current_user.id} deleted user {user_id}")
    return jsonify({"message": "The user has been removed."})


# ---------------------------
# EXPORTS
# ---------------------------
@admin_bp.route("/users/export.csv", methods=["GET"])
@login_required
@admin_required
def export_users():
    text = admin_service.export_users_csv(request.args.get("q"))
    return _csv_response(text, "user_data.csv")


@admin_bp.route("/users/<int:user_id>/export.csv", methods=["GET"])
@login_required
@admin_required
def export_user_details(user_id: int):
    filename, text = admin_service.export_user_details_csv(user_id)
    return _csv_response(text, filename)
