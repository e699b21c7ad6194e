from flask import current_app, jsonify, request

from envoearn.errors import DependencyError
from envoearn.services.accrual import run_daily_accrual
from envoearn.utils import bearer_token_matches
from . import cron_bp


@cron_bp.route("/add-daily-earnings", methods=["POST"])
def add_daily_earnings():
    secret = current_app.config.get("CRON_SECRET") or ""
    if not bearer_token_matches(request.headers.get("Authorization"), secret):
        return jsonify({"error": "Unauthorized"}), 401

    try:
        report = run_daily_accrual()
    except DependencyError as e:
        current_app.logger.error("Daily accrual failed: %s", e.message)
        return jsonify({"error": e.message}), 500

    return jsonify(report.to_dict()), 200
