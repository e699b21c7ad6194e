from flask import jsonify
from flask_login import current_user, login_required

from envoearn.errors import NotFoundError
from envoearn.services.dashboard import dashboard_summary
from . import dashboard_bp


@dashboard_bp.route("/")
@login_required
def index():
    if current_user.profile is None:
        raise NotFoundError("No investor profile for this account.")
    return jsonify(dashboard_summary(current_user.id))
