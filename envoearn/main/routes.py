import os

from flask import abort, current_app, jsonify, request, send_from_directory, session
from flask_login import current_user

from envoearn.services.plans import PLANS
from envoearn.services.storage import LocalStorage, get_storage
from . import main_bp


@main_bp.route('/')
def index():
    # Persist referral id across pages
    ref = request.args.get("ref")
    if ref:
        session["ref"] = ref  # store latest referral id
    else:
        ref = session.get("ref")  # reuse stored id if present

    if current_user.is_authenticated:
        next_page = "/dashboard"
    else:
        next_page = "/invest"

    return jsonify({
        "name": "ENVO EARN",
        "ref": ref,
        "next": next_page,
        "plans": [plan.to_dict() for plan in PLANS.values()],
    })


@main_bp.route('/uploads/<path:path>')
def uploaded_file(path):
    storage = get_storage()
    if not isinstance(storage, LocalStorage):
        abort(404)
    return send_from_directory(os.path.abspath(storage.root), path)


@main_bp.route('/health')
def health():
    return jsonify({"status": "ok", "env": current_app.config.get("ENV")})
