from flask import Blueprint

invest_bp = Blueprint("invest", __name__, url_prefix="/invest")

from . import routes  # noqa: E402,F401
