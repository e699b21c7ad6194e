from flask import Blueprint

cron_bp = Blueprint("cron", __name__, url_prefix="/api/cron")

# ✅ IMPORTANT: import jobs so decorators register
from . import jobs  # noqa: E402,F401
