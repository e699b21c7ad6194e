from flask import Blueprint

from envoearn.extensions import db, login_manager
from envoearn.models.user import User

auth_bp = Blueprint('auth', __name__, url_prefix='/auth')

from . import routes  # noqa: E402,F401  (ensures routes are imported)


@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, int(user_id))
