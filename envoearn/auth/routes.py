from flask import current_app, jsonify, session
from flask_login import current_user, login_required, login_user, logout_user

from envoearn.errors import ValidationError
from envoearn.services import identity
from envoearn.services.registration import register_account
from . import auth_bp
from .forms import LoginForm, RegisterForm


def _landing_for(user) -> str:
    if user.is_admin:
        return "/admin/"
    profile = user.profile
    return "/dashboard" if profile is not None and profile.invested else "/invest"


@auth_bp.route("/register", methods=["POST"])
def register():
    form = RegisterForm()
    if not form.validate_on_submit():
        raise ValidationError(errors=form.errors)

    outcome = register_account(
        username=form.username.data,
        email=form.email.data,
        password=form.password.data,
        phone=form.phone.data,
    )
    profile = outcome.result

    current_app.logger.info("New account %s registered", profile.username)
    return jsonify({
        "message": "Registration Successful! Please log in.",
        "profile": profile.to_dict(),
        "warnings": outcome.warnings,
    }), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    form = LoginForm()
    if not form.validate_on_submit():
        raise ValidationError(errors=form.errors)

    # raises AuthenticationError (401) on bad credentials
    user = identity.signin(form.email.data, form.password.data)

    login_user(user)
    return jsonify({
        "message": "Signed in.",
        "user_id": user.id,
        "is_admin": user.is_admin,
        "redirect": _landing_for(user),
    })


@auth_bp.route("/logout", methods=["POST"])
@login_required
def logout():
    logout_user()
    session.clear()
    return jsonify({"message": "Signed out.", "redirect": "/auth/login"})


@auth_bp.route("/me")
@login_required
def me():
    profile = current_user.profile
    return jsonify({
        "user_id": current_user.id,
        "email": current_user.email,
        "is_admin": current_user.is_admin,
        "profile": profile.to_dict() if profile else None,
    })
