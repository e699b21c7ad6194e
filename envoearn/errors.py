# envoearn/errors.py
from flask import jsonify


class EnvoError(Exception):
    """Base error. Carries the HTTP status the API answers with."""

    status_code = 500
    default_message = "Something went wrong."

    def __init__(self, message=None, errors=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.errors = errors or {}

    def to_dict(self):
        payload = {"error": self.message, "type": type(self).__name__}
        if self.errors:
            payload["errors"] = self.errors
        return payload


# ==========================================================
#                  INPUT
# ==========================================================
class ValidationError(EnvoError):
    status_code = 400
    default_message = "Invalid form data. Please check your inputs."


# ==========================================================
#                  PRECONDITIONS
# ==========================================================
class PreconditionError(EnvoError):
    status_code = 409
    default_message = "This action is not allowed right now."


class NoApprovedPaymentError(PreconditionError):
    default_message = "No approved payment found for your phone number."


class SubmissionAlreadyUsedError(PreconditionError):
    default_message = "An account has already been registered for this payment."


class DuplicateUsernameError(PreconditionError):
    default_message = "Username already exists."


class DuplicateEmailError(PreconditionError):
    default_message = "An account with this email already exists."


class InsufficientFundsError(PreconditionError):
    default_message = "Your requested amount exceeds your available balance."


class ReferralLockError(PreconditionError):
    default_message = "You must refer 2 users to continue withdrawing."


class PayoutMethodMissingError(PreconditionError):
    default_message = "Please set up and save your withdrawal method first."


class InvalidTransitionError(PreconditionError):
    default_message = "This request has already been decided."


# ==========================================================
#                  LOOKUPS / AUTH
# ==========================================================
class NotFoundError(EnvoError):
    status_code = 404
    default_message = "Not found."


class AuthenticationError(EnvoError):
    status_code = 401
    default_message = "Invalid email or password."


# ==========================================================
#                  COLLABORATORS
# ==========================================================
class DependencyError(EnvoError):
    """The database, storage or identity backend rejected a call."""

    status_code = 502
    default_message = "The service is temporarily unavailable. Please try again."


def register_error_handlers(app):
    @app.errorhandler(EnvoError)
    def handle_envo_error(error):
        if error.status_code >= 500:
            app.logger.error("%s: %s", type(error).__name__, error.message)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(401)
    def handle_unauthorized(error):
        return jsonify({"error": "Authentication required.", "type": "Unauthorized"}), 401

    @app.errorhandler(403)
    def handle_forbidden(error):
        return jsonify({"error": "Admin access required.", "type": "Forbidden"}), 403

    @app.errorhandler(404)
    def handle_not_found(error):
        return jsonify({"error": "Not found.", "type": "NotFound"}), 404
