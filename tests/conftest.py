"""Pytest configuration and shared fixtures for all tests."""

import io
from decimal import Decimal

import pytest
from werkzeug.datastructures import FileStorage

from envoearn import create_app
from envoearn.extensions import db
from envoearn.models import PaymentSubmission, Profile, SubmissionStatus
from envoearn.services import identity
from envoearn.services.plans import get_plan
from envoearn.services.storage import LocalStorage

PASSWORD = "correct-horse-battery"


@pytest.fixture
def app(tmp_path):
    """App on an in-memory database with proofs stored under tmp_path."""
    app = create_app("testing")
    app.extensions["envoearn.storage"] = LocalStorage(
        root=str(tmp_path / "proofs"), base_url="http://testserver"
    )

    ctx = app.app_context()
    ctx.push()
    db.create_all()

    yield app

    db.session.remove()
    db.drop_all()
    ctx.pop()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def storage_root(tmp_path):
    return tmp_path / "proofs"


@pytest.fixture
def make_profile(app):
    """Factory: identity + investor profile, committed."""
    counter = {"n": 0}

    def _make(username=None, balance="0.00", invested=True, plan_id="1", email=None,
              withdrawal_method=None):
        counter["n"] += 1
        username = username or f"investor{counter['n']}"
        email = email or f"{username}@example.com"

        user = identity.signup(email, PASSWORD)
        plan = get_plan(plan_id)
        profile = Profile(
            id=user.id,
            username=username,
            email=email,
            balance=Decimal(balance),
            invested=invested,
            investment_plan_id=plan.id if invested else None,
            investment_amount=plan.amount if invested else None,
            daily_return_amount=plan.daily_return if invested else None,
            withdrawal_method=withdrawal_method,
        )
        db.session.add(profile)
        db.session.commit()
        return profile

    return _make


@pytest.fixture
def make_submission(app):
    """Factory: a payment submission row in any state, without touching storage."""

    def _make(phone="03001234567", status=SubmissionStatus.PENDING, referrer_id=None,
              plan_id="1", screenshot_path=None):
        plan = get_plan(plan_id)
        submission = PaymentSubmission(
            account_name="Ali Khan",
            account_number=phone,
            payment_platform="easypaisa",
            screenshot_url=None,
            screenshot_path=screenshot_path,
            status=status,
            referrer_id=referrer_id,
            investment_plan_id=plan.id,
            investment_amount=plan.amount,
            daily_return_amount=plan.daily_return,
        )
        db.session.add(submission)
        db.session.commit()
        return submission

    return _make


@pytest.fixture
def image_file():
    """Factory for an uploaded screenshot."""

    def _make(filename="proof.png", content=b"\x89PNG\r\n\x1a\nfake"):
        return FileStorage(stream=io.BytesIO(content), filename=filename, content_type="image/png")

    return _make


@pytest.fixture
def login(client):
    def _login(email, password=PASSWORD):
        return client.post("/auth/login", data={"email": email, "password": password})

    return _login


@pytest.fixture
def admin_user(app):
    return identity.signup("admin@example.com", PASSWORD, is_admin=True)


@pytest.fixture
def admin_client(client, admin_user, login):
    resp = login("admin@example.com")
    assert resp.status_code == 200
    return client
