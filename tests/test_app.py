"""Tests for the application factory, configuration, CLI and small endpoints."""

from logging.handlers import RotatingFileHandler

import pytest

from config import TestingConfig
from envoearn import create_app
from envoearn.errors import DependencyError
from envoearn.extensions import db
from envoearn.models import Earning, SubmissionStatus, User, WithdrawalStatus
from envoearn.services.plans import PLANS, get_plan, is_top_tier
from envoearn.services.storage import LocalStorage


class TestFactory:

    def test_production_requires_settings(self, monkeypatch):
        for key in ("SECRET_KEY", "DATABASE_URL", "CRON_SECRET"):
            monkeypatch.delenv(key, raising=False)

        with pytest.raises(RuntimeError) as exc:
            create_app("production")

        assert "SECRET_KEY" in str(exc.value)
        assert "CRON_SECRET" in str(exc.value)

    def test_testing_config(self, app):
        assert app.config["TESTING"] is True
        assert app.config["BUSINESS_TIMEZONE"] == "Asia/Karachi"
        assert app.config["PAYMENT_PLATFORMS"] == ["easypaisa", "jazzcash"]

    def test_file_logging(self, monkeypatch, tmp_path):
        monkeypatch.setattr(TestingConfig, "LOG_TO_FILE", True)
        monkeypatch.setattr(TestingConfig, "LOG_DIR", str(tmp_path / "logs"))

        app = create_app("testing")
        handlers = [h for h in app.logger.handlers if isinstance(h, RotatingFileHandler)]
        try:
            assert handlers
            assert (tmp_path / "logs").is_dir()
        finally:
            for handler in handlers:
                app.logger.removeHandler(handler)
                handler.close()


class TestPlans:

    def test_catalog(self, app):
        assert list(PLANS) == ["1", "2", "3"]
        assert get_plan(1).name == "Starter Plan"
        assert get_plan("7") is None
        assert get_plan(None) is None
        assert is_top_tier("3") and not is_top_tier("1")

    def test_plans_endpoint(self, client):
        body = client.get("/invest/plans").get_json()

        assert [p["id"] for p in body["plans"]] == ["1", "2", "3"]
        assert body["plans"][0]["amount"] == 6000.0
        assert body["payment_platforms"] == ["easypaisa", "jazzcash"]


class TestStatusEnums:

    def test_submission_transitions(self):
        assert SubmissionStatus.PENDING.can_transition_to(SubmissionStatus.APPROVED)
        assert SubmissionStatus.PENDING.can_transition_to(SubmissionStatus.REJECTED)
        assert not SubmissionStatus.APPROVED.can_transition_to(SubmissionStatus.REJECTED)
        assert SubmissionStatus.REJECTED.is_final

    def test_withdrawal_transitions(self):
        assert WithdrawalStatus.PROCESSING.can_transition_to(WithdrawalStatus.APPROVED)
        assert not WithdrawalStatus.REJECTED.can_transition_to(WithdrawalStatus.APPROVED)
        assert not WithdrawalStatus.PROCESSING.is_final


class TestMainRoutes:

    def test_index_remembers_referrer(self, client):
        assert client.get("/?ref=12").get_json()["ref"] == "12"
        assert client.get("/").get_json()["ref"] == "12"

    def test_uploaded_proof_is_served(self, client, image_file):
        resp = client.post(
            "/invest/submit",
            data={
                "account_name": "Ali Khan",
                "account_number": "03001234567",
                "payment_platform": "easypaisa",
                "plan_id": "1",
                "screenshot": image_file(content=b"png-bytes"),
            },
            content_type="multipart/form-data",
        )
        url = resp.get_json()["submission"]["screenshot_url"]

        served = client.get(url.replace("http://testserver", ""))

        assert served.status_code == 200
        assert served.data == b"png-bytes"

    def test_session_endpoints(self, client, make_profile, login):
        profile = make_profile()
        login(profile.email)

        me = client.get("/auth/me").get_json()
        assert me["profile"]["username"] == profile.username

        assert client.post("/auth/logout").status_code == 200
        assert client.get("/auth/me").status_code == 401


class TestCli:

    def test_add_daily_earnings(self, app, make_profile):
        make_profile()
        db.session.commit()

        result = app.test_cli_runner().invoke(args=["add-daily-earnings"])

        assert result.exit_code == 0
        assert "paid=1" in result.output
        assert Earning.query.count() == 1

    def test_create_admin(self, app):
        db.session.commit()

        result = app.test_cli_runner().invoke(
            args=["create-admin", "boss@example.com", "--password", "s3cret-pass"]
        )

        assert result.exit_code == 0
        user = User.query.filter_by(email="boss@example.com").one()
        assert user.is_admin is True
        assert user.check_password("s3cret-pass")


class TestLocalStorage:

    def test_rejects_paths_outside_the_root(self, tmp_path, image_file):
        storage = LocalStorage(str(tmp_path / "proofs"), "http://testserver")

        with pytest.raises(DependencyError):
            storage.upload(image_file(), "../escape.png")

    def test_delete_missing_file_is_quiet(self, tmp_path):
        LocalStorage(str(tmp_path / "proofs"), "http://testserver").delete("nobody/gone.png")
