"""Tests for the admin approval gate and the referral bonus it triggers."""

from decimal import Decimal

import pytest

from envoearn.errors import DependencyError, InvalidTransitionError, NotFoundError, ValidationError
from envoearn.models import Referral, ReferralStatus, SubmissionStatus, TransactionKind, WalletTransaction
from envoearn.services.submissions import decide_submission, submit_payment


class TestDecideSubmission:

    def test_approve_without_referrer(self, make_submission):
        submission = make_submission()

        outcome = decide_submission(submission.id, "approved")

        assert outcome.fully_succeeded
        assert outcome.result.status == SubmissionStatus.APPROVED
        assert outcome.result.decided_at is not None
        assert Referral.query.count() == 0

    def test_approve_with_referrer_credits_once(self, make_profile, make_submission):
        referrer = make_profile(username="referrer")
        submission = make_submission(referrer_id=referrer.id)

        decide_submission(submission.id, "approved")

        referrals = Referral.query.filter_by(referrer_id=referrer.id).all()
        assert len(referrals) == 1
        assert referrals[0].status == ReferralStatus.INVESTED
        assert referrals[0].referred_user_id is None
        assert referrals[0].submission_id == submission.id
        assert referrals[0].bonus_amount == Decimal("200.00")
        assert referrer.balance == Decimal("200.00")
        assert WalletTransaction.query.filter_by(
            user_id=referrer.id, kind=TransactionKind.REFERRAL_BONUS
        ).count() == 1

    def test_top_tier_plan_pays_800(self, make_profile, make_submission):
        referrer = make_profile(username="referrer")
        submission = make_submission(referrer_id=referrer.id, plan_id="3")

        decide_submission(submission.id, "approved")

        assert referrer.balance == Decimal("800.00")
        assert Referral.query.one().bonus_amount == Decimal("800.00")

    def test_reject_pays_nothing(self, make_profile, make_submission):
        referrer = make_profile(username="referrer")
        submission = make_submission(referrer_id=referrer.id)

        outcome = decide_submission(submission.id, "rejected")

        assert outcome.result.status == SubmissionStatus.REJECTED
        assert referrer.balance == Decimal("0.00")
        assert Referral.query.count() == 0

    @pytest.mark.parametrize("first,second", [
        ("approved", "approved"),
        ("approved", "rejected"),
        ("rejected", "approved"),
    ])
    def test_decisions_are_final(self, make_profile, make_submission, first, second):
        referrer = make_profile(username="referrer")
        submission = make_submission(referrer_id=referrer.id)
        decide_submission(submission.id, first)

        with pytest.raises(InvalidTransitionError):
            decide_submission(submission.id, second)

        assert Referral.query.count() == (1 if first == "approved" else 0)
        assert referrer.balance == (Decimal("200.00") if first == "approved" else Decimal("0.00"))

    def test_unknown_decision(self, make_submission):
        submission = make_submission()
        with pytest.raises(ValidationError):
            decide_submission(submission.id, "paid")

    def test_unknown_submission(self, app):
        with pytest.raises(NotFoundError):
            decide_submission(404, "approved")


class TestAttachedEffects:

    def test_proof_deleted_after_decision(self, app, image_file, storage_root):
        submission = submit_payment("Ali Khan", "03001234567", "easypaisa", image_file(), "1")
        stored = storage_root / submission.screenshot_path
        assert stored.exists()

        outcome = decide_submission(submission.id, "rejected")

        assert outcome.fully_succeeded
        assert not stored.exists()
        assert outcome.result.screenshot_path is None
        assert outcome.result.screenshot_url is None

    def test_proof_delete_failure_is_a_warning(self, app, make_submission, monkeypatch):
        submission = make_submission(screenshot_path="03001234567/1_proof.png")
        storage = app.extensions["envoearn.storage"]

        def broken_delete(path):
            raise DependencyError("Could not delete file: read-only")

        monkeypatch.setattr(storage, "delete", broken_delete)

        outcome = decide_submission(submission.id, "approved")

        assert outcome.result.status == SubmissionStatus.APPROVED
        assert len(outcome.warnings) == 1
        assert "Could not delete proof" in outcome.warnings[0]
        assert outcome.result.screenshot_path == "03001234567/1_proof.png"

    def test_referral_failure_keeps_the_approval(self, make_profile, make_submission, monkeypatch):
        referrer = make_profile(username="referrer")
        submission = make_submission(referrer_id=referrer.id)

        def broken_record(*args, **kwargs):
            raise DependencyError("insert failed")

        monkeypatch.setattr("envoearn.services.submissions.record_referral", broken_record)

        outcome = decide_submission(submission.id, "approved")

        assert outcome.result.status == SubmissionStatus.APPROVED
        assert len(outcome.warnings) == 1
        # credit and referral row roll back together
        assert referrer.balance == Decimal("0.00")
        assert Referral.query.count() == 0
        assert WalletTransaction.query.count() == 0


class TestApprovalEndpoints:

    def test_requires_admin(self, client, make_profile, login, make_submission):
        profile = make_profile()
        login(profile.email)
        submission = make_submission()

        assert client.get("/admin/approvals").status_code == 403
        assert client.post(f"/admin/approvals/{submission.id}", data={"status": "approved"}).status_code == 403

    def test_anonymous_is_401(self, client):
        assert client.get("/admin/approvals").status_code == 401

    def test_lists_pending_and_decides(self, admin_client, make_submission):
        pending = make_submission()
        make_submission(phone="03007654321", status=SubmissionStatus.REJECTED)

        listed = admin_client.get("/admin/approvals").get_json()["submissions"]
        assert [s["id"] for s in listed] == [pending.id]

        resp = admin_client.post(f"/admin/approvals/{pending.id}", data={"status": "approved"})
        assert resp.status_code == 200
        assert resp.get_json()["submission"]["status"] == "approved"
        assert resp.get_json()["warnings"] == []

        again = admin_client.post(f"/admin/approvals/{pending.id}", data={"status": "rejected"})
        assert again.status_code == 409
        assert again.get_json()["type"] == "InvalidTransitionError"
