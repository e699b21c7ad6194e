"""Tests for the withdrawal gate: request rules, referral lock and admin decisions."""

from decimal import Decimal

import pytest

from envoearn.errors import (
    InsufficientFundsError,
    InvalidTransitionError,
    PayoutMethodMissingError,
    ReferralLockError,
    ValidationError,
)
from envoearn.extensions import db
from envoearn.models import Referral, TransactionKind, WalletTransaction, Withdrawal, WithdrawalStatus
from envoearn.services.withdrawals import (
    decide_withdrawal,
    is_referral_locked,
    request_withdrawal,
    save_withdrawal_method,
    withdrawal_history,
    withdrawal_overview,
)

METHOD = {"method": "easypaisa", "account_name": "Ali Khan", "account_number": "03001234567"}


def _approved_withdrawals(profile, count):
    for _ in range(count):
        db.session.add(Withdrawal(
            user_id=profile.id,
            amount=Decimal("600.00"),
            method="easypaisa",
            account_name="Ali Khan",
            account_number="03001234567",
            status=WithdrawalStatus.APPROVED,
        ))
    db.session.commit()


def _referrals(profile, count):
    for _ in range(count):
        db.session.add(Referral(referrer_id=profile.id, bonus_amount=Decimal("200.00")))
    db.session.commit()


class TestRequestWithdrawal:

    def test_creates_processing_request_without_debit(self, make_profile):
        profile = make_profile(balance="1000.00", withdrawal_method=METHOD)

        withdrawal = request_withdrawal(profile.id, "600")

        assert withdrawal.status == WithdrawalStatus.PROCESSING
        assert withdrawal.amount == Decimal("600.00")
        assert withdrawal.method == "easypaisa"
        assert withdrawal.account_number == "03001234567"
        assert profile.balance == Decimal("1000.00")

    @pytest.mark.parametrize("amount", ["599.99", "0", "-600", "abc", "NaN", "Infinity", None])
    def test_below_minimum_or_junk(self, make_profile, amount):
        profile = make_profile(balance="5000.00", withdrawal_method=METHOD)

        with pytest.raises(ValidationError) as exc:
            request_withdrawal(profile.id, amount)

        assert "amount" in exc.value.errors
        assert Withdrawal.query.count() == 0

    def test_amount_over_balance(self, make_profile):
        profile = make_profile(balance="700.00", withdrawal_method=METHOD)

        with pytest.raises(InsufficientFundsError):
            request_withdrawal(profile.id, "800")

        assert Withdrawal.query.count() == 0

    def test_missing_payout_method(self, make_profile):
        profile = make_profile(balance="1000.00")

        with pytest.raises(PayoutMethodMissingError):
            request_withdrawal(profile.id, "600")

    def test_lock_checked_before_balance(self, make_profile):
        profile = make_profile(balance="0.00", withdrawal_method=METHOD)
        _approved_withdrawals(profile, 2)
        _referrals(profile, 1)

        with pytest.raises(ReferralLockError) as exc:
            request_withdrawal(profile.id, "600")

        assert str(exc.value) == "You must refer 2 users to continue withdrawing."
        assert Withdrawal.query.filter_by(status=WithdrawalStatus.PROCESSING).count() == 0

    def test_lock_lifted_by_two_referrals(self, make_profile):
        profile = make_profile(balance="1000.00", withdrawal_method=METHOD)
        _approved_withdrawals(profile, 2)
        _referrals(profile, 2)

        assert request_withdrawal(profile.id, "600").is_processing

    def test_top_tier_is_never_locked(self, make_profile):
        profile = make_profile(balance="1000.00", plan_id="3", withdrawal_method=METHOD)
        _approved_withdrawals(profile, 5)

        assert is_referral_locked(profile) is False
        assert request_withdrawal(profile.id, "600").is_processing

    def test_first_two_withdrawals_need_no_referrals(self, make_profile):
        profile = make_profile(balance="1000.00", withdrawal_method=METHOD)
        _approved_withdrawals(profile, 1)

        assert is_referral_locked(profile) is False


class TestWithdrawalMethod:

    def test_save_and_use(self, make_profile):
        profile = make_profile(balance="1000.00")

        saved = save_withdrawal_method(profile.id, "JazzCash", " Ali Khan ", "03001234567")

        assert saved == {"method": "jazzcash", "account_name": "Ali Khan", "account_number": "03001234567"}
        assert request_withdrawal(profile.id, "600").method == "jazzcash"

    def test_validation(self, make_profile):
        profile = make_profile()

        with pytest.raises(ValidationError) as exc:
            save_withdrawal_method(profile.id, "paypal", "A", "0300")

        assert set(exc.value.errors) == {"method", "account_name", "account_number"}


class TestDecideWithdrawal:

    def test_approve_debits_balance(self, make_profile):
        profile = make_profile(balance="1000.00", withdrawal_method=METHOD)
        withdrawal = request_withdrawal(profile.id, "600")

        decided = decide_withdrawal(withdrawal.id, "approved")

        assert decided.status == WithdrawalStatus.APPROVED
        assert decided.decided_at is not None
        assert profile.balance == Decimal("400.00")
        tx = WalletTransaction.query.filter_by(kind=TransactionKind.WITHDRAWAL).one()
        assert tx.amount == Decimal("-600.00")
        assert tx.reference == f"withdrawal:{withdrawal.id}"

    def test_reject_leaves_balance(self, make_profile):
        profile = make_profile(balance="1000.00", withdrawal_method=METHOD)
        withdrawal = request_withdrawal(profile.id, "600")

        decided = decide_withdrawal(withdrawal.id, "rejected")

        assert decided.status == WithdrawalStatus.REJECTED
        assert profile.balance == Decimal("1000.00")
        assert WalletTransaction.query.count() == 0

    def test_cannot_decide_twice(self, make_profile):
        profile = make_profile(balance="2000.00", withdrawal_method=METHOD)
        withdrawal = request_withdrawal(profile.id, "600")
        decide_withdrawal(withdrawal.id, "approved")

        with pytest.raises(InvalidTransitionError):
            decide_withdrawal(withdrawal.id, "approved")

        assert profile.balance == Decimal("1400.00")

    def test_approval_fails_when_balance_no_longer_covers(self, make_profile):
        profile = make_profile(balance="1000.00", withdrawal_method=METHOD)
        first = request_withdrawal(profile.id, "700")
        second = request_withdrawal(profile.id, "700")
        decide_withdrawal(first.id, "approved")

        with pytest.raises(InsufficientFundsError):
            decide_withdrawal(second.id, "approved")

        assert db.session.get(Withdrawal, second.id).status == WithdrawalStatus.PROCESSING
        assert profile.balance == Decimal("300.00")


class TestHistory:

    def test_history_newest_first_and_overview(self, make_profile):
        profile = make_profile(balance="2000.00", withdrawal_method=METHOD)
        first = request_withdrawal(profile.id, "600")
        second = request_withdrawal(profile.id, "700")

        assert [w.id for w in withdrawal_history(profile.id)] == [second.id, first.id]

        overview = withdrawal_overview(profile.id)
        assert overview["balance"] == 2000.0
        assert overview["min_withdrawal"] == 600.0
        assert overview["referral_locked"] is False
        assert len(overview["history"]) == 2


class TestWithdrawalEndpoints:

    def test_user_flow(self, client, make_profile, login):
        profile = make_profile(balance="1000.00")
        login(profile.email)

        missing = client.post("/referrals/withdraw", data={"amount": "600"})
        assert missing.status_code == 409
        assert missing.get_json()["type"] == "PayoutMethodMissingError"

        saved = client.post("/referrals/withdrawal-method", data={
            "method": "easypaisa", "account_name": "Ali Khan", "account_number": "03001234567",
        })
        assert saved.status_code == 200

        resp = client.post("/referrals/withdraw", data={"amount": "600"})
        assert resp.status_code == 201
        assert resp.get_json()["withdrawal"]["status"] == "processing"

        history = client.get("/referrals/withdrawals").get_json()["withdrawals"]
        assert len(history) == 1

    def test_non_finite_amount_is_rejected(self, client, make_profile, login):
        profile = make_profile(balance="5000.00", withdrawal_method=METHOD)
        login(profile.email)

        resp = client.post("/referrals/withdraw", data={"amount": "NaN"})

        assert resp.status_code == 400
        assert resp.get_json()["type"] == "ValidationError"
        assert Withdrawal.query.count() == 0

    def test_admin_queue_and_decision(self, admin_client, make_profile):
        profile = make_profile(username="payee", balance="1000.00", withdrawal_method=METHOD)
        withdrawal = request_withdrawal(profile.id, "600")

        queue = admin_client.get("/admin/withdrawals?q=pay").get_json()["withdrawals"]
        assert [(w["id"], w["username"]) for w in queue] == [(withdrawal.id, "payee")]
        assert admin_client.get("/admin/withdrawals?q=zzz").get_json()["withdrawals"] == []

        resp = admin_client.post(f"/admin/withdrawals/{withdrawal.id}/status", data={"status": "approved"})
        assert resp.status_code == 200
        assert resp.get_json()["withdrawal"]["status"] == "approved"
        assert profile.balance == Decimal("400.00")
