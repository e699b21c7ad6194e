# envoearn/services/wallet.py
"""Balance mutations.

Every change is one UPDATE with the arithmetic done by the database
(``balance = balance + :delta``) plus a WalletTransaction row, both in the
caller's transaction. Nothing here commits.
"""
import logging
from decimal import Decimal

from sqlalchemy import func, update
from sqlalchemy.orm.util import identity_key

from envoearn.errors import InsufficientFundsError, NotFoundError
from envoearn.extensions import db
from envoearn.models import Profile, TransactionKind, WalletTransaction
from envoearn.utils import money

logger = logging.getLogger(__name__)


def _apply(profile_id: int, delta: Decimal, kind: TransactionKind, reference=None, require_funds=False):
    stmt = update(Profile).where(Profile.id == profile_id)
    if require_funds:
        stmt = stmt.where(Profile.balance >= -delta)
    stmt = stmt.values(balance=Profile.balance + delta).execution_options(
        synchronize_session=False
    )

    result = db.session.execute(stmt)
    if result.rowcount == 0:
        if db.session.get(Profile, profile_id) is None:
            raise NotFoundError(f"Profile {profile_id} not found.")
        raise InsufficientFundsError()

    # a Profile already loaded in this session must re-read its balance
    cached = db.session.identity_map.get(identity_key(Profile, profile_id))
    if cached is not None:
        db.session.expire(cached, ["balance"])

    tx = WalletTransaction(user_id=profile_id, amount=delta, kind=kind, reference=reference)
    db.session.add(tx)
    return tx


def credit_balance(profile_id: int, amount, kind: TransactionKind, reference=None):
    amount = money(amount)
    if amount <= 0:
        raise ValueError("credit amount must be positive")
    return _apply(profile_id, amount, kind, reference)


def debit_balance(profile_id: int, amount, kind: TransactionKind, reference=None):
    """Debit only if the balance covers it; raises InsufficientFundsError otherwise."""
    amount = money(amount)
    if amount <= 0:
        raise ValueError("debit amount must be positive")
    return _apply(profile_id, -amount, kind, reference, require_funds=True)


def adjust_balance(profile_id: int, new_balance, reference=None):
    """Admin override: set the balance, ledgering the difference."""
    new_balance = money(new_balance)
    profile = db.session.get(Profile, profile_id)
    if profile is None:
        raise NotFoundError(f"Profile {profile_id} not found.")

    delta = new_balance - money(profile.balance)
    if delta == 0:
        return None
    return _apply(profile_id, delta, TransactionKind.ADMIN_ADJUSTMENT, reference)


def ledger_total(profile_id: int) -> Decimal:
    total = db.session.query(
        func.coalesce(func.sum(WalletTransaction.amount), 0)
    ).filter(WalletTransaction.user_id == profile_id).scalar()
    return money(total)


def reconcile(profile_id: int) -> dict:
    """Compare the stored balance with the sum of its ledger rows."""
    profile = db.session.get(Profile, profile_id)
    if profile is None:
        raise NotFoundError(f"Profile {profile_id} not found.")

    balance = money(profile.balance)
    ledger = ledger_total(profile_id)
    if balance != ledger:
        logger.warning("Balance drift for profile %s: stored=%s ledger=%s", profile_id, balance, ledger)
    return {"balance": balance, "ledger": ledger, "consistent": balance == ledger}
