from .enums import ReferralStatus, SubmissionStatus, TransactionKind, WithdrawalStatus
from .user import User
from .profile import Profile
from .payment_submission import PaymentSubmission
from .earning import Earning
from .referral import Referral
from .withdrawal import Withdrawal
from .wallet_transaction import WalletTransaction

__all__ = [
    "User",
    "Profile",
    "PaymentSubmission",
    "Earning",
    "Referral",
    "Withdrawal",
    "WalletTransaction",
    "SubmissionStatus",
    "WithdrawalStatus",
    "ReferralStatus",
    "TransactionKind",
]
