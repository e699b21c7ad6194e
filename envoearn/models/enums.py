# envoearn/models/enums.py
import enum


class SubmissionStatus(enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    def can_transition_to(self, new_status: "SubmissionStatus") -> bool:
        return new_status in SUBMISSION_TRANSITIONS.get(self, set())

    @property
    def is_final(self) -> bool:
        return self in {SubmissionStatus.APPROVED, SubmissionStatus.REJECTED}


class WithdrawalStatus(enum.Enum):
    PROCESSING = "processing"
    APPROVED = "approved"
    REJECTED = "rejected"

    def can_transition_to(self, new_status: "WithdrawalStatus") -> bool:
        return new_status in WITHDRAWAL_TRANSITIONS.get(self, set())

    @property
    def is_final(self) -> bool:
        return self in {WithdrawalStatus.APPROVED, WithdrawalStatus.REJECTED}


class ReferralStatus(enum.Enum):
    # Nothing writes PENDING; kept so older rows still load.
    PENDING = "Pending"
    INVESTED = "Invested"


class TransactionKind(enum.Enum):
    SIGNUP_BONUS = "signup_bonus"
    DAILY_EARNING = "daily_earning"
    REFERRAL_BONUS = "referral_bonus"
    WITHDRAWAL = "withdrawal"
    ADMIN_ADJUSTMENT = "admin_adjustment"


# Final states have no outgoing edges
SUBMISSION_TRANSITIONS = {
    SubmissionStatus.PENDING: {SubmissionStatus.APPROVED, SubmissionStatus.REJECTED},
}

WITHDRAWAL_TRANSITIONS = {
    WithdrawalStatus.PROCESSING: {WithdrawalStatus.APPROVED, WithdrawalStatus.REJECTED},
}


def enum_values(enum_cls):
    """Store enum values (not member names) in the database."""
    return [member.value for member in enum_cls]
