# envoearn/services/plans.py
from dataclasses import dataclass
from decimal import Decimal

from flask import current_app


@dataclass(frozen=True)
class Plan:
    id: str
    name: str
    amount: Decimal
    daily_return: Decimal

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "amount": float(self.amount),
            "daily_return": float(self.daily_return),
        }


PLANS = {
    "1": Plan("1", "Starter Plan", Decimal("6000.00"), Decimal("200.00")),
    "2": Plan("2", "Growth Plan", Decimal("12000.00"), Decimal("400.00")),
    "3": Plan("3", "Pro Investor", Decimal("24000.00"), Decimal("800.00")),
}


def get_plan(plan_id) -> Plan | None:
    return PLANS.get(str(plan_id).strip()) if plan_id is not None else None


def plan_name(plan_id) -> str:
    plan = get_plan(plan_id)
    return plan.name if plan else f"Plan {plan_id}"


def is_top_tier(plan_id) -> bool:
    return str(plan_id) == str(current_app.config.get("TOP_TIER_PLAN_ID", "3"))
