import hmac
from datetime import date, datetime, time, timedelta
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from functools import wraps
from zoneinfo import ZoneInfo

from flask import abort, current_app
from flask_login import current_user

Q = Decimal("0.01")


def admin_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if not current_user.is_authenticated:
            abort(401)
        if not getattr(current_user, "is_admin", False):
            abort(403)
        return fn(*args, **kwargs)
    return wrapper


def money(v) -> Decimal:
    """Convert anything to a 2dp Decimal. Raises InvalidOperation on junk."""
    return Decimal(str(v if v is not None else 0)).quantize(Q, rounding=ROUND_HALF_UP)


def parse_money(v) -> Decimal | None:
    try:
        d = money(v)
    except (InvalidOperation, TypeError, ValueError):
        return None
    # NaN survives quantize
    return d if d.is_finite() else None


def business_today() -> date:
    """Calendar day in the platform's timezone; accrual runs once per such day."""
    tz = ZoneInfo(current_app.config.get("BUSINESS_TIMEZONE", "UTC"))
    return datetime.now(tz).date()


def day_bounds_utc(day: date) -> tuple[datetime, datetime]:
    """Naive-UTC [start, end) of a business-timezone calendar day."""
    tz = ZoneInfo(current_app.config.get("BUSINESS_TIMEZONE", "UTC"))
    start = datetime.combine(day, time.min, tzinfo=tz).astimezone(ZoneInfo("UTC"))
    end = start + timedelta(days=1)
    return start.replace(tzinfo=None), end.replace(tzinfo=None)


def bearer_token_matches(auth_header: str | None, secret: str | None) -> bool:
    if not auth_header or not secret:
        return False
    # bytes: compare_digest rejects non-ASCII str
    return hmac.compare_digest(auth_header.encode("utf-8"), f"Bearer {secret}".encode("utf-8"))
