"""Course subscriptions and access entitlement.

A subscription starts ``pending`` and moves through the payment states in
PAYMENT_TRANSITIONS. A learner is entitled to a course while one of their
subscriptions for it is ``completed`` and today lies within
[start_date, end_date], both ends inclusive. Dates are stored as ISO
``YYYY-MM-DD`` text so they compare correctly as strings.
"""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from database import get_db, now_iso, rows_to_dicts
from errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from updates import FieldUpdate, apply_update

logger = logging.getLogger(__name__)

PAYMENT_STATUSES = ["pending", "completed", "failed", "cancelled"]

# {current_status: statuses it may move to}
PAYMENT_TRANSITIONS: dict[str, frozenset[str]] = {
    "pending": frozenset({"completed", "failed", "cancelled"}),
    "completed": frozenset({"cancelled"}),
    "failed": frozenset({"pending", "cancelled"}),
    "cancelled": frozenset(),
}

_SELECT = (
    "SELECT s.*, c.title AS course_title, u.name AS user_name, u.email AS user_email "
    "FROM subscriptions s "
    "LEFT JOIN courses c ON s.course_id = c.id "
    "LEFT JOIN users u ON s.user_id = u.id "
)


@dataclass
class SubscriptionUpdate(FieldUpdate):
    table = "subscriptions"

    subscription_type: Optional[str] = None
    end_date: Optional[str] = None
    payment_status: Optional[str] = None
    amount: Optional[float] = None
    transaction_id: Optional[str] = None


def check_transition(current: str, requested: str) -> None:
    """Raise ValidationError unless `current` -> `requested` is allowed."""
    if not isinstance(requested, str) or requested not in PAYMENT_TRANSITIONS.get(current, frozenset()):
        raise ValidationError(
            f"Invalid payment status transition from {current} to {requested}"
        )


def add_months(start: date, months: int) -> date:
    """Calendar-month arithmetic. Jan 31 + 1 month is the last day of February."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def has_active_subscription(user_id: int, course_id: int, on: date | None = None) -> bool:
    """True if a completed subscription covers `on` (default: today)."""
    day = (on or date.today()).isoformat()
    row = get_db().execute(
        "SELECT 1 FROM subscriptions "
        "WHERE user_id = ? AND course_id = ? AND payment_status = 'completed' "
        "AND start_date <= ? AND end_date >= ? LIMIT 1",
        (user_id, course_id, day, day),
    ).fetchone()
    return row is not None


def get(subscription_id: int) -> dict | None:
    row = get_db().execute(_SELECT + "WHERE s.id = ?", (subscription_id,)).fetchone()
    return dict(row) if row else None


def list_all(limit: int = 50, offset: int = 0, status: str | None = None) -> list[dict]:
    if status:
        rows = get_db().execute(
            _SELECT + "WHERE s.payment_status = ? "
            "ORDER BY s.created_at DESC, s.id DESC LIMIT ? OFFSET ?",
            (status, limit, offset),
        ).fetchall()
    else:
        rows = get_db().execute(
            _SELECT + "ORDER BY s.created_at DESC, s.id DESC LIMIT ? OFFSET ?",
            (limit, offset),
        ).fetchall()
    return rows_to_dicts(rows)


def for_course(course_id: int) -> list[dict]:
    rows = get_db().execute(
        _SELECT + "WHERE s.course_id = ? ORDER BY s.created_at DESC, s.id DESC",
        (course_id,),
    ).fetchall()
    return rows_to_dicts(rows)


def stats() -> dict:
    """Platform-wide counts. Every completed subscription counts as active."""
    row = get_db().execute(
        "SELECT COUNT(*) AS total_subscriptions, "
        "COALESCE(SUM(CASE WHEN payment_status = 'completed' THEN 1 ELSE 0 END), 0) AS active_subscriptions, "
        "COALESCE(SUM(CASE WHEN payment_status = 'pending' THEN 1 ELSE 0 END), 0) AS pending_subscriptions, "
        "COALESCE(SUM(CASE WHEN payment_status = 'completed' THEN amount ELSE 0 END), 0) AS total_revenue "
        "FROM subscriptions"
    ).fetchone()
    return dict(row)


class SubscriptionStoreDB:
    """DB-backed subscription management for one user."""

    def __init__(self, user_id: int):
        self.user_id = user_id

    def create(
        self,
        course_id: int,
        subscription_type: str,
        duration_months: int,
        amount: float,
        start: date | None = None,
    ) -> int:
        """Open a pending subscription running `duration_months` from `start`.

        The active-subscription check and the insert are separate statements;
        concurrent requests for the same course can both get through.
        """
        db = get_db()
        if db.execute("SELECT 1 FROM courses WHERE id = ?", (course_id,)).fetchone() is None:
            raise NotFoundError("Course not found")
        if has_active_subscription(self.user_id, course_id, on=start):
            raise ConflictError("User already has an active subscription for this course")

        start = start or date.today()
        end = add_months(start, duration_months)
        now = now_iso()
        cur = db.execute(
            "INSERT INTO subscriptions (user_id, course_id, subscription_type, start_date, "
            "end_date, amount, payment_status, created_at, updated_at) "
            "VALUES (?, ?, ?, ?, ?, ?, 'pending', ?, ?)",
            (self.user_id, course_id, subscription_type, start.isoformat(),
             end.isoformat(), amount, now, now),
        )
        db.commit()
        logger.info(
            "Subscription %s created: user=%s course=%s until %s",
            cur.lastrowid, self.user_id, course_id, end.isoformat(),
        )
        return cur.lastrowid

    def get_owned(self, subscription_id: int) -> dict:
        sub = get(subscription_id)
        if sub is None:
            raise NotFoundError("Subscription not found")
        if sub["user_id"] != self.user_id:
            raise AuthorizationError("Access denied - not your subscription")
        return sub

    def all(self) -> list[dict]:
        rows = get_db().execute(
            "SELECT s.*, c.title AS course_title, c.educator_id "
            "FROM subscriptions s LEFT JOIN courses c ON s.course_id = c.id "
            "WHERE s.user_id = ? ORDER BY s.created_at DESC, s.id DESC",
            (self.user_id,),
        ).fetchall()
        return rows_to_dicts(rows)

    def update_payment_status(
        self,
        subscription_id: int,
        status: str,
        transaction_id: str | None = None,
        today: date | None = None,
    ) -> dict:
        sub = self.get_owned(subscription_id)
        today = today or date.today()
        if sub["end_date"] < today.isoformat():
            raise ValidationError("Cannot modify expired subscription")
        check_transition(sub["payment_status"], status)

        apply_update(
            SubscriptionUpdate(payment_status=status, transaction_id=transaction_id or None),
            subscription_id,
        )
        return get(subscription_id)

    def cancel(self, subscription_id: int, today: date | None = None) -> dict:
        """Cancel and end access today. Cancelling again is accepted."""
        self.get_owned(subscription_id)
        today = today or date.today()
        apply_update(
            SubscriptionUpdate(payment_status="cancelled", end_date=today.isoformat()),
            subscription_id,
        )
        return get(subscription_id)
