# src/subscription/lifecycle.py
"""Subscription status transitions and the overdue rule.

Every action that changes ``Subscription.status`` asks :func:`next_status`
first; a ``None`` answer means the transition is illegal and nothing may be
written.
"""
from datetime import datetime
from typing import Dict, Iterable, Optional, Tuple

CANCEL = "cancel"
TRANSFER = "transfer"

TRANSITIONS: Dict[Tuple[str, str], Optional[str]] = {
    ("active", CANCEL): "inactive",
    ("overdue", CANCEL): "inactive",
    ("inactive", CANCEL): "inactive",
    ("transferred", CANCEL): None,
    ("active", TRANSFER): "transferred",
    ("overdue", TRANSFER): None,
    ("inactive", TRANSFER): None,
    ("transferred", TRANSFER): None,
}


class IllegalTransition(Exception):
    def __init__(self, status: str, action: str):
        self.status = status
        self.action = action
        super().__init__(f"Cannot {action} a subscription that is {status}")


def next_status(status: str, action: str) -> Optional[str]:
    return TRANSITIONS.get((status, action))


def require_transition(status: str, action: str) -> str:
    target = next_status(status, action)
    if target is None:
        raise IllegalTransition(status, action)
    return target


def is_overdue(status: str, payment_due_date: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """Overdue when flagged, or still active past its due date."""
    if status == "overdue":
        return True
    if status != "active" or payment_due_date is None:
        return False
    return payment_due_date < (now or datetime.utcnow())


def any_overdue(subscriptions: Iterable, now: Optional[datetime] = None) -> bool:
    now = now or datetime.utcnow()
    return any(is_overdue(s.status, s.payment_due_date, now) for s in subscriptions)
