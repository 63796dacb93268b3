"""
Booking status lifecycle

Main path: PENDING_PAYMENT → DEPOSIT_PAID → FULLY_PAID → CONFIRMED → COMPLETED/CANCELLED
REFUNDED is terminal.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from ...formatters import parse_datetime

logger = logging.getLogger(__name__)

BOOKING_STATUSES = [
    "PENDING",
    "PENDING_PAYMENT",
    "DEPOSIT_PAID",
    "BALANCE_SCHEDULED",
    "FULLY_PAID",
    "CONFIRMED",
    "IN_PROGRESS",
    "COMPLETED",
    "CANCELLED",
    "REFUNDED",
]

BOOKING_STATUS_CONFIG = {
    "PENDING": {"label": "Pending", "color": "yellow"},
    "PENDING_PAYMENT": {"label": "Pending Payment", "color": "yellow"},
    "DEPOSIT_PAID": {"label": "Deposit Paid", "color": "blue"},
    "BALANCE_SCHEDULED": {"label": "Balance Scheduled", "color": "purple"},
    "FULLY_PAID": {"label": "Fully Paid", "color": "green"},
    "CONFIRMED": {"label": "Confirmed", "color": "green"},
    "IN_PROGRESS": {"label": "In Progress", "color": "blue"},
    "COMPLETED": {"label": "Completed", "color": "gray"},
    "CANCELLED": {"label": "Cancelled", "color": "red"},
    "REFUNDED": {"label": "Refunded", "color": "orange"},
}

VALID_TRANSITIONS = {
    "PENDING": ["PENDING_PAYMENT", "CONFIRMED", "CANCELLED"],
    "PENDING_PAYMENT": ["DEPOSIT_PAID", "FULLY_PAID", "CONFIRMED", "CANCELLED"],
    "DEPOSIT_PAID": ["BALANCE_SCHEDULED", "FULLY_PAID", "CONFIRMED", "CANCELLED", "REFUNDED"],
    "BALANCE_SCHEDULED": ["FULLY_PAID", "CANCELLED", "REFUNDED"],
    "FULLY_PAID": ["CONFIRMED", "CANCELLED", "REFUNDED"],
    "CONFIRMED": ["IN_PROGRESS", "COMPLETED", "CANCELLED", "REFUNDED"],
    "IN_PROGRESS": ["COMPLETED", "CANCELLED"],
    "COMPLETED": ["REFUNDED"],
    "CANCELLED": ["REFUNDED"],
    "REFUNDED": [],  # Terminal state
}

# Statuses a client may cancel from
CLIENT_CANCELLABLE = ["PENDING_PAYMENT", "DEPOSIT_PAID", "CONFIRMED"]

# Statuses a vendor may mark completed from
COMPLETABLE = ["CONFIRMED"]

CLOSED_STATUSES = ["CANCELLED", "REFUNDED"]


def status_config(status: str) -> dict:
    return BOOKING_STATUS_CONFIG.get(status, {"label": status, "color": "gray"})


def validate_status_transition(current_status: str, new_status: str) -> bool:
    """
    Validate if a booking status transition is allowed

    Args:
        current_status: Current booking status
        new_status: Desired new status

    Returns:
        bool: True if transition is valid, False otherwise
    """
    if new_status not in VALID_TRANSITIONS:
        return False
    if current_status == new_status:
        return True

    allowed = VALID_TRANSITIONS.get(current_status, [])
    is_valid = new_status in allowed

    if not is_valid:
        logger.warning(f"⚠️ Invalid booking status transition: {current_status} → {new_status}")

    return is_valid


def can_cancel(booking: dict) -> bool:
    return booking.get("status") in CLIENT_CANCELLABLE


def can_complete(booking: dict) -> bool:
    return booking.get("status") in COMPLETABLE


def get_payment_action(booking: dict) -> Optional[dict]:
    """Next payment due on a booking, or None when nothing is owed online"""
    status = booking.get("status")

    if status == "PENDING_PAYMENT":
        if (
            booking.get("paymentMode") == "DEPOSIT_BALANCE"
            and booking.get("depositAmount")
            and not booking.get("depositPaidAt")
        ):
            return {"type": "DEPOSIT", "amount": booking["depositAmount"], "label": "Pay Deposit"}
        if booking.get("paymentMode") == "FULL_PAYMENT":
            return {"type": "FULL", "amount": booking.get("pricingTotal"), "label": "Pay Full Amount"}

    if status == "DEPOSIT_PAID" and booking.get("balanceAmount") and not booking.get("balancePaidAt"):
        return {"type": "BALANCE", "amount": booking["balanceAmount"], "label": "Pay Remaining Balance"}

    return None


def is_upcoming(booking: dict, now: Optional[datetime] = None) -> bool:
    event_date = parse_datetime(booking.get("eventDate"))
    if event_date is None:
        return False
    return event_date > (now or datetime.now(timezone.utc))


def is_past(booking: dict, now: Optional[datetime] = None) -> bool:
    event_date = parse_datetime(booking.get("eventDate"))
    if event_date is None:
        return False
    return event_date < (now or datetime.now(timezone.utc)) and booking.get("status") not in CLOSED_STATUSES
