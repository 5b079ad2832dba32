"""Urgency classification for maintenance due dates."""

from datetime import date

from ..value_objects.enums import DueStatus, UrgencyLevel


def days_until(due_date: date, today: date) -> int:
    """Signed calendar days from today to due_date; negative means overdue."""
    return (due_date - today).days


def classify_urgency(days_remaining: int) -> UrgencyLevel:
    if days_remaining < 0:
        return UrgencyLevel.CRITICAL  # overdue
    if days_remaining == 0:
        return UrgencyLevel.CRITICAL  # due today
    if days_remaining == 1:
        return UrgencyLevel.HIGH
    if days_remaining <= 3:
        return UrgencyLevel.MEDIUM
    return UrgencyLevel.LOW


def classify_due_status(days_remaining: int) -> DueStatus:
    """Coarse due-date status, used as the default work order priority."""
    if days_remaining < 0:
        return DueStatus.OVERDUE
    if days_remaining == 0:
        return DueStatus.TODAY
    if days_remaining <= 7:
        return DueStatus.UPCOMING
    return DueStatus.OK
