"""
Temporal validity rules for promotions.

A promotion is valid at a reference moment when it is active and every
temporal filter it defines accepts that moment:

* date range   valid_from <= date <= valid_until (each bound optional)
* time window  time_from <= time <= time_until (each bound optional, same day)
* weekdays     ISO weekday (1=Monday .. 7=Sunday) in the list (null/empty = every day)

Unset filters always pass. Windows with time_from > time_until never match;
overnight windows are not supported.

Functions here are pure: they only read attributes of the object passed in, so
they work on model instances, cached instances or any object exposing the
same attribute names.
"""
from datetime import date, datetime, time
from typing import Iterable, Optional

from django.utils import timezone


def reference_moment(at: Optional[datetime] = None) -> tuple[date, time, int]:
    """Split a reference instant into (local date, local time, ISO weekday).

    Aware datetimes are converted to the current time zone; naive datetimes are
    taken as already local. Microseconds are dropped so comparisons against
    stored times happen at second resolution.
    """
    if at is None:
        at = timezone.now()
    if timezone.is_aware(at):
        at = timezone.localtime(at)
    return at.date(), at.time().replace(microsecond=0, tzinfo=None), at.isoweekday()


def passes_date_range(valid_from: Optional[date], valid_until: Optional[date], on_date: date) -> bool:
    if valid_from is not None and on_date < valid_from:
        return False
    if valid_until is not None and on_date > valid_until:
        return False
    return True


def passes_time_window(time_from: Optional[time], time_until: Optional[time], at_time: time) -> bool:
    if time_from is not None and at_time < time_from:
        return False
    if time_until is not None and at_time > time_until:
        return False
    return True


def passes_weekdays(weekdays: Optional[Iterable[int]], iso_weekday: int) -> bool:
    if not weekdays:
        return True
    return iso_weekday in {int(day) for day in weekdays}


def is_valid_now(promotion, at: Optional[datetime] = None) -> bool:
    """Return True if the promotion is active and inside all of its temporal filters at `at`."""
    if not promotion.is_active:
        return False

    on_date, at_time, iso_weekday = reference_moment(at)
    return (
        passes_date_range(promotion.valid_from, promotion.valid_until, on_date)
        and passes_time_window(promotion.time_from, promotion.time_until, at_time)
        and passes_weekdays(promotion.weekdays, iso_weekday)
    )


def is_expired(promotion, today: Optional[date] = None) -> bool:
    """A promotion without valid_until never expires."""
    today = today or timezone.localdate()
    return promotion.valid_until is not None and promotion.valid_until < today


def is_upcoming(promotion, today: Optional[date] = None) -> bool:
    """A promotion without valid_from is never upcoming."""
    today = today or timezone.localdate()
    return promotion.valid_from is not None and promotion.valid_from > today
