from __future__ import annotations

from datetime import date, datetime, time

from django.utils import timezone

from .models import Survey


def start_of_day(day: date, tz=None) -> datetime:
    moment = datetime.combine(day, time.min)
    return timezone.make_aware(moment, tz) if tz is not None else moment


def end_of_day(day: date, tz=None) -> datetime:
    moment = datetime.combine(day, time.max)
    return timezone.make_aware(moment, tz) if tz is not None else moment


def resolve_status(
    requested_status: str | None,
    start_date: date,
    end_date: date,
    now: datetime | None = None,
) -> str:
    """Work out the status a survey should have at ``now``.

    Only a survey requested as active can leave draft: it is active while
    ``now`` falls inside [start of start_date, end of end_date], completed
    once that window has passed, and stays draft until the window opens.
    """
    if requested_status != Survey.Status.ACTIVE:
        return Survey.Status.DRAFT

    if now is None:
        now = timezone.now()
    # Compare in the project time zone; naive clocks are taken as-is
    tz = None
    if timezone.is_aware(now):
        tz = timezone.get_current_timezone()
        now = timezone.localtime(now, tz)

    if start_of_day(start_date, tz) <= now <= end_of_day(end_date, tz):
        return Survey.Status.ACTIVE
    if now > end_of_day(end_date, tz):
        return Survey.Status.COMPLETED
    return Survey.Status.DRAFT


def reactivation_status(survey: Survey, now: datetime | None = None) -> str:
    """Status a cancelled survey returns to when its owner reactivates it."""
    requested = (
        Survey.Status.ACTIVE
        if survey.has_dispatched_recipients()
        else Survey.Status.DRAFT
    )
    return resolve_status(requested, survey.start_date, survey.end_date, now)
