"""
Reporting windows on the clinic's local calendar.

Cash reports and dashboard counters are bucketed by local calendar days
(Asia/Dhaka by default) while timestamps are stored in UTC.  Every
window produced here is half-open: ``start <= t < end``, with ``end`` the
local midnight after the last included day.
"""
from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone as dt_timezone
from zoneinfo import ZoneInfo

from django.conf import settings
from django.utils import timezone

from ..exceptions import ClinicError, VALIDATION

PRESET_LABELS = {
    'today': 'Today',
    'yesterday': 'Yesterday',
    'lastWeek': 'Last Week',
    'thisMonth': 'This Month',
    'lastMonth': 'Last Month',
    'lastCalendarMonth': 'Last Calendar Month',
    'last30Days': 'Last 30 Days',
}
PRESETS = tuple(PRESET_LABELS) + ('custom',)


@dataclass(frozen=True)
class ReportWindow:
    start: datetime
    end: datetime
    period_label: str

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end


def clinic_tz() -> ZoneInfo:
    return ZoneInfo(settings.CLINIC_TIME_ZONE)


def local_date(moment: datetime) -> date:
    """Calendar date of a UTC instant on the clinic's clock."""
    return moment.astimezone(clinic_tz()).date()


def local_midnight(day: date) -> datetime:
    """UTC instant at which ``day`` starts on the clinic's clock."""
    return datetime.combine(day, time.min, tzinfo=clinic_tz()).astimezone(dt_timezone.utc)


def local_today_window(now: datetime | None = None) -> ReportWindow:
    today = local_date(now or timezone.now())
    return ReportWindow(local_midnight(today), local_midnight(today + timedelta(days=1)), 'Today')


def _same_day_previous_month(day: date) -> date:
    year, month = (day.year, day.month - 1) if day.month > 1 else (day.year - 1, 12)
    last = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last))


def parse_iso_day(value: str, field: str) -> date:
    try:
        return date.fromisoformat(value.strip())
    except (AttributeError, ValueError):
        raise ClinicError(VALIDATION, f"{field} must be a YYYY-MM-DD date", {field: value})


def resolve_window(preset: str | None, start_date: str | None = None,
                   end_date: str | None = None, now: datetime | None = None) -> ReportWindow:
    """Map a preset token (and custom dates) to a UTC half-open window.

    Unknown presets, and ``custom`` without both dates, resolve to today.
    """
    today = local_date(now or timezone.now())
    tomorrow = today + timedelta(days=1)

    if preset == 'custom' and start_date and end_date:
        first = parse_iso_day(start_date, 'startDate')
        last = parse_iso_day(end_date, 'endDate')
        if last < first:
            raise ClinicError(
                VALIDATION, 'endDate must not be before startDate',
                {'startDate': start_date, 'endDate': end_date},
            )
        label = f"{first.day}/{first.month}/{first.year} - {last.day}/{last.month}/{last.year}"
        return ReportWindow(local_midnight(first), local_midnight(last + timedelta(days=1)), label)

    if preset == 'yesterday':
        first, stop = today - timedelta(days=1), today
    elif preset == 'lastWeek':
        first, stop = today - timedelta(days=6), tomorrow
    elif preset == 'thisMonth':
        first, stop = today.replace(day=1), tomorrow
    elif preset == 'lastMonth':
        first, stop = _same_day_previous_month(today), tomorrow
    elif preset == 'lastCalendarMonth':
        this_month = today.replace(day=1)
        first, stop = (this_month - timedelta(days=1)).replace(day=1), this_month
    elif preset == 'last30Days':
        first, stop = today - timedelta(days=29), tomorrow
    else:
        preset = 'today'
        first, stop = today, tomorrow

    return ReportWindow(local_midnight(first), local_midnight(stop), PRESET_LABELS[preset])


def iso_utc(moment: datetime | None) -> str | None:
    """ISO-8601 in UTC with a ``Z`` suffix, as the front-end parses it."""
    if moment is None:
        return None
    return moment.astimezone(dt_timezone.utc).isoformat().replace('+00:00', 'Z')
