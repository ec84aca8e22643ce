"""
Reporting windows on the Asia/Dhaka calendar (UTC+6, no DST).
"""
from datetime import datetime, timedelta, timezone

import pytest

from frontdesk.exceptions import ClinicError, VALIDATION
from frontdesk.services.periods import iso_utc, local_today_window, resolve_window

UTC = timezone.utc
# 18:00 in Dhaka on 10 March 2024
NOW = datetime(2024, 3, 10, 12, 0, tzinfo=UTC)


def utc(*args):
    return datetime(*args, tzinfo=UTC)


def test_today_starts_at_local_midnight():
    w = resolve_window('today', now=NOW)
    assert w.start == utc(2024, 3, 9, 18)
    assert w.end == utc(2024, 3, 10, 18)
    assert w.end - w.start == timedelta(hours=24)
    assert w.period_label == 'Today'


def test_just_after_local_midnight_is_already_the_next_day():
    w = local_today_window(utc(2024, 3, 9, 18, 30))
    assert w.start == utc(2024, 3, 9, 18)
    assert w.contains(utc(2024, 3, 9, 18, 30))
    assert not w.contains(w.end)


def test_yesterday():
    w = resolve_window('yesterday', now=NOW)
    assert (w.start, w.end) == (utc(2024, 3, 8, 18), utc(2024, 3, 9, 18))


def test_last_week_covers_seven_days_including_today():
    w = resolve_window('lastWeek', now=NOW)
    assert w.start == utc(2024, 3, 3, 18)
    assert w.end == utc(2024, 3, 10, 18)
    assert w.period_label == 'Last Week'


def test_this_month_and_last_30_days():
    assert resolve_window('thisMonth', now=NOW).start == utc(2024, 2, 29, 18)
    w = resolve_window('last30Days', now=NOW)
    assert w.end - w.start == timedelta(days=30)


def test_last_month_clamps_to_shorter_month():
    # 31 March -> 29 Feb (leap year)
    w = resolve_window('lastMonth', now=utc(2024, 3, 31, 6))
    assert w.start == utc(2024, 2, 28, 18)
    assert w.end == utc(2024, 3, 31, 18)


def test_last_calendar_month():
    w = resolve_window('lastCalendarMonth', now=NOW)
    assert w.start == utc(2024, 1, 31, 18)
    assert w.end == utc(2024, 2, 29, 18)
    assert w.period_label == 'Last Calendar Month'


def test_last_calendar_month_in_january_is_previous_december():
    w = resolve_window('lastCalendarMonth', now=utc(2024, 1, 15, 6))
    assert w.start == utc(2023, 11, 30, 18)
    assert w.end == utc(2023, 12, 31, 18)


def test_custom_range_is_inclusive_of_end_day():
    w = resolve_window('custom', '2024-03-01', '2024-03-05', now=NOW)
    assert w.start == utc(2024, 2, 29, 18)
    assert w.end == utc(2024, 3, 5, 18)
    assert w.period_label == '1/3/2024 - 5/3/2024'


def test_custom_single_day():
    w = resolve_window('custom', '2024-03-05', '2024-03-05', now=NOW)
    assert w.end - w.start == timedelta(days=1)


def test_custom_reversed_range_is_rejected():
    with pytest.raises(ClinicError) as exc:
        resolve_window('custom', '2024-03-05', '2024-03-01', now=NOW)
    assert exc.value.kind == VALIDATION
    assert exc.value.status_code == 400


def test_custom_malformed_date_is_rejected():
    with pytest.raises(ClinicError) as exc:
        resolve_window('custom', '2024-13-01', '2024-03-01', now=NOW)
    assert exc.value.details == {'startDate': '2024-13-01'}


@pytest.mark.parametrize('preset', ['bogus', None, 'custom'])
def test_unknown_or_incomplete_preset_falls_back_to_today(preset):
    w = resolve_window(preset, now=NOW)
    assert w == resolve_window('today', now=NOW)


def test_iso_utc_uses_z_suffix():
    assert iso_utc(utc(2024, 2, 29, 18)) == '2024-02-29T18:00:00Z'
    assert iso_utc(None) is None
