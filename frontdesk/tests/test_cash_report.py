"""
Session cash report: the pure aggregator first, then the database-backed
fetch and the assembled payload.
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional, get_type_hints

import pytest
from django.utils import timezone as dj_timezone

from frontdesk.exceptions import ClinicError
from frontdesk.models import Payment, PaymentAllocation, Shift
from frontdesk.services.cash_report import (
    AllocationRecord,
    PaymentRecord,
    ShiftRecord,
    aggregate,
    build_session_cash_report,
    fetch_shifts,
    parse_department_filter,
)
from frontdesk.services.periods import resolve_window

T0 = datetime(2024, 3, 10, 4, 0, tzinfo=timezone.utc)
D = Decimal


def alloc(dept_id, amount, name=None):
    return AllocationRecord(dept_id, name or f"Dept {dept_id}", D(amount), 'Service', 'GENERAL')


def payment(pid, amount, *allocs):
    return PaymentRecord(pid, D(amount), 'Cash', T0, tuple(allocs), patient_id=7, patient_name='Rahima')


def shift(sid, *payments, refunded='0', active=False):
    return ShiftRecord(sid, T0, None if active else T0 + timedelta(hours=8), active, D(refunded), tuple(payments))


# ---------------------------------------------------------------------
# aggregate()
# ---------------------------------------------------------------------
def test_unallocated_payment_counts_in_total_but_not_in_breakdown():
    agg = aggregate([shift(1, payment(10, '500', alloc(1, '500', 'Surgery')), payment(11, '300'))])

    assert agg.total_collected == D('800')
    assert agg.transaction_count == 2
    assert agg.department_breakdown == [
        {'departmentId': 1, 'departmentName': 'Surgery', 'totalCollected': D('500'), 'transactionCount': 1},
    ]
    assert agg.shifts[0]['totalCollected'] == D('800')


def test_split_payment_counts_once_per_allocation():
    agg = aggregate([shift(1, payment(10, '1000', alloc(1, '600'), alloc(2, '400')))])

    assert agg.total_collected == D('1000')
    assert agg.transaction_count == 2
    assert [r['departmentId'] for r in agg.department_breakdown] == [1, 2]


def test_breakdown_sorted_by_collected_descending_across_shifts():
    agg = aggregate([
        shift(1, payment(10, '100', alloc(1, '100'))),
        shift(2, payment(11, '250', alloc(2, '250')), payment(12, '50', alloc(1, '50'))),
    ])
    assert [(r['departmentId'], r['totalCollected'], r['transactionCount'])
            for r in agg.department_breakdown] == [(2, D('250'), 1), (1, D('150'), 2)]


def test_grand_totals_equal_sum_of_shift_totals():
    shifts = [
        shift(1, payment(10, '100', alloc(1, '100')), refunded='20'),
        shift(2, payment(11, '300'), payment(12, '75', alloc(2, '75')), refunded='5'),
    ]
    agg = aggregate(shifts)

    assert agg.total_collected == sum((s['totalCollected'] for s in agg.shifts), D('0'))
    assert agg.total_refunded == sum((s['totalRefunded'] for s in agg.shifts), D('0'))
    assert agg.transaction_count == sum(s['transactionCount'] for s in agg.shifts)
    assert agg.net_cash == D('475') - D('25')


def test_department_filter_skips_unallocated_and_other_departments():
    agg = aggregate(
        [shift(1, payment(10, '500', alloc(1, '300'), alloc(2, '200')), payment(11, '300'))],
        department_id=2,
    )
    assert agg.total_collected == D('200')
    assert agg.transaction_count == 1
    assert agg.department_breakdown[0]['departmentId'] == 2


def test_shift_without_counted_transactions_is_omitted():
    agg = aggregate([
        shift(1, active=True, refunded='40'),
        shift(2, payment(10, '100', alloc(3, '100'))),
    ], department_id=1)

    assert agg.shifts == []
    assert agg.total_refunded == D('0')
    assert agg.transaction_count == 0


def test_aggregate_is_repeatable():
    shifts = [shift(1, payment(10, '500', alloc(1, '500')), payment(11, '300'))]
    assert aggregate(shifts, detailed=True) == aggregate(shifts, detailed=True)


def test_records_carry_timestamps():
    hints = get_type_hints(ShiftRecord)
    assert hints['start_time'] is datetime
    assert hints['end_time'] == Optional[datetime]
    assert get_type_hints(PaymentRecord)['payment_date'] is datetime


def test_detailed_rows_mark_unallocated_payments_as_general():
    agg = aggregate([shift(1, payment(10, '500', alloc(1, '500', 'Surgery')), payment(11, '300'))], detailed=True)

    rows = agg.shifts[0]['payments']
    assert agg.payments == rows
    assert [(r['serviceName'], r['serviceType'], r['departmentName'], r['amount']) for r in rows] == [
        ('Service', 'GENERAL', 'Surgery', D('500')),
        ('General', 'GENERAL', 'Unallocated', D('300')),
    ]
    assert rows[0]['registrationId'] == 'REG-000007'
    assert rows[0]['paymentDate'] == '2024-03-10T04:00:00Z'
    assert agg.shifts[0]['shiftDate'] == 'Mar 10, 2024'


@pytest.mark.parametrize('value, expected', [(None, None), ('', None), ('all', None), ('12', 12), (5, 5)])
def test_parse_department_filter(value, expected):
    assert parse_department_filter(value) == expected


def test_parse_department_filter_rejects_garbage():
    with pytest.raises(ClinicError):
        parse_department_filter('surgery')


# ---------------------------------------------------------------------
# fetch_shifts() / build_session_cash_report()
# ---------------------------------------------------------------------
def _pay(shift_obj, account, amount, when=None, charge=None, receipt='R1'):
    p = Payment.objects.create(
        patient_account=account, shift=shift_obj, collected_by=shift_obj.staff, amount=D(amount),
        receipt_number=receipt, payment_date=when or dj_timezone.now(),
    )
    if charge is not None:
        PaymentAllocation.objects.create(payment=p, service_charge=charge, allocated_amount=D(amount))
    return p


@pytest.mark.django_db
def test_fetch_keeps_only_payments_inside_window(receptionist, account, surgery_charge):
    now = dj_timezone.now()
    old = Shift.objects.create(staff=receptionist.staff, start_time=now - timedelta(days=3),
                               end_time=now - timedelta(days=3) + timedelta(hours=8), is_active=False)
    _pay(old, account, '100', when=now - timedelta(days=3), receipt='OLD')
    current = Shift.objects.create(staff=receptionist.staff)
    _pay(current, account, '500', charge=surgery_charge, receipt='NEW')

    records = fetch_shifts(receptionist.staff, resolve_window('today'))

    assert [r.id for r in records] == [current.id]
    assert [p.amount for p in records[0].payments] == [D('500')]
    assert records[0].payments[0].allocations[0].department_name == 'Surgery'


@pytest.mark.django_db
def test_closed_shift_from_earlier_day_counts_when_it_took_money_in_window(receptionist, account):
    now = dj_timezone.now()
    earlier = Shift.objects.create(staff=receptionist.staff, start_time=now - timedelta(days=3),
                                   end_time=now - timedelta(days=3) + timedelta(hours=8), is_active=False)
    _pay(earlier, account, '250', when=now, receipt='LATE')

    data = build_session_cash_report(receptionist, 'today')

    assert data['shiftsCount'] == 1
    assert data['totalCollected'] == D('250')
    assert data['shifts'][0]['shiftId'] == earlier.id


@pytest.mark.django_db
def test_window_is_half_open(receptionist, account):
    window = resolve_window('today')
    closed = dict(staff=receptionist.staff, start_time=window.start - timedelta(days=1),
                  end_time=window.start - timedelta(hours=12), is_active=False)
    at_start = Shift.objects.create(**closed)
    _pay(at_start, account, '70', when=window.start, receipt='START')
    at_end = Shift.objects.create(**closed)
    _pay(at_end, account, '90', when=window.end, receipt='END')

    records = fetch_shifts(receptionist.staff, window)

    assert [r.id for r in records] == [at_start.id]
    assert [p.amount for p in records[0].payments] == [D('70')]


@pytest.mark.django_db
def test_report_payload(receptionist, account, open_shift, surgery, surgery_charge):
    _pay(open_shift, account, '500', charge=surgery_charge, receipt='A')
    _pay(open_shift, account, '300', receipt='B')

    data = build_session_cash_report(receptionist, 'today')

    assert data['totalCollected'] == D('800')
    assert data['netCash'] == D('800')
    assert data['transactionCount'] == 2
    assert data['shiftsCount'] == 1
    assert data['staffName'] == 'Ratna Akther'
    assert data['periodLabel'] == 'Today'
    assert data['startDate'].endswith('T18:00:00Z')
    assert data['departmentBreakdown'][0]['departmentId'] == surgery.id
    assert {'id': surgery.id, 'name': 'Surgery'} in data['departments']
    assert 'payments' not in data


@pytest.mark.django_db
def test_detailed_report_includes_patient_identity(receptionist, account, open_shift, surgery_charge):
    _pay(open_shift, account, '500', charge=surgery_charge, receipt='A')

    data = build_session_cash_report(receptionist, 'today', detailed=True)

    row = data['payments'][0]
    assert row['patientName'] == 'Rahima Khatun'
    assert row['patientPhone'] == '01700000000'
    assert row['serviceName'] == 'Appendectomy'
    assert 'departments' not in data


@pytest.mark.django_db
def test_report_requires_staff_record(django_user_model):
    user = django_user_model.objects.create_user(username='nostaff', password='x')
    with pytest.raises(ClinicError) as exc:
        build_session_cash_report(user)
    assert exc.value.status_code == 403
