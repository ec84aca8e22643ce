"""
Session cash reporting.

Three stages turn a staff member's shifts into the report shown on the
dashboard cash tracker:

* :func:`fetch_shifts` loads the relevant shifts with only the payments
  that fall inside the reporting window, as plain immutable records;
* :func:`aggregate` folds those records into per-shift and per-department
  totals (a pure function, so it can be tested without a database);
* :func:`build_session_cash_report` resolves the window, runs both and
  shapes the JSON payload for the API.

Payments with no allocations are counted in their shift's totals but
belong to no department; in the detailed export they appear as
"General"/"Unallocated" rows.
"""
from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from django.conf import settings
from django.core.cache import cache
from django.db.models import Prefetch, Q

from ..exceptions import ClinicError, FORBIDDEN, VALIDATION
from ..models import Department, Payment, PaymentAllocation, Shift, Staff, User
from .periods import ReportWindow, iso_utc, local_date, resolve_window

logger = logging.getLogger(__name__)

ZERO = Decimal('0')
DEPARTMENTS_CACHE_KEY = 'frontdesk:active-departments'


@dataclass(frozen=True)
class AllocationRecord:
    department_id: int
    department_name: str
    amount: Decimal
    service_name: str = ''
    service_type: str = ''


@dataclass(frozen=True)
class PaymentRecord:
    id: int
    amount: Decimal
    payment_method: str
    payment_date: datetime
    allocations: tuple = ()
    patient_id: Optional[int] = None
    patient_name: str = ''
    patient_phone: Optional[str] = None


@dataclass(frozen=True)
class ShiftRecord:
    id: int
    start_time: datetime
    end_time: Optional[datetime]
    is_active: bool
    total_refunded: Decimal
    payments: tuple = ()


@dataclass
class CashAggregate:
    total_collected: Decimal = ZERO
    total_refunded: Decimal = ZERO
    transaction_count: int = 0
    department_breakdown: list = field(default_factory=list)
    shifts: list = field(default_factory=list)
    payments: list = field(default_factory=list)

    @property
    def net_cash(self) -> Decimal:
        return self.total_collected - self.total_refunded


# ---------------------------------------------------------------------
# Fetcher
# ---------------------------------------------------------------------
def fetch_shifts(staff: Staff, window: ReportWindow, detailed: bool = False) -> list[ShiftRecord]:
    """Shifts that started in the window, are still open, or took money in it."""
    payments = (
        Payment.objects.filter(payment_date__gte=window.start, payment_date__lt=window.end)
        .prefetch_related(
            Prefetch(
                'allocations',
                queryset=PaymentAllocation.objects.select_related('service_charge__department').order_by('id'),
            )
        )
        .order_by('-payment_date', '-id')
    )
    if detailed:
        payments = payments.select_related('patient_account__patient')

    qs = (
        Shift.objects.filter(staff=staff)
        .filter(
            Q(start_time__gte=window.start, start_time__lt=window.end)
            | Q(is_active=True)
            | Q(payments__payment_date__gte=window.start, payments__payment_date__lt=window.end)
        )
        .distinct()
        .prefetch_related(Prefetch('payments', queryset=payments, to_attr='window_payments'))
        .order_by('-start_time', '-id')
    )
    return [_shift_record(s, detailed) for s in qs]


def _shift_record(shift: Shift, detailed: bool) -> ShiftRecord:
    return ShiftRecord(
        id=shift.id,
        start_time=shift.start_time,
        end_time=shift.end_time,
        is_active=shift.is_active,
        total_refunded=shift.total_refunded,
        payments=tuple(_payment_record(p, detailed) for p in shift.window_payments),
    )


def _payment_record(payment: Payment, detailed: bool) -> PaymentRecord:
    allocations = tuple(
        AllocationRecord(
            department_id=a.service_charge.department_id,
            department_name=a.service_charge.department.name,
            amount=a.allocated_amount,
            service_name=a.service_charge.service_name,
            service_type=a.service_charge.service_type,
        )
        for a in payment.allocations.all()
    )
    extra = {}
    if detailed:
        patient = payment.patient_account.patient
        extra = {
            'patient_id': patient.id,
            'patient_name': patient.full_name,
            'patient_phone': patient.phone_number or None,
        }
    return PaymentRecord(
        id=payment.id,
        amount=payment.amount,
        payment_method=payment.payment_method,
        payment_date=payment.payment_date,
        allocations=allocations,
        **extra,
    )


# ---------------------------------------------------------------------
# Aggregator
# ---------------------------------------------------------------------
def parse_department_filter(value) -> Optional[int]:
    """``None``, ``''`` and ``'all'`` mean no filter; anything else must be an id."""
    if value is None or value == '' or value == 'all':
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ClinicError(VALIDATION, 'departmentId must be a department id or "all"', {'departmentId': value})


def _bump(bucket: OrderedDict, dept_id: int, name: str, amount: Decimal) -> None:
    row = bucket.get(dept_id)
    if row is None:
        bucket[dept_id] = row = {'name': name, 'collected': ZERO, 'count': 0}
    row['collected'] += amount
    row['count'] += 1


def _breakdown(bucket: OrderedDict) -> list[dict]:
    rows = [
        {
            'departmentId': dept_id,
            'departmentName': row['name'],
            'totalCollected': row['collected'],
            'transactionCount': row['count'],
        }
        for dept_id, row in bucket.items()
    ]
    rows.sort(key=lambda r: r['totalCollected'], reverse=True)
    return rows


def _payment_row(payment: PaymentRecord, amount: Decimal, service_name: str,
                 service_type: str, department_name: str) -> dict:
    return {
        'paymentId': payment.id,
        'registrationId': f"REG-{payment.patient_id or 0:06d}",
        'paymentDate': iso_utc(payment.payment_date),
        'amount': amount,
        'paymentMethod': payment.payment_method,
        'patientId': payment.patient_id,
        'patientName': payment.patient_name,
        'patientPhone': payment.patient_phone,
        'serviceName': service_name,
        'serviceType': service_type,
        'departmentName': department_name,
    }


def aggregate(shifts: Iterable[ShiftRecord], department_id: Optional[int] = None,
              detailed: bool = False) -> CashAggregate:
    """Fold fetched shift records into report totals.

    With ``department_id`` set only allocations to that department count,
    and unallocated payments are skipped.  Shifts that end up with no
    counted transaction are left out of the result entirely.
    """
    result = CashAggregate()
    overall = OrderedDict()

    for shift in shifts:
        collected = ZERO
        count = 0
        local = OrderedDict()
        rows = []

        for payment in shift.payments:
            if not payment.allocations:
                if department_id is not None:
                    continue
                collected += payment.amount
                count += 1
                if detailed:
                    rows.append(_payment_row(payment, payment.amount, 'General', 'GENERAL', 'Unallocated'))
                continue

            for alloc in payment.allocations:
                if department_id is not None and alloc.department_id != department_id:
                    continue
                collected += alloc.amount
                count += 1
                _bump(local, alloc.department_id, alloc.department_name, alloc.amount)
                _bump(overall, alloc.department_id, alloc.department_name, alloc.amount)
                if detailed:
                    rows.append(_payment_row(
                        payment, alloc.amount, alloc.service_name, alloc.service_type, alloc.department_name,
                    ))

        if count == 0:
            continue

        summary = {
            'shiftId': shift.id,
            'startTime': iso_utc(shift.start_time),
            'endTime': iso_utc(shift.end_time),
            'isActive': shift.is_active,
            'totalCollected': collected,
            'totalRefunded': shift.total_refunded,
            'transactionCount': count,
            'departmentBreakdown': _breakdown(local),
        }
        if detailed:
            summary['shiftDate'] = local_date(shift.start_time).strftime('%b %d, %Y')
            summary['payments'] = rows
            result.payments.extend(rows)
        result.shifts.append(summary)

        result.total_collected += collected
        result.total_refunded += shift.total_refunded
        result.transaction_count += count

    result.department_breakdown = _breakdown(overall)
    return result


# ---------------------------------------------------------------------
# Assembler
# ---------------------------------------------------------------------
def active_departments() -> list[dict]:
    def load():
        return [
            {'id': d.id, 'name': d.name}
            for d in Department.objects.filter(is_active=True).order_by('name')
        ]
    return cache.get_or_set(DEPARTMENTS_CACHE_KEY, load, settings.DEPARTMENTS_CACHE_SECONDS)


def build_session_cash_report(user: User, preset: Optional[str] = 'today', department_id=None,
                              start_date: Optional[str] = None, end_date: Optional[str] = None,
                              detailed: bool = False, now=None) -> dict:
    if not user.staff_id:
        raise ClinicError(FORBIDDEN, 'No staff record is linked to this account')

    window = resolve_window(preset, start_date, end_date, now=now)
    dept = parse_department_filter(department_id)
    records = fetch_shifts(user.staff, window, detailed=detailed)
    agg = aggregate(records, dept, detailed=detailed)

    logger.debug(
        f"cash report staff={user.staff_id} preset={preset} dept={dept} "
        f"shifts={len(agg.shifts)}/{len(records)} collected={agg.total_collected}"
    )

    data = {
        'totalCollected': agg.total_collected,
        'totalRefunded': agg.total_refunded,
        'netCash': agg.net_cash,
        'transactionCount': agg.transaction_count,
        'departmentBreakdown': agg.department_breakdown,
        'shifts': agg.shifts,
        'staffName': user.full_name or 'Staff',
        'periodLabel': window.period_label,
        'startDate': iso_utc(window.start),
        'endDate': iso_utc(window.end),
        'shiftsCount': len(agg.shifts),
    }
    if detailed:
        data['payments'] = agg.payments
    else:
        data['departments'] = active_departments()
    return data
