"""
Cash shift lifecycle.

A shift opens with a counted opening float and keeps ``system_cash`` in
step with every collection and refund booked against it; closing it
records the counted drawer and the variance against the ledger.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional

from django.db import IntegrityError, transaction
from django.db.models import Count, Q, Sum
from django.utils import timezone

from ..exceptions import ClinicError, SHIFT_STATE, VALIDATION
from ..models import CashMovement, Shift, Staff, User
from .audit import log_action
from .periods import ReportWindow, iso_utc

logger = logging.getLogger(__name__)

ZERO = Decimal('0')


def active_shift(staff: Staff | None, lock: bool = False) -> Optional[Shift]:
    if staff is None:
        return None
    qs = Shift.objects.filter(staff=staff, is_active=True)
    if lock:
        qs = qs.select_for_update()
    return qs.first()


def require_active_shift(staff: Staff, lock: bool = False) -> Shift:
    shift = active_shift(staff, lock=lock)
    if shift is None:
        raise ClinicError(SHIFT_STATE, 'No active shift. Start a shift before handling cash.')
    return shift


def serialize_shift(shift: Shift, payments_count: int | None = None) -> dict:
    data = {
        'shiftId': shift.id,
        'staffId': shift.staff_id,
        'staffName': shift.staff.full_name,
        'startTime': iso_utc(shift.start_time),
        'endTime': iso_utc(shift.end_time),
        'openingCash': shift.opening_cash,
        'currentCash': shift.opening_cash + shift.total_collected - shift.total_refunded,
        'systemCash': shift.system_cash,
        'closingCash': shift.closing_cash if not shift.is_active else None,
        'totalCollected': shift.total_collected,
        'totalRefunded': shift.total_refunded,
        'variance': shift.variance,
        'isActive': shift.is_active,
        'notes': shift.notes,
    }
    data['paymentsCount'] = payments_count if payments_count is not None else shift.payments.count()
    return data


def _amount(value, field: str) -> Decimal:
    amount = Decimal(value)
    if amount < ZERO:
        raise ClinicError(VALIDATION, f"{field} cannot be negative", {field: str(value)})
    return amount


def start_shift(*, user: User, opening_cash, notes: str = '', request=None) -> Shift:
    opening = _amount(opening_cash, 'openingCash')
    staff = user.staff
    try:
        with transaction.atomic():
            if active_shift(staff, lock=True) is not None:
                raise ClinicError(SHIFT_STATE, 'A shift is already active for this staff member')
            shift = Shift.objects.create(
                staff=staff,
                opening_cash=opening,
                system_cash=opening,
                notes=notes,
            )
            CashMovement.objects.create(
                shift=shift,
                amount=opening,
                movement_type=CashMovement.TYPE_OPENING,
                description='Opening cash',
            )
            log_action(
                user=user, action='SHIFT_START', entity_type='Shift', entity_id=shift.id,
                description=f"Started shift with opening cash BDT {opening}", request=request,
            )
    except IntegrityError:
        raise ClinicError(SHIFT_STATE, 'A shift is already active for this staff member')

    logger.info(f"Shift {shift.id} started by staff {staff.id} opening={opening}")
    return shift


def end_shift(*, user: User, closing_cash, notes: str = '', request=None) -> Shift:
    closing = _amount(closing_cash, 'closingCash')
    with transaction.atomic():
        shift = require_active_shift(user.staff, lock=True)
        shift.closing_cash = closing
        shift.variance = closing - shift.system_cash
        shift.end_time = timezone.now()
        shift.is_active = False
        if notes:
            shift.notes = f"{shift.notes}\n{notes}".strip()
        shift.save(update_fields=['closing_cash', 'variance', 'end_time', 'is_active', 'notes'])
        CashMovement.objects.create(
            shift=shift,
            amount=closing,
            movement_type=CashMovement.TYPE_CLOSING,
            description=f"Closing cash (variance {shift.variance})",
        )
        log_action(
            user=user, action='SHIFT_END', entity_type='Shift', entity_id=shift.id,
            description=f"Closed shift. Closing BDT {closing}, system BDT {shift.system_cash}, variance {shift.variance}",
            request=request,
        )

    if shift.variance:
        logger.warning(f"Shift {shift.id} closed with variance {shift.variance}")
    else:
        logger.info(f"Shift {shift.id} closed, drawer balanced")
    return shift


def list_shifts(window: ReportWindow, status: str | None = None, search: str | None = None):
    """All staff shifts that started in the window, for the admin cash tracker."""
    qs = (
        Shift.objects.select_related('staff')
        .filter(start_time__gte=window.start, start_time__lt=window.end)
        .order_by('-start_time')
    )
    if status == 'active':
        qs = qs.filter(is_active=True)
    elif status == 'closed':
        qs = qs.filter(is_active=False)
    if search:
        qs = qs.filter(Q(staff__full_name__icontains=search) | Q(staff__role__icontains=search))

    totals = qs.aggregate(collected=Sum('total_collected'), refunded=Sum('total_refunded'))
    summary = {
        'totalCollected': totals['collected'] or ZERO,
        'totalRefunded': totals['refunded'] or ZERO,
        'activeShiftsCount': qs.filter(is_active=True).count(),
    }
    rows = [serialize_shift(s, payments_count=s.n_payments) for s in qs.annotate(n_payments=Count('payments'))]
    return rows, summary
