"""
Collections and refunds booked against the caller's active shift.
"""
from __future__ import annotations

import logging
import uuid
from decimal import Decimal

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from ..exceptions import ClinicError, NOT_FOUND, VALIDATION
from ..models import CashMovement, Payment, PaymentAllocation, PatientAccount, ServiceCharge, Shift, User
from .audit import log_action
from .shifts import require_active_shift

logger = logging.getLogger(__name__)

ZERO = Decimal('0')


def new_receipt_number() -> str:
    return f"RCP-{timezone.now():%Y%m%d%H%M%S}-{uuid.uuid4().hex[:6].upper()}"


def book_collection(*, shift: Shift, account: PatientAccount, collected_by, amount: Decimal,
                    allocations=(), payment_method: str = 'Cash', notes: str = '') -> Payment:
    """Write the payment, its allocations and the cash movement; bump the running totals.

    Callers hold a transaction and a row lock on ``shift``.
    """
    payment = Payment.objects.create(
        patient_account=account,
        shift=shift,
        collected_by=collected_by,
        amount=amount,
        payment_method=payment_method,
        receipt_number=new_receipt_number(),
        notes=notes,
    )
    PaymentAllocation.objects.bulk_create([
        PaymentAllocation(payment=payment, service_charge=charge, allocated_amount=part)
        for charge, part in allocations
    ])
    CashMovement.objects.create(
        shift=shift,
        amount=amount,
        movement_type=CashMovement.TYPE_COLLECTION,
        description=notes or f"Collection {payment.receipt_number}",
        payment=payment,
    )

    shift.total_collected += amount
    shift.system_cash += amount
    shift.save(update_fields=['total_collected', 'system_cash'])
    return payment


def record_payment(*, user: User, patient_account_id: int, amount: Decimal, allocations=None,
                   payment_method: str = 'Cash', notes: str = '', request=None) -> Payment:
    """Collect ``amount`` from a patient account, split across its service charges.

    ``allocations`` is a list of ``{'serviceChargeId', 'amount'}``; when given
    the parts must add up to the payment amount.
    """
    allocations = allocations or []
    if allocations:
        parts = sum((Decimal(a['amount']) for a in allocations), ZERO)
        if parts != amount:
            raise ClinicError(
                VALIDATION, 'Allocations must add up to the payment amount',
                {'amount': str(amount), 'allocated': str(parts)},
            )

    with transaction.atomic():
        shift = require_active_shift(user.staff, lock=True)
        account = PatientAccount.objects.select_for_update().filter(id=patient_account_id).first()
        if account is None:
            raise ClinicError(NOT_FOUND, 'Patient account not found')

        charges = {
            c.id: c for c in ServiceCharge.objects.filter(
                patient_account=account, id__in=[a['serviceChargeId'] for a in allocations]
            )
        }
        pairs = []
        for a in allocations:
            charge = charges.get(a['serviceChargeId'])
            if charge is None:
                raise ClinicError(
                    NOT_FOUND, 'Service charge not found on this patient account',
                    {'serviceChargeId': a['serviceChargeId']},
                )
            pairs.append((charge, Decimal(a['amount'])))

        payment = book_collection(
            shift=shift, account=account, collected_by=user.staff, amount=amount,
            allocations=pairs, payment_method=payment_method, notes=notes,
        )

        account.total_paid += amount
        account.total_due -= amount
        account.save(update_fields=['total_paid', 'total_due', 'updated_at'])

        log_action(
            user=user, action='PAYMENT', entity_type='Payment', entity_id=payment.id,
            description=f"Collected BDT {amount} ({payment_method}) receipt {payment.receipt_number}",
            request=request,
        )

    logger.info(f"Payment {payment.receipt_number} BDT {amount} on shift {shift.id}")
    return payment


def refunded_amount(payment: Payment) -> Decimal:
    """Total already paid back against ``payment``."""
    total = CashMovement.objects.filter(
        payment=payment, movement_type=CashMovement.TYPE_REFUND,
    ).aggregate(total=Sum('amount'))['total']
    return total or ZERO


def refund(*, user: User, amount: Decimal, payment_id: int | None = None, reason: str = '',
           request=None) -> CashMovement:
    """Pay cash back out of the drawer of the caller's active shift."""
    with transaction.atomic():
        shift = require_active_shift(user.staff, lock=True)

        payment = None
        if payment_id is not None:
            payment = Payment.objects.select_for_update().filter(id=payment_id).first()
            if payment is None:
                raise ClinicError(NOT_FOUND, 'Payment not found')
            already = refunded_amount(payment)
            if already + amount > payment.amount:
                raise ClinicError(
                    VALIDATION, 'Refund exceeds the original payment',
                    {'amount': str(amount), 'alreadyRefunded': str(already), 'paymentAmount': str(payment.amount)},
                )

        if amount > shift.system_cash:
            raise ClinicError(
                VALIDATION, 'Refund exceeds the cash held in this shift',
                {'amount': str(amount), 'systemCash': str(shift.system_cash)},
            )

        movement = CashMovement.objects.create(
            shift=shift,
            amount=amount,
            movement_type=CashMovement.TYPE_REFUND,
            description=reason or 'Refund',
            payment=payment,
        )
        shift.total_refunded += amount
        shift.system_cash -= amount
        shift.save(update_fields=['total_refunded', 'system_cash'])

        if payment is not None:
            account = PatientAccount.objects.select_for_update().get(id=payment.patient_account_id)
            account.total_paid -= amount
            account.total_due += amount
            account.save(update_fields=['total_paid', 'total_due', 'updated_at'])

        log_action(
            user=user, action='REFUND', entity_type='CashMovement', entity_id=movement.id,
            description=f"Refunded BDT {amount}" + (f": {reason}" if reason else ''),
            request=request,
        )

    logger.info(f"Refund BDT {amount} on shift {shift.id}")
    return movement
