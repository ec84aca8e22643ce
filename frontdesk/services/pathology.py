"""
Pathology desk.

Registering a test order mirrors the admission flow: patient and hospital
are created or updated, the bill lands on the patient account as a
PATHOLOGY_TEST service charge against the Pathology department, and any
amount paid up front is booked on the clerk's open shift, all in one
transaction.
"""
from __future__ import annotations

import logging
from datetime import timedelta
from decimal import Decimal

from django.core.cache import cache
from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from ..exceptions import ClinicError, CONFLICT, NOT_FOUND, SHIFT_STATE, VALIDATION
from ..models import Department, PathologyTest, PatientAccount, ServiceCharge, Staff, User
from .admissions import resolve_hospital, save_patient
from .audit import log_action
from .cash_report import DEPARTMENTS_CACHE_KEY
from .payments import book_collection
from .periods import iso_utc, local_date, local_midnight, local_today_window
from .shifts import active_shift

logger = logging.getLogger(__name__)

ZERO = Decimal('0')
PATHOLOGY_DEPARTMENT = 'Pathology'


def pathology_department() -> Department:
    department, created = Department.objects.get_or_create(name=PATHOLOGY_DEPARTMENT)
    if created:
        cache.delete(DEPARTMENTS_CACHE_KEY)
    return department


def next_test_number(now=None) -> str:
    """PATH-YYYYMMDD-NNNN, numbered per local calendar day."""
    window = local_today_window(now)
    prefix = f"PATH-{local_date(window.start):%Y%m%d}-"
    seq = PathologyTest.objects.filter(test_date__gte=window.start, test_date__lt=window.end).count() + 1
    while PathologyTest.objects.filter(test_number=f"{prefix}{seq:04d}").exists():
        seq += 1
    return f"{prefix}{seq:04d}"


def create_pathology_test(*, user: User, patient: dict, hospital: dict | None, order: dict,
                          request=None) -> PathologyTest:
    staff = user.staff
    total = order['total_amount']
    discount = min(order.get('discount_amount') or ZERO, total)
    grand = total - discount
    paid = order.get('paid_amount') or ZERO
    if paid > grand:
        raise ClinicError(VALIDATION, 'Paid amount exceeds the grand total',
                          {'paidAmount': str(paid), 'grandTotal': str(grand)})

    ordered_by = None
    if order.get('ordered_by_id'):
        ordered_by = Staff.objects.filter(id=order['ordered_by_id'], is_active=True).first()
        if ordered_by is None:
            raise ClinicError(VALIDATION, 'Unknown or inactive doctor', {'orderedById': order['ordered_by_id']})

    try:
        with transaction.atomic():
            shift = active_shift(staff, lock=True)
            if paid and shift is None:
                raise ClinicError(SHIFT_STATE, 'No active shift. Start a shift before taking payment.')

            department = pathology_department()
            hosp = resolve_hospital(hospital, staff)
            pat, _ = save_patient(patient, hosp, staff)

            completed = bool(order.get('is_completed'))
            test = PathologyTest.objects.create(
                test_number=next_test_number(),
                patient=pat,
                ordered_by=ordered_by,
                test_category=order.get('test_category') or 'Multiple Tests',
                test_names=', '.join(order.get('test_names') or []),
                is_completed=completed,
                report_date=timezone.now() if completed else None,
                total_amount=total,
                discount_amount=discount,
                grand_total=grand,
                paid_amount=paid,
                due_amount=grand - paid,
                remarks=order.get('remarks') or '',
            )

            account, _ = PatientAccount.objects.select_for_update().get_or_create(patient=pat)
            account.total_charges += grand
            account.total_paid += paid
            account.total_due += grand - paid
            account.save()

            charge = ServiceCharge.objects.create(
                patient_account=account,
                service_type=ServiceCharge.TYPE_PATHOLOGY,
                service_name=f"Pathology Tests - {test.test_number}",
                department=department,
                original_amount=total,
                discount_amount=discount,
                final_amount=grand,
                created_by=staff,
            )

            if paid:
                book_collection(
                    shift=shift, account=account, collected_by=staff, amount=paid,
                    allocations=[(charge, paid)],
                    notes=f"Initial payment for pathology test {test.test_number}",
                )

            log_action(
                user=user, action='CREATE', entity_type='PathologyTest', entity_id=test.id,
                description=f"Created pathology test {test.test_number} for {pat.full_name}. "
                            f"Total: BDT {grand}, Paid: BDT {paid}, Due: BDT {grand - paid}",
                request=request,
            )
    except IntegrityError as exc:
        raise ClinicError(CONFLICT, 'Test number already exists, please retry', {'reason': str(exc)})

    logger.info(f"Pathology test {test.test_number} created for patient {pat.id} paid={paid}")
    return test


def get_pathology_test(test_id: int) -> PathologyTest:
    test = PathologyTest.objects.select_related('patient', 'ordered_by').filter(id=test_id).first()
    if test is None:
        raise ClinicError(NOT_FOUND, 'Pathology test not found', {'testId': test_id})
    return test


def update_pathology_test(*, user: User, test_id: int, changes: dict, request=None) -> PathologyTest:
    """Mark a test completed (stamps the report date) or reopen it; edit remarks."""
    with transaction.atomic():
        test = PathologyTest.objects.select_for_update().filter(id=test_id).first()
        if test is None:
            raise ClinicError(NOT_FOUND, 'Pathology test not found', {'testId': test_id})
        if 'is_completed' in changes:
            if changes['is_completed'] and not test.is_completed:
                test.report_date = timezone.now()
            elif not changes['is_completed']:
                test.report_date = None
            test.is_completed = changes['is_completed']
        if 'remarks' in changes:
            test.remarks = changes['remarks'] or ''
        test.save(update_fields=['is_completed', 'report_date', 'remarks'])
        log_action(
            user=user, action='UPDATE', entity_type='PathologyTest', entity_id=test.id,
            description=f"Updated pathology test {test.test_number} (completed={test.is_completed})",
            request=request,
        )
    return get_pathology_test(test.id)


def list_pathology_tests(*, search=None, start_date=None, end_date=None, is_completed=None, test_category=None):
    qs = PathologyTest.objects.select_related('patient', 'ordered_by')
    if search:
        qs = qs.filter(
            Q(test_number__icontains=search)
            | Q(patient__full_name__icontains=search)
            | Q(patient__phone_number__icontains=search)
        )
    if start_date:
        qs = qs.filter(test_date__gte=local_midnight(start_date))
    if end_date:
        qs = qs.filter(test_date__lt=local_midnight(end_date + timedelta(days=1)))
    if is_completed is not None:
        qs = qs.filter(is_completed=is_completed)
    if test_category:
        qs = qs.filter(test_category=test_category)
    return qs.order_by('-test_date', '-id')


def serialize_pathology_test(t: PathologyTest) -> dict:
    p = t.patient
    return {
        'id': t.id,
        'testNumber': t.test_number,
        'patientId': p.id,
        'registrationId': p.registration_id,
        'patientFullName': p.full_name,
        'patientGender': p.gender,
        'patientPhone': p.phone_number,
        'orderedById': t.ordered_by_id,
        'orderedByName': t.ordered_by.full_name if t.ordered_by_id else None,
        'testCategory': t.test_category,
        'testNames': [n for n in t.test_names.split(', ') if n],
        'testDate': iso_utc(t.test_date),
        'reportDate': iso_utc(t.report_date),
        'isCompleted': t.is_completed,
        'totalAmount': t.total_amount,
        'discountAmount': t.discount_amount,
        'grandTotal': t.grand_total,
        'paidAmount': t.paid_amount,
        'dueAmount': t.due_amount,
        'remarks': t.remarks,
    }
