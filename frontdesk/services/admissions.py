"""
General admission desk.

Creating an admission touches several tables at once (hospital, patient,
billing account, service charge, and, when the clerk has a shift open,
the cash ledger), so :func:`create_admission` runs as one transaction.
"""
from __future__ import annotations

import logging
from datetime import timedelta
from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from ..exceptions import ClinicError, CONFLICT, NOT_FOUND, VALIDATION
from ..models import (
    Admission,
    Department,
    Hospital,
    HospitalConfig,
    Patient,
    PatientAccount,
    ServiceCharge,
    Staff,
    User,
)
from .audit import log_action
from .payments import book_collection
from .periods import iso_utc, local_date, local_midnight, local_today_window
from .shifts import active_shift, require_active_shift

logger = logging.getLogger(__name__)

ZERO = Decimal('0')
PATIENT_FIELDS = (
    'first_name', 'last_name', 'gender', 'date_of_birth', 'address', 'phone_number',
    'email', 'blood_group', 'guardian_name', 'guardian_phone',
)
HOSPITAL_FIELDS = ('address', 'phone_number', 'email', 'website', 'type')


def admission_fee() -> Decimal:
    row = HospitalConfig.objects.filter(key='ADMISSION_FEE').first()
    raw = row.value if row else settings.DEFAULT_ADMISSION_FEE
    try:
        return Decimal(raw)
    except InvalidOperation:
        logger.warning(f"Invalid ADMISSION_FEE {raw!r}, using {settings.DEFAULT_ADMISSION_FEE}")
        return Decimal(settings.DEFAULT_ADMISSION_FEE)


def next_admission_number(now=None) -> str:
    """ADM-YYYYMMDD-NNNN, numbered per local calendar day."""
    window = local_today_window(now)
    prefix = f"ADM-{local_date(window.start):%Y%m%d}-"
    count = Admission.objects.filter(date_admitted__gte=window.start, date_admitted__lt=window.end).count()
    seq = count + 1
    while Admission.objects.filter(admission_number=f"{prefix}{seq:04d}").exists():
        seq += 1
    return f"{prefix}{seq:04d}"


def resolve_hospital(data: dict | None, staff: Staff) -> Hospital | None:
    if not data:
        return None
    if data.get('id'):
        hospital = Hospital.objects.filter(id=data['id']).first()
        if hospital is None:
            raise ClinicError(NOT_FOUND, 'Hospital not found', {'hospitalId': data['id']})
        return hospital
    name = (data.get('name') or '').strip()
    if not name:
        return None
    hospital = Hospital.objects.filter(name__iexact=name).first()
    if hospital is None:
        hospital = Hospital.objects.create(
            name=name,
            created_by=staff,
            **{f: data.get(f) or '' for f in HOSPITAL_FIELDS},
        )
    return hospital


def save_patient(data: dict, hospital: Hospital | None, staff: Staff) -> tuple[Patient, bool]:
    values = {f: data.get(f) for f in PATIENT_FIELDS if f in data}
    for f, v in list(values.items()):
        if v is None and f != 'date_of_birth':
            values[f] = ''
    values['full_name'] = data.get('full_name') or f"{data.get('first_name', '')} {data.get('last_name', '')}".strip()

    if data.get('id'):
        patient = Patient.objects.select_for_update().filter(id=data['id']).first()
        if patient is None:
            raise ClinicError(NOT_FOUND, 'Patient not found', {'patientId': data['id']})
        for f, v in values.items():
            setattr(patient, f, v)
        patient.hospital = hospital
        patient.save()
        return patient, False

    patient = Patient.objects.create(hospital=hospital, created_by=staff, **values)
    return patient, True


def create_admission(*, user: User, patient: dict, hospital: dict | None, department_id: int,
                     doctor_id: int, details: dict | None = None, request=None) -> Admission:
    staff = user.staff
    details = details or {}

    department = Department.objects.filter(id=department_id, is_active=True).first()
    if department is None:
        raise ClinicError(VALIDATION, 'Unknown or inactive department', {'departmentId': department_id})
    doctor = Staff.objects.filter(id=doctor_id, is_active=True).first()
    if doctor is None:
        raise ClinicError(VALIDATION, 'Unknown or inactive doctor', {'doctorId': doctor_id})

    try:
        with transaction.atomic():
            fee = admission_fee()
            shift = active_shift(staff, lock=True)
            paid = fee if shift is not None else ZERO

            hosp = resolve_hospital(hospital, staff)
            pat, is_new = save_patient(patient, hosp, staff)

            admission = Admission.objects.create(
                admission_number=next_admission_number(),
                patient=pat,
                department=department,
                doctor=doctor,
                status=Admission.STATUS_ADMITTED,
                admission_fee=fee,
                total_amount=fee,
                grand_total=fee,
                paid_amount=paid,
                due_amount=fee - paid,
                seat_number=details.get('seat_number') or '',
                ward=details.get('ward') or '',
                diagnosis=details.get('diagnosis') or '',
                chief_complaint=details.get('chief_complaint') or '',
                remarks=details.get('remarks') or '',
                created_by=staff,
            )

            account, _ = PatientAccount.objects.select_for_update().get_or_create(patient=pat)
            account.total_charges += fee
            account.total_paid += paid
            account.total_due += fee - paid
            account.save()

            charge = ServiceCharge.objects.create(
                patient_account=account,
                service_type=ServiceCharge.TYPE_ADMISSION,
                service_name=f"Admission - {admission.admission_number}",
                department=department,
                original_amount=fee,
                final_amount=fee,
                admission=admission,
                created_by=staff,
            )

            if shift is not None:
                book_collection(
                    shift=shift, account=account, collected_by=staff, amount=fee,
                    allocations=[(charge, fee)],
                    notes=f"Initial Admission Fee for {admission.admission_number}",
                )

            log_action(
                user=user, action='CREATE', entity_type='Admission', entity_id=admission.id,
                description=f"Created admission {admission.admission_number} for {pat.full_name}. "
                            f"Admission Fee: BDT {fee}",
                request=request,
            )
    except IntegrityError as exc:
        raise ClinicError(CONFLICT, 'Admission number already exists, please retry', {'reason': str(exc)})

    logger.info(
        f"Admission {admission.admission_number} created for patient {pat.id} "
        f"(new={is_new}, shift={shift.id if shift else None})"
    )
    return admission


def list_admissions(*, search=None, start_date=None, end_date=None, status=None, department_id=None):
    qs = Admission.objects.select_related('patient__hospital', 'department', 'doctor')
    if search:
        qs = qs.filter(
            Q(admission_number__icontains=search)
            | Q(patient__full_name__icontains=search)
            | Q(patient__phone_number__icontains=search)
        )
    if start_date:
        qs = qs.filter(date_admitted__gte=local_midnight(start_date))
    if end_date:
        qs = qs.filter(date_admitted__lt=local_midnight(end_date + timedelta(days=1)))
    if status and status != 'All':
        qs = qs.filter(status=status)
    if department_id:
        qs = qs.filter(department_id=department_id)
    return qs.order_by('-date_admitted')


def serialize_admission(a: Admission) -> dict:
    p = a.patient
    h = p.hospital
    return {
        'id': a.id,
        'admissionNumber': a.admission_number,
        'patientId': p.id,
        'registrationId': p.registration_id,
        'patientFullName': p.full_name,
        'patientDateOfBirth': p.date_of_birth.isoformat() if p.date_of_birth else None,
        'patientGender': p.gender,
        'patientPhone': p.phone_number,
        'patientEmail': p.email,
        'patientBloodGroup': p.blood_group,
        'patientAddress': p.address,
        'guardianName': p.guardian_name,
        'guardianPhone': p.guardian_phone,
        'hospitalId': h.id if h else None,
        'hospitalName': h.name if h else '',
        'departmentId': a.department_id,
        'departmentName': a.department.name,
        'doctorId': a.doctor_id,
        'doctorName': a.doctor.full_name,
        'doctorSpecialization': a.doctor.specialization,
        'status': a.status,
        'dateAdmitted': iso_utc(a.date_admitted),
        'dateDischarged': iso_utc(a.date_discharged),
        'isDischarged': a.is_discharged,
        'seatNumber': a.seat_number,
        'ward': a.ward,
        'diagnosis': a.diagnosis,
        'chiefComplaint': a.chief_complaint,
        'remarks': a.remarks,
        'admissionFee': a.admission_fee,
        'totalAmount': a.total_amount,
        'discountAmount': a.discount_amount,
        'grandTotal': a.grand_total,
        'paidAmount': a.paid_amount,
        'dueAmount': a.due_amount,
    }


def get_admission(admission_id: int) -> Admission:
    admission = (
        Admission.objects.select_related('patient__hospital', 'department', 'doctor')
        .filter(id=admission_id)
        .first()
    )
    if admission is None:
        raise ClinicError(NOT_FOUND, 'Admission not found', {'admissionId': admission_id})
    return admission


def _apply_status(admission: Admission, changes: dict) -> None:
    status = changes.get('status')
    discharged = changes.get('is_discharged')
    if status == Admission.STATUS_DISCHARGED and discharged is None:
        discharged = True

    if discharged is True:
        if admission.status == Admission.STATUS_CANCELED and status != Admission.STATUS_ADMITTED:
            raise ClinicError(VALIDATION, 'A canceled admission cannot be discharged')
        admission.is_discharged = True
        admission.date_discharged = changes.get('date_discharged') or admission.date_discharged or timezone.now()
        admission.status = Admission.STATUS_DISCHARGED
    elif discharged is False:
        admission.is_discharged = False
        admission.date_discharged = None
        if status is None and admission.status == Admission.STATUS_DISCHARGED:
            admission.status = Admission.STATUS_ADMITTED

    if status == Admission.STATUS_CANCELED:
        admission.is_discharged = False
        admission.date_discharged = None
        admission.status = status
    elif status == Admission.STATUS_ADMITTED and not discharged:
        admission.is_discharged = False
        admission.date_discharged = None
        admission.status = status


def update_admission(*, user: User, admission_id: int, changes: dict, request=None) -> Admission:
    """Change status, discharge, details, discount or paid amount of an admission.

    Canceling zeroes the charges (money already collected stays in the
    ledger until refunded); restoring a canceled admission re-applies the
    current admission fee.  Raising ``paid_amount`` books the difference on
    the caller's open shift.
    """
    with transaction.atomic():
        admission = Admission.objects.select_for_update().filter(id=admission_id).first()
        if admission is None:
            raise ClinicError(NOT_FOUND, 'Admission not found', {'admissionId': admission_id})

        was_canceled = admission.status == Admission.STATUS_CANCELED
        old_grand, old_paid = admission.grand_total, admission.paid_amount

        for f in ('seat_number', 'ward', 'diagnosis', 'chief_complaint', 'remarks'):
            if f in changes:
                setattr(admission, f, changes[f] or '')
        _apply_status(admission, changes)

        canceling = admission.status == Admission.STATUS_CANCELED and not was_canceled
        restoring = was_canceled and admission.status != Admission.STATUS_CANCELED

        if canceling:
            admission.admission_fee = admission.total_amount = ZERO
            admission.discount_amount = ZERO
            admission.remarks = f"[CANCELED] {admission.remarks}".strip()
        elif restoring:
            admission.admission_fee = admission.total_amount = admission_fee()
        if 'discount_amount' in changes and admission.status != Admission.STATUS_CANCELED:
            admission.discount_amount = min(changes['discount_amount'], admission.total_amount)
        admission.grand_total = admission.total_amount - admission.discount_amount

        paid = changes.get('paid_amount', old_paid)
        if paid < old_paid:
            raise ClinicError(VALIDATION, 'Use a refund to lower the paid amount',
                              {'paidAmount': str(paid), 'current': str(old_paid)})
        if paid > admission.grand_total and paid != old_paid:
            raise ClinicError(VALIDATION, 'Paid amount exceeds the grand total',
                              {'paidAmount': str(paid), 'grandTotal': str(admission.grand_total)})
        collected = paid - old_paid
        admission.paid_amount = paid
        admission.due_amount = max(admission.grand_total - paid, ZERO)
        admission.save()

        account, _ = PatientAccount.objects.select_for_update().get_or_create(patient_id=admission.patient_id)
        charge = ServiceCharge.objects.filter(admission=admission).order_by('id').first()
        if charge is not None:
            charge.original_amount = admission.total_amount
            charge.discount_amount = admission.discount_amount
            charge.final_amount = admission.grand_total
            charge.save(update_fields=['original_amount', 'discount_amount', 'final_amount'])

        if collected:
            shift = require_active_shift(user.staff, lock=True)
            book_collection(
                shift=shift, account=account, collected_by=user.staff, amount=collected,
                allocations=[(charge, collected)] if charge is not None else (),
                notes=f"Additional payment for {admission.admission_number}",
            )
        account.total_charges += admission.grand_total - old_grand
        account.total_paid += collected
        account.total_due += admission.grand_total - old_grand - collected
        account.save()

        log_action(
            user=user, action='UPDATE', entity_type='Admission', entity_id=admission.id,
            description=f"Updated admission {admission.admission_number}: status {admission.status}, "
                        f"grand total BDT {admission.grand_total}, paid BDT {admission.paid_amount}",
            request=request,
        )

    logger.info(f"Admission {admission.admission_number} updated (status={admission.status}, collected={collected})")
    return get_admission(admission.id)
