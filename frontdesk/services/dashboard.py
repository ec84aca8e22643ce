"""
Front-desk dashboard figures.

Day-based counters use the clinic's local "today" window.  Recent
patients merge the latest admissions with the latest pathology orders;
pathology ids are shifted by :data:`PATHOLOGY_ID_OFFSET` so the two kinds
never collide in the front-end's list keys.
"""
from __future__ import annotations

from django.conf import settings

from ..models import Admission, PathologyTest, User
from .periods import iso_utc, local_today_window
from .shifts import active_shift, serialize_shift

PATHOLOGY_ID_OFFSET = 20000


def _stats(window) -> dict:
    active = Admission.objects.filter(is_discharged=False).count()
    occupancy = round(active / settings.BED_CAPACITY * 100) if settings.BED_CAPACITY else 0
    return {
        'totalActivePatients': active,
        'patientsAdmittedToday': Admission.objects.filter(
            date_admitted__gte=window.start, date_admitted__lt=window.end
        ).count(),
        'dischargedToday': Admission.objects.filter(
            is_discharged=True, date_discharged__gte=window.start, date_discharged__lt=window.end
        ).count(),
        'dischargedAllTime': Admission.objects.filter(is_discharged=True).count(),
        'occupancyRate': min(occupancy, 100),
        'pathologyDoneToday': PathologyTest.objects.filter(
            is_completed=True, report_date__gte=window.start, report_date__lt=window.end
        ).count(),
        'pathologyDoneAllTime': PathologyTest.objects.filter(is_completed=True).count(),
    }


def _admission_status(a: Admission) -> str:
    if a.is_discharged:
        return 'discharged'
    if not a.paid_amount:
        return 'pending'
    return 'admitted'


def recent_patients(limit: int) -> list[dict]:
    admissions = Admission.objects.select_related('patient', 'department').order_by('-date_admitted')[:limit]
    tests = PathologyTest.objects.select_related('patient').order_by('-test_date')[:limit]

    rows = [
        {
            'id': a.id,
            'patientId': a.patient_id,
            'name': a.patient.full_name,
            'phoneNumber': a.patient.phone_number,
            'admissionDate': a.date_admitted,
            'department': a.department.name,
            'departmentType': 'general',
            'status': _admission_status(a),
            'roomNumber': f"{a.ward}{a.seat_number}".strip() if a.seat_number else None,
        }
        for a in admissions
    ]
    rows += [
        {
            'id': t.id + PATHOLOGY_ID_OFFSET,
            'patientId': t.patient_id,
            'name': t.patient.full_name,
            'phoneNumber': t.patient.phone_number,
            'admissionDate': t.test_date,
            'department': 'Pathology',
            'departmentType': 'pathology',
            'status': 'discharged' if t.is_completed else 'pending',
            'roomNumber': None,
        }
        for t in tests
    ]
    rows.sort(key=lambda r: r['admissionDate'], reverse=True)
    rows = rows[:limit]
    for r in rows:
        r['admissionDate'] = iso_utc(r['admissionDate'])
    return rows


def build_dashboard(user: User, recent_limit: int = 5, now=None) -> dict:
    window = local_today_window(now)
    shift = active_shift(user.staff) if user.staff_id else None
    return {
        'stats': _stats(window),
        'recentPatients': recent_patients(recent_limit),
        'cashSession': serialize_shift(shift) if shift else None,
    }
