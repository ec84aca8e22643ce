"""
Shared fixtures for the front-desk test-suite.

Throttle counters and the department list live in the cache, so it is
cleared around every test.
"""
from decimal import Decimal

import pytest
from django.core.cache import cache

from frontdesk.models import (
    Department,
    Patient,
    PatientAccount,
    ServiceCharge,
    Shift,
    Staff,
    User,
)


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def surgery(db):
    return Department.objects.create(name="Surgery")


@pytest.fixture
def medicine(db):
    return Department.objects.create(name="Medicine")


@pytest.fixture
def receptionist(db):
    staff = Staff.objects.create(first_name="Ratna", last_name="Akther", role="Receptionist")
    return User.objects.create_user(
        username="reception1", password="Front-desk-pass1", role=User.ROLE_RECEPTIONIST, staff=staff,
    )


@pytest.fixture
def account(db):
    patient = Patient.objects.create(first_name="Rahima", last_name="Khatun", full_name="Rahima Khatun",
                                     phone_number="01700000000")
    return PatientAccount.objects.create(patient=patient)


@pytest.fixture
def open_shift(receptionist):
    return Shift.objects.create(staff=receptionist.staff, opening_cash=Decimal("1000"),
                                system_cash=Decimal("1000"))


@pytest.fixture
def surgery_charge(account, surgery):
    return ServiceCharge.objects.create(
        patient_account=account, service_name="Appendectomy", department=surgery,
        original_amount=Decimal("500"), final_amount=Decimal("500"),
    )
