"""
Seed departments, a doctor roster and one login per system role.

Idempotent: re-running resets the seeded users' passwords and roles but
leaves other data alone.  Development use only.
"""
from django.contrib.auth.hashers import make_password
from django.core.management.base import BaseCommand
from django.db import transaction

from frontdesk.models import Department, HospitalConfig, Staff, User

DEPARTMENTS = [
    "Gynecology", "Surgery", "Medicine", "Pediatrics", "Cardiology", "ENT",
    "Orthopedics", "Radiology", "Psychology", "Eye", "Pathology", "Anesthesia",
]

DOCTORS = [
    ("Nasrin", "Akter", "Gynecology", "Obstetrics & Gynecology"),
    ("Kamal", "Hossain", "Surgery", "General Surgery"),
    ("Farhana", "Rahman", "Medicine", "Internal Medicine"),
    ("Tanvir", "Ahmed", "Pediatrics", "Child Health"),
]

# (username, system role, first name, last name, hospital role)
LOGINS = [
    ("sysadmin", User.ROLE_SYSTEM_ADMIN, "System", "Admin", "System Admin"),
    ("admin1", User.ROLE_ADMIN, "Clinic", "Admin", "Administrator"),
    ("reception1", User.ROLE_RECEPTIONIST, "Ratna", "Akther", "Receptionist"),
    ("infertility1", User.ROLE_RECEPTIONIST_INFERTILITY, "Amina", "Begum", "Receptionist"),
    ("pharmacy1", User.ROLE_PHARMACIST, "Zayed", "Islam", "Pharmacist"),
    ("staff1", User.ROLE_STAFF, "Rakibul", "Hasan", "Staff"),
]


class Command(BaseCommand):
    help = "Seed departments, doctors and one user per role (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--password", default="Clinic@12345", help="Password for the seeded users.")

    @transaction.atomic
    def handle(self, *args, **opts):
        depts = {}
        for name in DEPARTMENTS:
            depts[name], created = Department.objects.get_or_create(name=name)
            if created:
                self.stdout.write(f"department: {name}")

        for first, last, dept, spec in DOCTORS:
            Staff.objects.get_or_create(
                first_name=first, last_name=last, role="Doctor",
                defaults={"department": depts[dept], "specialization": spec},
            )

        HospitalConfig.objects.get_or_create(key="ADMISSION_FEE", defaults={"value": "300"})

        password = make_password(opts["password"])
        for username, role, first, last, staff_role in LOGINS:
            staff, _ = Staff.objects.get_or_create(first_name=first, last_name=last, role=staff_role)
            u, created = User.objects.get_or_create(
                username=username,
                defaults={"role": role, "password": password, "staff": staff, "is_active": True},
            )
            if not created:
                u.password = password
                u.role = role
                u.staff = staff
                u.is_active = True
                u.archived = False
                u.save(update_fields=["password", "role", "staff", "is_active", "archived"])
            self.stdout.write(self.style.SUCCESS(f"ok: {username} ({role})"))
        self.stdout.write(self.style.SUCCESS("Clinic seed data ensured."))
