"""
Database models for the clinic front desk.

These models capture the administrative side of the clinic: staff and
their login accounts, departments, patients and their billing accounts,
admissions and pathology orders, and the cash-handling ledger (shifts,
payments, per-department allocations and cash movements) that the
dashboard and cash reports read from.
"""
from __future__ import annotations

from decimal import Decimal

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils import timezone

ZERO = Decimal("0")


def _money(**kwargs):
    return models.DecimalField(max_digits=12, decimal_places=2, default=ZERO, **kwargs)


class Department(models.Model):
    """A clinical department that service charges are billed to."""
    name = models.CharField(max_length=120, unique=True)
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['name']

    def __str__(self) -> str:
        return self.name


class Staff(models.Model):
    """A member of the hospital staff (doctor, nurse, receptionist, ...).

    ``role`` is the hospital role shown on rosters and is independent of
    the system role stored on :class:`User`.
    """
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100, blank=True)
    full_name = models.CharField(max_length=200)
    role = models.CharField(max_length=50, default='Receptionist')
    specialization = models.CharField(max_length=120, blank=True)
    email = models.EmailField(blank=True)
    phone_number = models.CharField(max_length=20, blank=True)
    department = models.ForeignKey(
        Department, null=True, blank=True, on_delete=models.SET_NULL, related_name='staff'
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def save(self, *args, **kwargs):
        if not self.full_name:
            self.full_name = f"{self.first_name} {self.last_name}".strip()
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.full_name} ({self.role})"


class User(AbstractUser):
    """Login account with a system role and a link to a staff record.

    Roles mirror the front-end: 'system-admin', 'admin', 'receptionist',
    'receptionist-infertility', 'medicine-pharmacist' and 'staff'.
    """
    ROLE_SYSTEM_ADMIN = 'system-admin'
    ROLE_ADMIN = 'admin'
    ROLE_RECEPTIONIST = 'receptionist'
    ROLE_RECEPTIONIST_INFERTILITY = 'receptionist-infertility'
    ROLE_PHARMACIST = 'medicine-pharmacist'
    ROLE_STAFF = 'staff'
    ROLE_CHOICES = [
        (ROLE_SYSTEM_ADMIN, 'System Administrator'),
        (ROLE_ADMIN, 'Administrator'),
        (ROLE_RECEPTIONIST, 'Receptionist'),
        (ROLE_RECEPTIONIST_INFERTILITY, 'Receptionist (Infertility)'),
        (ROLE_PHARMACIST, 'Pharmacist'),
        (ROLE_STAFF, 'Staff'),
    ]
    role = models.CharField(max_length=32, choices=ROLE_CHOICES, default=ROLE_STAFF)
    staff = models.OneToOneField(
        Staff, null=True, blank=True, on_delete=models.SET_NULL, related_name='user'
    )
    archived = models.BooleanField(default=False)

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"

    @property
    def full_name(self) -> str:
        if self.staff_id and self.staff:
            return self.staff.full_name
        return self.get_full_name() or self.username


class UserSession(models.Model):
    """Server-side record of an issued session token.

    A session cookie is honoured only while its row exists and has not
    expired, so deleting the row logs the browser out.
    """
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='sessions')
    jti = models.CharField(max_length=64, unique=True)
    expires_at = models.DateTimeField()
    ip_address = models.GenericIPAddressField(blank=True, null=True)
    user_agent = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def is_expired(self, now=None) -> bool:
        return self.expires_at <= (now or timezone.now())

    def __str__(self) -> str:
        return f"session {self.jti[:8]} u={self.user_id}"


class Hospital(models.Model):
    """Referring hospital recorded on patient registration."""
    name = models.CharField(max_length=200)
    address = models.CharField(max_length=255, blank=True)
    phone_number = models.CharField(max_length=20, blank=True)
    email = models.EmailField(blank=True)
    website = models.CharField(max_length=200, blank=True)
    type = models.CharField(max_length=50, blank=True)
    is_active = models.BooleanField(default=True)
    created_by = models.ForeignKey(Staff, null=True, blank=True, on_delete=models.SET_NULL, related_name='+')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return self.name


class Patient(models.Model):
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100, blank=True)
    full_name = models.CharField(max_length=200, db_index=True)
    gender = models.CharField(max_length=10, blank=True)
    date_of_birth = models.DateField(null=True, blank=True)
    address = models.CharField(max_length=255, blank=True)
    phone_number = models.CharField(max_length=20, blank=True, db_index=True)
    email = models.EmailField(blank=True)
    blood_group = models.CharField(max_length=5, blank=True)
    guardian_name = models.CharField(max_length=200, blank=True)
    guardian_phone = models.CharField(max_length=20, blank=True)
    hospital = models.ForeignKey(Hospital, null=True, blank=True, on_delete=models.SET_NULL, related_name='patients')
    created_by = models.ForeignKey(Staff, null=True, blank=True, on_delete=models.SET_NULL, related_name='+')
    created_at = models.DateTimeField(auto_now_add=True)

    @property
    def registration_id(self) -> str:
        return f"REG-{self.id:06d}"

    def __str__(self) -> str:
        return f"{self.full_name} ({self.registration_id})"


class PatientAccount(models.Model):
    """Running billing balance of a patient."""
    patient = models.OneToOneField(Patient, on_delete=models.CASCADE, related_name='account')
    total_charges = _money()
    total_paid = _money()
    total_due = _money()
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"account p={self.patient_id} due={self.total_due}"


class Admission(models.Model):
    STATUS_ADMITTED = 'Admitted'
    STATUS_DISCHARGED = 'Discharged'
    STATUS_CANCELED = 'Canceled'
    STATUS_CHOICES = [
        (STATUS_ADMITTED, 'Admitted'),
        (STATUS_DISCHARGED, 'Discharged'),
        (STATUS_CANCELED, 'Canceled'),
    ]
    admission_number = models.CharField(max_length=32, unique=True)
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='admissions')
    department = models.ForeignKey(Department, on_delete=models.PROTECT, related_name='admissions')
    doctor = models.ForeignKey(Staff, on_delete=models.PROTECT, related_name='admissions')
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_ADMITTED, db_index=True)
    date_admitted = models.DateTimeField(default=timezone.now, db_index=True)
    date_discharged = models.DateTimeField(null=True, blank=True)
    is_discharged = models.BooleanField(default=False, db_index=True)
    seat_number = models.CharField(max_length=20, blank=True)
    ward = models.CharField(max_length=50, blank=True)
    diagnosis = models.TextField(blank=True)
    chief_complaint = models.TextField(blank=True)
    remarks = models.TextField(blank=True)
    admission_fee = _money()
    total_amount = _money()
    discount_amount = _money()
    grand_total = _money()
    paid_amount = _money()
    due_amount = _money()
    created_by = models.ForeignKey(Staff, null=True, blank=True, on_delete=models.SET_NULL, related_name='+')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-date_admitted']

    def __str__(self) -> str:
        return self.admission_number


class PathologyTest(models.Model):
    test_number = models.CharField(max_length=32, unique=True)
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='pathology_tests')
    ordered_by = models.ForeignKey(Staff, null=True, blank=True, on_delete=models.SET_NULL, related_name='+')
    test_category = models.CharField(max_length=100, blank=True)
    test_names = models.CharField(max_length=500, blank=True)
    test_date = models.DateTimeField(default=timezone.now, db_index=True)
    report_date = models.DateTimeField(null=True, blank=True)
    is_completed = models.BooleanField(default=False, db_index=True)
    total_amount = _money()
    discount_amount = _money()
    grand_total = _money()
    paid_amount = _money()
    due_amount = _money()
    remarks = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-test_date']

    def __str__(self) -> str:
        return self.test_number


class ServiceCharge(models.Model):
    """A billable line on a patient account, attributed to a department."""
    TYPE_ADMISSION = 'ADMISSION'
    TYPE_PATHOLOGY = 'PATHOLOGY_TEST'
    TYPE_GENERAL = 'GENERAL'
    TYPE_CHOICES = [
        (TYPE_ADMISSION, 'Admission'),
        (TYPE_PATHOLOGY, 'Pathology test'),
        (TYPE_GENERAL, 'General'),
    ]
    patient_account = models.ForeignKey(PatientAccount, on_delete=models.CASCADE, related_name='service_charges')
    service_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=TYPE_GENERAL)
    service_name = models.CharField(max_length=200)
    department = models.ForeignKey(Department, on_delete=models.PROTECT, related_name='service_charges')
    original_amount = _money()
    discount_amount = _money()
    final_amount = _money()
    admission = models.ForeignKey(Admission, null=True, blank=True, on_delete=models.SET_NULL, related_name='service_charges')
    service_date = models.DateTimeField(default=timezone.now)
    created_by = models.ForeignKey(Staff, null=True, blank=True, on_delete=models.SET_NULL, related_name='+')

    def __str__(self) -> str:
        return f"{self.service_name} [{self.department_id}]"


class Shift(models.Model):
    """A staff member's cash-handling session from clock-in to clock-out.

    ``system_cash`` is what the drawer should hold according to the
    ledger; ``variance`` is ``closing_cash - system_cash`` once closed.
    ``total_collected`` and ``total_refunded`` are running aggregates kept
    in step with the payments and refunds recorded against the shift.
    """
    staff = models.ForeignKey(Staff, on_delete=models.CASCADE, related_name='shifts')
    start_time = models.DateTimeField(default=timezone.now, db_index=True)
    end_time = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True, db_index=True)
    opening_cash = _money()
    closing_cash = _money()
    system_cash = _money()
    variance = _money()
    total_collected = _money()
    total_refunded = _money()
    notes = models.TextField(blank=True)

    class Meta:
        indexes = [
            models.Index(fields=['staff', 'start_time'], name='frontdesk_s_staff_i_5a1c2e_idx'),
            models.Index(fields=['staff', 'is_active'], name='frontdesk_s_staff_i_8b3d4f_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['staff'], condition=models.Q(is_active=True), name='one_active_shift_per_staff'
            ),
        ]

    def __str__(self) -> str:
        return f"Shift(s={self.staff_id}, {self.start_time:%F %T}, active={self.is_active})"


class Payment(models.Model):
    METHOD_CHOICES = [
        ('Cash', 'Cash'),
        ('Card', 'Card'),
        ('bKash', 'bKash'),
        ('Bank', 'Bank'),
    ]
    patient_account = models.ForeignKey(PatientAccount, on_delete=models.PROTECT, related_name='payments')
    shift = models.ForeignKey(Shift, on_delete=models.PROTECT, related_name='payments')
    collected_by = models.ForeignKey(Staff, on_delete=models.PROTECT, related_name='payments_collected')
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    payment_method = models.CharField(max_length=16, choices=METHOD_CHOICES, default='Cash')
    payment_date = models.DateTimeField(default=timezone.now, db_index=True)
    receipt_number = models.CharField(max_length=64, unique=True)
    notes = models.TextField(blank=True)

    class Meta:
        indexes = [models.Index(fields=['shift', 'payment_date'], name='frontdesk_p_shift_i_2e7a9c_idx')]

    def __str__(self) -> str:
        return f"{self.receipt_number} {self.amount}"


class PaymentAllocation(models.Model):
    """The portion of a payment attributed to one service charge."""
    payment = models.ForeignKey(Payment, on_delete=models.CASCADE, related_name='allocations')
    service_charge = models.ForeignKey(ServiceCharge, on_delete=models.PROTECT, related_name='allocations')
    allocated_amount = models.DecimalField(max_digits=12, decimal_places=2)

    def __str__(self) -> str:
        return f"alloc p={self.payment_id} sc={self.service_charge_id} {self.allocated_amount}"


class CashMovement(models.Model):
    TYPE_OPENING = 'OPENING'
    TYPE_COLLECTION = 'COLLECTION'
    TYPE_REFUND = 'REFUND'
    TYPE_ADJUSTMENT = 'ADJUSTMENT'
    TYPE_CLOSING = 'CLOSING'
    TYPE_CHOICES = [
        (TYPE_OPENING, 'Opening'),
        (TYPE_COLLECTION, 'Collection'),
        (TYPE_REFUND, 'Refund'),
        (TYPE_ADJUSTMENT, 'Adjustment'),
        (TYPE_CLOSING, 'Closing'),
    ]
    shift = models.ForeignKey(Shift, on_delete=models.CASCADE, related_name='cash_movements')
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    movement_type = models.CharField(max_length=16, choices=TYPE_CHOICES)
    description = models.CharField(max_length=255, blank=True)
    payment = models.ForeignKey(Payment, null=True, blank=True, on_delete=models.SET_NULL, related_name='cash_movements')
    created_at = models.DateTimeField(default=timezone.now)

    def __str__(self) -> str:
        return f"{self.movement_type} {self.amount} shift={self.shift_id}"


class HospitalConfig(models.Model):
    """Key/value configuration editable from the admin site."""
    key = models.CharField(max_length=64, unique=True)
    value = models.CharField(max_length=255)

    def __str__(self) -> str:
        return f"{self.key}={self.value}"


class ActivityLog(models.Model):
    ACTION_CHOICES = (
        ("LOGIN", "LOGIN"),
        ("LOGOUT", "LOGOUT"),
        ("CREATE", "CREATE"),
        ("UPDATE", "UPDATE"),
        ("DELETE", "DELETE"),
        ("SHIFT_START", "SHIFT_START"),
        ("SHIFT_END", "SHIFT_END"),
        ("PAYMENT", "PAYMENT"),
        ("REFUND", "REFUND"),
    )
    user = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='activity')
    action = models.CharField(max_length=32, choices=ACTION_CHOICES)
    description = models.TextField(blank=True)
    entity_type = models.CharField(max_length=64, blank=True, null=True)
    entity_id = models.IntegerField(blank=True, null=True)
    ip_address = models.GenericIPAddressField(blank=True, null=True)
    timestamp = models.DateTimeField(default=timezone.now)

    class Meta:
        indexes = [
            models.Index(fields=["action", "timestamp"], name="frontdesk_a_action_4c6e1b_idx"),
            models.Index(fields=["entity_type", "entity_id", "timestamp"], name="frontdesk_a_entity__9d2f3a_idx"),
        ]

    def __str__(self):
        return f"{self.action}:{self.user_id}@{self.timestamp:%F %T}"
