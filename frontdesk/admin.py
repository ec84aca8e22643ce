"""
Django admin registrations for the front-desk models.

Superusers can inspect and correct departments, staff, shifts and the
payment ledger through ``/admin/``.  Payments and cash movements are
shown read-only because the shift totals are kept in step with them.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from .models import (
    ActivityLog,
    Admission,
    CashMovement,
    Department,
    Hospital,
    HospitalConfig,
    PathologyTest,
    Patient,
    Payment,
    PaymentAllocation,
    ServiceCharge,
    Shift,
    Staff,
    User,
    UserSession,
)


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'is_active', 'created_at')
    list_filter = ('is_active',)
    search_fields = ('name',)


@admin.register(Staff)
class StaffAdmin(admin.ModelAdmin):
    list_display = ('id', 'full_name', 'role', 'department', 'is_active')
    list_filter = ('role', 'department', 'is_active')
    search_fields = ('full_name', 'email', 'phone_number')


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    list_display = ('username', 'role', 'staff', 'archived', 'is_active', 'is_superuser')
    list_filter = ('role', 'archived', 'is_active')
    fieldsets = DjangoUserAdmin.fieldsets + (('Clinic', {'fields': ('role', 'staff', 'archived')}),)


@admin.register(UserSession)
class UserSessionAdmin(admin.ModelAdmin):
    list_display = ('user', 'created_at', 'expires_at', 'ip_address')
    search_fields = ('user__username', 'jti')


@admin.register(Hospital)
class HospitalAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'type', 'is_active')
    search_fields = ('name',)


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('id', 'full_name', 'gender', 'phone_number', 'hospital', 'created_at')
    search_fields = ('full_name', 'phone_number')


@admin.register(Admission)
class AdmissionAdmin(admin.ModelAdmin):
    list_display = ('admission_number', 'patient', 'department', 'status', 'date_admitted', 'paid_amount', 'due_amount')
    list_filter = ('status', 'department', 'is_discharged')
    search_fields = ('admission_number', 'patient__full_name')


@admin.register(PathologyTest)
class PathologyTestAdmin(admin.ModelAdmin):
    list_display = ('test_number', 'patient', 'test_category', 'test_date', 'is_completed', 'grand_total', 'due_amount')
    list_filter = ('is_completed',)
    search_fields = ('test_number', 'patient__full_name')


@admin.register(ServiceCharge)
class ServiceChargeAdmin(admin.ModelAdmin):
    list_display = ('id', 'service_name', 'service_type', 'department', 'final_amount', 'service_date')
    list_filter = ('service_type', 'department')


class PaymentAllocationInline(admin.TabularInline):
    model = PaymentAllocation
    extra = 0
    can_delete = False
    readonly_fields = ('service_charge', 'allocated_amount')


@admin.register(Shift)
class ShiftAdmin(admin.ModelAdmin):
    list_display = ('id', 'staff', 'start_time', 'end_time', 'is_active', 'total_collected', 'total_refunded', 'variance')
    list_filter = ('is_active',)
    search_fields = ('staff__full_name',)


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ('receipt_number', 'amount', 'payment_method', 'payment_date', 'shift', 'collected_by')
    list_filter = ('payment_method',)
    search_fields = ('receipt_number',)
    inlines = [PaymentAllocationInline]

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(CashMovement)
class CashMovementAdmin(admin.ModelAdmin):
    list_display = ('id', 'shift', 'movement_type', 'amount', 'created_at')
    list_filter = ('movement_type',)

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(HospitalConfig)
class HospitalConfigAdmin(admin.ModelAdmin):
    list_display = ('key', 'value')


@admin.register(ActivityLog)
class ActivityLogAdmin(admin.ModelAdmin):
    list_display = ('timestamp', 'user', 'action', 'entity_type', 'entity_id')
    list_filter = ('action', 'entity_type')
    search_fields = ('description', 'user__username')
