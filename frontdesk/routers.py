"""
URL mappings for the clinic front-desk API.

Paths mirror the ones the front-end calls; trailing slashes are
deliberately omitted.
"""
from django.urls import include, path

from .auth_views import login_view, logout_view, verify_session_view
from .views import admissions, dashboard, departments, directory, health, pathology, payments, shifts

urlpatterns = [
    path('', include('django_prometheus.urls')),
    path('healthz', health.healthz, name='healthz'),
    # Authentication
    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/logout', logout_view, name='logout_view'),
    path('api/auth/verify-session', verify_session_view, name='verify_session_view'),
    # Dashboard & cash reports
    path('api/dashboard', dashboard.dashboard, name='dashboard'),
    path('api/dashboard/session-cash', dashboard.session_cash, name='session_cash'),
    path('api/dashboard/session-cash/detailed', dashboard.session_cash_detailed, name='session_cash_detailed'),
    # Shifts
    path('api/shifts/current', shifts.current_shift, name='current_shift'),
    path('api/shifts/start', shifts.start_shift, name='start_shift'),
    path('api/shifts/end', shifts.end_shift, name='end_shift'),
    path('api/admin/shifts', shifts.admin_shifts, name='admin_shifts'),
    path('api/admin/activity-logs', directory.activity_logs, name='activity_logs'),
    # Front desk
    path('api/departments', departments.departments, name='departments'),
    path('api/admissions', admissions.admissions, name='admissions'),
    path('api/admissions/<int:admission_id>', admissions.admission_detail, name='admission_detail'),
    path('api/pathology-patients', pathology.pathology_tests, name='pathology_tests'),
    path('api/pathology-patients/<int:test_id>', pathology.pathology_test_detail, name='pathology_test_detail'),
    path('api/hospitals', directory.hospitals, name='hospitals'),
    path('api/payments', payments.collect_payment, name='collect_payment'),
    path('api/payments/refund', payments.refund_payment, name='refund_payment'),
]
