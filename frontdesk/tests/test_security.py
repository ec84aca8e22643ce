"""
Security-related behaviour: scanner probes, disabled accounts, revoked or
expired sessions and login throttling.
"""
from datetime import timedelta

from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from frontdesk.models import Staff, User, UserSession

PASSWORD = "Front-desk-pass1"


class SecurityTests(TestCase):
    def setUp(self) -> None:
        staff = Staff.objects.create(first_name="Ratna", last_name="Akther")
        self.user = User.objects.create_user(
            username="reception1", password=PASSWORD, role=User.ROLE_RECEPTIONIST, staff=staff,
        )
        self.client = APIClient()

    def login(self, password=PASSWORD):
        return self.client.post("/api/auth/login", {"username": "reception1", "password": password}, format="json")

    def test_scanner_paths_get_a_plain_404(self):
        for path in ("/.env", "/wp-admin/setup.php", "/vendor/phpunit/x", "/.git/config"):
            response = self.client.get(path)
            self.assertEqual(response.status_code, 404, path)
            self.assertEqual(response.json(), {"success": False, "error": "Not found"})

    def test_health_check(self):
        response = self.client.get("/healthz")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["db"])

    def test_archived_user_cannot_log_in(self):
        self.user.archived = True
        self.user.save()
        self.assertEqual(self.login().status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(UserSession.objects.exists())

    def test_deleted_session_row_invalidates_cookie(self):
        self.assertEqual(self.login().status_code, status.HTTP_200_OK)
        UserSession.objects.all().delete()
        self.assertEqual(self.client.get("/api/auth/verify-session").status_code, status.HTTP_401_UNAUTHORIZED)

    def test_expired_session_row_invalidates_cookie(self):
        self.login()
        UserSession.objects.update(expires_at=timezone.now() - timedelta(seconds=1))
        self.assertEqual(self.client.get("/api/auth/verify-session").status_code, status.HTTP_401_UNAUTHORIZED)

    def test_user_archived_after_login_is_locked_out(self):
        self.login()
        User.objects.filter(pk=self.user.pk).update(archived=True)
        response = self.client.get("/api/auth/verify-session")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data["error"], "Account is disabled")

    def test_inactive_staff_record_is_locked_out(self):
        self.login()
        Staff.objects.update(is_active=False)
        self.assertEqual(self.client.get("/api/auth/verify-session").status_code, status.HTTP_401_UNAUTHORIZED)

    def test_garbage_cookie_is_401(self):
        self.client.cookies["session"] = "not-a-jwt"
        self.assertEqual(self.client.get("/api/auth/verify-session").status_code, status.HTTP_401_UNAUTHORIZED)

    def test_login_is_throttled(self):
        for _ in range(10):
            self.login(password="wrong")
        self.assertEqual(self.login().status_code, status.HTTP_429_TOO_MANY_REQUESTS)
