"""
Cookie-based session authentication.

The login view issues a signed JWT (SimpleJWT access token) in an
HttpOnly cookie and stores a matching :class:`UserSession` row.  Every
request re-validates the token signature and expiry, the server-side
session row, and the user/staff records behind it.  Keeping this class
free of view imports avoids circular imports when Django REST framework
loads authentication classes during start-up.
"""
from __future__ import annotations

from django.conf import settings
from django.utils import timezone
from rest_framework import authentication, exceptions
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import AccessToken

from .models import User, UserSession


class SessionCookieAuthentication(authentication.BaseAuthentication):
    """Authenticate from the ``session`` cookie and enforce CSRF on writes."""

    def authenticate(self, request):
        raw = request.COOKIES.get(settings.SESSION_JWT_COOKIE)
        if not raw:
            return None

        try:
            token = AccessToken(raw)
        except TokenError:
            raise exceptions.AuthenticationFailed('Session expired or invalid')

        user = self._load_user(token)
        self.enforce_csrf(request)
        return (user, token)

    def _load_user(self, token) -> User:
        jti = token.get('jti')
        session = (
            UserSession.objects.select_related('user', 'user__staff')
            .filter(jti=jti)
            .first()
        )
        if session is None or session.is_expired(timezone.now()):
            raise exceptions.AuthenticationFailed('Session expired or invalid')

        user = session.user
        if str(user.pk) != str(token.get(settings.SIMPLE_JWT['USER_ID_CLAIM'])):
            raise exceptions.AuthenticationFailed('Session expired or invalid')
        if not user.is_active or user.archived:
            raise exceptions.AuthenticationFailed('Account is disabled')
        if user.staff_id and not user.staff.is_active:
            raise exceptions.AuthenticationFailed('Staff record is inactive')
        return user

    def enforce_csrf(self, request):
        """Same check Django applies to form posts: csrftoken cookie + X-CSRFToken."""
        def dummy_get_response(request):  # pragma: no cover
            return None

        check = authentication.CSRFCheck(dummy_get_response)
        check.process_request(request)
        reason = check.process_view(request, None, (), {})
        if reason:
            raise exceptions.PermissionDenied(f'CSRF Failed: {reason}')

    def authenticate_header(self, request):
        return 'Cookie realm="api"'
