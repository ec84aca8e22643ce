"""
Authentication views and helper functions.

Login issues a SimpleJWT access token in the HttpOnly ``session`` cookie
and records a matching :class:`UserSession` row; logout deletes the row
so the cookie stops working even before it expires.  The authentication
class that reads the cookie lives in ``frontdesk.authentication`` so
that Django REST framework can import it without pulling in views.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone as dt_timezone

from django.conf import settings
from django.contrib.auth import authenticate
from django.contrib.auth.models import update_last_login
from django.middleware.csrf import get_token
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle
from rest_framework_simplejwt.tokens import AccessToken

from .exceptions import ClinicError, UNAUTHORIZED
from .models import User, UserSession
from .serializers.auth import LoginSerializer
from .services.audit import client_ip, log_action

logger = logging.getLogger(__name__)


class LoginRateThrottle(AnonRateThrottle):
    scope = 'login'


def serialize_user(user: User) -> dict:
    staff = user.staff if user.staff_id else None
    return {
        'id': user.id,
        'username': user.username,
        'fullName': user.full_name,
        'role': user.role,
        'staffId': user.staff_id,
        'staffRole': staff.role if staff else None,
        'departmentId': staff.department_id if staff else None,
    }


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def login_view(request):
    """
    Username/password login.  Archived or deactivated accounts are
    rejected with the same message as a wrong password.
    """
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    username = s.validated_data['username']

    user = authenticate(request, username=username, password=s.validated_data['password'])
    if user is None or user.archived:
        log_action(user=None, action='LOGIN', description=f"Failed login for {username}", request=request)
        logger.warning(f"Failed login for {username} from {client_ip(request)}")
        raise ClinicError(UNAUTHORIZED, 'Invalid username or password')

    token = AccessToken.for_user(user)
    UserSession.objects.create(
        user=user,
        jti=token['jti'],
        expires_at=datetime.fromtimestamp(token['exp'], tz=dt_timezone.utc),
        ip_address=client_ip(request),
        user_agent=(request.META.get('HTTP_USER_AGENT') or '')[:255],
    )
    update_last_login(None, user)
    log_action(user=user, action='LOGIN', entity_type='User', entity_id=user.id,
               description=f"{user.username} logged in", request=request)

    resp = Response({
        'success': True,
        'data': {'user': serialize_user(user), 'csrfToken': get_token(request)},
    })
    resp.set_cookie(
        settings.SESSION_JWT_COOKIE,
        str(token),
        max_age=settings.SESSION_TTL_SECONDS,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite='Lax',
    )
    return resp


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout_view(request):
    """Revoke the current session row and clear the cookie."""
    UserSession.objects.filter(jti=request.auth['jti']).delete()
    log_action(user=request.user, action='LOGOUT', entity_type='User', entity_id=request.user.id,
               description=f"{request.user.username} logged out", request=request)
    resp = Response({'success': True, 'message': 'Logged out'})
    resp.delete_cookie(settings.SESSION_JWT_COOKIE, samesite='Lax')
    return resp


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def verify_session_view(request):
    return Response({'success': True, 'data': {'user': serialize_user(request.user)}})
