from datetime import timedelta
from typing import Optional

from django.contrib.auth import get_user_model
from django.db.models import Q

from frontdesk.models import ActivityLog

from .periods import iso_utc, local_midnight

User = get_user_model()


def client_ip(request) -> Optional[str]:
    if request is None:
        return None
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR', '')
    if forwarded:
        return forwarded.split(',')[0].strip() or None
    return request.META.get('REMOTE_ADDR') or None


def log_action(*, user: Optional[User], action: str, description: str = '', entity_type: Optional[str] = None,
               entity_id: Optional[int] = None, request=None) -> ActivityLog:
    return ActivityLog.objects.create(
        user=user if isinstance(user, User) and user.pk else None,
        action=action,
        description=description,
        entity_type=entity_type,
        entity_id=entity_id,
        ip_address=client_ip(request),
    )


def list_activity_logs(*, actions=None, search=None, start_date=None, end_date=None):
    """Newest first; ``end_date`` is inclusive of the whole local day."""
    qs = ActivityLog.objects.select_related('user')
    if actions:
        qs = qs.filter(action__in=actions)
    if search:
        qs = qs.filter(
            Q(user__username__icontains=search)
            | Q(action__icontains=search)
            | Q(description__icontains=search)
            | Q(ip_address__icontains=search)
        )
    if start_date:
        qs = qs.filter(timestamp__gte=local_midnight(start_date))
    if end_date:
        qs = qs.filter(timestamp__lt=local_midnight(end_date + timedelta(days=1)))
    return qs.order_by('-timestamp', '-id')


def serialize_activity_log(row: ActivityLog) -> dict:
    return {
        'id': row.id,
        'userId': row.user_id,
        'username': row.user.username if row.user_id else None,
        'action': row.action,
        'description': row.description,
        'entityType': row.entity_type,
        'entityId': row.entity_id,
        'ipAddress': row.ip_address,
        'timestamp': iso_utc(row.timestamp),
    }
