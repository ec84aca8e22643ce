"""
Referring hospitals, as picked from the registration forms.
"""
from __future__ import annotations

import logging

from django.db.models import Q

from ..exceptions import ClinicError, CONFLICT
from ..models import Hospital, User
from .audit import log_action

logger = logging.getLogger(__name__)

MAX_HOSPITALS = 100


def list_hospitals(*, search=None, type=None, limit: int = 50):
    qs = Hospital.objects.filter(is_active=True)
    if search:
        qs = qs.filter(Q(name__icontains=search) | Q(address__icontains=search))
    if type:
        qs = qs.filter(type=type)
    return list(qs.order_by('name')[:max(1, min(limit, MAX_HOSPITALS))])


def create_hospital(*, user: User, data: dict, request=None) -> Hospital:
    name = data['name'].strip()
    if Hospital.objects.filter(name__iexact=name).exists():
        raise ClinicError(CONFLICT, 'Hospital with this name already exists', {'name': name})
    hospital = Hospital.objects.create(
        name=name,
        address=data.get('address') or '',
        phone_number=data.get('phone_number') or '',
        email=data.get('email') or '',
        website=data.get('website') or '',
        type=data.get('type') or '',
        created_by=user.staff,
    )
    log_action(user=user, action='CREATE', entity_type='Hospital', entity_id=hospital.id,
               description=f"Created hospital {hospital.name}", request=request)
    logger.info(f"Hospital {hospital.id} '{hospital.name}' created by user {user.id}")
    return hospital


def serialize_hospital(h: Hospital) -> dict:
    return {
        'id': h.id,
        'name': h.name,
        'address': h.address,
        'phoneNumber': h.phone_number,
        'email': h.email,
        'website': h.website,
        'type': h.type,
    }
