"""
Lookup endpoints: referring hospitals and the admin activity log.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..permissions import HasStaffRecord, IsAdminRole, IsFrontDesk
from ..serializers.directory import (
    ActivityLogQuerySerializer,
    HospitalCreateSerializer,
    HospitalListQuerySerializer,
)
from ..services.audit import list_activity_logs, serialize_activity_log
from ..services.hospitals import create_hospital, list_hospitals, serialize_hospital
from ..services.paging import paginate


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsFrontDesk, HasStaffRecord])
def hospitals(request):
    """``GET`` searches hospitals by name or address (at most 100 rows);
    ``POST`` adds one, refusing a name that already exists."""
    if request.method == 'GET':
        q = HospitalListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        v = q.validated_data
        rows = list_hospitals(search=v.get('search'), type=v.get('type'), limit=v['limit'])
        return Response({'success': True, 'data': [serialize_hospital(h) for h in rows]})

    s = HospitalCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    hospital = create_hospital(user=request.user, data=dict(s.validated_data), request=request)
    return Response(
        {'success': True, 'data': serialize_hospital(hospital), 'message': 'Hospital created successfully'},
        status=status.HTTP_201_CREATED,
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def activity_logs(request):
    q = ActivityLogQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    v = q.validated_data
    qs = list_activity_logs(
        actions=v.get('activityTypes'),
        search=v.get('searchQuery'),
        start_date=v.get('startDate'),
        end_date=v.get('endDate'),
    )
    rows, meta = paginate(qs, v['page'], v['pageSize'])
    return Response({
        'success': True,
        'data': [serialize_activity_log(r) for r in rows],
        'total': meta['total'],
        'currentPage': meta['page'],
        'totalPages': meta['totalPages'],
        'pageSize': meta['limit'],
    })
