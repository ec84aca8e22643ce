"""
General admission endpoints.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..permissions import HasStaffRecord, IsFrontDesk
from ..serializers.admissions import (
    AdmissionCreateSerializer,
    AdmissionListQuerySerializer,
    AdmissionUpdateSerializer,
)
from ..services.admissions import (
    create_admission,
    get_admission,
    list_admissions,
    serialize_admission,
    update_admission,
)
from ..services.paging import paginate


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsFrontDesk, HasStaffRecord])
def admissions(request):
    """``GET`` lists admissions (filters: search, startDate, endDate, status,
    departmentId; paged with page/limit).  ``POST`` admits a patient and,
    when the clerk has a shift open, books the admission fee as a cash
    collection.
    """
    if request.method == 'GET':
        q = AdmissionListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        v = q.validated_data
        qs = list_admissions(
            search=v.get('search'),
            start_date=v.get('startDate'),
            end_date=v.get('endDate'),
            status=v.get('status'),
            department_id=v.get('departmentId'),
        )
        items, meta = paginate(qs, v['page'], v['limit'])
        return Response({'success': True, 'data': [serialize_admission(a) for a in items], 'pagination': meta})

    s = AdmissionCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = dict(s.validated_data)
    admission = create_admission(
        user=request.user,
        patient=v.pop('patient'),
        hospital=v.pop('hospital', None),
        department_id=v.pop('departmentId'),
        doctor_id=v.pop('doctorId'),
        details=v,
        request=request,
    )
    return Response(
        {'success': True, 'data': serialize_admission(admission), 'message': 'Patient admitted successfully'},
        status=status.HTTP_201_CREATED,
    )


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated, IsFrontDesk, HasStaffRecord])
def admission_detail(request, admission_id: int):
    """One admission; ``PATCH`` changes status (discharge, cancel, restore),
    details, discount or collects more of the bill."""
    if request.method == 'GET':
        return Response({'success': True, 'data': serialize_admission(get_admission(admission_id))})

    s = AdmissionUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    admission = update_admission(
        user=request.user, admission_id=admission_id, changes=dict(s.validated_data), request=request,
    )
    return Response({'success': True, 'data': serialize_admission(admission), 'message': 'Admission updated successfully'})
