"""
Pathology test endpoints.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..permissions import HasStaffRecord, IsFrontDesk
from ..serializers.pathology import (
    PathologyCreateSerializer,
    PathologyListQuerySerializer,
    PathologyUpdateSerializer,
)
from ..services.paging import paginate
from ..services.pathology import (
    create_pathology_test,
    get_pathology_test,
    list_pathology_tests,
    serialize_pathology_test,
    update_pathology_test,
)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsFrontDesk, HasStaffRecord])
def pathology_tests(request):
    """``GET`` lists test orders (search, startDate, endDate, isCompleted,
    testCategory; page/limit).  ``POST`` registers an order and books any
    up-front payment on the clerk's open shift.
    """
    if request.method == 'GET':
        q = PathologyListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        v = q.validated_data
        qs = list_pathology_tests(
            search=v.get('search'),
            start_date=v.get('startDate'),
            end_date=v.get('endDate'),
            is_completed=v.get('isCompleted'),
            test_category=v.get('testCategory'),
        )
        items, meta = paginate(qs, v['page'], v['limit'])
        return Response({'success': True, 'data': [serialize_pathology_test(t) for t in items], 'pagination': meta})

    s = PathologyCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = dict(s.validated_data)
    test = create_pathology_test(
        user=request.user,
        patient=v.pop('patient'),
        hospital=v.pop('hospital', None),
        order=v,
        request=request,
    )
    return Response(
        {'success': True, 'data': serialize_pathology_test(test),
         'message': 'Pathology test record created successfully'},
        status=status.HTTP_201_CREATED,
    )


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated, IsFrontDesk, HasStaffRecord])
def pathology_test_detail(request, test_id: int):
    if request.method == 'GET':
        return Response({'success': True, 'data': serialize_pathology_test(get_pathology_test(test_id))})

    s = PathologyUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    test = update_pathology_test(user=request.user, test_id=test_id, changes=dict(s.validated_data), request=request)
    return Response({'success': True, 'data': serialize_pathology_test(test),
                     'message': 'Pathology test updated successfully'})
