"""
Cash shift endpoints: the caller's own shift, and the admin overview of
every staff member's shifts.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..permissions import HasStaffRecord, IsAdminRole, IsFrontDesk
from ..serializers.cash import AdminShiftsQuerySerializer
from ..serializers.shifts import EndShiftSerializer, StartShiftSerializer
from ..services import shifts as shift_service
from ..services.periods import resolve_window


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsFrontDesk, HasStaffRecord])
def current_shift(request):
    shift = shift_service.active_shift(request.user.staff)
    data = shift_service.serialize_shift(shift) if shift else None
    return Response({'success': True, 'data': data})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsFrontDesk, HasStaffRecord])
def start_shift(request):
    s = StartShiftSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    shift = shift_service.start_shift(
        user=request.user,
        opening_cash=s.validated_data['openingCash'],
        notes=s.validated_data['notes'],
        request=request,
    )
    return Response(
        {'success': True, 'data': shift_service.serialize_shift(shift, payments_count=0),
         'message': 'Shift started'},
        status=status.HTTP_201_CREATED,
    )


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsFrontDesk, HasStaffRecord])
def end_shift(request):
    s = EndShiftSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    shift = shift_service.end_shift(
        user=request.user,
        closing_cash=s.validated_data['closingCash'],
        notes=s.validated_data['notes'],
        request=request,
    )
    return Response({'success': True, 'data': shift_service.serialize_shift(shift), 'message': 'Shift closed'})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_shifts(request):
    """Every staff member's shifts in the period with collected/refunded totals."""
    q = AdminShiftsQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    v = q.validated_data
    window = resolve_window(
        v['datePreset'],
        v['startDate'].isoformat() if v.get('startDate') else None,
        v['endDate'].isoformat() if v.get('endDate') else None,
    )
    rows, summary = shift_service.list_shifts(window, status=v['status'], search=v['search'].strip())
    return Response({
        'success': True,
        'data': {
            'shifts': rows,
            'summary': summary,
            'periodLabel': window.period_label,
        },
    })
