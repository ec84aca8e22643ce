"""
Dashboard endpoints.

``/api/dashboard`` returns the day's counters, recent patients and the
caller's open cash session; the ``session-cash`` pair returns the cash
report for a date preset (the detailed variant adds per-payment rows for
PDF/CSV export).
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..permissions import IsFrontDesk
from ..serializers.cash import SessionCashQuerySerializer
from ..services.cash_report import build_session_cash_report
from ..services.dashboard import build_dashboard


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsFrontDesk])
def dashboard(request):
    try:
        limit = int(request.query_params.get('recentLimit', 5))
    except (TypeError, ValueError):
        limit = 5
    limit = max(1, min(limit, 50))
    return Response({'success': True, 'data': build_dashboard(request.user, recent_limit=limit)})


def _session_cash(request, detailed: bool):
    q = SessionCashQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    v = q.validated_data
    data = build_session_cash_report(
        request.user,
        preset=v['datePreset'],
        department_id=v['departmentId'],
        start_date=v['startDate'].isoformat() if v.get('startDate') else None,
        end_date=v['endDate'].isoformat() if v.get('endDate') else None,
        detailed=detailed,
    )
    return Response({'success': True, 'data': data})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsFrontDesk])
def session_cash(request):
    """Cash collected by the caller's shifts in the selected period."""
    return _session_cash(request, detailed=False)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsFrontDesk])
def session_cash_detailed(request):
    """Same report with one row per payment/allocation and patient identity."""
    return _session_cash(request, detailed=True)
