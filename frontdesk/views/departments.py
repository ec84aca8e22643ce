"""
Department lookup used to populate filter drop-downs.
"""
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..services.cash_report import active_departments


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def departments(request):
    return Response({'success': True, 'data': active_departments()})
