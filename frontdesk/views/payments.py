from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..permissions import HasStaffRecord, IsFrontDesk
from ..serializers.payments import PaymentCreateSerializer, RefundSerializer
from ..services import payments as payment_service
from ..services.periods import iso_utc


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsFrontDesk, HasStaffRecord])
def collect_payment(request):
    s = PaymentCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    payment = payment_service.record_payment(
        user=request.user,
        patient_account_id=v['patientAccountId'],
        amount=v['amount'],
        allocations=v['allocations'],
        payment_method=v['paymentMethod'],
        notes=v['notes'],
        request=request,
    )
    return Response({
        'success': True,
        'data': {
            'paymentId': payment.id,
            'receiptNumber': payment.receipt_number,
            'amount': payment.amount,
            'paymentMethod': payment.payment_method,
            'paymentDate': iso_utc(payment.payment_date),
            'shiftId': payment.shift_id,
        },
    }, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsFrontDesk, HasStaffRecord])
def refund_payment(request):
    s = RefundSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    movement = payment_service.refund(
        user=request.user,
        amount=v['amount'],
        payment_id=v.get('paymentId'),
        reason=v['reason'],
        request=request,
    )
    return Response({
        'success': True,
        'data': {
            'movementId': movement.id,
            'shiftId': movement.shift_id,
            'paymentId': movement.payment_id,
            'amount': movement.amount,
            'createdAt': iso_utc(movement.created_at),
        },
    }, status=status.HTTP_201_CREATED)
