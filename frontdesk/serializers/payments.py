from decimal import Decimal

import bleach
from rest_framework import serializers

from ..models import Payment


class AllocationSerializer(serializers.Serializer):
    serviceChargeId = serializers.IntegerField(min_value=1)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))


class PaymentCreateSerializer(serializers.Serializer):
    patientAccountId = serializers.IntegerField(min_value=1)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    paymentMethod = serializers.ChoiceField(choices=[c for c, _ in Payment.METHOD_CHOICES], default='Cash')
    allocations = AllocationSerializer(many=True, required=False, default=list)
    notes = serializers.CharField(required=False, allow_blank=True, default='', max_length=500)

    def validate_notes(self, v):
        return bleach.clean((v or '').strip(), strip=True)


class RefundSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    paymentId = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    reason = serializers.CharField(required=False, allow_blank=True, default='', max_length=500)

    def validate_reason(self, v):
        return bleach.clean((v or '').strip(), strip=True)
