from decimal import Decimal

from rest_framework import serializers

from .admissions import AdmissionHospitalSerializer, AdmissionPatientSerializer, CleanCharField

MONEY = dict(max_digits=12, decimal_places=2, min_value=Decimal('0'))


class PathologyCreateSerializer(serializers.Serializer):
    patient = AdmissionPatientSerializer()
    hospital = AdmissionHospitalSerializer(required=False, allow_null=True)
    orderedById = serializers.IntegerField(source='ordered_by_id', required=False, allow_null=True, min_value=1)
    testCategory = CleanCharField(source='test_category', required=False, allow_blank=True, max_length=100)
    testNames = serializers.ListField(
        source='test_names', child=CleanCharField(max_length=100), required=False, allow_empty=True,
    )
    isCompleted = serializers.BooleanField(source='is_completed', required=False, default=False)
    totalAmount = serializers.DecimalField(source='total_amount', **MONEY)
    discountAmount = serializers.DecimalField(source='discount_amount', required=False, default=Decimal('0'), **MONEY)
    paidAmount = serializers.DecimalField(source='paid_amount', required=False, default=Decimal('0'), **MONEY)
    remarks = CleanCharField(required=False, allow_blank=True)


class PathologyListQuerySerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True, max_length=100)
    startDate = serializers.DateField(required=False, input_formats=['%Y-%m-%d'])
    endDate = serializers.DateField(required=False, input_formats=['%Y-%m-%d'])
    isCompleted = serializers.BooleanField(required=False, allow_null=True, default=None)
    testCategory = serializers.CharField(required=False, allow_blank=True, max_length=100)
    page = serializers.IntegerField(required=False, min_value=1, default=1)
    limit = serializers.IntegerField(required=False, min_value=1, default=15)


class PathologyUpdateSerializer(serializers.Serializer):
    isCompleted = serializers.BooleanField(source='is_completed', required=False)
    remarks = CleanCharField(required=False, allow_blank=True)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError('Nothing to update')
        return attrs
