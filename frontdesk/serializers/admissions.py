from decimal import Decimal

import bleach
from rest_framework import serializers

from ..models import Admission


def _clean(v):
    return bleach.clean((v or '').strip(), strip=True)


class CleanCharField(serializers.CharField):
    """CharField whose value is stripped of markup."""

    def to_internal_value(self, data):
        return _clean(super().to_internal_value(data))


class AdmissionPatientSerializer(serializers.Serializer):
    id = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    firstName = CleanCharField(source='first_name', max_length=100)
    lastName = CleanCharField(source='last_name', required=False, allow_blank=True, max_length=100)
    fullName = CleanCharField(source='full_name', required=False, allow_blank=True, max_length=200)
    gender = serializers.ChoiceField(choices=['Male', 'Female', 'Other'])
    dateOfBirth = serializers.DateField(source='date_of_birth', required=False, allow_null=True)
    address = CleanCharField(required=False, allow_blank=True, max_length=255)
    phoneNumber = CleanCharField(source='phone_number', required=False, allow_blank=True, max_length=20)
    email = serializers.EmailField(required=False, allow_blank=True)
    bloodGroup = CleanCharField(source='blood_group', required=False, allow_blank=True, max_length=5)
    guardianName = CleanCharField(source='guardian_name', required=False, allow_blank=True, max_length=200)
    guardianPhone = CleanCharField(source='guardian_phone', required=False, allow_blank=True, max_length=20)

    def validate_firstName(self, v):
        if len(v) < 2:
            raise serializers.ValidationError('First name must be at least 2 characters')
        return v


class AdmissionHospitalSerializer(serializers.Serializer):
    id = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    name = CleanCharField(required=False, allow_blank=True, max_length=200)
    address = CleanCharField(required=False, allow_blank=True, max_length=255)
    phoneNumber = CleanCharField(source='phone_number', required=False, allow_blank=True, max_length=20)
    email = serializers.EmailField(required=False, allow_blank=True)
    website = CleanCharField(required=False, allow_blank=True, max_length=200)
    type = CleanCharField(required=False, allow_blank=True, max_length=50)


class AdmissionCreateSerializer(serializers.Serializer):
    patient = AdmissionPatientSerializer()
    hospital = AdmissionHospitalSerializer(required=False, allow_null=True)
    departmentId = serializers.IntegerField(min_value=1)
    doctorId = serializers.IntegerField(min_value=1)
    seatNumber = CleanCharField(source='seat_number', required=False, allow_blank=True, max_length=20)
    ward = CleanCharField(required=False, allow_blank=True, max_length=50)
    diagnosis = CleanCharField(required=False, allow_blank=True)
    chiefComplaint = CleanCharField(source='chief_complaint', required=False, allow_blank=True)
    remarks = CleanCharField(required=False, allow_blank=True)


class AdmissionListQuerySerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True, max_length=100)
    startDate = serializers.DateField(required=False, input_formats=['%Y-%m-%d'])
    endDate = serializers.DateField(required=False, input_formats=['%Y-%m-%d'])
    status = serializers.ChoiceField(
        choices=['All'] + [c for c, _ in Admission.STATUS_CHOICES], required=False, default='All'
    )
    departmentId = serializers.IntegerField(required=False, min_value=1)
    page = serializers.IntegerField(required=False, min_value=1, default=1)
    limit = serializers.IntegerField(required=False, min_value=1, default=15)


class AdmissionUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[c for c, _ in Admission.STATUS_CHOICES], required=False)
    isDischarged = serializers.BooleanField(source='is_discharged', required=False)
    dateDischarged = serializers.DateTimeField(source='date_discharged', required=False, allow_null=True)
    seatNumber = CleanCharField(source='seat_number', required=False, allow_blank=True, max_length=20)
    ward = CleanCharField(required=False, allow_blank=True, max_length=50)
    diagnosis = CleanCharField(required=False, allow_blank=True)
    chiefComplaint = CleanCharField(source='chief_complaint', required=False, allow_blank=True)
    remarks = CleanCharField(required=False, allow_blank=True)
    discountAmount = serializers.DecimalField(source='discount_amount', max_digits=12, decimal_places=2,
                                              required=False, min_value=Decimal('0'))
    paidAmount = serializers.DecimalField(source='paid_amount', max_digits=12, decimal_places=2,
                                          required=False, min_value=Decimal('0'))

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError('Nothing to update')
        return attrs
