from rest_framework import serializers

from ..models import ActivityLog
from .admissions import CleanCharField


class HospitalListQuerySerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True, max_length=100)
    type = serializers.CharField(required=False, allow_blank=True, max_length=50)
    limit = serializers.IntegerField(required=False, min_value=1, default=50)


class HospitalCreateSerializer(serializers.Serializer):
    name = CleanCharField(max_length=200)
    address = CleanCharField(required=False, allow_blank=True, max_length=255)
    phoneNumber = CleanCharField(source='phone_number', required=False, allow_blank=True, max_length=20)
    email = serializers.EmailField(required=False, allow_blank=True)
    website = CleanCharField(required=False, allow_blank=True, max_length=200)
    type = CleanCharField(required=False, allow_blank=True, max_length=50)

    def validate_name(self, v):
        if not v:
            raise serializers.ValidationError('Hospital name is required')
        return v


class ActivityLogQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(required=False, min_value=1, default=1)
    pageSize = serializers.IntegerField(required=False, min_value=1, default=50)
    activityTypes = serializers.CharField(required=False, allow_blank=True)
    searchQuery = serializers.CharField(required=False, allow_blank=True, max_length=100)
    startDate = serializers.DateField(required=False, input_formats=['%Y-%m-%d'])
    endDate = serializers.DateField(required=False, input_formats=['%Y-%m-%d'])

    def validate_activityTypes(self, v):
        actions = [a.strip().upper() for a in v.split(',') if a.strip()]
        known = {c for c, _ in ActivityLog.ACTION_CHOICES}
        unknown = [a for a in actions if a not in known]
        if unknown:
            raise serializers.ValidationError(f"Unknown activity types: {', '.join(unknown)}")
        return actions
