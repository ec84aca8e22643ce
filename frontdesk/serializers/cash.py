"""
Query-string serializers for the cash reporting endpoints.
"""
from rest_framework import serializers

from ..services.periods import PRESETS


class SessionCashQuerySerializer(serializers.Serializer):
    datePreset = serializers.CharField(required=False, default='today')
    departmentId = serializers.CharField(required=False, allow_blank=True, default='all')
    startDate = serializers.DateField(required=False, allow_null=True, input_formats=['%Y-%m-%d'])
    endDate = serializers.DateField(required=False, allow_null=True, input_formats=['%Y-%m-%d'])

    def validate_datePreset(self, v):
        # unknown presets fall back to today
        return v if v in PRESETS else 'today'

    def validate_departmentId(self, v):
        v = (v or '').strip()
        if v in ('', 'all'):
            return 'all'
        if not v.isdigit():
            raise serializers.ValidationError('Must be a department id or "all"')
        return v

    def validate(self, attrs):
        start, end = attrs.get('startDate'), attrs.get('endDate')
        if attrs.get('datePreset') == 'custom' and start and end and end < start:
            raise serializers.ValidationError({'endDate': 'Must not be before startDate'})
        return attrs


class AdminShiftsQuerySerializer(serializers.Serializer):
    datePreset = serializers.CharField(required=False, default='today')
    startDate = serializers.DateField(required=False, allow_null=True, input_formats=['%Y-%m-%d'])
    endDate = serializers.DateField(required=False, allow_null=True, input_formats=['%Y-%m-%d'])
    status = serializers.ChoiceField(choices=['all', 'active', 'closed'], required=False, default='all')
    search = serializers.CharField(required=False, allow_blank=True, default='', max_length=100)
