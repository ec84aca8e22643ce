import bleach
from rest_framework import serializers


class StartShiftSerializer(serializers.Serializer):
    openingCash = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    notes = serializers.CharField(required=False, allow_blank=True, default='', max_length=1000)

    def validate_notes(self, v):
        return bleach.clean((v or '').strip(), strip=True)


class EndShiftSerializer(serializers.Serializer):
    closingCash = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    notes = serializers.CharField(required=False, allow_blank=True, default='', max_length=1000)

    def validate_notes(self, v):
        return bleach.clean((v or '').strip(), strip=True)
