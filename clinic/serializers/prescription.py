from rest_framework import serializers

from .common import CleanCharField

REQUIRED = {'required': 'patientName and medication are required',
            'blank': 'patientName and medication are required'}


class PrescriptionCreateSerializer(serializers.Serializer):
    patientName = CleanCharField(required=True, max_length=255, source='patient_name', error_messages=REQUIRED)
    patientId = CleanCharField(max_length=100, source='patient_id')
    appointmentId = serializers.UUIDField(required=False, allow_null=True, source='appointment_id')
    medication = CleanCharField(required=True, max_length=255, error_messages=REQUIRED)
    dosage = CleanCharField(max_length=255)
    instructions = CleanCharField()
    prescribedBy = CleanCharField(max_length=255, source='prescribed_by')


class DispenseSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=['dispense'], error_messages={'invalid_choice': 'Unknown action',
                                                                          'required': 'Unknown action'})
    stockId = serializers.UUIDField(required=False, allow_null=True)
    quantity = serializers.IntegerField(required=False, min_value=1, default=1)
