from rest_framework import serializers

from .common import CleanCharField

NAME_REQUIRED = {'required': 'Patient name is required', 'blank': 'Patient name is required'}


class AppointmentCreateSerializer(serializers.Serializer):
    patientName = CleanCharField(required=True, max_length=255, source='patient_name', error_messages=NAME_REQUIRED)
    patientId = CleanCharField(max_length=100, source='patient_id')
    phone = CleanCharField(max_length=50)
    reason = CleanCharField(max_length=500)
    preferredDoctor = CleanCharField(max_length=255, source='preferred_doctor')
    appointmentFee = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False,
                                              source='appointment_fee')
    bookedBy = CleanCharField(max_length=100, source='booked_by')


class AppointmentListQuerySerializer(serializers.Serializer):
    status = serializers.CharField(required=False, allow_blank=True)
    allocated_date = serializers.DateField(required=False)
    allocated_doctor = serializers.CharField(required=False, allow_blank=True)


class AppointmentActionSerializer(serializers.Serializer):
    action = serializers.CharField(required=False, allow_blank=True, default='')
