from rest_framework import serializers

from clinic.models import PatientClerking
from .common import CleanCharField


class ClerkingSerializer(serializers.Serializer):
    """Input for both creating and fully replacing a clerking record."""
    patientName = CleanCharField(required=True, max_length=255, source='patient_name',
                                 error_messages={'required': 'Patient name is required',
                                                 'blank': 'Patient name is required'})
    patientId = CleanCharField(max_length=100, source='patient_id')
    arrivalSource = serializers.ChoiceField(choices=PatientClerking.ARRIVAL_SOURCES, source='arrival_source',
                                            error_messages={'invalid_choice': 'Invalid arrival source',
                                                            'required': 'Invalid arrival source'})
    dateOfArrival = serializers.DateField(source='date_of_arrival',
                                          error_messages={'required': 'Date and time of arrival are required'})
    timeOfArrival = serializers.RegexField(r'^\d{1,2}:\d{2}(:\d{2})?$', max_length=10, source='time_of_arrival',
                                           error_messages={'required': 'Date and time of arrival are required',
                                                           'blank': 'Date and time of arrival are required'})
    status = serializers.ChoiceField(choices=PatientClerking.STATUSES,
                                     error_messages={'invalid_choice': 'Invalid status', 'required': 'Invalid status'})
    phone = CleanCharField(max_length=50)
    gender = CleanCharField(max_length=20)
    dateOfBirth = serializers.DateField(required=False, allow_null=True, source='date_of_birth')
    recordedBy = CleanCharField(max_length=50, source='recorded_by')
