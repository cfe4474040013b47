from rest_framework import serializers

from .common import CleanCharField


class PatientSerializer(serializers.Serializer):
    """Patient registry input; pass ``partial=True`` for merges."""
    uhid = CleanCharField(max_length=50)
    name = CleanCharField(required=True, max_length=255,
                          error_messages={'required': 'Patient with name is required',
                                          'blank': 'Patient with name is required'})
    age = serializers.IntegerField(required=False, allow_null=True, min_value=0, max_value=150)
    dateOfBirth = serializers.DateField(required=False, allow_null=True, source='date_of_birth')
    gender = CleanCharField(max_length=20)
    phone = CleanCharField(max_length=50)
    email = CleanCharField(max_length=255)
    address = CleanCharField()
    countryCode = CleanCharField(max_length=10, source='country_code')
    district = CleanCharField(max_length=100)
    nextOfKin = CleanCharField(max_length=255, source='next_of_kin')
    nextOfKinPhone = CleanCharField(max_length=50, source='next_of_kin_phone')
    nextOfKinRelationship = CleanCharField(max_length=50, source='next_of_kin_relationship')
    insuranceType = CleanCharField(max_length=50, source='insurance_type')
    insurancePolicy = CleanCharField(max_length=255, source='insurance_policy')
    isActive = serializers.BooleanField(required=False, source='is_active')

    def validate(self, attrs):
        # insurance_type is NOT NULL
        if 'insurance_type' in attrs and not attrs['insurance_type']:
            attrs['insurance_type'] = 'self-pay'
        return attrs


class PatientListQuerySerializer(serializers.Serializer):
    q = serializers.CharField(required=False, allow_blank=True)
    includeInactive = serializers.BooleanField(required=False, default=False)
