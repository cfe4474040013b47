from rest_framework import serializers

from clinic.models import Facility, FacilityTeam
from .common import CleanCharField

NAME_CODE = {'required': 'Name and code are required', 'blank': 'Name and code are required'}


class FacilitySerializer(serializers.Serializer):
    name = CleanCharField(required=True, max_length=255, error_messages=NAME_CODE)
    code = CleanCharField(required=True, max_length=20, error_messages=NAME_CODE)
    facilityType = serializers.ChoiceField(choices=Facility.TYPE_CHOICES, required=False, allow_null=True,
                                           allow_blank=True, source='facility_type')
    address = CleanCharField()
    phone = CleanCharField(max_length=50)
    email = CleanCharField(max_length=255)
    district = CleanCharField(max_length=100)
    region = CleanCharField(max_length=100)
    description = CleanCharField()
    facilityAdminId = serializers.IntegerField(required=False, allow_null=True, source='facility_admin_id')
    isActive = serializers.BooleanField(required=False, source='is_active')

    def validate_facilityType(self, v):
        return v or None


class FacilityTeamCreateSerializer(serializers.Serializer):
    staffId = serializers.IntegerField(source='staff_id', error_messages={'required': 'staffId and facilityId are required'})
    facilityId = serializers.UUIDField(source='facility_id',
                                       error_messages={'required': 'staffId and facilityId are required'})
    status = serializers.ChoiceField(choices=FacilityTeam.STATUS_CHOICES, required=False, default='active')
    details = CleanCharField()


class FacilityTeamUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=FacilityTeam.STATUS_CHOICES, required=False)
    details = CleanCharField()
