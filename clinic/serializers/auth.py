from rest_framework import serializers

from clinic.roles import ROLE_CHOICES
from .common import CleanCharField


class LoginSerializer(serializers.Serializer):
    email = serializers.CharField(required=False, allow_blank=True, trim_whitespace=True)
    password = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)


class UserCreateSerializer(serializers.Serializer):
    email = serializers.EmailField()
    name = CleanCharField(required=True, max_length=255)
    password = serializers.CharField(min_length=8, write_only=True, trim_whitespace=False)
    role = serializers.ChoiceField(choices=ROLE_CHOICES)
    phone = CleanCharField(max_length=50)
    facilityId = serializers.UUIDField(required=False, allow_null=True, source='facility_id')
    employeeId = serializers.UUIDField(required=False, allow_null=True, source='employee_id')

    def validate_email(self, v):
        return v.strip().lower()
