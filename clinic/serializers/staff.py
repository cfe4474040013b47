from rest_framework import serializers

from clinic.models import Employee
from .common import CleanCharField


class DepartmentSerializer(serializers.Serializer):
    name = CleanCharField(required=True, max_length=100)
    code = CleanCharField(max_length=20)
    description = CleanCharField()
    headOfDepartmentId = serializers.IntegerField(required=False, allow_null=True, source='head_of_department_id')
    isActive = serializers.BooleanField(required=False, source='is_active')


class EmployeeSerializer(serializers.Serializer):
    firstName = CleanCharField(required=True, max_length=100, source='first_name')
    lastName = CleanCharField(required=True, max_length=100, source='last_name')
    gender = CleanCharField(max_length=20)
    dateOfBirth = serializers.DateField(required=False, allow_null=True, source='date_of_birth')
    phone = CleanCharField(max_length=50)
    email = CleanCharField(max_length=255)
    nationalId = CleanCharField(max_length=100, source='national_id')
    address = CleanCharField()
    facility = CleanCharField(max_length=255)
    departmentId = serializers.UUIDField(required=False, allow_null=True, source='department_id')
    jobTitle = CleanCharField(max_length=100, source='job_title')
    specialisation = CleanCharField(max_length=100)
    employmentType = serializers.ChoiceField(choices=Employee.EMPLOYMENT_CHOICES, required=False, allow_null=True,
                                             source='employment_type')
    dateJoined = serializers.DateField(required=False, allow_null=True, source='date_joined')
    licenseNumber = CleanCharField(max_length=100, source='license_number')
    emergencyContactName = CleanCharField(max_length=255, source='emergency_contact_name')
    emergencyContactPhone = CleanCharField(max_length=50, source='emergency_contact_phone')
    status = serializers.ChoiceField(choices=Employee.STATUS_CHOICES, required=False)


class DoctorCreateSerializer(serializers.Serializer):
    staffId = serializers.UUIDField()
