"""
Employee (HR record) endpoints.

Employee codes are issued as ``EMP-<nnnnn>``.  Deleting an employee
stamps ``deleted_at`` and marks the record terminated.
"""
from __future__ import annotations

import uuid

from django.db.models import Q
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..exceptions import BadRequest
from ..models import Department, Employee
from ..permissions import module_permission
from ..serializers.staff import EmployeeSerializer
from ..services.audit import log_action
from ..services.staff import create_employee, soft_delete

StaffPermission = module_permission('staff')


def employee_json(e: Employee) -> dict:
    return {
        'id': str(e.id),
        'employeeCode': e.employee_code,
        'firstName': e.first_name,
        'lastName': e.last_name,
        'fullName': e.full_name,
        'gender': e.gender,
        'dateOfBirth': e.date_of_birth.isoformat() if e.date_of_birth else None,
        'phone': e.phone,
        'email': e.email,
        'nationalId': e.national_id,
        'address': e.address,
        'facility': e.facility,
        'departmentId': str(e.department_id) if e.department_id else None,
        'department': e.department.name if e.department_id else None,
        'jobTitle': e.job_title,
        'specialisation': e.specialisation,
        'employmentType': e.employment_type,
        'dateJoined': e.date_joined.isoformat() if e.date_joined else None,
        'licenseNumber': e.license_number,
        'emergencyContactName': e.emergency_contact_name,
        'emergencyContactPhone': e.emergency_contact_phone,
        'status': e.status,
        'isDoctor': hasattr(e, 'doctor_record'),
    }


def _check_department(vd):
    dept_id = vd.get('department_id')
    if dept_id and not Department.objects.filter(id=dept_id).exists():
        raise BadRequest('Department not found')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, StaffPermission])
def employees(request):
    """List employees (``?q=``, ``?departmentId=``, ``?status=``) or add one."""
    if request.method == 'POST':
        s = EmployeeSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        _check_department(s.validated_data)
        e = create_employee(**s.validated_data)
        log_action(user=request.user, action='employee_create', object_type='employee', object_id=e.id,
                   request=request, detail={'code': e.employee_code})
        return Response(employee_json(e), status=status.HTTP_201_CREATED)

    qs = Employee.objects.select_related('department', 'doctor_record').filter(deleted_at__isnull=True)
    term = (request.query_params.get('q') or '').strip()
    if term:
        qs = qs.filter(Q(first_name__icontains=term) | Q(last_name__icontains=term) | Q(employee_code__icontains=term))
    if request.query_params.get('status'):
        qs = qs.filter(status=request.query_params['status'])
    if request.query_params.get('departmentId'):
        try:
            qs = qs.filter(department_id=uuid.UUID(request.query_params['departmentId']))
        except ValueError:
            raise BadRequest('Invalid departmentId') from None
    return Response({'staff': [employee_json(e) for e in qs.order_by('employee_code')]})


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, StaffPermission])
def employee_detail(request, employee_id):
    e = Employee.objects.select_related('department').filter(id=employee_id, deleted_at__isnull=True).first()
    if not e:
        raise NotFound('Staff member not found')
    if request.method == 'GET':
        return Response(employee_json(e))
    if request.method == 'DELETE':
        soft_delete(e, status_field='status', status_value='terminated')
        log_action(user=request.user, action='employee_delete', object_type='employee', object_id=e.id,
                   request=request)
        return Response({'success': True})

    s = EmployeeSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    _check_department(s.validated_data)
    for attr, value in s.validated_data.items():
        setattr(e, attr, value)
    e.save()
    log_action(user=request.user, action='employee_update', object_type='employee', object_id=e.id,
               request=request)
    return Response(employee_json(e))
