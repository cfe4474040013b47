"""
Department management views.

Departments group employees (OPD, LAB, PHAR, ...).  Names are unique;
deleting a department only deactivates it so employee records keep
their link.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status

from ..exceptions import BadRequest, Conflict
from ..models import Department, User
from ..permissions import module_permission
from ..serializers.staff import DepartmentSerializer
from ..services.audit import log_action

DepartmentsPermission = module_permission('departments')


def department_json(d: Department) -> dict:
    return {
        'id': str(d.id),
        'name': d.name,
        'code': d.code,
        'description': d.description,
        'headOfDepartmentId': d.head_of_department_id,
        'headOfDepartment': d.head_of_department.display_name if d.head_of_department_id else None,
        'isActive': d.is_active,
        'employeeCount': d.employees.filter(deleted_at__isnull=True).count(),
    }


def _validate(vd, instance=None):
    if 'name' in vd:
        qs = Department.objects.filter(name__iexact=vd['name'])
        if instance is not None:
            qs = qs.exclude(id=instance.id)
        if qs.exists():
            raise Conflict('Department name already exists')
    head = vd.get('head_of_department_id')
    if head and not User.objects.filter(id=head, deleted_at__isnull=True).exists():
        raise BadRequest('Head of department not found')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, DepartmentsPermission])
def departments(request):
    """List departments (``?includeInactive=1`` for all) or create one."""
    if request.method == 'GET':
        qs = Department.objects.select_related('head_of_department').order_by('name')
        if request.query_params.get('includeInactive') not in ('1', 'true'):
            qs = qs.filter(is_active=True)
        return Response({'departments': [department_json(d) for d in qs]})

    s = DepartmentSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    _validate(s.validated_data)
    d = Department.objects.create(**s.validated_data)
    log_action(user=request.user, action='department_create', object_type='department', object_id=d.id,
               request=request, detail={'name': d.name})
    return Response(department_json(d), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, DepartmentsPermission])
def department_detail(request, department_id):
    d = Department.objects.select_related('head_of_department').filter(id=department_id).first()
    if not d:
        raise NotFound('Department not found')
    if request.method == 'GET':
        return Response(department_json(d))
    if request.method == 'DELETE':
        d.is_active = False
        d.save(update_fields=['is_active', 'updated_at'])
        log_action(user=request.user, action='department_deactivate', object_type='department', object_id=d.id,
                   request=request)
        return Response({'success': True})

    s = DepartmentSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    _validate(s.validated_data, instance=d)
    for attr, value in s.validated_data.items():
        setattr(d, attr, value)
    d.save()
    log_action(user=request.user, action='department_update', object_type='department', object_id=d.id,
               request=request)
    return Response(department_json(d))
