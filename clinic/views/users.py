"""
Staff login accounts.
"""
from __future__ import annotations

from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..exceptions import BadRequest, Conflict
from ..models import Employee, Facility, User
from ..permissions import ADMIN_ROLES, module_permission
from ..roles import is_role, role_display_name
from ..serializers.auth import UserCreateSerializer
from ..services.audit import log_action

UsersPermission = module_permission('user_management')


def user_json(u: User) -> dict:
    return {
        'id': u.id,
        'name': u.display_name,
        'email': u.email,
        'phone': u.phone,
        'status': u.status,
        'role': {'id': u.role, 'name': role_display_name(u.role)},
        'facilityId': str(u.facility_id) if u.facility_id else None,
        'employeeId': str(u.employee_id) if u.employee_id else None,
    }


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, UsersPermission])
def users(request):
    """List accounts ordered by name (``?role=`` to filter) or create one."""
    if request.method == 'GET':
        qs = User.objects.filter(deleted_at__isnull=True)
        role = request.query_params.get('role')
        if role:
            if not is_role(role):
                raise BadRequest('Unknown role')
            qs = qs.filter(role=role)
        return Response([user_json(u) for u in qs.order_by('name', 'email')])

    s = UserCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    if vd['role'] in ADMIN_ROLES and getattr(request.user, 'role', None) != 'admin':
        raise PermissionDenied('Only a system admin can create admin accounts')
    if User.objects.filter(email__iexact=vd['email']).exists():
        raise Conflict('A user with this email already exists')
    if vd.get('facility_id') and not Facility.objects.filter(id=vd['facility_id'], deleted_at__isnull=True).exists():
        raise BadRequest('Facility not found')
    if vd.get('employee_id') and not Employee.objects.filter(id=vd['employee_id'], deleted_at__isnull=True).exists():
        raise BadRequest('Staff member not found')
    if vd.get('employee_id') and User.objects.filter(employee_id=vd['employee_id']).exists():
        raise Conflict('Staff member already has an account')
    password = vd.pop('password')
    user = User.objects.create_user(username=vd['email'], password=password, activated_at=timezone.now(), **vd)
    log_action(user=request.user, action='user_create', object_type='user', object_id=user.id, request=request,
               detail={'email': user.email, 'role': user.role})
    return Response(user_json(user), status=status.HTTP_201_CREATED)
