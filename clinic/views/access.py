"""
Role catalogue, the caller's permission matrix and the patient data
access policy.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..module_permissions import MODULES, permissions_for_role, reports_for_role
from ..permissions import IsAdmin, IsStaffRole
from ..roles import ROLES, role_display_name
from ..services.access import PATIENT_DATA_CATEGORIES, get_access_config, set_access_config
from ..services.audit import log_action


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def roles(request):
    return Response({'roles': [{'id': r, 'name': role_display_name(r)} for r in ROLES]})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffRole])
def my_permissions(request):
    """The caller's row of the module matrix plus the reports it may view."""
    role = request.user.role
    matrix = permissions_for_role(role)
    return Response({
        'role': role,
        'permissions': matrix,
        'modules': [m for m in MODULES if matrix[m]['read']],
        'reports': reports_for_role(role),
    })


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated, IsStaffRole])
def patient_data_access(request):
    """Patient data access policy.

    ``GET`` returns, for every category, the roles that may ``view`` and
    ``edit`` it.  ``PUT`` (system admin only) replaces the lists for the
    categories present in the body; other categories keep their current
    value.
    """
    if request.method == 'PUT':
        if not IsAdmin().has_permission(request, None):
            raise PermissionDenied('Only the system admin can change patient data access')
        config = set_access_config(request.data, user=request.user)
        log_action(user=request.user, action='patient_data_access_update', object_type='settings',
                   object_id='patient_data_access', request=request, detail={'categories': list(request.data)})
        return Response({'categories': list(PATIENT_DATA_CATEGORIES), 'access': config})
    return Response({'categories': list(PATIENT_DATA_CATEGORIES), 'access': get_access_config()})
