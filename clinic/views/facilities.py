"""
Facility directory and facility team assignments.

Facilities and team assignments are soft deleted: ``deleted_at`` is
stamped and the row drops out of every listing.
"""
from __future__ import annotations

import logging
import uuid

from django.db import DatabaseError
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..exceptions import BadRequest, Conflict
from ..models import Facility, FacilityTeam, User
from ..permissions import module_permission
from ..serializers.facility import FacilitySerializer, FacilityTeamCreateSerializer, FacilityTeamUpdateSerializer
from ..services.audit import log_action
from ..services.seed import seed_facilities
from ..services.staff import soft_delete

logger = logging.getLogger(__name__)

FacilitiesPermission = module_permission('departments')
TeamPermission = module_permission('staff')


def facility_json(f: Facility) -> dict:
    return {
        'id': str(f.id),
        'code': f.code,
        'name': f.name,
        'facilityType': f.facility_type,
        'address': f.address,
        'phone': f.phone,
        'email': f.email,
        'district': f.district,
        'region': f.region,
        'description': f.description,
        'facilityAdminId': f.facility_admin_id,
        'isActive': f.is_active,
        'createdAt': f.created_at.isoformat() if f.created_at else None,
        'updatedAt': f.updated_at.isoformat() if f.updated_at else None,
    }


def team_json(t: FacilityTeam) -> dict:
    return {
        'id': str(t.id),
        'staffId': t.staff_id,
        'staffName': t.staff.display_name,
        'staffRole': t.staff.role,
        'facilityId': str(t.facility_id),
        'status': t.status,
        'details': t.details,
        'createdAt': t.created_at.isoformat() if t.created_at else None,
    }


def _live_facility(facility_id) -> Facility:
    f = Facility.objects.filter(id=facility_id, deleted_at__isnull=True).first()
    if not f:
        raise NotFound('Facility not found')
    return f


def _check_admin(vd):
    admin_id = vd.get('facility_admin_id')
    if admin_id and not User.objects.filter(id=admin_id, deleted_at__isnull=True).exists():
        raise BadRequest('Facility admin not found')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, FacilitiesPermission])
def facilities(request):
    if request.method == 'POST':
        s = FacilitySerializer(data=request.data)
        s.is_valid(raise_exception=True)
        vd = s.validated_data
        if Facility.objects.filter(code=vd['code']).exists():
            raise Conflict('Facility code already exists')
        _check_admin(vd)
        f = Facility.objects.create(**vd)
        log_action(user=request.user, action='facility_create', object_type='facility', object_id=f.id,
                   request=request, detail={'code': f.code})
        return Response(facility_json(f), status=status.HTTP_201_CREATED)

    try:
        rows = [facility_json(f) for f in Facility.objects.filter(deleted_at__isnull=True).order_by('-created_at')]
    except DatabaseError as exc:
        logger.warning('facilities list: database unavailable, serving seed data (%s)', exc)
        rows = seed_facilities()
    return Response({'facilities': rows})


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, FacilitiesPermission])
def facility_detail(request, facility_id):
    f = _live_facility(facility_id)
    if request.method == 'GET':
        return Response(facility_json(f))
    if request.method == 'DELETE':
        soft_delete(f)
        log_action(user=request.user, action='facility_delete', object_type='facility', object_id=f.id,
                   request=request)
        return Response({'message': 'Facility deleted successfully'})

    s = FacilitySerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    if vd['code'] != f.code and Facility.objects.filter(code=vd['code']).exclude(id=f.id).exists():
        raise Conflict('Facility code already exists')
    _check_admin(vd)
    # full replacement of the editable fields
    for attr in ('facility_type', 'address', 'phone', 'email', 'district', 'region', 'description',
                 'facility_admin_id'):
        vd.setdefault(attr, None)
    for attr, value in vd.items():
        setattr(f, attr, value)
    f.save()
    log_action(user=request.user, action='facility_update', object_type='facility', object_id=f.id,
               request=request)
    return Response(facility_json(f))


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, TeamPermission])
def facility_team(request):
    if request.method == 'POST':
        s = FacilityTeamCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        vd = s.validated_data
        if not User.objects.filter(id=vd['staff_id'], deleted_at__isnull=True).exists():
            raise BadRequest('Staff member not found')
        _live_facility(vd['facility_id'])
        if FacilityTeam.objects.filter(staff_id=vd['staff_id'], facility_id=vd['facility_id'],
                                       deleted_at__isnull=True).exists():
            raise Conflict('Staff member already assigned to this facility')
        member = FacilityTeam.objects.create(**vd)
        log_action(user=request.user, action='facility_team_add', object_type='facility_team', object_id=member.id,
                   request=request)
        return Response(team_json(member), status=status.HTTP_201_CREATED)

    qs = FacilityTeam.objects.select_related('staff').filter(deleted_at__isnull=True)
    facility_id = request.query_params.get('facilityId')
    if facility_id:
        try:
            qs = qs.filter(facility_id=uuid.UUID(facility_id))
        except ValueError:
            raise BadRequest('Invalid facilityId') from None
    return Response({'team': [team_json(t) for t in qs.order_by('-created_at')]})


@api_view(['PUT', 'DELETE'])
@permission_classes([IsAuthenticated, TeamPermission])
def facility_team_detail(request, member_id):
    member = FacilityTeam.objects.select_related('staff').filter(id=member_id, deleted_at__isnull=True).first()
    if not member:
        raise NotFound('Team member not found')
    if request.method == 'DELETE':
        soft_delete(member)
        log_action(user=request.user, action='facility_team_remove', object_type='facility_team',
                   object_id=member.id, request=request)
        return Response({'success': True})

    s = FacilityTeamUpdateSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    for attr, value in s.validated_data.items():
        setattr(member, attr, value)
    member.save()
    return Response(team_json(member))
