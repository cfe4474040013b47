"""
Patient clerking (front-desk arrival) endpoints.
"""
from __future__ import annotations

import logging

from django.conf import settings
from django.db import DatabaseError
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..models import PatientClerking
from ..permissions import module_permission
from ..serializers.clerking import ClerkingSerializer
from ..services.audit import log_action
from ..services.seed import seed_clerking_records

logger = logging.getLogger(__name__)

ClerkingPermission = module_permission('patient_clerking')


def clerking_json(r: PatientClerking) -> dict:
    return {
        'id': str(r.id),
        'patientName': r.patient_name,
        'patientId': r.patient_id,
        'arrivalSource': r.arrival_source,
        'dateOfArrival': r.date_of_arrival.isoformat() if r.date_of_arrival else None,
        'timeOfArrival': r.time_of_arrival,
        'status': r.status,
        'phone': r.phone,
        'gender': r.gender,
        'dateOfBirth': r.date_of_birth.isoformat() if r.date_of_birth else None,
        'recordedBy': r.recorded_by,
        'createdAt': r.created_at.isoformat() if r.created_at else None,
    }


def seed_clerking_json(r: dict) -> dict:
    # fixture rows only carry the arrival details
    return {
        'id': r.get('id'),
        'patientName': r.get('patientName'),
        'patientId': r.get('patientId'),
        'arrivalSource': r.get('arrivalSource'),
        'dateOfArrival': r.get('dateOfArrival'),
        'timeOfArrival': r.get('timeOfArrival'),
        'status': r.get('status'),
        'phone': None,
        'gender': None,
        'dateOfBirth': None,
        'recordedBy': 'seed',
        'createdAt': r.get('recordedAt'),
    }


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, ClerkingPermission])
def clerking(request):
    if request.method == 'POST':
        s = ClerkingSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        vd = s.validated_data
        if not vd.get('recorded_by'):
            vd['recorded_by'] = getattr(request.user, 'role', None) or 'receptionist'
        record = PatientClerking.objects.create(**vd)
        log_action(user=request.user, action='clerking_create', object_type='clerking', object_id=record.id,
                   request=request)
        return Response(clerking_json(record), status=status.HTTP_201_CREATED)

    limit = settings.LIST_LIMITS['clerking']
    try:
        records = [clerking_json(r) for r in PatientClerking.objects.order_by('-created_at')[:limit]]
    except DatabaseError as exc:
        logger.warning('clerking list: database unavailable, serving seed data (%s)', exc)
        records = [seed_clerking_json(r) for r in seed_clerking_records()[:limit]]
    return Response({'records': records})


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, ClerkingPermission])
def clerking_detail(request, record_id):
    """Read, fully replace or delete one clerking record.

    ``PUT`` applies the same validation as creation; ``recordedBy`` and
    ``createdAt`` are kept from the original record.
    """
    record = PatientClerking.objects.filter(id=record_id).first()
    if not record:
        raise NotFound('Record not found')
    if request.method == 'GET':
        return Response(clerking_json(record))
    if request.method == 'DELETE':
        record.delete()
        log_action(user=request.user, action='clerking_delete', object_type='clerking', object_id=record_id,
                   request=request)
        return Response({'success': True})

    s = ClerkingSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    vd.pop('recorded_by', None)
    # full replacement: optional fields missing from the body are cleared
    for attr in ('patient_id', 'phone', 'gender', 'date_of_birth'):
        vd.setdefault(attr, None)
    for attr, value in vd.items():
        setattr(record, attr, value)
    record.save()
    log_action(user=request.user, action='clerking_update', object_type='clerking', object_id=record.id,
               request=request)
    return Response(clerking_json(record))
