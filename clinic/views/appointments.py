"""
Appointment booking and lifecycle endpoints.

Receptionists book appointments, the cashier records the fee, and the
appointment is then allocated a doctor and slot, started and finished.
Status changes go through :func:`clinic.services.appointments.apply_action`
so that the precondition check, row lock and transition record happen
in one place.
"""
from __future__ import annotations

import logging
import uuid

from django.conf import settings
from django.db import DatabaseError
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status

from ..exceptions import BadRequest
from ..models import Appointment
from ..permissions import module_permission
from ..serializers.appointment import (
    AppointmentActionSerializer,
    AppointmentCreateSerializer,
    AppointmentListQuerySerializer,
)
from ..services.appointments import ALLOCATED_STATUSES, STATUSES, apply_action, default_fee, filter_seed
from ..services.audit import log_action
from ..services.seed import seed_appointments

logger = logging.getLogger(__name__)

AppointmentsPermission = module_permission('appointments')


def appointment_json(a: Appointment) -> dict:
    return {
        'id': str(a.id),
        'patientName': a.patient_name,
        'patientId': a.patient_id,
        'phone': a.phone,
        'reason': a.reason,
        'preferredDoctor': a.preferred_doctor,
        'status': a.status,
        'appointmentFee': float(a.appointment_fee),
        'paidAt': a.paid_at.isoformat() if a.paid_at else None,
        'allocatedDoctor': a.allocated_doctor,
        'allocatedDate': a.allocated_date.isoformat() if a.allocated_date else None,
        'allocatedTime': a.allocated_time,
        'bookedBy': a.booked_by,
        'createdAt': a.created_at.isoformat() if a.created_at else None,
    }


def _appointment_id(raw) -> uuid.UUID:
    try:
        return uuid.UUID(str(raw))
    except ValueError:
        raise BadRequest('Invalid appointment id') from None


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, AppointmentsPermission])
def appointments(request):
    """List appointments (``GET``) or book a new one (``POST``).

    ``GET`` accepts ``status``, ``allocated_date`` and
    ``allocated_doctor``.  An unknown status is ignored.  Filtering by
    ``allocated_date`` returns the day's schedule (scheduled, in progress
    and completed appointments) ordered by slot; otherwise the newest
    bookings come first.
    """
    if request.method == 'POST':
        return _create_appointment(request)

    q = AppointmentListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    status_filter = vd.get('status') if vd.get('status') in STATUSES else None
    allocated_date = vd.get('allocated_date')
    allocated_doctor = (vd.get('allocated_doctor') or '').strip() or None
    limit = settings.LIST_LIMITS['appointments']
    try:
        qs = Appointment.objects.all()
        if status_filter:
            qs = qs.filter(status=status_filter)
        if allocated_date:
            qs = qs.filter(allocated_date=allocated_date, status__in=ALLOCATED_STATUSES).order_by('allocated_time', '-created_at')
        else:
            qs = qs.order_by('-created_at')
        if allocated_doctor:
            qs = qs.filter(allocated_doctor=allocated_doctor)
        rows = [appointment_json(a) for a in qs[:limit]]
    except DatabaseError as exc:
        logger.warning('appointments list: database unavailable, serving seed data (%s)', exc)
        rows = filter_seed(
            seed_appointments(),
            status=status_filter,
            allocated_date=allocated_date.isoformat() if allocated_date else None,
            allocated_doctor=allocated_doctor,
            limit=limit,
        )
    return Response({'appointments': rows})


def _create_appointment(request):
    s = AppointmentCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    if vd.get('appointment_fee') is None:
        vd['appointment_fee'] = default_fee()
    if not vd.get('booked_by'):
        vd['booked_by'] = getattr(request.user, 'role', None) or 'receptionist'
    apt = Appointment.objects.create(status=Appointment.STATUS_PENDING_PAYMENT, **vd)
    log_action(user=request.user, action='appointment_create', object_type='appointment', object_id=apt.id,
               request=request, detail={'patientName': apt.patient_name})
    return Response(appointment_json(apt), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated, AppointmentsPermission])
def appointment_detail(request, appointment_id):
    """Fetch one appointment or advance it with ``{"action": ...}``.

    Actions: ``record_payment``, ``allocate`` (needs ``allocatedDate``
    and ``allocatedTime``; ``allocatedDoctor`` defaults to the
    preferred doctor), ``start`` and ``finish``.
    """
    pk = _appointment_id(appointment_id)
    if request.method == 'GET':
        apt = Appointment.objects.filter(id=pk).first()
        if not apt:
            raise NotFound('Appointment not found')
        return Response(appointment_json(apt))

    s = AppointmentActionSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    apt = apply_action(pk, s.validated_data['action'], request.data, operator=request.user)
    return Response(appointment_json(apt))


@api_view(['GET'])
@permission_classes([IsAuthenticated, AppointmentsPermission])
def appointment_transitions(request, appointment_id):
    pk = _appointment_id(appointment_id)
    apt = Appointment.objects.filter(id=pk).first()
    if not apt:
        raise NotFound('Appointment not found')
    data = [
        {
            'action': t.action,
            'from': t.from_status,
            'to': t.to_status,
            'operator': t.operator.display_name if t.operator else None,
            'timestamp': t.timestamp.isoformat(),
        }
        for t in apt.transitions.select_related('operator').order_by('timestamp', 'id')
    ]
    return Response({'transitions': data})
